import random
import unittest
from decimal import Decimal

from tempo_splits.core.errors import (
    InvalidAddress,
    InvalidShareCount,
    InvalidShareValue,
    SharesNotFullyAllocated,
)
from tempo_splits.utils.share_utils import (
    BPS_TOTAL,
    bps_to_percentage,
    compute_payouts,
    is_valid_address,
    percentage_to_bps,
    validate_configuration,
    validate_shares,
)


def random_shares(rng: random.Random, n: int) -> list[int]:
    """n positive shares summing to 10000."""
    cuts = sorted(rng.sample(range(1, BPS_TOTAL), n - 1))
    bounds = [0] + cuts + [BPS_TOTAL]
    return [b - a for a, b in zip(bounds, bounds[1:])]


class TestValidateShares(unittest.TestCase):
    def test_accepts_full_allocation(self):
        validate_shares([7000, 3000])
        validate_shares([10000])
        validate_shares([3333, 3333, 3334])

    def test_empty_list(self):
        with self.assertRaises(InvalidShareCount):
            validate_shares([])

    def test_zero_or_negative_share(self):
        with self.assertRaises(InvalidShareValue):
            validate_shares([0, 10000])
        with self.assertRaises(InvalidShareValue):
            validate_shares([-1, 10001])

    def test_share_above_total(self):
        with self.assertRaises(InvalidShareValue):
            validate_shares([10001])

    def test_non_integer_share(self):
        with self.assertRaises(InvalidShareValue):
            validate_shares([5000.5, 4999.5])
        with self.assertRaises(InvalidShareValue):
            validate_shares([True, 9999])

    def test_sum_off_by_one(self):
        """Only exactly 10000 is accepted; 9999 and 10001 are not."""
        with self.assertRaises(SharesNotFullyAllocated):
            validate_shares([5000, 4999])
        with self.assertRaises(SharesNotFullyAllocated):
            validate_shares([5000, 5001])

    def test_errors_share_a_base(self):
        with self.assertRaises(ValueError):
            validate_shares([])


class TestValidateConfiguration(unittest.TestCase):
    A = "0x" + "ab" * 20
    B = "0x" + "CD" * 20

    def test_valid(self):
        validate_configuration([self.A, self.B], [5000, 5000])

    def test_length_mismatch(self):
        with self.assertRaises(InvalidShareCount):
            validate_configuration([self.A, self.B], [10000])

    def test_bad_address(self):
        with self.assertRaises(InvalidAddress):
            validate_configuration([self.A, "0x1234"], [5000, 5000])

    def test_address_syntax(self):
        self.assertTrue(is_valid_address(self.A))
        self.assertTrue(is_valid_address(self.B))
        self.assertFalse(is_valid_address("ab" * 20))
        self.assertFalse(is_valid_address("0x" + "zz" * 20))
        self.assertFalse(is_valid_address(""))


class TestPercentageConversion(unittest.TestCase):
    def test_round_trip_two_decimals(self):
        self.assertEqual(percentage_to_bps(70), 7000)
        self.assertEqual(percentage_to_bps(33.33), 3333)
        self.assertEqual(percentage_to_bps("0.01"), 1)
        self.assertEqual(percentage_to_bps(Decimal("16.67")), 1667)

    def test_rounds_half_up(self):
        self.assertEqual(percentage_to_bps("0.005"), 1)
        self.assertEqual(percentage_to_bps("12.345"), 1235)

    def test_form_input_uses_same_rule(self):
        """A form that sums to 99.99% is rejected by the same check the engine runs."""
        shares = [percentage_to_bps(p) for p in (50, 49.99)]
        with self.assertRaises(SharesNotFullyAllocated):
            validate_shares(shares)

    def test_bps_to_percentage(self):
        self.assertEqual(bps_to_percentage(3333), Decimal("33.33"))


class TestComputePayouts(unittest.TestCase):
    def test_seventy_thirty(self):
        self.assertEqual(compute_payouts(100, [7000, 3000]), [70, 30])

    def test_last_absorbs_remainder(self):
        self.assertEqual(compute_payouts(100, [3333, 3333, 3334]), [33, 33, 34])

    def test_first_may_receive_zero(self):
        self.assertEqual(compute_payouts(1, [1, 9999]), [0, 1])

    def test_single_recipient_gets_everything(self):
        self.assertEqual(compute_payouts(12345, [10000]), [12345])

    def test_order_decides_remainder(self):
        self.assertEqual(compute_payouts(101, [7000, 3000]), [70, 31])
        self.assertEqual(compute_payouts(101, [3000, 7000]), [30, 71])

    def test_large_amounts_stay_exact(self):
        total = 2**255 + 12345
        payouts = compute_payouts(total, [1, 2, 9997])
        self.assertEqual(sum(payouts), total)
        self.assertEqual(payouts[0], total * 1 // BPS_TOTAL)

    def test_sum_is_exact_for_random_configurations(self):
        rng = random.Random(20261018)
        for n in (1, 2, 3, 7, 20, 50):
            for _ in range(40):
                shares = random_shares(rng, n)
                total = rng.choice([1, 2, n, 99, 10**6 + 1, rng.randrange(1, 10**24)])
                payouts = compute_payouts(total, shares)
                self.assertEqual(len(payouts), n)
                self.assertEqual(sum(payouts), total)
                self.assertTrue(all(p >= 0 for p in payouts))
                # rounding error never exceeds n - 1 units
                last_exact = total * shares[-1] // BPS_TOTAL
                self.assertLessEqual(payouts[-1] - last_exact, n - 1)


if __name__ == "__main__":
    unittest.main()
