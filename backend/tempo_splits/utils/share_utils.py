import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

from tempo_splits.core.errors import (
    InvalidAddress,
    InvalidShareCount,
    InvalidShareValue,
    SharesNotFullyAllocated,
)

BPS_TOTAL = 10000
MAX_RECIPIENTS = 50

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_valid_address(address: str) -> bool:
    return bool(address) and bool(_ADDRESS_RE.match(address))


def percentage_to_bps(percentage) -> int:
    """
    Convert a form percentage (e.g. 33.33) to basis points (3333).

    Rounds half up, the way the dApp's configuration form does, so 0.005%
    becomes 1 bp rather than banker's-rounding down to 0.
    """
    value = Decimal(str(percentage)) * 100
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def bps_to_percentage(bps: int) -> Decimal:
    return (Decimal(bps) / Decimal(100)).quantize(Decimal("0.01"))


def validate_shares(shares: Sequence[int]) -> None:
    """
    Accept a share list only if it allocates exactly 100%.

    The same check guards configuration forms, API requests and the engine,
    so a configuration accepted off-chain is never rejected on-chain.

    Raises:
        InvalidShareCount: the list is empty.
        InvalidShareValue: an entry is not a whole number in [1, 10000].
        SharesNotFullyAllocated: the entries do not sum to 10000.
    """
    if len(shares) == 0:
        raise InvalidShareCount("At least one share is required")

    for i, share in enumerate(shares):
        if isinstance(share, bool) or not isinstance(share, int):
            raise InvalidShareValue(f"Share at position {i} must be an integer, got {share!r}")
        if share <= 0 or share > BPS_TOTAL:
            raise InvalidShareValue(f"Share at position {i} must be 1-{BPS_TOTAL} bps, got {share}")

    total = sum(shares)
    if total != BPS_TOTAL:
        raise SharesNotFullyAllocated(f"Shares must sum to {BPS_TOTAL} bps, got {total}")


def validate_configuration(recipients: Sequence[str], shares: Sequence[int]) -> None:
    """Validate a full recipient/share list before it is stored."""
    if len(recipients) != len(shares):
        raise InvalidShareCount(
            f"Got {len(recipients)} recipients but {len(shares)} shares"
        )
    if len(recipients) > MAX_RECIPIENTS:
        raise InvalidShareCount(f"At most {MAX_RECIPIENTS} recipients are allowed")
    for address in recipients:
        if not is_valid_address(address):
            raise InvalidAddress(f"Invalid recipient address: {address}")
    validate_shares(shares)


def compute_payouts(total_amount: int, shares: Sequence[int]) -> list[int]:
    """
    Split total_amount by basis-point shares, in list order.

    Every recipient but the last gets floor(total * bps / 10000); the last gets
    whatever is left, so the payouts always sum to total_amount exactly. The
    truncation error (at most len(shares) - 1 units) therefore lands on the
    last recipient, and reordering the list changes who absorbs it.

    Args:
        total_amount: Amount in the token's smallest unit.
        shares: Basis points per recipient, already validated.

    Returns:
        One payout per share, in the same order.
    """
    payouts = []
    remaining = total_amount
    last = len(shares) - 1
    for i, bps in enumerate(shares):
        if i == last:
            payouts.append(remaining)
        else:
            amount = total_amount * bps // BPS_TOTAL
            payouts.append(amount)
            remaining -= amount
    return payouts
