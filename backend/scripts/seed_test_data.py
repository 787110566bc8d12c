"""Create a demo split with a few recorded payments.

Usage: python -m scripts.seed_test_data
Run from the backend/ directory.
"""

import asyncio
import secrets

from tempo_splits.core.database import async_session_factory
from tempo_splits.services.payment_service import record_payment
from tempo_splits.services.split_service import create_split, get_split

OWNER = "0x" + "a1" * 20
TOKEN = "0x" + "20" * 20  # test USDC, 6 decimals
CONTRACT = "0x" + "5b" * 20

RECIPIENTS = [
    {"address": "0x" + "b2" * 20, "percentage": 50, "name": "Artist"},
    {"address": "0x" + "c3" * 20, "percentage": 33.33, "name": "Producer"},
    {"address": "0x" + "d4" * 20, "percentage": 16.67, "name": "Label"},
]

PAYMENTS = [25_000_000, 10_000_000, 1_234_567]


async def main():
    async with async_session_factory() as db:
        split = await get_split(db, CONTRACT)
        if split:
            print(f"  Split already exists: {split.contract_address}")
        else:
            split = await create_split(
                db, OWNER, CONTRACT, RECIPIENTS, TOKEN,
                name="Demo Split", token_symbol="tUSDC", token_decimals=6,
            )
            print(f"  Created split: {split.contract_address}")

        for amount in PAYMENTS:
            tx_hash = "0x" + secrets.token_hex(32)
            await record_payment(db, CONTRACT, OWNER, amount, TOKEN, tx_hash=tx_hash)
            print(f"  Recorded payment of {amount} ({tx_hash[:12]}...)")

        split = await get_split(db, CONTRACT)
        print(f"\nPending balance: {split.pending_balance}")


if __name__ == "__main__":
    asyncio.run(main())
