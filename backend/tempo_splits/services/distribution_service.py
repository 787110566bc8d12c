import asyncio
import logging
import weakref
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tempo_splits.core.errors import InsufficientBalance, SplitError, SplitNotFound, Unauthorized
from tempo_splits.models.distribution import Distribution, DistributionPayout, DistributionTrigger
from tempo_splits.models.split import Split
from tempo_splits.services.split_service import get_split, splitter_from_model
from tempo_splits.services.webhook_service import send_event

logger = logging.getLogger(__name__)

# One in-flight distribution per split within this process. Across processes
# the row lock taken by get_split(for_update=True) serializes them. Entries
# drop out once no coroutine holds or waits on the lock.
_split_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()


def split_lock(contract_address: str) -> asyncio.Lock:
    key = contract_address.lower()
    lock = _split_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _split_locks[key] = lock
    return lock


async def distribute_split(
    db: AsyncSession,
    contract_address: str,
    caller: str | None = None,
    amount: int | None = None,
    triggered_by: DistributionTrigger = DistributionTrigger.manual,
) -> Distribution:
    """
    Run one distribution for a split and persist its payouts.

    ``amount`` defaults to the pending balance (received minus distributed).
    When ``caller`` is given it must be the split owner; the auto-distribute
    worker passes None.

    Raises:
        SplitNotFound, Unauthorized, Inactive, ZeroAmount, InsufficientBalance.
    """
    async with split_lock(contract_address):
        split = await get_split(db, contract_address, for_update=True)
        try:
            if not split:
                raise SplitNotFound("Split contract not found")
            if caller is not None and split.owner != caller.lower():
                raise Unauthorized("Only the split owner can distribute")

            pending = split.pending_balance
            total = pending if amount is None else amount
            splitter = splitter_from_model(split)
            events = splitter.distribute(total)
            # Nothing is persisted until the balance check passes.
            if total > pending:
                raise InsufficientBalance(f"Amount {total} exceeds pending balance {pending}")
        except SplitError:
            await db.rollback()
            raise

        distribution = Distribution(
            split_id=split.id,
            amount=Decimal(total),
            triggered_by=triggered_by,
            triggered_by_address=caller.lower() if caller else None,
            payouts=[
                DistributionPayout(position=i, recipient=e.recipient, amount=Decimal(e.amount))
                for i, e in enumerate(events)
            ],
        )
        db.add(distribution)
        split.total_distributed = Decimal(splitter.total_distributed)
        split.last_distribution_at = datetime.now(timezone.utc)
        await db.commit()
        await db.refresh(distribution)

    logger.info(
        f"Distributed {total} from {split.contract_address} to {len(events)} recipients ({triggered_by.value})"
    )
    await send_event(split.webhook_url, "distribution.completed", {
        "contract_address": split.contract_address,
        "distribution_id": str(distribution.id),
        "amount": str(total),
        "triggered_by": triggered_by.value,
        "payouts": [{"recipient": e.recipient, "amount": str(e.amount)} for e in events],
        "total_distributed": str(splitter.total_distributed),
    })
    return distribution


async def list_distributions(db: AsyncSession, contract_address: str, limit: int = 50) -> list[Distribution]:
    result = await db.execute(
        select(Distribution)
        .join(Split, Split.id == Distribution.split_id)
        .where(Split.contract_address == contract_address.lower())
        .order_by(Distribution.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
