import logging

from sqlalchemy import select

from tempo_splits.core.config import settings
from tempo_splits.core.database import async_session_factory
from tempo_splits.core.errors import SplitError
from tempo_splits.models.distribution import DistributionTrigger
from tempo_splits.models.split import Split
from tempo_splits.services.distribution_service import distribute_split

logger = logging.getLogger(__name__)


def is_due(split: Split, min_amount: int) -> bool:
    threshold = max(int(split.distribution_threshold or 0), min_amount)
    return split.active and split.pending_balance > 0 and split.pending_balance >= threshold


async def run_auto_distribution(session_factory=async_session_factory) -> int:
    """Distribute the pending balance of every due auto-distribute split. Returns how many ran."""
    async with session_factory() as db:
        result = await db.execute(
            select(Split).where(
                Split.active == True,
                Split.auto_distribute == True,
            )
        )
        candidates = [
            split.contract_address for split in result.scalars().all()
            if is_due(split, settings.auto_distribute_min_amount)
        ]

    distributed = 0
    for address in candidates:
        # Fresh session per split so one failure cannot poison the rest.
        async with session_factory() as db:
            try:
                await distribute_split(db, address, triggered_by=DistributionTrigger.auto)
                distributed += 1
            except SplitError as e:
                logger.warning(f"Auto-distribution skipped for {address}: {e}")
            except Exception:
                logger.exception(f"Auto-distribution failed for {address}")

    logger.info(f"Auto-distribution run finished: {distributed}/{len(candidates)} splits distributed")
    return distributed
