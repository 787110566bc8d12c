import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tempo_splits.core.errors import SplitError, SplitNotFound, Unauthorized
from tempo_splits.models.split import Split, SplitRecipient
from tempo_splits.services.splitter_engine import SplitConfiguration, Splitter
from tempo_splits.utils.share_utils import percentage_to_bps, validate_configuration

logger = logging.getLogger(__name__)


def splitter_from_model(split: Split) -> Splitter:
    """Snapshot a stored split into an engine ``Splitter``."""
    config = SplitConfiguration.create(
        [r.address for r in split.recipients],
        [r.share_bps for r in split.recipients],
        token=split.token,
        owner=split.owner,
        active=split.active,
    )
    return Splitter(config=config, total_distributed=int(split.total_distributed or 0))


def _recipient_rows(recipients: list[dict], shares: list[int]) -> list[SplitRecipient]:
    return [
        SplitRecipient(
            position=i,
            address=r["address"].lower(),
            name=r.get("name") or f"Recipient {i + 1}",
            share_bps=shares[i],
        )
        for i, r in enumerate(recipients)
    ]


async def create_split(
    db: AsyncSession,
    owner: str,
    contract_address: str,
    recipients: list[dict],
    token: str,
    name: str | None = None,
    token_symbol: str | None = None,
    token_decimals: int = 6,
    auto_distribute: bool = False,
    distribution_threshold: int = 0,
    webhook_url: str | None = None,
    created_tx: str | None = None,
) -> Split:
    """
    Store a new split. ``recipients`` carry form percentages; they are converted
    to basis points and the whole list is validated before anything is written.
    """
    shares = [percentage_to_bps(r["percentage"]) for r in recipients]
    validate_configuration([r["address"] for r in recipients], shares)

    split = Split(
        name=name or f"Split {contract_address[:10]}",
        contract_address=contract_address.lower(),
        owner=owner.lower(),
        token=token.lower(),
        token_symbol=token_symbol,
        token_decimals=token_decimals,
        auto_distribute=auto_distribute,
        distribution_threshold=Decimal(distribution_threshold),
        webhook_url=webhook_url,
        created_tx=created_tx,
        recipients=_recipient_rows(recipients, shares),
    )
    db.add(split)
    await db.commit()
    await db.refresh(split)
    logger.info(f"Created split {split.contract_address} for {split.owner} with {len(shares)} recipients")
    return split


async def get_split(db: AsyncSession, contract_address: str, for_update: bool = False) -> Split | None:
    query = select(Split).where(Split.contract_address == contract_address.lower())
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def list_owner_splits(db: AsyncSession, owner: str, include_inactive: bool = False) -> list[Split]:
    query = select(Split).where(Split.owner == owner.lower())
    if not include_inactive:
        query = query.where(Split.active == True)
    result = await db.execute(query.order_by(Split.created_at.desc()))
    return list(result.scalars().all())


async def list_recipient_splits(db: AsyncSession, address: str) -> list[Split]:
    result = await db.execute(
        select(Split)
        .join(SplitRecipient, SplitRecipient.split_id == Split.id)
        .where(SplitRecipient.address == address.lower(), Split.active == True)
        .order_by(Split.created_at.desc())
        .distinct()
    )
    return list(result.scalars().all())


async def update_split(
    db: AsyncSession,
    contract_address: str,
    caller: str,
    name: str | None = None,
    recipients: list[dict] | None = None,
    active: bool | None = None,
    auto_distribute: bool | None = None,
    distribution_threshold: int | None = None,
    webhook_url: str | None = None,
) -> Split:
    """
    Owner-only update. A new recipient list replaces the old one as a whole
    and only after it passes validation; on any error nothing is changed.
    """
    split = await get_split(db, contract_address, for_update=True)
    try:
        if not split:
            raise SplitNotFound("Split contract not found")
        if split.owner != caller.lower():
            raise Unauthorized("Only the split owner can update it")

        if recipients is not None:
            shares = [percentage_to_bps(r["percentage"]) for r in recipients]
            splitter = splitter_from_model(split)
            splitter.update_shares(caller, [r["address"] for r in recipients], shares)
            split.recipients = _recipient_rows(recipients, shares)

        if active is not None and active != split.active:
            splitter = splitter_from_model(split)
            if active:
                splitter.activate(caller)
                split.deactivated_at = None
            else:
                splitter.deactivate(caller)
                split.deactivated_at = datetime.now(timezone.utc)
            split.active = active
    except SplitError:
        await db.rollback()
        raise

    if name is not None:
        split.name = name.strip()
    if auto_distribute is not None:
        split.auto_distribute = auto_distribute
    if distribution_threshold is not None:
        split.distribution_threshold = Decimal(distribution_threshold)
    if webhook_url is not None:
        split.webhook_url = webhook_url or None

    await db.commit()
    await db.refresh(split)
    return split


async def deactivate_split(db: AsyncSession, contract_address: str, caller: str) -> Split:
    return await update_split(db, contract_address, caller, active=False)
