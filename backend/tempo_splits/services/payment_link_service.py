import secrets
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tempo_splits.core.errors import PaymentLinkUnavailable, SplitNotFound, Unauthorized
from tempo_splits.models.payment import PaymentLink
from tempo_splits.services.split_service import get_split


def new_link_id() -> str:
    return f"pay_{secrets.token_hex(8)}"


async def create_payment_link(
    db: AsyncSession,
    contract_address: str,
    caller: str,
    title: str | None = None,
    description: str | None = None,
    amount: int | None = None,
    redirect_url: str | None = None,
    expires_at: datetime | None = None,
    max_uses: int | None = None,
) -> PaymentLink:
    split = await get_split(db, contract_address)
    if not split:
        raise SplitNotFound("Split contract not found")
    if split.owner != caller.lower():
        raise Unauthorized("Only the split owner can create payment links")

    link = PaymentLink(
        link_id=new_link_id(),
        split_id=split.id,
        title=title or f"Payment to {split.name}",
        description=description or "Split payment",
        amount=amount,
        redirect_url=redirect_url,
        expires_at=expires_at,
        max_uses=max_uses,
    )
    db.add(link)
    await db.commit()
    await db.refresh(link)
    return link


def check_link_usable(link: PaymentLink, now: datetime | None = None) -> None:
    now = now or datetime.now(timezone.utc)
    if not link.active:
        raise PaymentLinkUnavailable("Payment link is no longer active")
    if link.expires_at is not None and link.expires_at <= now:
        raise PaymentLinkUnavailable("Payment link has expired")
    if link.max_uses is not None and link.usage_count >= link.max_uses:
        raise PaymentLinkUnavailable("Payment link has reached its usage limit")


async def get_payment_link(db: AsyncSession, link_id: str, for_update: bool = False) -> PaymentLink:
    query = select(PaymentLink).where(PaymentLink.link_id == link_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    link = result.scalar_one_or_none()
    if not link:
        raise PaymentLinkUnavailable("Payment link not found")
    check_link_usable(link)
    return link
