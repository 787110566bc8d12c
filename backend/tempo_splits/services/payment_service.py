import logging
import math
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from tempo_splits.core.errors import (
    DuplicatePayment,
    Inactive,
    PaymentLinkUnavailable,
    PaymentNotFound,
    SplitError,
    SplitNotFound,
    TokenMismatch,
)
from tempo_splits.models.distribution import DistributionTrigger
from tempo_splits.models.payment import Payment, PaymentStatus
from tempo_splits.models.split import Split, SplitRecipient
from tempo_splits.services.split_service import get_split
from tempo_splits.services.payment_link_service import get_payment_link
from tempo_splits.services.webhook_service import send_event

logger = logging.getLogger(__name__)


async def record_payment(
    db: AsyncSession,
    split_address: str,
    payer: str,
    amount: int,
    token: str,
    tx_hash: str | None = None,
    memo: str | None = None,
    payment_link_id: str | None = None,
    batch_id: str | None = None,
) -> Payment:
    """
    Record funds received by a split and add them to its pending balance.

    When the split has auto_distribute on and the payment reaches the split's
    distribution threshold, the pending balance is distributed right away.
    """
    split = await get_split(db, split_address, for_update=True)
    try:
        if not split:
            raise SplitNotFound("Split contract not found")
        if not split.active:
            raise Inactive("Split contract is inactive")
        if split.token != token.lower():
            raise TokenMismatch(f"Split pays out in {split.token}, not {token.lower()}")

        if tx_hash:
            existing = await db.execute(select(Payment.id).where(Payment.tx_hash == tx_hash.lower()))
            if existing.scalar_one_or_none():
                raise DuplicatePayment(f"Transaction {tx_hash} is already recorded")

        if payment_link_id:
            link = await get_payment_link(db, payment_link_id, for_update=True)
            if link.split_id != split.id:
                raise PaymentLinkUnavailable("Payment link belongs to another split")
            if link.amount is not None and amount != int(link.amount):
                raise PaymentLinkUnavailable(f"Payment link requires an amount of {int(link.amount)}")
            link.usage_count += 1
            link.total_amount = (link.total_amount or Decimal("0")) + amount
    except SplitError:
        await db.rollback()
        raise

    payment = Payment(
        split_id=split.id,
        contract_address=split.contract_address,
        payer_address=payer.lower(),
        amount=Decimal(amount),
        token=token.lower(),
        tx_hash=tx_hash.lower() if tx_hash else None,
        memo=memo,
        payment_link_id=payment_link_id,
        batch_id=batch_id,
        status=PaymentStatus.completed,
    )
    db.add(payment)
    # row is locked by get_split(for_update=True); increments cannot interleave
    split.total_payments = (split.total_payments or 0) + 1
    split.total_received = (split.total_received or Decimal("0")) + amount
    split.last_payment_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(payment)

    await send_event(split.webhook_url, "payment.received", {
        "contract_address": split.contract_address,
        "payment_id": str(payment.id),
        "payer": payment.payer_address,
        "amount": str(amount),
        "token": payment.token,
        "tx_hash": payment.tx_hash,
    })

    if split.auto_distribute and amount >= int(split.distribution_threshold or 0):
        from tempo_splits.services.distribution_service import distribute_split
        try:
            await distribute_split(db, split.contract_address, triggered_by=DistributionTrigger.auto)
        except SplitError as e:
            logger.warning(f"Auto-distribution after payment {payment.id} failed: {e}")

    return payment


async def record_failed_payment(
    db: AsyncSession,
    split_address: str,
    payer: str,
    amount: int,
    token: str,
    error: str,
) -> Payment:
    await db.rollback()
    payment = Payment(
        split_id=None,
        contract_address=split_address.lower(),
        payer_address=payer.lower(),
        amount=Decimal(amount),
        token=token.lower(),
        status=PaymentStatus.failed,
        error=error,
    )
    db.add(payment)
    await db.commit()
    await db.refresh(payment)
    return payment


async def record_batch(
    db: AsyncSession,
    items: list[dict],
    token: str,
    payer: str,
) -> dict:
    """Record each item on its own; one bad item does not stop the rest."""
    batch_id = f"batch_{uuid.uuid4().hex[:12]}"
    results = []
    errors = []
    for item in items:
        try:
            payment = await record_payment(
                db, item["split_address"], payer, item["amount"], token, batch_id=batch_id
            )
            results.append({"split_address": item["split_address"], "amount": item["amount"], "payment_id": payment.id})
        except SplitError as e:
            await db.rollback()
            errors.append({"split_address": item["split_address"], "amount": item["amount"], "error": str(e)})
    logger.info(f"Batch {batch_id}: {len(results)} recorded, {len(errors)} failed")
    return {"processed": len(results), "failed": len(errors), "results": results, "errors": errors}


async def list_split_payments(db: AsyncSession, contract_address: str, page: int = 1, limit: int = 20) -> dict:
    address = contract_address.lower()
    count_result = await db.execute(
        select(func.count(Payment.id)).where(Payment.contract_address == address)
    )
    total = count_result.scalar_one()

    result = await db.execute(
        select(Payment)
        .where(Payment.contract_address == address)
        .order_by(Payment.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "payments": list(result.scalars().all()),
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if total else 0,
    }


class HistoryType(str, Enum):
    all = "all"
    sent = "sent"
    received = "received"
    split = "split"
    recipient = "recipient"


def _history_filter(address: str, kind: HistoryType):
    if kind == HistoryType.sent:
        return Payment.payer_address == address
    elif kind == HistoryType.received:
        # payments into splits the address owns
        return Payment.split_id.in_(select(Split.id).where(Split.owner == address))
    elif kind == HistoryType.split:
        return Payment.contract_address == address
    elif kind == HistoryType.recipient:
        return Payment.split_id.in_(select(SplitRecipient.split_id).where(SplitRecipient.address == address))
    else:
        return or_(Payment.payer_address == address, Payment.contract_address == address)


async def get_payment_history(
    db: AsyncSession,
    address: str,
    kind: HistoryType = HistoryType.all,
    token: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    """
    Completed payments involving ``address``, newest first.

    ``kind`` picks the relation: payments the address sent, payments into
    splits it owns, payments into the split at that address, or payments
    into splits it is a recipient of. ``all`` is sent or split.
    """
    conditions = [_history_filter(address.lower(), kind), Payment.status == PaymentStatus.completed]
    if token:
        conditions.append(Payment.token == token.lower())
    if start_date:
        conditions.append(Payment.created_at >= start_date)
    if end_date:
        conditions.append(Payment.created_at <= end_date)

    totals_result = await db.execute(
        select(func.count(Payment.id), func.coalesce(func.sum(Payment.amount), Decimal("0"))).where(*conditions)
    )
    total, total_amount = totals_result.one()

    result = await db.execute(
        select(Payment)
        .where(*conditions)
        .order_by(Payment.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "payments": list(result.scalars().all()),
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if total else 0,
        "total_amount": int(total_amount or 0),
    }


async def verify_payment(db: AsyncSession, tx_hash: str) -> Payment:
    result = await db.execute(select(Payment).where(Payment.tx_hash == tx_hash.lower()))
    payment = result.scalar_one_or_none()
    if not payment:
        raise PaymentNotFound("Transaction not found")
    return payment
