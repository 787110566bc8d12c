import csv
import io
from enum import Enum

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from tempo_splits.core.errors import SplitNotFound
from tempo_splits.models.distribution import Distribution, DistributionPayout
from tempo_splits.models.payment import Payment, PaymentStatus
from tempo_splits.models.split import Split
from tempo_splits.services.split_service import get_split

CSV_HEADER = ["tx_hash", "payer", "amount", "token", "created_at", "memo"]


class ReportFormat(str, Enum):
    json = "json"
    csv = "csv"


async def _recipient_summary(db: AsyncSession, split: Split) -> list[dict]:
    result = await db.execute(
        select(DistributionPayout.recipient, func.sum(DistributionPayout.amount), func.count(DistributionPayout.id))
        .join(Distribution, Distribution.id == DistributionPayout.distribution_id)
        .where(Distribution.split_id == split.id)
        .group_by(DistributionPayout.recipient)
    )
    received = {recipient: (int(total or 0), count) for recipient, total, count in result.all()}
    summary = []
    for r in split.recipients:
        total, count = received.get(r.address, (0, 0))
        summary.append({
            "address": r.address,
            "name": r.name,
            "percentage": str(r.percentage),
            "total_received": str(total),
            "payout_count": count,
        })
    return summary


def _payments_csv(payments: list[Payment]) -> str:
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(CSV_HEADER)
    for p in payments:
        writer.writerow([p.tx_hash or "", p.payer_address, int(p.amount), p.token, p.created_at.isoformat(), p.memo or ""])
    return out.getvalue()


async def generate_payment_report(
    db: AsyncSession,
    contract_address: str,
    fmt: ReportFormat = ReportFormat.json,
) -> dict | str:
    """
    Report on every completed payment into a split.

    JSON carries the split, a summary (counts, totals, first and last
    payment, payers) and what each recipient has been paid out so far.
    CSV is one row per payment.
    """
    split = await get_split(db, contract_address)
    if not split:
        raise SplitNotFound("Split contract not found")

    result = await db.execute(
        select(Payment)
        .where(Payment.split_id == split.id, Payment.status == PaymentStatus.completed)
        .order_by(Payment.created_at.desc())
    )
    payments = list(result.scalars().all())

    if fmt == ReportFormat.csv:
        return _payments_csv(payments)

    payers = sorted({p.payer_address for p in payments})
    return {
        "split": {
            "name": split.name,
            "contract_address": split.contract_address,
            "owner": split.owner,
            "token": split.token,
            "token_symbol": split.token_symbol,
        },
        "summary": {
            "total_payments": len(payments),
            "total_amount": str(sum(int(p.amount) for p in payments)),
            "first_payment": payments[-1].created_at.isoformat() if payments else None,
            "last_payment": payments[0].created_at.isoformat() if payments else None,
            "unique_payers": payers,
            "recipient_summary": await _recipient_summary(db, split),
        },
        "payments": [
            {
                "tx_hash": p.tx_hash,
                "payer": p.payer_address,
                "amount": str(int(p.amount)),
                "created_at": p.created_at.isoformat(),
            }
            for p in payments
        ],
    }
