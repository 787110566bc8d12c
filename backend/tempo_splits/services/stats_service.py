from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import select, func, cast, Date
from sqlalchemy.ext.asyncio import AsyncSession

from tempo_splits.models.payment import Payment, PaymentStatus
from tempo_splits.models.split import Split, SplitRecipient

TOP_PAYMENTS = 10


class Period(str, Enum):
    week = "7d"
    month = "30d"
    quarter = "90d"
    year = "1y"
    all = "all"


def get_period_start(period: Period) -> datetime:
    now = datetime.now(timezone.utc)
    if period == Period.week:
        return now - timedelta(days=7)
    elif period == Period.month:
        return now - timedelta(days=30)
    elif period == Period.quarter:
        return now - timedelta(days=90)
    elif period == Period.year:
        return now - timedelta(days=365)
    else:
        return datetime(1970, 1, 1, tzinfo=timezone.utc)


async def get_platform_stats(db: AsyncSession, period: Period = Period.month) -> dict:
    since = get_period_start(period)
    completed = (Payment.status == PaymentStatus.completed, Payment.created_at >= since)

    summary_result = await db.execute(
        select(
            func.count(Payment.id),
            func.coalesce(func.sum(Payment.amount), Decimal("0")),
            func.count(func.distinct(Payment.payer_address)),
            func.count(func.distinct(Payment.contract_address)),
        ).where(*completed)
    )
    payment_count, volume, unique_payers, unique_splits = summary_result.one()

    day = cast(Payment.created_at, Date)
    daily_result = await db.execute(
        select(day, func.count(Payment.id), func.sum(Payment.amount))
        .where(*completed)
        .group_by(day)
        .order_by(day)
    )

    token_result = await db.execute(
        select(Payment.token, func.count(Payment.id), func.sum(Payment.amount).label("volume"))
        .where(*completed)
        .group_by(Payment.token)
        .order_by(func.sum(Payment.amount).desc())
    )

    top_result = await db.execute(
        select(Payment, Split.name)
        .outerjoin(Split, Split.id == Payment.split_id)
        .where(*completed)
        .order_by(Payment.amount.desc())
        .limit(TOP_PAYMENTS)
    )

    splits_result = await db.execute(
        select(func.count(func.distinct(Split.id)), func.count(SplitRecipient.id))
        .select_from(Split)
        .outerjoin(SplitRecipient, SplitRecipient.split_id == Split.id)
        .where(Split.active == True)
    )
    split_count, recipient_count = splits_result.one()

    volume = int(volume or 0)
    return {
        "period": period.value,
        "start_date": since.isoformat(),
        "total_payments": payment_count,
        "total_volume": str(volume),
        "unique_payers": unique_payers,
        "unique_splits": unique_splits,
        "avg_payment_size": str(volume // payment_count) if payment_count else "0",
        "daily_volume": [
            {"date": d.isoformat(), "count": c, "volume": str(int(v or 0))}
            for d, c, v in daily_result.all()
        ],
        "token_distribution": [
            {"token": t, "count": c, "volume": str(int(v or 0))}
            for t, c, v in token_result.all()
        ],
        "top_payments": [
            {
                "id": str(p.id),
                "contract_address": p.contract_address,
                "split_name": name,
                "payer": p.payer_address,
                "amount": str(int(p.amount)),
                "token": p.token,
                "tx_hash": p.tx_hash,
                "created_at": p.created_at.isoformat(),
            }
            for p, name in top_result.all()
        ],
        "total_splits": split_count,
        "total_recipients": recipient_count,
        "avg_recipients": round(recipient_count / split_count, 2) if split_count else 0,
    }
