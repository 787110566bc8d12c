import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from tempo_splits.models.payment import Payment, PaymentStatus
from tempo_splits.services.stats_service import Period, get_period_start, get_platform_stats
from tests.conftest import ALICE, BOB, CONTRACT, TOKEN


def make_payment(payer, amount) -> Payment:
    return Payment(
        id=uuid.uuid4(),
        contract_address=CONTRACT,
        payer_address=payer,
        amount=Decimal(amount),
        token=TOKEN,
        status=PaymentStatus.completed,
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


def make_db(summary, daily, tokens, top, splits):
    db = AsyncMock()
    summary_result = MagicMock()
    summary_result.one.return_value = summary
    daily_result = MagicMock()
    daily_result.all.return_value = daily
    token_result = MagicMock()
    token_result.all.return_value = tokens
    top_result = MagicMock()
    top_result.all.return_value = top
    splits_result = MagicMock()
    splits_result.one.return_value = splits
    db.execute.side_effect = [summary_result, daily_result, token_result, top_result, splits_result]
    return db


@pytest.mark.asyncio
async def test_platform_stats_summary_and_top_payments():
    big = make_payment(BOB, 900)
    small = make_payment(ALICE, 100)
    db = make_db(
        summary=(2, Decimal(1000), 2, 1),
        daily=[(date(2026, 3, 1), 2, Decimal(1000))],
        tokens=[(TOKEN, 2, Decimal(1000))],
        top=[(big, "Band"), (small, "Band")],
        splits=(1, 3),
    )
    stats = await get_platform_stats(db, Period.all)

    assert stats["total_payments"] == 2
    assert stats["total_volume"] == "1000"
    assert stats["avg_payment_size"] == "500"
    assert stats["daily_volume"] == [{"date": "2026-03-01", "count": 2, "volume": "1000"}]
    assert [p["amount"] for p in stats["top_payments"]] == ["900", "100"]
    assert stats["top_payments"][0]["split_name"] == "Band"
    assert stats["top_payments"][0]["payer"] == BOB
    assert stats["avg_recipients"] == 3


@pytest.mark.asyncio
async def test_empty_platform_returns_zero_stats():
    db = make_db(summary=(0, Decimal(0), 0, 0), daily=[], tokens=[], top=[], splits=(0, 0))
    stats = await get_platform_stats(db)
    assert stats["period"] == "30d"
    assert stats["avg_payment_size"] == "0"
    assert stats["top_payments"] == []
    assert stats["avg_recipients"] == 0


def test_all_period_starts_at_epoch():
    assert get_period_start(Period.all).year == 1970
