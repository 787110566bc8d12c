from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.dialects import postgresql

from tempo_splits.core.errors import InvalidAddress, SharesNotFullyAllocated, SplitNotFound, Unauthorized
from tempo_splits.models.split import Split
from tempo_splits.services.split_service import create_split, get_split, splitter_from_model, update_split
from tests.conftest import ALICE, BOB, CAROL, CONTRACT, OWNER, TOKEN

SERVICE = "tempo_splits.services.split_service"


def make_db():
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.mark.asyncio
async def test_create_converts_percentages_to_bps():
    db = make_db()
    split = await create_split(
        db,
        OWNER.upper().replace("0X", "0x"),
        CONTRACT,
        [
            {"address": ALICE, "percentage": 33.33, "name": "Alice"},
            {"address": BOB, "percentage": 33.33},
            {"address": CAROL, "percentage": 33.34},
        ],
        TOKEN,
        name="Band",
    )
    db.add.assert_called_once_with(split)
    db.commit.assert_awaited_once()
    assert isinstance(split, Split)
    assert split.owner == OWNER
    assert [(r.position, r.share_bps) for r in split.recipients] == [(0, 3333), (1, 3333), (2, 3334)]
    assert split.recipients[0].name == "Alice"
    assert split.recipients[1].name == "Recipient 2"


@pytest.mark.asyncio
async def test_create_rejects_incomplete_allocation():
    db = make_db()
    with pytest.raises(SharesNotFullyAllocated):
        await create_split(
            db, OWNER, CONTRACT,
            [{"address": ALICE, "percentage": 50}, {"address": BOB, "percentage": 49.99}],
            TOKEN,
        )
    db.add.assert_not_called()


@pytest.mark.asyncio
async def test_create_rejects_bad_address():
    db = make_db()
    with pytest.raises(InvalidAddress):
        await create_split(db, OWNER, CONTRACT, [{"address": "0xnope", "percentage": 100}], TOKEN)
    db.add.assert_not_called()


def test_splitter_snapshot_matches_row(make_split):
    split = make_split(distributed=42)
    splitter = splitter_from_model(split)
    assert splitter.config.recipients == (ALICE, BOB)
    assert splitter.config.shares == (7000, 3000)
    assert splitter.total_distributed == 42


@pytest.mark.asyncio
async def test_owner_replaces_recipients(make_split):
    split = make_split()
    db = make_db()
    with patch(f"{SERVICE}.get_split", AsyncMock(return_value=split)):
        await update_split(db, CONTRACT, OWNER, recipients=[{"address": CAROL, "percentage": 100}])
    assert [(r.address, r.share_bps) for r in split.recipients] == [(CAROL, 10000)]
    db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_with_9999_leaves_configuration_untouched(make_split):
    split = make_split()
    db = make_db()
    with patch(f"{SERVICE}.get_split", AsyncMock(return_value=split)):
        with pytest.raises(SharesNotFullyAllocated):
            await update_split(
                db, CONTRACT, OWNER,
                name="renamed",
                recipients=[{"address": ALICE, "percentage": 50}, {"address": BOB, "percentage": 49.99}],
            )
    assert [(r.address, r.share_bps) for r in split.recipients] == [(ALICE, 7000), (BOB, 3000)]
    assert split.name == "Test Split"
    db.rollback.assert_awaited_once()
    db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_non_owner_cannot_update(make_split):
    split = make_split()
    db = make_db()
    with patch(f"{SERVICE}.get_split", AsyncMock(return_value=split)):
        with pytest.raises(Unauthorized):
            await update_split(db, CONTRACT, ALICE, recipients=[{"address": ALICE, "percentage": 100}])
    assert len(split.recipients) == 2
    db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_deactivate_and_settings(make_split):
    split = make_split()
    db = make_db()
    with patch(f"{SERVICE}.get_split", AsyncMock(return_value=split)):
        await update_split(db, CONTRACT, OWNER, active=False, auto_distribute=True, distribution_threshold=500)
    assert split.active is False
    assert split.deactivated_at is not None
    assert split.auto_distribute is True
    assert split.distribution_threshold == Decimal(500)


@pytest.mark.asyncio
async def test_update_unknown_split():
    db = make_db()
    with patch(f"{SERVICE}.get_split", AsyncMock(return_value=None)):
        with pytest.raises(SplitNotFound):
            await update_split(db, CONTRACT, OWNER, active=False)


@pytest.mark.asyncio
async def test_get_split_for_update_locks_and_reloads_the_row():
    db = make_db()
    db.execute.return_value = MagicMock()
    await get_split(db, CONTRACT.upper().replace("0X", "0x"), for_update=True)
    query = db.execute.await_args.args[0]
    assert "FOR UPDATE" in str(query.compile(dialect=postgresql.dialect()))
    assert query.get_execution_options()["populate_existing"] is True
