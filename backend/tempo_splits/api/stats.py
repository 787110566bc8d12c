from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tempo_splits.core.database import get_db
from tempo_splits.services.stats_service import get_platform_stats, Period

router = APIRouter(tags=["stats"])


@router.get("/api/stats")
async def platform_stats(
    period: Period = Query(default=Period.month),
    db: AsyncSession = Depends(get_db),
):
    return await get_platform_stats(db, period)
