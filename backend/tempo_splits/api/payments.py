from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tempo_splits.api.errors import to_http
from tempo_splits.core.database import get_db
from tempo_splits.core.errors import SplitError
from tempo_splits.schemas.payment import (
    BatchPaymentCreate,
    BatchResponse,
    PaymentCreate,
    PaymentHistoryPage,
    PaymentLinkResponse,
    PaymentResponse,
)
from tempo_splits.services.payment_link_service import get_payment_link
from tempo_splits.services.payment_service import (
    HistoryType,
    get_payment_history,
    record_batch,
    record_failed_payment,
    record_payment,
    verify_payment,
)

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("", response_model=PaymentResponse, status_code=201)
async def create_payment(body: PaymentCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await record_payment(
            db,
            body.split_address,
            body.payer,
            body.amount,
            body.token,
            tx_hash=body.tx_hash,
            memo=body.memo,
            payment_link_id=body.payment_link_id,
        )
    except SplitError as e:
        await record_failed_payment(db, body.split_address, body.payer, body.amount, body.token, str(e))
        raise to_http(e)


@router.post("/batch", response_model=BatchResponse)
async def create_batch(body: BatchPaymentCreate, db: AsyncSession = Depends(get_db)):
    return await record_batch(db, [p.model_dump() for p in body.payments], body.token, body.payer)


@router.get("/history/{address}", response_model=PaymentHistoryPage)
async def history(
    address: str,
    kind: HistoryType = Query(default=HistoryType.all, alias="type"),
    token: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = 1,
    limit: int = 20,
    db: AsyncSession = Depends(get_db),
):
    return await get_payment_history(
        db,
        address,
        kind=kind,
        token=token,
        start_date=start_date,
        end_date=end_date,
        page=max(page, 1),
        limit=min(max(limit, 1), 100),
    )


@router.get("/verify/{tx_hash}", response_model=PaymentResponse)
async def verify(tx_hash: str, db: AsyncSession = Depends(get_db)):
    try:
        return await verify_payment(db, tx_hash)
    except SplitError as e:
        raise to_http(e)


@router.get("/links/{link_id}", response_model=PaymentLinkResponse)
async def payment_link(link_id: str, db: AsyncSession = Depends(get_db)):
    try:
        return await get_payment_link(db, link_id)
    except SplitError as e:
        raise to_http(e)
