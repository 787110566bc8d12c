from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tempo_splits.api.errors import to_http
from tempo_splits.core.auth import get_current_wallet
from tempo_splits.core.database import get_db
from tempo_splits.core.errors import SplitError
from tempo_splits.schemas.distribution import DistributeRequest, DistributionResponse
from tempo_splits.schemas.payment import PaymentLinkCreate, PaymentLinkResponse, PaymentPage
from tempo_splits.schemas.split import SplitCreate, SplitListResponse, SplitResponse, SplitUpdate
from tempo_splits.services.distribution_service import distribute_split, list_distributions
from tempo_splits.services.payment_link_service import create_payment_link
from tempo_splits.services.payment_service import list_split_payments
from tempo_splits.services.report_service import ReportFormat, generate_payment_report
from tempo_splits.services.split_service import (
    create_split,
    deactivate_split,
    get_split,
    list_owner_splits,
    list_recipient_splits,
    update_split,
)

router = APIRouter(prefix="/api/splits", tags=["splits"])


@router.post("", response_model=SplitResponse, status_code=201)
async def create(
    body: SplitCreate,
    wallet: str = Depends(get_current_wallet),
    db: AsyncSession = Depends(get_db),
):
    if await get_split(db, body.contract_address):
        raise HTTPException(status_code=409, detail="Split contract already registered")
    try:
        return await create_split(
            db,
            owner=wallet,
            contract_address=body.contract_address,
            recipients=[r.model_dump() for r in body.recipients],
            token=body.token,
            name=body.name,
            token_symbol=body.token_symbol,
            token_decimals=body.token_decimals,
            auto_distribute=body.auto_distribute,
            distribution_threshold=body.distribution_threshold,
            webhook_url=body.webhook_url,
            created_tx=body.created_tx,
        )
    except SplitError as e:
        raise to_http(e)


@router.get("/owner/{address}", response_model=SplitListResponse)
async def list_by_owner(address: str, db: AsyncSession = Depends(get_db)):
    splits = await list_owner_splits(db, address)
    return SplitListResponse(splits=[SplitResponse.model_validate(s) for s in splits], total=len(splits))


@router.get("/recipient/{address}", response_model=SplitListResponse)
async def list_by_recipient(address: str, db: AsyncSession = Depends(get_db)):
    splits = await list_recipient_splits(db, address)
    return SplitListResponse(splits=[SplitResponse.model_validate(s) for s in splits], total=len(splits))


@router.get("/{contract_address}", response_model=SplitResponse)
async def get(contract_address: str, db: AsyncSession = Depends(get_db)):
    split = await get_split(db, contract_address)
    if not split:
        raise HTTPException(status_code=404, detail="Split contract not found")
    return split


@router.put("/{contract_address}", response_model=SplitResponse)
async def update(
    contract_address: str,
    body: SplitUpdate,
    wallet: str = Depends(get_current_wallet),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await update_split(
            db,
            contract_address,
            wallet,
            name=body.name,
            recipients=[r.model_dump() for r in body.recipients] if body.recipients is not None else None,
            active=body.active,
            auto_distribute=body.auto_distribute,
            distribution_threshold=body.distribution_threshold,
            webhook_url=body.webhook_url,
        )
    except SplitError as e:
        raise to_http(e)


@router.delete("/{contract_address}", response_model=SplitResponse)
async def deactivate(
    contract_address: str,
    wallet: str = Depends(get_current_wallet),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await deactivate_split(db, contract_address, wallet)
    except SplitError as e:
        raise to_http(e)


@router.post("/{contract_address}/distribute", response_model=DistributionResponse)
async def distribute(
    contract_address: str,
    body: DistributeRequest,
    wallet: str = Depends(get_current_wallet),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await distribute_split(db, contract_address, caller=wallet, amount=body.amount)
    except SplitError as e:
        raise to_http(e)


@router.get("/{contract_address}/distributions", response_model=list[DistributionResponse])
async def distributions(contract_address: str, db: AsyncSession = Depends(get_db)):
    return await list_distributions(db, contract_address)


@router.get("/{contract_address}/payments", response_model=PaymentPage)
async def payments(
    contract_address: str,
    page: int = 1,
    limit: int = 20,
    db: AsyncSession = Depends(get_db),
):
    page = max(page, 1)
    limit = min(max(limit, 1), 100)
    return await list_split_payments(db, contract_address, page=page, limit=limit)


@router.post("/{contract_address}/links", response_model=PaymentLinkResponse, status_code=201)
async def generate_link(
    contract_address: str,
    body: PaymentLinkCreate,
    wallet: str = Depends(get_current_wallet),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await create_payment_link(db, contract_address, wallet, **body.model_dump())
    except SplitError as e:
        raise to_http(e)


@router.get("/{contract_address}/report")
async def report(
    contract_address: str,
    fmt: ReportFormat = Query(default=ReportFormat.json, alias="format"),
    db: AsyncSession = Depends(get_db),
):
    try:
        data = await generate_payment_report(db, contract_address, fmt)
    except SplitError as e:
        raise to_http(e)
    if fmt == ReportFormat.csv:
        return Response(
            content=data,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{contract_address.lower()}-payments.csv"'},
        )
    return data
