import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from tempo_splits.schemas.split import ADDRESS_PATTERN

TX_HASH_PATTERN = r"^0x[a-fA-F0-9]{64}$"


class PaymentCreate(BaseModel):
    split_address: str = Field(pattern=ADDRESS_PATTERN)
    amount: int = Field(gt=0)
    token: str = Field(pattern=ADDRESS_PATTERN)
    payer: str = Field(pattern=ADDRESS_PATTERN)
    tx_hash: str | None = Field(default=None, pattern=TX_HASH_PATTERN)
    memo: str | None = Field(default=None, max_length=200)
    payment_link_id: str | None = None


class BatchItem(BaseModel):
    split_address: str = Field(pattern=ADDRESS_PATTERN)
    amount: int = Field(gt=0)


class BatchPaymentCreate(BaseModel):
    payments: list[BatchItem] = Field(min_length=1, max_length=50)
    token: str = Field(pattern=ADDRESS_PATTERN)
    payer: str = Field(pattern=ADDRESS_PATTERN)


class BatchResult(BaseModel):
    split_address: str
    amount: int
    payment_id: uuid.UUID | None = None
    error: str | None = None


class BatchResponse(BaseModel):
    processed: int
    failed: int
    results: list[BatchResult]
    errors: list[BatchResult]


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: uuid.UUID
    split_id: uuid.UUID | None = None
    contract_address: str
    payer_address: str
    amount: int
    token: str
    tx_hash: str | None = None
    memo: str | None = None
    payment_link_id: str | None = None
    status: str
    error: str | None = None
    created_at: datetime


class PaymentPage(BaseModel):
    payments: list[PaymentResponse]
    page: int
    limit: int
    total: int
    pages: int


class PaymentHistoryPage(PaymentPage):
    total_amount: int


class PaymentLinkCreate(BaseModel):
    title: str | None = Field(default=None, max_length=100)
    description: str | None = None
    amount: int | None = Field(default=None, gt=0)
    redirect_url: str | None = None
    expires_at: datetime | None = None
    max_uses: int | None = Field(default=None, gt=0)


class PaymentLinkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    link_id: str
    split_id: uuid.UUID
    title: str
    description: str | None = None
    amount: int | None = None
    redirect_url: str | None = None
    expires_at: datetime | None = None
    max_uses: int | None = None
    usage_count: int
    total_amount: int
    active: bool
    created_at: datetime
