import uuid
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field

ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"


class RecipientInput(BaseModel):
    address: str = Field(pattern=ADDRESS_PATTERN)
    percentage: Decimal = Field(ge=Decimal("0.01"), le=Decimal("100"))
    name: str | None = Field(default=None, max_length=50)


class SplitCreate(BaseModel):
    contract_address: str = Field(pattern=ADDRESS_PATTERN)
    name: str | None = Field(default=None, max_length=100)
    recipients: list[RecipientInput] = Field(min_length=1, max_length=20)
    token: str = Field(pattern=ADDRESS_PATTERN)
    token_symbol: str | None = None
    token_decimals: int = Field(default=6, ge=0, le=36)
    auto_distribute: bool = False
    distribution_threshold: int = Field(default=0, ge=0)
    webhook_url: str | None = None
    created_tx: str | None = None


class SplitUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    recipients: list[RecipientInput] | None = Field(default=None, min_length=1, max_length=20)
    active: bool | None = None
    auto_distribute: bool | None = None
    distribution_threshold: int | None = Field(default=None, ge=0)
    webhook_url: str | None = None


class RecipientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    position: int
    address: str
    name: str
    share_bps: int
    percentage: Decimal


class SplitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: uuid.UUID
    name: str
    contract_address: str
    owner: str
    token: str
    token_symbol: str | None = None
    token_decimals: int
    active: bool
    auto_distribute: bool
    distribution_threshold: int
    webhook_url: str | None = None
    total_payments: int
    total_received: int
    total_distributed: int
    pending_balance: int
    last_payment_at: datetime | None = None
    last_distribution_at: datetime | None = None
    deactivated_at: datetime | None = None
    created_at: datetime
    recipients: list[RecipientResponse] = []


class SplitListResponse(BaseModel):
    splits: list[SplitResponse]
    total: int
