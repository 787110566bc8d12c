import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class DistributeRequest(BaseModel):
    # None distributes the whole pending balance
    amount: int | None = Field(default=None, gt=0)


class PayoutResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    position: int
    recipient: str
    amount: int


class DistributionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: uuid.UUID
    split_id: uuid.UUID
    amount: int
    triggered_by: str
    created_at: datetime
    payouts: list[PayoutResponse] = []
