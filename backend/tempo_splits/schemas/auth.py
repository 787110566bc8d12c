from pydantic import BaseModel, Field

from tempo_splits.schemas.split import ADDRESS_PATTERN


class AuthMessageResponse(BaseModel):
    message: str
    nonce: str
    timestamp: int


class WalletLogin(BaseModel):
    address: str = Field(pattern=ADDRESS_PATTERN)
    message: str = Field(min_length=1)
    signature: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    address: str
    expires_in: int
