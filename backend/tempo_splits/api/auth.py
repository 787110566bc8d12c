import logging

from fastapi import APIRouter, Depends

from tempo_splits.api.errors import to_http
from tempo_splits.core.auth import (
    build_auth_message,
    get_current_wallet,
    issue_wallet_token,
    verify_wallet_signature,
)
from tempo_splits.core.config import settings
from tempo_splits.core.errors import SplitError
from tempo_splits.schemas.auth import AuthMessageResponse, TokenResponse, WalletLogin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/message/{address}", response_model=AuthMessageResponse)
async def auth_message(address: str):
    """Message for the wallet to sign; valid for a few minutes."""
    try:
        return build_auth_message(address)
    except SplitError as e:
        raise to_http(e)


@router.post("/wallet", response_model=TokenResponse)
async def wallet_login(body: WalletLogin):
    try:
        address = verify_wallet_signature(body.address, body.message, body.signature)
    except SplitError as e:
        logger.info(f"Wallet sign-in rejected for {body.address.lower()}: {e}")
        raise to_http(e)
    return TokenResponse(
        access_token=issue_wallet_token(address),
        address=address,
        expires_in=settings.jwt_expires_hours * 3600,
    )


@router.get("/me")
async def get_me(wallet: str = Depends(get_current_wallet)):
    return {"address": wallet}
