import json
import secrets
import time
from datetime import datetime, timedelta, timezone

import jwt as pyjwt
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tempo_splits.core.config import settings
from tempo_splits.core.errors import InvalidAddress, InvalidSignature
from tempo_splits.utils.share_utils import is_valid_address

security = HTTPBearer()

AUTH_PURPOSE = "authentication"


def build_auth_message(address: str, now: float | None = None) -> dict:
    """The JSON message a wallet signs to sign in. ``timestamp`` is in ms."""
    if not is_valid_address(address):
        raise InvalidAddress(f"Invalid address: {address}")
    timestamp = int((time.time() if now is None else now) * 1000)
    nonce = secrets.token_hex(16)
    message = json.dumps({
        "domain": settings.auth_domain,
        "address": address.lower(),
        "statement": "Sign this message to authenticate with Tempo Splits",
        "version": "1",
        "chainId": settings.chain_id,
        "nonce": nonce,
        "timestamp": timestamp,
        "purpose": AUTH_PURPOSE,
    })
    return {"message": message, "nonce": nonce, "timestamp": timestamp}


def verify_wallet_signature(address: str, message: str, signature: str, now: float | None = None) -> str:
    """
    Check that ``address`` signed ``message`` (EIP-191 personal_sign) and that
    the message is a fresh sign-in message for this service.

    Returns the lowercase address.
    """
    if not is_valid_address(address):
        raise InvalidAddress(f"Invalid address: {address}")
    try:
        recovered = Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:
        raise InvalidSignature("Invalid signature format") from e
    if recovered.lower() != address.lower():
        raise InvalidSignature("Signature does not match address")

    try:
        data = json.loads(message)
    except json.JSONDecodeError as e:
        raise InvalidSignature("Invalid authentication message") from e
    if not isinstance(data, dict):
        raise InvalidSignature("Invalid authentication message")

    now_ms = (time.time() if now is None else now) * 1000
    timestamp = data.get("timestamp")
    if not isinstance(timestamp, (int, float)) or abs(now_ms - timestamp) > settings.auth_message_max_age * 1000:
        raise InvalidSignature("Signature expired")
    if data.get("domain") != settings.auth_domain or data.get("purpose") != AUTH_PURPOSE:
        raise InvalidSignature("Invalid authentication message")
    if str(data.get("address", "")).lower() != address.lower():
        raise InvalidSignature("Message was issued for another address")
    return address.lower()


def issue_wallet_token(address: str, hours: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": address.lower(),
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + timedelta(hours=settings.jwt_expires_hours if hours is None else hours),
    }
    return pyjwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_wallet_token(token: str) -> str:
    """Return the lowercase wallet address carried in the token's ``sub`` claim."""
    payload = pyjwt.decode(
        token,
        settings.jwt_secret,
        algorithms=["HS256"],
        audience=settings.jwt_audience,
    )
    address = payload.get("sub")
    if not address or not is_valid_address(address):
        raise pyjwt.InvalidTokenError("Token subject is not a wallet address")
    return address.lower()


async def get_current_wallet(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    try:
        return decode_wallet_token(credentials.credentials)
    except pyjwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
