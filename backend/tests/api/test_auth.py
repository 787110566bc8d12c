import json
import time
from datetime import datetime, timedelta, timezone

import jwt as pyjwt
import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient

from tempo_splits.core.auth import build_auth_message, decode_wallet_token, verify_wallet_signature
from tempo_splits.core.config import settings
from tempo_splits.core.errors import InvalidSignature
from tempo_splits.main import app
from tests.conftest import OWNER

WALLET = Account.from_key("0x" + "4c" * 32)
OTHER_WALLET = Account.from_key("0x" + "7d" * 32)


def token_for(sub, secret=None, audience=None, expires_in=timedelta(hours=1)):
    payload = {
        "sub": sub,
        "aud": audience or settings.jwt_audience,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return pyjwt.encode(payload, secret or settings.jwt_secret, algorithm="HS256")


def test_wallet_from_subject():
    assert decode_wallet_token(token_for("0x" + "A1" * 20)) == OWNER


def test_wrong_secret():
    with pytest.raises(pyjwt.InvalidTokenError):
        decode_wallet_token(token_for(OWNER, secret="not-the-secret"))


def test_wrong_audience():
    with pytest.raises(pyjwt.InvalidTokenError):
        decode_wallet_token(token_for(OWNER, audience="someone-else"))


def test_expired():
    with pytest.raises(pyjwt.InvalidTokenError):
        decode_wallet_token(token_for(OWNER, expires_in=timedelta(hours=-1)))


def test_subject_must_be_an_address():
    with pytest.raises(pyjwt.InvalidTokenError):
        decode_wallet_token(token_for("user-123"))


def sign(message, account=WALLET):
    return account.sign_message(encode_defunct(text=message)).signature.hex()


def test_signed_message_is_accepted():
    message = build_auth_message(WALLET.address)["message"]
    assert verify_wallet_signature(WALLET.address, message, sign(message)) == WALLET.address.lower()


def test_signature_from_another_wallet():
    message = build_auth_message(WALLET.address)["message"]
    with pytest.raises(InvalidSignature, match="does not match"):
        verify_wallet_signature(WALLET.address, message, sign(message, OTHER_WALLET))


def test_garbage_signature():
    message = build_auth_message(WALLET.address)["message"]
    with pytest.raises(InvalidSignature, match="format"):
        verify_wallet_signature(WALLET.address, message, "0x1234")


def test_message_older_than_five_minutes():
    message = build_auth_message(WALLET.address, now=time.time() - 6 * 60)["message"]
    with pytest.raises(InvalidSignature, match="expired"):
        verify_wallet_signature(WALLET.address, message, sign(message))


def test_message_for_another_domain():
    data = json.loads(build_auth_message(WALLET.address)["message"])
    data["domain"] = "phish.example"
    message = json.dumps(data)
    with pytest.raises(InvalidSignature, match="Invalid authentication message"):
        verify_wallet_signature(WALLET.address, message, sign(message))


def test_plain_text_message_is_not_a_sign_in():
    message = "hello"
    with pytest.raises(InvalidSignature):
        verify_wallet_signature(WALLET.address, message, sign(message))


def test_wallet_login_issues_usable_token():
    client = TestClient(app)
    issued = client.get(f"/api/auth/message/{WALLET.address}").json()
    resp = client.post(
        "/api/auth/wallet",
        json={"address": WALLET.address, "message": issued["message"], "signature": sign(issued["message"])},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert decode_wallet_token(body["access_token"]) == WALLET.address.lower()

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json() == {"address": WALLET.address.lower()}


def test_wallet_login_rejects_bad_signature():
    client = TestClient(app)
    message = build_auth_message(WALLET.address)["message"]
    resp = client.post(
        "/api/auth/wallet",
        json={"address": WALLET.address, "message": message, "signature": sign(message, OTHER_WALLET)},
    )
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "InvalidSignature"
