import hashlib
import hmac
import json
import logging
from datetime import datetime, timezone

import httpx

from tempo_splits.core.config import settings

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Tempo-Signature"


def sign_payload(body: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def build_body(event: str, data: dict) -> bytes:
    payload = {
        "event": event,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }
    return json.dumps(payload, separators=(",", ":"), default=str).encode()


async def send_event(url: str | None, event: str, data: dict) -> bool:
    """POST a signed event to a split's webhook. Returns False if delivery failed."""
    if not url:
        return False

    body = build_body(event, data)
    headers = {"Content-Type": "application/json"}
    if settings.webhook_secret:
        headers[SIGNATURE_HEADER] = sign_payload(body, settings.webhook_secret)

    try:
        async with httpx.AsyncClient(timeout=settings.webhook_timeout) as client:
            resp = await client.post(url, content=body, headers=headers)
            resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Webhook {event} to {url} failed: {e}")
        return False

    logger.info(f"Delivered webhook {event} to {url}")
    return True
