from fastapi import HTTPException

from tempo_splits.core.errors import (
    InvalidSignature,
    PaymentLinkUnavailable,
    PaymentNotFound,
    SplitError,
    SplitNotFound,
    Unauthorized,
)

_STATUS = {
    InvalidSignature: 401,
    Unauthorized: 403,
    SplitNotFound: 404,
    PaymentNotFound: 404,
    PaymentLinkUnavailable: 404,
}


def to_http(e: SplitError) -> HTTPException:
    status_code = next((code for cls, code in _STATUS.items() if isinstance(e, cls)), 400)
    return HTTPException(status_code=status_code, detail={"error": str(e), "code": e.code})
