import hmac
from typing import Any

from fastapi import Header, HTTPException

from .config import ADMIN_TOKEN
from .errors import CycleInputError, MatchingError, StoreUnavailableError


def validate_admin_token(token: str | None, admin_token: str | None) -> None:
    if not admin_token or not token or not hmac.compare_digest(token, admin_token):
        raise HTTPException(status_code=401, detail="Invalid admin token")


def require_admin_token(x_admin_token: str | None = Header(default=None)) -> None:
    validate_admin_token(x_admin_token, ADMIN_TOKEN)


def error_detail(exc: MatchingError) -> dict[str, Any]:
    return {
        "success": False,
        "message": exc.detail,
        "reason": exc.reason,
        "trace_id": exc.trace_id,
    }


def http_error_for(exc: MatchingError) -> HTTPException:
    if isinstance(exc, CycleInputError):
        return HTTPException(status_code=400, detail=error_detail(exc))
    if isinstance(exc, StoreUnavailableError):
        return HTTPException(status_code=503, detail=error_detail(exc))
    return HTTPException(status_code=500, detail=error_detail(exc))
