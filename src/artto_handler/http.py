"""Bearer-token gate for the FastAPI app."""

from __future__ import annotations

import hmac
import logging
from typing import Mapping, Optional

from fastapi.responses import JSONResponse

from .errors import AuthError

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized - Invalid or missing authentication"

_REDACTED_HEADERS = {"authorization", "cookie", "x-api-key"}


def redact_headers(headers: Mapping[str, str]) -> dict:
    return {
        key: "[REDACTED]" if key.lower() in _REDACTED_HEADERS else value
        for key, value in headers.items()
    }


def check_bearer(header: Optional[str], token: str) -> None:
    expected = f"Bearer {token}"
    if not header or not hmac.compare_digest(header.encode(), expected.encode()):
        raise AuthError(UNAUTHORIZED_MESSAGE)


def bearer_auth_middleware(token: str):
    """Build an ``http`` middleware rejecting requests without ``Bearer <token>``.

    Rejected requests never reach a route handler.
    """
    if not token:
        raise ValueError("bearer token must not be empty")

    async def middleware(request, call_next):
        logger.debug(
            "%s %s headers=%s",
            request.method,
            request.url.path,
            redact_headers(request.headers),
        )
        try:
            check_bearer(request.headers.get("authorization"), token)
        except AuthError as err:
            logger.info("Rejected %s %s: %s", request.method, request.url.path, err)
            return JSONResponse(content={"success": False, "error": str(err)}, status_code=401)
        return await call_next(request)

    return middleware
