"""API key authentication dependency."""

from __future__ import annotations

import secrets
from typing import Optional

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from simctl_api.dependencies import get_settings
from simctl_api.utils.logging import get_logger

log = get_logger(__name__)

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_api_key(
    request: Request,
    api_key: Optional[str] = Security(_api_key_header),
) -> Optional[str]:
    """Reject requests whose X-API-Key does not match SIMCTL_API_KEY.

    The key is read from the settings the app was started with; a blank key
    turns the check off.
    """
    expected = get_settings(request).simctl_api_key
    if not expected:
        return None
    if api_key is None or not secrets.compare_digest(api_key.encode(), expected.encode()):
        log.warning(
            "auth.rejected",
            path=request.url.path,
            reason="missing" if api_key is None else "mismatch",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing X-API-Key",
        )
    return api_key
