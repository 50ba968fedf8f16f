"""API key check for the weather endpoints."""

import logging
import secrets
from typing import Optional

from fastapi import Header, HTTPException, Request

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Api-Key"


async def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(None, alias=API_KEY_HEADER)
) -> None:
    """Reject requests whose X-Api-Key header does not match the configured key.

    Raises:
        HTTPException: 401 if the header is missing or wrong, or no key is configured
    """
    expected = getattr(request.app.state, "api_key", "")

    if not x_api_key:
        logger.info(f"Missing {API_KEY_HEADER} header on {request.url.path}")
        raise HTTPException(status_code=401, detail="Unauthorized")

    if not expected or not secrets.compare_digest(x_api_key.encode(), expected.encode()):
        logger.warning(f"Invalid API key on {request.url.path}")
        raise HTTPException(status_code=401, detail="Unauthorized")
