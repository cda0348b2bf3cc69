# API Security - per-process request token
#
# The backend only answers the front end that launched it. One token is
# fixed at startup (VAULTKEEPER_API_TOKEN, or 256 random bits) and every
# request must carry it in the X-Session-Token header.

import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from ..config import get_settings

TOKEN_HEADER = "X-Session-Token"

_SESSION_TOKEN: Optional[str] = None


def initialize_session_token(token: Optional[str] = None) -> str:
    """
    Fix the token for this process.

    Uses ``token`` if given, else the configured ``api_token``, else a
    fresh random one.
    """
    global _SESSION_TOKEN
    _SESSION_TOKEN = token or get_settings().api_token or secrets.token_urlsafe(32)
    return _SESSION_TOKEN


def ensure_session_token() -> str:
    """Return the current token, creating one on first use."""
    return _SESSION_TOKEN or initialize_session_token()


async def verify_session_token(x_session_token: Optional[str] = Header(None)) -> str:
    """FastAPI dependency: 503 before startup, 401 for a missing or wrong token."""
    expected = _SESSION_TOKEN
    if expected is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Backend is still starting"
        )

    if not x_session_token or not secrets.compare_digest(
        x_session_token.encode('utf-8'), expected.encode('utf-8')
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing or invalid {TOKEN_HEADER} header"
        )

    return x_session_token
