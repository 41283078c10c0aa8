"""
FastAPI dependencies for session authentication.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status, Request

from .service import access_key_service

SESSION_COOKIE = "session_key"


async def get_session_key(request: Request) -> Optional[str]:
    """Extract the access key from the session cookie"""
    return request.cookies.get(SESSION_COOKIE)


async def has_valid_session(
    session_key: Optional[str] = Depends(get_session_key),
) -> bool:
    """True when the session cookie holds a valid, unexpired key"""
    return access_key_service.is_valid(session_key)


async def require_session(
    valid: bool = Depends(has_valid_session),
) -> None:
    """
    Require a valid session for API endpoints.

    Raises 401 if the cookie is missing, unknown or expired.
    """
    if not valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized",
        )
