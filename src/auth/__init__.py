"""
Authentication module.

Dashboard access is granted by time-limited access keys:
- Keys loaded from a JSON file with an expiry date each
- Login exchanges a key for a session cookie
- API endpoints require a valid session
"""

from .models import AccessKey
from .service import AccessKeyService, access_key_service
from .dependencies import get_session_key, has_valid_session, require_session

__all__ = [
    "AccessKey",
    "AccessKeyService",
    "access_key_service",
    "get_session_key",
    "has_valid_session",
    "require_session",
]
