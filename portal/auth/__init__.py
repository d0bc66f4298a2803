"""Guest session package."""
from .session import (
    SESSION_COOKIE_NAME,
    SESSION_HEADER_NAME,
    create_session_id,
    get_session_id,
    is_valid_session_id,
)

__all__ = [
    "SESSION_COOKIE_NAME",
    "SESSION_HEADER_NAME",
    "create_session_id",
    "get_session_id",
    "is_valid_session_id",
]
