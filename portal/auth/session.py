"""Guest browser sessions.

A session id lives in a cookie without Max-Age/Expires, so it ends with the
browser session and is never shared between independent browser sessions.
Frontends on another origin may send the id in X-Guest-Session instead.
"""
import os
import re
import secrets
from typing import Optional

from fastapi import Cookie, Header, Response

SESSION_COOKIE_NAME = "guest_session"
SESSION_HEADER_NAME = "X-Guest-Session"
SESSION_COOKIE_SECURE = os.environ.get("SESSION_COOKIE_SECURE", "1") != "0"

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]{32,64}$")


def create_session_id() -> str:
    """Create a new opaque session id."""
    return secrets.token_urlsafe(32)


def is_valid_session_id(value: Optional[str]) -> bool:
    return bool(value) and bool(_SESSION_ID_RE.match(value))


async def get_session_id(
    response: Response,
    guest_session: Optional[str] = Cookie(None, alias=SESSION_COOKIE_NAME),
    x_guest_session: Optional[str] = Header(None, alias=SESSION_HEADER_NAME),
) -> str:
    """
    Resolve the browser session, starting a new one when none is presented.

    Malformed ids are replaced rather than trusted as storage keys.
    """
    session_id = x_guest_session if is_valid_session_id(x_guest_session) else guest_session
    if not is_valid_session_id(session_id):
        session_id = create_session_id()

    # Session cookie: no max_age/expires
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session_id,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )
    response.headers[SESSION_HEADER_NAME] = session_id
    return session_id
