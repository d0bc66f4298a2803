"""
Logging for the guest portal.

Usage:
    from portal.logging import get_logger, mask_token
    logger = get_logger(__name__)

    logger.info("Cart saved for session %s", mask_token(session_id))

Access tokens and session ids are bearer credentials: a guest holding one
can open the property page or take over the cart. They only reach the logs
through mask_token() / redact_path().
"""

import logging
import os
import re
import sys
from functools import cache
from typing import Optional

_DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# Vercel already timestamps every line
_VERCEL_FORMAT = "%(levelname)s - %(name)s - %(message)s"

# Route prefixes whose next path segment is a guest access token
_TOKEN_ROUTES = ("properties", "dashboard", "cart", "checkout", "checkin")
_TOKEN_PATH_RE = re.compile(r"/(%s)/([^/?#]+)" % "|".join(_TOKEN_ROUTES))

_CONTROL_CHARS = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})

# Chatty client libraries used for backend and Redis calls
_QUIET_LOGGERS = ("httpx", "httpcore", "upstash_redis")


def _configure_root_logger() -> None:
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    on_vercel = os.environ.get("VERCEL") == "1"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_VERCEL_FORMAT if on_vercel else _DETAILED_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_configure_root_logger()


@cache
def get_logger(name: str) -> logging.Logger:
    """Module logger; the root handler is installed on first import."""
    return logging.getLogger(name)


def mask_token(value: Optional[str], visible: int = 6) -> str:
    """
    Mask an access token or session id, keeping a short prefix and the length.

    "tok-villa-123" -> "tok-vi…(13)"
    """
    if not value:
        return "N/A"
    value = str(value).translate(_CONTROL_CHARS)
    if len(value) <= visible:
        return f"…({len(value)})"
    return f"{value[:visible]}…({len(value)})"


def redact_path(path: str) -> str:
    """Mask the access token segment of a guest API path."""
    return _TOKEN_PATH_RE.sub(lambda m: f"/{m.group(1)}/{mask_token(m.group(2))}", path)


def clip_text(value: Optional[str], max_length: int = 80) -> str:
    """Single-line, length-capped rendering of free text (notes, backend messages)."""
    if not value:
        return "N/A"
    value = str(value).translate(_CONTROL_CHARS)
    if len(value) <= max_length:
        return value
    return value[:max_length] + "..."


__all__ = ["get_logger", "mask_token", "redact_path", "clip_text"]
