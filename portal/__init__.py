"""
Guest Portal Core Module

This package contains the guest-facing portal components:
- db: session storage clients (Upstash Redis or in-memory)
- cart: session-scoped cart, pricing and checkout aggregation
- services: backend API client, money helpers, pydantic schemas
- payments: payment processor constants and configuration
- routers: FastAPI endpoints for the guest frontend

Note: Imports are lazy to keep module loading cheap in serverless environments.
"""

__all__ = [
    "get_redis",
    "get_session_storage",
    "get_backend_client",
]


def __getattr__(name):
    """Lazy attribute access for clean serverless loading."""
    if name == "get_redis":
        from portal.db import get_redis
        return get_redis
    elif name == "get_session_storage":
        from portal.db import get_session_storage
        return get_session_storage
    elif name == "get_backend_client":
        from portal.services.backend import get_backend_client
        return get_backend_client
    raise AttributeError(f"module 'portal' has no attribute '{name}'")
