"""
Shared Dependencies for Routers

Lazy-loaded singletons to optimize cold start.
Import heavy modules only when needed.
"""

from typing import TYPE_CHECKING

from fastapi import Depends

from portal.auth import get_session_id

if TYPE_CHECKING:
    from portal.cart import CartManager
    from portal.services.backend import BackendClient
    from portal.services.payments import PaymentService


def get_backend() -> "BackendClient":
    """Get BackendClient singleton (lazy loaded)"""
    from portal.services.backend import get_backend_client
    return get_backend_client()


def get_payments() -> "PaymentService":
    """Get PaymentService singleton (lazy loaded)"""
    from portal.services.payments import get_payment_service
    return get_payment_service()


def get_cart_manager(session_id: str = Depends(get_session_id)) -> "CartManager":
    """CartManager bound to the caller's browser session."""
    from portal.cart import get_cart_manager as _get_cart_manager
    return _get_cart_manager(session_id)
