"""Guest Portal API Router.

Endpoints for the guest web frontend (check-in, services dashboard, cart,
checkout). Combines all sub-routers into a single router with prefix
/api/guest.
"""

from fastapi import APIRouter

from .cart import router as cart_router
from .checkin import router as checkin_router
from .checkout import router as checkout_router
from .public import router as public_router

# Create main router with prefix
router = APIRouter(prefix="/api/guest", tags=["guest"])

router.include_router(public_router)
router.include_router(checkin_router)
router.include_router(cart_router)
router.include_router(checkout_router)

__all__ = ["router"]
