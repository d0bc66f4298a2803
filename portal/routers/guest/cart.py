"""
Guest Cart Router

Session-scoped cart endpoints used by the booking modal, the sticky cart
and the checkout page. Every response carries the full cart summary.
"""
from fastapi import APIRouter, Depends

from portal.cart import CartManager, cart_summary
from portal.errors import (
    ERROR_DATE_REQUIRED,
    ERROR_UPSELL_NOT_FOUND,
    BookingValidationError,
    NotFoundError,
)
from portal.logging import get_logger, mask_token
from portal.services.backend import BackendClient
from ..deps import get_backend, get_cart_manager
from .models import AddToCartRequest, UpdateCartItemRequest

logger = get_logger(__name__)

router = APIRouter(tags=["guest-cart"])


async def _cart_response(manager: CartManager, currency: str, cart=None) -> dict:
    if cart is None:
        cart = await manager.get_cart()
    state = await manager.get_state(cart)
    return {
        "success": True,
        "cart": cart_summary(cart, currency),
        "state": state.value,
        "recovered": cart.recovered,
    }


@router.get("/cart/{access_token}")
async def get_cart(
    access_token: str,
    backend: BackendClient = Depends(get_backend),
    manager: CartManager = Depends(get_cart_manager),
):
    """Current cart with totals in the property's currency."""
    prop = await backend.get_property(access_token)
    return await _cart_response(manager, prop.currency)


@router.post("/cart/{access_token}/items")
async def add_to_cart(
    access_token: str,
    request: AddToCartRequest,
    backend: BackendClient = Depends(get_backend),
    manager: CartManager = Depends(get_cart_manager),
):
    """Book a service into the cart (always a new line item)."""
    if request.selected_date is None:
        raise BookingValidationError(ERROR_DATE_REQUIRED)

    prop = await backend.get_property(access_token)
    upsells = await backend.get_upsells(prop.id)
    upsell = next((u for u in upsells if u.id == request.upsell_id), None)
    if upsell is None:
        raise NotFoundError(ERROR_UPSELL_NOT_FOUND)
    if not upsell.is_active:
        raise BookingValidationError(f"{upsell.title} is not available for booking", status_code=400)

    cart = await manager.add_item(
        upsell=upsell,
        guest_count=request.guest_count,
        selected_date=request.selected_date,
        menu_options=request.menu_options,
        special_notes=request.special_notes,
    )
    logger.info(
        "Added upsell %s for %s guests to session %s",
        upsell.id, request.guest_count, mask_token(manager.session_id),
    )
    return await _cart_response(manager, prop.currency, cart)


@router.patch("/cart/{access_token}/items/{upsell_id}")
async def update_cart_item(
    access_token: str,
    upsell_id: int,
    request: UpdateCartItemRequest,
    backend: BackendClient = Depends(get_backend),
    manager: CartManager = Depends(get_cart_manager),
):
    """Change the guest count of a line item (clamped to 1..20)."""
    prop = await backend.get_property(access_token)
    cart = await manager.update_quantity(upsell_id, request.guest_count)
    return await _cart_response(manager, prop.currency, cart)


@router.delete("/cart/{access_token}/items/{upsell_id}")
async def remove_cart_item(
    access_token: str,
    upsell_id: int,
    backend: BackendClient = Depends(get_backend),
    manager: CartManager = Depends(get_cart_manager),
):
    """Remove a line item. Unknown ids leave the cart as it was."""
    prop = await backend.get_property(access_token)
    cart = await manager.remove_item(upsell_id)
    return await _cart_response(manager, prop.currency, cart)


@router.delete("/cart/{access_token}")
async def clear_cart(
    access_token: str,
    backend: BackendClient = Depends(get_backend),
    manager: CartManager = Depends(get_cart_manager),
):
    prop = await backend.get_property(access_token)
    await manager.clear_cart()
    return await _cart_response(manager, prop.currency)
