"""
Guest Public Router

Property lookup and the services dashboard. The access token in the path is
the only credential a guest has.
"""
import os

from fastapi import APIRouter, Depends

from portal.cart import CartManager, cart_summary
from portal.errors import ERROR_CART_CORRUPT
from portal.logging import get_logger
from portal.payments import PaymentProcessor, available_methods, is_processor_configured
from portal.services.backend import BackendClient
from portal.services.money import format_money, to_float
from ..deps import get_backend, get_cart_manager

logger = get_logger(__name__)

router = APIRouter(tags=["guest-public"])


@router.get("/config")
async def get_portal_config():
    """Frontend-facing configuration."""
    return {
        "stripe_publishable_key": os.environ.get("STRIPE_PUBLISHABLE_KEY") or None,
        "card_payments_enabled": is_processor_configured(PaymentProcessor.STRIPE.value),
    }


@router.get("/properties/{access_token}")
async def get_property(access_token: str, backend: BackendClient = Depends(get_backend)):
    """Validate an access token and return the property welcome data."""
    prop = await backend.get_property(access_token)
    return {"property": prop.model_dump(mode="json", exclude={"access_token", "wise_account_details"})}


@router.get("/dashboard/{access_token}")
async def get_dashboard(
    access_token: str,
    backend: BackendClient = Depends(get_backend),
    manager: CartManager = Depends(get_cart_manager),
):
    """Property, bookable services and the sticky cart in one call."""
    prop = await backend.get_property(access_token)
    upsells = await backend.get_upsells(prop.id)
    cart = await manager.get_cart()

    return {
        "property": prop.model_dump(mode="json", exclude={"access_token", "wise_account_details"}),
        "upsells": [
            {
                **upsell.model_dump(mode="json"),
                "price": to_float(upsell.price),
                "price_formatted": format_money(upsell.price, prop.currency),
            }
            for upsell in upsells
        ],
        "cart": cart_summary(cart, prop.currency),
        "payment_methods": available_methods(prop),
        # Shown once when a corrupt stored cart was discarded
        "notice": ERROR_CART_CORRUPT if cart.recovered else None,
    }
