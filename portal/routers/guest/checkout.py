"""
Guest Checkout Router

Checkout entry, card and bank-transfer payment start, payment confirmation
and the success page. The portal never sees card data: the card widget
confirms the intent in the browser and reports the outcome here.
"""
import os

from fastapi import APIRouter, Depends

from portal.cart import CartManager, CheckoutState, cart_summary
from portal.errors import ERROR_CART_CORRUPT, ERROR_CART_EMPTY, CorruptStateError, EmptyCartError
from portal.logging import get_logger, mask_token
from portal.payments import PaymentMethod, available_methods, default_method, validate_processor_config
from portal.services.backend import BackendClient
from portal.services.payments import PaymentService
from ..deps import get_backend, get_cart_manager, get_payments
from .models import ConfirmPaymentRequest

logger = get_logger(__name__)

router = APIRouter(tags=["guest-checkout"])


def _dashboard_path(access_token: str) -> str:
    return f"/guest/{access_token}"


@router.get("/checkout/{access_token}")
async def get_checkout(
    access_token: str,
    backend: BackendClient = Depends(get_backend),
    manager: CartManager = Depends(get_cart_manager),
):
    """
    Checkout entry.

    An empty or unreadable cart is removed and the guest is sent back to
    the dashboard.
    """
    cart = await manager.get_cart()
    if cart.recovered:
        await manager.clear_cart()
        raise CorruptStateError(ERROR_CART_CORRUPT, redirect=_dashboard_path(access_token))
    if cart.is_empty:
        await manager.clear_cart()
        raise EmptyCartError(ERROR_CART_EMPTY, redirect=_dashboard_path(access_token))

    prop = await backend.get_property(access_token)
    methods = available_methods(prop)
    state = await manager.get_state(cart)

    return {
        "property": prop.model_dump(mode="json", exclude={"access_token", "wise_account_details"}),
        "cart": cart_summary(cart, prop.currency),
        "state": state.value,
        "payment_methods": methods,
        "default_payment_method": default_method(prop),
        "wise_account_details": (
            prop.wise_account_details.model_dump()
            if PaymentMethod.BANK_TRANSFER.value in methods and prop.wise_account_details
            else None
        ),
        "stripe_publishable_key": (
            os.environ.get("STRIPE_PUBLISHABLE_KEY") or None
            if PaymentMethod.CARD.value in methods
            else None
        ),
    }


@router.post("/checkout/{access_token}/card")
async def start_card_payment(
    access_token: str,
    backend: BackendClient = Depends(get_backend),
    manager: CartManager = Depends(get_cart_manager),
    payments: PaymentService = Depends(get_payments),
):
    """Create a card payment intent; the widget confirms it with the client secret."""
    validate_processor_config("stripe")
    prop = await backend.get_property(access_token)
    return await payments.start_card_payment(manager, prop, access_token)


@router.post("/checkout/{access_token}/bank-transfer")
async def start_bank_transfer(
    access_token: str,
    backend: BackendClient = Depends(get_backend),
    manager: CartManager = Depends(get_cart_manager),
    payments: PaymentService = Depends(get_payments),
):
    """Create a Wise bank-transfer order."""
    prop = await backend.get_property(access_token)
    result = await payments.start_bank_transfer(manager, prop, access_token)
    if result.get("state") == CheckoutState.PAID.value:
        result["redirect"] = f"/checkout/success/{access_token}"
    return result


@router.post("/checkout/{access_token}/confirm")
async def confirm_payment(
    access_token: str,
    request: ConfirmPaymentRequest,
    manager: CartManager = Depends(get_cart_manager),
    payments: PaymentService = Depends(get_payments),
):
    """Outcome reported by the card widget. Failure keeps the cart for a retry."""
    logger.info(
        "Payment outcome %s for session %s",
        request.outcome.value, mask_token(manager.session_id),
    )
    result = await payments.confirm_payment(manager, request.outcome, request.message)
    result["redirect"] = f"/checkout/success/{access_token}"
    return result


@router.post("/checkout/{access_token}/success")
async def checkout_success(
    access_token: str,
    manager: CartManager = Depends(get_cart_manager),
    payments: PaymentService = Depends(get_payments),
):
    """Success page: clears the cart."""
    result = await payments.complete_checkout(manager)
    result["dashboard"] = _dashboard_path(access_token)
    return result
