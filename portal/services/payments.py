"""Payment Service - card (Stripe) and bank transfer (Wise) checkout.

The portal never talks to a payment network. It hands the cart payload to
the backend, which creates the Stripe payment intent or the Wise order, and
drives the checkout state from the outcome:
- card: intent created -> awaiting_payment; the widget reports the result
- bank transfer with payment_url -> awaiting_payment until the guest returns
- bank transfer without payment_url -> instructions only, checkout is done
"""

from typing import Any, Optional

from portal.cart import CartManager, CheckoutEvent, CheckoutState, build_payment_request, total_amount
from portal.cart.checkout import cart_summary
from portal.errors import (
    ERROR_BANK_TRANSFER,
    ERROR_CART_EMPTY,
    ERROR_METHOD_UNAVAILABLE,
    ERROR_PAYMENT_FAILED,
    ERROR_PAYMENT_INTENT,
    BookingValidationError,
    EmptyCartError,
    PaymentFailedError,
    PortalError,
)
from portal.logging import clip_text, get_logger, mask_token
from portal.payments import PaymentMethod, PaymentOutcome, available_methods
from portal.services.backend import BackendClient, get_backend_client
from portal.services.models import Property
from portal.services.money import format_money, to_float

logger = get_logger(__name__)


class PaymentService:
    """Starts and settles checkout payments for one portal process."""

    def __init__(self, backend: Optional[BackendClient] = None):
        self._backend = backend

    @property
    def backend(self) -> BackendClient:
        if self._backend is None:
            self._backend = get_backend_client()
        return self._backend

    async def _prepare(self, manager: CartManager, prop: Property, method: PaymentMethod):
        if method.value not in available_methods(prop):
            raise BookingValidationError(ERROR_METHOD_UNAVAILABLE, status_code=400)
        cart = await manager.get_cart()
        if cart.is_empty:
            raise EmptyCartError(ERROR_CART_EMPTY)
        await manager.apply(CheckoutEvent.PAYMENT_STARTED, cart)
        return cart

    async def _fail(self, manager: CartManager, message: str, cause: Optional[Exception] = None):
        """Record the failure (cart kept) and raise it to the guest."""
        await manager.apply(CheckoutEvent.PAYMENT_FAILED)
        logger.warning(
            "Payment failed for session %s: %s",
            mask_token(manager.session_id), clip_text(message),
        )
        raise PaymentFailedError(message) from cause

    # ==================== CARD ====================

    async def start_card_payment(
        self,
        manager: CartManager,
        prop: Property,
        access_token: str,
    ) -> dict[str, Any]:
        """Create a payment intent for the cart and return its client secret."""
        cart = await self._prepare(manager, prop, PaymentMethod.CARD)
        payload = build_payment_request(access_token, cart)

        try:
            result = await self.backend.create_payment_intent(payload)
        except PortalError as e:
            await self._fail(manager, e.message, e)

        if not result.success or not result.client_secret:
            await self._fail(manager, result.message or ERROR_PAYMENT_INTENT)

        amount = total_amount(cart)
        logger.info(
            "Payment intent created for session %s (%s items)",
            mask_token(manager.session_id), len(cart.items),
        )
        return {
            "success": True,
            "client_secret": result.client_secret,
            "total_amount": to_float(amount),
            "total_amount_formatted": format_money(amount, prop.currency),
            "currency": prop.currency,
            "state": CheckoutState.AWAITING_PAYMENT.value,
        }

    # ==================== BANK TRANSFER ====================

    async def start_bank_transfer(
        self,
        manager: CartManager,
        prop: Property,
        access_token: str,
    ) -> dict[str, Any]:
        """Create a Wise order; redirect to Wise or finish with transfer instructions."""
        cart = await self._prepare(manager, prop, PaymentMethod.BANK_TRANSFER)
        payload = build_payment_request(access_token, cart)

        try:
            result = await self.backend.create_bank_transfer(payload)
        except PortalError as e:
            await self._fail(manager, e.message, e)

        if not result.success:
            await self._fail(manager, result.message or ERROR_BANK_TRANSFER)

        if result.payment_url:
            return {
                "success": True,
                "payment_url": result.payment_url,
                "state": CheckoutState.AWAITING_PAYMENT.value,
            }

        summary = cart_summary(cart, prop.currency)
        state = await self._settle(manager)
        details = prop.wise_account_details
        return {
            "success": True,
            "message": "Order created! Please complete bank transfer.",
            "instructions": details.model_dump() if details else None,
            "total_amount": summary["total_amount"],
            "total_amount_formatted": summary["total_amount_formatted"],
            "state": state.value,
        }

    # ==================== SETTLEMENT ====================

    async def _settle(self, manager: CartManager) -> CheckoutState:
        state = await manager.apply(CheckoutEvent.PAYMENT_SUCCEEDED)
        await manager.clear_cart()
        logger.info("Checkout paid for session %s", mask_token(manager.session_id))
        return state

    async def confirm_payment(
        self,
        manager: CartManager,
        outcome: PaymentOutcome,
        message: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Apply the outcome reported by the payment widget.

        Success clears the cart; failure keeps it for a retry.
        """
        if outcome == PaymentOutcome.SUCCEEDED:
            state = await self._settle(manager)
            return {"success": True, "message": "Payment successful!", "state": state.value}

        await self._fail(manager, message or ERROR_PAYMENT_FAILED)

    async def complete_checkout(self, manager: CartManager) -> dict[str, Any]:
        """
        Success page: the cart is cleared unconditionally.

        A pending bank-transfer redirect is settled here when the guest returns.
        """
        state = await manager.get_state()
        if state == CheckoutState.AWAITING_PAYMENT:
            state = await self._settle(manager)
        else:
            await manager.clear_cart()
        return {"success": True, "state": state.value}


_payment_service: Optional[PaymentService] = None


def get_payment_service() -> PaymentService:
    """Get PaymentService singleton."""
    global _payment_service
    if _payment_service is None:
        _payment_service = PaymentService()
    return _payment_service
