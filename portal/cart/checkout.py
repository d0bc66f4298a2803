"""
Checkout aggregation and the checkout state machine.

Flow:
    browsing -> cart_populated -> awaiting_payment -> paid
                                                   -> failed -> awaiting_payment (retry)
    cart_populated -> browsing  (cart emptied by removal)

- paid is terminal: the cart has been cleared and the flow is over
- failed keeps the cart so the guest can retry
"""
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from portal.errors import InvalidTransitionError
from portal.services.money import format_money, to_float
from .models import Cart


class CheckoutState(str, Enum):
    BROWSING = "browsing"
    CART_POPULATED = "cart_populated"
    AWAITING_PAYMENT = "awaiting_payment"
    PAID = "paid"
    FAILED = "failed"


class CheckoutEvent(str, Enum):
    ITEM_ADDED = "item_added"
    CART_EMPTIED = "cart_emptied"
    PAYMENT_STARTED = "payment_started"
    PAYMENT_FAILED = "payment_failed"
    PAYMENT_SUCCEEDED = "payment_succeeded"


TRANSITIONS: Dict[CheckoutState, Dict[CheckoutEvent, CheckoutState]] = {
    CheckoutState.BROWSING: {
        CheckoutEvent.ITEM_ADDED: CheckoutState.CART_POPULATED,
    },
    CheckoutState.CART_POPULATED: {
        CheckoutEvent.ITEM_ADDED: CheckoutState.CART_POPULATED,
        CheckoutEvent.CART_EMPTIED: CheckoutState.BROWSING,
        CheckoutEvent.PAYMENT_STARTED: CheckoutState.AWAITING_PAYMENT,
    },
    CheckoutState.AWAITING_PAYMENT: {
        CheckoutEvent.PAYMENT_SUCCEEDED: CheckoutState.PAID,
        CheckoutEvent.PAYMENT_FAILED: CheckoutState.FAILED,
        # Duplicate submissions are not blocked; a new intent replaces the old one
        CheckoutEvent.PAYMENT_STARTED: CheckoutState.AWAITING_PAYMENT,
        # Guest went back to the dashboard and kept shopping
        CheckoutEvent.ITEM_ADDED: CheckoutState.CART_POPULATED,
        CheckoutEvent.CART_EMPTIED: CheckoutState.BROWSING,
    },
    CheckoutState.FAILED: {
        CheckoutEvent.PAYMENT_STARTED: CheckoutState.AWAITING_PAYMENT,
        CheckoutEvent.ITEM_ADDED: CheckoutState.CART_POPULATED,
        CheckoutEvent.CART_EMPTIED: CheckoutState.BROWSING,
    },
    CheckoutState.PAID: {},
}


def transition(state: CheckoutState, event: CheckoutEvent) -> CheckoutState:
    """Return the next state or raise InvalidTransitionError."""
    next_state = TRANSITIONS[state].get(event)
    if next_state is None:
        raise InvalidTransitionError(
            f"Cannot handle '{event.value}' while checkout is '{state.value}'"
        )
    return next_state


def can_transition(state: CheckoutState, event: CheckoutEvent) -> bool:
    return event in TRANSITIONS[state]


def total_amount(cart: Cart) -> Decimal:
    """Sum of all line item totals (0 for an empty cart)."""
    return sum((item.total_price for item in cart.items), Decimal("0"))


def total_guests(cart: Cart) -> int:
    """Sum of all line item guest counts (0 for an empty cart)."""
    return sum(item.guest_count for item in cart.items)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """UTC ISO-8601 with millisecond precision and a 'Z' suffix, like a browser sends."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_payment_request(access_token: str, cart: Cart) -> Dict[str, Any]:
    """
    Payload for payment-intent and bank-transfer order creation.

    selected_date is omitted for items booked without a date.
    """
    cart_items = []
    for item in cart.items:
        entry: Dict[str, Any] = {
            "upsell_id": item.upsell_id,
            "guest_count": item.guest_count,
            "total_price": to_float(item.total_price),
            "menu_options": item.menu_options,
            "special_notes": item.special_notes,
        }
        selected_date = to_iso(item.selected_date)
        if selected_date is not None:
            entry["selected_date"] = selected_date
        cart_items.append(entry)

    return {"access_token": access_token, "cart_items": cart_items}


def cart_summary(cart: Cart, currency: str = "USD") -> Dict[str, Any]:
    """Cart view shared by dashboard, sticky cart and checkout responses."""
    amount = total_amount(cart)
    return {
        "is_empty": cart.is_empty,
        "items": [
            {
                "upsell_id": item.upsell_id,
                "title": item.upsell.title,
                "category": item.upsell.category,
                "image_url": item.upsell.image_url,
                "unit_price": to_float(item.upsell.price),
                "guest_count": item.guest_count,
                "selected_date": to_iso(item.selected_date),
                "menu_options": item.menu_options,
                "special_notes": item.special_notes,
                "total_price": to_float(item.total_price),
                "total_price_formatted": format_money(item.total_price, currency),
            }
            for item in cart.items
        ],
        "item_count": len(cart.items),
        "total_amount": to_float(amount),
        "total_amount_formatted": format_money(amount, currency),
        "total_guests": total_guests(cart),
        "currency": currency,
    }
