"""Cart package: pricing, models, storage, mutators and checkout aggregation."""
from .checkout import (
    CheckoutEvent,
    CheckoutState,
    build_payment_request,
    cart_summary,
    total_amount,
    total_guests,
    transition,
)
from .models import CartItem, Cart
from .pricing import MAX_GUESTS, MIN_GUESTS, clamp_guest_count, price
from .service import CartManager, add_item, get_cart_manager, remove_item, update_quantity
from .storage import CartStore, CheckoutStateStore

__all__ = [
    "CartItem",
    "Cart",
    "CartManager",
    "CartStore",
    "CheckoutStateStore",
    "CheckoutEvent",
    "CheckoutState",
    "MAX_GUESTS",
    "MIN_GUESTS",
    "add_item",
    "build_payment_request",
    "cart_summary",
    "clamp_guest_count",
    "get_cart_manager",
    "price",
    "remove_item",
    "total_amount",
    "total_guests",
    "transition",
    "update_quantity",
]
