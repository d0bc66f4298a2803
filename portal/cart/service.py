"""Cart mutators and the per-session cart manager."""
from dataclasses import replace
from datetime import datetime
from typing import Optional

from portal.db import SessionStorage, get_session_storage
from portal.logging import get_logger, mask_token
from portal.services.models import Upsell
from .checkout import CheckoutEvent, CheckoutState, can_transition, transition
from .models import CartItem, Cart
from .pricing import clamp_guest_count
from .storage import CartStore, CheckoutStateStore

logger = get_logger(__name__)


# ==================== PURE MUTATORS ====================

def add_item(
    cart: Cart,
    upsell: Upsell,
    guest_count: int,
    selected_date: Optional[datetime] = None,
    menu_options: str = "",
    special_notes: str = "",
) -> Cart:
    """
    Append a new line item.

    Booking the same upsell twice yields two line items: each booking may
    carry its own date and notes, so nothing is merged.
    """
    item = CartItem(
        upsell=upsell,
        guest_count=guest_count,
        selected_date=selected_date,
        menu_options=menu_options or "",
        special_notes=special_notes or "",
    )
    return Cart(items=[*cart.items, item])


def remove_item(cart: Cart, upsell_id: int) -> Cart:
    """Drop line items for the upsell. Unknown ids leave the cart unchanged."""
    return Cart(items=[item for item in cart.items if item.upsell_id != upsell_id])


def update_quantity(cart: Cart, upsell_id: int, new_guest_count: int) -> Cart:
    """Set a clamped guest count on matching items, keeping their position."""
    guest_count = clamp_guest_count(new_guest_count)
    return Cart(
        items=[
            replace(item, guest_count=guest_count) if item.upsell_id == upsell_id else item
            for item in cart.items
        ]
    )


# ==================== MANAGER ====================

class CartManager:
    """
    Load -> mutate -> save for one browser session.

    Also keeps the checkout state in step with the cart:
    - first item added moves browsing -> cart_populated
    - cart emptied by removal moves back to browsing
    - a booking after a paid checkout opens a new flow
    """

    def __init__(self, storage: SessionStorage, session_id: str):
        self.session_id = session_id
        self.store = CartStore(storage, session_id)
        self.state_store = CheckoutStateStore(storage, session_id)

    async def get_cart(self) -> Cart:
        return await self.store.load()

    async def get_state(self, cart: Optional[Cart] = None) -> CheckoutState:
        """Stored checkout state, derived from the cart when none is stored."""
        state = await self.state_store.load()
        if cart is None:
            cart = await self.get_cart()
        if state is None:
            return CheckoutState.BROWSING if cart.is_empty else CheckoutState.CART_POPULATED
        if state in (CheckoutState.CART_POPULATED, CheckoutState.FAILED) and cart.is_empty:
            # Cart record expired, was discarded as corrupt, or was cleared
            return CheckoutState.BROWSING
        return state

    async def apply(self, event: CheckoutEvent, cart: Optional[Cart] = None) -> CheckoutState:
        """Run a checkout event against the current state and persist the result."""
        current = await self.get_state(cart)
        new_state = transition(current, event)
        await self.state_store.save(new_state)
        logger.info(
            "Checkout %s: %s -> %s",
            mask_token(self.session_id), current.value, new_state.value,
        )
        return new_state

    async def add_item(
        self,
        upsell: Upsell,
        guest_count: int,
        selected_date: Optional[datetime] = None,
        menu_options: str = "",
        special_notes: str = "",
    ) -> Cart:
        cart = await self.get_cart()
        cart = add_item(cart, upsell, clamp_guest_count(guest_count), selected_date, menu_options, special_notes)
        await self.store.save(cart)

        # A paid flow is over; the new booking opens the next one
        if not can_transition(await self.get_state(cart), CheckoutEvent.ITEM_ADDED):
            await self.state_store.save(CheckoutState.BROWSING)
        await self.apply(CheckoutEvent.ITEM_ADDED, cart)
        return cart

    async def remove_item(self, upsell_id: int) -> Cart:
        before = await self.get_cart()
        cart = remove_item(before, upsell_id)
        await self.store.save(cart)

        if cart.is_empty and not before.is_empty:
            state = await self.get_state(before)
            if can_transition(state, CheckoutEvent.CART_EMPTIED):
                await self.apply(CheckoutEvent.CART_EMPTIED, before)
        return cart

    async def update_quantity(self, upsell_id: int, new_guest_count: int) -> Cart:
        cart = update_quantity(await self.get_cart(), upsell_id, new_guest_count)
        await self.store.save(cart)
        return cart

    async def clear_cart(self) -> None:
        await self.store.clear()


def get_cart_manager(session_id: str, storage: Optional[SessionStorage] = None) -> CartManager:
    """Build a CartManager for the session on the shared session storage."""
    return CartManager(storage or get_session_storage(), session_id)
