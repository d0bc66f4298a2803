"""Line-item pricing: unit price times guest count, nothing else."""
from decimal import Decimal

from portal.services.money import Number, multiply

MIN_GUESTS = 1
MAX_GUESTS = 20


def price(unit_price: Number, guest_count: int) -> Decimal:
    """
    Total for one line item.

    No rounding, tiers or per-guest discounts. Callers clamp the guest count
    with clamp_guest_count() first; out-of-range input is not checked here.
    """
    return multiply(unit_price, guest_count)


def clamp_guest_count(guest_count: int) -> int:
    """Clamp a requested guest count to [MIN_GUESTS, MAX_GUESTS]."""
    return max(MIN_GUESTS, min(MAX_GUESTS, int(guest_count)))
