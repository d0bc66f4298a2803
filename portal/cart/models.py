"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from portal.services.models import Upsell
from .pricing import MIN_GUESTS, MAX_GUESTS, price


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string (a trailing 'Z' included) back into a datetime."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass
class CartItem:
    """One booked-but-unpaid service inside the cart."""
    upsell: Upsell
    guest_count: int
    selected_date: Optional[datetime] = None
    menu_options: str = ""
    special_notes: str = ""

    @property
    def upsell_id(self) -> int:
        return self.upsell.id

    @property
    def total_price(self) -> Decimal:
        """Always unit price times guest count."""
        return price(self.upsell.price, self.guest_count)

    def to_dict(self) -> dict:
        """Convert to dictionary for session storage."""
        return {
            "upsell": self.upsell.model_dump(mode="json"),
            "guest_count": self.guest_count,
            "selected_date": self.selected_date.isoformat() if self.selected_date else None,
            "menu_options": self.menu_options,
            "special_notes": self.special_notes,
            "total_price": str(self.total_price),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        """
        Create from dictionary.

        The stored total_price is informational only; it is recomputed from
        the upsell price so a tampered record cannot change what is charged.
        """
        guest_count = data["guest_count"]
        # JSON booleans decode to bool, a subclass of int
        if not isinstance(guest_count, int) or isinstance(guest_count, bool):
            raise TypeError(f"guest_count must be an integer, got {guest_count!r}")
        if not MIN_GUESTS <= guest_count <= MAX_GUESTS:
            raise ValueError(f"guest_count out of range: {guest_count}")
        return cls(
            upsell=Upsell.model_validate(data["upsell"]),
            guest_count=guest_count,
            selected_date=parse_datetime(data.get("selected_date")),
            menu_options=data.get("menu_options") or "",
            special_notes=data.get("special_notes") or "",
        )


@dataclass
class Cart:
    """Ordered line items for one browser session."""
    items: List[CartItem] = field(default_factory=list)
    # Set when a corrupt stored record was discarded on load; never persisted
    recovered: bool = field(default=False, compare=False)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, upsell_id: int) -> Optional[CartItem]:
        return next((item for item in self.items if item.upsell_id == upsell_id), None)

    def to_list(self) -> list:
        """Serialize the line item sequence for session storage."""
        return [item.to_dict() for item in self.items]

    @classmethod
    def from_list(cls, data: list) -> "Cart":
        if not isinstance(data, list):
            raise TypeError(f"cart record must be a list, got {type(data).__name__}")
        return cls(items=[CartItem.from_dict(item) for item in data])
