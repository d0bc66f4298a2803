"""
Guest API Pydantic Models

Request bodies for cart and checkout endpoints.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from portal.cart import MAX_GUESTS, MIN_GUESTS
from portal.payments import PaymentOutcome


# ==================== CART MODELS ====================

class AddToCartRequest(BaseModel):
    upsell_id: int
    guest_count: int = Field(1, ge=MIN_GUESTS, le=MAX_GUESTS)
    selected_date: Optional[datetime] = None
    menu_options: str = Field("", max_length=1000)
    special_notes: str = Field("", max_length=2000)


class UpdateCartItemRequest(BaseModel):
    guest_count: int  # clamped to [1, 20], not rejected


# ==================== CHECKOUT MODELS ====================

class ConfirmPaymentRequest(BaseModel):
    outcome: PaymentOutcome
    message: Optional[str] = Field(None, max_length=500)
