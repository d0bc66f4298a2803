"""Backend Models - Pydantic schemas for everything the backend API returns."""
from decimal import Decimal
from datetime import datetime
from typing import Any, Literal, Optional
from pydantic import BaseModel, field_validator

from portal.services.money import parse_money


class WiseAccountDetails(BaseModel):
    """Bank-transfer account shown to guests paying by Wise."""
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    routing_number: Optional[str] = None
    swift_code: Optional[str] = None
    account_holder_name: Optional[str] = None
    instructions: Optional[str] = None

    class Config:
        extra = "ignore"


class Property(BaseModel):
    """Rental unit the access token belongs to."""
    id: int
    name: str
    description: Optional[str] = None
    instagram_url: Optional[str] = None
    language: str = "en"
    currency: str = "USD"
    tags: list[str] = []
    hero_image_url: Optional[str] = None
    access_token: Optional[str] = None
    payment_processor: Literal["stripe", "wise"] = "stripe"
    payout_schedule: Optional[str] = None  # manual | weekly | monthly
    wise_account_details: Optional[WiseAccountDetails] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v):
        return str(v or "USD").upper()


class Vendor(BaseModel):
    """Service provider behind an upsell."""
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp_number: Optional[str] = None
    service_type: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True

    class Config:
        extra = "ignore"


class Upsell(BaseModel):
    """Paid add-on service a guest may book. Owned by the backend."""
    id: int
    title: str
    description: str = ""
    price: Decimal
    category: str = ""
    image_url: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    property_id: Optional[int] = None
    primary_vendor_id: Optional[int] = None
    secondary_vendor_id: Optional[int] = None
    availability_rules: Optional[Any] = None
    primary_vendor: Optional[Vendor] = None
    secondary_vendor: Optional[Vendor] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        if v is None:
            raise ValueError("price is required")
        price = parse_money(v)
        if price < 0:
            raise ValueError("price must be non-negative")
        return price


class CheckIn(BaseModel):
    """Guest check-in record."""
    id: Optional[int] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    passport_url: Optional[str] = None
    check_in_time: Optional[datetime] = None

    class Config:
        extra = "ignore"


class PaymentIntentResult(BaseModel):
    """Backend answer to a card payment-intent request."""
    success: bool
    client_secret: Optional[str] = None
    message: Optional[str] = None

    class Config:
        extra = "ignore"


class BankTransferResult(BaseModel):
    """Backend answer to a Wise bank-transfer order request."""
    success: bool
    payment_url: Optional[str] = None
    message: Optional[str] = None

    class Config:
        extra = "ignore"
