"""
Common Error Constants and Portal Exceptions

Centralized error messages shared by the backend client, cart and routers.
Every portal failure is recoverable by the guest (re-enter token, fix the
form, retry payment), so each exception carries the user-facing message and
the HTTP status used to render it.
"""
from typing import Optional

# Access token errors
ERROR_ACCESS_DENIED = "Access denied. Please check your access token."
ERROR_INVALID_TOKEN = "Property not found or access token is invalid."

# Cart errors
ERROR_CART_EMPTY = "No items in cart"
ERROR_CART_CORRUPT = "Failed to load cart items"
ERROR_UPSELL_NOT_FOUND = "Service not found"

# Booking validation errors
ERROR_DATE_REQUIRED = "Select Date to Continue"
ERROR_CHECK_FORM = "Please check your information and try again."
ERROR_FILE_TYPE = "Please upload an image or PDF file"
ERROR_FILE_TOO_LARGE = "File size must be less than 5MB"

# Payment errors
ERROR_PAYMENT_FAILED = "Payment failed. Please try again."
ERROR_PAYMENT_INTENT = "Failed to create payment intent"
ERROR_BANK_TRANSFER = "Failed to create Wise payment"
ERROR_METHOD_UNAVAILABLE = "Payment method is not available for this property"

# Generic errors
ERROR_SERVER = "Server error. Please try again later."
ERROR_UNEXPECTED = "An unexpected error occurred."
ERROR_STORAGE_UNAVAILABLE = "Cart service unavailable"
ERROR_CHECK_IN_FAILED = "Failed to complete check-in. Please try again."


class PortalError(Exception):
    """Base class for all guest portal failures."""

    kind = "error"
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None, redirect: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.redirect = redirect

    def to_dict(self) -> dict:
        data = {"success": False, "kind": self.kind, "message": self.message}
        if self.redirect:
            data["redirect"] = self.redirect
        return data


class NotFoundError(PortalError):
    """Property or service lookup failed (unknown or invalid access token)."""

    kind = "not_found"
    status_code = 404


class BookingValidationError(PortalError):
    """Guest input rejected before anything was submitted."""

    kind = "validation"
    status_code = 422


class CorruptStateError(PortalError):
    """Persisted session state could not be decoded."""

    kind = "corrupt_state"
    status_code = 400


class PaymentFailedError(PortalError):
    """Payment provider declined or payment request failed. The cart is kept."""

    kind = "payment_failed"
    status_code = 402


class BackendError(PortalError):
    """Backend API answered with a 4xx/5xx the portal does not handle specially."""

    kind = "backend"
    status_code = 502


class InvalidTransitionError(PortalError):
    """Checkout step requested from a state that does not allow it."""

    kind = "invalid_transition"
    status_code = 409


class StorageError(PortalError):
    """Session storage backend could not be reached."""

    kind = "storage"
    status_code = 503


class EmptyCartError(PortalError):
    """Checkout reached with no line items."""

    kind = "empty_cart"
    status_code = 400
