"""Guest input validation for the check-in form."""
import re
from typing import Optional

from portal.errors import ERROR_FILE_TOO_LARGE, ERROR_FILE_TYPE, BookingValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Optional leading +, then digits with common separators; 7-15 digits overall
PHONE_RE = re.compile(r"^\+?[\d\s\-().]{7,20}$")

MAX_PASSPORT_BYTES = 5 * 1024 * 1024


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and bool(EMAIL_RE.match(email.strip()))


def is_valid_phone(phone: Optional[str]) -> bool:
    if not phone or not PHONE_RE.match(phone.strip()):
        return False
    digits = re.sub(r"\D", "", phone)
    return 7 <= len(digits) <= 15


def validate_passport_file(content_type: Optional[str], size: int) -> None:
    """
    Passport scans must be an image or a PDF of at most 5 MB.

    Raises:
        BookingValidationError: with the message shown next to the upload field
    """
    content_type = (content_type or "").lower()
    if not (content_type.startswith("image/") or content_type == "application/pdf"):
        raise BookingValidationError(ERROR_FILE_TYPE)
    if size > MAX_PASSPORT_BYTES:
        raise BookingValidationError(ERROR_FILE_TOO_LARGE)
