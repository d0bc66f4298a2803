"""
Guest Check-in Router

Online check-in form: contact details plus an optional passport scan.
"""
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from portal.errors import ERROR_CHECK_IN_FAILED, BackendError, BookingValidationError
from portal.logging import get_logger, mask_token
from portal.services.backend import BackendClient
from portal.utils.validators import MAX_PASSPORT_BYTES, is_valid_email, is_valid_phone, validate_passport_file
from ..deps import get_backend

logger = get_logger(__name__)

router = APIRouter(tags=["guest-checkin"])

ERROR_EMAIL = "Please enter a valid email address"
ERROR_PHONE = "Please enter a valid phone number"
ERROR_NAME = "Please enter your full name"


def _check_in_dict(check_in) -> Optional[dict]:
    return check_in.model_dump(mode="json") if check_in else None


@router.get("/checkin/{access_token}/status")
async def get_check_in_status(
    access_token: str,
    email: Optional[str] = None,
    backend: BackendClient = Depends(get_backend),
):
    """Whether the property (or one guest, by email) is already checked in."""
    if email:
        check_in = await backend.get_guest_check_in(access_token, email.strip())
    else:
        check_in = await backend.get_check_in_status(access_token)
    return {"checked_in": check_in is not None, "check_in": _check_in_dict(check_in)}


@router.post("/checkin/{access_token}")
async def submit_check_in(
    access_token: str,
    full_name: str = Form(...),
    email: str = Form(...),
    phone_number: str = Form(...),
    passport: Optional[UploadFile] = File(None),
    backend: BackendClient = Depends(get_backend),
):
    """
    Submit the check-in form.

    A guest who already checked in is sent straight to the dashboard.
    """
    full_name = full_name.strip()
    email = email.strip()
    phone_number = phone_number.strip()

    if not full_name:
        raise BookingValidationError(ERROR_NAME)
    if not is_valid_email(email):
        raise BookingValidationError(ERROR_EMAIL)
    if not is_valid_phone(phone_number):
        raise BookingValidationError(ERROR_PHONE)

    dashboard = f"/guest/{access_token}"

    existing = await backend.get_guest_check_in(access_token, email)
    if existing is not None:
        logger.info("Guest already checked in for token %s", mask_token(access_token))
        return {"success": True, "already_checked_in": True, "redirect": dashboard}

    passport_url = None
    if passport is not None and passport.filename:
        # Declared size first, then a bounded read
        validate_passport_file(passport.content_type, passport.size or 0)
        content = await passport.read(MAX_PASSPORT_BYTES + 1)
        validate_passport_file(passport.content_type, len(content))
        passport_url = await backend.upload_image(passport.filename, content, passport.content_type)
        if not passport_url:
            raise BackendError(ERROR_CHECK_IN_FAILED)

    created = await backend.submit_check_in({
        "access_token": access_token,
        "full_name": full_name,
        "email": email,
        "phone_number": phone_number,
        "passport_url": passport_url,
        "check_in_time": datetime.now(timezone.utc).isoformat(),
    })
    if not created:
        logger.info("Backend reported duplicate check-in for token %s", mask_token(access_token))
        return {"success": True, "already_checked_in": True, "redirect": dashboard}

    logger.info("Check-in completed for token %s", mask_token(access_token))
    return {
        "success": True,
        "already_checked_in": False,
        "message": "Check-in completed successfully!",
        "redirect": dashboard,
    }
