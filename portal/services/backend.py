"""Backend API Client - properties, upsells, check-in and payments.

All methods use async/await over a shared httpx client. Responses are
validated with pydantic before they reach the portal; a response that does
not match its schema is reported as corrupt state, never passed on raw.
"""

import os
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from portal.errors import (
    ERROR_ACCESS_DENIED,
    ERROR_CHECK_FORM,
    ERROR_INVALID_TOKEN,
    ERROR_SERVER,
    ERROR_UNEXPECTED,
    BackendError,
    BookingValidationError,
    CorruptStateError,
    NotFoundError,
)
from portal.logging import get_logger, mask_token
from portal.services.models import (
    BankTransferResult,
    CheckIn,
    PaymentIntentResult,
    Property,
    Upsell,
)

logger = get_logger(__name__)

BACKEND_API_URL = os.environ.get("BACKEND_API_URL", "http://127.0.0.1:8000/api")


class BackendClient:
    """Client for the property backend REST API."""

    def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or BACKEND_API_URL).rstrip("/")
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=httpx.Timeout(10.0, connect=5.0, read=10.0, write=10.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    # ==================== TRANSPORT ====================

    async def _request(self, method: str, path: str, *, none_on_404: bool = False, **kwargs) -> Optional[dict]:
        """
        Send a request and return the decoded JSON body.

        Status mapping (no retries, every failure goes back to the guest):
        - 401 -> NotFoundError (access denied)
        - 404 -> NotFoundError (invalid token), or None with none_on_404
        - 422 -> BookingValidationError with the first field error
        - 5xx -> BackendError
        - other 4xx -> BackendError with the backend's message
        """
        client = await self._get_http_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Backend %s request failed: %s", method, e)
            raise BackendError(ERROR_SERVER, status_code=503) from e

        if response.status_code == 404 and none_on_404:
            return None
        if response.is_error:
            raise self._map_error(response)

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Backend returned non-JSON body (status %s)", response.status_code)
            raise CorruptStateError(ERROR_UNEXPECTED, status_code=502) from e
        if not isinstance(data, dict):
            raise CorruptStateError(ERROR_UNEXPECTED, status_code=502)
        return data

    @staticmethod
    def _error_body(response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def _map_error(self, response: httpx.Response) -> Exception:
        status = response.status_code
        body = self._error_body(response)

        if status == 401:
            return NotFoundError(ERROR_ACCESS_DENIED, status_code=401)
        if status == 404:
            return NotFoundError(ERROR_INVALID_TOKEN)
        if status == 422:
            errors = body.get("errors")
            if isinstance(errors, dict) and errors:
                first = next(iter(errors.values()))
                message = first[0] if isinstance(first, list) and first else str(first)
                return BookingValidationError(message)
            return BookingValidationError(body.get("message") or ERROR_CHECK_FORM)
        if status >= 500:
            logger.error("Backend server error %s", status)
            return BackendError(ERROR_SERVER)
        if body.get("message"):
            return BackendError(str(body["message"]), status_code=status)
        return BackendError(ERROR_UNEXPECTED, status_code=status)

    @staticmethod
    def _validate(model, data: Any):
        try:
            return model.model_validate(data)
        except (ValidationError, ArithmeticError) as e:
            logger.warning("Backend response failed %s validation (%s)", model.__name__, type(e).__name__)
            raise CorruptStateError(ERROR_UNEXPECTED, status_code=502) from e

    # ==================== PROPERTIES ====================

    async def get_property(self, access_token: str) -> Property:
        """Property lookup by guest access token."""
        data = await self._request("GET", f"/properties/access/{access_token}")
        if not data.get("property"):
            logger.info("No property for token %s", mask_token(access_token))
            raise NotFoundError(ERROR_INVALID_TOKEN)
        return self._validate(Property, data["property"])

    async def get_upsells(self, property_id: int) -> list[Upsell]:
        """Upsells offered by a property, in backend order."""
        data = await self._request("GET", f"/properties/{property_id}/upsells")
        upsells = data.get("upsells") or []
        if not isinstance(upsells, list):
            raise CorruptStateError(ERROR_UNEXPECTED, status_code=502)
        return [self._validate(Upsell, u) for u in upsells]

    # ==================== CHECK-IN ====================

    async def get_check_in_status(self, access_token: str) -> Optional[CheckIn]:
        data = await self._request("GET", f"/guest/check-in-status/{access_token}", none_on_404=True)
        if not data or not data.get("check_in"):
            return None
        return self._validate(CheckIn, data["check_in"])

    async def get_guest_check_in(self, access_token: str, email: str) -> Optional[CheckIn]:
        """Check-in of one specific guest (by email) at the property."""
        data = await self._request(
            "GET",
            f"/guest/check-specific-status/{access_token}",
            params={"email": email},
            none_on_404=True,
        )
        if not data or not data.get("check_in"):
            return None
        return self._validate(CheckIn, data["check_in"])

    async def upload_image(self, filename: str, content: bytes, content_type: str) -> Optional[str]:
        """Upload a passport scan, return its URL."""
        data = await self._request(
            "POST",
            "/guest/upload-image",
            files={"image": (filename, content, content_type)},
        )
        return data.get("url")

    async def submit_check_in(self, payload: dict) -> bool:
        """
        Submit a check-in.

        Returns False when the backend reports the guest already checked in (409).
        """
        client = await self._get_http_client()
        try:
            response = await client.post("/guest/check-in", json=payload)
        except httpx.HTTPError as e:
            logger.error("Backend check-in failed: %s", e)
            raise BackendError(ERROR_SERVER, status_code=503) from e
        if response.status_code == 409:
            return False
        if response.is_error:
            raise self._map_error(response)
        return True

    # ==================== PAYMENTS ====================

    async def create_payment_intent(self, payload: dict) -> PaymentIntentResult:
        """Card payment intent for the whole cart."""
        data = await self._request("POST", "/guest/payments/create-intent", json=payload)
        return self._validate(PaymentIntentResult, data)

    async def create_bank_transfer(self, payload: dict) -> BankTransferResult:
        """Wise bank-transfer order for the whole cart."""
        data = await self._request("POST", "/guest/payments/wise", json=payload)
        return self._validate(BankTransferResult, data)


_backend_client: Optional[BackendClient] = None


def get_backend_client() -> BackendClient:
    """Get BackendClient singleton."""
    global _backend_client
    if _backend_client is None:
        _backend_client = BackendClient()
    return _backend_client
