"""Pytest configuration and fixtures"""
import os
import json
import pytest
import httpx
from decimal import Decimal

# Set test environment variables
os.environ.setdefault("BACKEND_API_URL", "http://backend.test/api")
os.environ.setdefault("SESSION_STORAGE", "memory")
os.environ.setdefault("SESSION_COOKIE_SECURE", "0")
os.environ.setdefault("STRIPE_PUBLISHABLE_KEY", "pk_test_123")
os.environ.pop("UPSTASH_REDIS_REST_URL", None)
os.environ.pop("UPSTASH_REDIS_REST_TOKEN", None)

from portal.db import MemorySessionStorage, set_session_storage
from portal.services.backend import BackendClient
from portal.services.models import Property, Upsell


ACCESS_TOKEN = "tok-villa-123"
SESSION_ID = "s" * 43


@pytest.fixture
def sample_property_data():
    """Sample property as returned by the backend"""
    return {
        "id": 7,
        "name": "Villa Serenity",
        "description": "Beachfront villa",
        "language": "en",
        "currency": "usd",
        "tags": ["beach", "pool"],
        "access_token": ACCESS_TOKEN,
        "payment_processor": "stripe",
        "wise_account_details": {
            "bank_name": "Wise",
            "account_number": "12345678",
            "account_holder_name": "Villa Serenity Ltd",
        },
        "created_at": "2025-01-01T00:00:00Z",
    }


@pytest.fixture
def sample_upsells_data():
    """Sample upsells as returned by the backend"""
    return [
        {
            "id": 1,
            "title": "Airport Transfer",
            "description": "Private car from the airport",
            "price": "100.00",
            "category": "transport",
            "is_active": True,
            "sort_order": 1,
            "property_id": 7,
        },
        {
            "id": 2,
            "title": "Sunset Dinner",
            "description": "Three courses on the beach",
            "price": 50,
            "category": "dining",
            "is_active": True,
            "sort_order": 2,
            "property_id": 7,
        },
        {
            "id": 3,
            "title": "Boat Trip",
            "description": "Seasonal",
            "price": 80,
            "category": "tours",
            "is_active": False,
            "sort_order": 3,
            "property_id": 7,
        },
    ]


@pytest.fixture
def sample_property(sample_property_data):
    return Property.model_validate(sample_property_data)


@pytest.fixture
def upsell_a():
    """Upsell priced 100"""
    return Upsell(id=1, title="Airport Transfer", price=Decimal("100"), category="transport")


@pytest.fixture
def upsell_b():
    """Upsell priced 50"""
    return Upsell(id=2, title="Sunset Dinner", price=Decimal("50"), category="dining")


@pytest.fixture
def memory_storage():
    """Fresh in-memory session storage"""
    return MemorySessionStorage()


@pytest.fixture
def session_storage(memory_storage):
    """Install in-memory storage as the process-wide session storage"""
    set_session_storage(memory_storage)
    yield memory_storage
    set_session_storage(None)


class FakeBackend:
    """Routes backend requests to canned JSON responses and records them."""

    def __init__(self, property_data, upsells_data):
        self.property_data = property_data
        self.upsells_data = upsells_data
        self.requests: list[httpx.Request] = []
        self.check_ins: dict[str, dict] = {}
        self.payment_intent = {"success": True, "client_secret": "pi_123_secret_456"}
        self.bank_transfer = {"success": True, "payment_url": None}
        self.check_in_status = 201

    def json_body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        token = self.property_data["access_token"]

        if path.startswith("/properties/access/"):
            if path.rsplit("/", 1)[-1] != token:
                return httpx.Response(404, json={"message": "Not found"})
            return httpx.Response(200, json={"property": self.property_data})
        if path == f"/properties/{self.property_data['id']}/upsells":
            return httpx.Response(200, json={"upsells": self.upsells_data})
        if path.startswith("/guest/check-specific-status/"):
            check_in = self.check_ins.get(request.url.params.get("email"))
            if check_in is None:
                return httpx.Response(404, json={"message": "No check-in"})
            return httpx.Response(200, json={"check_in": check_in})
        if path.startswith("/guest/check-in-status/"):
            if not self.check_ins:
                return httpx.Response(404, json={"message": "No check-in"})
            return httpx.Response(200, json={"check_in": next(iter(self.check_ins.values()))})
        if path == "/guest/upload-image":
            return httpx.Response(200, json={"url": "https://cdn.test/passport.jpg"})
        if path == "/guest/check-in":
            if self.check_in_status == 201:
                body = json.loads(request.content)
                self.check_ins[body["email"]] = body
            return httpx.Response(self.check_in_status, json={"message": "ok"})
        if path == "/guest/payments/create-intent":
            return httpx.Response(200, json=self.payment_intent)
        if path == "/guest/payments/wise":
            return httpx.Response(200, json=self.bank_transfer)
        return httpx.Response(404, json={"message": "Unknown route"})


@pytest.fixture
def fake_backend(sample_property_data, sample_upsells_data):
    return FakeBackend(sample_property_data, sample_upsells_data)


@pytest.fixture
def backend_client(fake_backend):
    """BackendClient wired to the fake backend through httpx.MockTransport"""
    return BackendClient(
        base_url="http://backend.test/api",
        transport=httpx.MockTransport(fake_backend.handler),
    )
