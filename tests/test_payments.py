"""Tests for payment processor config and the checkout PaymentService"""
import pytest
import pytest_asyncio
from fastapi import HTTPException
from unittest.mock import AsyncMock, patch

from portal.cart import CartManager, CheckoutState
from portal.errors import BackendError, BookingValidationError, EmptyCartError, PaymentFailedError
from portal.payments import PaymentOutcome
from portal.payments.config import (
    available_methods,
    default_method,
    is_processor_configured,
    validate_processor_config,
)
from portal.payments.constants import normalize_processor
from portal.services.models import BankTransferResult, PaymentIntentResult, Property
from portal.services.payments import PaymentService

SESSION_ID = "p" * 43


@pytest.fixture
def mock_backend():
    backend = AsyncMock()
    backend.create_payment_intent.return_value = PaymentIntentResult(success=True, client_secret="pi_secret")
    backend.create_bank_transfer.return_value = BankTransferResult(success=True, payment_url=None)
    return backend


@pytest.fixture
def payment_service(mock_backend):
    return PaymentService(backend=mock_backend)


@pytest_asyncio.fixture
async def manager(memory_storage, upsell_a, upsell_b):
    """CartManager with two booked services (total 250)"""
    manager = CartManager(memory_storage, SESSION_ID)
    await manager.add_item(upsell_a, 2)
    await manager.add_item(upsell_b, 1)
    return manager


class TestProcessorConfig:
    """Tests for processor validation and method availability"""

    def test_normalize_processor(self):
        assert normalize_processor("Stripe") == "stripe"
        assert normalize_processor("bank-transfer") == "wise"
        assert normalize_processor(None) == "stripe"

    def test_unknown_processor(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_processor_config("paypal")
        assert exc_info.value.status_code == 400

    def test_missing_stripe_key(self):
        with patch.dict("os.environ", {"STRIPE_PUBLISHABLE_KEY": ""}):
            assert is_processor_configured("stripe") is False
            with pytest.raises(HTTPException) as exc_info:
                validate_processor_config("stripe")
        assert exc_info.value.status_code == 500

    def test_wise_needs_no_env(self):
        assert validate_processor_config("wise") == "wise"

    def test_stripe_with_wise_details(self, sample_property):
        assert available_methods(sample_property) == ["card", "bank_transfer"]
        assert default_method(sample_property) == "card"

    def test_stripe_without_wise_details(self):
        prop = Property(id=1, name="Loft", payment_processor="stripe")
        assert available_methods(prop) == ["card"]

    def test_wise_property(self):
        prop = Property(id=1, name="Loft", payment_processor="wise")
        assert available_methods(prop) == ["bank_transfer"]
        assert default_method(prop) == "bank_transfer"


class TestCardPayment:
    """Tests for card checkout"""

    @pytest.mark.asyncio
    async def test_start_card_payment(self, payment_service, mock_backend, manager, sample_property):
        result = await payment_service.start_card_payment(manager, sample_property, "tok")

        assert result["client_secret"] == "pi_secret"
        assert result["total_amount"] == 250.0
        assert result["total_amount_formatted"] == "$250.00"
        assert await manager.get_state() == CheckoutState.AWAITING_PAYMENT

        payload = mock_backend.create_payment_intent.call_args.args[0]
        assert payload["access_token"] == "tok"
        assert [i["total_price"] for i in payload["cart_items"]] == [200.0, 50.0]

    @pytest.mark.asyncio
    async def test_empty_cart_is_rejected(self, payment_service, memory_storage, sample_property):
        manager = CartManager(memory_storage, "e" * 43)

        with pytest.raises(EmptyCartError):
            await payment_service.start_card_payment(manager, sample_property, "tok")

    @pytest.mark.asyncio
    async def test_card_unavailable_for_wise_property(self, payment_service, manager):
        prop = Property(id=1, name="Loft", payment_processor="wise")

        with pytest.raises(BookingValidationError):
            await payment_service.start_card_payment(manager, prop, "tok")

    @pytest.mark.asyncio
    async def test_declined_intent_keeps_cart(self, payment_service, mock_backend, manager, sample_property):
        mock_backend.create_payment_intent.return_value = PaymentIntentResult(
            success=False, message="Card declined"
        )

        with pytest.raises(PaymentFailedError) as exc_info:
            await payment_service.start_card_payment(manager, sample_property, "tok")

        assert exc_info.value.message == "Card declined"
        assert len((await manager.get_cart()).items) == 2
        assert await manager.get_state() == CheckoutState.FAILED

    @pytest.mark.asyncio
    async def test_backend_error_becomes_payment_failure(self, payment_service, mock_backend, manager, sample_property):
        mock_backend.create_payment_intent.side_effect = BackendError("Server error. Please try again later.")

        with pytest.raises(PaymentFailedError):
            await payment_service.start_card_payment(manager, sample_property, "tok")
        assert await manager.get_state() == CheckoutState.FAILED

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, payment_service, mock_backend, manager, sample_property):
        mock_backend.create_payment_intent.return_value = PaymentIntentResult(success=False)
        with pytest.raises(PaymentFailedError):
            await payment_service.start_card_payment(manager, sample_property, "tok")

        mock_backend.create_payment_intent.return_value = PaymentIntentResult(success=True, client_secret="pi_2")
        result = await payment_service.start_card_payment(manager, sample_property, "tok")

        assert result["client_secret"] == "pi_2"
        assert await manager.get_state() == CheckoutState.AWAITING_PAYMENT

    @pytest.mark.asyncio
    async def test_confirm_success_clears_cart(self, payment_service, manager, sample_property):
        await payment_service.start_card_payment(manager, sample_property, "tok")

        result = await payment_service.confirm_payment(manager, PaymentOutcome.SUCCEEDED)

        assert result["state"] == "paid"
        assert (await manager.get_cart()).is_empty
        assert await manager.get_state() == CheckoutState.PAID

    @pytest.mark.asyncio
    async def test_confirm_failure_keeps_cart(self, payment_service, manager, sample_property):
        await payment_service.start_card_payment(manager, sample_property, "tok")

        with pytest.raises(PaymentFailedError) as exc_info:
            await payment_service.confirm_payment(manager, PaymentOutcome.FAILED, "Insufficient funds")

        assert exc_info.value.message == "Insufficient funds"
        assert len((await manager.get_cart()).items) == 2


class TestBankTransfer:
    """Tests for Wise bank-transfer checkout"""

    @pytest.mark.asyncio
    async def test_instructions_only_settles(self, payment_service, manager, sample_property):
        result = await payment_service.start_bank_transfer(manager, sample_property, "tok")

        assert result["state"] == "paid"
        assert result["instructions"]["account_number"] == "12345678"
        assert result["total_amount"] == 250.0
        assert (await manager.get_cart()).is_empty

    @pytest.mark.asyncio
    async def test_payment_url_awaits_return(self, payment_service, mock_backend, manager, sample_property):
        mock_backend.create_bank_transfer.return_value = BankTransferResult(
            success=True, payment_url="https://wise.test/pay/1"
        )

        result = await payment_service.start_bank_transfer(manager, sample_property, "tok")

        assert result["payment_url"] == "https://wise.test/pay/1"
        assert result["state"] == "awaiting_payment"
        assert len((await manager.get_cart()).items) == 2

        done = await payment_service.complete_checkout(manager)
        assert done["state"] == "paid"
        assert (await manager.get_cart()).is_empty

    @pytest.mark.asyncio
    async def test_failed_order(self, payment_service, mock_backend, manager, sample_property):
        mock_backend.create_bank_transfer.return_value = BankTransferResult(success=False)

        with pytest.raises(PaymentFailedError) as exc_info:
            await payment_service.start_bank_transfer(manager, sample_property, "tok")
        assert exc_info.value.message == "Failed to create Wise payment"
