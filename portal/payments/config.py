"""Payment processor configuration and method availability."""
import os
from typing import Dict, Optional, Tuple

from fastapi import HTTPException

from portal.logging import get_logger
from portal.services.models import Property
from .constants import PaymentMethod, PaymentProcessor, normalize_processor

logger = get_logger(__name__)


# Environment the portal itself needs per processor. Secret keys live in the backend.
PROCESSOR_ENV_REQUIREMENTS: Dict[str, Tuple[str, ...]] = {
    PaymentProcessor.STRIPE.value: ("STRIPE_PUBLISHABLE_KEY",),
    PaymentProcessor.WISE.value: (),
}

PROCESSOR_NAMES: Dict[str, str] = {
    PaymentProcessor.STRIPE.value: "Stripe",
    PaymentProcessor.WISE.value: "Wise",
}


def get_processor_config(processor: str) -> Dict[str, Optional[str]]:
    """Environment values for a processor (None when unset)."""
    processor = normalize_processor(processor)
    return {key: os.environ.get(key) for key in PROCESSOR_ENV_REQUIREMENTS.get(processor, ())}


def validate_processor_config(processor: str) -> str:
    """
    Validate processor environment configuration.

    Returns:
        Normalized processor name

    Raises:
        HTTPException: If the processor is unknown or not configured
    """
    processor = normalize_processor(processor)
    if processor not in PROCESSOR_ENV_REQUIREMENTS:
        raise HTTPException(status_code=400, detail=f"Unknown payment processor: {processor}")

    missing = [key for key, value in get_processor_config(processor).items() if not value]
    if missing:
        name = PROCESSOR_NAMES.get(processor, processor)
        logger.error("Payment processor %s not configured. Missing: %s", name, missing)
        raise HTTPException(
            status_code=500,
            detail=f"{name} is not configured. Set: {', '.join(missing)}",
        )
    return processor


def is_processor_configured(processor: str) -> bool:
    """Check a processor's configuration without raising."""
    return all(get_processor_config(processor).values())


def available_methods(prop: Property) -> list[str]:
    """
    Checkout methods offered for a property.

    Stripe properties take cards, plus bank transfer when Wise account
    details are on file. Wise properties take bank transfer only.
    """
    if normalize_processor(prop.payment_processor) == PaymentProcessor.WISE.value:
        return [PaymentMethod.BANK_TRANSFER.value]
    methods = [PaymentMethod.CARD.value]
    if prop.wise_account_details:
        methods.append(PaymentMethod.BANK_TRANSFER.value)
    return methods


def default_method(prop: Property) -> str:
    return available_methods(prop)[0]
