"""Payment constants, enums, and aliases."""
from enum import Enum


class PaymentProcessor(str, Enum):
    """Processor a property is configured with."""
    STRIPE = "stripe"
    WISE = "wise"


class PaymentMethod(str, Enum):
    """Methods offered to the guest at checkout."""
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"


class PaymentOutcome(str, Enum):
    """Outcome reported by the card widget or the bank-transfer redirect."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# Processor name aliases (input -> canonical)
PROCESSOR_ALIASES: dict[str, str] = {
    "stripe": PaymentProcessor.STRIPE.value,
    "card": PaymentProcessor.STRIPE.value,
    "wise": PaymentProcessor.WISE.value,
    "bank_transfer": PaymentProcessor.WISE.value,
    "bank-transfer": PaymentProcessor.WISE.value,
}


def normalize_processor(processor: str | None) -> str:
    """Normalize processor name to canonical form."""
    if not processor:
        return PaymentProcessor.STRIPE.value
    key = processor.strip().lower()
    return PROCESSOR_ALIASES.get(key, key)
