"""Payment processing module."""
from .constants import (
    PaymentProcessor,
    PaymentMethod,
    PaymentOutcome,
    PROCESSOR_ALIASES,
    normalize_processor,
)
from .config import available_methods, default_method, is_processor_configured, validate_processor_config

__all__ = [
    "PaymentProcessor",
    "PaymentMethod",
    "PaymentOutcome",
    "PROCESSOR_ALIASES",
    "available_methods",
    "default_method",
    "is_processor_configured",
    "normalize_processor",
    "validate_processor_config",
]
