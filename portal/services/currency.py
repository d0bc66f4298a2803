"""
Currency display tables.

Property prices are already in the property's own currency; the portal never
converts, it only needs symbols and precision for display.
"""
from typing import Dict

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "IDR": "Rp",
    "THB": "฿",
    "AUD": "A$",
    "SGD": "S$",
    "JPY": "¥",
    "KRW": "₩",
    "AED": "د.إ",
    "MXN": "MX$",
    "BRL": "R$",
}

# Currencies displayed without decimals
INTEGER_CURRENCIES = {"IDR", "JPY", "KRW"}

# Currencies whose symbol goes before the amount
PREFIX_CURRENCIES = {"USD", "EUR", "GBP", "IDR", "AUD", "SGD", "JPY", "MXN", "BRL"}
