"""
Monetary helpers for kobo-exact billing.

All stored and computed amounts are integers in minor units (kobo for NGN).
Decimals appear only when an amount is shown to a caller, and floats never
appear at all.

Key Principles:
1. NEVER use float for money
2. Percentages are applied with Decimal and rounded half-up to one minor unit
3. Convert to major units only at the serializer boundary
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from django.conf import settings

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "NGN": 2,  # Nigerian Naira (kobo)
    "GHS": 2,  # Ghanaian Cedi (pesewas)
    "KES": 2,  # Kenyan Shilling (cents)
    "ZAR": 2,  # South African Rand (cents)
    "USD": 2,  # United States Dollar (cents)
}


def default_currency() -> str:
    return getattr(settings, "CURRENCY", "NGN")


def currency_exponent(currency: str) -> int:
    """
    Number of decimal places for a currency.

    Examples:
        >>> currency_exponent("NGN")
        2
    """
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def to_minor(currency: str, amount: Union[Decimal, str, int]) -> int:
    """
    Convert a major-unit amount to minor units, rounding half-up.

    Examples:
        >>> to_minor("NGN", "1500.00")
        150000
        >>> to_minor("NGN", "10.125")
        1013
    """
    exponent = currency_exponent(currency)
    scaled = Decimal(str(amount)) * (Decimal(10) ** exponent)
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor(currency: str, minor: int) -> Decimal:
    """
    Convert from minor units to a Decimal for display.

    Examples:
        >>> from_minor("NGN", 440750)
        Decimal('4407.50')
    """
    exponent = currency_exponent(currency)
    quantum = Decimal(10) ** -exponent
    return (Decimal(minor) / (10 ** exponent)).quantize(quantum)


def apply_rate(minor: int, rate: Union[Decimal, str]) -> int:
    """
    Multiply a minor-unit amount by a rate and round half-up to one minor unit.

    Examples:
        >>> apply_rate(410000, "0.075")
        30750
        >>> apply_rate(10, "0.075")
        1
    """
    result = Decimal(minor) * Decimal(str(rate))
    return int(result.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_tax(subtotal_minor: int, rate: Union[Decimal, str, None] = None) -> int:
    """Tax on an invoice subtotal at INVOICE_TAX_RATE (7.5% by default)."""
    if rate is None:
        rate = getattr(settings, "INVOICE_TAX_RATE", "0.075")
    return apply_rate(subtotal_minor, rate)


def format_money(currency: str, minor: int) -> str:
    """
    Format minor units as a human-readable string.

    Examples:
        >>> format_money("NGN", 440750)
        '₦4,407.50'
    """
    amount = from_minor(currency, minor)
    symbols = {
        "NGN": "₦",
        "GHS": "GH₵",
        "USD": "$",
    }
    symbol = symbols.get(currency.upper(), currency + " ")
    exponent = currency_exponent(currency)
    return f"{symbol}{amount:,.{exponent}f}"
