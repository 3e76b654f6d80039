"""Formatting helpers for estimate output and calculation traces.

Provides human-readable formatting for currency amounts and quantities —
matching how estimators write numbers (e.g. '$1,234,567', '24,480 lbs').
"""

from __future__ import annotations

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "CAD": "C$",
    "AUD": "A$",
    "SGD": "S$",
    "INR": "₹",
    "GBP": "£",
    "EUR": "€",
    "AED": "AED ",
    "SAR": "SAR ",
    "QAR": "QAR ",
    "OMR": "OMR ",
    "KWD": "KWD ",
    "BHD": "BHD ",
}

UNIT_LABELS: dict[str, str] = {
    "sf": "SF",
    "sqm": "m²",
    "cy": "CY",
    "cum": "m³",
    "ton": "tons",
    "mt": "MT",
    "lb": "lbs",
    "kg": "kg",
    "lf": "LF",
    "m": "m",
    "ea": "EA",
    "ls": "LS",
}


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format a currency amount as a human-readable string.

    - Amounts >= 10,000: no cents, with comma separators (e.g., '$1,234,567')
    - Amounts < 10,000: with cents (e.g., '$9,876.54')
    """
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    if amount >= 10_000:
        return f"{sign}{symbol}{amount:,.0f}"
    return f"{sign}{symbol}{amount:,.2f}"


def format_number(value: float, decimals: int = 2) -> str:
    """Format a number with separators, dropping a trailing '.0'."""
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.{decimals}f}"


def format_quantity(value: float, unit: str) -> str:
    """Format a quantity with its display unit (e.g. '12.24 tons')."""
    return f"{format_number(value)} {UNIT_LABELS.get(unit, unit)}"
