"""Currency conversion utilities for the marketplace.

Storage unit: NLe (new Leone), 2 decimal places. Every product price is NLe.
Display / order unit: NLE or USD. USD amounts are derived from NLe with a
configurable rate expressed as "NLe per 1 USD".

Conversion chain
----------------
NLe ÷ rate → USD
USD × rate → NLe
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Union

CENTS = Decimal("0.01")

Number = Union[Decimal, int, float, str]


class Currency(str, Enum):
    NLE = "NLE"
    USD = "USD"


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # float -> str first so 0.1 stays 0.1
    return Decimal(str(value))


def quantize_money(value: Number) -> Decimal:
    """Round to 2 decimal places (half-up)."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def nle_to_usd(amount_nle: Number, rate: Number) -> Decimal:
    """Convert NLe to USD. A non-positive rate yields 0."""
    rate = to_decimal(rate)
    if rate <= 0:
        return Decimal("0.00")
    return quantize_money(to_decimal(amount_nle) / rate)


def usd_to_nle(amount_usd: Number, rate: Number) -> Decimal:
    return quantize_money(to_decimal(amount_usd) * to_decimal(rate))


def to_order_currency(amount_nle: Number, currency: Currency | str, rate: Number) -> Decimal:
    """Convert a stored NLe amount into the currency an order is placed in."""
    if Currency(currency) == Currency.USD:
        return nle_to_usd(amount_nle, rate)
    return quantize_money(amount_nle)


def format_money(amount: Number, currency: Currency | str) -> str:
    """Format an amount already expressed in ``currency``: ``NLe 1,234.50`` / ``$ 61.73``."""
    value = quantize_money(amount)
    if Currency(currency) == Currency.USD:
        return f"$ {value:,.2f}"
    return f"NLe {value:,.2f}"
