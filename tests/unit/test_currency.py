"""Unit tests for currency helpers."""

from decimal import Decimal

import pytest
from libs.common.currency import (
    Currency,
    format_money,
    nle_to_usd,
    quantize_money,
    to_order_currency,
    usd_to_nle,
)


@pytest.mark.unit
def test_quantize_rounds_half_up():
    assert quantize_money("1.005") == Decimal("1.01")
    assert quantize_money(0.1) == Decimal("0.10")


@pytest.mark.unit
def test_nle_usd_conversion():
    assert nle_to_usd("100", "20") == Decimal("5.00")
    assert nle_to_usd("33.33", "20") == Decimal("1.67")
    assert usd_to_nle("1.67", "20") == Decimal("33.40")


@pytest.mark.unit
def test_non_positive_rate_yields_zero():
    assert nle_to_usd("100", 0) == Decimal("0.00")


@pytest.mark.unit
def test_to_order_currency():
    assert to_order_currency("49.999", Currency.NLE, "20") == Decimal("50.00")
    assert to_order_currency("100", "USD", "25") == Decimal("4.00")


@pytest.mark.unit
def test_format_money():
    assert format_money("1234.5", "NLE") == "NLe 1,234.50"
    assert format_money("61.73", Currency.USD) == "$ 61.73"
