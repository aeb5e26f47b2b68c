from decimal import Decimal

import pytest

from finledger.domain.errors import ValidationError
from finledger.utils.decimal_utils import (
    coerce_decimal,
    parse_amount,
    parse_decimal,
    parse_non_negative_amount,
    to_money,
)


def test_coerce_decimal_normalizes_inputs():
    assert coerce_decimal(None) == Decimal("0")
    assert coerce_decimal(1.1) == Decimal("1.1")
    assert coerce_decimal("2.50") == Decimal("2.50")


def test_to_money_rounds_half_up():
    assert to_money("2.345") == Decimal("2.35")
    assert to_money(3) == Decimal("3.00")


@pytest.mark.parametrize("raw", ["0", "-5", "1.001", "abc", "NaN", "Infinity"])
def test_parse_amount_rejects_invalid_values(raw):
    with pytest.raises(ValidationError):
        parse_amount(raw)


def test_parse_amount_returns_cents():
    assert parse_amount("10") == Decimal("10.00")
    assert parse_amount(Decimal("0.01")) == Decimal("0.01")


def test_parse_non_negative_amount_accepts_zero():
    assert parse_non_negative_amount("0") == Decimal("0.00")
    assert parse_non_negative_amount("12.5") == Decimal("12.50")
    with pytest.raises(ValidationError):
        parse_non_negative_amount("-0.01")


def test_parse_decimal_keeps_sign_and_precision():
    assert parse_decimal("-12.345", "threshold") == Decimal("-12.345")


@pytest.mark.parametrize("raw", ["abc", "NaN", "-Infinity", ""])
def test_parse_decimal_rejects_non_numbers(raw):
    with pytest.raises(ValidationError, match="threshold"):
        parse_decimal(raw, "threshold")
