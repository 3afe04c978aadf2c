"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from ledgerkeep.domain.errors import ValidationError
from ledgerkeep.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("123.45", Decimal("123.45")),
        ("-50", Decimal("-50")),
        ("1,234.56", Decimal("1234.56")),
        ("1.234,56", Decimal("1234.56")),
        ("12,5", Decimal("12.5")),
        ("₺1.000,00", Decimal("1000.00")),
        ("250 TL", Decimal("250")),
        ("$99.99", Decimal("99.99")),
        ("(75.00)", Decimal("-75.00")),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "abc", "NaN"])
def test_parse_amount_invalid(raw):
    with pytest.raises(ValidationError):
        parse_amount(raw)
