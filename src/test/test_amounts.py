from decimal import Decimal

import pytest

from config import MAX_UINT256
from utils.amounts import (
    AllAmount,
    ExactAmount,
    format_units,
    parse_amount,
    parse_units,
    sanitize_amount,
    to_contract_amount,
)
from utils.tool_errors import ToolInputError


@pytest.mark.parametrize("text", ["MAX", "max", " Max "])
def test_max_keyword_in_any_case(text):
    assert parse_amount(text) == AllAmount()


def test_exact_amount():
    amount = parse_amount("0.5")
    assert amount == ExactAmount(Decimal("0.5"))
    assert str(amount) == "0.5"


def test_whole_number_renders_without_exponent():
    assert str(parse_amount("100")) == "100"


@pytest.mark.parametrize("text", ["abc", "", "-1", "0", "NaN"])
def test_invalid_amounts_raise(text):
    with pytest.raises(ToolInputError):
        parse_amount(text)


def test_parse_units():
    assert parse_units("0.01", 18) == 10**16
    assert parse_units("25.5", 6) == 25_500_000
    assert parse_units(Decimal("1"), 0) == 1


def test_parse_units_rejects_excess_precision():
    with pytest.raises(ToolInputError):
        parse_units("1.0000001", 6)


def test_format_units():
    assert format_units(1_500_000, 6) == "1.5"
    assert format_units(60_000_000, 6) == "60"
    assert format_units(0, 6) == "0"
    assert format_units(1_234_567_890, 9) == "1.23456789"


def test_max_becomes_uint256():
    assert to_contract_amount(AllAmount(), 6) == MAX_UINT256
    assert to_contract_amount(ExactAmount(Decimal("2")), 6) == 2_000_000


@pytest.mark.parametrize(
    "raw, decimals, expected",
    [
        ("1,5", 6, "1500000"),
        ("1.234,56", 2, "123456"),
        ("1,234.5", 1, "12345"),
        ("1,234,567", 0, "1234567"),
        ("1.234.567", 6, "1234567000000"),
        (" 2 000 ", 0, "2000"),
        ("1.23456789", 6, "1234568"),
        ("abc", 6, "0"),
        ("0", 6, "0"),
        ("", 6, "0"),
        (None, 6, "0"),
    ],
)
def test_sanitize_amount(raw, decimals, expected):
    assert sanitize_amount(raw, decimals) == expected
