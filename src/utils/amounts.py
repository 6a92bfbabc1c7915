"""
Amount parsing and unit conversion.

Tool arguments arrive as human-readable decimal strings. Repay and withdraw also
accept the literal "MAX", which is carried as `AllAmount` until it is converted
to a contract argument.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from config import MAX_UINT256
from utils.tool_errors import ToolInputError

MAX_KEYWORD = "MAX"


@dataclass(frozen=True)
class ExactAmount:
    value: Decimal

    def __str__(self) -> str:
        return format(self.value.normalize(), "f")


@dataclass(frozen=True)
class AllAmount:
    """The whole position (repay all debt, withdraw everything supplied)."""

    def __str__(self) -> str:
        return MAX_KEYWORD


Amount = Union[ExactAmount, AllAmount]


def _to_decimal(value: Union[str, int, float, Decimal]) -> Decimal:
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ToolInputError(f"Invalid amount: {value}")
    if not number.is_finite():
        raise ToolInputError(f"Invalid amount: {value}")
    return number


def parse_amount(text: Union[str, int, float, Decimal]) -> Amount:
    """Parse a tool amount argument, accepting "MAX" in any case."""
    if isinstance(text, str) and text.strip().upper() == MAX_KEYWORD:
        return AllAmount()
    number = _to_decimal(text)
    if number <= 0:
        raise ToolInputError("Amount must be greater than zero.")
    return ExactAmount(number)


def parse_units(value: Union[str, int, float, Decimal], decimals: int) -> int:
    """Convert a human-readable amount into integer base units.

    Raises ToolInputError when the value has more fractional digits than the token supports.
    """
    number = _to_decimal(value)
    scaled = number.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ToolInputError(f"Amount {value} has more than {decimals} decimal places.")
    return int(scaled)


def format_units(raw: int, decimals: int) -> str:
    """Render integer base units as a plain decimal string."""
    number = Decimal(raw).scaleb(-decimals)
    if number == 0:
        return "0"
    return format(number.normalize(), "f")


def to_contract_amount(amount: Amount, decimals: int) -> int:
    if isinstance(amount, AllAmount):
        return MAX_UINT256
    return parse_units(amount.value, decimals)


def _normalize_separators(text: str) -> str:
    last_comma = text.rfind(",")
    last_dot = text.rfind(".")
    if last_comma > last_dot:
        if last_dot != -1 or text.count(",") == 1:
            # "1.234,56" or "0,5": the comma is the decimal separator
            return text.replace(".", "").replace(",", ".")
        # "1,234,567": thousands separators only
        return text.replace(",", "")
    if last_comma == -1 and text.count(".") > 1:
        # "1.234.567": dots as thousands separators
        return text.replace(".", "")
    return text.replace(",", "")


def sanitize_amount(raw: str, decimals: int) -> str:
    """Normalize a free-form amount to base units, returning "0" for anything unusable."""
    if raw is None:
        return "0"
    text = "".join(str(raw).split())
    if not text:
        return "0"
    try:
        number = Decimal(_normalize_separators(text))
    except (InvalidOperation, ValueError):
        return "0"
    if not number.is_finite() or number <= 0:
        return "0"
    quantized = number.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    return str(parse_units(quantized, decimals))
