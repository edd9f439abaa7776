"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Any, Optional

from finance_aggregator.domain.errors import ParseError, malformed_field


def parse_amount(value: Any, field: str = "amount", record_id: Optional[str] = None) -> Decimal:
    """Parse a provider amount into an exact Decimal.

    Handles:
    - Decimal strings: "123.45", "-123.45", "1,234.56", "$123.45"
    - "(123.45)" (negative in parentheses)
    - int and float numbers; floats are converted through their shortest
      repr, so 12.34 becomes Decimal("12.34") rather than the binary value

    Args:
        value: Raw amount value
        field: Field name reported in errors
        record_id: Record id reported in errors

    Returns:
        Decimal amount

    Raises:
        ParseError: If the value cannot be parsed
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, bool) or value is None:
        raise ParseError(malformed_field(field, record_id, value), field=field, record_id=record_id)
    elif isinstance(value, (int, float)):
        amount = _to_decimal(repr(value) if isinstance(value, float) else str(value), field, record_id, value)
    elif isinstance(value, str):
        amount = _parse_amount_string(value, field, record_id)
    else:
        raise ParseError(malformed_field(field, record_id, value), field=field, record_id=record_id)

    if not amount.is_finite():
        raise ParseError(malformed_field(field, record_id, value), field=field, record_id=record_id)
    return amount


def _parse_amount_string(amount_str: str, field: str, record_id: Optional[str]) -> Decimal:
    original = amount_str
    amount_str = amount_str.strip()
    if not amount_str:
        raise ParseError(malformed_field(field, record_id, original), field=field, record_id=record_id)

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    amount = _to_decimal(amount_str, field, record_id, original)
    return -amount if is_negative else amount


def _to_decimal(text: str, field: str, record_id: Optional[str], original: Any) -> Decimal:
    try:
        return Decimal(text)
    except (InvalidOperation, ValueError) as e:
        raise ParseError(
            malformed_field(field, record_id, original), field=field, record_id=record_id
        ) from e
