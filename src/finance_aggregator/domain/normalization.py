"""Provider-independent normalization of raw record fields.

Adapters map provider field names onto canonical ones and then hand the raw
values to these helpers, which coerce dates to UTC dates, amounts to exact
decimals and cross-entity links to natural-key references.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from finance_aggregator.domain.entities import AccountType, LookupRef
from finance_aggregator.domain.errors import ParseError, ValidationError, malformed_field, missing_field
from finance_aggregator.utils.amount_parser import parse_amount
from finance_aggregator.utils.date_parser import epoch_to_date, parse_iso_date

DEFAULT_CURRENCY = "USD"

# Provider account type names mapped onto AccountType
_ACCOUNT_TYPE_ALIASES = {
    "checking": AccountType.CHEQUING,
    "chequing": AccountType.CHEQUING,
    "credit": AccountType.CREDIT,
    "credit card": AccountType.CREDIT,
    "savings": AccountType.SAVINGS,
    "depository": AccountType.DEPOSITORY,
    "loan": AccountType.LOAN,
    "mortgage": AccountType.LOAN,
    "investment": AccountType.INVESTMENT,
    "brokerage": AccountType.INVESTMENT,
}


def normalize_date(value: Any, field: str = "date", record_id: Optional[str] = None) -> Optional[date]:
    """Coerce epoch seconds, ISO strings, datetimes or dates to a UTC date.

    Returns None for a None value; callers decide whether the field is required.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return epoch_to_date(value, field=field, record_id=record_id)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        digits = value.strip()
        # Up to eight digits may be an ISO basic date such as "20240315"
        if len(digits) <= 8:
            try:
                return parse_iso_date(digits, field=field, record_id=record_id)
            except ParseError:
                pass
        return epoch_to_date(int(digits), field=field, record_id=record_id)
    return parse_iso_date(value, field=field, record_id=record_id)


def normalize_amount(
    value: Any, field: str = "amount", record_id: Optional[str] = None, money_out_positive: bool = False
) -> Decimal:
    """Coerce a raw amount to a Decimal where negative means money out.

    Args:
        value: Raw amount (decimal string or number)
        field: Field name reported in errors
        record_id: Record id reported in errors
        money_out_positive: True when the provider reports debits as positive
    """
    amount = parse_amount(value, field=field, record_id=record_id)
    return -amount if money_out_positive else amount


def normalize_currency(value: Any) -> str:
    """Return an upper-cased ISO currency code, defaulting to USD.

    Non-ISO values (SimpleFIN allows a URL for custom currencies) are kept as is.
    """
    if not isinstance(value, str) or not value.strip():
        return DEFAULT_CURRENCY
    value = value.strip()
    if len(value) == 3 and value.isalpha():
        return value.upper()
    return value


def normalize_account_type(*candidates: Optional[str]) -> Optional[AccountType]:
    """Map the first recognised provider type name onto AccountType."""
    for candidate in candidates:
        if not candidate:
            continue
        account_type = _ACCOUNT_TYPE_ALIASES.get(str(candidate).strip().lower())
        if account_type is not None:
            return account_type
    return None


def payee_or_fallback(payee: Optional[str], fallback: Optional[str]) -> Optional[str]:
    """Return the payee, or the fallback (raw transaction name) when blank."""
    if payee is not None and str(payee).strip():
        return payee
    return fallback


def is_pending(raw: dict[str, Any]) -> bool:
    """True when the provider marks the record as not yet settled."""
    pending = raw.get("pending")
    if isinstance(pending, str):
        return pending.strip().lower() in ("true", "1", "yes")
    return pending is True


def require(raw: dict[str, Any], key: str, record_id: Optional[str] = None) -> Any:
    """Return raw[key], raising ValidationError when absent or blank."""
    value = raw.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(missing_field(key, record_id), record_id=record_id)
    return value


def institution_ref(institution_id: str) -> LookupRef:
    return LookupRef("institution/id", str(institution_id))


def account_ref(external_id: str) -> LookupRef:
    return LookupRef("account/external-id", str(external_id))


def user_ref(user_id: str) -> LookupRef:
    return LookupRef("user/id", str(user_id))


def normalize_text(value: Any, field: str, record_id: Optional[str] = None) -> Optional[str]:
    """Coerce a free-text provider field to str.

    Numbers are stringified; objects, lists and booleans are malformed.
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    raise ParseError(malformed_field(field, record_id, value), field=field, record_id=record_id)
