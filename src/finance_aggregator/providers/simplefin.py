"""SimpleFIN adapter.

SimpleFIN nests transactions under accounts and the institution under each
account's ``org``. Amounts are decimal strings that already use negative for
money out; dates are UNIX epoch seconds. See https://www.simplefin.org/protocol.html
"""

from datetime import date
from typing import Any, Optional

from finance_aggregator.domain.entities import (
    Account,
    Institution,
    Provider,
    Snapshot,
    SnapshotSource,
    Transaction,
)
from finance_aggregator.domain.errors import ParseError, ValidationError, missing_field
from finance_aggregator.domain.normalization import (
    account_ref,
    institution_ref,
    is_pending,
    normalize_account_type,
    normalize_amount,
    normalize_currency,
    normalize_date,
    normalize_text,
    payee_or_fallback,
    require,
    user_ref,
)


class SimpleFINAdapter:
    """Transforms SimpleFIN account-set payloads."""

    provider = Provider.SIMPLEFIN

    def parse_institution(self, raw: dict[str, Any]) -> Institution:
        """Parse an ``org`` object (or an account carrying one)."""
        org = raw.get("org", raw)
        institution_id = org.get("id") or org.get("domain")
        if not institution_id:
            raise ValidationError(missing_field("org.id"), record_id=raw.get("id"))
        return Institution(
            external_id=str(institution_id),
            name=org.get("name"),
            domain=org.get("domain"),
            url=org.get("url"),
        )

    def parse_account(self, raw: dict[str, Any], institution_id: str, user_id: str) -> Account:
        external_id = require(raw, "id")
        return Account(
            external_id=str(external_id),
            external_name=normalize_text(raw.get("name"), "name", str(external_id)),
            institution=institution_ref(institution_id),
            user=user_ref(user_id),
            currency=normalize_currency(raw.get("currency")),
            account_type=normalize_account_type(raw.get("type")),
        )

    def parse_transaction(
        self, raw: dict[str, Any], user_id: str, account_id: Optional[str] = None
    ) -> Optional[Transaction]:
        """Parse one transaction of the account ``account_id``.

        Pending transactions (flagged ``pending`` or with ``posted`` of 0)
        are dropped.
        """
        if is_pending(raw) or raw.get("posted") in (0, "0"):
            return None

        external_id = str(require(raw, "id"))
        account_id = account_id or raw.get("account_id")
        if not account_id:
            raise ValidationError(missing_field("account_id", external_id), record_id=external_id)

        posted = normalize_date(require(raw, "posted", external_id), field="posted", record_id=external_id)
        transacted = normalize_date(raw.get("transacted_at"), field="transacted_at", record_id=external_id)
        description = normalize_text(raw.get("description"), "description", external_id)
        return Transaction(
            external_id=external_id,
            account=account_ref(account_id),
            amount=normalize_amount(require(raw, "amount", external_id), record_id=external_id),
            posted_date=posted,
            transaction_date=transacted or posted,
            payee=payee_or_fallback(normalize_text(raw.get("payee"), "payee", external_id), description),
            description=description,
            memo=normalize_text(raw.get("memo"), "memo", external_id),
            user=user_ref(user_id),
        )

    def parse_snapshot(self, raw: dict[str, Any], as_of: date) -> Optional[Snapshot]:
        """Balance snapshot from an account's ``balance`` and ``balance-date``."""
        if raw.get("balance") in (None, ""):
            return None
        external_id = str(require(raw, "id"))
        balance_date = normalize_date(raw.get("balance-date"), field="balance-date", record_id=external_id)
        return Snapshot(
            account=account_ref(external_id),
            date=balance_date or as_of,
            balance=normalize_amount(raw["balance"], field="balance", record_id=external_id),
            source=SnapshotSource.PROVIDER,
        )

    def should_skip_account(self, raw: dict[str, Any]) -> bool:
        """Zero-balance accounts are closed or placeholder accounts."""
        balance = raw.get("balance")
        if balance in (None, ""):
            return False
        try:
            return normalize_amount(balance, field="balance", record_id=raw.get("id")) == 0
        except ParseError:
            return False
