"""Plaid adapter.

Plaid reports amounts as floats in major currency units with positive meaning
money out of the account, so amounts are negated here. Dates are ISO
``YYYY-MM-DD`` strings.
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
from finance_aggregator.domain.errors import ValidationError, missing_field
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


def _balances(raw: dict[str, Any]) -> dict[str, Any]:
    # The REST API calls it "balances"; some SDK wrappers flatten to "balance"
    return raw.get("balances") or raw.get("balance") or {}


class PlaidAdapter:
    """Transforms Plaid item, account and transaction payloads."""

    provider = Provider.PLAID

    def parse_institution(self, raw: dict[str, Any]) -> Institution:
        institution_id = require(raw, "institution_id")
        return Institution(
            external_id=str(institution_id),
            name=raw.get("name"),
            url=raw.get("url"),
        )

    def parse_account(self, raw: dict[str, Any], institution_id: str, user_id: str) -> Account:
        external_id = str(require(raw, "account_id"))
        return Account(
            external_id=external_id,
            external_name=normalize_text(raw.get("name"), "name", external_id),
            institution=institution_ref(institution_id),
            user=user_ref(user_id),
            currency=normalize_currency(_balances(raw).get("iso_currency_code")),
            # subtype is more specific ("checking", "savings", "credit card")
            account_type=normalize_account_type(raw.get("subtype"), raw.get("type")),
            mask=raw.get("mask"),
        )

    def parse_transaction(
        self, raw: dict[str, Any], user_id: str, account_id: Optional[str] = None
    ) -> Optional[Transaction]:
        if is_pending(raw):
            return None

        external_id = str(require(raw, "transaction_id"))
        account_id = account_id or raw.get("account_id")
        if not account_id:
            raise ValidationError(missing_field("account_id", external_id), record_id=external_id)

        posted = normalize_date(require(raw, "date", external_id), field="date", record_id=external_id)
        authorized = normalize_date(raw.get("authorized_date"), field="authorized_date", record_id=external_id)
        name = normalize_text(raw.get("name"), "name", external_id)
        return Transaction(
            external_id=external_id,
            account=account_ref(account_id),
            amount=normalize_amount(
                require(raw, "amount", external_id), record_id=external_id, money_out_positive=True
            ),
            posted_date=posted,
            transaction_date=authorized or posted,
            payee=payee_or_fallback(normalize_text(raw.get("merchant_name"), "merchant_name", external_id), name),
            description=name,
            memo=normalize_text(raw.get("original_description"), "original_description", external_id),
            user=user_ref(user_id),
        )

    def parse_snapshot(self, raw: dict[str, Any], as_of: date) -> Optional[Snapshot]:
        """Snapshot of the current balance, dated when Plaid last refreshed it."""
        balances = _balances(raw)
        if balances.get("current") is None:
            return None
        external_id = str(require(raw, "account_id"))
        updated = normalize_date(
            balances.get("last_updated_datetime"), field="last_updated_datetime", record_id=external_id
        )
        current = normalize_amount(balances["current"], field="balances.current", record_id=external_id)
        return Snapshot(
            account=account_ref(external_id),
            date=updated or as_of,
            balance=current,
            source=SnapshotSource.PROVIDER,
        )

    def should_skip_account(self, raw: dict[str, Any]) -> bool:
        return False
