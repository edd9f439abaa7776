"""Shared pytest fixtures for finance_aggregator tests."""

import copy
import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from finance_aggregator.database.factories import create_sqlite_database
from finance_aggregator.domain.account import AccountService
from finance_aggregator.domain.category import CategoryService
from finance_aggregator.domain.entities import Account, EntityBatch, Institution, Transaction
from finance_aggregator.domain.normalization import account_ref, institution_ref, user_ref
from finance_aggregator.domain.transaction import TransactionService


# 2024-01-01T00:00:00Z, 2023-12-31T00:00:00Z, 2023-12-30T00:00:00Z
JAN_1_2024 = 1704067200
DEC_31_2023 = 1703980800
DEC_30_2023 = 1703894400

SIMPLEFIN_ACCOUNT_SET = {
    "errors": [],
    "accounts": [
        {
            "org": {
                "domain": "mybank.com",
                "sfin-url": "https://sfin.mybank.com",
                "name": "My Bank",
                "id": "ORG-1",
            },
            "id": "ACT-1",
            "name": "Everyday Chequing",
            "currency": "USD",
            "balance": "1520.35",
            "available-balance": "1500.00",
            "balance-date": JAN_1_2024,
            "transactions": [
                {
                    "id": "TRN-1",
                    "posted": DEC_31_2023,
                    "amount": "-42.17",
                    "description": "COFFEE SHOP #12",
                    "payee": "Coffee Shop",
                    "memo": "",
                    "transacted_at": DEC_30_2023,
                },
                {
                    "id": "TRN-2",
                    "posted": DEC_31_2023,
                    "amount": "2500.00",
                    "description": "PAYROLL",
                    "payee": "",
                    "memo": "",
                },
                {
                    "id": "TRN-3",
                    "posted": 0,
                    "amount": "-10.00",
                    "description": "PENDING CHARGE",
                    "pending": True,
                },
            ],
        },
        {
            "org": {"domain": "mybank.com", "name": "My Bank", "id": "ORG-1"},
            "id": "ACT-2",
            "name": "Old Savings",
            "currency": "USD",
            "balance": "0.00",
            "balance-date": JAN_1_2024,
            "transactions": [],
        },
    ],
}

PLAID_INSTITUTION = {
    "institution_id": "ins_109508",
    "name": "First Platypus Bank",
    "url": "https://platypus.example",
}

PLAID_ACCOUNTS = [
    {
        "account_id": "plaid-acc-1",
        "name": "Plaid Checking",
        "mask": "0000",
        "type": "depository",
        "subtype": "checking",
        "balances": {
            "available": 100,
            "current": 110.0,
            "iso_currency_code": "USD",
            "last_updated_datetime": None,
        },
    },
    {
        "account_id": "plaid-acc-2",
        "name": "Plaid Credit Card",
        "mask": "3333",
        "type": "credit",
        "subtype": "credit card",
        "balances": {"current": 410.5, "iso_currency_code": None},
    },
]

PLAID_TRANSACTIONS = [
    {
        "transaction_id": "plaid-txn-1",
        "account_id": "plaid-acc-1",
        "amount": 12.34,
        "date": "2024-03-01",
        "authorized_date": "2024-02-29",
        "name": "UBER 063015 SF**POOL**",
        "merchant_name": "Uber",
        "original_description": "UBER TRIP",
        "pending": False,
    },
    {
        "transaction_id": "plaid-txn-2",
        "account_id": "plaid-acc-1",
        "amount": -500.0,
        "date": "2024-03-02",
        "authorized_date": None,
        "name": "ACME PAYROLL",
        "merchant_name": None,
        "pending": False,
    },
]


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def simplefin_account_set():
    """A SimpleFIN account set; safe to mutate."""
    return copy.deepcopy(SIMPLEFIN_ACCOUNT_SET)


@pytest.fixture
def plaid_payloads():
    """Plaid institution, accounts and transactions; safe to mutate."""
    return {
        "institution": copy.deepcopy(PLAID_INSTITUTION),
        "accounts": copy.deepcopy(PLAID_ACCOUNTS),
        "transactions": copy.deepcopy(PLAID_TRANSACTIONS),
    }


def make_transaction(external_id, account="ACT-1", amount="-10.00", posted=date(2024, 1, 15), **overrides):
    """Build a canonical transaction referencing an account by external id."""
    fields = {
        "external_id": external_id,
        "account": account_ref(account) if isinstance(account, str) else account,
        "amount": Decimal(amount),
        "posted_date": posted,
        "transaction_date": posted,
        "payee": "Grocer",
        "description": "GROCER 123",
        "memo": None,
        "user": user_ref("default"),
    }
    fields.update(overrides)
    return Transaction(**fields)


@pytest.fixture
def sample_accounts(temp_db):
    """Store one institution with two accounts, ACT-1 and ACT-2."""
    batch = EntityBatch(
        institutions=[Institution(external_id="ORG-1", name="My Bank", domain="mybank.com")],
        accounts=[
            Account(
                external_id=external_id,
                external_name=name,
                institution=institution_ref("ORG-1"),
                user=user_ref("default"),
            )
            for external_id, name in (("ACT-1", "Chequing"), ("ACT-2", "Credit Card"))
        ],
    )
    temp_db.upsert(batch)
    return {acc.external_id: acc for acc in temp_db.list_accounts()}


@pytest.fixture
def sample_transactions(temp_db, sample_accounts):
    """Store three transactions in ACT-1 and return them keyed by external id."""
    temp_db.upsert(
        EntityBatch(
            transactions=[
                make_transaction("T-1", amount="-42.17", posted=date(2024, 1, 10), payee="Coffee Shop"),
                make_transaction("T-2", amount="2500.00", posted=date(2024, 1, 15), payee="Employer"),
                make_transaction("T-3", amount="-100.00", posted=date(2024, 2, 1), payee="Transfer Out"),
            ]
        )
    )
    return {txn.external_id: txn for txn in temp_db.list_transactions()}


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
