"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the ingestion pipeline never sees
ORM objects.
"""

from finance_aggregator.domain import entities as domain
from finance_aggregator.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Institution as ORMInstitution,
    Snapshot as ORMSnapshot,
    Transaction as ORMTransaction,
)


def institution_to_domain(orm_institution: ORMInstitution) -> domain.Institution:
    """Convert SQLAlchemy Institution model to domain Institution entity."""
    return domain.Institution(
        id=orm_institution.id,
        external_id=orm_institution.external_id,
        name=orm_institution.name,
        domain=orm_institution.domain,
        url=orm_institution.url,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        external_id=orm_account.external_id,
        external_name=orm_account.external_name,
        institution=orm_account.institution_id,
        user=orm_account.user_id,
        currency=orm_account.currency,
        account_type=domain.AccountType(orm_account.account_type) if orm_account.account_type else None,
        mask=orm_account.mask,
        created_at=orm_account.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        ident=orm_category.ident,
        category_type=domain.CategoryType(orm_category.category_type),
        parent_id=orm_category.parent_id,
        sort_order=orm_category.sort_order,
        user_id=orm_category.user_id,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        external_id=orm_transaction.external_id,
        account=orm_transaction.account_id,
        user=orm_transaction.user_id,
        amount=orm_transaction.amount,
        posted_date=orm_transaction.posted_date,
        transaction_date=orm_transaction.transaction_date,
        payee=orm_transaction.payee,
        description=orm_transaction.description,
        memo=orm_transaction.memo,
        category_id=orm_transaction.category_id,
        tags=frozenset(domain.TransactionTag(t.tag) for t in orm_transaction.tags),
        transfer_pair_id=orm_transaction.transfer_pair_id,
        imported_at=orm_transaction.imported_at,
    )


def snapshot_to_domain(orm_snapshot: ORMSnapshot) -> domain.Snapshot:
    """Convert SQLAlchemy Snapshot model to domain Snapshot entity."""
    return domain.Snapshot(
        id=orm_snapshot.id,
        account=orm_snapshot.account_id,
        date=orm_snapshot.date,
        balance=orm_snapshot.balance,
        source=domain.SnapshotSource(orm_snapshot.source),
    )
