"""Duplicate transaction detection.

Transactions are likely duplicates when they share posted date, amount,
description, payee and memo. True duplicates usually come from two provider
feeds for the same money movement, so they sit in different accounts; groups
inside a single account are still reported but flagged for review.
"""

from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from finance_aggregator.domain.entities import DuplicateCandidate, Transaction

DuplicateKey = tuple[Any, ...]


def duplicate_key(transaction: Transaction) -> DuplicateKey:
    """Composite grouping key of a transaction."""
    return (
        transaction.posted_date,
        transaction.amount,
        transaction.description,
        transaction.payee,
        transaction.memo,
    )


def _sort_key(candidate: DuplicateCandidate) -> tuple[bool, Any, Any]:
    txn = candidate.transaction
    # Missing dates sort last
    return (txn.transaction_date is None, txn.transaction_date or 0, txn.amount)


def find_likely_duplicates(transactions: Iterable[Transaction]) -> list[DuplicateCandidate]:
    """Return transactions whose duplicate key is shared with another one.

    Each candidate carries the size of its group. Candidates are ordered by
    (transaction date, amount); ties keep their input order.

    Args:
        transactions: Transactions to inspect

    Returns:
        List of DuplicateCandidate, empty when there are no duplicates
    """
    transactions = list(transactions)
    groups: dict[DuplicateKey, list[Transaction]] = defaultdict(list)
    for txn in transactions:
        groups[duplicate_key(txn)].append(txn)

    candidates = []
    for txn in transactions:
        members = groups[duplicate_key(txn)]
        if len(members) < 2:
            continue
        same_account = sum(1 for m in members if m.account == txn.account) > 1
        candidates.append(DuplicateCandidate(transaction=txn, group_size=len(members), same_account=same_account))

    # sorted() is stable, so equal keys keep input order
    return sorted(candidates, key=_sort_key)
