"""Shared domain error messages and error types."""

from typing import Any, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """

    def context(self) -> dict[str, Any]:
        """Structured details reported alongside the message in sync results."""
        return {"type": type(self).__name__}


class ParseError(DomainError):
    """Raw provider record has a malformed or unexpected shape."""

    def __init__(self, message: str, field: Optional[str] = None, record_id: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.record_id = record_id

    def context(self) -> dict[str, Any]:
        ctx = super().context()
        if self.field is not None:
            ctx["field"] = self.field
        if self.record_id is not None:
            ctx["record_id"] = self.record_id
        return ctx


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id

    def context(self) -> dict[str, Any]:
        ctx = super().context()
        if self.record_id is not None:
            ctx["record_id"] = self.record_id
        return ctx


class ProviderError(DomainError):
    """Upstream provider API failure (auth, rate limit, network)."""

    def __init__(self, message: str, provider: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code

    def context(self) -> dict[str, Any]:
        ctx = super().context()
        if self.provider is not None:
            ctx["provider"] = self.provider
        if self.status_code is not None:
            ctx["status_code"] = self.status_code
        return ctx


class StorageConflict(DomainError):
    """Upsert target identity collided or a reference could not be resolved."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


def malformed_field(field: str, record_id: Optional[str], value: Any) -> str:
    """Return message for a field that could not be parsed."""
    return f"Malformed {field} {value!r} in record {record_id or '<unknown>'}"


def missing_field(field: str, record_id: Optional[str] = None) -> str:
    """Return message for a required field that is absent."""
    if record_id is None:
        return f"Missing required field '{field}'"
    return f"Missing required field '{field}' in record {record_id}"


def unresolved_reference(ref: Any) -> str:
    """Return message for a natural-key reference with no target."""
    return f"Cannot resolve reference {ref}: no such entity"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_ident_not_found(ident: str) -> str:
    """Return message for missing category by ident."""
    return f"Category '{ident}' not found"


def duplicate_category_ident(ident: str) -> str:
    """Return message for duplicate category ident."""
    return f"Category with ident '{ident}' already exists"


def category_delete_blocked(category_id: int, transaction_count: int) -> str:
    """Return message when category still has transactions assigned."""
    return (
        f"Cannot delete category {category_id}: it has "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Please recategorize them first."
    )
