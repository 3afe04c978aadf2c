"""Shared domain error messages and error types."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ledgerkeep.domain.entities import ConsistencyResult


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConsistencyError(DomainError):
    """A migration batch would change aggregate revenue or expense totals."""

    def __init__(self, result: "ConsistencyResult"):
        self.result = result
        super().__init__(
            "Migration would break P&L consistency: " + "; ".join(result.errors)
        )


class StorageError(DomainError):
    """The external store rejected an operation."""


class BatchWriteError(StorageError):
    """A single write batch failed and was rolled back."""


class PermissionDeniedError(StorageError):
    """The store refused access; no write can succeed."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def duplicate_account_name(name: str) -> str:
    """Return message for duplicate account display names."""
    return f"Account with name '{name}' already exists"
