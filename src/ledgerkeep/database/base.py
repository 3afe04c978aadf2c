"""Abstract database interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    # Entities are only needed for annotations; importing them at runtime
    # would cycle through domain/__init__.py.
    from ledgerkeep.domain.entities import Account, AccountKind, Transaction, TransactionType


class Database(ABC):
    """Abstract database interface for ledgerkeep.

    Batch write methods commit each call atomically: either every patch in
    the call is persisted or none is, and the failure surfaces as
    BatchWriteError. Access failures surface as PermissionDeniedError.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        display_name: str,
        kind: Optional[AccountKind] = None,
        category: Optional[str] = None,
        stored_balance: Decimal = Decimal("0"),
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_name(self, display_name: str) -> Optional[Account]:
        """Get account by display name."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts in store (creation) order."""
        pass

    @abstractmethod
    def update_account_balances(self, balances: dict[int, Decimal]) -> None:
        """Overwrite stored balances for many accounts in one atomic batch."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        type: TransactionType,
        amount: Decimal,
        occurred_at: date,
        primary_party: Optional[int] = None,
        source_party: Optional[int] = None,
        target_party: Optional[int] = None,
        total_amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        affects_balance: bool = True,
        is_log: bool = False,
        record_type: str = "transaction",
    ) -> int:
        """Create a new transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID, including soft-deleted ones."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[int] = None,
        include_deleted: bool = True,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions in store order, optionally filtered by a party account."""
        pass

    @abstractmethod
    def update_transactions(self, patches: dict[int, dict[str, Any]]) -> None:
        """Apply field patches to many transactions in one atomic batch.

        Args:
            patches: Transaction ID to {field name: new value}
        """
        pass

    def update_transaction(self, transaction_id: int, **fields: Any) -> None:
        """Apply a field patch to a single transaction."""
        self.update_transactions({transaction_id: fields})
