"""Account domain service."""

from decimal import Decimal
from typing import Optional

from ledgerkeep.database.base import Database
from ledgerkeep.domain.account_kind import account_kind
from ledgerkeep.domain.balance import compute_balance
from ledgerkeep.domain.entities import Account as AccountEntity, AccountKind
from ledgerkeep.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_account_name,
)


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        display_name: str,
        kind: Optional[AccountKind] = None,
        category: Optional[str] = None,
        opening_balance: Decimal = Decimal("0"),
    ) -> int:
        """Create a new account.

        Args:
            display_name: Account name, unique across the ledger
            kind: Explicit kind; inferred from name and category when None
            category: Optional classification hint (e.g. "Banka", "Müşteri")
            opening_balance: Initial stored balance

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If account name already exists
        """
        display_name = (display_name or "").strip()
        if not display_name:
            raise ValidationError("Account name cannot be empty")

        if self.db.get_account_by_name(display_name) is not None:
            raise ConflictError(duplicate_account_name(display_name))

        return self.db.create_account(
            display_name=display_name,
            kind=kind,
            category=category,
            stored_balance=opening_balance,
        )

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts.

        Returns:
            List of account entities
        """
        return self.db.list_accounts()

    def effective_kind(self, account: AccountEntity) -> AccountKind:
        """Return the explicit or inferred kind of an account."""
        return account_kind(account)

    def get_balance(self, account_id: int) -> tuple[Decimal, Decimal]:
        """Get stored and recalculated balance for an account.

        Returns:
            (stored_balance, recalculated_balance)

        Raises:
            NotFoundError: If account not found
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        transactions = self.db.list_transactions(account_id=account_id)
        return account.stored_balance, compute_balance(account_id, transactions)
