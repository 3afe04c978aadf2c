"""Transaction domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from ledgerkeep.database.base import Database
from ledgerkeep.domain.balance import counts_toward_balance
from ledgerkeep.domain.classifier import classify, is_debt_transfer
from ledgerkeep.domain.entities import Transaction as TransactionEntity, TransactionType
from ledgerkeep.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    transaction_not_found,
)
from ledgerkeep.domain.migration import validate_parties
from ledgerkeep.domain.sign_rules import ZERO, delta_for

logger = structlog.get_logger(__name__)


class TransactionService:
    """Service for recording and removing ledger transactions.

    Stored account balances are kept up to date incrementally as
    transactions are added and deleted. Reconciliation repairs any drift.
    """

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self._logger = logger.bind(component="transactions")

    def create_transaction(
        self,
        type: "str | TransactionType",
        amount: Decimal,
        occurred_at: date,
        primary_party: Optional[int] = None,
        source_party: Optional[int] = None,
        target_party: Optional[int] = None,
        total_amount: Optional[Decimal] = None,
        description: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        Args:
            type: Transaction type or raw type string (legacy aliases accepted)
            amount: Non-negative amount
            occurred_at: Business date
            primary_party: Primary account ID (debtor for debt transfers)
            source_party: Source account ID (new creditor for debt transfers)
            target_party: Target account ID (old creditor for debt transfers)
            total_amount: Optional amount that takes precedence over ``amount``
            description: Optional description

        Returns:
            Transaction ID

        Raises:
            ValidationError: If type or amount is invalid, no party is given, or a
                debt transfer does not name three distinct parties with a positive amount
            NotFoundError: If a party account doesn't exist
        """
        txn_type = TransactionType.parse(type)
        if amount < ZERO:
            raise ValidationError("Amount cannot be negative")
        if total_amount is not None and total_amount < ZERO:
            raise ValidationError("Total amount cannot be negative")

        if is_debt_transfer(txn_type, source_party, target_party):
            effective = total_amount if total_amount is not None else amount
            errors = validate_parties(primary_party, source_party, target_party, effective)
            if errors:
                raise ValidationError("Invalid debt transfer: " + "; ".join(errors))

        parties = [p for p in (primary_party, source_party, target_party) if p is not None]
        if not parties:
            raise ValidationError("At least one party account is required")
        for account_id in parties:
            if self.db.get_account(account_id) is None:
                raise NotFoundError(account_not_found(account_id))

        transaction_id = self.db.create_transaction(
            type=txn_type,
            amount=amount,
            occurred_at=occurred_at,
            primary_party=primary_party,
            source_party=source_party,
            target_party=target_party,
            total_amount=total_amount,
            description=description,
        )
        self._adjust_balances(self.db.get_transaction(transaction_id), sign=1)
        self._logger.info("transaction_created", transaction_id=transaction_id, type=txn_type.value)
        return transaction_id

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        include_deleted: bool = False,
        limit: Optional[int] = None,
    ) -> list[TransactionEntity]:
        """List transactions, optionally only those involving one account."""
        if account_id is not None and self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        return self.db.list_transactions(
            account_id=account_id, include_deleted=include_deleted, limit=limit
        )

    def delete_transaction(self, transaction_id: int) -> None:
        """Soft-delete a transaction.

        Args:
            transaction_id: Transaction ID to delete

        Raises:
            NotFoundError: If transaction doesn't exist
            ValidationError: If transaction is already deleted
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.is_deleted:
            raise ValidationError(f"Transaction {transaction_id} is already deleted")

        self.db.update_transaction(transaction_id, is_deleted=True)
        self._adjust_balances(txn, sign=-1)
        self._logger.info("transaction_deleted", transaction_id=transaction_id)

    def _adjust_balances(self, txn: TransactionEntity, sign: int) -> None:
        """Apply (or reverse) a transaction's deltas to the stored balance cache."""
        if not counts_toward_balance(txn):
            return
        classification = classify(txn)
        balances = {}
        for account_id in dict.fromkeys(p for p in txn.parties if p is not None):
            delta = delta_for(txn, account_id, classification.category, classification.is_debt_transfer)
            if delta == ZERO:
                continue
            account = self.db.get_account(account_id)
            balances[account_id] = account.stored_balance + sign * delta
        if balances:
            self.db.update_account_balances(balances)
