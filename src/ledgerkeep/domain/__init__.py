"""Domain layer for ledgerkeep application."""

from ledgerkeep.domain.account import AccountService
from ledgerkeep.domain.migration_service import MigrationService
from ledgerkeep.domain.reconciliation import ReconciliationService
from ledgerkeep.domain.transaction import TransactionService
from ledgerkeep.domain.visibility import VisibilityService

__all__ = [
    "AccountService",
    "MigrationService",
    "ReconciliationService",
    "TransactionService",
    "VisibilityService",
]
