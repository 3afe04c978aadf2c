"""Mapper functions to convert between domain models and SQLAlchemy models.

Stored type strings may be legacy aliases; they are normalized here so the
rest of the package only ever sees TransactionType members.
"""

from decimal import Decimal

from ledgerkeep.domain import entities as domain
from ledgerkeep.database.models import (
    Account as ORMAccount,
    Transaction as ORMTransaction,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        display_name=orm_account.display_name,
        kind=domain.AccountKind(orm_account.kind) if orm_account.kind else None,
        category=orm_account.category,
        stored_balance=Decimal(orm_account.stored_balance or 0),
        created_at=orm_account.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    total = orm_transaction.total_amount
    return domain.Transaction(
        id=orm_transaction.id,
        type=domain.TransactionType.parse(orm_transaction.type),
        amount=Decimal(orm_transaction.amount),
        total_amount=Decimal(total) if total is not None else None,
        primary_party=orm_transaction.primary_party,
        source_party=orm_transaction.source_party,
        target_party=orm_transaction.target_party,
        occurred_at=orm_transaction.occurred_at,
        recorded_at=orm_transaction.recorded_at,
        description=orm_transaction.description,
        affects_balance=orm_transaction.affects_balance,
        is_deleted=orm_transaction.is_deleted,
        is_log=orm_transaction.is_log,
        record_type=orm_transaction.record_type,
        migration_flag=orm_transaction.migration_flag,
        needs_review=orm_transaction.needs_review,
        migration_status=orm_transaction.migration_status,
        rejection_reason=orm_transaction.rejection_reason,
    )


def transaction_patch_to_columns(patch: dict) -> dict:
    """Convert a domain field patch into column values."""
    columns = dict(patch)
    if "type" in columns:
        columns["type"] = domain.TransactionType.parse(columns["type"]).value
    return columns
