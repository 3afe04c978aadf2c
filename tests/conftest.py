"""Shared pytest fixtures for ledgerkeep tests."""

import tempfile
import os
from datetime import date, datetime, UTC
from decimal import Decimal
import pytest

from ledgerkeep.database.factories import create_sqlite_database
from ledgerkeep.domain.account import AccountService
from ledgerkeep.domain.entities import Account, Transaction, TransactionType
from ledgerkeep.domain.migration_service import MigrationService
from ledgerkeep.domain.reconciliation import ReconciliationService
from ledgerkeep.domain.transaction import TransactionService
from ledgerkeep.domain.visibility import VisibilityService
from ledgerkeep.logging import configure_logging


@pytest.fixture(autouse=True)
def quiet_logging():
    """Route structured logs to the current (captured) stderr at WARNING."""
    configure_logging(level="WARNING", format="console")


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    """Create a ReconciliationService with a temporary database."""
    return ReconciliationService(temp_db)


@pytest.fixture
def migration_service(temp_db):
    """Create a MigrationService with a temporary database."""
    return MigrationService(temp_db)


@pytest.fixture
def visibility_service(temp_db):
    """Create a VisibilityService with a temporary database."""
    return VisibilityService(temp_db)


@pytest.fixture
def make_account(temp_db):
    """Create an account directly in the store and return the entity."""

    def _make(display_name, kind=None, category=None, balance="0"):
        account_id = temp_db.create_account(
            display_name=display_name,
            kind=kind,
            category=category,
            stored_balance=Decimal(balance),
        )
        return temp_db.get_account(account_id)

    return _make


@pytest.fixture
def make_transaction(temp_db):
    """Insert a raw transaction, bypassing the stored balance cache."""

    def _make(txn_type, amount, primary=None, source=None, target=None, is_deleted=False, **fields):
        transaction_id = temp_db.create_transaction(
            type=txn_type,
            amount=Decimal(amount),
            occurred_at=date(2024, 1, 15),
            primary_party=primary,
            source_party=source,
            target_party=target,
            **fields,
        )
        if is_deleted:
            temp_db.update_transaction(transaction_id, is_deleted=True)
        return temp_db.get_transaction(transaction_id)

    return _make


@pytest.fixture
def company_ledger(make_account):
    """One internal bank account plus three counterparties."""
    return {
        "bank": make_account("Ziraat Bankası"),
        "lender": make_account("Lender Co", category="Tedarikçi"),
        "supplier": make_account("Supplier Ltd", category="Tedarikçi"),
        "customer": make_account("Acme Customer", category="Müşteri"),
    }


def build_transaction(id=1, type=TransactionType.REVENUE, amount="100", **fields) -> Transaction:
    """Build an in-memory transaction entity for pure unit tests."""
    values = dict(
        id=id,
        type=type,
        amount=Decimal(amount),
        primary_party=None,
        source_party=None,
        target_party=None,
        occurred_at=date(2024, 1, 15),
        recorded_at=datetime(2024, 1, 15, 12, 0, tzinfo=UTC),
    )
    values.update(fields)
    return Transaction(**values)


def build_account(id, display_name, kind=None, category=None, balance="0") -> Account:
    """Build an in-memory account entity for pure unit tests."""
    return Account(
        id=id,
        display_name=display_name,
        kind=kind,
        category=category,
        stored_balance=Decimal(balance),
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
