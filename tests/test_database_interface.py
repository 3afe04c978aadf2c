"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from ledgerkeep.database.factories import resolve_database_path
from ledgerkeep.database.sqlalchemy_db import SQLAlchemyDatabase
from ledgerkeep.domain import entities
from ledgerkeep.domain.errors import BatchWriteError, PermissionDeniedError


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_account_returns_domain_model(self, temp_db):
        """Test that get_account returns a domain Account entity."""
        account_id = temp_db.create_account(
            display_name="Ziraat Bankası", kind=entities.AccountKind.INTERNAL, stored_balance=Decimal("12.50")
        )

        account = temp_db.get_account(account_id)

        assert isinstance(account, entities.Account)
        assert account.id == account_id
        assert account.display_name == "Ziraat Bankası"
        assert account.kind is entities.AccountKind.INTERNAL
        assert account.stored_balance == Decimal("12.50")
        assert isinstance(account.created_at, datetime)

    def test_list_accounts_in_creation_order(self, temp_db):
        """Test that list_accounts returns accounts in store order."""
        temp_db.create_account(display_name="Zeta")
        temp_db.create_account(display_name="Alpha")

        accounts = temp_db.list_accounts()

        assert [a.display_name for a in accounts] == ["Zeta", "Alpha"]
        assert all(a.kind is None for a in accounts)

    def test_get_account_by_name(self, temp_db):
        account_id = temp_db.create_account(display_name="Acme")
        assert temp_db.get_account_by_name("Acme").id == account_id
        assert temp_db.get_account_by_name("Nope") is None

    def test_get_transaction_returns_domain_model(self, temp_db):
        """Test that get_transaction returns a domain Transaction entity."""
        transaction_id = temp_db.create_transaction(
            type=entities.TransactionType.DEBT_TRANSFER,
            amount=Decimal("200.00"),
            occurred_at=date(2024, 3, 1),
            primary_party=1,
            source_party=2,
            target_party=3,
            description="Loan",
        )

        txn = temp_db.get_transaction(transaction_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.type is entities.TransactionType.DEBT_TRANSFER
        assert txn.amount == Decimal("200.00")
        assert txn.parties == (1, 2, 3)
        assert txn.occurred_at == date(2024, 3, 1)
        assert isinstance(txn.recorded_at, datetime)
        assert txn.affects_balance and not txn.is_deleted and not txn.is_log
        assert txn.record_type == "transaction"
        assert txn.migration_status is None

    def test_legacy_alias_is_stored_canonically(self, temp_db):
        transaction_id = temp_db.create_transaction(type="gelir", amount=Decimal("5"), occurred_at=date(2024, 1, 1))
        assert temp_db.get_transaction(transaction_id).type is entities.TransactionType.REVENUE

    def test_list_transactions_filters(self, temp_db):
        first = temp_db.create_transaction(type="revenue", amount=Decimal("1"), occurred_at=date(2024, 1, 1), primary_party=1)
        second = temp_db.create_transaction(type="transfer", amount=Decimal("2"), occurred_at=date(2024, 1, 2), source_party=2, target_party=1)
        third = temp_db.create_transaction(type="expense", amount=Decimal("3"), occurred_at=date(2024, 1, 3), primary_party=3)
        temp_db.update_transaction(third, is_deleted=True)

        assert [t.id for t in temp_db.list_transactions()] == [first, second, third]
        assert [t.id for t in temp_db.list_transactions(account_id=1)] == [first, second]
        assert [t.id for t in temp_db.list_transactions(include_deleted=False)] == [first, second]
        assert [t.id for t in temp_db.list_transactions(limit=1)] == [first]

    def test_update_transactions_applies_batch(self, temp_db):
        ids = [
            temp_db.create_transaction(type="transfer", amount=Decimal("1"), occurred_at=date(2024, 1, 1), source_party=1, target_party=2)
            for _ in range(2)
        ]

        temp_db.update_transactions(
            {ids[0]: {"type": entities.TransactionType.DEBT_TRANSFER, "primary_party": 3}, ids[1]: {"is_log": True}}
        )

        assert temp_db.get_transaction(ids[0]).type is entities.TransactionType.DEBT_TRANSFER
        assert temp_db.get_transaction(ids[0]).primary_party == 3
        assert temp_db.get_transaction(ids[1]).is_log

    def test_update_transactions_with_unknown_id_writes_nothing(self, temp_db):
        existing = temp_db.create_transaction(type="revenue", amount=Decimal("1"), occurred_at=date(2024, 1, 1))

        with pytest.raises(BatchWriteError):
            temp_db.update_transactions({existing: {"is_log": True}, 999: {"is_log": True}})

        assert not temp_db.get_transaction(existing).is_log

    def test_update_transactions_rejects_unknown_fields(self, temp_db):
        existing = temp_db.create_transaction(type="revenue", amount=Decimal("1"), occurred_at=date(2024, 1, 1))
        with pytest.raises(ValueError, match="Cannot patch"):
            temp_db.update_transactions({existing: {"id": 5}})

    def test_update_account_balances(self, temp_db):
        a = temp_db.create_account(display_name="A")
        b = temp_db.create_account(display_name="B")

        temp_db.update_account_balances({a: Decimal("10.25"), b: Decimal("-3")})

        assert temp_db.get_account(a).stored_balance == Decimal("10.25")
        assert temp_db.get_account(b).stored_balance == Decimal("-3")

    def test_update_account_balances_unknown_account(self, temp_db):
        with pytest.raises(BatchWriteError):
            temp_db.update_account_balances({42: Decimal("1")})

    def test_duplicate_account_name_is_rejected_by_store(self, temp_db):
        temp_db.create_account(display_name="Acme")
        with pytest.raises(BatchWriteError):
            temp_db.create_account(display_name="Acme")

    def test_read_only_store_raises_permission_denied(self, temp_db):
        account_id = temp_db.create_account(display_name="Acme")
        read_only = SQLAlchemyDatabase(f"sqlite:///file:{temp_db.database_path}?mode=ro&uri=true")

        try:
            with pytest.raises(PermissionDeniedError):
                read_only.update_account_balances({account_id: Decimal("10")})
        finally:
            read_only.disconnect()

        assert temp_db.get_account(account_id).stored_balance == Decimal("0")


class TestResolveDatabasePath:
    """Tests for picking the ledger file."""

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LEDGERKEEP_DB_PATH", str(tmp_path / "env.db"))
        assert resolve_database_path(str(tmp_path / "nested" / "a.db")) == tmp_path / "nested" / "a.db"
        assert (tmp_path / "nested").is_dir()

    def test_environment_variable(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LEDGERKEEP_DB_PATH", str(tmp_path / "env.db"))
        assert resolve_database_path() == tmp_path / "env.db"
