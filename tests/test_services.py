"""Tests for the account and transaction entry services."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerkeep.domain.balance import compute_all_balances
from ledgerkeep.domain.entities import AccountKind, TransactionType
from ledgerkeep.domain.errors import ConflictError, NotFoundError, ValidationError
from ledgerkeep.utils.account_resolver import resolve_account


class TestAccountService:
    """Tests for AccountService."""

    def test_create_and_infer_kind(self, account_service):
        account_id = account_service.create_account("Akbank Vadesiz")
        account = account_service.get_account(account_id)

        assert account.kind is None
        assert account_service.effective_kind(account) is AccountKind.INTERNAL

    def test_create_with_opening_balance(self, account_service):
        account_id = account_service.create_account("Acme", opening_balance=Decimal("150"))
        assert account_service.get_account(account_id).stored_balance == Decimal("150")

    def test_duplicate_name(self, account_service):
        account_service.create_account("Acme")
        with pytest.raises(ConflictError, match="already exists"):
            account_service.create_account("Acme")

    def test_empty_name(self, account_service):
        with pytest.raises(ValidationError):
            account_service.create_account("   ")

    def test_get_balance_unknown_account(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.get_balance(42)


class TestTransactionService:
    """Tests for TransactionService."""

    def test_create_updates_stored_balances(self, account_service, transaction_service):
        customer = account_service.create_account("Acme", category="Müşteri")

        transaction_service.create_transaction("gelir", Decimal("1000"), date(2024, 1, 1), primary_party=customer)
        transaction_service.create_transaction(
            TransactionType.COLLECTION, Decimal("300"), date(2024, 1, 2), primary_party=customer
        )

        stored, recalculated = account_service.get_balance(customer)
        assert stored == recalculated == Decimal("1300")

    def test_debt_transfer_updates_all_roles(self, account_service, transaction_service):
        bank = account_service.create_account("Kasa")
        lender = account_service.create_account("Lender")
        supplier = account_service.create_account("Supplier")

        transaction_service.create_transaction(
            "debt_transfer",
            Decimal("200"),
            date(2024, 1, 1),
            primary_party=bank,
            source_party=lender,
            target_party=supplier,
        )

        assert account_service.get_balance(bank) == (Decimal("0"), Decimal("0"))
        assert account_service.get_balance(lender) == (Decimal("-200"), Decimal("-200"))
        assert account_service.get_balance(supplier) == (Decimal("200"), Decimal("200"))

    def test_delete_reverses_balance(self, account_service, transaction_service):
        customer = account_service.create_account("Acme")
        txn_id = transaction_service.create_transaction("revenue", Decimal("80"), date(2024, 1, 1), primary_party=customer)

        transaction_service.delete_transaction(txn_id)

        assert transaction_service.get_transaction(txn_id).is_deleted
        assert account_service.get_balance(customer) == (Decimal("0"), Decimal("0"))
        assert transaction_service.list_transactions() == []
        assert len(transaction_service.list_transactions(include_deleted=True)) == 1

    def test_delete_twice(self, account_service, transaction_service):
        customer = account_service.create_account("Acme")
        txn_id = transaction_service.create_transaction("revenue", Decimal("80"), date(2024, 1, 1), primary_party=customer)
        transaction_service.delete_transaction(txn_id)

        with pytest.raises(ValidationError, match="already deleted"):
            transaction_service.delete_transaction(txn_id)

    def test_validation(self, account_service, transaction_service):
        customer = account_service.create_account("Acme")

        with pytest.raises(ValidationError, match="negative"):
            transaction_service.create_transaction("revenue", Decimal("-1"), date(2024, 1, 1), primary_party=customer)
        with pytest.raises(ValidationError, match="party"):
            transaction_service.create_transaction("revenue", Decimal("1"), date(2024, 1, 1))
        with pytest.raises(NotFoundError):
            transaction_service.create_transaction("revenue", Decimal("1"), date(2024, 1, 1), primary_party=999)
        with pytest.raises(ValidationError, match="Unknown transaction type"):
            transaction_service.create_transaction("barter", Decimal("1"), date(2024, 1, 1), primary_party=customer)


class TestResolveAccount:
    """Tests for account name/ID resolution."""

    def test_by_id_and_name(self, account_service):
        account_id = account_service.create_account("Acme")
        assert resolve_account(account_service, account_id) == account_id
        assert resolve_account(account_service, str(account_id)) == account_id
        assert resolve_account(account_service, "Acme") == account_id

    def test_not_found(self, account_service):
        with pytest.raises(NotFoundError):
            resolve_account(account_service, "Ghost")
        with pytest.raises(NotFoundError):
            resolve_account(account_service, 7)


class TestDebtTransferEntry:
    """Debt transfers must name three distinct parties and a positive amount."""

    @pytest.fixture
    def parties(self, account_service):
        return (
            account_service.create_account("Kasa"),
            account_service.create_account("Lender"),
            account_service.create_account("Supplier"),
        )

    def test_repeated_party_is_rejected(self, transaction_service, parties):
        debtor, _, old_creditor = parties
        with pytest.raises(ValidationError, match="must be different"):
            transaction_service.create_transaction(
                "debt_transfer",
                Decimal("200"),
                date(2024, 1, 1),
                primary_party=debtor,
                source_party=debtor,
                target_party=old_creditor,
            )
        assert transaction_service.list_transactions() == []

    def test_missing_debtor_is_rejected(self, transaction_service, parties):
        _, new_creditor, old_creditor = parties
        with pytest.raises(ValidationError, match="Debtor is required"):
            transaction_service.create_transaction(
                "debt_transfer",
                Decimal("200"),
                date(2024, 1, 1),
                source_party=new_creditor,
                target_party=old_creditor,
            )

    def test_zero_amount_is_rejected(self, transaction_service, parties):
        debtor, new_creditor, old_creditor = parties
        with pytest.raises(ValidationError, match="greater than zero"):
            transaction_service.create_transaction(
                "debt_transfer",
                Decimal("0"),
                date(2024, 1, 1),
                primary_party=debtor,
                source_party=new_creditor,
                target_party=old_creditor,
            )

    def test_balances_of_valid_debt_transfer_sum_to_zero(self, temp_db, transaction_service, parties):
        transaction_service.create_transaction(
            "debt_transfer",
            Decimal("200"),
            date(2024, 1, 1),
            primary_party=parties[0],
            source_party=parties[1],
            target_party=parties[2],
        )

        balances = compute_all_balances(list(parties), temp_db.list_transactions())
        assert sum(balances.values()) == Decimal("0")
