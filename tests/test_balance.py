"""Tests for balance calculation."""

import random
from decimal import Decimal

import pytest

from conftest import build_transaction
from ledgerkeep.domain.balance import compute_all_balances, compute_balance, exceeds_epsilon
from ledgerkeep.domain.entities import TransactionType


def test_revenue_minus_expense():
    transactions = [
        build_transaction(id=1, type=TransactionType.REVENUE, amount="1000", primary_party=1),
        build_transaction(id=2, type=TransactionType.EXPENSE, amount="300", primary_party=1),
    ]
    assert compute_balance(1, transactions) == Decimal("700")


def test_debt_transfer_balances():
    debtor, lender, settled = 1, 2, 3
    transactions = [
        build_transaction(
            type=TransactionType.DEBT_TRANSFER,
            amount="200",
            primary_party=debtor,
            source_party=lender,
            target_party=settled,
        )
    ]
    assert compute_balance(debtor, transactions) == Decimal("0")
    assert compute_balance(lender, transactions) == Decimal("-200")
    assert compute_balance(settled, transactions) == Decimal("200")


def test_deleted_and_hidden_records_are_ignored():
    transactions = [
        build_transaction(id=1, amount="100", primary_party=1),
        build_transaction(id=2, amount="50", primary_party=1, is_deleted=True),
        build_transaction(id=3, amount="25", primary_party=1, affects_balance=False),
    ]
    assert compute_balance(1, transactions) == Decimal("100")


def test_administrative_reset_and_log_records_are_neutral():
    transactions = [
        build_transaction(id=1, type=TransactionType.ADMINISTRATIVE_RESET, amount="900", primary_party=1),
        build_transaction(id=2, type=TransactionType.REVENUE, amount="40", primary_party=1, is_log=True),
    ]
    assert compute_balance(1, transactions) == Decimal("0")


def test_empty_history_is_zero():
    assert compute_balance(1, []) == Decimal("0")


def _manual_sum(account_id, transactions):
    """Brute-force fold using the sign table written out longhand."""
    total = Decimal("0")
    for txn in transactions:
        if txn.is_deleted or not txn.affects_balance:
            continue
        amount = abs(txn.total_amount if txn.total_amount is not None else txn.amount)
        if txn.type is TransactionType.DEBT_TRANSFER or (
            txn.type is TransactionType.TRANSFER and txn.source_party and txn.target_party
        ):
            if account_id == txn.primary_party:
                continue
            if account_id == txn.source_party:
                total -= amount
            elif account_id == txn.target_party:
                total += amount
            continue
        if txn.type is TransactionType.ADMINISTRATIVE_RESET:
            continue
        if account_id == txn.primary_party:
            if txn.type in (TransactionType.REVENUE, TransactionType.COLLECTION):
                total += amount
            elif txn.type in (TransactionType.EXPENSE, TransactionType.PAYMENT):
                total -= amount
        elif account_id == txn.source_party:
            total -= amount
        elif account_id == txn.target_party:
            total += amount
    return total


@pytest.mark.parametrize("seed", range(10))
def test_matches_manual_sum_on_random_ledgers(seed):
    rng = random.Random(seed)
    types = list(TransactionType)
    accounts = [1, 2, 3, 4]
    transactions = []
    for txn_id in range(1, 60):
        parties = rng.sample(accounts, 3)
        transactions.append(
            build_transaction(
                id=txn_id,
                type=rng.choice(types),
                amount=str(Decimal(rng.randint(1, 100000)) / 100),
                primary_party=parties[0] if rng.random() < 0.8 else None,
                source_party=parties[1] if rng.random() < 0.5 else None,
                target_party=parties[2] if rng.random() < 0.5 else None,
                is_deleted=rng.random() < 0.1,
                affects_balance=rng.random() > 0.1,
            )
        )

    balances = compute_all_balances(accounts, transactions)
    for account_id in accounts:
        expected = _manual_sum(account_id, transactions)
        assert compute_balance(account_id, transactions) == expected
        assert balances[account_id] == expected


def test_epsilon_boundary():
    assert not exceeds_epsilon(Decimal("0.005"))
    assert not exceeds_epsilon(Decimal("-0.01"))
    assert exceeds_epsilon(Decimal("0.011"))
