"""Balance calculation from full transaction history."""

from decimal import Decimal
from typing import Iterable

from ledgerkeep.domain.classifier import classify
from ledgerkeep.domain.entities import Transaction
from ledgerkeep.domain.sign_rules import ZERO, delta_for

# Differences at or below this are treated as rounding noise.
BALANCE_EPSILON = Decimal("0.01")


def counts_toward_balance(transaction: Transaction) -> bool:
    """Return True if the record participates in balance calculation."""
    return not transaction.is_deleted and transaction.affects_balance


def compute_balance(account_id: int, transactions: Iterable[Transaction]) -> Decimal:
    """Fold a transaction set into one account's net balance.

    Args:
        account_id: Account to compute
        transactions: Any transaction set; records not referencing the account
            contribute nothing

    Returns:
        Net balance (positive = counterparty owes us)
    """
    balance = ZERO
    for txn in transactions:
        if not counts_toward_balance(txn) or not txn.involves(account_id):
            continue
        classification = classify(txn)
        balance += delta_for(
            txn, account_id, classification.category, classification.is_debt_transfer
        )
    return balance


def compute_all_balances(
    account_ids: Iterable[int], transactions: Iterable[Transaction]
) -> dict[int, Decimal]:
    """Compute balances for many accounts in a single pass over the transactions."""
    balances = {account_id: ZERO for account_id in account_ids}
    for txn in transactions:
        if not counts_toward_balance(txn):
            continue
        classification = classify(txn)
        # A party id repeated across roles is only counted once, in its first role.
        for account_id in dict.fromkeys(p for p in txn.parties if p is not None):
            if account_id not in balances:
                continue
            balances[account_id] += delta_for(
                txn, account_id, classification.category, classification.is_debt_transfer
            )
    return balances


def exceeds_epsilon(difference: Decimal) -> bool:
    """Return True if a balance difference is larger than rounding noise."""
    return abs(difference) > BALANCE_EPSILON
