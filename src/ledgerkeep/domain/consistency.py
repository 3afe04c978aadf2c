"""P&L preservation check for migration batches."""

from decimal import Decimal
from typing import Iterable

from ledgerkeep.domain.balance import BALANCE_EPSILON
from ledgerkeep.domain.classifier import classify
from ledgerkeep.domain.entities import (
    ConsistencyResult,
    PnLTotals,
    Transaction,
    TransactionCategory,
)
from ledgerkeep.domain.sign_rules import ZERO, transaction_amount


def pnl_totals(transactions: Iterable[Transaction]) -> PnLTotals:
    """Aggregate revenue and expense.

    Debt transfers, administrative resets, log-only and deleted records never
    count toward either total.
    """
    revenue = ZERO
    expense = ZERO
    for txn in transactions:
        if txn.is_deleted:
            continue
        category = classify(txn).category
        if category is TransactionCategory.REVENUE:
            revenue += transaction_amount(txn)
        elif category is TransactionCategory.EXPENSE:
            expense += transaction_amount(txn)
    return PnLTotals(revenue=revenue, expense=expense)


def validate(
    original_transactions: Iterable[Transaction],
    proposed_transactions: Iterable[Transaction],
    epsilon: Decimal = BALANCE_EPSILON,
) -> ConsistencyResult:
    """Compare P&L totals before and after a proposed rewrite.

    Args:
        original_transactions: Transaction set as currently stored
        proposed_transactions: The same set with proposed rewrites applied
        epsilon: Largest tolerated difference per aggregate

    Returns:
        ConsistencyResult; ``valid`` is False when either aggregate moved by
        more than epsilon
    """
    before = pnl_totals(original_transactions)
    after = pnl_totals(proposed_transactions)
    errors = []

    revenue_diff = abs(after.revenue - before.revenue)
    if revenue_diff > epsilon:
        errors.append(
            f"Revenue total changed by {revenue_diff:.2f} "
            f"(before {before.revenue:.2f}, after {after.revenue:.2f})"
        )

    expense_diff = abs(after.expense - before.expense)
    if expense_diff > epsilon:
        errors.append(
            f"Expense total changed by {expense_diff:.2f} "
            f"(before {before.expense:.2f}, after {after.expense:.2f})"
        )

    return ConsistencyResult(valid=not errors, errors=tuple(errors), before=before, after=after)
