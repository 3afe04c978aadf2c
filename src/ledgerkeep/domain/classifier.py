"""Authoritative transaction classifier.

Every component decides "is this a debt transfer" through this module. The
decision depends only on (type, source_party, target_party).
"""

from typing import Optional

from ledgerkeep.domain.entities import (
    RECORD_TYPE_LOG,
    Classification,
    Transaction,
    TransactionCategory,
    TransactionType,
)

_CATEGORY_BY_TYPE = {
    TransactionType.REVENUE: TransactionCategory.REVENUE,
    TransactionType.EXPENSE: TransactionCategory.EXPENSE,
    TransactionType.COLLECTION: TransactionCategory.COLLECTION,
    TransactionType.PAYMENT: TransactionCategory.PAYMENT,
    TransactionType.TRANSFER: TransactionCategory.TRANSFER,
    TransactionType.DEBT_TRANSFER: TransactionCategory.DEBT_TRANSFER,
    TransactionType.ADMINISTRATIVE_RESET: TransactionCategory.ADMINISTRATIVE_RESET,
}


def is_debt_transfer(
    txn_type: "TransactionType | str",
    source_party: Optional[int],
    target_party: Optional[int],
) -> bool:
    """Return True if the record is a three-party liability reassignment.

    Rules, in order:
    1. explicit debt_transfer type
    2. generic transfer carrying both a source and a target party
    """
    parsed = TransactionType.parse(txn_type)
    if parsed is TransactionType.DEBT_TRANSFER:
        return True
    if parsed is TransactionType.TRANSFER:
        return source_party is not None and target_party is not None
    return False


def is_legacy_transfer(transaction: Transaction) -> bool:
    """Return True for a two-party transfer that is a debt transfer only by shape."""
    return (
        transaction.type is TransactionType.TRANSFER
        and is_debt_transfer(transaction.type, transaction.source_party, transaction.target_party)
    )


def is_log_only(transaction: Transaction) -> bool:
    """Return True if the record carries legacy log-only markers."""
    return transaction.is_log or transaction.record_type == RECORD_TYPE_LOG


def classify(transaction: Transaction) -> Classification:
    """Classify a transaction.

    Debt transfers are recognised before log markers so that a debt transfer
    wrongly flagged as a log is still seen as one.
    """
    if is_debt_transfer(transaction.type, transaction.source_party, transaction.target_party):
        return Classification(TransactionCategory.DEBT_TRANSFER, True)
    if is_log_only(transaction):
        return Classification(TransactionCategory.LOG_ONLY, False)
    return Classification(_CATEGORY_BY_TYPE[transaction.type], False)
