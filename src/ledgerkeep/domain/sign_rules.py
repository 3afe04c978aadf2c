"""Canonical mapping from transaction role to balance delta.

Sign convention: a positive account balance means the counterparty owes us,
a negative balance means we owe them. Every balance computation in the
package goes through this module.
"""

from decimal import Decimal
from typing import Mapping, Optional

from ledgerkeep.domain.entities import PartyRole, Transaction, TransactionCategory

ZERO = Decimal("0")

# Sign applied to the amount when an account is the primary party of a
# non-debt-transfer record.
PRIMARY_ROLE_SIGNS: dict[TransactionCategory, int] = {
    TransactionCategory.REVENUE: 1,
    TransactionCategory.COLLECTION: 1,
    TransactionCategory.EXPENSE: -1,
    TransactionCategory.PAYMENT: -1,
    TransactionCategory.TRANSFER: 0,
    TransactionCategory.ADMINISTRATIVE_RESET: 0,
    TransactionCategory.LOG_ONLY: 0,
}

# Categories that never move a balance, whatever role the account plays.
NEUTRAL_CATEGORIES = frozenset(
    {TransactionCategory.ADMINISTRATIVE_RESET, TransactionCategory.LOG_ONLY}
)

DEBT_TRANSFER_ROLE_SIGNS: dict[PartyRole, int] = {
    PartyRole.DEBTOR: 0,
    PartyRole.NEW_CREDITOR: -1,
    PartyRole.OLD_CREDITOR: 1,
}


def transaction_amount(transaction: Transaction) -> Decimal:
    """Return the effective, non-negative amount of a transaction.

    ``total_amount`` takes precedence over ``amount`` when present.
    """
    raw = transaction.total_amount if transaction.total_amount is not None else transaction.amount
    return abs(Decimal(raw or 0))


def debt_transfer_delta(role: PartyRole, amount: Decimal) -> Decimal:
    """Return the balance delta for a role in a debt transfer."""
    sign = DEBT_TRANSFER_ROLE_SIGNS.get(role, 0)
    return abs(amount) * sign if sign else ZERO


def role_delta(category: TransactionCategory, role: PartyRole, amount: Decimal) -> Decimal:
    """Return the balance delta for a role in a non-debt-transfer record.

    Args:
        category: Classifier category of the record
        role: PRIMARY, SOURCE (outbound leg) or TARGET (inbound leg)
        amount: Effective amount

    Returns:
        Signed delta
    """
    if category in NEUTRAL_CATEGORIES:
        return ZERO
    amount = abs(amount)
    if role is PartyRole.PRIMARY:
        sign = PRIMARY_ROLE_SIGNS.get(category, 0)
        return amount * sign if sign else ZERO
    if role is PartyRole.SOURCE:
        return -amount
    if role is PartyRole.TARGET:
        return amount
    return ZERO


def resolve_role(
    transaction: Transaction, account_id: int, is_debt_transfer: bool
) -> Optional[PartyRole]:
    """Return the role the account plays, checking primary, source, then target."""
    if account_id == transaction.primary_party:
        return PartyRole.DEBTOR if is_debt_transfer else PartyRole.PRIMARY
    if account_id == transaction.source_party:
        return PartyRole.NEW_CREDITOR if is_debt_transfer else PartyRole.SOURCE
    if account_id == transaction.target_party:
        return PartyRole.OLD_CREDITOR if is_debt_transfer else PartyRole.TARGET
    return None


def delta_for(
    transaction: Transaction,
    account_id: int,
    category: TransactionCategory,
    is_debt_transfer: bool,
) -> Decimal:
    """Return the delta a transaction contributes to one account's balance."""
    role = resolve_role(transaction, account_id, is_debt_transfer)
    if role is None:
        return ZERO
    amount = transaction_amount(transaction)
    if is_debt_transfer:
        return debt_transfer_delta(role, amount)
    return role_delta(category, role, amount)


def debt_transfer_impacts(transaction: Transaction) -> dict[int, Decimal]:
    """Return account id -> delta for every populated debt transfer role."""
    amount = transaction_amount(transaction)
    impacts: dict[int, Decimal] = {}
    roles = (
        (transaction.primary_party, PartyRole.DEBTOR),
        (transaction.source_party, PartyRole.NEW_CREDITOR),
        (transaction.target_party, PartyRole.OLD_CREDITOR),
    )
    for account_id, role in roles:
        if account_id is not None:
            impacts[account_id] = impacts.get(account_id, ZERO) + debt_transfer_delta(role, amount)
    return impacts


def validate_debt_transfer_impacts(
    impacts: Mapping[int, Decimal], transaction: Transaction
) -> list[str]:
    """Check a set of impacts against the canonical debt transfer rules.

    Returns:
        List of error messages, empty when the impacts are canonical
    """
    errors = []
    amount = transaction_amount(transaction)
    expected = (
        (transaction.primary_party, ZERO, "Debtor"),
        (transaction.source_party, -amount, "New creditor"),
        (transaction.target_party, amount, "Old creditor"),
    )
    for account_id, want, label in expected:
        if account_id is None:
            continue
        got = impacts.get(account_id, ZERO)
        if got != want:
            errors.append(f"{label} impact should be {want}, got {got}")

    total = sum(impacts.values(), ZERO)
    if total != ZERO:
        errors.append(f"Debt transfer impacts sum to {total}, expected 0")
    return errors
