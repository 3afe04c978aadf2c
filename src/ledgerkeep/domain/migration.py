"""Legacy transfer migration analysis.

Legacy records store a liability reassignment as a generic two-party
transfer. The analyzer infers the missing debtor from account kinds and
proposes a canonical three-party debt transfer with a confidence level. It
never mutates its input; proposals are recommendations only.
"""

from collections import Counter
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from ledgerkeep.domain.account_kind import is_internal
from ledgerkeep.domain.classifier import is_legacy_transfer
from ledgerkeep.domain.entities import (
    Account,
    Confidence,
    MigrationProposal,
    MigrationStatus,
    Transaction,
)
from ledgerkeep.domain.sign_rules import ZERO, transaction_amount
from ledgerkeep.domain.snapshot import LedgerSnapshot

AccountLookup = Callable[[int], Optional[Account]]


def _name(account: Optional[Account], account_id: Optional[int]) -> str:
    if account is not None:
        return account.display_name
    return f"#{account_id}"


def validate_parties(
    debtor: Optional[int],
    new_creditor: Optional[int],
    old_creditor: Optional[int],
    amount: Decimal,
    open_slots: Iterable[str] = (),
) -> list[str]:
    """Check that a proposed debt transfer has three distinct parties and a positive amount.

    Args:
        debtor: Proposed debtor account id
        new_creditor: Proposed new creditor (lender) account id
        old_creditor: Proposed old creditor (settled) account id
        amount: Effective amount
        open_slots: Role names deliberately left unresolved for review; they
            are not reported as missing

    Returns:
        List of error messages
    """
    errors = []
    skip = set(open_slots)
    parties = {"debtor": debtor, "new_creditor": new_creditor, "old_creditor": old_creditor}
    labels = {"debtor": "Debtor", "new_creditor": "New creditor", "old_creditor": "Old creditor"}

    for role, account_id in parties.items():
        if account_id is None and role not in skip:
            errors.append(f"{labels[role]} is required")

    pairs = (("debtor", "new_creditor"), ("debtor", "old_creditor"), ("new_creditor", "old_creditor"))
    for left, right in pairs:
        if parties[left] is not None and parties[left] == parties[right]:
            errors.append(f"{labels[left]} and {labels[right].lower()} must be different accounts")

    if amount <= ZERO:
        errors.append("Transfer amount must be greater than zero")
    return errors


def _proposal(
    transaction: Transaction,
    status: MigrationStatus,
    confidence: Confidence,
    issues: Sequence[str] = (),
    suggestions: Sequence[str] = (),
    debtor: Optional[int] = None,
    new_creditor: Optional[int] = None,
    old_creditor: Optional[int] = None,
) -> MigrationProposal:
    return MigrationProposal(
        source_transaction_id=transaction.id,
        status=status,
        confidence=confidence,
        proposed_debtor=debtor,
        proposed_new_creditor=new_creditor,
        proposed_old_creditor=old_creditor,
        amount=transaction_amount(transaction),
        description=transaction.description,
        issues=tuple(issues),
        suggestions=tuple(suggestions),
    )


def analyze(
    transaction: Transaction,
    account_lookup: AccountLookup,
    all_accounts: Sequence[Account],
    internal_check: Callable[[Account], bool] = is_internal,
) -> MigrationProposal:
    """Propose a three-party reinterpretation of a legacy transfer.

    Args:
        transaction: Candidate record
        account_lookup: Resolves an account id to an account (or None)
        all_accounts: Every account, in store order, used to find the debtor
            when both legacy parties are counterparties
        internal_check: Decides whether an account is one of our own; a
            snapshot passes its precomputed kind index here

    Returns:
        MigrationProposal; only READY proposals are eligible for automatic
        application
    """
    if not is_legacy_transfer(transaction):
        return _proposal(
            transaction,
            MigrationStatus.SKIPPED,
            Confidence.LOW,
            issues=["Transaction does not need migration"],
        )

    source_id = transaction.source_party
    target_id = transaction.target_party
    source = account_lookup(source_id)
    target = account_lookup(target_id)

    if source is None or target is None:
        missing = [str(i) for i, acc in ((source_id, source), (target_id, target)) if acc is None]
        return _proposal(
            transaction,
            MigrationStatus.NEEDS_REVIEW,
            Confidence.LOW,
            issues=[f"Account(s) not found: {', '.join(missing)}"],
        )

    source_internal = internal_check(source)
    target_internal = internal_check(target)
    issues: list[str] = []
    suggestions: list[str] = []
    open_slots: list[str] = []

    if source_internal and target_internal:
        return _proposal(
            transaction,
            MigrationStatus.SKIPPED,
            Confidence.LOW,
            issues=["Both accounts are internal - not a debt transfer"],
        )

    if source_internal != target_internal:
        # The internal party is the debtor; the creditor on its side of the
        # legacy record is not named anywhere.
        status, confidence = MigrationStatus.NEEDS_REVIEW, Confidence.MEDIUM
        if source_internal:
            debtor, new_creditor, old_creditor = source_id, None, target_id
            open_slots.append("new_creditor")
            issues.append("Cannot determine the new creditor (lender) - not named in the legacy record")
            suggestions.append(
                f"Possible: {_name(source, source_id)} (company) settled its debt to "
                f"{_name(target, target_id)} by borrowing from an unknown lender"
            )
        else:
            debtor, new_creditor, old_creditor = target_id, source_id, None
            open_slots.append("old_creditor")
            issues.append("Cannot determine the old creditor (settled) - not named in the legacy record")
            suggestions.append(
                f"Possible: {_name(target, target_id)} (company) borrowed from "
                f"{_name(source, source_id)} to settle an unknown creditor"
            )
    else:
        internal_accounts = [acc for acc in all_accounts if internal_check(acc)]
        new_creditor, old_creditor = source_id, target_id

        if len(internal_accounts) == 1:
            status, confidence = MigrationStatus.READY, Confidence.HIGH
            debtor = internal_accounts[0].id
        elif len(internal_accounts) > 1:
            status, confidence = MigrationStatus.NEEDS_REVIEW, Confidence.MEDIUM
            debtor = internal_accounts[0].id
            issues.append(
                f"Ambiguous debtor: multiple internal accounts found ({len(internal_accounts)}); "
                f"{internal_accounts[0].display_name} chosen provisionally"
            )
            suggestions.append(
                f"Debt transfer: {_name(source, source_id)} -> {_name(target, target_id)} "
                "(confirm the debtor)"
            )
        else:
            return _proposal(
                transaction,
                MigrationStatus.NEEDS_REVIEW,
                Confidence.LOW,
                issues=["No internal account found to use as debtor"],
            )

    structural = validate_parties(
        debtor, new_creditor, old_creditor, transaction_amount(transaction), open_slots
    )
    if structural:
        status, confidence = MigrationStatus.NEEDS_REVIEW, Confidence.LOW
        issues.extend(structural)

    if transaction.migration_status == MigrationStatus.FAILED.value:
        # A human rejected an earlier proposal; never auto-apply it again.
        status = MigrationStatus.NEEDS_REVIEW
        issues.append(f"Previously rejected: {transaction.rejection_reason or 'no reason given'}")

    return _proposal(
        transaction,
        status,
        confidence,
        issues=issues,
        suggestions=suggestions,
        debtor=debtor,
        new_creditor=new_creditor,
        old_creditor=old_creditor,
    )


def analyze_all(snapshot: LedgerSnapshot) -> list[MigrationProposal]:
    """Analyze every live legacy transfer in the snapshot."""
    return [
        analyze(txn, snapshot.get_account, snapshot.accounts, snapshot.is_internal)
        for txn in snapshot.transactions
        if not txn.is_deleted and is_legacy_transfer(txn)
    ]


def migration_statistics(proposals: Iterable[MigrationProposal]) -> dict[str, int]:
    """Count proposals per status and per confidence."""
    proposals = list(proposals)
    statuses = Counter(p.status for p in proposals)
    confidences = Counter(p.confidence for p in proposals)
    stats = {"total": len(proposals)}
    for status in MigrationStatus:
        stats[status.value] = statuses.get(status, 0)
    for confidence in Confidence:
        stats[f"{confidence.value}_confidence"] = confidences.get(confidence, 0)
    return stats
