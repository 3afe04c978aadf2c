"""Plain-text reports for reconciliation, migration and visibility runs."""

from datetime import datetime, UTC
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from ledgerkeep.domain.classifier import classify

if TYPE_CHECKING:
    from ledgerkeep.domain.entities import (
        BatchFailure,
        MigrationAnalysisResult,
        MigrationApplyResult,
        ReconciliationResult,
        VerificationResult,
        VisibilityResult,
    )
    from ledgerkeep.domain.snapshot import LedgerSnapshot

RULE = "=" * 60
SUBRULE = "-" * 60
RERUN_NOTICE = "One or more batches failed. Re-running is safe and recommended."


def format_amount(value: Optional[Decimal]) -> str:
    """Format a money value with sign and two decimals."""
    if value is None:
        return "-"
    return f"{value:+,.2f}"


def _header(title: str) -> list[str]:
    return [
        RULE,
        f"  {title}",
        RULE,
        f"Generated: {datetime.now(UTC).strftime('%Y-%m-%d %H:%M:%S')} UTC",
        "",
    ]


def _failures(failures: "tuple[BatchFailure, ...]") -> list[str]:
    if not failures:
        return []
    lines = ["", "--- Failed batches ---"]
    for failure in failures:
        lines.append(f"Batch {failure.batch_index}: {failure.record_count} record(s) - {failure.error}")
    lines.extend(["", RERUN_NOTICE])
    return lines


def render_reconciliation_report(
    result: "ReconciliationResult", snapshot: "LedgerSnapshot"
) -> str:
    """Render a balance correction report."""
    debt_transfers = [t for t in snapshot.transactions if classify(t).is_debt_transfer]
    active = sum(1 for t in debt_transfers if not t.is_deleted)

    lines = _header("BALANCE RECONCILIATION REPORT" + (" (DRY RUN)" if result.dry_run else ""))
    lines += [
        "Sign convention: positive = counterparty owes us, negative = we owe them",
        "Debt transfer deltas: debtor 0, new creditor -amount, old creditor +amount",
        "",
        "--- Debt transfer statistics ---",
        f"Total: {len(debt_transfers)}",
        f"Active: {active}",
        f"Deleted: {len(debt_transfers) - active}",
        "",
        "--- Balance corrections ---",
        f"Accounts checked: {result.accounts_checked}",
        f"Corrections needed: {len(result.corrections)}",
    ]
    if not result.dry_run:
        lines.append(f"Corrected: {result.corrected}")
    lines.append("")

    if not result.corrections:
        lines.append("No corrections needed. All stored balances match history.")
    for index, correction in enumerate(result.corrections, start=1):
        lines += [
            f"{index}. {correction.account_name} (ID: {correction.account_id})",
            f"   Stored:       {format_amount(correction.stored_balance)}",
            f"   Recalculated: {format_amount(correction.recalculated_balance)}",
            f"   Difference:   {format_amount(correction.difference)}",
        ]

    lines += _failures(result.failures)
    lines += ["", f"Elapsed: {result.elapsed_seconds:.2f}s", RULE]
    return "\n".join(lines) + "\n"


def render_migration_analysis_report(
    result: "MigrationAnalysisResult", snapshot: "LedgerSnapshot"
) -> str:
    """Render the list of migration proposals."""
    stats = result.statistics
    lines = _header("DEBT TRANSFER MIGRATION ANALYSIS")
    lines += [
        f"Legacy transfers analyzed: {stats.get('total', 0)}",
        f"Ready: {stats.get('ready', 0)}",
        f"Needs review: {stats.get('needs_review', 0)}",
        f"Skipped: {stats.get('skipped', 0)}",
        f"Confidence high/medium/low: {stats.get('high_confidence', 0)}/"
        f"{stats.get('medium_confidence', 0)}/{stats.get('low_confidence', 0)}",
        "",
    ]
    for proposal in result.proposals:
        lines += [
            SUBRULE,
            f"Transaction {proposal.source_transaction_id}: {proposal.status.value} "
            f"({proposal.confidence.value} confidence), amount {proposal.amount:,.2f}",
            f"  Debtor:       {_party(snapshot, proposal.proposed_debtor)}",
            f"  New creditor: {_party(snapshot, proposal.proposed_new_creditor)}",
            f"  Old creditor: {_party(snapshot, proposal.proposed_old_creditor)}",
        ]
        lines += [f"  Issue: {issue}" for issue in proposal.issues]
        lines += [f"  Suggestion: {suggestion}" for suggestion in proposal.suggestions]
    lines += ["", f"Elapsed: {result.elapsed_seconds:.2f}s", RULE]
    return "\n".join(lines) + "\n"


def _party(snapshot: "LedgerSnapshot", account_id: Optional[int]) -> str:
    if account_id is None:
        return "UNRESOLVED"
    return f"{snapshot.account_name(account_id)} (ID: {account_id})"


def render_migration_apply_report(result: "MigrationApplyResult") -> str:
    """Render the outcome of applying migration proposals."""
    consistency = result.consistency
    lines = _header("DEBT TRANSFER MIGRATION RESULT")
    lines += [
        f"Migrated: {result.migrated}",
        f"Skipped: {result.skipped}",
        f"Failed: {result.failed}",
        "",
        "--- P&L consistency ---",
        f"Revenue before/after: {consistency.before.revenue:,.2f} / {consistency.after.revenue:,.2f}",
        f"Expense before/after: {consistency.before.expense:,.2f} / {consistency.after.expense:,.2f}",
        "Status: " + ("preserved" if consistency.valid else "VIOLATED"),
    ]
    lines += [f"  {error}" for error in consistency.errors]
    if result.migrated_transaction_ids:
        lines += ["", "Migrated transactions: " + ", ".join(str(i) for i in result.migrated_transaction_ids)]
    if result.reconciliation is not None:
        lines += [
            "",
            "--- Follow-up reconciliation ---",
            f"Corrections: {len(result.reconciliation.corrections)}",
            f"Corrected: {result.reconciliation.corrected}",
        ]
    lines += _failures(result.failures)
    if result.reconciliation is not None and not result.failures:
        lines += _failures(result.reconciliation.failures)
    lines += ["", f"Elapsed: {result.elapsed_seconds:.2f}s", RULE]
    return "\n".join(lines) + "\n"


def render_visibility_report(result: "VisibilityResult") -> str:
    """Render the outcome of a visibility normalization run."""
    lines = _header("DEBT TRANSFER VISIBILITY FIX" + (" (DRY RUN)" if result.dry_run else ""))
    lines += [
        f"Debt transfers: {result.debt_transfers}",
        f"Need fixing: {len(result.changes)}",
        f"Already correct: {result.already_correct}",
    ]
    if not result.dry_run:
        lines.append(f"Fixed: {result.fixed}")
    for change in result.changes:
        fields = ", ".join(f"{key}={value}" for key, value in sorted(change.patch.items()))
        lines.append(f"  Transaction {change.transaction_id}: {fields}")
    if not result.dry_run:
        lines += ["", f"Balance mismatches remaining: {len(result.balance_mismatches)}"]
        if result.balance_mismatches:
            lines.append("Run reconciliation to correct them.")
    lines += _failures(result.failures)
    lines += ["", f"Elapsed: {result.elapsed_seconds:.2f}s", RULE]
    return "\n".join(lines) + "\n"


def render_verification_report(result: "VerificationResult") -> str:
    """Render a post-apply verification summary."""
    lines = _header("POST-APPLY VERIFICATION")
    lines += [
        "Status: " + ("OK" if result.ok else "PROBLEMS FOUND"),
        f"Balance mismatches: {len(result.balance_mismatches)}",
        f"Invalid debt transfers: {len(result.invalid_debt_transfers)}",
        f"Pending review: {result.pending_review}",
        f"Legacy transfers remaining: {result.legacy_transfers_remaining}",
    ]
    for correction in result.balance_mismatches:
        lines.append(
            f"  {correction.account_name} (ID: {correction.account_id}): "
            f"stored {format_amount(correction.stored_balance)}, "
            f"recalculated {format_amount(correction.recalculated_balance)}"
        )
    for invalid in result.invalid_debt_transfers:
        lines.append(f"  Transaction {invalid.transaction_id}: {'; '.join(invalid.errors)}")
    lines += [f"Note: {note}" for note in result.notes]
    lines += ["", f"Elapsed: {result.elapsed_seconds:.2f}s", RULE]
    return "\n".join(lines) + "\n"
