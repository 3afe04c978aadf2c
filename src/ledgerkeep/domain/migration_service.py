"""Migration application, review decisions and post-apply verification."""

import time
from dataclasses import replace
from typing import Any, Iterable, Optional

import structlog

from ledgerkeep.database.base import Database
from ledgerkeep.domain import consistency
from ledgerkeep.domain.batching import DEFAULT_BATCH_SIZE, ProgressCallback, chunk, run_batches
from ledgerkeep.domain.classifier import classify, is_legacy_transfer
from ledgerkeep.domain.entities import (
    RECORD_TYPE_TRANSACTION,
    InvalidDebtTransfer,
    MigrationAnalysisResult,
    MigrationApplyResult,
    MigrationProposal,
    MigrationStatus,
    Transaction,
    TransactionType,
    VerificationResult,
)
from ledgerkeep.domain.errors import (
    ConsistencyError,
    NotFoundError,
    ValidationError,
    account_not_found,
    transaction_not_found,
)
from ledgerkeep.domain.migration import analyze, analyze_all, migration_statistics, validate_parties
from ledgerkeep.domain.reconciliation import ReconciliationService, find_corrections
from ledgerkeep.domain.reports import (
    render_migration_analysis_report,
    render_migration_apply_report,
    render_verification_report,
)
from ledgerkeep.domain.sign_rules import (
    debt_transfer_impacts,
    transaction_amount,
    validate_debt_transfer_impacts,
)
from ledgerkeep.domain.snapshot import LedgerSnapshot

STORED_STATUS_MIGRATED = "migrated"
AUTO_PREFIX = "[AUTO-MIGRATED]"
REVIEWED_PREFIX = "[MIGRATION - REVIEWED]"

logger = structlog.get_logger(__name__)


def canonical_patch(proposal: MigrationProposal, original: Transaction) -> dict[str, Any]:
    """Build the field patch that rewrites a legacy transfer as a debt transfer."""
    prefix = REVIEWED_PREFIX if proposal.approved else AUTO_PREFIX
    description = original.description or "Debt transfer"
    if not description.startswith((AUTO_PREFIX, REVIEWED_PREFIX)):
        description = f"{prefix} {description}"
    return {
        "type": TransactionType.DEBT_TRANSFER,
        "primary_party": proposal.proposed_debtor,
        "source_party": proposal.proposed_new_creditor,
        "target_party": proposal.proposed_old_creditor,
        "affects_balance": True,
        "is_log": False,
        "record_type": RECORD_TYPE_TRANSACTION,
        "migration_flag": True,
        "needs_review": False,
        "migration_status": STORED_STATUS_MIGRATED,
        "description": description,
    }


class MigrationService:
    """Service for migrating legacy transfers into three-party debt transfers."""

    def __init__(self, db: Database, batch_size: Optional[int] = None):
        """Initialize migration service.

        Args:
            db: Database instance
            batch_size: Override for the per-batch operation limit
        """
        self.db = db
        self.batch_size = batch_size
        self._logger = logger.bind(component="migration")

    def analyze_migration_candidates(self) -> MigrationAnalysisResult:
        """Analyze every legacy transfer and return proposals. Writes nothing."""
        started = time.perf_counter()
        snapshot = LedgerSnapshot.load(self.db)
        proposals = analyze_all(snapshot)
        stats = migration_statistics(proposals)
        self._logger.info("migration_analysis_complete", **stats)

        result = MigrationAnalysisResult(
            proposals=tuple(proposals),
            statistics=stats,
            elapsed_seconds=time.perf_counter() - started,
            report="",
        )
        return replace(result, report=render_migration_analysis_report(result, snapshot))

    def apply_migration(
        self,
        proposals: Iterable[MigrationProposal],
        progress: Optional[ProgressCallback] = None,
    ) -> MigrationApplyResult:
        """Rewrite the transactions behind READY proposals.

        The P&L consistency check runs before anything is written. Rewrites
        go out in bounded batches; a failed batch is recorded and the
        remaining batches still run. A reconciliation pass follows.

        Args:
            proposals: Proposals to apply; anything not READY is skipped
            progress: Optional callback, called once per committed batch

        Returns:
            MigrationApplyResult

        Raises:
            ConsistencyError: If the rewrites would change revenue or expense totals
        """
        started = time.perf_counter()
        proposals = list(proposals)
        snapshot = LedgerSnapshot.load(self.db)
        by_id = {txn.id: txn for txn in snapshot.transactions}

        rewrites: dict[int, dict[str, Any]] = {}
        skipped = 0
        for proposal in proposals:
            original = by_id.get(proposal.source_transaction_id)
            if not self._applicable(proposal, original):
                skipped += 1
                continue
            rewrites[original.id] = canonical_patch(proposal, original)

        proposed = [replace(txn, **rewrites[txn.id]) if txn.id in rewrites else txn for txn in snapshot.transactions]
        check = consistency.validate(snapshot.transactions, proposed)
        if not check.valid:
            self._logger.error("migration_consistency_failed", errors=list(check.errors))
            raise ConsistencyError(check)

        items = list(rewrites.items())
        outcome = run_batches(
            items,
            lambda batch: self.db.update_transactions(dict(batch)),
            progress=progress,
            batch_size=self.batch_size,
            operation="migration",
        )

        batches = chunk(items, self.batch_size or DEFAULT_BATCH_SIZE) if items else []
        failed_ids = {
            txn_id for failure in outcome.failures for txn_id, _ in batches[failure.batch_index - 1]
        }
        migrated_ids = tuple(txn_id for txn_id, _ in items if txn_id not in failed_ids)

        reconciliation = None
        if migrated_ids:
            reconciliation = ReconciliationService(self.db, batch_size=self.batch_size).apply_reconciliation()

        self._logger.info(
            "migration_applied",
            migrated=len(migrated_ids),
            skipped=skipped,
            failed=outcome.failed,
        )
        result = MigrationApplyResult(
            migrated=len(migrated_ids),
            skipped=skipped,
            failed=outcome.failed,
            migrated_transaction_ids=migrated_ids,
            consistency=check,
            failures=outcome.failures,
            reconciliation=reconciliation,
            elapsed_seconds=time.perf_counter() - started,
            report="",
        )
        return replace(result, report=render_migration_apply_report(result))

    def _applicable(self, proposal: MigrationProposal, original: Optional[Transaction]) -> bool:
        if proposal.status is not MigrationStatus.READY:
            return False
        if original is None or original.is_deleted or not is_legacy_transfer(original):
            self._logger.warning(
                "migration_proposal_stale", transaction_id=proposal.source_transaction_id
            )
            return False
        errors = validate_parties(
            proposal.proposed_debtor,
            proposal.proposed_new_creditor,
            proposal.proposed_old_creditor,
            transaction_amount(original),
        )
        if errors:
            self._logger.warning(
                "migration_proposal_invalid",
                transaction_id=proposal.source_transaction_id,
                errors=errors,
            )
            return False
        return True

    def approve_proposal(
        self,
        transaction_id: int,
        debtor: int,
        new_creditor: int,
        old_creditor: int,
        progress: Optional[ProgressCallback] = None,
    ) -> MigrationApplyResult:
        """Resolve a reviewed proposal's parties and apply it.

        Args:
            transaction_id: Legacy transfer being approved
            debtor: Account whose obligation is reassigned
            new_creditor: Lender, now owed
            old_creditor: Settled creditor, no longer owed
            progress: Optional callback, called once per committed batch

        Raises:
            NotFoundError: If the transaction or an account does not exist
            ValidationError: If the record is not a legacy transfer or the
                parties are not three distinct accounts
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        for account_id in (debtor, new_creditor, old_creditor):
            if self.db.get_account(account_id) is None:
                raise NotFoundError(account_not_found(account_id))
        if txn.is_deleted or not is_legacy_transfer(txn):
            raise ValidationError(f"Transaction {transaction_id} is not a legacy transfer awaiting migration")

        errors = validate_parties(debtor, new_creditor, old_creditor, transaction_amount(txn))
        if errors:
            raise ValidationError("; ".join(errors))

        snapshot = LedgerSnapshot.load(self.db)
        base = analyze(txn, snapshot.get_account, snapshot.accounts, snapshot.is_internal)
        approved = replace(
            base,
            status=MigrationStatus.READY,
            proposed_debtor=debtor,
            proposed_new_creditor=new_creditor,
            proposed_old_creditor=old_creditor,
            approved=True,
        )
        self._logger.info(
            "migration_proposal_approved",
            transaction_id=transaction_id,
            original_confidence=base.confidence.value,
        )
        return self.apply_migration([approved], progress=progress)

    def reject_proposal(self, transaction_id: int, reason: str) -> Transaction:
        """Keep the legacy record as is and flag it for later review.

        Raises:
            NotFoundError: If the transaction does not exist
            ValidationError: If no reason is given or the record is not a live
                legacy transfer
        """
        if not reason or not reason.strip():
            raise ValidationError("A rejection reason is required")
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.is_deleted or not is_legacy_transfer(txn):
            raise ValidationError(f"Transaction {transaction_id} is not a legacy transfer awaiting migration")

        self.db.update_transactions(
            {
                transaction_id: {
                    "needs_review": True,
                    "migration_status": MigrationStatus.FAILED.value,
                    "rejection_reason": reason.strip(),
                }
            }
        )
        self._logger.info("migration_proposal_rejected", transaction_id=transaction_id)
        return self.db.get_transaction(transaction_id)

    def verify_post_apply(self) -> VerificationResult:
        """Check balances and debt transfer structure after a migration."""
        started = time.perf_counter()
        snapshot = LedgerSnapshot.load(self.db)
        mismatches = find_corrections(snapshot)

        invalid = []
        pending_review = 0
        legacy_remaining = 0
        for txn in snapshot.transactions:
            if txn.is_deleted:
                continue
            if txn.needs_review:
                pending_review += 1
            if is_legacy_transfer(txn):
                legacy_remaining += 1
                continue
            if not classify(txn).is_debt_transfer:
                continue
            errors = validate_parties(
                txn.primary_party, txn.source_party, txn.target_party, transaction_amount(txn)
            )
            errors += validate_debt_transfer_impacts(debt_transfer_impacts(txn), txn)
            if errors:
                invalid.append(InvalidDebtTransfer(transaction_id=txn.id, errors=tuple(errors)))

        notes = []
        if mismatches:
            notes.append("Stored balances drifted; run reconciliation.")
        if legacy_remaining:
            notes.append("Legacy transfers remain; run migration analysis.")

        self._logger.info(
            "post_apply_verification",
            mismatches=len(mismatches),
            invalid_debt_transfers=len(invalid),
            pending_review=pending_review,
            legacy_remaining=legacy_remaining,
        )
        result = VerificationResult(
            balance_mismatches=tuple(mismatches),
            invalid_debt_transfers=tuple(invalid),
            pending_review=pending_review,
            legacy_transfers_remaining=legacy_remaining,
            elapsed_seconds=time.perf_counter() - started,
            notes=tuple(notes),
        )
        return replace(result, report=render_verification_report(result))
