"""Visibility repair for debt transfers.

Legacy debt transfers were sometimes stored with ``affects_balance`` off or
marked as log entries, which hid them from balances. Migration provenance
flags are kept for audit but never suppress balance visibility.
"""

import time
from dataclasses import replace
from typing import Any, Optional

import structlog

from ledgerkeep.database.base import Database
from ledgerkeep.domain.batching import ProgressCallback, run_batches
from ledgerkeep.domain.classifier import classify
from ledgerkeep.domain.entities import (
    RECORD_TYPE_LOG,
    RECORD_TYPE_TRANSACTION,
    Transaction,
    VisibilityChange,
    VisibilityResult,
)
from ledgerkeep.domain.reconciliation import find_corrections
from ledgerkeep.domain.reports import render_visibility_report
from ledgerkeep.domain.snapshot import LedgerSnapshot

logger = structlog.get_logger(__name__)


def normalize(transaction: Transaction) -> Optional[dict[str, Any]]:
    """Return the patch that makes a debt transfer count toward balances.

    Returns:
        Patch of field -> value, or None when the record is not a debt
        transfer or is already normalized
    """
    if not classify(transaction).is_debt_transfer:
        return None

    patch: dict[str, Any] = {}
    if not transaction.affects_balance:
        patch["affects_balance"] = True
    if transaction.is_log:
        patch["is_log"] = False
    if transaction.record_type == RECORD_TYPE_LOG:
        patch["record_type"] = RECORD_TYPE_TRANSACTION
    return patch or None


class VisibilityService:
    """Service for scanning and repairing debt transfer visibility."""

    def __init__(self, db: Database):
        """Initialize visibility service.

        Args:
            db: Database instance
        """
        self.db = db
        self._logger = logger.bind(component="visibility")

    def normalize_all(
        self,
        apply: bool = False,
        progress: Optional[ProgressCallback] = None,
        batch_size: Optional[int] = None,
    ) -> VisibilityResult:
        """Find debt transfers hidden from balances and optionally repair them.

        Args:
            apply: If False, only report what would change
            progress: Optional callback, called once per committed batch
            batch_size: Override for the per-batch operation limit

        Returns:
            VisibilityResult with the change list and, after an apply run,
            any balance mismatches left for reconciliation
        """
        started = time.perf_counter()
        snapshot = LedgerSnapshot.load(self.db)

        debt_transfers = [t for t in snapshot.transactions if classify(t).is_debt_transfer]
        changes = []
        for txn in debt_transfers:
            patch = normalize(txn)
            if patch is not None:
                changes.append(VisibilityChange(transaction_id=txn.id, patch=patch))

        self._logger.info(
            "visibility_scan_complete",
            debt_transfers=len(debt_transfers),
            needs_fix=len(changes),
            dry_run=not apply,
        )

        fixed = 0
        failures: tuple = ()
        mismatches: tuple = ()
        if apply and changes:
            patches = {change.transaction_id: change.patch for change in changes}
            outcome = run_batches(
                list(patches.items()),
                lambda batch: self.db.update_transactions(dict(batch)),
                progress=progress,
                batch_size=batch_size,
                operation="visibility",
            )
            fixed = outcome.committed
            failures = outcome.failures

        if apply:
            mismatches = tuple(find_corrections(LedgerSnapshot.load(self.db)))

        elapsed = time.perf_counter() - started
        result = VisibilityResult(
            dry_run=not apply,
            debt_transfers=len(debt_transfers),
            already_correct=len(debt_transfers) - len(changes),
            changes=tuple(changes),
            fixed=fixed,
            failures=failures,
            balance_mismatches=mismatches,
            elapsed_seconds=elapsed,
            report="",
        )
        return replace(result, report=render_visibility_report(result))
