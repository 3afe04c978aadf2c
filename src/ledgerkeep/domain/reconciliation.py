"""Balance reconciliation.

Stored balances are a denormalized cache. Reconciliation recomputes every
account from the full current transaction set and overwrites the cache where
it drifted. Because nothing is applied incrementally, a second run with no
intervening changes finds nothing to correct.

No cross-batch atomicity is provided: a transaction written by another client
while a pass is running may be missed until the next pass.
"""

import time
from dataclasses import replace
from typing import Optional

import structlog

from ledgerkeep.database.base import Database
from ledgerkeep.domain.balance import compute_all_balances, exceeds_epsilon
from ledgerkeep.domain.batching import ProgressCallback, run_batches
from ledgerkeep.domain.entities import Correction, ReconciliationResult
from ledgerkeep.domain.reports import render_reconciliation_report
from ledgerkeep.domain.snapshot import LedgerSnapshot

logger = structlog.get_logger(__name__)


def find_corrections(snapshot: LedgerSnapshot) -> list[Correction]:
    """Compare every stored balance with its recalculated value.

    Returns:
        One Correction per account whose difference exceeds the epsilon
    """
    balances = compute_all_balances((acc.id for acc in snapshot.accounts), snapshot.transactions)
    corrections = []
    for account in snapshot.accounts:
        recalculated = balances[account.id]
        difference = recalculated - account.stored_balance
        if exceeds_epsilon(difference):
            corrections.append(
                Correction(
                    account_id=account.id,
                    account_name=account.display_name,
                    stored_balance=account.stored_balance,
                    recalculated_balance=recalculated,
                    difference=difference,
                )
            )
    return corrections


class ReconciliationService:
    """Service for checking and correcting stored account balances."""

    def __init__(self, db: Database, batch_size: Optional[int] = None):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            batch_size: Override for the per-batch operation limit
        """
        self.db = db
        self.batch_size = batch_size
        self._logger = logger.bind(component="reconciliation")

    def dry_run_reconciliation(self) -> ReconciliationResult:
        """Report balance corrections without writing anything."""
        started = time.perf_counter()
        snapshot = LedgerSnapshot.load(self.db)
        corrections = find_corrections(snapshot)
        self._logger.info(
            "reconciliation_dry_run",
            accounts=len(snapshot.accounts),
            corrections=len(corrections),
        )
        return self._result(
            dry_run=True,
            snapshot=snapshot,
            corrections=corrections,
            corrected=0,
            failures=(),
            started=started,
        )

    def apply_reconciliation(
        self, progress: Optional[ProgressCallback] = None
    ) -> ReconciliationResult:
        """Recompute balances and persist every correction.

        Args:
            progress: Optional callback, called once per committed batch

        Returns:
            ReconciliationResult; failed batches are listed and
            ``rerun_recommended`` is set when any batch failed
        """
        started = time.perf_counter()
        snapshot = LedgerSnapshot.load(self.db)
        corrections = find_corrections(snapshot)

        outcome = run_batches(
            corrections,
            lambda batch: self.db.update_account_balances(
                {c.account_id: c.recalculated_balance for c in batch}
            ),
            progress=progress,
            batch_size=self.batch_size,
            operation="reconciliation",
        )
        self._logger.info(
            "reconciliation_applied",
            accounts=len(snapshot.accounts),
            corrections=len(corrections),
            corrected=outcome.committed,
            failed_batches=len(outcome.failures),
        )
        return self._result(
            dry_run=False,
            snapshot=snapshot,
            corrections=corrections,
            corrected=outcome.committed,
            failures=outcome.failures,
            started=started,
        )

    def _result(self, dry_run, snapshot, corrections, corrected, failures, started):
        result = ReconciliationResult(
            dry_run=dry_run,
            accounts_checked=len(snapshot.accounts),
            corrections=tuple(corrections),
            corrected=corrected,
            failures=tuple(failures),
            elapsed_seconds=time.perf_counter() - started,
            report="",
        )
        return replace(result, report=render_reconciliation_report(result, snapshot))
