"""Bounded, partial-failure-tolerant batch writes.

Each batch is committed atomically by the store. A rejected batch is recorded
and skipped; later batches still run. Nothing is retried automatically: every
write in this package is recomputed from full history, so re-running the
whole operation is the remediation.
"""

from typing import Callable, Iterator, Optional, Sequence, TypeVar, Union

import structlog

from ledgerkeep.domain.entities import BatchFailure, BatchOutcome, BatchProgress
from ledgerkeep.domain.errors import BatchWriteError

# Per-batch operation limit of the external store.
DEFAULT_BATCH_SIZE = 500

T = TypeVar("T")
ProgressCallback = Callable[[BatchProgress], None]
BatchEvent = Union[BatchProgress, BatchFailure]

logger = structlog.get_logger(__name__)


def chunk(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split items into consecutive slices of at most ``size``."""
    if size <= 0:
        raise ValueError("Batch size must be positive")
    return [items[i : i + size] for i in range(0, len(items), size)]


def iter_batch_commits(
    items: Sequence[T],
    commit: Callable[[Sequence[T]], None],
    batch_size: Optional[int] = None,
    operation: str = "write",
) -> Iterator[BatchEvent]:
    """Commit items batch by batch, yielding one event per batch.

    A BatchProgress is yielded after every successful commit and a
    BatchFailure for every batch the store rejected. Any other exception,
    including PermissionDeniedError, propagates and ends the run.
    """
    batches = chunk(items, batch_size or DEFAULT_BATCH_SIZE)
    committed = 0
    log = logger.bind(operation=operation, batch_count=len(batches), total=len(items))

    for index, batch in enumerate(batches, start=1):
        try:
            commit(batch)
        except BatchWriteError as exc:
            log.error("batch_failed", batch_index=index, record_count=len(batch), error=str(exc))
            yield BatchFailure(batch_index=index, record_count=len(batch), error=str(exc))
            continue
        committed += len(batch)
        log.info("batch_committed", batch_index=index, committed=committed)
        yield BatchProgress(
            batch_index=index,
            batch_count=len(batches),
            committed=committed,
            total=len(items),
        )


def run_batches(
    items: Sequence[T],
    commit: Callable[[Sequence[T]], None],
    progress: Optional[ProgressCallback] = None,
    batch_size: Optional[int] = None,
    operation: str = "write",
) -> BatchOutcome:
    """Drain iter_batch_commits, reporting progress and collecting failures."""
    committed = 0
    failures = []
    for event in iter_batch_commits(items, commit, batch_size=batch_size, operation=operation):
        if isinstance(event, BatchFailure):
            failures.append(event)
            continue
        committed = event.committed
        if progress is not None:
            progress(event)
    return BatchOutcome(committed=committed, total=len(items), failures=tuple(failures))
