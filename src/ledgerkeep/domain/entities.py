"""Domain model entities for ledgerkeep.

These are pure data classes representing business concepts, independent of
database schema. Records read from the store are immutable; repairs and
migrations are expressed as patches that the store applies in batches.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from ledgerkeep.domain.errors import ValidationError


class TransactionType(str, Enum):
    """Closed set of stored transaction types."""

    REVENUE = "revenue"
    EXPENSE = "expense"
    COLLECTION = "collection"
    PAYMENT = "payment"
    TRANSFER = "transfer"
    DEBT_TRANSFER = "debt_transfer"
    ADMINISTRATIVE_RESET = "administrative_reset"

    @classmethod
    def parse(cls, raw: "str | TransactionType") -> "TransactionType":
        """Parse a raw type string, resolving legacy aliases.

        Raises:
            ValidationError: If the string is not a known type or alias
        """
        if isinstance(raw, cls):
            return raw
        normalized = str(raw or "").strip().lower()
        if normalized in _TYPE_ALIASES:
            return _TYPE_ALIASES[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationError(f"Unknown transaction type '{raw}'") from None


_TYPE_ALIASES = {
    "gelir": TransactionType.REVENUE,
    "gider": TransactionType.EXPENSE,
    "tahsilat": TransactionType.COLLECTION,
    "ödeme": TransactionType.PAYMENT,
    "odeme": TransactionType.PAYMENT,
    "borç transferi": TransactionType.DEBT_TRANSFER,
    "borc transferi": TransactionType.DEBT_TRANSFER,
    "debt transfer": TransactionType.DEBT_TRANSFER,
}


class AccountKind(str, Enum):
    """Whether an account is one of our own cash/bank positions or a counterparty."""

    INTERNAL = "internal"
    EXTERNAL = "external"


class TransactionCategory(str, Enum):
    """Classification outcome used by every balance and P&L computation."""

    REVENUE = "revenue"
    EXPENSE = "expense"
    COLLECTION = "collection"
    PAYMENT = "payment"
    TRANSFER = "transfer"
    DEBT_TRANSFER = "debt_transfer"
    ADMINISTRATIVE_RESET = "administrative_reset"
    LOG_ONLY = "log_only"


class PartyRole(str, Enum):
    """Role an account plays in a single transaction."""

    PRIMARY = "primary"
    SOURCE = "source"
    TARGET = "target"
    DEBTOR = "debtor"
    NEW_CREDITOR = "new_creditor"
    OLD_CREDITOR = "old_creditor"


class MigrationStatus(str, Enum):
    """Lifecycle status of a migration proposal."""

    PENDING = "pending"
    READY = "ready"
    NEEDS_REVIEW = "needs_review"
    SKIPPED = "skipped"
    FAILED = "failed"


class Confidence(str, Enum):
    """Confidence of a structural inference."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


RECORD_TYPE_TRANSACTION = "transaction"
RECORD_TYPE_LOG = "log"


@dataclass(frozen=True)
class Account:
    """Counterparty or internal cash/bank account."""

    id: int
    display_name: str
    kind: Optional[AccountKind]
    category: Optional[str]
    stored_balance: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction domain entity."""

    id: int
    type: TransactionType
    amount: Decimal
    primary_party: Optional[int]
    source_party: Optional[int]
    target_party: Optional[int]
    occurred_at: date
    recorded_at: datetime
    total_amount: Optional[Decimal] = None
    description: Optional[str] = None
    affects_balance: bool = True
    is_deleted: bool = False
    is_log: bool = False
    record_type: str = RECORD_TYPE_TRANSACTION
    migration_flag: bool = False
    needs_review: bool = False
    migration_status: Optional[str] = None
    rejection_reason: Optional[str] = None

    @property
    def parties(self) -> tuple[Optional[int], Optional[int], Optional[int]]:
        """Return (primary, source, target) party ids."""
        return (self.primary_party, self.source_party, self.target_party)

    def involves(self, account_id: int) -> bool:
        """Return True if the account appears in any party role."""
        return account_id in self.parties


@dataclass(frozen=True)
class Classification:
    """Result of classifying a single transaction."""

    category: TransactionCategory
    is_debt_transfer: bool


@dataclass(frozen=True)
class Correction:
    """Difference between an account's stored and recalculated balance."""

    account_id: int
    account_name: str
    stored_balance: Decimal
    recalculated_balance: Decimal
    difference: Decimal


@dataclass(frozen=True)
class MigrationProposal:
    """Recommended three-party reinterpretation of a legacy transfer."""

    source_transaction_id: int
    status: MigrationStatus
    confidence: Confidence
    proposed_debtor: Optional[int] = None
    proposed_new_creditor: Optional[int] = None
    proposed_old_creditor: Optional[int] = None
    amount: Decimal = Decimal("0")
    description: Optional[str] = None
    issues: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    approved: bool = False

    @property
    def has_proposal(self) -> bool:
        """True when at least the debtor has been proposed."""
        return self.proposed_debtor is not None


@dataclass(frozen=True)
class PnLTotals:
    """Aggregate revenue and expense over a transaction set."""

    revenue: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.revenue - self.expense


@dataclass(frozen=True)
class ConsistencyResult:
    """Outcome of comparing P&L totals before and after a migration batch."""

    valid: bool
    errors: tuple[str, ...]
    before: PnLTotals
    after: PnLTotals


@dataclass(frozen=True)
class BatchProgress:
    """Emitted once per successfully committed write batch."""

    batch_index: int
    batch_count: int
    committed: int
    total: int


@dataclass(frozen=True)
class BatchFailure:
    """A write batch the store rejected."""

    batch_index: int
    record_count: int
    error: str


@dataclass(frozen=True)
class BatchOutcome:
    """Totals of a batched write run."""

    committed: int
    total: int
    failures: tuple[BatchFailure, ...] = ()

    @property
    def failed(self) -> int:
        return sum(f.record_count for f in self.failures)


@dataclass(frozen=True)
class ReconciliationResult:
    """Summary of a reconciliation pass."""

    dry_run: bool
    accounts_checked: int
    corrections: tuple[Correction, ...]
    corrected: int
    failures: tuple[BatchFailure, ...]
    elapsed_seconds: float
    report: str

    @property
    def rerun_recommended(self) -> bool:
        return bool(self.failures)


@dataclass(frozen=True)
class MigrationAnalysisResult:
    """Summary of a migration candidate scan."""

    proposals: tuple[MigrationProposal, ...]
    statistics: dict[str, int]
    elapsed_seconds: float
    report: str


@dataclass(frozen=True)
class MigrationApplyResult:
    """Summary of applying a set of migration proposals."""

    migrated: int
    skipped: int
    failed: int
    migrated_transaction_ids: tuple[int, ...]
    consistency: ConsistencyResult
    failures: tuple[BatchFailure, ...]
    reconciliation: Optional[ReconciliationResult]
    elapsed_seconds: float
    report: str

    @property
    def rerun_recommended(self) -> bool:
        if self.failures:
            return True
        return self.reconciliation is not None and self.reconciliation.rerun_recommended


@dataclass(frozen=True)
class VisibilityChange:
    """Patch proposed for a single debt transfer."""

    transaction_id: int
    patch: dict[str, Any]


@dataclass(frozen=True)
class VisibilityResult:
    """Summary of a visibility normalization run."""

    dry_run: bool
    debt_transfers: int
    already_correct: int
    changes: tuple[VisibilityChange, ...]
    fixed: int
    failures: tuple[BatchFailure, ...]
    balance_mismatches: tuple[Correction, ...]
    elapsed_seconds: float
    report: str

    @property
    def rerun_recommended(self) -> bool:
        return bool(self.failures)


@dataclass(frozen=True)
class InvalidDebtTransfer:
    """A stored debt transfer that breaks party or conservation rules."""

    transaction_id: int
    errors: tuple[str, ...]


@dataclass(frozen=True)
class VerificationResult:
    """Post-apply ledger health check."""

    balance_mismatches: tuple[Correction, ...]
    invalid_debt_transfers: tuple[InvalidDebtTransfer, ...]
    pending_review: int
    legacy_transfers_remaining: int
    elapsed_seconds: float
    report: str = ""
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.balance_mismatches and not self.invalid_debt_transfers
