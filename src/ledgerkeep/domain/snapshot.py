"""Per-run ledger context.

A snapshot is read once at the start of a reconciliation or migration run,
passed explicitly to every component, and discarded when the run ends.
"""

from dataclasses import dataclass, field
from typing import Optional

from ledgerkeep.database.base import Database
from ledgerkeep.domain.account_kind import account_kind
from ledgerkeep.domain.entities import Account, AccountKind, Transaction


@dataclass
class LedgerSnapshot:
    """All accounts and transactions as read at the start of one run."""

    accounts: list[Account]
    transactions: list[Transaction]
    _accounts_by_id: dict[int, Account] = field(init=False, repr=False)
    _kinds: dict[int, AccountKind] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._accounts_by_id = {acc.id: acc for acc in self.accounts}
        self._kinds = {acc.id: account_kind(acc) for acc in self.accounts}

    @classmethod
    def load(cls, db: Database) -> "LedgerSnapshot":
        """Bulk-read accounts and transactions from the store."""
        return cls(accounts=db.list_accounts(), transactions=db.list_transactions())

    def get_account(self, account_id: Optional[int]) -> Optional[Account]:
        if account_id is None:
            return None
        return self._accounts_by_id.get(account_id)

    def kind_of(self, account_id: int) -> Optional[AccountKind]:
        """Return the cached kind of an account, or None if it is unknown."""
        return self._kinds.get(account_id)

    def is_internal(self, account: Account) -> bool:
        """Cached kind check; accounts outside the snapshot are inferred on the spot."""
        kind = self.kind_of(account.id)
        if kind is None:
            kind = account_kind(account)
        return kind is AccountKind.INTERNAL

    def account_name(self, account_id: Optional[int]) -> str:
        account = self.get_account(account_id)
        if account is None:
            return "unknown" if account_id is None else f"#{account_id}"
        return account.display_name
