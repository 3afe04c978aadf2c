"""Internal vs. external account inference.

Internal accounts are our own cash and bank positions; everything else is a
counterparty. An explicit ``kind`` always wins; otherwise the display name and
the free-text category are matched against known patterns.
"""

import re
from typing import Iterable, Optional

from ledgerkeep.domain.entities import Account, AccountKind

INTERNAL_PATTERNS = (
    "bank",
    "banka",
    "bankası",
    "cash",
    "kasa",
    "nakit",
    "company account",
    "şirket hesabı",
    "işletme hesabı",
    "checking",
    "vadesiz",
    "savings",
    "tasarruf",
    "deposit",
    "mevduat",
    "ziraat",
    "vakıfbank",
    "garanti",
    "akbank",
    "yapı kredi",
    "iş bankası",
    "halkbank",
    "denizbank",
    "teb",
    "finansbank",
    "qnb",
    "ing",
)

EXTERNAL_TYPES = (
    "supplier",
    "tedarikçi",
    "customer",
    "müşteri",
    "client",
    "staff",
    "personel",
    "employee",
    "çalışan",
    "vendor",
)


def _compile(patterns: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(p) for p in patterns)
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)", re.IGNORECASE)


_INTERNAL_RE = _compile(INTERNAL_PATTERNS)
_EXTERNAL_RE = _compile(EXTERNAL_TYPES)


def account_kind(account: Optional[Account]) -> AccountKind:
    """Determine whether an account is internal or external."""
    if account is None:
        return AccountKind.EXTERNAL
    if account.kind is not None:
        return account.kind

    name = (account.display_name or "").strip()
    if name and _INTERNAL_RE.search(name):
        return AccountKind.INTERNAL

    category = (account.category or "").strip()
    if category:
        if _EXTERNAL_RE.search(category):
            return AccountKind.EXTERNAL
        if _INTERNAL_RE.search(category):
            return AccountKind.INTERNAL

    return AccountKind.EXTERNAL


def is_internal(account: Optional[Account]) -> bool:
    return account_kind(account) is AccountKind.INTERNAL
