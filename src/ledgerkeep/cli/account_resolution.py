"""CLI helpers for account resolution."""

from __future__ import annotations

import click
from ledgerkeep.cli.error_handling import handle_domain_error
from ledgerkeep.domain.account import AccountService
from ledgerkeep.domain.errors import DomainError
from ledgerkeep.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account name or ID, or exit with a CLI error."""
    try:
        return resolve_account(account_service, account)
    except DomainError as exc:
        handle_domain_error(ctx, exc)


def resolve_optional_account(
    ctx: click.Context, account_service: AccountService, account: str | None
) -> int | None:
    """Resolve an optional account option; None passes through."""
    if account is None:
        return None
    return resolve_account_or_exit(ctx, account_service, account)
