"""Account management commands."""

import click
from ledgerkeep.cli.account_resolution import resolve_account_or_exit
from ledgerkeep.cli.error_handling import handle_domain_error
from ledgerkeep.domain.account import AccountService
from ledgerkeep.domain.balance import exceeds_epsilon
from ledgerkeep.domain.entities import AccountKind
from ledgerkeep.domain.errors import DomainError
from ledgerkeep.domain.reports import format_amount
from ledgerkeep.utils.amount_parser import parse_amount


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in AccountKind]),
    help="Explicit kind (inferred from name and category if omitted)",
)
@click.option("--category", help="Classification hint, e.g. 'Banka' or 'Müşteri'")
@click.option("--opening-balance", default="0", help="Initial stored balance")
@click.pass_context
def create_account(ctx, name: str, kind: str | None, category: str | None, opening_balance: str):
    """Create a new account.

    Examples:
        ledgerkeep account create "Ziraat Bankası"
        ledgerkeep account create "Acme Ltd" --category "Müşteri"
        ledgerkeep account create "Petty Cash" --kind internal
    """
    service = AccountService(ctx.obj["db"])

    try:
        account_id = service.create_account(
            display_name=name,
            kind=AccountKind(kind) if kind else None,
            category=category,
            opening_balance=parse_amount(opening_balance),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    created = service.get_account(account_id)
    click.echo(f"Created account '{created.display_name}' (ID: {account_id})")
    if kind is None:
        click.echo(f"Kind inferred as {service.effective_kind(created).value}")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts.

    Inferred kinds are marked with '*'.
    """
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        kind = service.effective_kind(acc).value + ("" if acc.kind is not None else "*")
        click.echo(
            f"ID: {acc.id:3d} | {acc.display_name:24s} | {kind:9s} | "
            f"Balance: {format_amount(acc.stored_balance)}"
        )


@account_group.command("balance")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_balance(ctx, account: str):
    """Show stored and recalculated balance for an account.

    ACCOUNT can be an account name or ID. A positive balance means the
    counterparty owes us; a negative balance means we owe them.
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        stored, recalculated = service.get_balance(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    acc = service.get_account(account_id)
    click.echo(f"{acc.display_name} (ID: {account_id})")
    click.echo(f"  Stored:       {format_amount(stored)}")
    click.echo(f"  Recalculated: {format_amount(recalculated)}")
    if exceeds_epsilon(recalculated - stored):
        click.echo(f"  Difference:   {format_amount(recalculated - stored)} (run 'ledgerkeep reconcile')")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
