"""Transaction management commands."""

import click
from ledgerkeep.cli.account_resolution import resolve_optional_account
from ledgerkeep.cli.error_handling import handle_domain_error
from ledgerkeep.domain.account import AccountService
from ledgerkeep.domain.classifier import classify
from ledgerkeep.domain.errors import DomainError
from ledgerkeep.domain.sign_rules import transaction_amount
from ledgerkeep.domain.transaction import TransactionService
from ledgerkeep.utils.amount_parser import parse_amount
from ledgerkeep.utils.date_parser import parse_date


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.argument("txn_type", metavar="TYPE")
@click.argument("amount")
@click.option("--date", "date_str", default="today", help="Business date (YYYY-MM-DD, 'today', ...)")
@click.option("--primary", help="Primary account name or ID (debtor for debt transfers)")
@click.option("--source", help="Source account name or ID (new creditor for debt transfers)")
@click.option("--target", help="Target account name or ID (old creditor for debt transfers)")
@click.option("--total", help="Total amount, takes precedence over AMOUNT")
@click.option("--description", help="Transaction description")
@click.pass_context
def add_transaction(
    ctx,
    txn_type: str,
    amount: str,
    date_str: str,
    primary: str | None,
    source: str | None,
    target: str | None,
    total: str | None,
    description: str | None,
) -> None:
    """Record a transaction.

    TYPE is one of revenue, expense, collection, payment, transfer,
    debt_transfer or administrative_reset (legacy aliases such as 'gelir'
    are accepted).

    Examples:
        ledgerkeep transaction add revenue 1000 --primary "Acme Ltd"
        ledgerkeep transaction add debt_transfer 500 --primary Company --source Lender --target Supplier
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)

    primary_id = resolve_optional_account(ctx, account_service, primary)
    source_id = resolve_optional_account(ctx, account_service, source)
    target_id = resolve_optional_account(ctx, account_service, target)

    try:
        transaction_id = transaction_service.create_transaction(
            type=txn_type,
            amount=parse_amount(amount),
            occurred_at=parse_date(date_str),
            primary_party=primary_id,
            source_party=source_id,
            target_party=target_id,
            total_amount=parse_amount(total) if total is not None else None,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {transaction_id}")


@transaction_group.command("list")
@click.option("--account", help="Only transactions involving this account (name or ID)")
@click.option("--include-deleted", is_flag=True, help="Include soft-deleted transactions")
@click.option("--limit", type=int, help="Maximum number of transactions to show")
@click.pass_context
def list_transactions(ctx, account: str | None, include_deleted: bool, limit: int | None) -> None:
    """List transactions."""
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_id = resolve_optional_account(ctx, AccountService(db), account)

    try:
        transactions = transaction_service.list_transactions(
            account_id=account_id, include_deleted=include_deleted, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{'ID':>5} | {'Date':10} | {'Category':20} | {'Amount':>12} | Parties (P/S/T)")
    click.echo("-" * 80)
    for txn in transactions:
        category = classify(txn).category.value
        parties = "/".join("-" if p is None else str(p) for p in txn.parties)
        flags = " [deleted]" if txn.is_deleted else ""
        click.echo(
            f"{txn.id:5d} | {txn.occurred_at.isoformat():10} | {category:20} | "
            f"{transaction_amount(txn):12,.2f} | {parties}{flags}"
        )


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Soft-delete a transaction.

    The record stays in the store but no longer counts toward balances.
    """
    service = TransactionService(ctx.obj["db"])

    if not yes and not click.confirm(f"Delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
