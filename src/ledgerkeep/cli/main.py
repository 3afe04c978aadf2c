"""Main CLI entry point."""

import click
from ledgerkeep.database.factories import create_sqlite_database
from ledgerkeep.logging import configure_logging

# Import and register all commands at module level
from ledgerkeep.cli.commands import (
    account,
    transaction,
    reconcile,
    migrate,
    visibility,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKEEP_DB_PATH environment variable)",
    envvar="LEDGERKEEP_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="LEDGERKEEP_LOG_LEVEL",
    help="Log level for diagnostic output on stderr",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default="console",
    show_default=True,
    help="Log output format",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_format: str):
    """ledgerkeep - Ledger reconciliation and debt transfer migration.

    Recalculates account balances from transaction history, repairs stored
    balances that drifted, and migrates legacy two-party transfers into
    three-party debt transfers.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level.upper(), format=log_format)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
transaction.register_commands(cli)
reconcile.register_commands(cli)
migrate.register_commands(cli)
visibility.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
