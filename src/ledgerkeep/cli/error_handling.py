"""CLI error handling helpers."""

import click

from ledgerkeep.domain.errors import ConsistencyError, DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, ConsistencyError):
        before, after = error.result.before, error.result.after
        click.echo(
            f"Revenue {before.revenue:,.2f} -> {after.revenue:,.2f}, "
            f"expense {before.expense:,.2f} -> {after.expense:,.2f}. Nothing was written.",
            err=True,
        )
    ctx.exit(1)
