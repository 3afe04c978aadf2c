"""Debt transfer visibility repair command."""

import click
from ledgerkeep.cli.error_handling import handle_domain_error
from ledgerkeep.cli.output import echo_progress, emit_report, warn_rerun
from ledgerkeep.domain.errors import DomainError
from ledgerkeep.domain.visibility import VisibilityService


@click.command("visibility")
@click.option("--apply", "apply_changes", is_flag=True, help="Write fixes (default is a dry run)")
@click.option("--report-file", type=click.Path(dir_okay=False), help="Write the report to a file")
@click.option("--batch-size", type=click.IntRange(min=1), help="Records per write batch")
@click.pass_context
def visibility(ctx, apply_changes: bool, report_file: str | None, batch_size: int | None) -> None:
    """Make every debt transfer count toward balances.

    Clears log-only markers and re-enables balance participation on debt
    transfers. Run 'ledgerkeep reconcile --apply' afterwards if balance
    mismatches are reported.
    """
    service = VisibilityService(ctx.obj["db"])

    try:
        result = service.normalize_all(
            apply=apply_changes,
            progress=echo_progress,
            batch_size=batch_size,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    emit_report(result.report, report_file)
    warn_rerun(result.rerun_recommended)
    if result.rerun_recommended:
        ctx.exit(1)


def register_commands(cli):
    """Register visibility command with main CLI."""
    cli.add_command(visibility)
