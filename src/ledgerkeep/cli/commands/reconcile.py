"""Balance reconciliation command."""

import click
from ledgerkeep.cli.error_handling import handle_domain_error
from ledgerkeep.cli.output import echo_progress, emit_report, warn_rerun
from ledgerkeep.domain.errors import DomainError
from ledgerkeep.domain.reconciliation import ReconciliationService


@click.command("reconcile")
@click.option("--apply", "apply_changes", is_flag=True, help="Write corrections (default is a dry run)")
@click.option("--report-file", type=click.Path(dir_okay=False), help="Write the report to a file")
@click.option("--batch-size", type=click.IntRange(min=1), help="Records per write batch")
@click.pass_context
def reconcile(ctx, apply_changes: bool, report_file: str | None, batch_size: int | None) -> None:
    """Recalculate balances from history and correct stored balances.

    Without --apply nothing is written. Re-running after an apply finds
    nothing further to correct.

    Examples:
        ledgerkeep reconcile
        ledgerkeep reconcile --apply --report-file reconciliation.txt
    """
    service = ReconciliationService(ctx.obj["db"], batch_size=batch_size)

    try:
        if apply_changes:
            result = service.apply_reconciliation(progress=echo_progress)
        else:
            result = service.dry_run_reconciliation()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    emit_report(result.report, report_file)
    warn_rerun(result.rerun_recommended)
    if result.rerun_recommended:
        ctx.exit(1)


def register_commands(cli):
    """Register reconcile command with main CLI."""
    cli.add_command(reconcile)
