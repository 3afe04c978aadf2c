"""Legacy transfer migration commands."""

import click
from ledgerkeep.cli.account_resolution import resolve_account_or_exit
from ledgerkeep.cli.error_handling import handle_domain_error
from ledgerkeep.cli.output import echo_progress, emit_report, warn_rerun
from ledgerkeep.domain.account import AccountService
from ledgerkeep.domain.entities import MigrationStatus
from ledgerkeep.domain.errors import DomainError
from ledgerkeep.domain.migration_service import MigrationService

report_file_option = click.option(
    "--report-file", type=click.Path(dir_okay=False), help="Write the report to a file"
)
batch_size_option = click.option(
    "--batch-size", type=click.IntRange(min=1), help="Records per write batch"
)


@click.group()
def migrate_group():
    """Migrate legacy transfers into three-party debt transfers."""
    pass


@migrate_group.command("analyze")
@report_file_option
@click.pass_context
def analyze(ctx, report_file: str | None) -> None:
    """List migration proposals. Writes nothing."""
    service = MigrationService(ctx.obj["db"])

    try:
        result = service.analyze_migration_candidates()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    emit_report(result.report, report_file)


@migrate_group.command("apply")
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@report_file_option
@batch_size_option
@click.pass_context
def apply(ctx, yes: bool, report_file: str | None, batch_size: int | None) -> None:
    """Apply every ready (high-confidence) proposal.

    Proposals that need review are left untouched; resolve them with
    'migrate approve' or 'migrate reject'. Revenue and expense totals are
    checked before anything is written, and balances are reconciled after.
    """
    service = MigrationService(ctx.obj["db"], batch_size=batch_size)

    try:
        analysis = service.analyze_migration_candidates()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    ready = [p for p in analysis.proposals if p.status is MigrationStatus.READY]
    review = analysis.statistics.get(MigrationStatus.NEEDS_REVIEW.value, 0)
    click.echo(f"{len(ready)} proposal(s) ready, {review} need review.")
    if not ready:
        click.echo("Nothing to migrate.")
        return

    if not yes and not click.confirm(f"Migrate {len(ready)} transaction(s)?"):
        click.echo("Migration cancelled.")
        return

    try:
        result = service.apply_migration(ready, progress=echo_progress)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    emit_report(result.report, report_file)
    warn_rerun(result.rerun_recommended)
    if result.rerun_recommended:
        ctx.exit(1)


@migrate_group.command("approve")
@click.argument("transaction_id", type=int)
@click.option("--debtor", required=True, help="Debtor account name or ID")
@click.option("--new-creditor", required=True, help="New creditor (lender) account name or ID")
@click.option("--old-creditor", required=True, help="Old creditor (settled) account name or ID")
@report_file_option
@click.pass_context
def approve(
    ctx,
    transaction_id: int,
    debtor: str,
    new_creditor: str,
    old_creditor: str,
    report_file: str | None,
) -> None:
    """Approve a reviewed proposal with resolved parties and apply it.

    Examples:
        ledgerkeep migrate approve 42 --debtor "Ziraat Bankası" --new-creditor Lender --old-creditor Supplier
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    debtor_id = resolve_account_or_exit(ctx, account_service, debtor)
    new_creditor_id = resolve_account_or_exit(ctx, account_service, new_creditor)
    old_creditor_id = resolve_account_or_exit(ctx, account_service, old_creditor)

    try:
        result = MigrationService(db).approve_proposal(
            transaction_id,
            debtor=debtor_id,
            new_creditor=new_creditor_id,
            old_creditor=old_creditor_id,
            progress=echo_progress,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    emit_report(result.report, report_file)
    warn_rerun(result.rerun_recommended)
    if result.rerun_recommended:
        ctx.exit(1)


@migrate_group.command("reject")
@click.argument("transaction_id", type=int)
@click.option("--reason", required=True, help="Why the proposal was rejected")
@click.pass_context
def reject(ctx, transaction_id: int, reason: str) -> None:
    """Reject a proposal, keeping the legacy record flagged for review."""
    try:
        MigrationService(ctx.obj["db"]).reject_proposal(transaction_id, reason)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Rejected migration of transaction {transaction_id}")


@migrate_group.command("verify")
@report_file_option
@click.pass_context
def verify(ctx, report_file: str | None) -> None:
    """Check balances and debt transfer structure after a migration.

    Exits with status 1 when problems are found.
    """
    try:
        result = MigrationService(ctx.obj["db"]).verify_post_apply()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    emit_report(result.report, report_file)
    if not result.ok:
        ctx.exit(1)


def register_commands(cli):
    """Register migration commands with main CLI."""
    cli.add_command(migrate_group, name="migrate")
