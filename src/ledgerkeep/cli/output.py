"""CLI helpers for progress lines and report files."""

from pathlib import Path

import click

from ledgerkeep.domain.entities import BatchProgress


def echo_progress(event: BatchProgress) -> None:
    """Print one line per committed batch."""
    click.echo(
        f"Batch {event.batch_index}/{event.batch_count} committed "
        f"({event.committed}/{event.total})"
    )


def emit_report(report: str, report_file: str | None) -> None:
    """Print a report, or write it to a file when a path is given."""
    if report_file is None:
        click.echo(report, nl=False)
        return
    path = Path(report_file)
    path.write_text(report, encoding="utf-8")
    click.echo(f"Report written to {path}")


def warn_rerun(rerun_recommended: bool) -> None:
    if rerun_recommended:
        click.echo(
            "Warning: one or more batches failed. Re-run the command to finish.",
            err=True,
        )
