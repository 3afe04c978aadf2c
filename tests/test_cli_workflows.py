"""End-to-end tests for the reconcile, migrate and visibility commands."""

from decimal import Decimal

import pytest

from ledgerkeep.cli.main import cli
from ledgerkeep.database.sqlalchemy_db import SQLAlchemyDatabase
from ledgerkeep.domain.entities import TransactionType
from ledgerkeep.domain.errors import BatchWriteError


@pytest.fixture
def invoke(cli_runner, temp_db):
    def _invoke(*args, **kwargs):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)

    return _invoke


@pytest.fixture
def legacy_ledger(company_ledger, make_transaction):
    make_transaction("revenue", "1000", primary=company_ledger["customer"].id)
    legacy = make_transaction(
        "transfer",
        "500",
        source=company_ledger["lender"].id,
        target=company_ledger["supplier"].id,
    )
    return dict(company_ledger, legacy=legacy)


def test_reconcile_dry_run_then_apply(invoke, temp_db, make_account, make_transaction):
    acme = make_account("Acme", category="Müşteri")
    make_transaction("revenue", "250", primary=acme.id)

    dry = invoke("reconcile")
    assert dry.exit_code == 0
    assert "BALANCE RECONCILIATION REPORT (DRY RUN)" in dry.output

    applied = invoke("reconcile", "--apply")
    assert applied.exit_code == 0
    assert "Batch 1/1 committed (1/1)" in applied.output

    temp_db.disconnect()
    assert temp_db.get_account(acme.id).stored_balance == Decimal("250")

    again = invoke("reconcile")
    assert "No corrections needed" in again.output


def test_reconcile_report_file(invoke, tmp_path):
    report_path = tmp_path / "reconciliation.txt"

    result = invoke("reconcile", "--report-file", str(report_path))

    assert result.exit_code == 0
    assert f"Report written to {report_path}" in result.output
    assert "BALANCE RECONCILIATION REPORT" in report_path.read_text(encoding="utf-8")


def test_migrate_analyze_apply_verify(invoke, temp_db, legacy_ledger):
    analyzed = invoke("migrate", "analyze")
    assert analyzed.exit_code == 0
    assert "DEBT TRANSFER MIGRATION ANALYSIS" in analyzed.output

    applied = invoke("migrate", "apply", "--yes")
    assert applied.exit_code == 0
    assert "1 proposal(s) ready, 0 need review." in applied.output
    assert "DEBT TRANSFER MIGRATION RESULT" in applied.output

    temp_db.disconnect()
    migrated = temp_db.get_transaction(legacy_ledger["legacy"].id)
    assert migrated.type is TransactionType.DEBT_TRANSFER
    assert migrated.primary_party == legacy_ledger["bank"].id

    verified = invoke("migrate", "verify")
    assert verified.exit_code == 0
    assert "Status: OK" in verified.output

    nothing = invoke("migrate", "apply", "--yes")
    assert "Nothing to migrate." in nothing.output


def test_migrate_apply_can_be_cancelled(invoke, temp_db, legacy_ledger):
    result = invoke("migrate", "apply", input="n\n")

    assert "Migration cancelled." in result.output
    temp_db.disconnect()
    assert temp_db.get_transaction(legacy_ledger["legacy"].id).type is TransactionType.TRANSFER


def test_migrate_verify_reports_balance_problems(invoke, legacy_ledger):
    result = invoke("migrate", "verify")

    assert result.exit_code == 1
    assert "PROBLEMS FOUND" in result.output


def test_migrate_reject_and_approve(invoke, temp_db, legacy_ledger):
    txn_id = str(legacy_ledger["legacy"].id)

    rejected = invoke("migrate", "reject", txn_id, "--reason", "wrong lender")
    assert rejected.exit_code == 0
    assert f"Rejected migration of transaction {txn_id}" in rejected.output

    temp_db.disconnect()
    record = temp_db.get_transaction(legacy_ledger["legacy"].id)
    assert record.needs_review
    assert record.rejection_reason == "wrong lender"

    approved = invoke(
        "migrate",
        "approve",
        txn_id,
        "--debtor",
        "Ziraat Bankası",
        "--new-creditor",
        "Lender Co",
        "--old-creditor",
        "Supplier Ltd",
    )
    assert approved.exit_code == 0

    temp_db.disconnect()
    record = temp_db.get_transaction(legacy_ledger["legacy"].id)
    assert record.type is TransactionType.DEBT_TRANSFER
    assert record.description.startswith("[MIGRATION - REVIEWED]")


def test_migrate_approve_rejects_bad_parties(invoke, legacy_ledger):
    result = invoke(
        "migrate",
        "approve",
        str(legacy_ledger["legacy"].id),
        "--debtor",
        "Lender Co",
        "--new-creditor",
        "Lender Co",
        "--old-creditor",
        "Supplier Ltd",
    )

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_visibility_apply(invoke, temp_db, company_ledger, make_transaction):
    hidden = make_transaction(
        "debt_transfer",
        "200",
        primary=company_ledger["bank"].id,
        source=company_ledger["lender"].id,
        target=company_ledger["supplier"].id,
        affects_balance=False,
        is_log=True,
    )

    dry = invoke("visibility")
    assert dry.exit_code == 0
    assert "DEBT TRANSFER VISIBILITY FIX (DRY RUN)" in dry.output

    applied = invoke("visibility", "--apply")
    assert applied.exit_code == 0

    temp_db.disconnect()
    fixed = temp_db.get_transaction(hidden.id)
    assert fixed.affects_balance
    assert not fixed.is_log


def test_migrate_approve_exits_nonzero_when_batch_fails(invoke, temp_db, legacy_ledger, monkeypatch):
    def reject_batch(self, patches):
        raise BatchWriteError("simulated store rejection")

    monkeypatch.setattr(SQLAlchemyDatabase, "update_transactions", reject_batch)

    result = invoke(
        "migrate",
        "approve",
        str(legacy_ledger["legacy"].id),
        "--debtor",
        "Ziraat Bankası",
        "--new-creditor",
        "Lender Co",
        "--old-creditor",
        "Supplier Ltd",
    )

    assert result.exit_code == 1
    assert "Re-run the command" in result.output
