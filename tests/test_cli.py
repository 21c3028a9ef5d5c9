"""Tests for the command-line interface."""

import pandas as pd
import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from ledger_diff.cli import EXIT_CONFIG_ERROR, EXIT_EMPTY_RESULT, main


@pytest.fixture
def runner():
    return CliRunner()


def test_reconcile_reports_both_residuals(runner, card_file, ledger_file):
    result = runner.invoke(main, ["reconcile", "card", str(card_file), str(ledger_file)])

    assert result.exit_code == 0, result.output
    assert "In first but not in second: 1" in result.output
    assert "STREAMING" in result.output
    assert "In second but not in first: 1" in result.output
    assert "Supplies" in result.output
    # dated before the first card record, so filtered out
    assert "PRIOR PERIOD" not in result.output


def test_reconcile_without_start_filter(runner, card_file, ledger_file):
    result = runner.invoke(
        main, ["reconcile", "card", str(card_file), str(ledger_file), "--no-start-filter"]
    )

    assert result.exit_code == 0, result.output
    assert "In second but not in first: 2" in result.output
    assert "PRIOR PERIOD" in result.output


def test_zero_discrepancies_is_success(runner, tmp_path):
    source = tmp_path / "bank.csv"
    source.write_text("2024-02-01,ref,Rent,1500.00,\n")
    ledger = tmp_path / "ledger.csv"
    ledger.write_text("02/03/2024,,Landlord,Rent,\"1,500.00\",\n")

    result = runner.invoke(main, ["reconcile", "bank", str(source), str(ledger)])

    assert result.exit_code == 0, result.output
    assert "No discrepancies found" in result.output


def test_unknown_profile_fails_before_reading_files(runner, tmp_path):
    missing = tmp_path / "does-not-exist.csv"

    result = runner.invoke(main, ["reconcile", "amex", str(missing), str(missing)])

    assert result.exit_code == EXIT_CONFIG_ERROR
    assert "Unknown source profile 'amex'" in result.output


def test_empty_result_is_fatal(runner, card_file, tmp_path):
    wrong = tmp_path / "wrong.csv"
    wrong.write_text("a,b,c\nd,e,f\n")

    result = runner.invoke(main, ["reconcile", "card", str(card_file), str(wrong)])

    assert result.exit_code == EXIT_EMPTY_RESULT
    assert "wrong.csv" in result.output


def test_missing_file_is_an_error(runner, card_file, tmp_path):
    result = runner.invoke(
        main, ["reconcile", "card", str(card_file), str(tmp_path / "missing.csv")]
    )

    assert result.exit_code == 1


def test_date_tolerance_override(runner, card_file, ledger_file):
    result = runner.invoke(
        main,
        ["reconcile", "card", str(card_file), str(ledger_file), "--date-tolerance", "0"],
    )

    assert result.exit_code == 0, result.output
    assert "In first but not in second: 4" in result.output


def test_excel_and_csv_output(runner, card_file, ledger_file, tmp_path):
    report = tmp_path / "report.xlsx"
    csv_dir = tmp_path / "residuals"

    result = runner.invoke(
        main,
        [
            "reconcile",
            "card",
            str(card_file),
            str(ledger_file),
            "-o",
            str(report),
            "--csv-dir",
            str(csv_dir),
        ],
    )

    assert result.exit_code == 0, result.output

    wb = load_workbook(report)
    assert wb.sheetnames == ["Summary", "Matched Pairs", "Only In Source", "Only In Ledger"]
    assert wb["Matched Pairs"].max_row == 4
    assert wb["Only In Source"]["C2"].value == "STREAMING"

    ledger_only = pd.read_csv(csv_dir / "only_in_ledger.csv", dtype=str)
    assert ledger_only["description"].tolist() == ["Supplies"]
    assert ledger_only["amount"].tolist() == ["88.00"]


def test_parse_command(runner, ledger_file):
    result = runner.invoke(main, ["parse", "ledger", str(ledger_file)])

    assert result.exit_code == 0, result.output
    assert "Total transactions: 5" in result.output
    assert "Rejected records: 1" in result.output


def test_profiles_command(runner):
    result = runner.invoke(main, ["profiles"])

    assert result.exit_code == 0
    for name in ("card", "card-secondary", "bank", "ledger"):
        assert name in result.output


def test_init_config(runner, tmp_path):
    output = tmp_path / "ledger-diff.yaml"

    result = runner.invoke(main, ["init-config", "-o", str(output)])

    assert result.exit_code == 0
    assert output.exists()
    assert "profiles:" in output.read_text()
