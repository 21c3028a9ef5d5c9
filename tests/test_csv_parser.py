"""Tests for record normalization and the CSV parser."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from ledger_diff.models.transaction import Rejection, Transaction
from ledger_diff.parsers.csv_parser import (
    LedgerCsvParser,
    normalize_record,
    parse_amount_cents,
)
from ledger_diff.utils.exceptions import (
    EmptyResultError,
    LedgerParseError,
    RecordParseError,
    RejectReason,
)


class TestNormalizeRecord:
    def test_debit_column(self, simple_profile):
        result = normalize_record(["2024-01-02", "Groceries", "12.34", ""], simple_profile, 1)
        assert isinstance(result, Transaction)
        assert result.occurred_on == date(2024, 1, 2)
        assert result.amount_cents == 1234
        assert result.amount == Decimal("12.34")
        assert result.description == "Groceries"
        assert result.source == "simple"
        assert result.line_number == 1
        assert result.matched is False

    def test_sign_collapse(self, simple_profile):
        debit = normalize_record(["2024-01-02", "a", "-75.50", ""], simple_profile)
        credit = normalize_record(["2024-01-02", "b", "", "75.50"], simple_profile)
        assert debit.amount_cents == credit.amount_cents == 7550

    def test_debit_wins_when_both_populated(self, simple_profile):
        result = normalize_record(["2024-01-02", "x", "10.00", "99.00"], simple_profile)
        assert result.amount_cents == 1000

    def test_thousands_separator(self, simple_profile):
        result = normalize_record(["2024-01-02", "x", "1,234,567.89", ""], simple_profile)
        assert result.amount_cents == 123456789

    def test_same_column_for_debit_and_credit(self, config):
        card = config.get_profile("card")
        fields = ["", "03/14/2024", "-8.25", "", "", "", "", "LUNCH"]
        result = normalize_record(fields, card)
        assert result.amount_cents == 825
        assert result.description == "LUNCH"

    def test_too_short(self, simple_profile):
        result = normalize_record(["2024-01-02", "x", "1.00"], simple_profile, 7)
        assert isinstance(result, Rejection)
        assert result.reason == RejectReason.TOO_SHORT
        assert result.line_number == 7

    def test_bad_date(self, simple_profile):
        result = normalize_record(["01/02/2024", "x", "1.00", ""], simple_profile)
        assert isinstance(result, Rejection)
        assert result.reason == RejectReason.BAD_DATE

    def test_both_amounts_empty(self, simple_profile):
        result = normalize_record(["2024-01-02", "x", "", " "], simple_profile)
        assert isinstance(result, Rejection)
        assert result.reason == RejectReason.BAD_AMOUNT

    def test_blank_debit_falls_back_to_credit(self, simple_profile):
        result = normalize_record(["2024-01-02", "x", "  ", "4.00"], simple_profile)
        assert isinstance(result, Transaction)
        assert result.amount_cents == 400

    def test_unparseable_debit_is_rejected(self, simple_profile):
        result = normalize_record(["2024-01-02", "x", "n/a", "5.00"], simple_profile)
        assert isinstance(result, Rejection)
        assert result.reason == RejectReason.BAD_AMOUNT

    def test_before_min_date_is_excluded(self, simple_profile):
        fields = ["2024-01-01", "x", "1.00", ""]
        assert normalize_record(fields, simple_profile, min_date=date(2024, 1, 2)) is None
        on_cutoff = normalize_record(fields, simple_profile, min_date=date(2024, 1, 1))
        assert isinstance(on_cutoff, Transaction)


class TestParseAmount:
    @pytest.mark.parametrize(
        "text, cents",
        [
            ("0", 0),
            ("12", 1200),
            ("-0.01", 1),
            (" 3.5 ", 350),
            ("2.675", 268),
            ("1,000", 100000),
        ],
    )
    def test_valid(self, text, cents):
        assert parse_amount_cents(text) == cents

    @pytest.mark.parametrize(
        "text", ["", "abc", "NaN", "Infinity", "1.2.3", "$5", "1_000", "\u0661\u0662"]
    )
    def test_invalid(self, text):
        with pytest.raises(RecordParseError) as exc_info:
            parse_amount_cents(text)
        assert exc_info.value.reason == RejectReason.BAD_AMOUNT


class TestLedgerCsvParser:
    def test_reject_and_continue(self, simple_profile, caplog):
        rows = [
            ["2024-01-01", "one", "1.00", ""],
            ["2024-01-02", "two", "2.00", ""],
            ["not a date", "three", "3.00", ""],
            ["2024-01-04", "four", "4.00", ""],
            ["2024-01-05", "five", "5.00", ""],
        ]
        parser = LedgerCsvParser(simple_profile)

        with caplog.at_level(logging.WARNING, logger="ledger_diff"):
            transactions = parser.parse_rows(rows, source_name="five.csv")

        assert [t.description for t in transactions] == ["one", "two", "four", "five"]
        assert len(parser.rejections) == 1
        assert parser.rejections[0].line_number == 3
        assert parser.rejections[0].reason == RejectReason.BAD_DATE

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "five.csv:3" in warnings[0].getMessage()

    def test_output_sorted_by_date_stable(self, simple_profile):
        rows = [
            ["2024-01-05", "late", "1.00", ""],
            ["2024-01-01", "early-a", "1.00", ""],
            ["2024-01-01", "early-b", "1.00", ""],
        ]
        transactions = LedgerCsvParser(simple_profile).parse_rows(rows)
        assert [t.description for t in transactions] == ["early-a", "early-b", "late"]
        assert [t.line_number for t in transactions] == [2, 3, 1]

    def test_zero_admitted_is_fatal(self, simple_profile):
        rows = [["bad", "x", "1.00", ""], ["short"]]
        parser = LedgerCsvParser(simple_profile)
        with pytest.raises(EmptyResultError) as exc_info:
            parser.parse_rows(rows, source_name="wrong.csv")
        assert exc_info.value.source_name == "wrong.csv"
        assert exc_info.value.rejected == 2

    def test_everything_before_cutoff_is_fatal(self, simple_profile):
        rows = [["2023-12-31", "x", "1.00", ""]]
        with pytest.raises(EmptyResultError):
            LedgerCsvParser(simple_profile).parse_rows(rows, min_date=date(2024, 1, 1))

    def test_skip_rows(self, simple_profile):
        profile = simple_profile.model_copy(update={"skip_rows": 1})
        rows = [["Date", "Memo", "Debit", "Credit"], ["2024-01-01", "x", "1.00", ""]]
        parser = LedgerCsvParser(profile)
        transactions = parser.parse_rows(rows)
        assert len(transactions) == 1
        assert parser.rejections == []

    def test_parse_file(self, config, card_file):
        parser = LedgerCsvParser(config.get_profile("card"))
        transactions = parser.parse_file(card_file)

        assert [t.amount_cents for t in transactions] == [4510, 120000, 1999, 25000]
        assert transactions[0].description == "COFFEE SHOP"
        assert transactions[0].line_number == 2
        # the header line is reported, not fatal
        assert [r.line_number for r in parser.rejections] == [1]

    def test_parse_file_with_cutoff(self, config, ledger_file):
        parser = LedgerCsvParser(config.get_profile("ledger"))
        transactions = parser.parse_file(ledger_file, min_date=date(2024, 1, 3))
        assert [t.description for t in transactions] == [
            "Coffee",
            "Flight",
            "Card payment",
            "Supplies",
        ]
        assert transactions[2].amount_cents == 25000

    def test_missing_file(self, simple_profile, tmp_path):
        with pytest.raises(LedgerParseError):
            LedgerCsvParser(simple_profile).parse_file(tmp_path / "missing.csv")

    def test_undecodable_byte_spoils_only_its_record(self, simple_profile, tmp_path):
        path = tmp_path / "mixed.csv"
        path.write_bytes(
            b"2024-01-01,one,1.00,\n"
            b"2024-01-02,Caf\xe9,2.00,\n"
            b"2024-01-03,three,3.00,\n"
        )

        parser = LedgerCsvParser(simple_profile)
        transactions = parser.parse_file(path)

        assert [t.description for t in transactions] == ["one", "Caf\ufffd", "three"]
        assert [t.amount_cents for t in transactions] == [100, 200, 300]
        assert parser.rejections == []

    def test_wrong_encoding(self, simple_profile, tmp_path):
        path = tmp_path / "latin1.csv"
        path.write_bytes("2024-01-01,Caf\xe9,1.00,\n".encode("latin-1"))

        transactions = LedgerCsvParser(simple_profile).parse_file(path)
        assert transactions[0].description == "Caf\ufffd"

        latin = simple_profile.model_copy(update={"encoding": "latin-1"})
        transactions = LedgerCsvParser(latin).parse_file(path)
        assert transactions[0].description == "Caf\xe9"
