"""Parsers for positional CSV ledger exports."""

from .csv_parser import LedgerCsvParser, normalize_record

__all__ = ["LedgerCsvParser", "normalize_record"]
