"""Utility modules."""

from .exceptions import (
    RejectReason,
    ReconciliationError,
    RecordParseError,
    LedgerParseError,
    EmptyResultError,
    ConfigurationError,
    ValidationError,
    ReportGenerationError,
)
from .logging_config import setup_logging

__all__ = [
    "RejectReason",
    "ReconciliationError",
    "RecordParseError",
    "LedgerParseError",
    "EmptyResultError",
    "ConfigurationError",
    "ValidationError",
    "ReportGenerationError",
    "setup_logging",
]
