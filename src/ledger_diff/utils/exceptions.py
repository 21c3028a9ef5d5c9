"""Custom exceptions for the reconciliation application."""

from enum import Enum


class RejectReason(Enum):
    """Why a raw record was dropped during normalization."""

    TOO_SHORT = "too_short"
    BAD_DATE = "bad_date"
    BAD_AMOUNT = "bad_amount"


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class RecordParseError(ReconciliationError):
    """A single record could not be normalized. Recoverable."""

    def __init__(self, reason: RejectReason, message: str):
        super().__init__(message)
        self.reason = reason


class LedgerParseError(ReconciliationError):
    """Error reading a ledger CSV file."""

    pass


class EmptyResultError(ReconciliationError):
    """No records were admitted from an input file."""

    def __init__(self, source_name: str, rejected: int = 0):
        super().__init__(
            f"No transactions admitted from {source_name} "
            f"({rejected} records rejected); check the source profile and encoding"
        )
        self.source_name = source_name
        self.rejected = rejected


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ValidationError(ReconciliationError):
    """Data validation error."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating a report."""

    pass
