"""Data models for reconciliation."""

from .transaction import (
    Transaction,
    Rejection,
    MatchResult,
    ReconciliationSummary,
)

__all__ = [
    "Transaction",
    "Rejection",
    "MatchResult",
    "ReconciliationSummary",
]
