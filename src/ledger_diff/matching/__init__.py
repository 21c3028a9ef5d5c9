"""Matching engine and strategies."""

from .engine import ReconciliationEngine, unmatched
from .strategies import MatchingStrategy, AmountDateWindowStrategy

__all__ = [
    "ReconciliationEngine",
    "unmatched",
    "MatchingStrategy",
    "AmountDateWindowStrategy",
]
