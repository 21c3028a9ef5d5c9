"""
Matching predicates for transaction reconciliation.
"""

from abc import ABC, abstractmethod
from typing import Hashable

from ..models.transaction import Transaction


class MatchingStrategy(ABC):
    """Abstract base class for pairwise match predicates."""

    @abstractmethod
    def is_match(self, first: Transaction, second: Transaction) -> bool:
        """
        Decide whether two transactions from opposite lists correspond.

        Args:
            first: Transaction from the first list
            second: Candidate from the second list

        Returns:
            True if the pair satisfies the predicate
        """
        pass

    @abstractmethod
    def describe(self) -> str:
        """Human-readable description of the predicate."""
        pass

    def bucket_key(self, txn: Transaction) -> Hashable:
        """
        Key that candidates must share to possibly match.

        The engine only compares transactions with equal keys. The default
        puts everything in one bucket.
        """
        return None


class AmountDateWindowStrategy(MatchingStrategy):
    """
    Exact amount, date within a symmetric inclusive window.

    Amounts are integer cents, so equality is exact. Descriptions are
    never consulted.
    """

    def __init__(self, tolerance_days: int = 7):
        """
        Initialize with date tolerance.

        Args:
            tolerance_days: Maximum days difference allowed, either direction
        """
        if tolerance_days < 0:
            raise ValueError("tolerance_days must be non-negative")
        self.tolerance_days = tolerance_days

    def is_match(self, first: Transaction, second: Transaction) -> bool:
        return (
            first.amount_cents == second.amount_cents
            and abs((first.occurred_on - second.occurred_on).days) <= self.tolerance_days
        )

    def bucket_key(self, txn: Transaction) -> Hashable:
        return txn.amount_cents

    def describe(self) -> str:
        return f"Exact amount, dates within {self.tolerance_days} days"
