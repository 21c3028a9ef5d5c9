"""
Greedy one-to-one matching engine for two transaction lists.
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Hashable, Optional
import logging

from ..models.transaction import (
    CENTS,
    MatchResult,
    ReconciliationSummary,
    Transaction,
)
from ..config import ReconConfig
from .strategies import AmountDateWindowStrategy, MatchingStrategy

logger = logging.getLogger(__name__)


def unmatched(transactions: list[Transaction]) -> list[Transaction]:
    """Transactions still unmatched, in their original order."""
    return [t for t in transactions if not t.matched]


def _total(transactions: list[Transaction]) -> Decimal:
    return (Decimal(sum(t.amount_cents for t in transactions)) * CENTS).quantize(CENTS)


class ReconciliationEngine:
    """
    Pairs transactions from two lists, first fit in list order.

    For each unmatched record of the first list, in order, the earliest
    unmatched record of the second list that satisfies the strategy is taken
    and both are marked matched. There is no backtracking and no attempt to
    minimize date skew: the result depends on list order, and a closer-dated
    candidate later in the second list loses to an earlier qualifying one.
    """

    def __init__(
        self,
        config: Optional[ReconConfig] = None,
        strategy: Optional[MatchingStrategy] = None,
    ):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration
            strategy: Match predicate; defaults to exact amount within the
                configured date window
        """
        self.config = config or ReconConfig()
        self.strategy = strategy or AmountDateWindowStrategy(
            tolerance_days=self.config.matching.date_tolerance_days
        )
        # Pairs and elapsed seconds of the last reconcile run
        self.matches: list[MatchResult] = []
        self.processing_time = 0.0

    def find_matches(
        self, first: list[Transaction], second: list[Transaction]
    ) -> list[MatchResult]:
        """
        Match the two lists in place and return the confirmed pairs.

        Candidates in the second list are bucketed by the strategy key
        (the amount, for the default strategy). Each bucket keeps list order,
        so scanning a bucket selects the same record a full scan would.

        Args:
            first: First transaction list, sorted by date
            second: Second transaction list, sorted by date

        Returns:
            Match results in the order the pairs were made
        """
        buckets: dict[Hashable, list[int]] = defaultdict(list)
        for index, txn in enumerate(second):
            if not txn.matched:
                buckets[self.strategy.bucket_key(txn)].append(index)

        matches: list[MatchResult] = []

        for first_index, txn in enumerate(first):
            if txn.matched:
                continue

            candidates = buckets.get(self.strategy.bucket_key(txn))
            if not candidates:
                continue

            for position, second_index in enumerate(candidates):
                candidate = second[second_index]
                if candidate.matched or not self.strategy.is_match(txn, candidate):
                    continue

                txn.mark_matched()
                candidate.mark_matched()
                del candidates[position]

                match = MatchResult(
                    first=txn,
                    second=candidate,
                    first_index=first_index,
                    second_index=second_index,
                )
                matches.append(match)
                logger.debug(
                    f"Matched {txn} (line {txn.line_number}) with "
                    f"{candidate} (line {candidate.line_number}), "
                    f"{match.date_variance_days} days apart"
                )
                break

        return matches

    def reconcile(
        self, first: list[Transaction], second: list[Transaction]
    ) -> tuple[list[Transaction], list[Transaction]]:
        """
        Reconcile two transaction lists.

        Mutates ``matched`` flags in place. The confirmed pairs and the
        elapsed time are kept on ``matches`` and ``processing_time``.

        Args:
            first: First transaction list (e.g. the bank/card export)
            second: Second transaction list (e.g. the ledger export)

        Returns:
            Tuple of (unmatched_first, unmatched_second), original order kept
        """
        start_time = datetime.now()
        logger.info(
            f"Starting reconciliation: {len(first)} vs {len(second)} transactions "
            f"({self.strategy.describe()})"
        )

        self.matches = self.find_matches(first, second)
        first_only = unmatched(first)
        second_only = unmatched(second)

        self.processing_time = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {self.processing_time:.2f}s: "
            f"{len(self.matches)} matches, "
            f"{len(first_only)} only in first, {len(second_only)} only in second"
        )

        return first_only, second_only

    def generate_summary(
        self,
        source_transactions: list[Transaction],
        ledger_transactions: list[Transaction],
        source_filename: str,
        ledger_filename: str,
        source_profile: str,
        ledger_profile: str,
        processing_time: float = 0.0,
        rejected_counts: Optional[dict[str, int]] = None,
    ) -> ReconciliationSummary:
        """
        Summarize a finished reconciliation.

        Counts are derived from the ``matched`` flags, so this must run
        after ``reconcile``.

        Returns:
            Reconciliation summary object
        """
        source_only = unmatched(source_transactions)
        ledger_only = unmatched(ledger_transactions)
        dates = [t.occurred_on for t in source_transactions]

        return ReconciliationSummary(
            source_filename=source_filename,
            ledger_filename=ledger_filename,
            source_profile=source_profile,
            ledger_profile=ledger_profile,
            reconciliation_date=datetime.now(),
            total_source_transactions=len(source_transactions),
            total_ledger_transactions=len(ledger_transactions),
            matched_count=len(source_transactions) - len(source_only),
            source_only_count=len(source_only),
            ledger_only_count=len(ledger_only),
            source_total=_total(source_transactions),
            ledger_total=_total(ledger_transactions),
            source_only_total=_total(source_only),
            ledger_only_total=_total(ledger_only),
            period_start=min(dates) if dates else None,
            period_end=max(dates) if dates else None,
            date_tolerance_days=getattr(self.strategy, "tolerance_days", 0),
            rejected_counts=rejected_counts or {},
            processing_time_seconds=processing_time,
            config_file_used=self.config.config_file_path,
        )
