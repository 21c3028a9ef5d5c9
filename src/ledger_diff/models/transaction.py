"""Data models for reconciliation transactions and results."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..utils.exceptions import RejectReason, ValidationError

CENTS = Decimal("0.01")


@dataclass(eq=False)
class Transaction:
    """
    Canonical transaction used for matching.

    Amounts are held as non-negative integer cents so that equality is
    exact; debit vs. credit direction is collapsed before this point.
    Instances compare by identity: two identical rows in one file are two
    distinct transactions.
    """

    occurred_on: date

    # Magnitude in minor units, always >= 0
    amount_cents: int

    # Free text, reporting only
    description: str = ""

    # Profile name the record was read with
    source: str = ""

    # 1-based row number in the input file
    line_number: int = 0

    matched: bool = False

    def __post_init__(self) -> None:
        if self.amount_cents < 0:
            raise ValidationError(
                f"Transaction amount must be non-negative, got {self.amount_cents} cents"
            )

    @property
    def amount(self) -> Decimal:
        """Amount as a two-place decimal."""
        return (Decimal(self.amount_cents) * CENTS).quantize(CENTS)

    def mark_matched(self) -> None:
        """Flag the transaction as paired. A transaction is matched at most once."""
        if self.matched:
            raise ValidationError(f"Transaction already matched: {self}")
        self.matched = True

    def __str__(self) -> str:
        return f"{self.occurred_on.isoformat()} {self.amount:.2f} {self.description}"


@dataclass(frozen=True)
class Rejection:
    """A raw record dropped during normalization, with the reason."""

    line_number: int
    reason: RejectReason
    message: str
    fields: tuple[str, ...] = ()


@dataclass
class MatchResult:
    """A confirmed one-to-one pairing between the two lists."""

    first: Transaction
    second: Transaction

    # Position of each side in its list, for audit
    first_index: int = 0
    second_index: int = 0

    @property
    def date_variance_days(self) -> int:
        """Absolute day difference between the two sides."""
        return abs((self.first.occurred_on - self.second.occurred_on).days)


@dataclass
class ReconciliationSummary:
    """Summary of the reconciliation process."""

    # File information
    source_filename: str
    ledger_filename: str
    source_profile: str
    ledger_profile: str
    reconciliation_date: datetime

    # Transaction counts
    total_source_transactions: int
    total_ledger_transactions: int
    matched_count: int
    source_only_count: int
    ledger_only_count: int

    # Amount totals
    source_total: Decimal
    ledger_total: Decimal
    source_only_total: Decimal
    ledger_only_total: Decimal

    # Period covered by the source side
    period_start: Optional[date] = None
    period_end: Optional[date] = None

    date_tolerance_days: int = 7
    rejected_counts: dict[str, int] = field(default_factory=dict)

    processing_time_seconds: float = 0.0
    config_file_used: Optional[str] = None

    @property
    def match_rate_source(self) -> float:
        """Percentage of source transactions matched."""
        if self.total_source_transactions == 0:
            return 0.0
        return (self.matched_count / self.total_source_transactions) * 100

    @property
    def match_rate_ledger(self) -> float:
        """Percentage of ledger transactions matched."""
        if self.total_ledger_transactions == 0:
            return 0.0
        return (self.matched_count / self.total_ledger_transactions) * 100

    @property
    def is_balanced(self) -> bool:
        """True when every transaction on both sides found a partner."""
        return self.source_only_count == 0 and self.ledger_only_count == 0
