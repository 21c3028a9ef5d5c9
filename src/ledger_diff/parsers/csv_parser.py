"""
Positional CSV ledger parser.
Normalizes raw export records into canonical transactions per source profile.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union
import csv
import logging
import re

from ..config import SourceProfile
from ..models.transaction import CENTS, Rejection, Transaction
from ..utils.exceptions import (
    EmptyResultError,
    LedgerParseError,
    RecordParseError,
    RejectReason,
)

logger = logging.getLogger(__name__)

# Plain ASCII decimal, optionally signed, optional exponent
AMOUNT_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def parse_date(value: str, date_format: str) -> date:
    """
    Parse a date field with the profile's strptime pattern.

    Raises:
        RecordParseError: If the value does not match the pattern
    """
    try:
        return datetime.strptime(value.strip(), date_format).date()
    except ValueError as e:
        raise RecordParseError(
            RejectReason.BAD_DATE, f"Date parse error for '{value}' ({e})"
        ) from e


def parse_amount_cents(value: str) -> int:
    """
    Parse an amount field into non-negative integer cents.

    Thousands-separator commas are removed and the sign is dropped.
    Fractions of a cent are rounded half-up.

    Raises:
        RecordParseError: If the value is empty or not a plain decimal number
    """
    text = value.replace(",", "").strip()
    if not text:
        raise RecordParseError(RejectReason.BAD_AMOUNT, "Amount is empty")

    if not AMOUNT_PATTERN.fullmatch(text):
        raise RecordParseError(
            RejectReason.BAD_AMOUNT, f"Amount parse error for '{value}'"
        )

    try:
        cents = abs(Decimal(text)).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise RecordParseError(
            RejectReason.BAD_AMOUNT, f"Amount parse error for '{value}'"
        ) from e

    return int(cents * 100)


def normalize_record(
    fields: Sequence[str],
    profile: SourceProfile,
    line_number: int = 0,
    min_date: Optional[date] = None,
) -> Optional[Union[Transaction, Rejection]]:
    """
    Convert one raw CSV record into a Transaction.

    The debit column wins when it is non-empty, otherwise the credit column
    is used. Records dated strictly before ``min_date`` are excluded without
    a diagnostic.

    Args:
        fields: Raw field values of the record
        profile: Column layout and date pattern of the source
        line_number: 1-based row number, for diagnostics
        min_date: Optional cutoff; earlier records are excluded

    Returns:
        A Transaction, a Rejection describing why the record was dropped,
        or None if the record falls before the cutoff
    """
    if len(fields) <= profile.max_column:
        return Rejection(
            line_number=line_number,
            reason=RejectReason.TOO_SHORT,
            message=(
                f"Record too short ({len(fields)} fields, "
                f"need {profile.max_column + 1})"
            ),
            fields=tuple(fields),
        )

    try:
        occurred_on = parse_date(fields[profile.date_column], profile.date_format)

        if min_date is not None and occurred_on < min_date:
            return None

        amount_text = fields[profile.debit_column]
        if not amount_text.strip():
            amount_text = fields[profile.credit_column]
        amount_cents = parse_amount_cents(amount_text)
    except RecordParseError as e:
        return Rejection(
            line_number=line_number,
            reason=e.reason,
            message=str(e),
            fields=tuple(fields),
        )

    return Transaction(
        occurred_on=occurred_on,
        amount_cents=amount_cents,
        description=fields[profile.description_column].strip(),
        source=profile.name,
        line_number=line_number,
    )


class LedgerCsvParser:
    """
    Parser for positional CSV exports described by a SourceProfile.

    Bad records are dropped with a logged diagnostic and never stop the
    batch; a file that yields no transactions at all is an error.
    """

    def __init__(self, profile: SourceProfile):
        """
        Initialize the parser with a source profile.

        Args:
            profile: Column layout, date pattern and file settings
        """
        self.profile = profile
        self.rejections: list[Rejection] = []

    def parse_file(
        self, file_path: Path, min_date: Optional[date] = None
    ) -> list[Transaction]:
        """
        Parse a CSV export and return its transactions sorted by date.

        Args:
            file_path: Path to the CSV file
            min_date: Optional cutoff; earlier records are excluded

        Returns:
            List of transactions, ascending by date

        Raises:
            LedgerParseError: If the file cannot be read
            EmptyResultError: If no record was admitted
        """
        logger.info(f"Parsing {self.profile.name} export: {file_path}")

        try:
            # Undecodable bytes become U+FFFD in their own cell only
            with open(
                file_path,
                "r",
                encoding=self.profile.encoding,
                errors="replace",
                newline="",
            ) as f:
                rows = list(csv.reader(f, delimiter=self.profile.delimiter))
        except (OSError, LookupError, csv.Error) as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise LedgerParseError(f"Failed to read {file_path}: {e}") from e

        return self.parse_rows(rows, source_name=Path(file_path).name, min_date=min_date)

    def parse_rows(
        self,
        rows: Iterable[Sequence[str]],
        source_name: str = "<rows>",
        min_date: Optional[date] = None,
    ) -> list[Transaction]:
        """
        Normalize already-split records.

        Args:
            rows: Raw records, one sequence of field strings per row
            source_name: Name used in diagnostics
            min_date: Optional cutoff; earlier records are excluded

        Returns:
            List of transactions, ascending by date (stable)

        Raises:
            EmptyResultError: If no record was admitted
        """
        self.rejections = []
        transactions: list[Transaction] = []
        excluded = 0

        for line_number, fields in enumerate(rows, start=1):
            if line_number <= self.profile.skip_rows:
                continue

            result = normalize_record(fields, self.profile, line_number, min_date)

            if result is None:
                excluded += 1
            elif isinstance(result, Rejection):
                self.rejections.append(result)
                logger.warning(
                    f"{source_name}:{line_number}: {result.message}, skipping {list(fields)}"
                )
            else:
                transactions.append(result)

        if not transactions:
            raise EmptyResultError(source_name, rejected=len(self.rejections))

        transactions.sort(key=lambda t: t.occurred_on)

        if excluded:
            logger.info(f"{source_name}: {excluded} records before {min_date} excluded")
        logger.info(
            f"Extracted {len(transactions)} transactions from {source_name} "
            f"({len(self.rejections)} rejected)"
        )

        return transactions
