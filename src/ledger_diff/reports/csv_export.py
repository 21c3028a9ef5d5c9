"""CSV export of unmatched transactions."""

from pathlib import Path
import logging

import pandas as pd

from ..models.transaction import Transaction
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

COLUMNS = ["date", "amount", "description", "line", "matched"]


def transactions_to_dataframe(
    transactions: list[Transaction], date_format: str = "%m/%d/%Y"
) -> pd.DataFrame:
    """
    Tabulate transactions as ``date, amount, description, line, matched``.

    Amounts are rendered with two decimals so the file round-trips the
    values exactly.
    """
    rows = [
        {
            "date": txn.occurred_on.strftime(date_format),
            "amount": f"{txn.amount:.2f}",
            "description": txn.description,
            "line": txn.line_number,
            "matched": txn.matched,
        }
        for txn in transactions
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def export_unmatched(
    source_only: list[Transaction],
    ledger_only: list[Transaction],
    output_dir: Path,
    date_format: str = "%m/%d/%Y",
) -> tuple[Path, Path]:
    """
    Write each residual list to its own CSV file.

    Returns:
        Paths of the source-only and ledger-only files
    """
    source_path = output_dir / "only_in_source.csv"
    ledger_path = output_dir / "only_in_ledger.csv"

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        transactions_to_dataframe(source_only, date_format).to_csv(source_path, index=False)
        transactions_to_dataframe(ledger_only, date_format).to_csv(ledger_path, index=False)
    except OSError as e:
        raise ReportGenerationError(f"Failed to write CSV export to {output_dir}: {e}") from e

    logger.info(f"Unmatched transactions exported to {output_dir}")
    return source_path, ledger_path
