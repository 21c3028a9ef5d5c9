"""
Excel report generator for reconciliation results.
Creates a workbook with summary, matched pairs and one sheet per residual list.
"""

from pathlib import Path
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..models.transaction import (
    MatchResult,
    ReconciliationSummary,
    Transaction,
)
from ..config import ReconConfig
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
SKEW_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
AMOUNT_FORMAT = "#,##0.00"
DATE_FORMAT = "yyyy-mm-dd"

RESIDUAL_HEADERS = ["Date", "Amount", "Description", "Line", "Matched"]


class ExcelReportGenerator:
    """Generates Excel reconciliation reports."""

    def __init__(self, config: ReconConfig):
        self.config = config
        self.sheet_config = config.output.sheets

    def generate_report(
        self,
        summary: ReconciliationSummary,
        matches: list[MatchResult],
        source_only: list[Transaction],
        ledger_only: list[Transaction],
        output_path: Path,
    ) -> Path:
        """
        Generate the complete reconciliation report.

        Args:
            summary: Reconciliation summary
            matches: Confirmed pairs
            source_only: Unmatched source transactions
            ledger_only: Unmatched ledger transactions
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        if self.sheet_config.summary.enabled:
            self._create_summary_sheet(wb, summary)

        if self.sheet_config.matched.enabled:
            self._create_matched_sheet(wb, matches)

        if self.sheet_config.source_only.enabled:
            self._create_residual_sheet(wb, self.sheet_config.source_only.name, source_only)

        if self.sheet_config.ledger_only.enabled:
            self._create_residual_sheet(wb, self.sheet_config.ledger_only.name, ledger_only)

        if not wb.worksheets:
            raise ReportGenerationError("All report sheets are disabled")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to save report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self, wb: Workbook, summary: ReconciliationSummary
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Ledger Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        sections = [
            (
                "File Information",
                [
                    ("Source File:", f"{summary.source_filename} ({summary.source_profile})"),
                    ("Ledger File:", f"{summary.ledger_filename} ({summary.ledger_profile})"),
                    (
                        "Reconciliation Date:",
                        summary.reconciliation_date.strftime("%Y-%m-%d %H:%M:%S"),
                    ),
                    ("Source Period:", f"{summary.period_start} to {summary.period_end}"),
                    ("Date Tolerance:", f"{summary.date_tolerance_days} days"),
                    ("Config File:", summary.config_file_used or "Default"),
                ],
            ),
            (
                "Transaction Counts",
                [
                    ("Source Transactions:", summary.total_source_transactions),
                    ("Ledger Transactions:", summary.total_ledger_transactions),
                    ("Matched Pairs:", summary.matched_count),
                    ("Only In Source:", summary.source_only_count),
                    ("Only In Ledger:", summary.ledger_only_count),
                ]
                + [
                    (f"Rejected ({name}):", count)
                    for name, count in summary.rejected_counts.items()
                ],
            ),
            (
                "Match Rates",
                [
                    ("Source Match Rate:", f"{summary.match_rate_source:.1f}%"),
                    ("Ledger Match Rate:", f"{summary.match_rate_ledger:.1f}%"),
                ],
            ),
            (
                "Amount Totals",
                [
                    ("Source Total:", float(summary.source_total)),
                    ("Ledger Total:", float(summary.ledger_total)),
                    ("Only In Source Total:", float(summary.source_only_total)),
                    ("Only In Ledger Total:", float(summary.ledger_only_total)),
                ],
            ),
        ]

        row = 3
        for title, items in sections:
            ws[f"A{row}"] = title
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for label, value in items:
                ws[f"A{row}"] = label
                ws[f"B{row}"] = value
                if isinstance(value, float):
                    ws[f"B{row}"].number_format = AMOUNT_FORMAT
                row += 1
            row += 1

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_matched_sheet(self, wb: Workbook, matches: list[MatchResult]) -> None:
        """Create the matched pairs sheet."""
        ws = wb.create_sheet(self.sheet_config.matched.name)

        headers = [
            "Source Date",
            "Source Amount",
            "Source Description",
            "Ledger Date",
            "Ledger Amount",
            "Ledger Description",
            "Date Variance (Days)",
        ]
        self._write_headers(ws, headers)

        for row_num, match in enumerate(matches, start=2):
            row_data = [
                match.first.occurred_on,
                float(match.first.amount),
                match.first.description,
                match.second.occurred_on,
                float(match.second.amount),
                match.second.description,
                match.date_variance_days,
            ]

            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = SKEW_FILL if match.date_variance_days else MATCH_FILL
                if col in (1, 4):
                    cell.number_format = DATE_FORMAT
                elif col in (2, 5):
                    cell.number_format = AMOUNT_FORMAT

        self._auto_fit_columns(ws)

    def _create_residual_sheet(
        self, wb: Workbook, sheet_name: str, transactions: list[Transaction]
    ) -> None:
        """Create a sheet listing one side's unmatched transactions."""
        ws = wb.create_sheet(sheet_name)
        self._write_headers(ws, RESIDUAL_HEADERS)

        for row_num, txn in enumerate(transactions, start=2):
            row_data = [
                txn.occurred_on,
                float(txn.amount),
                txn.description,
                txn.line_number,
                "yes" if txn.matched else "no",
            ]

            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = UNMATCHED_FILL
                if col == 1:
                    cell.number_format = DATE_FORMAT
                elif col == 2:
                    cell.number_format = AMOUNT_FORMAT

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            column = column_cells[0].column_letter
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column].width = min(max_length + 2, 50)
