"""Report writers."""

from .csv_export import export_unmatched, transactions_to_dataframe
from .excel_generator import ExcelReportGenerator

__all__ = ["ExcelReportGenerator", "export_unmatched", "transactions_to_dataframe"]
