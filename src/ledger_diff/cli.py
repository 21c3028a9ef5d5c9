"""
Command-line interface for the ledger-diff reconciliation tool.
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import load_config, generate_default_config, ReconConfig
from .matching.engine import ReconciliationEngine
from .models.transaction import Transaction
from .parsers.csv_parser import LedgerCsvParser
from .reports.csv_export import export_unmatched
from .reports.excel_generator import ExcelReportGenerator
from .utils.exceptions import ConfigurationError, EmptyResultError, ReconciliationError
from .utils.logging_config import setup_logging

console = Console()

EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_EMPTY_RESULT = 3


@click.group()
@click.version_option(version=__version__)
def main():
    """Find transactions that appear in one export but not the other."""
    pass


@main.command()
@click.argument("profile")
@click.argument("source_file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("ledger_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("--ledger-profile", default=None, help="Profile of the ledger file")
@click.option("--date-tolerance", type=int, default=None, help="Override date tolerance in days")
@click.option(
    "--no-start-filter",
    is_flag=True,
    help="Keep ledger records dated before the first source record",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Excel report path")
@click.option(
    "--csv-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to export unmatched transactions as CSV",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def reconcile(
    profile: str,
    source_file: Path,
    ledger_file: Path,
    config: Optional[Path],
    ledger_profile: Optional[str],
    date_tolerance: Optional[int],
    no_start_filter: bool,
    output: Optional[Path],
    csv_dir: Optional[Path],
    verbose: bool,
):
    """
    Reconcile a source export against a ledger export.

    PROFILE: Name of the source profile (see `ledger-diff profiles`)
    SOURCE_FILE: Path to the bank or card CSV export
    LEDGER_FILE: Path to the accounting CSV export
    """
    try:
        recon_config = load_config(config)
        _setup_logging(recon_config, verbose)

        # Profiles are resolved before any file is read
        source_profile = recon_config.get_profile(profile)
        ledger_profile_config = recon_config.get_profile(
            ledger_profile or recon_config.ledger_profile
        )

        if date_tolerance is not None:
            if date_tolerance < 0:
                raise ConfigurationError("Date tolerance must be non-negative")
            recon_config.matching.date_tolerance_days = date_tolerance

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task(f"Parsing {source_profile.name} export...", total=None)
            source_parser = LedgerCsvParser(source_profile)
            source_transactions = source_parser.parse_file(source_file)
            progress.update(task, completed=True)

            # Align history depth: the ledger usually goes back further
            min_date = None if no_start_filter else source_transactions[0].occurred_on

            task = progress.add_task(
                f"Parsing {ledger_profile_config.name} export...", total=None
            )
            ledger_parser = LedgerCsvParser(ledger_profile_config)
            ledger_transactions = ledger_parser.parse_file(ledger_file, min_date=min_date)
            progress.update(task, completed=True)

            task = progress.add_task("Running reconciliation...", total=None)
            engine = ReconciliationEngine(recon_config)
            source_only, ledger_only = engine.reconcile(
                source_transactions, ledger_transactions
            )
            progress.update(task, completed=True)

        summary = engine.generate_summary(
            source_transactions=source_transactions,
            ledger_transactions=ledger_transactions,
            source_filename=source_file.name,
            ledger_filename=ledger_file.name,
            source_profile=source_profile.name,
            ledger_profile=ledger_profile_config.name,
            processing_time=engine.processing_time,
            rejected_counts={
                "source": len(source_parser.rejections),
                "ledger": len(ledger_parser.rejections),
            },
        )

        date_format = recon_config.output.display_date_format
        _display_transactions("In first but not in second", source_only, date_format)
        _display_transactions("In second but not in first", ledger_only, date_format)
        _display_summary(summary)

        if output is not None:
            report_path = ExcelReportGenerator(recon_config).generate_report(
                summary=summary,
                matches=engine.matches,
                source_only=source_only,
                ledger_only=ledger_only,
                output_path=output,
            )
            console.print(f"\n[green]Report generated: {report_path}[/green]")

        if csv_dir is not None:
            paths = export_unmatched(source_only, ledger_only, csv_dir, date_format)
            console.print(f"[green]Unmatched exported: {paths[0]}, {paths[1]}[/green]")

    except Exception as e:
        _fail(e, verbose)


@main.command()
@click.argument("profile")
@click.argument("csv_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--limit", type=int, default=20, show_default=True, help="Rows to display")
def parse(profile: str, csv_file: Path, config: Optional[Path], limit: int):
    """
    Normalize a CSV export and display the result.

    PROFILE: Name of the source profile
    CSV_FILE: Path to the CSV export
    """
    try:
        recon_config = load_config(config)
        _setup_logging(recon_config, verbose=False)
        parser = LedgerCsvParser(recon_config.get_profile(profile))
        transactions = parser.parse_file(csv_file)

        date_format = recon_config.output.display_date_format
        _display_transactions(
            f"{csv_file.name} ({profile})", transactions[:limit], date_format
        )

        if len(transactions) > limit:
            console.print(f"\n... and {len(transactions) - limit} more transactions")

        console.print(f"\nTotal transactions: {len(transactions)}")
        console.print(f"Rejected records: {len(parser.rejections)}")

    except Exception as e:
        _fail(e, verbose=False)


@main.command()
@click.option("-c", "--config", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def profiles(config: Optional[Path]):
    """List the available source profiles."""
    try:
        recon_config = load_config(config)
    except Exception as e:
        _fail(e, verbose=False)

    table = Table(title="Source Profiles")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Date", justify="right")
    table.add_column("Debit", justify="right")
    table.add_column("Credit", justify="right")
    table.add_column("Text", justify="right")
    table.add_column("Date Format", no_wrap=True)

    for name, source_profile in recon_config.profiles.items():
        table.add_row(
            name,
            str(source_profile.date_column),
            str(source_profile.debit_column),
            str(source_profile.credit_column),
            str(source_profile.description_column),
            source_profile.date_format,
        )

    console.print(table)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("ledger-diff.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _setup_logging(config: ReconConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.getLevelName(config.logging.level.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {config.logging.level}")
    log_file = Path(config.logging.file) if config.logging.file else None
    setup_logging(level, log_file=log_file, log_format=config.logging.format)


def _fail(error: Exception, verbose: bool) -> None:
    """Report a fatal error and exit with a status that identifies its class."""
    if isinstance(error, ConfigurationError):
        console.print(f"[red]Configuration error: {escape(str(error))}[/red]")
        exit_code = EXIT_CONFIG_ERROR
    elif isinstance(error, EmptyResultError):
        console.print(f"[red]No transactions read: {escape(str(error))}[/red]")
        exit_code = EXIT_EMPTY_RESULT
    elif isinstance(error, ReconciliationError):
        console.print(f"[red]Error: {escape(str(error))}[/red]")
        exit_code = EXIT_ERROR
    else:
        console.print(f"[red]Unexpected error: {escape(str(error))}[/red]")
        exit_code = EXIT_ERROR

    if verbose:
        console.print_exception()
    sys.exit(exit_code)


def _display_transactions(
    title: str, transactions: list[Transaction], date_format: str
) -> None:
    """Display transactions as date, amount, description."""
    table = Table(title=f"{title}: {len(transactions)}")
    table.add_column("Date")
    table.add_column("Amount", justify="right")
    table.add_column("Description")
    table.add_column("Line", justify="right")

    for txn in transactions:
        table.add_row(
            txn.occurred_on.strftime(date_format),
            f"{txn.amount:,.2f}",
            escape(txn.description),
            str(txn.line_number),
        )

    console.print(table)


def _display_summary(summary) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Source Transactions", str(summary.total_source_transactions))
    table.add_row("Ledger Transactions", str(summary.total_ledger_transactions))
    table.add_row("Matched", str(summary.matched_count))
    table.add_row("Only In Source", str(summary.source_only_count))
    table.add_row("Only In Ledger", str(summary.ledger_only_count))
    table.add_row("Source Match Rate", f"{summary.match_rate_source:.1f}%")
    table.add_row("Ledger Match Rate", f"{summary.match_rate_ledger:.1f}%")
    table.add_row("Date Tolerance", f"{summary.date_tolerance_days} days")
    table.add_row("Processing Time", f"{summary.processing_time_seconds:.2f}s")

    console.print(table)

    if summary.is_balanced:
        console.print("[green]No discrepancies found[/green]")


if __name__ == "__main__":
    main()
