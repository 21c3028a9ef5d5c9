"""Shared fixtures for ledger-diff tests."""

from datetime import date
from pathlib import Path

import pytest

from ledger_diff.config import ReconConfig, SourceProfile, load_config
from ledger_diff.models.transaction import Transaction


@pytest.fixture
def make_txn():
    """Build a transaction from an ISO date and a decimal amount string."""

    def _make(day: str, amount: str, description: str = "") -> Transaction:
        whole, _, frac = amount.partition(".")
        cents = int(whole) * 100 + int((frac + "00")[:2])
        return Transaction(
            occurred_on=date.fromisoformat(day),
            amount_cents=cents,
            description=description,
        )

    return _make


@pytest.fixture
def config() -> ReconConfig:
    return load_config(None)


@pytest.fixture
def simple_profile() -> SourceProfile:
    """date, description, debit, credit."""
    return SourceProfile(
        name="simple",
        date_column=0,
        description_column=1,
        debit_column=2,
        credit_column=3,
        date_format="%Y-%m-%d",
    )


def write_csv(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def card_file(tmp_path: Path) -> Path:
    """Primary card export: date in column 1, signed amount in 2, text in 7."""
    return write_csv(
        tmp_path / "card.csv",
        [
            "Posted,Date,Amount,Type,Ref,Card,Category,Description",
            "x,01/03/2024,-45.10,Sale,1,1234,Food,COFFEE SHOP",
            "x,01/05/2024,\"-1,200.00\",Sale,2,1234,Travel,AIRLINE",
            "x,01/09/2024,-19.99,Sale,3,1234,Media,STREAMING",
            "x,01/15/2024,250.00,Payment,4,1234,Payment,CARD PAYMENT",
        ],
    )


@pytest.fixture
def ledger_file(tmp_path: Path) -> Path:
    """Ledger export: date 0, memo 3, debit 4, credit 5."""
    return write_csv(
        tmp_path / "ledger.csv",
        [
            "Date,Num,Name,Memo,Debit,Credit",
            "12/20/2023,,Old,PRIOR PERIOD,45.10,",
            "01/04/2024,,Cafe,Coffee,45.10,",
            "01/06/2024,,Airline,Flight,\"1,200.00\",",
            "01/16/2024,,Bank,Card payment,,250.00",
            "01/20/2024,,Office,Supplies,88.00,",
        ],
    )
