"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from pointledger.ledger import PointLedger
from pointledger.store import LedgerStore

ADMIN = "admin"
CONTRIBUTOR = "carol"


@pytest.fixture
def empty_ledger() -> PointLedger:
    """Fresh ledger with an administrator and no contributors."""
    return PointLedger.create(ADMIN)


@pytest.fixture
def ledger(empty_ledger: PointLedger) -> PointLedger:
    """Ledger where CONTRIBUTOR may add and remove points."""
    empty_ledger.add_contributor(ADMIN, CONTRIBUTOR)
    return empty_ledger


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Initialized on-disk ledger home with CONTRIBUTOR registered."""
    path = tmp_path / "ledger"
    store = LedgerStore.init(path, ADMIN)
    store.ledger.add_contributor(ADMIN, CONTRIBUTOR)
    return path
