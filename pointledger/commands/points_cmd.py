"""Point issuance and burn CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table

from ..errors import LedgerError
from ..events import LedgerEvent
from .common import open_store, report_error


def load_batch_file(path: Path) -> tuple[list[Any], list[Any]]:
    """
    Load paired batch inputs from YAML (or JSON).

    Expected shape:

        accounts: [alice, bob]
        amounts: [10, 20]

    The lists are returned as written; pairing and validation are left to the
    ledger so a length mismatch is reported the same way as from the API.
    Quote account names that YAML would read as numbers.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"{path}: invalid YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping with 'accounts' and 'amounts'")
    accounts = data.get("accounts")
    amounts = data.get("amounts")
    if not isinstance(accounts, list) or not isinstance(amounts, list):
        raise ValueError(f"{path}: 'accounts' and 'amounts' must both be lists")
    return accounts, amounts


def _print_records(console: Console, title: str, records: list[LedgerEvent]) -> None:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("account", style="cyan", no_wrap=True)
    table.add_column("amount", justify="right")
    for record in records:
        account = record.payload.get("to") if record.is_issuance else record.payload.get("from")
        sign = "+" if record.is_issuance else "-"
        table.add_row(str(record.sequence), str(account), f"{sign}{record.payload.get('amount')}")
    console.print(table)


def run_points_add(home: Path, caller: str, account: str, amount: int) -> int:
    console = Console()
    try:
        ledger = open_store(home).ledger
        record = ledger.add_points(caller, account, amount)
    except LedgerError as exc:
        return report_error(exc)
    console.print(f"#{record.sequence} +{amount} {ledger.symbol()} -> {account} (balance {ledger.balance_of(account)})")
    return 0


def run_points_remove(home: Path, caller: str, account: str, amount: int) -> int:
    console = Console()
    try:
        ledger = open_store(home).ledger
        record = ledger.remove_points(caller, account, amount)
    except LedgerError as exc:
        return report_error(exc)
    console.print(f"#{record.sequence} -{amount} {ledger.symbol()} <- {account} (balance {ledger.balance_of(account)})")
    return 0


def run_points_bulk(
    home: Path,
    caller: str,
    accounts: list[Any],
    amounts: list[Any],
    *,
    remove: bool = False,
    batch_file: Path | None = None,
) -> int:
    """Apply a bulk add (or remove) from paired lists or a batch file."""
    console = Console()
    err = Console(stderr=True)

    if batch_file is not None:
        if accounts or amounts:
            err.print("Pass either --file or --account/--amount pairs, not both.", style="bold red")
            return 2
        try:
            accounts, amounts = load_batch_file(batch_file)
        except (OSError, ValueError) as exc:
            err.print(str(exc), style="bold red", markup=False)
            return 1

    try:
        ledger = open_store(home).ledger
        if remove:
            records = ledger.bulk_remove_points(caller, accounts, amounts)
        else:
            records = ledger.bulk_add_points(caller, accounts, amounts)
    except LedgerError as exc:
        return report_error(exc)

    if not records:
        console.print("Empty batch; nothing applied.", style="dim")
        return 0

    _print_records(console, "Bulk remove" if remove else "Bulk add", records)
    console.print(f"total supply: {ledger.total_supply()} {ledger.symbol()}", style="dim")
    return 0


def run_points_transfer(home: Path, caller: str | None, to: str, amount: int) -> int:
    try:
        open_store(home).ledger.transfer(caller or "", to, amount)
    except LedgerError as exc:
        return report_error(exc)
    return 0
