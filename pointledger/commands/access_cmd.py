"""Contributor and administrator CLI commands."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..errors import LedgerError
from .common import open_store, report_error


def run_contributor_add(home: Path, caller: str, target: str) -> int:
    console = Console()
    try:
        record = open_store(home).ledger.add_contributor(caller, target)
    except LedgerError as exc:
        return report_error(exc)
    console.print(f"#{record.sequence} contributor added: {target}")
    return 0


def run_contributor_remove(home: Path, caller: str, target: str) -> int:
    console = Console()
    try:
        record = open_store(home).ledger.remove_contributor(caller, target)
    except LedgerError as exc:
        return report_error(exc)
    console.print(f"#{record.sequence} contributor removed: {target}")
    return 0


def run_contributor_list(home: Path) -> int:
    console = Console()
    try:
        contributors = open_store(home).ledger.contributors()
    except LedgerError as exc:
        return report_error(exc)

    if not contributors:
        console.print("No contributors.", style="dim")
        return 0

    table = Table(title="Contributors")
    table.add_column("account", style="cyan", no_wrap=True)
    for account in contributors:
        table.add_row(account)
    console.print(table)
    return 0


def run_admin_show(home: Path) -> int:
    console = Console()
    try:
        ledger = open_store(home).ledger
    except LedgerError as exc:
        return report_error(exc)

    administrator = ledger.administrator()
    pending = ledger.pending_administrator()
    console.print(f"administrator: {administrator if administrator is not None else '(renounced)'}")
    if pending is not None:
        console.print(f"pending: {pending}", style="yellow")
    return 0


def run_admin_transfer(home: Path, caller: str, successor: str) -> int:
    console = Console()
    try:
        record = open_store(home).ledger.transfer_administration(caller, successor)
    except LedgerError as exc:
        return report_error(exc)
    if record.payload["pending"] is None:
        console.print(f"#{record.sequence} pending handoff withdrawn")
    else:
        console.print(f"#{record.sequence} {successor} may now accept administration")
    return 0


def run_admin_accept(home: Path, caller: str) -> int:
    console = Console()
    try:
        record = open_store(home).ledger.accept_administration(caller)
    except LedgerError as exc:
        return report_error(exc)
    console.print(f"#{record.sequence} administrator is now {caller}")
    return 0


def run_admin_renounce(home: Path, caller: str) -> int:
    console = Console()
    try:
        record = open_store(home).ledger.renounce_administration(caller)
    except LedgerError as exc:
        return report_error(exc)
    console.print(f"#{record.sequence} administration renounced; the contributor set is now fixed", style="yellow")
    return 0
