"""Read-only and setup CLI commands: init, balance, supply, info, history, verify."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..errors import LedgerError
from ..invariants import INVARIANT_ORDER, INVARIANTS, check_invariants
from ..store import LedgerStore
from .common import describe_record, open_store, report_error


def run_init(home: Path, administrator: str, *, name: str, symbol: str) -> int:
    console = Console()
    try:
        store = LedgerStore.init(home, administrator, name=name, symbol=symbol)
    except LedgerError as exc:
        return report_error(exc)
    except ValueError as exc:
        Console(stderr=True).print(str(exc), style="bold red", markup=False)
        return 1
    console.print(f"Initialized {store.config.name} ({store.config.symbol}) ledger in {store.home}")
    console.print(f"administrator: {administrator}", style="dim")
    return 0


def run_balance(home: Path, accounts: list[str], *, output_json: bool = False) -> int:
    console = Console()
    try:
        ledger = open_store(home).ledger
    except LedgerError as exc:
        return report_error(exc)

    balances = ledger.bulk_balances_of(accounts)

    if output_json:
        print(json.dumps([{"account": a, "balance": b} for a, b in zip(accounts, balances)], indent=2))
        return 0

    table = Table(title=f"Balances ({ledger.symbol()})")
    table.add_column("account", style="cyan", no_wrap=True)
    table.add_column("balance", justify="right")
    for account, balance in zip(accounts, balances):
        table.add_row(account, str(balance))
    console.print(table)
    return 0


def run_supply(home: Path) -> int:
    try:
        ledger = open_store(home).ledger
    except LedgerError as exc:
        return report_error(exc)
    Console().print(f"{ledger.total_supply()} {ledger.symbol()}")
    return 0


def run_info(home: Path, *, output_json: bool = False) -> int:
    console = Console()
    try:
        store = open_store(home)
    except LedgerError as exc:
        return report_error(exc)

    state = store.ledger.state()
    data = state.to_dict()
    data["home"] = str(store.home)
    data["journal"] = str(store.journal.path)
    data["holders"] = len(state.balances)

    if output_json:
        print(json.dumps(data, indent=2, sort_keys=True))
        return 0

    console.print(f"{state.name} ({state.symbol}), decimals {data['decimals']}", style="bold")
    console.print(f"total supply: {state.total_supply}")
    console.print(f"holders: {data['holders']}")
    console.print(f"administrator: {state.administrator if state.administrator is not None else '(renounced)'}")
    if state.pending_administrator is not None:
        console.print(f"pending administrator: {state.pending_administrator}", style="yellow")
    console.print(f"contributors: {len(state.contributors)}")
    console.print(f"records: {state.sequence}", style="dim")
    console.print(f"journal: {store.journal.path}", style="dim")
    return 0


def run_history(home: Path, *, since: int = 0, limit: int | None = None, output_json: bool = False) -> int:
    console = Console()
    try:
        records = open_store(home).ledger.history(since=since)
    except LedgerError as exc:
        return report_error(exc)

    if limit is not None:
        records = records[-limit:] if limit > 0 else []

    if output_json:
        print(json.dumps([r.to_dict() for r in records], indent=2))
        return 0

    if not records:
        console.print("No records.", style="dim")
        return 0

    table = Table(title="History")
    table.add_column("#", justify="right", style="dim")
    table.add_column("type", style="magenta")
    table.add_column("actor", style="cyan")
    table.add_column("detail")
    table.add_column("timestamp", style="dim")
    for record in records:
        table.add_row(
            str(record.sequence),
            record.event_type,
            record.actor or "",
            describe_record(record),
            record.timestamp.isoformat(timespec="seconds"),
        )
    console.print(table)
    return 0


def run_verify(home: Path, *, output_json: bool = False) -> int:
    """Replay the journal and check every ledger invariant."""
    console = Console()
    try:
        store = open_store(home)
    except LedgerError as exc:
        return report_error(exc)

    state = store.ledger.state()
    violations = check_invariants(state)

    if output_json:
        print(json.dumps({
            "records": state.sequence,
            "violations": [v.to_dict() for v in violations],
            "ok": not violations,
        }, indent=2))
        return 1 if violations else 0

    failed = {v.invariant_id for v in violations}
    table = Table(title=f"Invariants ({state.sequence} records replayed)")
    table.add_column("invariant", style="cyan")
    table.add_column("status")
    table.add_column("statement", style="dim")
    for invariant_id in INVARIANT_ORDER:
        status = "[red]FAIL[/red]" if invariant_id in failed else "[green]ok[/green]"
        table.add_row(invariant_id, status, INVARIANTS[invariant_id].statement)
    console.print(table)

    for v in violations:
        console.print(f"  {v.invariant_id}: {v.message}", style="red", markup=False)
    return 1 if violations else 0
