"""Helpers shared by the CLI command modules."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..errors import LedgerError
from ..events import (
    ADMINISTRATION_TRANSFER_STARTED,
    ADMINISTRATION_TRANSFERRED,
    POINTS_TRANSFER,
    LedgerEvent,
)
from ..store import LedgerStore


def open_store(home: Path) -> LedgerStore:
    return LedgerStore.open(home)


def report_error(exc: LedgerError) -> int:
    """Print a ledger error on stderr and return the CLI exit code for it."""
    err = Console(stderr=True)
    err.print(f"error [{exc.code}]: {exc}", style="bold red", markup=False)
    return 1


def describe_record(record: LedgerEvent) -> str:
    """One-line human description of a committed record."""
    payload = record.payload
    if record.event_type == POINTS_TRANSFER:
        amount = payload.get("amount")
        if record.is_issuance:
            return f"+{amount} -> {payload.get('to')}"
        return f"-{amount} <- {payload.get('from')}"
    if "account" in payload:
        return str(payload["account"])
    if record.event_type == ADMINISTRATION_TRANSFER_STARTED:
        if payload.get("pending") is None:
            return "pending handoff withdrawn"
        return f"{payload.get('previous')} -> {payload.get('pending')} (pending)"
    if record.event_type == ADMINISTRATION_TRANSFERRED:
        return f"{payload.get('previous')} -> {payload.get('administrator') or '(renounced)'}"
    return ", ".join(f"{k}={v}" for k, v in payload.items())
