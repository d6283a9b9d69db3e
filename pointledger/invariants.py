"""
Invariant registry for the point ledger.

Each invariant is a named check over a LedgerState. The ledger never commits
a record that breaks one; the checks exist to audit replayed journals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .state import MAX_UINT256, LedgerState


@dataclass
class Invariant:
    """A structural guarantee of the ledger."""
    id: str
    name: str
    statement: str
    check: Callable[[LedgerState], list[str]]


@dataclass
class InvariantViolation:
    invariant_id: str
    message: str

    def to_dict(self) -> dict:
        return {"invariant_id": self.invariant_id, "message": self.message}


def _supply_conservation(state: LedgerState) -> list[str]:
    total = sum(state.balances.values())
    if total != state.total_supply:
        return [f"total supply {state.total_supply} != sum of balances {total}"]
    return []


def _non_negative_balances(state: LedgerState) -> list[str]:
    return [
        f"{account!r} has negative balance {balance}"
        for account, balance in sorted(state.balances.items())
        if balance < 0
    ]


def _uint256_bound(state: LedgerState) -> list[str]:
    if not 0 <= state.total_supply <= MAX_UINT256:
        return [f"total supply {state.total_supply} outside uint256"]
    return []


def _single_administrator(state: LedgerState) -> list[str]:
    messages: list[str] = []
    if state.pending_administrator is not None and state.pending_administrator == state.administrator:
        messages.append(f"{state.administrator!r} is both administrator and pending administrator")
    if state.renounced and (state.administrator is not None or state.pending_administrator is not None):
        messages.append("administration was renounced but an administrator is still set")
    if not state.renounced and state.administrator is None:
        messages.append("no administrator and administration was never renounced")
    return messages


# Canonical order
INVARIANT_ORDER = ["supply-conservation", "non-negative-balances", "uint256-bound", "single-administrator"]

INVARIANTS = {
    "supply-conservation": Invariant(
        id="supply-conservation",
        name="Supply conservation",
        statement="Total supply equals the sum of all balances.",
        check=_supply_conservation,
    ),
    "non-negative-balances": Invariant(
        id="non-negative-balances",
        name="Non-negative balances",
        statement="No balance is ever below zero.",
        check=_non_negative_balances,
    ),
    "uint256-bound": Invariant(
        id="uint256-bound",
        name="Unsigned 256-bit bound",
        statement="Total supply, and so every balance, fits in an unsigned 256-bit integer.",
        check=_uint256_bound,
    ),
    "single-administrator": Invariant(
        id="single-administrator",
        name="Single administrator",
        statement="Exactly one administrator exists unless the role was renounced.",
        check=_single_administrator,
    ),
}


def check_invariants(state: LedgerState) -> list[InvariantViolation]:
    """Evaluate every registered invariant, in canonical order."""
    violations: list[InvariantViolation] = []
    for invariant_id in INVARIANT_ORDER:
        for message in INVARIANTS[invariant_id].check(state):
            violations.append(InvariantViolation(invariant_id, message))
    return violations
