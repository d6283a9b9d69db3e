"""
Ledger state projection from the record stream.

The live ledger keeps one LedgerState and changes it only by applying
committed records, so replaying a journal through fold_events() reproduces
the exact same state.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Sequence

from .events import (
    ADMINISTRATION_TRANSFER_STARTED,
    ADMINISTRATION_TRANSFERRED,
    CONTRIBUTOR_ADDED,
    CONTRIBUTOR_REMOVED,
    LEDGER_CREATED,
    POINTS_TRANSFER,
    LedgerEvent,
    missing_payload_fields,
)

MAX_UINT256 = 2**256 - 1
DECIMALS = 0


@dataclass
class LedgerState:
    """
    Everything the ledger owns: administrator, contributor set, balances and
    total supply, plus metadata fixed at creation.

    Accounts with a zero balance are not kept in `balances`.
    """

    name: str = "Points"
    symbol: str = "PTS"
    administrator: str | None = None
    pending_administrator: str | None = None
    renounced: bool = False
    contributors: set[str] = field(default_factory=set)
    balances: dict[str, int] = field(default_factory=dict)
    total_supply: int = 0

    # Sequence of the last applied record (0 = nothing applied)
    sequence: int = 0

    def copy(self) -> LedgerState:
        return copy.deepcopy(self)

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": DECIMALS,
            "administrator": self.administrator,
            "pending_administrator": self.pending_administrator,
            "renounced": self.renounced,
            "contributors": sorted(self.contributors),
            "balances": dict(sorted(self.balances.items())),
            "total_supply": self.total_supply,
            "sequence": self.sequence,
        }


def apply_event(state: LedgerState, event: LedgerEvent) -> None:
    """
    Apply a single committed record to `state`.

    Raises ValueError if the record cannot follow the current state
    (out-of-order sequence, burn beyond balance, unknown shape). The live
    ledger never produces such records; a journal can.
    """
    if event.sequence != state.sequence + 1:
        raise ValueError(f"expected sequence {state.sequence + 1}, got {event.sequence}")
    if state.sequence == 0 and event.event_type != LEDGER_CREATED:
        raise ValueError(f"first record must be {LEDGER_CREATED}, got {event.event_type}")

    missing = missing_payload_fields(event)
    if missing:
        raise ValueError(f"{event.event_type} record is missing {', '.join(missing)}")

    payload = event.payload

    if event.event_type == LEDGER_CREATED:
        if state.sequence != 0:
            raise ValueError(f"{LEDGER_CREATED} may only appear first")
        state.administrator = _account(payload["administrator"])
        state.name = payload.get("name", state.name)
        state.symbol = payload.get("symbol", state.symbol)

    elif event.event_type == POINTS_TRANSFER:
        _apply_transfer(state, payload)

    elif event.event_type == CONTRIBUTOR_ADDED:
        account = _account(payload["account"])
        if account in state.contributors:
            raise ValueError(f"{account!r} already a contributor")
        state.contributors.add(account)

    elif event.event_type == CONTRIBUTOR_REMOVED:
        account = _account(payload["account"])
        if account not in state.contributors:
            raise ValueError(f"{account!r} is not a contributor")
        state.contributors.discard(account)

    elif event.event_type == ADMINISTRATION_TRANSFER_STARTED:
        state.pending_administrator = _account(payload["pending"], nullable=True)

    elif event.event_type == ADMINISTRATION_TRANSFERRED:
        state.administrator = _account(payload["administrator"], nullable=True)
        state.pending_administrator = None
        if state.administrator is None:
            state.renounced = True

    state.sequence = event.sequence


def _apply_transfer(state: LedgerState, payload: dict) -> None:
    source = _account(payload["from"], nullable=True)
    target = _account(payload["to"], nullable=True)
    amount = payload["amount"]
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
        raise ValueError(f"invalid amount {amount!r}")

    if source is None and target is not None:
        new_supply = state.total_supply + amount
        if new_supply > MAX_UINT256:
            raise ValueError("issuance overflows uint256")
        _set_balance(state, target, state.balance_of(target) + amount)
        state.total_supply = new_supply
    elif target is None and source is not None:
        available = state.balance_of(source)
        if available < amount:
            raise ValueError(f"burn of {amount} exceeds balance {available} of {source!r}")
        _set_balance(state, source, available - amount)
        state.total_supply -= amount
    else:
        raise ValueError("points records must either issue (from null) or burn (to null)")


def _account(value: object, *, nullable: bool = False) -> str | None:
    if value is None and nullable:
        return None
    if not isinstance(value, str):
        raise ValueError(f"account must be a string, got {value!r}")
    return value


def _set_balance(state: LedgerState, account: str, balance: int) -> None:
    if balance:
        state.balances[account] = balance
    else:
        state.balances.pop(account, None)


def fold_events(events: Sequence[LedgerEvent]) -> LedgerState:
    """
    Compute ledger state by folding a complete record history.

    Records must start at sequence 1 with ledger.created and be contiguous.
    """
    if not events:
        raise ValueError("cannot fold an empty record history")

    state = LedgerState()
    for event in events:
        apply_event(state, event)
    return state
