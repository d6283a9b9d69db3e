"""
The point ledger: per-account balances and total supply, mutated only by
contributors, administered by a single administrator.

Every mutating call follows the same path:

    pre-check -> plan records against current state -> journal -> apply -> notify

Planning never touches state, so any failure (permission, underflow,
overflow, bad input) leaves the ledger exactly as it was. A bulk call is
planned as a whole and committed as one unit.

Points are non-transferable: transfer, transfer_from and approve always fail.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol, Sequence

from .access import AccessControl, validate_account
from .errors import (
    InsufficientBalance,
    InvalidAmount,
    LedgerError,
    LengthMismatch,
    SupplyOverflow,
    TransferNotAllowed,
)
from .events import LEDGER_CREATED, LedgerEvent, burn_record, create_event, issuance_record
from .state import DECIMALS, MAX_UINT256, LedgerState, apply_event, fold_events

logger = logging.getLogger(__name__)

Observer = Callable[[LedgerEvent], None]


class RecordSink(Protocol):
    """Durable destination for committed records (see journal.EventJournal)."""

    def append_many(self, events: Sequence[LedgerEvent]) -> None: ...


def _validate_amount(amount: object, *, index: int | None = None) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
        raise InvalidAmount(amount, index=index)
    if amount > MAX_UINT256:
        raise InvalidAmount(amount, index=index)
    return amount


class PointLedger:
    """
    Non-transferable point ledger.

    Use PointLedger.create() for a fresh ledger and PointLedger.from_events()
    to rebuild one from its record history. All public methods are serialized
    by a per-instance lock.
    """

    def __init__(self, state: LedgerState, *, journal: RecordSink | None = None):
        self._state = state
        self._access = AccessControl(state)
        self._journal = journal
        self._observers: list[Observer] = []
        self._history: list[LedgerEvent] = []
        self._lock = threading.RLock()

    @classmethod
    def create(
        cls,
        administrator: str,
        *,
        name: str = "Points",
        symbol: str = "PTS",
        journal: RecordSink | None = None,
    ) -> PointLedger:
        """Create an empty ledger and commit its ledger.created record."""
        validate_account(administrator)
        if not name.strip() or not symbol.strip():
            raise ValueError("name and symbol must be non-empty")

        ledger = cls(LedgerState(), journal=journal)
        genesis = create_event(
            LEDGER_CREATED,
            administrator,
            payload={"administrator": administrator, "name": name, "symbol": symbol, "decimals": DECIMALS},
        )
        ledger._commit([genesis])
        return ledger

    @classmethod
    def from_events(
        cls,
        events: Sequence[LedgerEvent],
        *,
        journal: RecordSink | None = None,
    ) -> PointLedger:
        """Rebuild a ledger by folding its complete record history."""
        ledger = cls(fold_events(events), journal=journal)
        ledger._history = list(events)
        logger.debug("Replayed %d records (sequence %d)", len(events), ledger._state.sequence)
        return ledger

    # -------------------------------------------------------------------------
    # Commit path
    # -------------------------------------------------------------------------

    def _execute(
        self,
        operation: str,
        caller: str | None,
        plan: Callable[[], list[LedgerEvent]],
    ) -> list[LedgerEvent]:
        with self._lock:
            try:
                records = plan()
            except LedgerError as exc:
                logger.info("%s by %r rejected: %s", operation, caller, exc.code)
                raise
            return self._commit(records)

    def _commit(self, records: list[LedgerEvent]) -> list[LedgerEvent]:
        if not records:
            return []

        base = self._state.sequence
        sequenced = [record.with_sequence(base + i) for i, record in enumerate(records, start=1)]

        # The journal is written first; if it fails nothing is applied.
        if self._journal is not None:
            self._journal.append_many(sequenced)

        for record in sequenced:
            apply_event(self._state, record)
            self._history.append(record)
            logger.debug("Committed #%d %s %s", record.sequence, record.event_type, record.payload)

        for record in sequenced:
            for observer in list(self._observers):
                try:
                    observer(record)
                except Exception:
                    logger.exception("Observer %r failed on record #%d", observer, record.sequence)
        return sequenced

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Call `observer` with every record committed from now on.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Access control
    # -------------------------------------------------------------------------

    def administrator(self) -> str | None:
        with self._lock:
            return self._access.administrator

    def pending_administrator(self) -> str | None:
        with self._lock:
            return self._access.pending_administrator

    def is_administrator(self, caller: str | None) -> bool:
        with self._lock:
            return self._access.is_administrator(caller)

    def is_contributor(self, account: str | None) -> bool:
        with self._lock:
            return self._access.is_contributor(account)

    def contributors(self) -> list[str]:
        with self._lock:
            return self._access.contributors()

    def add_contributor(self, caller: str, target: str) -> LedgerEvent:
        (record,) = self._execute(
            "add_contributor", caller, lambda: [self._access.plan_add_contributor(caller, target)]
        )
        return record

    def remove_contributor(self, caller: str, target: str) -> LedgerEvent:
        (record,) = self._execute(
            "remove_contributor", caller, lambda: [self._access.plan_remove_contributor(caller, target)]
        )
        return record

    def transfer_administration(self, caller: str, successor: str) -> LedgerEvent:
        (record,) = self._execute(
            "transfer_administration",
            caller,
            lambda: [self._access.plan_transfer_administration(caller, successor)],
        )
        return record

    def accept_administration(self, caller: str) -> LedgerEvent:
        (record,) = self._execute(
            "accept_administration", caller, lambda: [self._access.plan_accept_administration(caller)]
        )
        return record

    def renounce_administration(self, caller: str) -> LedgerEvent:
        (record,) = self._execute(
            "renounce_administration", caller, lambda: [self._access.plan_renounce_administration(caller)]
        )
        return record

    # -------------------------------------------------------------------------
    # Points: single-entry
    # -------------------------------------------------------------------------

    def add_points(self, caller: str, recipient: str, amount: int) -> LedgerEvent:
        """Issue `amount` points to `recipient`."""

        def plan() -> list[LedgerEvent]:
            self._access.require_contributor(caller)
            return self._plan_issuance(caller, [recipient], [amount], bulk=False)

        (record,) = self._execute("add_points", caller, plan)
        return record

    def remove_points(self, caller: str, owner: str, amount: int) -> LedgerEvent:
        """Burn `amount` points from `owner`. Never clamps."""

        def plan() -> list[LedgerEvent]:
            self._access.require_contributor(caller)
            return self._plan_burn(caller, [owner], [amount], bulk=False)

        (record,) = self._execute("remove_points", caller, plan)
        return record

    # -------------------------------------------------------------------------
    # Points: bulk
    # -------------------------------------------------------------------------

    def bulk_add_points(
        self,
        caller: str,
        recipients: Sequence[str],
        amounts: Sequence[int],
    ) -> list[LedgerEvent]:
        """Issue points to every recipient, all or nothing."""

        def plan() -> list[LedgerEvent]:
            self._access.require_contributor(caller)
            if len(recipients) != len(amounts):
                raise LengthMismatch(len(recipients), len(amounts))
            return self._plan_issuance(caller, recipients, amounts, bulk=True)

        return self._execute("bulk_add_points", caller, plan)

    def bulk_remove_points(
        self,
        caller: str,
        owners: Sequence[str],
        amounts: Sequence[int],
    ) -> list[LedgerEvent]:
        """Burn points from every owner, all or nothing."""

        def plan() -> list[LedgerEvent]:
            self._access.require_contributor(caller)
            if len(owners) != len(amounts):
                raise LengthMismatch(len(owners), len(amounts))
            return self._plan_burn(caller, owners, amounts, bulk=True)

        return self._execute("bulk_remove_points", caller, plan)

    def _plan_issuance(
        self,
        caller: str,
        recipients: Sequence[str],
        amounts: Sequence[int],
        *,
        bulk: bool,
    ) -> list[LedgerEvent]:
        # Every balance is bounded by the supply, so checking the running
        # supply covers per-account overflow too.
        supply = self._state.total_supply
        records: list[LedgerEvent] = []
        for index, (recipient, amount) in enumerate(zip(recipients, amounts)):
            batch_index = index if bulk else None
            validate_account(recipient, index=batch_index)
            _validate_amount(amount, index=batch_index)
            if supply + amount > MAX_UINT256:
                raise SupplyOverflow(supply, amount, index=batch_index)
            supply += amount
            records.append(issuance_record(caller, recipient, amount, batch_index=batch_index))
        return records

    def _plan_burn(
        self,
        caller: str,
        owners: Sequence[str],
        amounts: Sequence[int],
        *,
        bulk: bool,
    ) -> list[LedgerEvent]:
        # Running balances so repeated owners within a batch see earlier entries.
        working: dict[str, int] = {}
        records: list[LedgerEvent] = []
        for index, (owner, amount) in enumerate(zip(owners, amounts)):
            batch_index = index if bulk else None
            validate_account(owner, index=batch_index)
            _validate_amount(amount, index=batch_index)
            available = working.get(owner, self._state.balance_of(owner))
            if available < amount:
                raise InsufficientBalance(owner, available, amount, index=batch_index)
            working[owner] = available - amount
            records.append(burn_record(caller, owner, amount, batch_index=batch_index))
        return records

    # -------------------------------------------------------------------------
    # Non-transfer
    # -------------------------------------------------------------------------

    def _refuse(self, operation: str, caller: str | None) -> None:
        logger.info("%s by %r rejected: %s", operation, caller, TransferNotAllowed.code)
        raise TransferNotAllowed(operation)

    def transfer(self, caller: str, to: str, amount: int) -> None:
        self._refuse("transfer", caller)

    def transfer_from(self, caller: str, owner: str, to: str, amount: int) -> None:
        self._refuse("transfer_from", caller)

    def approve(self, caller: str, spender: str, amount: int) -> None:
        self._refuse("approve", caller)

    def allowance(self, owner: str, spender: str) -> int:
        return 0

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._state.balance_of(account)

    def bulk_balances_of(self, accounts: Sequence[str]) -> list[int]:
        with self._lock:
            return [self._state.balance_of(account) for account in accounts]

    def total_supply(self) -> int:
        with self._lock:
            return self._state.total_supply

    def decimals(self) -> int:
        return DECIMALS

    def name(self) -> str:
        return self._state.name

    def symbol(self) -> str:
        return self._state.symbol

    def sequence(self) -> int:
        with self._lock:
            return self._state.sequence

    def history(self, since: int = 0) -> list[LedgerEvent]:
        """Committed records with sequence greater than `since`, oldest first."""
        with self._lock:
            return [e for e in self._history if e.sequence > since]

    def state(self) -> LedgerState:
        """Independent copy of the current state."""
        with self._lock:
            return self._state.copy()
