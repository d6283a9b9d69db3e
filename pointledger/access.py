"""
Access control for the point ledger.

Holds no state of its own: it reads the administrator, pending successor and
contributor set from the ledger's LedgerState. Checks raise PermissionDenied;
plan_* methods validate a membership or handoff change and return the record
that the ledger commits. Nothing here mutates state.
"""

from __future__ import annotations

from .errors import AlreadyContributor, InvalidAccount, NotContributor, PermissionDenied
from .events import (
    ADMINISTRATION_TRANSFER_STARTED,
    ADMINISTRATION_TRANSFERRED,
    CONTRIBUTOR_ADDED,
    CONTRIBUTOR_REMOVED,
    LedgerEvent,
    create_event,
)
from .state import LedgerState

ADMINISTRATOR = "administrator"
CONTRIBUTOR = "contributor"
PENDING_ADMINISTRATOR = "pending administrator"


def validate_account(account: object, *, index: int | None = None) -> str:
    """Return `account` if it is a usable identifier, else raise InvalidAccount."""
    if not isinstance(account, str) or not account.strip():
        raise InvalidAccount(account, index=index)
    return account


class AccessControl:
    """Capability checks over a ledger's administrator and contributor set."""

    def __init__(self, state: LedgerState):
        self._state = state

    # --- Queries ---

    @property
    def administrator(self) -> str | None:
        return self._state.administrator

    @property
    def pending_administrator(self) -> str | None:
        return self._state.pending_administrator

    def is_administrator(self, caller: str | None) -> bool:
        return caller is not None and caller == self._state.administrator

    def is_contributor(self, account: str | None) -> bool:
        return account in self._state.contributors

    def contributors(self) -> list[str]:
        return sorted(self._state.contributors)

    # --- Pre-checks ---

    def require_administrator(self, caller: str | None) -> None:
        if not self.is_administrator(caller):
            raise PermissionDenied(caller, ADMINISTRATOR)

    def require_contributor(self, caller: str | None) -> None:
        if not self.is_contributor(caller):
            raise PermissionDenied(caller, CONTRIBUTOR)

    # --- Membership ---

    def plan_add_contributor(self, caller: str, target: str) -> LedgerEvent:
        self.require_administrator(caller)
        validate_account(target)
        if self.is_contributor(target):
            raise AlreadyContributor(target)
        return create_event(CONTRIBUTOR_ADDED, caller, payload={"account": target})

    def plan_remove_contributor(self, caller: str, target: str) -> LedgerEvent:
        self.require_administrator(caller)
        if not self.is_contributor(target):
            raise NotContributor(target)
        return create_event(CONTRIBUTOR_REMOVED, caller, payload={"account": target})

    # --- Administrator handoff ---

    def plan_transfer_administration(self, caller: str, successor: str) -> LedgerEvent:
        """Propose `successor`. The administrator stays in place until it accepts.

        Proposing the current administrator withdraws any pending proposal.
        """
        self.require_administrator(caller)
        validate_account(successor)
        pending = None if successor == self._state.administrator else successor
        return create_event(
            ADMINISTRATION_TRANSFER_STARTED,
            caller,
            payload={"previous": self._state.administrator, "pending": pending},
        )

    def plan_accept_administration(self, caller: str) -> LedgerEvent:
        pending = self._state.pending_administrator
        if pending is None or caller != pending:
            raise PermissionDenied(caller, PENDING_ADMINISTRATOR)
        return create_event(
            ADMINISTRATION_TRANSFERRED,
            caller,
            payload={"previous": self._state.administrator, "administrator": caller},
        )

    def plan_renounce_administration(self, caller: str) -> LedgerEvent:
        self.require_administrator(caller)
        return create_event(
            ADMINISTRATION_TRANSFERRED,
            caller,
            payload={"previous": self._state.administrator, "administrator": None},
        )
