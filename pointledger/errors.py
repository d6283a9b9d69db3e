"""
Error taxonomy for the point ledger.

Every failure surfaces synchronously as a LedgerError subclass. A raised
error always means the call had no effect: nothing committed, nothing
journaled, nothing emitted.
"""

from __future__ import annotations

from pathlib import Path


class LedgerError(Exception):
    """Base class for all ledger failures."""

    code = "ledger_error"

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {"code": self.code, "message": str(self)}


class PermissionDenied(LedgerError):
    """Caller lacks the administrator or contributor capability."""

    code = "permission_denied"

    def __init__(self, caller: str | None, capability: str):
        self.caller = caller
        self.capability = capability
        super().__init__(f"{caller!r} is not {capability}")


class AlreadyContributor(LedgerError):
    code = "already_contributor"

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"{account!r} is already a contributor")


class NotContributor(LedgerError):
    code = "not_contributor"

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"{account!r} is not a contributor")


class LengthMismatch(LedgerError):
    """Paired bulk inputs have different lengths."""

    code = "length_mismatch"

    def __init__(self, accounts: int, amounts: int):
        self.accounts = accounts
        self.amounts = amounts
        super().__init__(f"length mismatch: {accounts} accounts, {amounts} amounts")


class InsufficientBalance(LedgerError):
    """A removal exceeds the account's holdings."""

    code = "insufficient_balance"

    def __init__(self, account: str, available: int, attempted: int, *, index: int | None = None):
        self.account = account
        self.available = available
        self.attempted = attempted
        self.index = index
        where = f" (batch index {index})" if index is not None else ""
        super().__init__(
            f"insufficient balance for {account!r}: available {available}, attempted {attempted}{where}"
        )


class TransferNotAllowed(LedgerError):
    """Points cannot move between accounts. Raised unconditionally."""

    code = "transfer_not_allowed"

    def __init__(self, operation: str = "transfer"):
        self.operation = operation
        super().__init__(f"{operation} is not allowed: points are non-transferable")


class SupplyOverflow(LedgerError):
    """An add would push the supply past the unsigned 256-bit bound."""

    code = "supply_overflow"

    def __init__(self, current: int, amount: int, *, index: int | None = None):
        self.current = current
        self.amount = amount
        self.index = index
        super().__init__(f"adding {amount} to supply {current} overflows uint256")


class InvalidAmount(LedgerError):
    code = "invalid_amount"

    def __init__(self, amount: object, *, index: int | None = None):
        self.amount = amount
        self.index = index
        super().__init__(f"amount must be a non-negative integer, got {amount!r}")


class InvalidAccount(LedgerError):
    code = "invalid_account"

    def __init__(self, account: object, *, index: int | None = None):
        self.account = account
        self.index = index
        super().__init__(f"account must be a non-empty string, got {account!r}")


class JournalError(LedgerError):
    """The on-disk journal is unreadable or out of sequence."""

    code = "journal_error"

    def __init__(self, path: Path, message: str, *, line: int | None = None):
        self.path = path
        self.line = line
        where = f"{path}:{line}" if line is not None else str(path)
        super().__init__(f"{where}: {message}")


class ConfigError(LedgerError):
    code = "config_error"

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")
