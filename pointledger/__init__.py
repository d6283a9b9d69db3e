"""
pointledger - a non-transferable point ledger.

Contributors add and remove points; a single administrator manages the
contributor set. Points never move between accounts.

Components:
- access: administrator and contributor capability checks
- ledger: balances, total supply, single and bulk operations, queries
- events / state: committed records and the state they fold into
- journal / store: append-only JSON Lines persistence of a ledger home
- invariants: named checks over a ledger state
"""

__version__ = "0.1.0"

from .access import AccessControl
from .errors import (
    AlreadyContributor,
    ConfigError,
    InsufficientBalance,
    InvalidAccount,
    InvalidAmount,
    JournalError,
    LedgerError,
    LengthMismatch,
    NotContributor,
    PermissionDenied,
    SupplyOverflow,
    TransferNotAllowed,
)
from .events import LedgerEvent
from .ledger import PointLedger
from .state import MAX_UINT256, LedgerState
from .store import LedgerStore

__all__ = [
    "__version__",
    "AccessControl",
    "AlreadyContributor",
    "ConfigError",
    "InsufficientBalance",
    "InvalidAccount",
    "InvalidAmount",
    "JournalError",
    "LedgerError",
    "LedgerEvent",
    "LedgerState",
    "LengthMismatch",
    "MAX_UINT256",
    "NotContributor",
    "PermissionDenied",
    "PointLedger",
    "LedgerStore",
    "SupplyOverflow",
    "TransferNotAllowed",
]
