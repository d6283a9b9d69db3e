"""
Immutable record types emitted by the point ledger.

Records are the atomic unit of the journal - each line in events.jsonl is one
record. Ledger state is computed by folding records, never by editing prior
entries.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

# Record type constants
LEDGER_CREATED = "ledger.created"
POINTS_TRANSFER = "points.transfer"
CONTRIBUTOR_ADDED = "access.contributor_added"
CONTRIBUTOR_REMOVED = "access.contributor_removed"
ADMINISTRATION_TRANSFER_STARTED = "access.administration_transfer_started"
ADMINISTRATION_TRANSFERRED = "access.administration_transferred"

# All valid record types
EVENT_TYPES = frozenset({
    LEDGER_CREATED,
    POINTS_TRANSFER,
    CONTRIBUTOR_ADDED,
    CONTRIBUTOR_REMOVED,
    ADMINISTRATION_TRANSFER_STARTED,
    ADMINISTRATION_TRANSFERRED,
})


@dataclass(frozen=True)
class LedgerEvent:
    """
    Immutable record of a committed ledger change.

    `sequence` is assigned by the ledger at commit time; records built by
    the access layer or the factories below carry 0 until then.
    """

    event_type: str  # One of EVENT_TYPES
    actor: str | None  # Caller that caused the change
    timestamp: datetime
    payload: dict[str, Any] = field(default_factory=dict)
    sequence: int = 0

    def __post_init__(self) -> None:
        if self.event_type not in EVENT_TYPES:
            raise ValueError(f"Invalid event_type: {self.event_type}")
        if not isinstance(self.payload, dict):
            raise ValueError(f"payload must be an object, got {type(self.payload).__name__}")

    @property
    def is_issuance(self) -> bool:
        return self.event_type == POINTS_TRANSFER and self.payload.get("from") is None

    @property
    def is_burn(self) -> bool:
        return self.event_type == POINTS_TRANSFER and self.payload.get("to") is None

    def with_sequence(self, sequence: int) -> LedgerEvent:
        return replace(self, sequence=sequence)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "sequence": self.sequence,
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat(),
            "actor": self.actor,
            "payload": self.payload,
        }

    def to_json(self) -> str:
        """Serialize to JSON string (single line)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LedgerEvent:
        """Reconstruct from JSON dict."""
        return cls(
            event_type=data["event_type"],
            actor=data.get("actor"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            payload=data.get("payload", {}),
            sequence=int(data.get("sequence", 0)),
        )

    @classmethod
    def from_json(cls, line: str) -> LedgerEvent:
        """Parse from JSON string."""
        return cls.from_dict(json.loads(line))


# Payload field documentation for each record type
EVENT_PAYLOAD_FIELDS = {
    LEDGER_CREATED: {
        "administrator": "Initial administrator account",
        "name": "Display name of the points",
        "symbol": "Short ticker symbol",
        "decimals": "Always 0",
    },
    POINTS_TRANSFER: {
        "from": "Account debited, or null for an issuance",
        "to": "Account credited, or null for a burn",
        "amount": "Whole points moved",
        "batch_index": "Position within a bulk call (bulk records only)",
    },
    CONTRIBUTOR_ADDED: {
        "account": "Account granted the contributor capability",
    },
    CONTRIBUTOR_REMOVED: {
        "account": "Account whose contributor capability was revoked",
    },
    ADMINISTRATION_TRANSFER_STARTED: {
        "previous": "Current administrator",
        "pending": "Proposed successor, or null when the proposal is withdrawn",
    },
    ADMINISTRATION_TRANSFERRED: {
        "previous": "Outgoing administrator",
        "administrator": "Incoming administrator, or null when renounced",
    },
}

# Fields a record may omit
OPTIONAL_PAYLOAD_FIELDS = frozenset({"batch_index", "decimals"})


def missing_payload_fields(event: LedgerEvent) -> list[str]:
    """Required payload fields absent from `event`, in documented order."""
    fields = EVENT_PAYLOAD_FIELDS[event.event_type]
    return [name for name in fields if name not in OPTIONAL_PAYLOAD_FIELDS and name not in event.payload]


def create_event(
    event_type: str,
    actor: str | None,
    *,
    payload: dict[str, Any] | None = None,
    timestamp: datetime | None = None,
) -> LedgerEvent:
    """
    Factory function for creating records.

    Ensures consistent timestamp handling and validation.
    """
    return LedgerEvent(
        event_type=event_type,
        actor=actor,
        timestamp=timestamp or datetime.now(timezone.utc),
        payload=payload or {},
    )


def issuance_record(
    actor: str,
    recipient: str,
    amount: int,
    *,
    batch_index: int | None = None,
    timestamp: datetime | None = None,
) -> LedgerEvent:
    """Record of points created for `recipient` (from null)."""
    payload: dict[str, Any] = {"from": None, "to": recipient, "amount": amount}
    if batch_index is not None:
        payload["batch_index"] = batch_index
    return create_event(POINTS_TRANSFER, actor, payload=payload, timestamp=timestamp)


def burn_record(
    actor: str,
    owner: str,
    amount: int,
    *,
    batch_index: int | None = None,
    timestamp: datetime | None = None,
) -> LedgerEvent:
    """Record of points destroyed from `owner` (to null)."""
    payload: dict[str, Any] = {"from": owner, "to": None, "amount": amount}
    if batch_index is not None:
        payload["batch_index"] = batch_index
    return create_event(POINTS_TRANSFER, actor, payload=payload, timestamp=timestamp)
