"""
Append-only record journal.

Stores committed ledger records in <home>/events.jsonl.
Key property: append-only, never rewritten.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import IO, Iterator, Sequence

from .errors import JournalError
from .events import LedgerEvent
from .locking import lock_file, unlock_file

logger = logging.getLogger(__name__)


class EventJournal:
    """Append-only journal for ledger records.

    Storage format: JSON Lines (.jsonl) - one record per line
    Location: events.jsonl inside the ledger home, unless configured otherwise
    """

    def __init__(self, path: Path):
        self.path = path

    def _ensure_dir(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        return self.path.exists()

    def append_many(self, events: Sequence[LedgerEvent]) -> None:
        """Append records in one write.

        This is the only write operation. Records are never modified or deleted.
        The journal file is locked while its last sequence is checked and the
        records are written; if another writer has advanced the journal since
        these records were sequenced, JournalError is raised and nothing is
        written.
        """
        if not events:
            return
        self._ensure_dir()
        base = events[0].sequence - 1
        data = "".join(event.to_json() + "\n" for event in events)
        with self.path.open("a+", encoding="utf-8") as f:
            lock_file(f)
            try:
                f.seek(0)
                last = self._last_sequence(f)
                if last != base:
                    raise JournalError(
                        self.path,
                        f"journal is at sequence {last}, expected {base}; "
                        "another writer committed first, reopen the ledger",
                    )
                f.seek(0, os.SEEK_END)
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            finally:
                unlock_file(f)
        logger.debug("Journaled %d records to %s", len(events), self.path)

    def _last_sequence(self, f: IO[str]) -> int:
        last_line = ""
        for line in f:
            if line.strip():
                last_line = line
        if not last_line:
            return 0
        try:
            return int(json.loads(last_line)["sequence"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise JournalError(self.path, f"unreadable last record: {exc}") from exc

    def last_sequence(self) -> int:
        """Sequence of the last journaled record (0 when empty)."""
        if not self.path.exists():
            return 0
        with self.path.open("r", encoding="utf-8") as f:
            return self._last_sequence(f)

    def iter_events(self) -> Iterator[LedgerEvent]:
        """Iterate over records, checking that sequences are contiguous."""
        if not self.path.exists():
            return
        expected = 1
        with self.path.open("r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    event = LedgerEvent.from_json(line)
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
                    raise JournalError(self.path, f"unreadable record: {exc}", line=lineno) from exc
                if event.sequence != expected:
                    raise JournalError(
                        self.path,
                        f"expected sequence {expected}, found {event.sequence}",
                        line=lineno,
                    )
                expected += 1
                yield event

    def read_all(self) -> list[LedgerEvent]:
        """Read all records from the journal."""
        return list(self.iter_events())

    def count(self) -> int:
        """Count records in the journal."""
        if not self.path.exists():
            return 0
        count = 0
        with self.path.open("r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    count += 1
        return count
