"""
Ledger home management.

A home directory holds config.toml and the record journal. Opening a home
replays the journal into a PointLedger that keeps appending to the same
journal, so every committed change is durable before it is applied.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import CONFIG_FILENAME, LedgerConfig, load_config, write_config
from .errors import ConfigError, JournalError
from .events import LEDGER_CREATED
from .journal import EventJournal
from .ledger import PointLedger

logger = logging.getLogger(__name__)


class LedgerStore:
    """A PointLedger bound to its on-disk home."""

    def __init__(self, home: Path, config: LedgerConfig, journal: EventJournal, ledger: PointLedger):
        self.home = home
        self.config = config
        self.journal = journal
        self.ledger = ledger

    @classmethod
    def init(
        cls,
        home: Path,
        administrator: str,
        *,
        name: str = "Points",
        symbol: str = "PTS",
    ) -> LedgerStore:
        """Create a new home with an empty ledger owned by `administrator`."""
        home = home.resolve()
        config_path = home / CONFIG_FILENAME
        if config_path.exists():
            raise ConfigError(config_path, "ledger home already initialized")

        config = LedgerConfig(administrator=administrator, name=name, symbol=symbol)
        journal = EventJournal(home / config.journal)
        if journal.exists() and journal.count():
            raise JournalError(journal.path, "journal already has records")

        ledger = PointLedger.create(administrator, name=name, symbol=symbol, journal=journal)
        write_config(home, config)
        logger.info("Initialized ledger %s at %s (administrator %r)", symbol, home, administrator)
        return cls(home, config, journal, ledger)

    @classmethod
    def open(cls, home: Path) -> LedgerStore:
        """Open an existing home and replay its journal."""
        home = home.resolve()
        config_path = home / CONFIG_FILENAME
        config = load_config(config_path)
        journal = EventJournal(home / config.journal)

        events = journal.read_all()
        if not events:
            raise JournalError(journal.path, "journal is empty; run init first")

        genesis = events[0]
        if genesis.event_type != LEDGER_CREATED:
            raise JournalError(journal.path, f"first record must be {LEDGER_CREATED}", line=1)
        if genesis.payload.get("administrator") != config.administrator:
            raise ConfigError(config_path, "administrator does not match the journal's ledger.created record")

        try:
            ledger = PointLedger.from_events(events, journal=journal)
        except (KeyError, TypeError, ValueError) as exc:
            raise JournalError(journal.path, f"replay failed: {exc}") from exc

        logger.debug("Opened %s with %d records", home, len(events))
        return cls(home, config, journal, ledger)
