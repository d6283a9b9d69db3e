from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError

CONFIG_FILENAME = "config.toml"
DEFAULT_JOURNAL = "events.jsonl"
DEFAULT_HOME = ".pointledger"
HOME_ENVVAR = "POINTLEDGER_HOME"


@dataclass(frozen=True)
class LedgerConfig:
    """Settings fixed when a ledger home is initialized."""

    administrator: str
    name: str = "Points"
    symbol: str = "PTS"
    journal: str = DEFAULT_JOURNAL

    def to_toml(self) -> str:
        lines = [
            "[ledger]",
            f"name = {_toml_string(self.name)}",
            f"symbol = {_toml_string(self.symbol)}",
            f"administrator = {_toml_string(self.administrator)}",
            f"journal = {_toml_string(self.journal)}",
        ]
        return "\n".join(lines) + "\n"


def _toml_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _require_str(path: Path, section: dict[str, Any], key: str, default: str | None = None) -> str:
    value = section.get(key, default)
    if value is None:
        raise ConfigError(path, f"[ledger] {key} is required")
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(path, f"[ledger] {key} must be a non-empty string")
    return value


def default_home() -> Path:
    """Ledger home from POINTLEDGER_HOME, else ./.pointledger."""
    env = os.environ.get(HOME_ENVVAR)
    return Path(env) if env else Path.cwd() / DEFAULT_HOME


def load_config(path: Path) -> LedgerConfig:
    """
    Load ledger settings from TOML.

    Only the [ledger] table is read; unknown keys are ignored.
    """
    import tomllib

    if not path.exists():
        raise ConfigError(path, "config file not found")
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(path, f"invalid TOML: {exc}") from exc

    section = _coerce_dict(data.get("ledger"))
    journal = _require_str(path, section, "journal", DEFAULT_JOURNAL)
    if Path(journal).name != journal:
        raise ConfigError(path, "[ledger] journal must be a file name inside the ledger home")

    return LedgerConfig(
        administrator=_require_str(path, section, "administrator"),
        name=_require_str(path, section, "name", "Points"),
        symbol=_require_str(path, section, "symbol", "PTS"),
        journal=journal,
    )


def write_config(home: Path, config: LedgerConfig) -> Path:
    """Write config.toml into `home`, creating the directory."""
    home.mkdir(parents=True, exist_ok=True)
    path = home / CONFIG_FILENAME
    path.write_text(config.to_toml(), encoding="utf-8")
    return path
