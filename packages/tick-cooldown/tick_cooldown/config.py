"""Tracker configuration dataclass."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from tick_cooldown.settings import SETTINGS_KEY
from tick_cooldown.store import ITEMS_KEY


def _default_data_dir() -> Path:
    base = os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return Path(base) / "tick-cooldown"


@dataclass(frozen=True)
class TrackerConfig:
    """Immutable configuration for a tracker process.

    Attributes:
        data_dir: Directory holding the JSON files of the file storage.
        tick_period: Seconds between reconciliation ticks.
        items_key: Storage key of the item list.
        settings_key: Storage key of the settings object.
        log_level: Level name for the package logger.
        json_logs: Emit log records as JSON lines.
    """

    data_dir: Path = field(default_factory=_default_data_dir)
    tick_period: float = 1.0
    items_key: str = ITEMS_KEY
    settings_key: str = SETTINGS_KEY
    log_level: str = "WARNING"
    json_logs: bool = False

    def __post_init__(self) -> None:
        if self.tick_period <= 0:
            raise ValueError("tick_period must be positive")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> TrackerConfig:
        """Build a config from ``TICK_COOLDOWN_*`` environment variables."""
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}
        if env.get("TICK_COOLDOWN_HOME"):
            kwargs["data_dir"] = Path(env["TICK_COOLDOWN_HOME"]).expanduser()
        if env.get("TICK_COOLDOWN_PERIOD"):
            kwargs["tick_period"] = float(env["TICK_COOLDOWN_PERIOD"])
        if env.get("TICK_COOLDOWN_LOG_LEVEL"):
            kwargs["log_level"] = env["TICK_COOLDOWN_LOG_LEVEL"].upper()
        if env.get("TICK_COOLDOWN_JSON_LOGS"):
            kwargs["json_logs"] = env["TICK_COOLDOWN_JSON_LOGS"].lower() in (
                "1",
                "true",
                "yes",
                "on",
            )
        return cls(**kwargs)  # type: ignore[arg-type]
