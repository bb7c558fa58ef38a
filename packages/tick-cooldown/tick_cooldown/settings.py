"""SettingsStore - global tracker settings merged over defaults."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from tick_cooldown.cooldown import check_duration
from tick_cooldown.storage import Storage
from tick_cooldown.types import MIN_DURATION_MS, Settings, StorageError

logger = logging.getLogger(__name__)

SETTINGS_KEY = "cooldown_settings_v1"


def merge_settings(data: Any, base: Settings | None = None) -> Settings:
    """Overlay a JSON settings object on ``base`` (defaults if omitted).

    Unknown keys are ignored and values of the wrong type keep the base
    value, so partial or stale documents never fail.
    """
    settings = base if base is not None else Settings()
    if not isinstance(data, dict):
        return settings

    duration = data.get("defaultDurationMs")
    if isinstance(duration, float) and duration.is_integer():
        duration = int(duration)
    if isinstance(duration, int) and not isinstance(duration, bool):
        settings = replace(
            settings, default_duration_ms=max(MIN_DURATION_MS, duration)
        )

    sound_on = data.get("soundOn")
    if isinstance(sound_on, bool):
        settings = replace(settings, sound_on=sound_on)
    return settings


class SettingsStore:
    """Holds the single Settings instance and persists every change."""

    def __init__(
        self,
        storage: Storage,
        key: str = SETTINGS_KEY,
        settings: Settings | None = None,
    ) -> None:
        self._storage = storage
        self._key = key
        self._settings = settings if settings is not None else Settings()

    @classmethod
    def load(cls, storage: Storage, key: str = SETTINGS_KEY) -> SettingsStore:
        raw = storage.load(key)
        if raw is not None and not isinstance(raw, dict):
            logger.warning("Stored %r is not an object; using defaults", key)
        return cls(storage, key=key, settings=merge_settings(raw))

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def default_duration_ms(self) -> int:
        return self._settings.default_duration_ms

    @property
    def sound_on(self) -> bool:
        return self._settings.sound_on

    def update(
        self,
        default_duration_ms: int | None = None,
        sound_on: bool | None = None,
    ) -> Settings:
        changes: dict[str, Any] = {}
        if default_duration_ms is not None:
            changes["default_duration_ms"] = check_duration(default_duration_ms)
        if sound_on is not None:
            changes["sound_on"] = sound_on
        return self._set(replace(self._settings, **changes))

    def replace_from(self, data: Any) -> Settings:
        """Merge a JSON settings object over the defaults (import path)."""
        return self._set(merge_settings(data))

    def _set(self, settings: Settings) -> Settings:
        self._settings = settings
        try:
            self._storage.save(self._key, settings.to_dict())
        except StorageError as exc:
            logger.warning("Could not persist settings: %s", exc)
        return settings
