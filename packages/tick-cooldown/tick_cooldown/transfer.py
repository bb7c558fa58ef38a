"""Export and import of the whole tracker state as one JSON document."""
from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from tick_cooldown.settings import SettingsStore
from tick_cooldown.store import ItemStore
from tick_cooldown.types import ImportFormatError, StorageError, TrackedItem


def export_data(
    store: ItemStore,
    settings: SettingsStore,
    exported_at: datetime | None = None,
) -> dict[str, Any]:
    """``{"items": [...], "settings": {...}, "exportedAt": ISO-8601}``."""
    stamp = exported_at if exported_at is not None else datetime.now(timezone.utc)
    return {
        "items": store.snapshot(),
        "settings": settings.settings.to_dict(),
        "exportedAt": stamp.isoformat().replace("+00:00", "Z"),
    }


def dumps_export(store: ItemStore, settings: SettingsStore) -> str:
    return json.dumps(export_data(store, settings), indent=2)


def write_export(
    path: str | os.PathLike[str], store: ItemStore, settings: SettingsStore
) -> Path:
    """Write the export document to ``path``. Raises StorageError on failure."""
    target = Path(path)
    try:
        target.write_text(dumps_export(store, settings) + "\n", encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Cannot write {target}: {exc}") from exc
    return target


def import_data(
    payload: Any, store: ItemStore, settings: SettingsStore
) -> tuple[int | None, bool]:
    """Apply an export document.

    ``items`` (if present) replaces the store and ``settings`` (if present)
    is merged over the defaults. Both are validated before either is
    applied, so a bad document changes nothing. Returns the number of
    imported items (None if absent) and whether settings were applied.
    """
    if not isinstance(payload, dict):
        raise ImportFormatError("Import document must be a JSON object")

    items: list[TrackedItem] | None = None
    if "items" in payload:
        records = payload["items"]
        if not isinstance(records, list):
            raise ImportFormatError("'items' must be a list")
        items = []
        for index, record in enumerate(records):
            try:
                items.append(TrackedItem.from_dict(record))
            except ValueError as exc:
                raise ImportFormatError(f"items[{index}]: {exc}") from exc
        if len({item.id for item in items}) != len(items):
            raise ImportFormatError("'items' contains duplicate ids")

    raw_settings = payload.get("settings")
    if raw_settings is not None and not isinstance(raw_settings, dict):
        raise ImportFormatError("'settings' must be an object")
    if items is None and raw_settings is None:
        raise ImportFormatError("Import document has neither 'items' nor 'settings'")

    if items is not None:
        store.replace_all(items)
    if raw_settings is not None:
        settings.replace_from(raw_settings)
    return (len(items) if items is not None else None), raw_settings is not None


def read_import(
    path: str | os.PathLike[str], store: ItemStore, settings: SettingsStore
) -> tuple[int | None, bool]:
    """Load an export file from disk and apply it with ``import_data``."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ImportFormatError(f"Cannot read {path}: {exc}") from exc
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise ImportFormatError(f"{path} is not valid JSON: {exc}") from exc
    return import_data(payload, store, settings)
