"""Storage protocol and backends for JSON-serializable blobs."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from tick_cooldown.types import StorageError

logger = logging.getLogger(__name__)


@runtime_checkable
class Storage(Protocol):
    """Durable key -> JSON blob storage.

    ``load`` returns None when the key is missing or its content cannot be
    read; it never raises. ``save`` raises StorageError on failure.
    """

    def load(self, key: str) -> Any | None:
        ...

    def save(self, key: str, data: Any) -> None:
        ...


class MemoryStorage:
    """In-process storage for tests and throwaway sessions.

    Values are kept as JSON text so callers never share mutable state with
    the store, and unserializable data fails the same way it would on disk.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        self.saves = 0
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    def load(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key: str, data: Any) -> None:
        try:
            self._data[key] = json.dumps(data)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Cannot serialize {key!r}: {exc}") from exc
        self.saves += 1

    def raw(self, key: str) -> str | None:
        return self._data.get(key)


class JsonFileStorage:
    """One ``<key>.json`` file per key inside a directory."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def load(self, key: str) -> Any | None:
        path = self.path_for(key)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable %s: %s", path, exc)
            return None

    def save(self, key: str, data: Any) -> None:
        path = self.path_for(key)
        try:
            text = json.dumps(data, indent=2)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Cannot serialize {key!r}: {exc}") from exc

        tmp_name: str | None = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            # Write then rename so readers never see a half-written file.
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=".tmp", dir=self._directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise StorageError(f"Cannot write {path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
