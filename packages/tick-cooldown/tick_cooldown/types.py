"""Shared data types and errors for the cooldown tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

MIN_DURATION_MS = 60_000
DEFAULT_DURATION_MS = 30 * 60 * 1000

ItemId = str


class TickCooldownError(Exception):
    """Base class for tracker errors."""


class UnknownItemError(TickCooldownError, KeyError):
    """Raised when operating on an item id that is not in the store."""

    def __init__(self, item_id: ItemId) -> None:
        self.item_id = item_id
        super().__init__(f"Unknown item {item_id!r}")


class ValidationError(TickCooldownError, ValueError):
    """Raised at the input boundary for a bad URL or duration."""


class ImportFormatError(TickCooldownError, ValueError):
    """Raised when imported data does not have the export shape."""


class StorageError(TickCooldownError, OSError):
    """Raised by a storage backend when a write fails."""


class Scope(str, Enum):
    DOMAIN = "domain"
    URL = "url"


@dataclass(frozen=True)
class TrackedItem:
    """One tracked site. Immutable; change it with dataclasses.replace."""

    id: ItemId
    url: str
    label: str
    duration_ms: int
    created_at: int
    updated_at: int
    scope: Scope = Scope.DOMAIN
    last_visited_at: int | None = None
    end_at: int | None = None  # None means ready
    started_at: int | None = None  # when the running cooldown was armed
    favicon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "label": self.label,
            "scope": self.scope.value,
            "durationMs": self.duration_ms,
            "lastVisitedAt": self.last_visited_at,
            "endAt": self.end_at,
            "startedAt": self.started_at,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "favicon": self.favicon,
        }

    @classmethod
    def from_dict(cls, data: Any) -> TrackedItem:
        """Build an item from its JSON record. Raises ValueError if malformed."""
        if not isinstance(data, dict):
            raise ValueError(f"Item record must be an object, got {type(data).__name__}")

        item_id = _require(data, "id", str)
        url = _require(data, "url", str)
        if not item_id or not url:
            raise ValueError("Item record needs a non-empty id and url")
        duration_ms = _require(data, "durationMs", int)
        if duration_ms < MIN_DURATION_MS:
            raise ValueError(
                f"durationMs {duration_ms} is below the minimum of {MIN_DURATION_MS}"
            )
        created_at = _require(data, "createdAt", int)
        updated_at = _optional(data, "updatedAt", int)

        try:
            scope = Scope(data.get("scope") or Scope.DOMAIN.value)
        except ValueError:
            raise ValueError(f"Unknown scope {data.get('scope')!r}") from None

        return cls(
            id=item_id,
            url=url,
            label=_optional(data, "label", str) or "",
            duration_ms=duration_ms,
            created_at=created_at,
            updated_at=updated_at if updated_at is not None else created_at,
            scope=scope,
            last_visited_at=_optional(data, "lastVisitedAt", int),
            end_at=_optional(data, "endAt", int),
            started_at=_optional(data, "startedAt", int),
            favicon=_optional(data, "favicon", str),
        )


def _require(data: dict[str, Any], key: str, kind: type) -> Any:
    value = _optional(data, key, kind)
    if value is None:
        raise ValueError(f"Item record is missing {key!r}")
    return value


def _optional(data: dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    # JSON numbers may arrive as floats; bools are ints in Python but not here.
    if kind is int and isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ValueError(f"Item field {key!r} has the wrong type: {value!r}")
    return value


@dataclass(frozen=True)
class ItemDraft:
    """User-supplied fields for creating or editing an item.

    ``None`` means "not given": on create the boundary fills a default, on
    merge the existing value is kept.
    """

    url: str | None = None
    label: str | None = None
    scope: Scope | None = None
    duration_ms: int | None = None
    favicon: str | None = None
    id: ItemId | None = None


@dataclass(frozen=True)
class Settings:
    default_duration_ms: int = DEFAULT_DURATION_MS
    sound_on: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "defaultDurationMs": self.default_duration_ms,
            "soundOn": self.sound_on,
        }


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    now: int  # epoch milliseconds
    period: float
    request_stop: Callable[[], None] = field(repr=False)


if TYPE_CHECKING:
    from tick_cooldown.store import ItemStore

System = Callable[["ItemStore", TickContext], None]
