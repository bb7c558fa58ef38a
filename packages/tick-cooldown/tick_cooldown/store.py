"""ItemStore - canonical tracked-item records with persist-on-write."""
from __future__ import annotations

import logging
import secrets
from dataclasses import replace
from typing import Any, Callable, Iterable, Iterator

from tick_cooldown import cooldown
from tick_cooldown.storage import Storage
from tick_cooldown.types import (
    ImportFormatError,
    ItemDraft,
    ItemId,
    Scope,
    StorageError,
    TrackedItem,
    UnknownItemError,
)

logger = logging.getLogger(__name__)

ITEMS_KEY = "cooldown_site_timers_v1"

Transition = Callable[[list[TrackedItem]], list[TrackedItem]]


def new_item_id() -> ItemId:
    return secrets.token_hex(6)


class ItemStore:
    """Ordered id -> TrackedItem mapping.

    All writes go through ``apply``, which swaps in a complete new list and
    persists it before returning, so readers only ever see whole snapshots.
    """

    def __init__(
        self,
        storage: Storage,
        key: str = ITEMS_KEY,
        items: Iterable[TrackedItem] = (),
        id_factory: Callable[[], ItemId] = new_item_id,
    ) -> None:
        self._storage = storage
        self._key = key
        self._id_factory = id_factory
        self._items: list[TrackedItem] = _check_unique(list(items))

    @classmethod
    def load(
        cls,
        storage: Storage,
        key: str = ITEMS_KEY,
        id_factory: Callable[[], ItemId] = new_item_id,
    ) -> ItemStore:
        """Load persisted items. Malformed content degrades to an empty store."""
        raw = storage.load(key)
        items: list[TrackedItem] = []
        seen: set[ItemId] = set()
        if raw is None:
            pass
        elif not isinstance(raw, list):
            logger.warning("Stored %r is not a list; starting empty", key)
        else:
            for record in raw:
                try:
                    item = TrackedItem.from_dict(record)
                except ValueError as exc:
                    logger.warning("Skipping malformed stored item: %s", exc)
                    continue
                if item.id in seen:
                    logger.warning("Skipping duplicate stored item %r", item.id)
                    continue
                seen.add(item.id)
                items.append(item)
        return cls(storage, key=key, items=items, id_factory=id_factory)

    # --- Queries ---

    def items(self) -> list[TrackedItem]:
        """Current snapshot. The list is a copy; records are immutable."""
        return list(self._items)

    def find(self, item_id: ItemId) -> TrackedItem | None:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def get(self, item_id: ItemId) -> TrackedItem:
        item = self.find(item_id)
        if item is None:
            raise UnknownItemError(item_id)
        return item

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return any(item.id == item_id for item in self._items)

    def __iter__(self) -> Iterator[TrackedItem]:
        return iter(list(self._items))

    # --- Mutation ---

    def apply(self, transition: Transition) -> list[TrackedItem]:
        """Run a pure transition on the current snapshot and persist the result.

        Returning the same list object signals "no change": nothing is
        replaced and nothing is written.
        """
        current = self._items
        result = transition(current)
        if result is current:
            return list(current)
        self._items = _check_unique(list(result))
        self._persist()
        return list(self._items)

    def update_item(
        self, item_id: ItemId, fn: Callable[[TrackedItem], TrackedItem]
    ) -> TrackedItem:
        """Apply ``fn`` to one item. Raises UnknownItemError if absent."""
        if item_id not in self:
            raise UnknownItemError(item_id)

        def transition(items: list[TrackedItem]) -> list[TrackedItem]:
            return [fn(item) if item.id == item_id else item for item in items]

        self.apply(transition)
        return self.get(item_id)

    def upsert(self, draft: ItemDraft, now: int) -> list[TrackedItem]:
        """Merge into the record named by ``draft.id`` or insert a new one.

        Raises ValidationError for a duration below MIN_DURATION_MS.
        """
        if draft.duration_ms is not None:
            cooldown.check_duration(draft.duration_ms)
        if draft.id is not None and draft.id in self:

            def merge(items: list[TrackedItem]) -> list[TrackedItem]:
                return [
                    _merge(item, draft, now) if item.id == draft.id else item
                    for item in items
                ]

            return self.apply(merge)

        if draft.url is None or draft.duration_ms is None:
            raise ValueError("A new item needs a url and a duration")
        item_id = draft.id if draft.id is not None else self._fresh_id()
        created = TrackedItem(
            id=item_id,
            url=draft.url,
            label=draft.label or "",
            duration_ms=draft.duration_ms,
            created_at=now,
            updated_at=now,
            scope=draft.scope or Scope.DOMAIN,
            favicon=draft.favicon,
        )
        return self.apply(lambda items: [*items, created])

    def remove(self, item_id: ItemId) -> None:
        """Delete an item. Unknown ids are ignored."""
        if item_id not in self:
            return
        self.apply(lambda items: [item for item in items if item.id != item_id])

    def replace_all(self, records: Any) -> list[TrackedItem]:
        """Bulk overwrite from JSON records or TrackedItems.

        Fails closed: on any malformed record the store is left untouched.
        """
        if not isinstance(records, (list, tuple)):
            raise ImportFormatError("items must be a list of item records")
        parsed: list[TrackedItem] = []
        for index, record in enumerate(records):
            if isinstance(record, TrackedItem):
                parsed.append(record)
                continue
            try:
                parsed.append(TrackedItem.from_dict(record))
            except ValueError as exc:
                raise ImportFormatError(f"items[{index}]: {exc}") from exc
        try:
            _check_unique(parsed)
        except ValueError as exc:
            raise ImportFormatError(str(exc)) from exc
        return self.apply(lambda items: parsed)

    # --- Serialization ---

    def snapshot(self) -> list[dict[str, Any]]:
        return [item.to_dict() for item in self._items]

    # --- Internal helpers ---

    def _fresh_id(self) -> ItemId:
        item_id = self._id_factory()
        while item_id in self:
            item_id = self._id_factory()
        return item_id

    def _persist(self) -> None:
        try:
            self._storage.save(self._key, self.snapshot())
        except StorageError as exc:
            # Memory stays authoritative for the rest of the session.
            logger.warning("Could not persist items: %s", exc)


def _merge(item: TrackedItem, draft: ItemDraft, now: int) -> TrackedItem:
    changes: dict[str, Any] = {"updated_at": now}
    for name in ("url", "label", "scope", "duration_ms", "favicon"):
        value = getattr(draft, name)
        if value is not None:
            changes[name] = value
    return replace(item, **changes)


def _check_unique(items: list[TrackedItem]) -> list[TrackedItem]:
    seen: set[ItemId] = set()
    for item in items:
        if item.id in seen:
            raise ValueError(f"Duplicate item id {item.id!r}")
        seen.add(item.id)
    return items
