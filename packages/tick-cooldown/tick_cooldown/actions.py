"""CooldownActions - user-triggered mutations of the item store."""
from __future__ import annotations

import logging
import webbrowser
from typing import Callable

from tick_cooldown import cooldown
from tick_cooldown.store import ItemStore
from tick_cooldown.types import ItemDraft, ItemId, TrackedItem

logger = logging.getLogger(__name__)


class CooldownActions:
    """Start, reset, clear and edit cooldowns.

    Each handler applies a pure transition through ``ItemStore`` so the
    result is persisted before the call returns. Handlers on an unknown id
    raise UnknownItemError, except ``delete_item`` which ignores it.
    """

    def __init__(self, store: ItemStore) -> None:
        self._store = store

    @property
    def store(self) -> ItemStore:
        return self._store

    def start_cooldown(self, item_id: ItemId, now: int) -> TrackedItem:
        """Mark as visited: restart the cooldown from ``now``."""
        item = self._store.update_item(item_id, lambda it: cooldown.start(it, now))
        logger.debug("Started cooldown for %r until %d", item_id, item.end_at)
        return item

    def reset_cooldown(self, item_id: ItemId, now: int) -> TrackedItem:
        """Re-arm from ``now``. ``last_visited_at`` is deliberately unchanged."""
        return self._store.update_item(item_id, lambda it: cooldown.reset(it, now))

    def clear_cooldown(self, item_id: ItemId, now: int) -> TrackedItem:
        """Make the item ready at once. No alert is delivered for this."""
        return self._store.update_item(item_id, lambda it: cooldown.clear(it, now))

    def change_duration(
        self, item_id: ItemId, duration_ms: int, now: int, recompute: bool = False
    ) -> TrackedItem:
        return self._store.update_item(
            item_id,
            lambda it: cooldown.change_duration(it, duration_ms, now, recompute),
        )

    def upsert_item(self, draft: ItemDraft, now: int) -> list[TrackedItem]:
        return self._store.upsert(draft, now)

    def delete_item(self, item_id: ItemId) -> None:
        self._store.remove(item_id)

    def open_and_start(
        self,
        item_id: ItemId,
        now: int,
        opener: Callable[[str], object] | None = None,
    ) -> TrackedItem:
        """Open the item's URL (default browser unless ``opener`` is given),
        then start its cooldown."""
        item = self._store.get(item_id)
        if opener is None:
            opener = webbrowser.open
        try:
            opener(item.url)
        except Exception:
            logger.warning("Could not open %s", item.url, exc_info=True)
        return self.start_cooldown(item_id, now)
