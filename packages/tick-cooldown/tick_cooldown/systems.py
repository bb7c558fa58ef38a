"""System factory for cooldown expiry and at-most-once delivery."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from tick_cooldown import cooldown
from tick_cooldown.notify import Notifier, Permission, render_alert
from tick_cooldown.types import ItemId, TrackedItem

if TYPE_CHECKING:
    from tick_cooldown.audio import Chime
    from tick_cooldown.settings import SettingsStore
    from tick_cooldown.store import ItemStore
    from tick_cooldown.types import TickContext

logger = logging.getLogger(__name__)


class DeliveryLedger:
    """Remembers which (item id, end_at) expiries were already signalled.

    Lives for the process only; a restart may signal an expiry again if the
    transition was never persisted.
    """

    def __init__(self) -> None:
        self._seen: set[tuple[ItemId, int]] = set()

    def claim(self, item_id: ItemId, end_at: int) -> bool:
        """True the first time a pair is claimed, False afterwards."""
        key = (item_id, end_at)
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def __contains__(self, key: object) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)


def make_reconcile_system(
    notifier: Notifier,
    chime: Chime,
    settings: SettingsStore,
    ledger: DeliveryLedger | None = None,
    on_ready: Callable[[ItemStore, TickContext, TrackedItem], None] | None = None,
) -> Callable[[ItemStore, TickContext], None]:
    """Return a system that turns due cooldowns ready each tick.

    Tick execution order:
    1. Collect items whose end_at <= ctx.now
    2. Signal each unclaimed expiry (notifier, chime, on_ready)
    3. Clear end_at on all of them in one batched, persisted transition

    Side effects are best-effort: each is guarded on its own and a failure
    never blocks the transition. Nothing is written on a tick with no
    expiries.
    """
    if ledger is None:
        ledger = DeliveryLedger()

    def signal(store: ItemStore, ctx: TickContext, item: TrackedItem) -> None:
        try:
            if notifier.permission() is Permission.GRANTED:
                notifier.notify(render_alert(item))
        except Exception:
            logger.warning("Notification for %r failed", item.id, exc_info=True)

        if settings.sound_on:
            try:
                chime.play()
            except Exception:
                logger.warning("Chime for %r failed", item.id, exc_info=True)

        if on_ready is not None:
            try:
                on_ready(store, ctx, item)
            except Exception:
                logger.warning("on_ready for %r failed", item.id, exc_info=True)

    def reconcile_system(store: ItemStore, ctx: TickContext) -> None:
        now = ctx.now
        due = [item for item in store.items() if cooldown.is_expired(item, now)]
        if not due:
            return

        for item in due:
            if item.end_at is not None and ledger.claim(item.id, item.end_at):
                logger.info("Cooldown ended for %r", item.id)
                signal(store, ctx, item)

        due_ids = {item.id for item in due}

        def expire_due(items: list[TrackedItem]) -> list[TrackedItem]:
            # Re-check: an on_ready callback may have restarted a cooldown.
            return [
                cooldown.expire(item, now)
                if item.id in due_ids and cooldown.is_expired(item, now)
                else item
                for item in items
            ]

        store.apply(expire_due)

    return reconcile_system
