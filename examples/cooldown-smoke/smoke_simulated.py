"""Morning routine - tick-cooldown smoke test on a simulated clock.

Three sites with different cooldowns are visited at the start of a
simulated hour. The reconcile system runs once per simulated minute and
prints an alert whenever a site becomes ready again. Nothing touches the
disk or the audio device.

Run:
    uv run python smoke_simulated.py
    uv run python smoke_simulated.py --minutes 180 --sound
"""
from __future__ import annotations

import argparse
import sys

from tick_cooldown import (
    CooldownActions,
    Engine,
    ItemDraft,
    ItemStore,
    MemoryStorage,
    Settings,
    SettingsStore,
    StreamNotifier,
    make_reconcile_system,
    project,
)
from tick_cooldown.audio import NullChime, PygameChime
from tick_cooldown.logging_utils import setup_logging
from tick_cooldown.view import display_label, format_remaining

MINUTE = 60_000

SITES = [
    ("hn", "https://news.ycombinator.com/", "Hacker News", 20),
    ("mail", "https://mail.example.com/", "Mail", 45),
    ("feeds", "https://feeds.example.org/", "", 90),
]


def _board(store: ItemStore, now: int) -> str:
    rows = project(store.items(), now)
    return "  ".join(
        f"{display_label(r.item)}={'ready' if r.ready else format_remaining(r.remaining)}"
        for r in rows
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="tick-cooldown simulated smoke test")
    parser.add_argument("--minutes", type=int, default=120, help="Simulated minutes")
    parser.add_argument("--sound", action="store_true", help="Beep through pygame")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    setup_logging(args.log_level)

    storage = MemoryStorage()
    store = ItemStore(storage)
    settings = SettingsStore(storage, settings=Settings(sound_on=args.sound))
    actions = CooldownActions(store)

    for item_id, url, label, minutes in SITES:
        actions.upsert_item(
            ItemDraft(id=item_id, url=url, label=label or None, duration_ms=minutes * MINUTE),
            now=0,
        )
        actions.start_cooldown(item_id, now=0)

    notifier = StreamNotifier(sys.stdout)
    notifier.request_permission()
    chime = PygameChime() if args.sound else NullChime()

    engine = Engine(store)
    engine.add_system(make_reconcile_system(notifier, chime, settings))

    print(f"t=0      {_board(store, 0)}")
    for minute in range(1, args.minutes + 1):
        now = minute * MINUTE
        engine.step(now=now)
        if minute % 15 == 0:
            print(f"t={minute:<4}min {_board(store, now)}")
        if minute == 60:
            # Second visit to HN restarts its cooldown.
            actions.start_cooldown("hn", now=now)
            print(f"t={minute:<4}min revisited Hacker News")

    chime.close()
    ready = sum(1 for r in project(store.items(), engine.clock.now, "ready"))
    print(f"\nDone after {args.minutes} simulated minutes: {ready}/{len(store)} ready, "
          f"{storage.saves} writes.")


if __name__ == "__main__":
    main()
