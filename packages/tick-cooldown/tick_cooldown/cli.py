"""Command-line front end for the cooldown tracker.

Usage examples:
  tick-cooldown add news.ycombinator.com --minutes 120
  tick-cooldown visit <id>
  tick-cooldown list --filter active
  tick-cooldown watch
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Sequence, TextIO

from tick_cooldown.actions import CooldownActions
from tick_cooldown.audio import Chime, NullChime, PygameChime
from tick_cooldown.clock import Clock
from tick_cooldown.config import TrackerConfig
from tick_cooldown.engine import Engine
from tick_cooldown.logging_utils import setup_logging
from tick_cooldown.notify import Permission, StreamNotifier, render_alert
from tick_cooldown.settings import SettingsStore
from tick_cooldown.storage import JsonFileStorage, Storage
from tick_cooldown.store import ItemStore
from tick_cooldown.systems import make_reconcile_system
from tick_cooldown.transfer import dumps_export, read_import, write_export
from tick_cooldown.types import (
    ImportFormatError,
    ItemDraft,
    Scope,
    StorageError,
    TickContext,
    TrackedItem,
    UnknownItemError,
    ValidationError,
)
from tick_cooldown.urls import validate_draft
from tick_cooldown.view import FILTERS, display_label, display_target, format_remaining, project

logger = logging.getLogger(__name__)

EXIT_UNKNOWN_ITEM = 1
EXIT_BAD_INPUT = 2


@dataclass
class Tracker:
    """The wired-up state one command works on."""

    config: TrackerConfig
    storage: Storage
    store: ItemStore
    settings: SettingsStore
    actions: CooldownActions
    clock: Clock
    out: TextIO

    def now(self) -> int:
        return self.clock.read()


def open_tracker(
    config: TrackerConfig,
    storage: Storage | None = None,
    clock: Clock | None = None,
    out: TextIO | None = None,
) -> Tracker:
    if storage is None:
        storage = JsonFileStorage(config.data_dir)
    store = ItemStore.load(storage, config.items_key)
    return Tracker(
        config=config,
        storage=storage,
        store=store,
        settings=SettingsStore.load(storage, config.settings_key),
        actions=CooldownActions(store),
        clock=clock if clock is not None else Clock(config.tick_period),
        out=out if out is not None else sys.stdout,
    )


def _minutes(value: str) -> int:
    try:
        minutes = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a whole number of minutes: {value!r}") from None
    if minutes < 1:
        raise argparse.ArgumentTypeError("minutes must be at least 1")
    return minutes


def _describe(item: TrackedItem, now: int) -> str:
    if item.end_at is None:
        status = "ready"
    else:
        status = format_remaining(max(0, item.end_at - now))
    return f"{item.id}  {status:>9}  {display_label(item)}  ({display_target(item)})"


# --- Commands ---


def cmd_add(tracker: Tracker, args: argparse.Namespace) -> int:
    draft = validate_draft(
        ItemDraft(
            url=args.url,
            label=args.label,
            scope=Scope(args.scope) if args.scope else None,
            duration_ms=args.minutes * 60_000 if args.minutes else None,
            favicon=args.favicon,
        ),
        tracker.settings.settings,
    )
    now = tracker.now()
    item = tracker.actions.upsert_item(draft, now)[-1]
    if args.visit:
        item = tracker.actions.start_cooldown(item.id, now)
    print(f"Added {_describe(item, now)}", file=tracker.out)
    return 0


def cmd_edit(tracker: Tracker, args: argparse.Namespace) -> int:
    existing = tracker.store.get(args.id)
    draft = validate_draft(
        ItemDraft(
            id=existing.id,
            url=args.url,
            label=args.label,
            scope=Scope(args.scope) if args.scope else None,
            duration_ms=args.minutes * 60_000 if args.minutes else None,
            favicon=args.favicon,
        ),
        tracker.settings.settings,
        existing=existing,
    )
    now = tracker.now()
    # Duration goes through change_duration so a running cooldown is only
    # re-timed when asked for.
    duration_ms = draft.duration_ms
    tracker.actions.upsert_item(
        ItemDraft(
            id=draft.id,
            url=draft.url,
            label=draft.label,
            scope=draft.scope,
            favicon=draft.favicon,
        ),
        now,
    )
    if duration_ms is not None and duration_ms != existing.duration_ms:
        tracker.actions.change_duration(
            existing.id, duration_ms, now, recompute=args.recompute
        )
        if existing.end_at is not None and not args.recompute:
            print(
                "Running cooldown kept; the new duration applies from the next visit.",
                file=tracker.out,
            )
    print(f"Updated {_describe(tracker.store.get(existing.id), now)}", file=tracker.out)
    return 0


def cmd_list(tracker: Tracker, args: argparse.Namespace) -> int:
    now = tracker.now()
    rows = project(tracker.store.items(), now, args.filter, args.search or "")
    if not rows:
        print("No sites.", file=tracker.out)
        return 0
    for row in rows:
        print(_describe(row.item, now), file=tracker.out)
    return 0


def _item_command(
    action: Callable[[Tracker, str, int], TrackedItem], verb: str
) -> Callable[[Tracker, argparse.Namespace], int]:
    def command(tracker: Tracker, args: argparse.Namespace) -> int:
        now = tracker.now()
        item = action(tracker, args.id, now)
        print(f"{verb} {_describe(item, now)}", file=tracker.out)
        return 0

    return command


cmd_visit = _item_command(
    lambda t, item_id, now: t.actions.start_cooldown(item_id, now), "Visited"
)
cmd_open = _item_command(
    lambda t, item_id, now: t.actions.open_and_start(item_id, now), "Opened"
)
cmd_reset = _item_command(
    lambda t, item_id, now: t.actions.reset_cooldown(item_id, now), "Reset"
)
cmd_clear = _item_command(
    lambda t, item_id, now: t.actions.clear_cooldown(item_id, now), "Cleared"
)


def cmd_remove(tracker: Tracker, args: argparse.Namespace) -> int:
    tracker.actions.delete_item(args.id)
    print(f"Removed {args.id}", file=tracker.out)
    return 0


def cmd_settings(tracker: Tracker, args: argparse.Namespace) -> int:
    if args.default_minutes is not None or args.sound is not None:
        tracker.settings.update(
            default_duration_ms=(
                args.default_minutes * 60_000 if args.default_minutes else None
            ),
            sound_on=args.sound,
        )
    current = tracker.settings.settings
    print(
        f"default duration: {current.default_duration_ms // 60_000} min, "
        f"sound: {'on' if current.sound_on else 'off'}",
        file=tracker.out,
    )
    return 0


def cmd_export(tracker: Tracker, args: argparse.Namespace) -> int:
    if args.file == "-":
        print(dumps_export(tracker.store, tracker.settings), file=tracker.out)
    else:
        path = write_export(args.file, tracker.store, tracker.settings)
        print(f"Exported {len(tracker.store)} site(s) to {path}", file=tracker.out)
    return 0


def cmd_import(tracker: Tracker, args: argparse.Namespace) -> int:
    count, settings_applied = read_import(args.file, tracker.store, tracker.settings)
    parts = []
    if count is not None:
        parts.append(f"{count} site(s)")
    if settings_applied:
        parts.append("settings")
    print(f"Imported {' and '.join(parts)}", file=tracker.out)
    return 0


def _make_chime(enabled: bool) -> Chime:
    return PygameChime() if enabled else NullChime()


def catch_up(tracker: Tracker) -> None:
    """Run one reconcile tick at the current time.

    Cooldowns that ended while no ``watch`` loop was running turn ready and
    are announced on stderr, keeping stdout clean for command output.
    """
    notifier = StreamNotifier(sys.stderr)
    notifier.request_permission()
    chime = _make_chime(tracker.settings.sound_on)
    engine = Engine(tracker.store, period=tracker.config.tick_period)
    engine.add_system(make_reconcile_system(notifier, chime, tracker.settings))
    try:
        engine.step(now=tracker.now())
    finally:
        chime.close()


def cmd_notify_test(tracker: Tracker, args: argparse.Namespace) -> int:
    notifier = StreamNotifier(tracker.out)
    if notifier.request_permission() is not Permission.GRANTED:
        print("Notifications are not permitted.", file=tracker.out)
        return 0
    sample = TrackedItem(
        id="test",
        url="https://example.com/",
        label="example.com",
        duration_ms=60_000,
        created_at=0,
        updated_at=0,
        end_at=tracker.now(),
    )
    notifier.notify(render_alert(sample))
    chime = _make_chime(tracker.settings.sound_on)
    try:
        chime.play()
    except Exception:
        logger.warning("Chime failed", exc_info=True)
    finally:
        chime.close()
    return 0


def cmd_watch(tracker: Tracker, args: argparse.Namespace) -> int:
    notifier = StreamNotifier(tracker.out)
    notifier.request_permission()
    chime = _make_chime(not args.no_sound)
    engine = Engine(tracker.store, period=args.period or tracker.config.tick_period)
    engine.add_system(make_reconcile_system(notifier, chime, tracker.settings))

    def announce(store: ItemStore, ctx: TickContext) -> None:
        active = [i for i in store.items() if i.end_at is not None]
        print(
            f"Watching {len(store)} site(s), {len(active)} cooling down. Ctrl-C to stop.",
            file=tracker.out,
        )

    engine.on_start(announce)
    engine.on_stop(lambda store, ctx: chime.close())
    try:
        engine.run_forever()
    except KeyboardInterrupt:
        print("Stopped.", file=tracker.out)
    return 0


# --- Parser ---


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tick-cooldown", description="Per-site cooldown timers"
    )
    p.add_argument("--data-dir", type=Path, default=None,
                   help="Directory for stored state (default: $TICK_COOLDOWN_HOME)")
    p.add_argument("--log-level", default=None, help="Logging level (default: WARNING)")
    p.add_argument("--json-logs", action="store_true", help="Log as JSON lines")
    sub = p.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Track a new site")
    add.add_argument("url")
    add.add_argument("--label")
    add.add_argument("--minutes", type=_minutes, help="Cooldown length")
    add.add_argument("--scope", choices=[s.value for s in Scope])
    add.add_argument("--favicon")
    add.add_argument("--visit", action="store_true", help="Start the cooldown now")
    add.set_defaults(func=cmd_add)

    edit = sub.add_parser("edit", help="Change a tracked site")
    edit.add_argument("id")
    edit.add_argument("--url")
    edit.add_argument("--label")
    edit.add_argument("--minutes", type=_minutes)
    edit.add_argument("--scope", choices=[s.value for s in Scope])
    edit.add_argument("--favicon")
    edit.add_argument("--recompute", action="store_true",
                      help="Re-time a running cooldown with the new duration")
    edit.set_defaults(func=cmd_edit)

    ls = sub.add_parser("list", help="Show tracked sites")
    ls.add_argument("--filter", choices=FILTERS, default="all")
    ls.add_argument("--search", default="")
    ls.set_defaults(func=cmd_list)

    for name, func, text in (
        ("visit", cmd_visit, "Mark a site visited and start its cooldown"),
        ("open", cmd_open, "Open a site in the browser and start its cooldown"),
        ("reset", cmd_reset, "Restart a cooldown from now"),
        ("clear", cmd_clear, "End a cooldown without an alert"),
        ("remove", cmd_remove, "Stop tracking a site"),
    ):
        sp = sub.add_parser(name, help=text)
        sp.add_argument("id")
        sp.set_defaults(func=func)

    st = sub.add_parser("settings", help="Show or change settings")
    st.add_argument("--default-minutes", type=_minutes)
    st.add_argument("--sound", action=argparse.BooleanOptionalAction, default=None)
    st.set_defaults(func=cmd_settings)

    ex = sub.add_parser("export", help="Write all data as JSON ('-' for stdout)")
    ex.add_argument("file")
    ex.set_defaults(func=cmd_export)

    im = sub.add_parser("import", help="Replace data from an export file")
    im.add_argument("file")
    im.set_defaults(func=cmd_import)

    nt = sub.add_parser("notify-test", help="Send a sample alert")
    nt.set_defaults(func=cmd_notify_test)

    w = sub.add_parser("watch", help="Run the tick loop and alert when sites are ready")
    w.add_argument("--period", type=float, default=None, help="Seconds per tick")
    w.add_argument("--no-sound", action="store_true")
    w.set_defaults(func=cmd_watch)
    return p


def main(
    argv: Sequence[str] | None = None,
    storage: Storage | None = None,
    clock: Clock | None = None,
    out: TextIO | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    config = TrackerConfig.from_env()
    if args.data_dir is not None:
        config = replace(config, data_dir=args.data_dir)
    setup_logging(args.log_level or config.log_level, args.json_logs or config.json_logs)

    tracker = open_tracker(config, storage=storage, clock=clock, out=out)
    if args.command != "watch":
        # watch reconciles and announces on its own first tick.
        catch_up(tracker)
    try:
        return args.func(tracker, args)
    except UnknownItemError as exc:
        print(f"error: no site with id {exc.item_id!r}", file=sys.stderr)
        return EXIT_UNKNOWN_ITEM
    except (ValidationError, ImportFormatError, StorageError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_BAD_INPUT
