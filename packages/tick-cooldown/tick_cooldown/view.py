"""View projection - filtered, searched and sorted rows for display."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from tick_cooldown import cooldown
from tick_cooldown.types import Scope, TrackedItem
from tick_cooldown.urls import hostname

FILTERS = ("all", "active", "ready")


@dataclass(frozen=True)
class ItemView:
    item: TrackedItem
    remaining: int
    ready: bool
    progress: int


def project(
    items: Iterable[TrackedItem],
    now: int,
    filter: str = "all",
    query: str = "",
) -> list[ItemView]:
    """Rows to render, newest list on every call.

    Items with an end_at sort first by remaining time; the sort is stable so
    ties keep store order between calls.
    """
    if filter not in FILTERS:
        raise ValueError(f"Unknown filter {filter!r}, expected one of {FILTERS}")

    rows = [
        ItemView(
            item=item,
            remaining=cooldown.remaining(item, now),
            ready=item.end_at is None,
            progress=cooldown.progress(item, now),
        )
        for item in items
    ]

    if filter == "active":
        rows = [row for row in rows if cooldown.is_active(row.item, now)]
    elif filter == "ready":
        rows = [row for row in rows if row.ready]

    term = query.strip().lower()
    if term:
        rows = [row for row in rows if _matches(row.item, term)]

    return sorted(rows, key=lambda row: (row.ready, row.remaining))


def _matches(item: TrackedItem, term: str) -> bool:
    return term in display_label(item).lower() or term in item.url.lower()


def display_label(item: TrackedItem) -> str:
    return item.label or hostname(item.url)


def display_target(item: TrackedItem) -> str:
    """Hostname for domain-scoped items, the full URL otherwise."""
    if item.scope is Scope.DOMAIN:
        return hostname(item.url)
    return item.url


def format_remaining(ms: int) -> str:
    """``HH:MM:SS`` for a duration in milliseconds; hours may exceed 99."""
    if ms <= 0:
        return "00:00:00"
    total = ms // 1000
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
