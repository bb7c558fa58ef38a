"""Pure per-item cooldown transitions and queries.

An item is either counting down (``end_at`` set) or ready (``end_at`` is
None). Every function here returns a new item and never touches storage.
"""
from __future__ import annotations

from dataclasses import replace

from tick_cooldown.types import MIN_DURATION_MS, TrackedItem, ValidationError


def is_counting_down(item: TrackedItem) -> bool:
    return item.end_at is not None


def is_active(item: TrackedItem, now: int) -> bool:
    """Counting down and not yet due."""
    return item.end_at is not None and item.end_at > now


def is_expired(item: TrackedItem, now: int) -> bool:
    """Counting down but due; the next tick turns it ready."""
    return item.end_at is not None and item.end_at <= now


def remaining(item: TrackedItem, now: int) -> int:
    if item.end_at is None:
        return 0
    return max(0, item.end_at - now)


def armed_at(item: TrackedItem) -> int | None:
    """Start of the running cooldown, None when ready.

    Records written before ``started_at`` existed fall back to
    ``end_at - duration_ms``.
    """
    if item.end_at is None:
        return None
    if item.started_at is not None:
        return item.started_at
    return item.end_at - item.duration_ms


def progress(item: TrackedItem, now: int) -> int:
    """Percentage (0-100) of the current cooldown already elapsed."""
    started = armed_at(item)
    if started is None:
        return 0
    span = item.end_at - started
    if span <= 0:
        return 100
    elapsed = min(span, max(0, now - started))
    return round(elapsed * 100 / span)


def start(item: TrackedItem, now: int) -> TrackedItem:
    """Record a visit and start a fresh cooldown, even if one is running."""
    return replace(
        item,
        last_visited_at=now,
        started_at=now,
        end_at=now + item.duration_ms,
        updated_at=now,
    )


def reset(item: TrackedItem, now: int) -> TrackedItem:
    """Re-arm the cooldown from now. The last visit time is kept."""
    return replace(item, started_at=now, end_at=now + item.duration_ms, updated_at=now)


def clear(item: TrackedItem, now: int) -> TrackedItem:
    return replace(item, started_at=None, end_at=None, updated_at=now)


def expire(item: TrackedItem, now: int) -> TrackedItem:
    return replace(item, started_at=None, end_at=None, updated_at=now)


def check_duration(duration_ms: int) -> int:
    """Return ``duration_ms`` or raise ValidationError below the floor."""
    if duration_ms < MIN_DURATION_MS:
        raise ValidationError(
            f"Duration must be at least {MIN_DURATION_MS} ms, got {duration_ms}"
        )
    return duration_ms


def change_duration(
    item: TrackedItem, duration_ms: int, now: int, recompute: bool = False
) -> TrackedItem:
    """Set a new duration.

    Without ``recompute`` a running cooldown keeps its ``end_at`` and the new
    duration applies from the next start. With ``recompute`` the running
    cooldown is re-timed from the moment it was armed; if the new end is
    already past, the item becomes ready. Raises ValidationError below
    MIN_DURATION_MS.
    """
    changed = replace(item, duration_ms=check_duration(duration_ms), updated_at=now)
    started = armed_at(item)
    if not recompute or started is None:
        return changed

    end_at = started + duration_ms
    if end_at > now:
        return replace(changed, started_at=started, end_at=end_at)
    return replace(changed, started_at=None, end_at=None)
