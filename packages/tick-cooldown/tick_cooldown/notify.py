"""Notifier protocol, alert rendering and basic notifiers."""
from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol, TextIO, runtime_checkable

from tick_cooldown.types import TrackedItem
from tick_cooldown.urls import hostname

DEFAULT_ICON = "/favicon.ico"


class Permission(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"  # not decided yet


@dataclass(frozen=True)
class Alert:
    title: str
    body: str
    icon: str
    tag: str


def render_alert(item: TrackedItem) -> Alert:
    """Alert for an item whose cooldown just ended."""
    label = item.label or hostname(item.url)
    return Alert(
        title=f"Ready to visit: {label}",
        body="The cooldown has ended.",
        icon=item.favicon or DEFAULT_ICON,
        tag=f"cooldown-{item.id}-{item.end_at}",
    )


@runtime_checkable
class Notifier(Protocol):
    """Delivery channel for alerts.

    ``notify`` is only called while ``permission()`` is GRANTED. Any
    exception it raises is logged and dropped by the caller.
    """

    def permission(self) -> Permission:
        ...

    def request_permission(self) -> Permission:
        ...

    def notify(self, alert: Alert) -> None:
        ...


class NullNotifier:
    """For environments with no delivery channel."""

    def permission(self) -> Permission:
        return Permission.DENIED

    def request_permission(self) -> Permission:
        return Permission.DENIED

    def notify(self, alert: Alert) -> None:
        pass


class StreamNotifier:
    """Writes one line per alert to a text stream (stdout by default).

    Starts undecided; ``request_permission`` grants unless constructed
    with ``allow=False``.
    """

    def __init__(self, stream: TextIO | None = None, allow: bool = True) -> None:
        self._stream = stream
        self._allow = allow
        self._permission = Permission.DEFAULT

    def permission(self) -> Permission:
        return self._permission

    def request_permission(self) -> Permission:
        if self._permission is Permission.DEFAULT:
            self._permission = Permission.GRANTED if self._allow else Permission.DENIED
        return self._permission

    def notify(self, alert: Alert) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stamp = datetime.now().strftime("%H:%M:%S")
        stream.write(f"[{stamp}] {alert.title} - {alert.body}\n")
        stream.flush()
