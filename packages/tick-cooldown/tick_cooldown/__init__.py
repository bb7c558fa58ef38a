"""tick-cooldown - Per-site cooldown timers on a fixed-period tick loop."""

from tick_cooldown.actions import CooldownActions
from tick_cooldown.clock import Clock
from tick_cooldown.config import TrackerConfig
from tick_cooldown.engine import Engine
from tick_cooldown.notify import Alert, Notifier, NullNotifier, Permission, StreamNotifier
from tick_cooldown.settings import SettingsStore
from tick_cooldown.storage import JsonFileStorage, MemoryStorage, Storage
from tick_cooldown.store import ItemStore
from tick_cooldown.systems import DeliveryLedger, make_reconcile_system
from tick_cooldown.transfer import export_data, import_data
from tick_cooldown.types import (
    MIN_DURATION_MS,
    ImportFormatError,
    ItemDraft,
    Scope,
    Settings,
    StorageError,
    TickContext,
    TickCooldownError,
    TrackedItem,
    UnknownItemError,
    ValidationError,
)
from tick_cooldown.view import ItemView, project

__all__ = [
    "Engine",
    "Clock",
    "TickContext",
    "ItemStore",
    "SettingsStore",
    "CooldownActions",
    "DeliveryLedger",
    "make_reconcile_system",
    "project",
    "ItemView",
    "export_data",
    "import_data",
    "TrackedItem",
    "ItemDraft",
    "Scope",
    "Settings",
    "TrackerConfig",
    "Storage",
    "MemoryStorage",
    "JsonFileStorage",
    "Notifier",
    "NullNotifier",
    "StreamNotifier",
    "Permission",
    "Alert",
    "MIN_DURATION_MS",
    "TickCooldownError",
    "UnknownItemError",
    "ValidationError",
    "ImportFormatError",
    "StorageError",
]
