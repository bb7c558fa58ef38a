"""Tests for tick_cooldown.actions - CooldownActions."""
from __future__ import annotations

from typing import Any

import pytest

from tick_cooldown.actions import CooldownActions
from tick_cooldown.storage import MemoryStorage
from tick_cooldown.store import ITEMS_KEY, ItemStore
from tick_cooldown.types import ItemDraft, TrackedItem, UnknownItemError, ValidationError
from tick_cooldown.view import project


def _item(item_id: str = "a", **kw: Any) -> TrackedItem:
    fields: dict[str, Any] = dict(
        id=item_id,
        url=f"https://{item_id}.example/",
        label=item_id,
        duration_ms=60_000,
        created_at=0,
        updated_at=0,
    )
    fields.update(kw)
    return TrackedItem(**fields)


def _setup(*items: TrackedItem) -> tuple[CooldownActions, MemoryStorage]:
    storage = MemoryStorage()
    return CooldownActions(ItemStore(storage, items=items)), storage


class TestStartCooldown:
    def test_start_sets_end_and_persists(self) -> None:
        actions, storage = _setup(_item())
        item = actions.start_cooldown("a", now=0)
        assert item.end_at == 60_000
        assert item.last_visited_at == 0
        assert storage.load(ITEMS_KEY)[0]["endAt"] == 60_000

    def test_start_on_running_cooldown_restarts(self) -> None:
        actions, _ = _setup(_item())
        actions.start_cooldown("a", now=0)
        item = actions.start_cooldown("a", now=20_000)
        assert item.end_at == 80_000

    def test_unknown_id_raises_and_writes_nothing(self) -> None:
        actions, storage = _setup(_item())
        with pytest.raises(UnknownItemError):
            actions.start_cooldown("ghost", now=0)
        assert storage.saves == 0


class TestResetAndClear:
    def test_reset_rearms_without_touching_last_visit(self) -> None:
        actions, _ = _setup(_item())
        actions.start_cooldown("a", now=0)
        item = actions.reset_cooldown("a", now=30_000)
        assert item.end_at == 90_000
        assert item.last_visited_at == 0
        assert item.updated_at == 30_000

    def test_clear_makes_ready_immediately(self) -> None:
        actions, _ = _setup(_item())
        actions.start_cooldown("a", now=0)
        item = actions.clear_cooldown("a", now=10_000)
        assert item.end_at is None
        assert item.updated_at == 10_000

    @pytest.mark.parametrize("name", ["reset_cooldown", "clear_cooldown"])
    def test_unknown_id_raises(self, name: str) -> None:
        actions, _ = _setup()
        with pytest.raises(UnknownItemError):
            getattr(actions, name)("ghost", 0)


class TestChangeDuration:
    def test_default_defers_to_next_start(self) -> None:
        actions, _ = _setup(_item())
        actions.start_cooldown("a", now=0)
        item = actions.change_duration("a", 600_000, now=1_000)
        assert item.end_at == 60_000
        assert actions.start_cooldown("a", now=70_000).end_at == 670_000

    def test_recompute_retimes_running_cooldown(self) -> None:
        actions, _ = _setup(_item())
        actions.start_cooldown("a", now=0)
        item = actions.change_duration("a", 600_000, now=1_000, recompute=True)
        assert item.end_at == 600_000

    @pytest.mark.parametrize("recompute", [False, True])
    def test_below_floor_is_rejected_and_not_persisted(self, recompute: bool) -> None:
        actions, storage = _setup(_item())
        started = actions.start_cooldown("a", now=0)
        saves = storage.saves
        with pytest.raises(ValidationError):
            actions.change_duration("a", 0, now=1, recompute=recompute)
        assert actions.store.get("a") == started
        assert storage.saves == saves

        reloaded = ItemStore.load(storage)
        assert reloaded.get("a").duration_ms == 60_000
        assert [row.item.id for row in project(reloaded.items(), 3)] == ["a"]

    def test_progress_follows_running_cooldown_after_shortening(self) -> None:
        actions, _ = _setup(_item(duration_ms=3_600_000))
        actions.start_cooldown("a", now=0)
        actions.change_duration("a", 600_000, now=0)
        [row] = project(actions.store.items(), 1_800_000)
        assert row.progress == 50
        assert row.remaining == 1_800_000


class TestUpsertAndDelete:
    def test_upsert_and_delete_delegate_to_store(self) -> None:
        actions, _ = _setup()
        items = actions.upsert_item(
            ItemDraft(id="n", url="https://n.example/", duration_ms=60_000), now=3
        )
        assert [i.id for i in items] == ["n"]
        actions.delete_item("n")
        assert len(actions.store) == 0

    def test_delete_unknown_is_silent(self) -> None:
        actions, storage = _setup(_item())
        actions.delete_item("ghost")
        assert storage.saves == 0


class TestOpenAndStart:
    def test_opens_url_then_starts(self) -> None:
        actions, _ = _setup(_item())
        opened = []
        item = actions.open_and_start("a", now=5, opener=opened.append)
        assert opened == ["https://a.example/"]
        assert item.end_at == 60_005

    def test_opener_failure_still_starts(self) -> None:
        def broken(url: str) -> None:
            raise OSError("no browser")

        actions, _ = _setup(_item())
        item = actions.open_and_start("a", now=5, opener=broken)
        assert item.end_at == 60_005

    def test_unknown_id_does_not_open(self) -> None:
        actions, _ = _setup()
        opened = []
        with pytest.raises(UnknownItemError):
            actions.open_and_start("ghost", now=5, opener=opened.append)
        assert opened == []
