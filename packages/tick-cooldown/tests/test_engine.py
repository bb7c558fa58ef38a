"""Tests for engine lifecycle, tick counting, and pacing."""

from unittest.mock import patch

import pytest

from tick_cooldown.engine import Engine
from tick_cooldown.storage import MemoryStorage
from tick_cooldown.store import ItemStore


def _engine(**kw):
    return Engine(ItemStore(MemoryStorage()), **kw)


# --- Initialization ---

def test_engine_init_defaults():
    engine = _engine()
    assert engine.clock.period == 1.0
    assert engine.clock.tick_number == 0
    assert isinstance(engine.store, ItemStore)


def test_engine_init_custom_period():
    engine = _engine(period=0.25)
    assert engine.clock.period == 0.25


# --- System registration ---

def test_systems_run_in_order_with_store():
    engine = _engine()
    order = []

    def first(store, ctx):
        order.append(("first", store is engine.store))

    def second(store, ctx):
        order.append(("second", ctx.tick_number))

    engine.add_system(first)
    engine.add_system(second)
    engine.step()
    assert order == [("first", True), ("second", 1)]


# --- step() ---

def test_step_advances_one_tick_at_given_time():
    engine = _engine()
    seen = []
    engine.add_system(lambda s, c: seen.append(c.now))
    engine.step(now=1_000)
    engine.step(now=2_500)
    assert engine.clock.tick_number == 2
    assert seen == [1_000, 2_500]


def test_step_does_not_call_hooks():
    engine = _engine()
    hooks_called = []
    engine.on_start(lambda s, c: hooks_called.append("start"))
    engine.on_stop(lambda s, c: hooks_called.append("stop"))
    engine.step()
    assert hooks_called == []


def test_failing_system_does_not_stop_the_tick():
    engine = _engine()
    calls = []

    def broken(store, ctx):
        raise RuntimeError("boom")

    engine.add_system(broken)
    engine.add_system(lambda s, c: calls.append(c.tick_number))
    engine.step()
    engine.step()
    assert calls == [1, 2]


# --- run(n) ---

def test_run_n_ticks_with_hooks():
    engine = _engine(time_fn=lambda: 10.0)
    events = []
    engine.on_start(lambda s, c: events.append("start"))
    engine.on_stop(lambda s, c: events.append("stop"))
    engine.add_system(lambda s, c: events.append(f"tick-{c.tick_number}"))
    engine.run(2)
    assert events == ["start", "tick-1", "tick-2", "stop"]


def test_request_stop_ends_run_early():
    engine = _engine(time_fn=lambda: 10.0)
    ticks = []

    def stopper(store, ctx):
        ticks.append(ctx.tick_number)
        if ctx.tick_number == 3:
            ctx.request_stop()

    engine.add_system(stopper)
    engine.run(10)
    assert ticks == [1, 2, 3]


def test_request_stop_skips_later_systems_in_that_tick():
    engine = _engine()
    calls = []
    engine.add_system(lambda s, c: c.request_stop())
    engine.add_system(lambda s, c: calls.append("late"))
    engine.run(5)
    assert calls == []


# --- run_forever() ---

def test_run_forever_stops_on_request_and_paces():
    engine = _engine(period=0.5, time_fn=lambda: 10.0)
    ticks = []

    def stopper(store, ctx):
        ticks.append(ctx.tick_number)
        if ctx.tick_number == 3:
            ctx.request_stop()

    engine.add_system(stopper)
    with patch("tick_cooldown.engine.time.sleep") as sleep:
        engine.run_forever()
    assert ticks == [1, 2, 3]
    assert sleep.call_count == 2
    for call in sleep.call_args_list:
        assert 0 < call.args[0] <= 0.5


def test_engine_stop_from_hook():
    engine = _engine(time_fn=lambda: 10.0)
    ticks = []
    engine.add_system(lambda s, c: ticks.append(c.tick_number))
    engine.add_system(lambda s, c: engine.stop())
    with patch("tick_cooldown.engine.time.sleep"):
        engine.run_forever()
    assert ticks == [1]


def test_stop_hooks_run_on_interrupt():
    engine = _engine(time_fn=lambda: 10.0)
    events = []

    def interrupt(store, ctx):
        raise KeyboardInterrupt

    engine.add_system(interrupt)
    engine.on_stop(lambda s, c: events.append("stop"))
    with pytest.raises(KeyboardInterrupt):
        engine.run_forever()
    assert events == ["stop"]
