from __future__ import annotations

import gc
import weakref
from typing import List

from jah.events import ChangeEvent, EventRegistry, ObservableCell


class _Source:
    pass


def test_listeners_live_in_a_side_table() -> None:
    registry = EventRegistry()
    source = _Source()
    received: List[tuple] = []

    listener = registry.add_listener(source, "load", lambda *args: received.append(args))
    registry.trigger(source, "load", 1, "two")
    registry.trigger(source, "other", 3)

    assert received == [(1, "two")]
    assert vars(source) == {}
    assert registry.has_listeners(source)

    registry.remove_listener(listener)
    registry.trigger(source, "load", 4)

    assert received == [(1, "two")]
    assert not registry.has_listeners(source)


def test_unregister_drops_every_listener() -> None:
    registry = EventRegistry()
    source = _Source()
    other = _Source()
    registry.add_listener(source, "a", lambda: None)
    registry.add_listener(source, "b", lambda: None)
    registry.add_listener(other, "a", lambda: None)

    registry.unregister(source)

    assert registry.listeners(source) == []
    assert len(registry.listeners(other)) == 1


def test_handlers_may_remove_themselves_during_dispatch() -> None:
    registry = EventRegistry()
    source = _Source()
    calls: List[str] = []

    def once() -> None:
        calls.append("once")
        registry.remove_listener(first)

    first = registry.add_listener(source, "tick", once)
    registry.add_listener(source, "tick", lambda: calls.append("always"))

    registry.trigger(source, "tick")
    registry.trigger(source, "tick")

    assert calls == ["once", "always", "always"]


def test_observable_cell_notifies_before_and_after() -> None:
    cell: ObservableCell[int] = ObservableCell(1)
    seen: List[ChangeEvent] = []
    unsubscribe = cell.subscribe(seen.append)

    assert cell.set(2)
    unsubscribe()
    cell.set(3)

    assert [(event.type, event.old_value, event.new_value) for event in seen] == [
        ("beforechange", 1, 2),
        ("change", 1, 2),
    ]
    assert cell.get() == 3


def test_observable_cell_change_can_be_vetoed() -> None:
    cell: ObservableCell[str] = ObservableCell("idle")
    changes: List[ChangeEvent] = []

    def guard(event: ChangeEvent) -> None:
        if event.type == "beforechange" and event.new_value == "broken":
            event.prevent_default()
        elif event.type == "change":
            changes.append(event)

    cell.subscribe(guard)

    assert not cell.set("broken")
    assert cell.get() == "idle"
    assert cell.set("running")
    assert [event.new_value for event in changes] == ["running"]


def test_change_events_are_not_cancelable() -> None:
    event = ChangeEvent("change", old_value=1, new_value=2)

    event.prevent_default()

    assert not event.default_prevented


def test_sources_stay_registered_until_unregistered() -> None:
    registry = EventRegistry()
    calls: List[str] = []
    source = _Source()
    registry.add_listener(source, "load", lambda: calls.append("stale"))
    reference = weakref.ref(source)

    del source
    gc.collect()
    newcomers = [_Source() for _ in range(200)]
    for newcomer in newcomers:
        registry.trigger(newcomer, "load")

    assert reference() is not None
    assert calls == []

    registry.unregister(reference())
    gc.collect()

    assert reference() is None
