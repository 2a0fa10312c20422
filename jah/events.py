"""Explicit event listener registry and observable cells.

Listeners are kept in a side-table owned by an :class:`EventRegistry`, keyed
by the identity of the source object. Nothing is attached to the source
itself, so any object can emit events. Entries are created on first use and
live until :meth:`EventRegistry.unregister` is called for the source.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Handler = Callable[..., Any]


@dataclass(slots=True)
class EventListener:
    """Handle returned by :meth:`EventRegistry.add_listener`."""

    handle: int
    source_key: int
    event: str
    handler: Handler


@dataclass(slots=True)
class _SourceEntry:
    """Side-table row. Holding ``source`` keeps its id from being reused."""

    source: object
    events: Dict[str, Dict[int, EventListener]] = field(default_factory=dict)


class EventRegistry:
    """Maps source identity to its listeners, per event name.

    The registry holds a strong reference to every source with listeners, so
    a source stays alive until its last listener is removed or it is
    unregistered.
    """

    def __init__(self) -> None:
        self._table: Dict[int, _SourceEntry] = {}
        self._handles = itertools.count()

    def add_listener(self, source: object, event: str, handler: Handler) -> EventListener:
        source_key = id(source)
        listener = EventListener(
            handle=next(self._handles),
            source_key=source_key,
            event=event,
            handler=handler,
        )
        entry = self._table.get(source_key)
        if entry is None:
            entry = self._table[source_key] = _SourceEntry(source=source)
        entry.events.setdefault(event, {})[listener.handle] = listener
        return listener

    def remove_listener(self, listener: EventListener) -> None:
        entry = self._table.get(listener.source_key)
        if entry is None:
            return
        handlers = entry.events.get(listener.event)
        if handlers is None:
            return
        handlers.pop(listener.handle, None)
        if not handlers:
            del entry.events[listener.event]
        if not entry.events:
            del self._table[listener.source_key]

    def _entry(self, source: object) -> Optional[_SourceEntry]:
        entry = self._table.get(id(source))
        if entry is None or entry.source is not source:
            return None
        return entry

    def listeners(self, source: object, event: Optional[str] = None) -> List[EventListener]:
        entry = self._entry(source)
        if entry is None:
            return []
        if event is not None:
            return list(entry.events.get(event, {}).values())
        return [listener for handlers in entry.events.values() for listener in handlers.values()]

    def has_listeners(self, source: object) -> bool:
        return self._entry(source) is not None

    def trigger(self, source: object, event: str, *args: Any) -> None:
        """Call every listener registered on ``source`` for ``event``."""

        # Copy so handlers may remove themselves while being dispatched.
        for listener in self.listeners(source, event):
            listener.handler(*args)

    def unregister(self, source: object) -> None:
        """Drop every listener attached to ``source`` and release it."""

        if self._entry(source) is not None:
            del self._table[id(source)]


registry = EventRegistry()


def add_listener(source: object, event: str, handler: Handler) -> EventListener:
    return registry.add_listener(source, event, handler)


def remove_listener(listener: EventListener) -> None:
    registry.remove_listener(listener)


def trigger(source: object, event: str, *args: Any) -> None:
    registry.trigger(source, event, *args)


def unregister(source: object) -> None:
    registry.unregister(source)


@dataclass(slots=True)
class ChangeEvent:
    """Payload passed to :class:`ObservableCell` subscribers."""

    type: str
    old_value: Any = None
    new_value: Any = None
    cancelable: bool = False
    default_prevented: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        if self.cancelable:
            self.default_prevented = True


class ObservableCell(Generic[T]):
    """A value holder that notifies subscribers around every change.

    Subscribers receive a cancelable ``beforechange`` event and, if no
    subscriber prevented it, a ``change`` event once the new value is stored.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._subscribers: List[Callable[[ChangeEvent], None]] = []

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        before = ChangeEvent("beforechange", old_value=self._value, new_value=value, cancelable=True)
        self._notify(before)
        if before.default_prevented:
            logger.debug("Change to %r vetoed", value)
            return False

        previous = self._value
        self._value = value
        self._notify(ChangeEvent("change", old_value=previous, new_value=value))
        return True

    def subscribe(self, handler: Callable[[ChangeEvent], None]) -> Callable[[], None]:
        """Register ``handler`` and return a callable that unsubscribes it."""

        self._subscribers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return _unsubscribe

    def _notify(self, event: ChangeEvent) -> None:
        for handler in list(self._subscribers):
            handler(event)


__all__ = [
    "ChangeEvent",
    "EventListener",
    "EventRegistry",
    "ObservableCell",
    "add_listener",
    "registry",
    "remove_listener",
    "trigger",
    "unregister",
]
