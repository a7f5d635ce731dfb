"""
pathwatch Events - Named Publish/Subscribe
==========================================

This module provides the event primitive every other pathwatch component is
built on: a named, multi-subscriber emitter with handle-based unsubscription.

Core Components
---------------

**EventEmitter**: Maps event names to ordered listener lists. A listener is
registered at most once per name. Emission dispatches over a snapshot of the
listener list, so listeners that subscribe or unsubscribe during dispatch do
not affect the current emission. A listener that raises is logged and skipped;
the remaining listeners and any additional emitters still receive the event.

**EventHandle**: Returned by ``on()`` and ``once()``. Calling ``unbind()`` on
it removes exactly the listener it was created for.

Basic Usage
-----------

```python
from pathwatch import EventEmitter

emitter = EventEmitter()

handle = emitter.on("saved", lambda name, size: print(name, size))
emitter.emit("saved", "scene.json", 1024)  # prints: scene.json 1024

handle.unbind()
emitter.emit("saved", "scene.json", 2048)  # nothing happens
```

Forwarding
----------

```python
bus = EventEmitter()
emitter.add_emitter(bus)

bus.on("saved", lambda *args: print("bus saw", args))
emitter.emit("saved", "a.json", 1)  # bus saw ('a.json', 1)
```
"""

import logging
import weakref
from typing import Any, Callable, Dict, List, Optional


class EventHandle:
    """
    A subscription to one event name on one emitter.

    The handle keeps a weak reference to its owner, so holding a handle does
    not keep an emitter alive.
    """

    def __init__(self, owner: "EventEmitter", name: str, fn: Callable):
        self._owner_ref: Optional[weakref.ref] = weakref.ref(owner)
        self.name: Optional[str] = name
        self.fn: Optional[Callable] = fn

    @property
    def owner(self) -> Optional["EventEmitter"]:
        return self._owner_ref() if self._owner_ref is not None else None

    @property
    def bound(self) -> bool:
        return self.owner is not None and self.fn is not None

    def unbind(self) -> None:
        """Remove the listener from its emitter. Safe to call more than once."""
        owner = self.owner
        if owner is not None:
            owner.unbind(self.name, self.fn)
        self._owner_ref = None
        self.name = None
        self.fn = None

    def call(self, *args: Any) -> None:
        """Invoke the listener directly, bypassing the emitter."""
        if self.fn is None:
            return
        self.fn(*args)

    def on(self, name: str, fn: Callable) -> "EventHandle":
        """Subscribe ``fn`` to ``name`` on the same emitter."""
        owner = self.owner
        if owner is None:
            raise RuntimeError("Cannot subscribe through an unbound event handle")
        return owner.on(name, fn)

    def __repr__(self) -> str:
        state = "bound" if self.bound else "unbound"
        return f"EventHandle({self.name!r}, {state})"


class EventEmitter:
    """
    Named multi-subscriber publish/subscribe.

    Attributes:
        suspend_events: While True, ``emit()`` does nothing.
    """

    def __init__(self) -> None:
        self._events: Dict[str, List[Callable]] = {}
        self._suspend_events = False
        self._additional_emitters: List["EventEmitter"] = []

    @property
    def suspend_events(self) -> bool:
        return self._suspend_events

    @suspend_events.setter
    def suspend_events(self, value: bool) -> None:
        self._suspend_events = bool(value)

    def on(self, name: str, fn: Callable) -> EventHandle:
        """
        Register ``fn`` for ``name``.

        Registering the same function twice for the same name is a no-op, but
        still returns a handle that can unbind it.
        """
        listeners = self._events.get(name)
        if listeners is None:
            self._events[name] = [fn]
        elif fn not in listeners:
            listeners.append(fn)
        return EventHandle(self, name, fn)

    def once(self, name: str, fn: Callable) -> EventHandle:
        """Register ``fn`` for a single emission of ``name``."""
        handle: Optional[EventHandle] = None

        def wrapper(*args: Any) -> None:
            try:
                fn(*args)
            finally:
                handle.unbind()

        handle = self.on(name, wrapper)
        return handle

    def emit(self, name: str, *args: Any) -> "EventEmitter":
        """
        Call every listener of ``name`` with ``args``, then forward the event
        to the additional emitters.
        """
        if self._suspend_events:
            return self

        listeners = self._events.get(name)
        if listeners:
            for listener in list(listeners):
                try:
                    listener(*args)
                except Exception:
                    logging.exception(f"Error in listener for event '{name}'")

        if self._additional_emitters:
            for emitter in list(self._additional_emitters):
                emitter.emit(name, *args)

        return self

    def unbind(
        self, name: Optional[str] = None, fn: Optional[Callable] = None
    ) -> "EventEmitter":
        """
        Remove listeners.

        Args:
            name: Event name. If omitted, every listener is removed.
            fn: Listener to remove. If omitted, every listener of ``name`` is removed.
        """
        if name is None:
            self._events = {}
            return self

        listeners = self._events.get(name)
        if not listeners:
            return self

        if fn is None:
            del self._events[name]
        elif fn in listeners:
            listeners.remove(fn)
            if not listeners:
                del self._events[name]

        return self

    def has_event(self, name: str) -> bool:
        return bool(self._events.get(name))

    def add_emitter(self, emitter: "EventEmitter") -> None:
        """Forward every future emission to ``emitter`` as well."""
        if emitter not in self._additional_emitters:
            self._additional_emitters.append(emitter)

    def remove_emitter(self, emitter: "EventEmitter") -> None:
        if emitter in self._additional_emitters:
            self._additional_emitters.remove(emitter)
