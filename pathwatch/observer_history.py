"""
pathwatch ObserverHistory - Recording Observer Mutations
========================================================

``ObserverHistory`` subscribes to the wildcard mutation events of an
``Observer`` and pushes one invertible action per event into a ``History``.

Every undo/redo closure:

1. resolves ``item.latest()``, since the tree may have been replaced since the
   event fired, and does nothing if the live observer is gone;
2. disables ``item.history`` so the replayed mutation is not recorded again;
3. applies the inverse (or forward) mutation with the ordinary
   ``set``/``unset``/``insert``/``remove_value``/``move`` operations;
4. re-enables ``item.history``.

```python
from pathwatch import History, Observer, ObserverHistory

history = History()
doc = Observer({"title": "draft"})
ObserverHistory(item=doc, history=history)

doc.set("title", "final")
history.undo()
doc.get("title")  # "draft"
```
"""

import logging
from typing import Any, Callable, List, Optional

from .events import EventHandle
from .history import History, HistoryAction
from .observer import Observer


class ObserverHistory:
    """
    Records the mutations of ``item`` into ``history``.

    Args:
        item: Observer to record.
        history: Undo stack receiving the actions.
        enabled: Record while True.
        prefix: Prepended to every action name.
        combine: Passed to every action (see ``History.add``).

    The adapter installs itself as ``item.history`` unless that slot is taken.

    A set whose previous value is None is undone with ``unset``, so a key that
    really held None is removed by undo rather than set back to None.
    """

    def __init__(
        self,
        item: Observer,
        history: Optional[History] = None,
        enabled: bool = True,
        prefix: str = "",
        combine: bool = False,
    ) -> None:
        self.item: Optional[Observer] = item
        self._history = history
        self._enabled = bool(enabled)
        self._prefix = prefix or ""
        self._combine = bool(combine)
        self._handles: List[EventHandle] = []

        if item.history is None:
            item.history = self
        self._initialize()

    @property
    def history(self) -> Optional[History]:
        return self._history

    @history.setter
    def history(self, value: Optional[History]) -> None:
        self._history = value

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = bool(value)

    @property
    def prefix(self) -> str:
        return self._prefix

    @prefix.setter
    def prefix(self, value: Optional[str]) -> None:
        self._prefix = value or ""

    @property
    def combine(self) -> bool:
        return self._combine

    @combine.setter
    def combine(self, value: bool) -> None:
        self._combine = bool(value)

    def _initialize(self) -> None:
        item = self.item
        self._handles = [
            item.on("*:set", self._on_set),
            item.on("*:unset", self._on_unset),
            item.on("*:insert", self._on_insert),
            item.on("*:remove", self._on_remove),
            item.on("*:move", self._on_move),
        ]

    def _recording(self) -> bool:
        return self._enabled and self._history is not None

    def _replay(self, step: Callable[[Observer], Any]) -> Callable[[], None]:
        """Wrap ``step`` so it runs against the live item with recording off."""

        def run() -> None:
            if self.item is None:
                return
            item = self.item.latest()
            if item is None:
                logging.debug("Skipping history replay: observer no longer exists")
                return

            recorder = item.history
            previous = recorder.enabled if recorder is not None else False
            if recorder is not None:
                recorder.enabled = False
            try:
                step(item)
            finally:
                if recorder is not None:
                    recorder.enabled = previous

        return run

    def _add(self, path: str, undo: Callable[[Observer], Any], redo: Callable[[Observer], Any]) -> None:
        self._history.add(
            HistoryAction(
                name=self._prefix + path,
                undo=self._replay(undo),
                redo=self._replay(redo),
                combine=self._combine,
            )
        )

    def _on_set(self, path: str, value: Any, value_old: Any, remote: Any = None) -> None:
        if not self._recording():
            return
        if isinstance(value, Observer):
            value = value.json()

        def apply(target: Any) -> Callable[[Observer], Any]:
            # Keys that did not exist before report None and are unset on undo
            if target is None:
                return lambda item: item.unset(path)
            return lambda item: item.set(path, target)

        self._add(path, apply(value_old), apply(value))

    def _on_unset(self, path: str, value_old: Any, remote: Any = None) -> None:
        if not self._recording():
            return
        self._add(
            path,
            lambda item: item.set(path, value_old),
            lambda item: item.unset(path),
        )

    def _on_insert(self, path: str, value: Any, ind: int, remote: Any = None) -> None:
        if not self._recording():
            return
        self._add(
            path,
            lambda item: item.remove_value(path, value),
            lambda item: item.insert(path, value, ind),
        )

    def _on_remove(self, path: str, value: Any, ind: int, remote: Any = None) -> None:
        if not self._recording():
            return
        self._add(
            path,
            lambda item: item.insert(path, value, ind),
            lambda item: item.remove_value(path, value),
        )

    def _on_move(
        self, path: str, value: Any, ind: int, ind_old: int, remote: Any = None
    ) -> None:
        if not self._recording():
            return
        self._add(
            path,
            lambda item: item.move(path, ind, ind_old),
            lambda item: item.move(path, ind_old, ind),
        )

    def destroy(self) -> None:
        for handle in self._handles:
            handle.unbind()
        self._handles = []
        if self.item is not None and self.item.history is self:
            self.item.history = None
        self.item = None
