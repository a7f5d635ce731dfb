"""
pathwatch History - Linear Undo/Redo
====================================

``History`` is a linear stack of named, invertible actions with a single
cursor.

- Adding an action while the cursor is not at the tip discards everything
  after the cursor (no redo tree).
- An action added with ``combine=True`` whose name matches the tip action is
  merged into it: the tip keeps its ``undo`` and takes the new ``redo``. This
  turns a drag that fires many edits into one undo step.
- ``undo``/``redo`` closures that raise are logged and the cursor stays where
  it was.

Events
------

- ``add`` / ``undo`` / ``redo``: ``(name)``
- ``can_undo`` / ``can_redo``: ``(bool)`` whenever the flag changes, and while
  an action is executing (both report False then)

```python
from pathwatch import History, HistoryAction

history = History()
state = {"x": 0}

def set_x(value):
    return lambda: state.update(x=value)

history.add(HistoryAction("x", undo=set_x(0), redo=set_x(1)))
state["x"] = 1
history.undo()   # state == {"x": 0}
history.redo()   # state == {"x": 1}
```
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Union

from .events import EventEmitter


@dataclass
class HistoryAction:
    """
    One undoable step.

    Attributes:
        name: Identifier, usually the mutated path.
        undo: Reverts the step.
        redo: Re-applies the step.
        combine: Merge into the tip action when it has the same name.
    """

    name: str
    undo: Callable[[], Any]
    redo: Callable[[], Any]
    combine: bool = False


ActionLike = Union[HistoryAction, Mapping[str, Any]]


def _coerce_action(action: ActionLike) -> Optional[HistoryAction]:
    """Build a HistoryAction from a mapping or object, logging what is missing."""
    if isinstance(action, HistoryAction):
        fields = action.__dict__
    elif isinstance(action, Mapping):
        fields = action
    else:
        fields = {
            attr: getattr(action, attr)
            for attr in ("name", "undo", "redo", "combine")
            if hasattr(action, attr)
        }

    name = fields.get("name")
    if not name:
        logging.error("Trying to add history action without name")
        return None
    if not callable(fields.get("undo")):
        logging.error(f"Trying to add history action without undo method: {name}")
        return None
    if not callable(fields.get("redo")):
        logging.error(f"Trying to add history action without redo method: {name}")
        return None

    if isinstance(action, HistoryAction):
        return action
    return HistoryAction(
        name=name,
        undo=fields["undo"],
        redo=fields["redo"],
        combine=bool(fields.get("combine", False)),
    )


class History(EventEmitter):
    """Linear undo/redo stack."""

    def __init__(self) -> None:
        super().__init__()
        self._executing = 0
        self._actions: List[HistoryAction] = []
        self._current_action_index = -1
        self._can_undo = False
        self._can_redo = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def current_action(self) -> Optional[HistoryAction]:
        if 0 <= self._current_action_index < len(self._actions):
            return self._actions[self._current_action_index]
        return None

    @property
    def last_action(self) -> Optional[HistoryAction]:
        return self._actions[-1] if self._actions else None

    @property
    def current_action_index(self) -> int:
        return self._current_action_index

    @property
    def actions(self) -> List[HistoryAction]:
        return list(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def can_undo(self) -> bool:
        return self._can_undo and not self._executing

    @can_undo.setter
    def can_undo(self, value: bool) -> None:
        if self._can_undo == value:
            return
        self._can_undo = value
        if not self._executing:
            self.emit("can_undo", value)

    @property
    def can_redo(self) -> bool:
        return self._can_redo and not self._executing

    @can_redo.setter
    def can_redo(self, value: bool) -> None:
        if self._can_redo == value:
            return
        self._can_redo = value
        if not self._executing:
            self.emit("can_redo", value)

    @property
    def executing(self) -> int:
        return self._executing

    @executing.setter
    def executing(self, value: int) -> None:
        if self._executing == value:
            return
        self._executing = value
        if self._executing:
            self.emit("can_undo", False)
            self.emit("can_redo", False)
        else:
            self.emit("can_undo", self._can_undo)
            self.emit("can_redo", self._can_redo)

    def _run(self, name: str, step: Callable[[], Any], label: str) -> bool:
        self.executing += 1
        try:
            step()
            return True
        except Exception:
            logging.exception(f"History {label} failed for action '{name}'")
            return False
        finally:
            self.executing -= 1

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def add(self, action: ActionLike) -> bool:
        """
        Push an action, discarding any redo branch.

        Returns:
            False if the action is missing a name, undo or redo.
        """
        action = _coerce_action(action)
        if action is None:
            return False

        if self._current_action_index != len(self._actions) - 1:
            del self._actions[self._current_action_index + 1 :]

        current = self.current_action
        if action.combine and current is not None and current.name == action.name:
            current.redo = action.redo
        else:
            self._actions.append(action)
            self._current_action_index = len(self._actions) - 1

        self.emit("add", action.name)
        self.can_undo = True
        self.can_redo = False
        return True

    def add_and_execute(self, action: ActionLike) -> bool:
        """Add ``action`` and run its ``redo``."""
        if not self.add(action):
            return False
        current = self.current_action
        return self._run(current.name, current.redo, "redo")

    def undo(self) -> None:
        if not self.can_undo:
            return

        action = self.current_action
        if not self._run(action.name, action.undo, "undo"):
            return

        self._current_action_index -= 1
        self.emit("undo", action.name)
        if self._current_action_index < 0:
            self.can_undo = False
        self.can_redo = True

    def redo(self) -> None:
        if not self.can_redo:
            return

        action = self._actions[self._current_action_index + 1]
        if not self._run(action.name, action.redo, "redo"):
            return

        self._current_action_index += 1
        self.emit("redo", action.name)
        self.can_undo = True
        if self._current_action_index == len(self._actions) - 1:
            self.can_redo = False

    def clear(self) -> None:
        if not self._actions:
            return
        self._actions.clear()
        self._current_action_index = -1
        self.can_undo = False
        self.can_redo = False
