"""
pathwatch Observer - Path-Addressed Observable Trees
====================================================

This module provides ``Observer``, a JSON-like value tree where every mutation
is turned into events.

Values are addressed by dot-delimited paths (``"position.x"``, ``"items.2"``).
Each effective change emits two events on the observer that owns the mutated
key: a path-specific one (``"position.x:set"``) and a wildcard one
(``"*:set"``) that carries the path as its first argument.

Event Payloads
--------------

| verb   | ``<path>:<verb>``                  | ``*:<verb>``                              |
|--------|------------------------------------|-------------------------------------------|
| set    | value, value_old, remote           | path, value, value_old, remote            |
| unset  | value_old, remote                  | path, value_old, remote                   |
| insert | value, index, remote               | path, value, index, remote                |
| remove | value, index, remote               | path, value, index, remote                |
| move   | value, index_new, index_old, remote| path, value, index_new, index_old, remote |

``remote`` is passed through untouched so listeners can tell local changes
from changes that arrived from elsewhere.

Nesting
-------

Plain ``dict`` values become ``ObjectNode`` records owned by the observer.
``dict`` elements of arrays become child ``Observer`` instances, and an
``Observer`` can also be stored directly under an object key. A child observer
re-emits its mutations on its parent with the path rebased, so the root sees
``"*:set"`` with ``"items.0.name"`` when the first item's name changes.

Silencing
---------

``silence()`` stops an observer from dispatching events and disables any
attached ``history``/``sync`` collaborator until ``silence_restore()``.
Bookkeeping events (the per-leaf events of a prepared object, per-index events
of an array rewrite, the unset cascade) still reach listeners but are emitted
with recording suspended, so a history adapter records only the outermost
change of each call.

Example
-------

```python
from pathwatch import Observer

obs = Observer({"a": 1, "b": [1, 2, 3]})
obs.on("a:set", lambda value, old, remote: print(old, "->", value))

obs.set("a", 2)        # prints: 1 -> 2
obs.insert("b", 4)     # [1, 2, 3, 4]
obs.remove("b", 0)     # [2, 3, 4]
obs.json()             # {"a": 2, "b": [2, 3, 4]}
```
"""

import logging
import weakref
from contextlib import contextmanager
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)

from .events import EventEmitter
from .util.paths import join_path, split_path
from .util.values import (
    ValueKind,
    array_equals,
    index_of,
    index_of_identity,
    json_type_name,
    kind_of,
    register_node_types,
    schema_type_name,
    strict_equals,
    values_equal,
)

MUTATION_VERBS = ("set", "unset", "insert", "remove", "move")

# Sentinel for "no value at this path"
_MISSING = object()

# Sentinel returned by _do_insert when a duplicate is rejected
_REJECTED = object()


class SilenceState(NamedTuple):
    """Flags captured by ``silence()`` and restored by ``silence_restore()``."""

    silent: bool
    history: bool
    sync: bool


class ObjectNode:
    """
    A nested plain object inside an observer.

    Holds its keys in insertion order and its path relative to the owning
    observer. It has no events of its own; the owning observer emits for it.
    """

    __slots__ = ("_path", "_keys", "_data")

    def __init__(self, path: str = ""):
        self._path = path
        self._keys: List[str] = []
        self._data: Dict[str, Any] = {}

    @property
    def path(self) -> str:
        return self._path

    def keys(self) -> List[str]:
        return list(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"ObjectNode({self._path!r}, keys={self._keys!r})"


class _Target(NamedTuple):
    owner: "Observer"
    node: Any
    path: str
    key: str
    node_path: str
    rest: Tuple[str, ...] = ()


def _is_branch(value: Any) -> bool:
    return isinstance(value, (Observer, ObjectNode))


def _to_index(part: str) -> Optional[int]:
    try:
        index = int(part)
    except (TypeError, ValueError):
        return None
    return index if index >= 0 else None


class Observer(EventEmitter):
    """
    An observable JSON-like tree.

    Args:
        data: Initial value, applied with ``patch()``.
        parent: Observer that receives this observer's re-based events.
        parent_path: Path of the containing field inside ``parent``.
        parent_field: The list holding this observer, when it is an array element.
        parent_key: The key holding this observer, when it is an object value.
        latest_fn: Returns the live instance of this observer (see ``latest()``).
        paths_with_duplicates: Array paths that accept duplicate values.
        schema: Mapping of path to type (or type name) overriding ``for_each`` types.

    Attributes:
        history: Optional recorder exposing ``enabled``, usually an ObserverHistory.
        sync: Optional synchronizer exposing ``enabled``.
    """

    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        *,
        parent: Optional["Observer"] = None,
        parent_path: str = "",
        parent_field: Optional[list] = None,
        parent_key: Optional[Union[str, int]] = None,
        latest_fn: Optional[Callable[[], Optional["Observer"]]] = None,
        paths_with_duplicates: Optional[Iterable[str]] = None,
        schema: Optional[Mapping[str, Union[str, type]]] = None,
    ) -> None:
        super().__init__()
        self._destroyed = False
        self._path = ""
        self._keys: List[str] = []
        self._data: Dict[str, Any] = {}
        self._paths_with_duplicates = (
            frozenset(paths_with_duplicates) if paths_with_duplicates else None
        )
        self._silent = False
        self._muted = False
        self.history: Any = None
        self.sync: Any = None
        self.schema = schema

        self._parent: Optional[weakref.ref] = None
        self._parent_path = parent_path
        self._parent_field = parent_field
        self._parent_key = parent_key
        self._latest_fn = latest_fn

        self.patch(data)

        if parent is not None:
            self._attach(parent, parent_path, parent_field, parent_key)

        for verb in MUTATION_VERBS:
            self.on(f"*:{verb}", self._propagator(verb))

    # ------------------------------------------------------------------
    # Parent linkage
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Optional["Observer"]:
        return self._parent() if self._parent is not None else None

    @property
    def parent_path(self) -> str:
        return self._parent_path

    @property
    def parent_key(self) -> Optional[Union[str, int]]:
        return self._parent_key

    @property
    def path(self) -> str:
        return self._path

    def _attach(
        self,
        parent: "Observer",
        parent_path: str,
        parent_field: Optional[list] = None,
        parent_key: Optional[Union[str, int]] = None,
    ) -> None:
        self._parent = weakref.ref(parent)
        self._parent_path = parent_path
        self._parent_field = parent_field
        self._parent_key = parent_key

    def _detach(self) -> None:
        self._parent = None
        self._parent_path = ""
        self._parent_field = None
        self._parent_key = None

    def _propagator(self, verb: str) -> Callable[..., None]:
        def propagate(path: str, *args: Any) -> None:
            parent = self.parent
            if parent is None:
                return

            key = self._parent_key
            if key is None and isinstance(self._parent_field, list):
                # Array positions shift, so the index is looked up on every event
                key = index_of_identity(self._parent_field, self)
                if key == -1:
                    logging.debug(
                        f"Dropping '{verb}' for '{path}': observer no longer in its parent array"
                    )
                    return

            rebased = join_path(self._parent_path, key, path)
            state = parent._mute_recording() if self._muted else None
            try:
                parent.emit(f"{rebased}:{verb}", *args)
                parent.emit(f"*:{verb}", rebased, *args)
            finally:
                if state is not None:
                    parent._restore_recording(state)

        return propagate

    # ------------------------------------------------------------------
    # Silencing
    # ------------------------------------------------------------------

    @staticmethod
    def _disable(collaborator: Any) -> bool:
        if collaborator is not None and getattr(collaborator, "enabled", False):
            collaborator.enabled = False
            return True
        return False

    def _enable(self, state: SilenceState) -> None:
        if state.history and self.history is not None:
            self.history.enabled = True
        if state.sync and self.sync is not None:
            self.sync.enabled = True

    def silence(self) -> SilenceState:
        """
        Stop dispatching events and disable ``history``/``sync``.

        Returns:
            The state to hand back to ``silence_restore()``.
        """
        state = SilenceState(
            self._silent, self._disable(self.history), self._disable(self.sync)
        )
        self._silent = True
        return state

    def silence_restore(self, state: SilenceState) -> None:
        """Undo a ``silence()`` call, re-enabling whatever it disabled."""
        self._silent = state.silent
        self._enable(state)

    @contextmanager
    def silenced(self) -> Iterator["Observer"]:
        state = self.silence()
        try:
            yield self
        finally:
            self.silence_restore(state)

    def _mute_recording(self) -> SilenceState:
        state = SilenceState(
            self._muted, self._disable(self.history), self._disable(self.sync)
        )
        self._muted = True
        return state

    def _restore_recording(self, state: SilenceState) -> None:
        self._muted = state.silent
        self._enable(state)

    @contextmanager
    def _recording_muted(self) -> Iterator[None]:
        state = self._mute_recording()
        try:
            yield
        finally:
            self._restore_recording(state)

    @property
    def silent(self) -> bool:
        return self._silent

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def emit(self, name: str, *args: Any) -> "Observer":
        if self._destroyed or self._silent:
            return self
        super().emit(name, *args)
        return self

    def _emit_change(
        self, verb: str, path: str, *args: Any, silent: bool = False
    ) -> None:
        state = self.silence() if silent else None
        try:
            self.emit(f"{path}:{verb}", *args)
            self.emit(f"*:{verb}", path, *args)
        finally:
            if state is not None:
                self.silence_restore(state)

    # ------------------------------------------------------------------
    # Path resolution
    # ------------------------------------------------------------------

    def _resolve(self, path: str, stop_at_leaf: bool = False) -> Optional[_Target]:
        """
        Walk to the container of the last key of ``path``.

        Entering a nested observer makes it the owner, and the remaining path
        becomes relative to it. With ``stop_at_leaf``, a missing or scalar
        intermediate key ends the walk: the target is that key and
        ``rest`` holds the keys below it.
        """
        keys = split_path(path)
        key = keys[-1]
        node: Any = self
        owner = self
        node_path = ""
        start = 0

        for i, part in enumerate(keys[:-1]):
            if isinstance(node, list):
                index = _to_index(part)
                if index is None or index >= len(node):
                    return None
                node = node[index]
            elif _is_branch(node):
                child = node._data.get(part, _MISSING)
                if not _is_branch(child) and not isinstance(child, list):
                    if not stop_at_leaf:
                        return None
                    return _Target(
                        owner,
                        node,
                        ".".join(keys[start : i + 1]),
                        part,
                        node_path,
                        tuple(keys[i + 1 :]),
                    )
                node = child
            else:
                return None

            node_path = join_path(node_path, part)
            if isinstance(node, Observer):
                owner = node
                node_path = ""
                start = i + 1

        if not isinstance(node, list) and not _is_branch(node):
            return None
        return _Target(owner, node, ".".join(keys[start:]), key, node_path)

    def _resolve_array(self, path: str) -> Optional[_Target]:
        target = self._resolve(path)
        if target is None:
            return None
        node = target.node
        if not _is_branch(node) or not isinstance(node._data.get(target.key), list):
            return None
        return target

    def _lookup(self, path: str) -> Any:
        node: Any = self
        for part in split_path(path):
            if _is_branch(node):
                node = node._data.get(part, _MISSING)
            elif isinstance(node, list):
                index = _to_index(part)
                node = node[index] if index is not None and index < len(node) else _MISSING
            elif isinstance(node, Mapping):
                node = node.get(part, _MISSING)
            else:
                return _MISSING
            if node is _MISSING:
                return _MISSING
        return node

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get(self, path: str, raw: bool = False) -> Any:
        """
        Value at ``path``, or None if the path does not resolve.

        Args:
            path: Dot-delimited path.
            raw: Return the live stored value (ObjectNode, list, Observer)
                instead of a plain JSON copy.
        """
        node = self._lookup(path)
        if node is _MISSING:
            return None
        return node if raw else self.json(node)

    def get_raw(self, path: str) -> Any:
        return self.get(path, raw=True)

    def has(self, path: str) -> bool:
        """Whether ``path`` resolves. A key holding None counts as present."""
        return self._lookup(path) is not _MISSING

    def keys(self) -> List[str]:
        return list(self._keys)

    def json(self, target: Any = _MISSING) -> Any:
        """
        Deep plain-data copy of this observer, or of ``target`` if given.

        Nested observers and object records become dicts, lists are copied.
        """
        node = self if target is _MISSING else target
        if _is_branch(node):
            return {key: self.json(node._data[key]) for key in node._keys}
        if isinstance(node, list):
            return [self.json(item) for item in node]
        if isinstance(node, Mapping):
            return {key: self.json(value) for key, value in node.items()}
        return node

    def for_each(
        self,
        fn: Callable[[str, str, Any, str], None],
        target: Any = None,
        path: str = "",
    ) -> None:
        """
        Depth-first walk over keys in insertion order.

        ``fn`` receives ``(path, type_name, value, key)`` where ``type_name``
        is ``"array"``, ``"object"`` or a JSON scalar type name, unless the
        schema declares another type for the path.
        """
        node = self if target is None else target
        for key in list(node._keys):
            value = node._data[key]
            key_path = f"{path}{key}"
            type_name = schema_type_name(self.schema, key_path) or json_type_name(value)
            fn(key_path, type_name, value, key)
            if type_name == "object" and _is_branch(value):
                self.for_each(fn, value, f"{key_path}.")

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _coerce_element(self, value: Any) -> Any:
        if isinstance(value, Observer):
            return value
        if isinstance(value, ObjectNode):
            return Observer(self.json(value))
        if isinstance(value, Mapping):
            return Observer(value)
        if isinstance(value, list):
            return list(value)
        return value

    def _detach_elements(self, value: Any) -> None:
        """Clear the back-reference of every child observer stored in ``value``."""
        if isinstance(value, Observer):
            if value.parent is self:
                value._detach()
        elif isinstance(value, ObjectNode):
            for item in value._data.values():
                self._detach_elements(item)
        elif isinstance(value, list):
            for item in value:
                self._detach_elements(item)

    def _prepare(
        self,
        target: Any,
        key: str,
        value: Any,
        silent: bool = False,
        remote: Any = None,
    ) -> bool:
        """Populate a key that does not exist yet on ``target``."""
        path = join_path(target._path, key)
        kind = kind_of(value)
        target._keys.append(key)

        if kind is ValueKind.ARRAY:
            items = list(value)
            target._data[key] = items
            with self._recording_muted():
                for i, item in enumerate(items):
                    item_kind = kind_of(item)
                    if item_kind is ValueKind.OBJECT:
                        if isinstance(item, ObjectNode):
                            item = self.json(item)
                        items[i] = Observer(
                            item, parent=self, parent_path=path, parent_field=items
                        )
                    elif item_kind is ValueKind.NODE:
                        item._attach(self, path, items)
                    elif item_kind is ValueKind.ARRAY:
                        items[i] = list(item)
                    else:
                        self._emit_change("set", join_path(path, i), item, None, remote)
            self._emit_change("set", path, self.json(items), None, remote, silent=silent)

        elif kind is ValueKind.OBJECT:
            if isinstance(value, ObjectNode):
                value = self.json(value)
            child = ObjectNode(path)
            target._data[key] = child
            with self._recording_muted():
                for child_key, child_value in value.items():
                    if kind_of(child_value) is ValueKind.SCALAR:
                        child._data[child_key] = child_value
                        child._keys.append(child_key)
                        self._emit_change(
                            "set", join_path(path, child_key), child_value, None, remote
                        )
                    else:
                        self._prepare(child, child_key, child_value, remote=remote)
            self._emit_change("set", path, self.json(child), None, remote, silent=silent)

        elif kind is ValueKind.NODE:
            target._data[key] = value
            value._attach(self, target._path, None, key)
            self._emit_change("set", path, value, None, remote, silent=silent)

        else:
            target._data[key] = value
            self._emit_change("set", path, value, None, remote, silent=silent)

        return True

    def set(
        self,
        path: str,
        value: Any,
        silent: bool = False,
        remote: Any = None,
        force: bool = False,
    ) -> bool:
        """
        Set the value at ``path``.

        Args:
            path: Dot-delimited path; missing intermediate objects are created.
            value: Scalar, list, dict or Observer.
            silent: Dispatch no events for this call's own change.
            remote: Tag passed through to listeners.
            force: Emit even if the value did not change.

        Returns:
            True if anything changed (or ``force`` was set), False otherwise.
        """
        target = self._resolve(path, stop_at_leaf=True)
        if target is None:
            return False
        owner, node, path, key, node_path, rest = target

        # Missing or scalar intermediates become one object set on the first of them
        for part in reversed(rest):
            value = {part: value}

        if isinstance(node, list):
            return owner._set_element(node, node_path, path, key, value, silent, remote, force)

        kind = kind_of(value)
        if key not in node._data:
            if kind is not ValueKind.SCALAR:
                return owner._prepare(node, key, value, silent, remote)
            node._data[key] = value
            node._keys.append(key)
            owner._emit_change("set", path, value, None, remote, silent=silent)
            return True

        if kind is ValueKind.ARRAY:
            return owner._set_array(node, path, key, value, silent, remote, force)
        if kind is ValueKind.OBJECT:
            return owner._set_object(node, path, key, value, silent, remote)
        return owner._set_value(node, path, key, value, silent, remote, force)

    def _set_element(
        self,
        items: list,
        items_path: str,
        path: str,
        key: str,
        value: Any,
        silent: bool,
        remote: Any,
        force: bool,
    ) -> bool:
        index = _to_index(key)
        if index is None or index > len(items):
            return False

        exists = index < len(items)
        current = items[index] if exists else None
        if exists and strict_equals(current, value) and not force:
            return False

        value_old = self.json(current)
        if exists and current is not value:
            self._detach_elements(current)

        element = self._coerce_element(value)
        if exists:
            items[index] = element
        else:
            items.append(element)
        if isinstance(element, Observer):
            element._attach(self, items_path, items)
            emitted = element
        else:
            emitted = self.json(element)

        self._emit_change("set", path, emitted, value_old, remote, silent=silent)
        return True

    def _set_array(
        self,
        node: Any,
        path: str,
        key: str,
        value: list,
        silent: bool,
        remote: Any,
        force: bool,
    ) -> bool:
        current = node._data[key]
        if array_equals(value, current) and not force:
            return False

        value_old = self.json(current)
        old_items = value_old if isinstance(value_old, list) else []

        if isinstance(current, list) and len(current) == len(value):
            with self._recording_muted():
                for i, incoming in enumerate(value):
                    existing = current[i]
                    if isinstance(existing, Observer) and isinstance(incoming, Mapping):
                        existing.patch(incoming, True)
                    elif not values_equal(existing, incoming):
                        if isinstance(existing, Observer):
                            existing._detach()
                        element = self._coerce_element(incoming)
                        current[i] = element
                        if isinstance(element, Observer):
                            element._attach(self, path, current)
                        self._emit_change(
                            "set",
                            join_path(path, i),
                            self.json(element),
                            old_items[i],
                            remote,
                        )
        else:
            self._detach_elements(current)
            node._data[key] = []
            for incoming in value:
                self._do_insert(node, key, incoming, None, True)
            with self._recording_muted():
                for i, element in enumerate(node._data[key]):
                    item_old = old_items[i] if i < len(old_items) else None
                    self._emit_change(
                        "set", join_path(path, i), self.json(element), item_old, remote
                    )

        self._emit_change(
            "set", path, self.json(node._data[key]), value_old, remote, silent=silent
        )
        return True

    def _set_object(
        self,
        node: Any,
        path: str,
        key: str,
        value: Any,
        silent: bool,
        remote: Any,
    ) -> bool:
        if isinstance(value, ObjectNode):
            value = self.json(value)

        current = node._data[key]
        value_old = self.json(current)
        changed = False

        with self._recording_muted():
            if not _is_branch(current):
                # Scalars and arrays are replaced by an empty object first
                self._unset_key(node, path, key, False, remote)
                node._data[key] = ObjectNode(path)
                node._keys.append(key)
                changed = True

            branch = node._data[key]
            for child_key in list(branch._keys):
                if child_key not in value:
                    if self.unset(join_path(path, child_key), remote=remote):
                        changed = True

            for child_key, child_value in value.items():
                if child_key in branch._data and values_equal(
                    branch._data[child_key], child_value
                ):
                    continue
                if self.set(join_path(path, child_key), child_value, remote=remote):
                    changed = True

        if changed:
            self._emit_change(
                "set", path, self.json(node._data[key]), value_old, remote, silent=silent
            )
        return changed

    def _set_value(
        self,
        node: Any,
        path: str,
        key: str,
        value: Any,
        silent: bool,
        remote: Any,
        force: bool,
    ) -> bool:
        current = node._data[key]
        if strict_equals(current, value) and not force:
            return False

        value_old = self.json(current)
        if current is not value:
            self._detach_elements(current)
        node._data[key] = value
        if isinstance(value, Observer):
            value._attach(self, node._path, None, key)

        self._emit_change("set", path, value, value_old, remote, silent=silent)
        return True

    def unset(self, path: str, silent: bool = False, remote: Any = None) -> bool:
        """
        Delete the key at ``path``.

        Nested object keys are unset first, deepest and last-inserted first,
        so listeners see every leaf disappear before its container.
        """
        target = self._resolve(path)
        if target is None:
            return False
        owner, node, path, key = target[:4]
        if not _is_branch(node) or key not in node._data:
            return False
        return owner._unset_key(node, path, key, silent, remote)

    def _unset_key(
        self, node: Any, path: str, key: str, silent: bool, remote: Any
    ) -> bool:
        current = node._data[key]
        value_old = self.json(current)

        if isinstance(current, ObjectNode):
            with self._recording_muted():
                for child_key in reversed(list(current._keys)):
                    self.unset(join_path(path, child_key), remote=remote)
        else:
            self._detach_elements(current)

        node._keys.remove(key)
        del node._data[key]
        self._emit_change("unset", path, value_old, remote, silent=silent)
        return True

    def insert(
        self,
        path: str,
        value: Any,
        ind: Optional[int] = None,
        silent: bool = False,
        remote: Any = None,
    ) -> Optional[bool]:
        """
        Insert ``value`` into the array at ``path``.

        Returns:
            None if ``path`` is not an array, False if the value was rejected
            as a duplicate, True otherwise.
        """
        target = self._resolve_array(path)
        if target is None:
            return None
        owner, node, path, key = target[:4]
        items = node._data[key]

        inserted = owner._do_insert(node, key, value, ind)
        if inserted is _REJECTED:
            return False

        last = len(items) - 1
        if ind is None:
            index = last
        elif ind < 0:
            index = max(0, last + ind)
        else:
            index = min(ind, last)

        owner._emit_change("insert", path, inserted, index, remote, silent=silent)
        return True

    def _do_insert(
        self,
        node: Any,
        key: str,
        value: Any,
        ind: Optional[int] = None,
        allow_duplicates: bool = False,
    ) -> Any:
        items = node._data[key]
        element = self._coerce_element(value)
        path = join_path(node._path, key)

        if (
            element is not None
            and not allow_duplicates
            and not self._allows_duplicates(path)
            and index_of(items, element) != -1
        ):
            return _REJECTED

        if ind is None:
            items.append(element)
        else:
            items.insert(ind, element)

        if isinstance(element, Observer):
            element._attach(self, path, items)
            return element
        return self.json(element)

    def _allows_duplicates(self, path: str) -> bool:
        return (
            self._paths_with_duplicates is not None
            and path in self._paths_with_duplicates
        )

    def remove(
        self, path: str, ind: int, silent: bool = False, remote: Any = None
    ) -> bool:
        """Remove the element at index ``ind`` of the array at ``path``."""
        target = self._resolve_array(path)
        if target is None:
            return False
        items = target.node._data[target.key]
        if not isinstance(ind, int) or not 0 <= ind < len(items):
            return False
        return target.owner._remove_at(items, target.path, ind, silent, remote)

    def remove_value(
        self, path: str, value: Any, silent: bool = False, remote: Any = None
    ) -> Optional[bool]:
        """Remove the first element of the array at ``path`` equal to ``value``."""
        target = self._resolve_array(path)
        if target is None:
            return None
        items = target.node._data[target.key]
        index = index_of(items, value)
        if index == -1:
            return None
        return target.owner._remove_at(items, target.path, index, silent, remote)

    def _remove_at(
        self, items: list, path: str, index: int, silent: bool, remote: Any
    ) -> bool:
        value = items.pop(index)
        if isinstance(value, Observer):
            # Detached, not materialized: the caller may still hold it
            value._detach()
        else:
            value = self.json(value)
        self._emit_change("remove", path, value, index, remote, silent=silent)
        return True

    def move(
        self,
        path: str,
        ind_old: int,
        ind_new: int,
        silent: bool = False,
        remote: Any = None,
    ) -> Optional[bool]:
        """Move an array element from ``ind_old`` to ``ind_new`` (-1 for the end)."""
        target = self._resolve_array(path)
        if target is None:
            return None
        items = target.node._data[target.key]

        count = len(items)
        if ind_old == ind_new:
            return None
        if not 0 <= ind_old < count or not (ind_new == -1 or 0 <= ind_new < count):
            return None

        value = items.pop(ind_old)
        if ind_new == -1:
            ind_new = len(items)
        items.insert(ind_new, value)

        owner = target.owner
        if not isinstance(value, Observer):
            value = owner.json(value)
        owner._emit_change("move", target.path, value, ind_new, ind_old, remote, silent=silent)
        return True

    def patch(self, data: Any, remove_missing_keys: bool = False) -> None:
        """
        Apply ``data`` key by key.

        Args:
            data: Mapping of top-level keys to values.
            remove_missing_keys: Unset own keys that are absent from ``data``.
        """
        if not isinstance(data, Mapping):
            return

        for key, value in data.items():
            if kind_of(value) is not ValueKind.SCALAR and key not in self._data:
                self._prepare(self, key, value)
            elif key not in self._data or not strict_equals(self._data[key], value):
                self.set(key, value)

        if remove_missing_keys:
            for key in list(self._keys):
                if key not in data:
                    self.unset(key)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def latest_fn(self) -> Optional[Callable[[], Optional["Observer"]]]:
        return self._latest_fn

    @latest_fn.setter
    def latest_fn(self, value: Optional[Callable[[], Optional["Observer"]]]) -> None:
        self._latest_fn = value

    def latest(self) -> Optional["Observer"]:
        """The live instance of this observer; ``self`` unless ``latest_fn`` is set."""
        return self._latest_fn() if self._latest_fn is not None else self

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def destroy(self) -> None:
        if self._destroyed:
            return
        EventEmitter.emit(self, "destroy")
        self._destroyed = True
        self.unbind()

    def __repr__(self) -> str:
        return f"Observer({self.json()!r})"


register_node_types(Observer, ObjectNode)
