"""
pathwatch ObserverList - Flat Observable Collections
====================================================

``ObserverList`` is an ordered collection of observers or plain values, kept
apart from the path model of ``Observer``. It is meant for flat registries
such as "all entities in the scene".

Two options shape it:

- ``sorted``: a three-way comparator ``fn(a, b) -> -1 | 0 | 1``. Items are
  inserted at their binary-search position.
- ``index``: a field name. Items are additionally kept in a dict keyed by that
  field, no two items may share a value, and ``get``/``remove_by_key`` address
  items by it.

Events
------

- ``add``: ``(item, index, position)``, plus ``add[<id>]`` when indexed
- ``remove``: ``(item, index)``
- ``move``: ``(item, position)``

```python
from pathwatch import Observer, ObserverList

def by_id(a, b):
    return (a.get("id") > b.get("id")) - (a.get("id") < b.get("id"))

entities = ObserverList(index="id", sorted=by_id)
entities.on("add[42]", lambda item, index, pos: print("entity 42 is here"))
entities.add(Observer({"id": 42, "name": "Box"}))
entities.get(42).get("name")  # "Box"
```
"""

from functools import cmp_to_key
from typing import Any, Callable, Dict, List, Optional, Tuple

from .events import EventEmitter
from .observer import Observer

Comparator = Callable[[Any, Any], int]


class ObserverList(EventEmitter):
    """
    Ordered, optionally sorted and indexed collection.

    Args:
        sorted: Three-way comparator keeping the list ordered on ``add``.
        index: Field used to key items.
    """

    def __init__(
        self, sorted: Optional[Comparator] = None, index: Optional[str] = None
    ) -> None:
        super().__init__()
        self.data: List[Any] = []
        self._indexed: Dict[Any, Any] = {}
        self.sorted = sorted
        self.index = index

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self):
        return iter(list(self.data))

    @property
    def length(self) -> int:
        return len(self.data)

    def _key_of(self, item: Any) -> Any:
        """Value of the index field of ``item``."""
        if isinstance(item, Observer):
            return item.get(self.index)
        if isinstance(item, dict):
            return item.get(self.index)
        return getattr(item, self.index, None)

    def _position_of(self, item: Any) -> int:
        for i, existing in enumerate(self.data):
            if existing is item:
                return i
        return -1

    def get(self, index: Any) -> Any:
        """Item by index field value (indexed lists) or by position."""
        if self.index:
            return self._indexed.get(index)
        if isinstance(index, int) and 0 <= index < len(self.data):
            return self.data[index]
        return None

    def set(self, index: Any, value: Any) -> None:
        if self.index:
            self._indexed[index] = value
        elif isinstance(index, int) and 0 <= index < len(self.data):
            self.data[index] = value
        elif index == len(self.data):
            self.data.append(value)

    def index_of(self, item: Any) -> Any:
        """Index field value (indexed lists) or position of ``item``, or None."""
        if self.index:
            key = self._key_of(item)
            return key if key in self._indexed else None
        position = self._position_of(item)
        return position if position != -1 else None

    def position(self, value: Any, fn: Optional[Comparator] = None) -> int:
        """Binary search for an exact match of ``value``; -1 if absent."""
        fn = fn or self.sorted
        if fn is None:
            raise TypeError("position() needs a comparator or a sorted list")

        low, high = 0, len(self.data) - 1
        while low <= high:
            current = (low + high) // 2
            order = fn(self.data[current], value)
            if order == 1:
                high = current - 1
            elif order == -1:
                low = current + 1
            else:
                return current
        return -1

    def position_next_closest(self, value: Any, fn: Optional[Comparator] = None) -> int:
        """
        Insertion point for ``value`` in the sorted list.

        Returns -1 when ``value`` sorts after every item.
        """
        fn = fn or self.sorted
        if fn is None:
            raise TypeError("position_next_closest() needs a comparator or a sorted list")

        items = self.data
        if not items:
            return -1
        if fn(items[0], value) == 0:
            return 0

        low, high = 0, len(items) - 1
        current = 0
        while low <= high:
            current = (low + high) // 2
            order = fn(items[current], value)
            if order == 1:
                high = current - 1
            elif order == -1:
                low = current + 1
            else:
                return current

        if fn(items[current], value) == 1:
            return current
        if current + 1 == len(items):
            return -1
        return current + 1

    def has(self, item: Any) -> bool:
        if self.index:
            return self._key_of(item) in self._indexed
        return self._position_of(item) != -1

    def add(self, item: Any) -> Optional[int]:
        """
        Add ``item`` unless it is already present.

        Returns:
            The position the item was placed at, or None if it was rejected.
        """
        if self.has(item):
            return None

        index: Any = len(self.data)
        if self.index:
            index = self._key_of(item)
            self._indexed[index] = item

        if self.sorted:
            position = self.position_next_closest(item)
            if position != -1:
                self.data.insert(position, item)
            else:
                self.data.append(item)
                position = len(self.data) - 1
        else:
            self.data.append(item)
            position = len(self.data) - 1

        self.emit("add", item, index, position)
        if self.index and index is not None:
            self.emit(f"add[{index}]", item, index, position)

        return position

    def move(self, item: Any, pos: int) -> None:
        """Move ``item`` to position ``pos``; -1 moves it to the end."""
        current = self._position_of(item)
        if current == -1:
            return
        item = self.data.pop(current)
        if pos == -1:
            self.data.append(item)
        else:
            self.data.insert(pos, item)
        self.emit("move", item, pos)

    def remove(self, item: Any) -> None:
        if not self.has(item):
            return

        index: Any
        if self.index:
            index = self._key_of(item)
            item = self._indexed.pop(index)
            position = self._position_of(item)
        else:
            position = self._position_of(item)
            index = position

        if position != -1:
            del self.data[position]
        self.emit("remove", item, index)

    def remove_by_key(self, index: Any) -> None:
        """Remove by index field value (indexed lists) or by position."""
        if self.index:
            item = self._indexed.pop(index, None)
            if item is None:
                return
            position = self._position_of(item)
            if position != -1:
                del self.data[position]
            self.emit("remove", item, position)
        else:
            if not isinstance(index, int) or not 0 <= index < len(self.data):
                return
            item = self.data.pop(index)
            self.emit("remove", item, index)

    def remove_by(self, fn: Callable[[Any], bool]) -> None:
        """Remove every item for which ``fn`` returns true, last first."""
        for i in range(len(self.data) - 1, -1, -1):
            item = self.data[i]
            if not fn(item):
                continue
            if self.index:
                self._indexed.pop(self._key_of(item), None)
            del self.data[i]
            self.emit("remove", item, i)

    def clear(self) -> None:
        items = self.data
        self.data = []
        self._indexed = {}
        for i in range(len(items) - 1, -1, -1):
            self.emit("remove", items[i], i)

    def _key_or_position(self, item: Any, position: int) -> Any:
        return self._key_of(item) if self.index else position

    def for_each(self, fn: Callable[[Any, Any], None]) -> None:
        for i, item in enumerate(list(self.data)):
            fn(item, self._key_or_position(item, i))

    def find(self, fn: Callable[[Any], bool]) -> List[Tuple[Any, Any]]:
        """All ``(key, item)`` pairs for which ``fn(item)`` is true."""
        return [
            (self._key_or_position(item, i), item)
            for i, item in enumerate(self.data)
            if fn(item)
        ]

    def find_one(self, fn: Callable[[Any], bool]) -> Optional[Tuple[Any, Any]]:
        for i, item in enumerate(self.data):
            if fn(item):
                return (self._key_or_position(item, i), item)
        return None

    def map(self, fn: Callable[[Any], Any]) -> List[Any]:
        return [fn(item) for item in self.data]

    def sort(self, fn: Comparator) -> None:
        self.data.sort(key=cmp_to_key(fn))

    def array(self) -> List[Any]:
        return list(self.data)

    def json(self) -> List[Any]:
        return [item.json() if isinstance(item, Observer) else item for item in self.data]
