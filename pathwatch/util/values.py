"""
Value Classification
====================

Tree values form a closed set of variants. The mutation engine dispatches on
the ``ValueKind`` of a value instead of probing its runtime shape ad hoc.

- SCALAR: None, bool, int, float, str (anything that is not a container)
- ARRAY:  a Python list
- OBJECT: a nested object record (``ObjectNode``) or a plain ``dict`` input
- NODE:   a nested ``Observer``

Equality follows JSON identity rules: scalars compare by value (``True`` is
never equal to ``1``), containers compare by identity, and arrays can be
compared element-wise with ``array_equals``.
"""

from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union


class ValueKind(Enum):
    """Classification of tree values for dispatch."""

    SCALAR = "scalar"
    ARRAY = "array"
    OBJECT = "object"
    NODE = "node"


# Bound by pathwatch.observer once its classes exist
_NODE_TYPES: Tuple[type, ...] = ()
_OBJECT_TYPES: Tuple[type, ...] = (dict,)


def register_node_types(node_type: type, object_type: type) -> None:
    """Tell ``kind_of`` which classes are nested observers and object records."""
    global _NODE_TYPES, _OBJECT_TYPES

    _NODE_TYPES = (node_type,)
    _OBJECT_TYPES = (object_type, dict)


def kind_of(value: Any) -> ValueKind:
    """Return the variant of a tree value."""
    if isinstance(value, _NODE_TYPES):
        return ValueKind.NODE
    if isinstance(value, list):
        return ValueKind.ARRAY
    if isinstance(value, _OBJECT_TYPES):
        return ValueKind.OBJECT
    return ValueKind.SCALAR


def is_container(value: Any) -> bool:
    return kind_of(value) is not ValueKind.SCALAR


def strict_equals(a: Any, b: Any) -> bool:
    """
    Identity for containers, value equality for scalars.

    Booleans only equal booleans, so ``strict_equals(True, 1)`` is False.
    """
    if a is b:
        return True
    if is_container(a) or is_container(b):
        return False
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    return type(a) is type(b) and a == b


def array_equals(a: Any, b: Any) -> bool:
    """Element-wise comparison of two lists, recursing into nested lists."""
    if not isinstance(a, list) or not isinstance(b, list):
        return False
    if len(a) != len(b):
        return False
    for left, right in zip(a, b):
        if isinstance(left, list) and isinstance(right, list):
            if not array_equals(left, right):
                return False
        elif not strict_equals(left, right):
            return False
    return True


def values_equal(a: Any, b: Any) -> bool:
    return strict_equals(a, b) or array_equals(a, b)


def index_of(items: list, value: Any) -> int:
    """Position of ``value`` in ``items`` using ``values_equal``, or -1."""
    for i, item in enumerate(items):
        if values_equal(item, value):
            return i
    return -1


def index_of_identity(items: list, value: Any) -> int:
    for i, item in enumerate(items):
        if item is value:
            return i
    return -1


def json_type_name(value: Any) -> str:
    """Name of the JSON type of ``value`` as reported by ``for_each``."""
    kind = kind_of(value)
    if kind is ValueKind.ARRAY:
        return "array"
    if kind is not ValueKind.SCALAR:
        return "object"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__.lower()


def schema_type_name(
    schema: Optional[Mapping[str, Union[str, type]]], path: str
) -> Optional[str]:
    """Type name a schema declares for ``path``, if any."""
    if not schema or path not in schema:
        return None
    declared = schema[path]
    if isinstance(declared, str):
        return declared.lower()
    if declared is list:
        return "array"
    if declared is dict:
        return "object"
    if declared is bool:
        return "boolean"
    if declared in (int, float):
        return "number"
    if declared is str:
        return "string"
    return declared.__name__.lower()
