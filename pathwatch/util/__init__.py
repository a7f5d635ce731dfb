"""
pathwatch Utils - Path and Value Helpers
========================================

Classes and functions shared by the observer modules.

- split_path / join_path: cached dot-path handling
- ValueKind / kind_of: tagged classification of tree values
- strict_equals / array_equals: JSON-style equality
"""

from .paths import (
    DEFAULT_CACHE_SIZE,
    clear_path_cache,
    join_path,
    path_cache_info,
    set_path_cache_size,
    split_path,
)
from .values import (
    ValueKind,
    array_equals,
    index_of,
    index_of_identity,
    is_container,
    json_type_name,
    kind_of,
    register_node_types,
    schema_type_name,
    strict_equals,
    values_equal,
)

__all__ = [
    "DEFAULT_CACHE_SIZE",
    "clear_path_cache",
    "join_path",
    "path_cache_info",
    "set_path_cache_size",
    "split_path",
    "ValueKind",
    "array_equals",
    "index_of",
    "index_of_identity",
    "is_container",
    "json_type_name",
    "kind_of",
    "register_node_types",
    "schema_type_name",
    "strict_equals",
    "values_equal",
]
