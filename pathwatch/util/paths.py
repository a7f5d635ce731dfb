"""
Path Splitting
==============

Dot-delimited paths are split through a process-wide LRU cache keyed by the
literal path string. The key space is the set of schema paths used in-process,
so a bounded cache keeps hot paths resident without growing with user data.
"""

import threading
from typing import List

from cachetools import LRUCache

DEFAULT_CACHE_SIZE = 4096

_cache: LRUCache = LRUCache(maxsize=DEFAULT_CACHE_SIZE)
_lock = threading.RLock()


def split_path(path: str) -> List[str]:
    """
    Split ``path`` on ``.``.

    Returns a fresh list on every call so callers may mutate it.
    """
    with _lock:
        parts = _cache.get(path)
        if parts is None:
            parts = tuple(path.split("."))
            _cache[path] = parts
    return list(parts)


def join_path(*segments) -> str:
    """Join path segments with ``.``, skipping empty ones."""
    return ".".join(str(s) for s in segments if s is not None and s != "")


def set_path_cache_size(maxsize: int) -> None:
    """Replace the path cache with an empty one holding at most ``maxsize`` paths."""
    global _cache

    if not isinstance(maxsize, int) or maxsize < 1:
        raise ValueError(f"Path cache size must be a positive integer, got {maxsize!r}")
    with _lock:
        _cache = LRUCache(maxsize=maxsize)


def clear_path_cache() -> None:
    with _lock:
        _cache.clear()


def path_cache_info() -> dict:
    with _lock:
        return {"size": len(_cache), "maxsize": _cache.maxsize}
