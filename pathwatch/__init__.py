"""
pathwatch - Observable JSON Trees with Undo
===========================================

A path-addressed, mutation-observing data model. Every change to an
``Observer`` tree becomes ``<path>:<verb>`` and ``*:<verb>`` events that
bubble up through nested observers, and an ``ObserverHistory`` can record those
changes into a ``History`` for undo/redo.
"""

from .events import EventEmitter, EventHandle
from .history import History, HistoryAction
from .observer import MUTATION_VERBS, ObjectNode, Observer, SilenceState
from .observer_history import ObserverHistory
from .observer_list import ObserverList
from .util.paths import clear_path_cache, set_path_cache_size
from .util.values import ValueKind, array_equals

__version__ = "0.1.0"

__all__ = [
    # Events
    "EventEmitter",
    "EventHandle",
    # Observable tree
    "Observer",
    "ObjectNode",
    "SilenceState",
    "MUTATION_VERBS",
    "ValueKind",
    "array_equals",
    # Collections
    "ObserverList",
    # Undo/redo
    "History",
    "HistoryAction",
    "ObserverHistory",
    # Configuration
    "set_path_cache_size",
    "clear_path_cache",
]
