"""
Shared pytest fixtures and configuration for pathwatch tests.
"""

import pytest

from pathwatch import History, Observer, ObserverHistory
from pathwatch.util.paths import DEFAULT_CACHE_SIZE, set_path_cache_size


class EventRecorder:
    """Collects ``(name, args)`` tuples from emitters it is attached to."""

    def __init__(self):
        self.events = []

    def listen(self, emitter, *names):
        for name in names:
            emitter.on(name, self._listener(name))
        return self

    def _listener(self, name):
        def record(*args):
            self.events.append((name, args))

        return record

    def named(self, name):
        return [args for event_name, args in self.events if event_name == name]

    def clear(self):
        self.events = []

    def __len__(self):
        return len(self.events)


@pytest.fixture(autouse=True)
def reset_path_cache():
    """Start every test with a fresh path cache to prevent state leakage."""
    set_path_cache_size(DEFAULT_CACHE_SIZE)


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def history():
    """Provide a fresh History instance."""
    return History()


@pytest.fixture
def tracked(history):
    """An observer whose mutations are recorded into ``history``."""
    item = Observer(
        {
            "name": "crate",
            "position": {"x": 0, "y": 0},
            "tags": ["static"],
            "children": [{"name": "lid"}],
        }
    )
    ObserverHistory(item=item, history=history)
    return item
