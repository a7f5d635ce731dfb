"""
Tests for ObserverHistory, the adapter recording Observer mutations as undo steps.
"""

import pytest

from pathwatch import History, Observer, ObserverHistory


@pytest.mark.unit
@pytest.mark.history
class TestObserverHistoryRecording:
    """Test suite for what gets recorded."""

    def test_installs_itself_on_the_item(self, history):
        item = Observer()
        adapter = ObserverHistory(item=item, history=history)

        assert item.history is adapter
        assert adapter.enabled

    def test_does_not_replace_an_existing_recorder(self, history):
        item = Observer()
        first = ObserverHistory(item=item, history=history)
        ObserverHistory(item=item, history=History())

        assert item.history is first

    def test_one_action_per_scalar_set(self, tracked, history):
        tracked.set("name", "barrel")

        assert len(history) == 1
        assert history.current_action.name == "name"

    def test_object_set_records_one_action(self, tracked, history):
        """Per-leaf bookkeeping events are not recorded"""
        tracked.set("position", {"x": 5, "y": 6})

        assert len(history) == 1
        assert history.current_action.name == "position"

    def test_new_object_key_records_one_action(self, tracked, history):
        tracked.set("scale", {"x": 1, "y": 1, "z": 1})

        assert len(history) == 1

    def test_unset_object_records_one_action(self, tracked, history):
        tracked.unset("position")

        assert len(history) == 1

    def test_array_rewrite_records_one_action(self, tracked, history):
        tracked.set("tags", ["a", "b", "c"])

        assert len(history) == 1

    def test_prefix_and_combine(self, history):
        item = Observer({"x": 0})
        ObserverHistory(item=item, history=history, prefix="entity.", combine=True)

        item.set("x", 1)
        item.set("x", 2)
        item.set("x", 3)

        assert len(history) == 1
        assert history.current_action.name == "entity.x"

        history.undo()
        assert item.get("x") == 0
        history.redo()
        assert item.get("x") == 3

    def test_disabled_adapter_records_nothing(self, history):
        item = Observer({"x": 0})
        ObserverHistory(item=item, history=history, enabled=False)

        item.set("x", 1)

        assert len(history) == 0

    def test_silent_changes_are_not_recorded(self, tracked, history):
        tracked.set("name", "barrel", silent=True)
        with tracked.silenced():
            tracked.set("name", "keg")

        assert len(history) == 0
        assert tracked.history.enabled

    def test_destroy_stops_recording(self, tracked, history):
        adapter = tracked.history

        adapter.destroy()
        tracked.set("name", "barrel")

        assert len(history) == 0
        assert tracked.history is None
        assert adapter.item is None


@pytest.mark.unit
@pytest.mark.history
class TestObserverHistoryReplay:
    """Test suite for undo/redo of each mutation verb."""

    def test_set_round_trip(self, tracked, history):
        tracked.set("position.x", 10)

        history.undo()
        assert tracked.get("position.x") == 0

        history.redo()
        assert tracked.get("position.x") == 10

    def test_undo_of_new_key_unsets_it(self, tracked, history):
        tracked.set("visible", True)

        history.undo()
        assert not tracked.has("visible")

        history.redo()
        assert tracked.get("visible") is True

    def test_undo_of_new_object_key_unsets_it(self, tracked, history):
        tracked.set("scale", {"x": 2})

        history.undo()

        assert not tracked.has("scale")

    def test_undo_of_set_over_none_unsets_the_key(self, history):
        item = Observer({"a": None})
        ObserverHistory(item=item, history=history)

        item.set("a", 5)
        history.undo()

        assert not item.has("a")

    def test_undo_of_created_intermediates_removes_them(self, history):
        item = Observer()
        ObserverHistory(item=item, history=history)

        item.set("a.b", 1)

        assert [action.name for action in history.actions] == ["a"]
        history.undo()
        assert item.json() == {}
        history.redo()
        assert item.json() == {"a": {"b": 1}}

    def test_set_through_scalar_is_one_step(self, history):
        """Replacing a scalar intermediate records a single action"""
        item = Observer({"a": 1})
        ObserverHistory(item=item, history=history)

        item.set("a.b", 2)

        assert [action.name for action in history.actions] == ["a"]
        history.undo()
        assert item.json() == {"a": 1}
        history.redo()
        assert item.json() == {"a": {"b": 2}}

    def test_unset_round_trip(self, tracked, history):
        tracked.unset("position")

        history.undo()
        assert tracked.get("position") == {"x": 0, "y": 0}

        history.redo()
        assert not tracked.has("position")

    def test_insert_round_trip(self, tracked, history):
        tracked.insert("tags", "dynamic")

        history.undo()
        assert tracked.get("tags") == ["static"]

        history.redo()
        assert tracked.get("tags") == ["static", "dynamic"]

    def test_remove_round_trip(self, tracked, history):
        tracked.insert("tags", "dynamic")
        tracked.remove("tags", 0)

        history.undo()
        assert tracked.get("tags") == ["static", "dynamic"]

        history.redo()
        assert tracked.get("tags") == ["dynamic"]

    def test_move_round_trip(self, tracked, history):
        tracked.insert("tags", "dynamic")
        tracked.move("tags", 0, 1)

        history.undo()
        assert tracked.get("tags") == ["static", "dynamic"]

        history.redo()
        assert tracked.get("tags") == ["dynamic", "static"]

    def test_nested_child_change_round_trip(self, tracked, history):
        tracked.get_raw("children.0").set("name", "box")

        assert history.current_action.name == "children.0.name"

        history.undo()
        assert tracked.get("children.0.name") == "lid"

    def test_replay_is_not_recorded(self, tracked, history):
        tracked.set("name", "barrel")

        history.undo()
        history.redo()

        assert len(history) == 1
        assert tracked.history.enabled

    def test_replay_targets_latest_instance(self, history):
        stale = Observer({"x": 0})
        replacement = Observer({"x": 1})
        ObserverHistory(item=stale, history=history)

        stale.set("x", 1)
        stale.latest_fn = lambda: replacement
        history.undo()

        assert replacement.get("x") == 0
        assert stale.get("x") == 1

    def test_replay_is_skipped_when_item_is_gone(self, history):
        item = Observer({"x": 0})
        ObserverHistory(item=item, history=history)

        item.set("x", 1)
        item.latest_fn = lambda: None
        history.undo()

        assert item.get("x") == 1
        assert history.current_action_index == -1
