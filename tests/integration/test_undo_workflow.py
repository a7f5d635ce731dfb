"""
Integration tests: observers, collections and history working together the
way an editor drives them.
"""

import pytest

from pathwatch import EventEmitter, History, Observer, ObserverHistory, ObserverList


def by_id(a, b):
    return (a.get("id") > b.get("id")) - (a.get("id") < b.get("id"))


@pytest.fixture
def scene(history):
    """An indexed list of entities sharing one history."""
    entities = ObserverList(index="id", sorted=by_id)
    for entity_id, name in ((2, "Camera"), (1, "Light")):
        entity = Observer(
            {"id": entity_id, "name": name, "position": [0, 0, 0], "components": {}}
        )
        ObserverHistory(item=entity, history=history, prefix=f"entity.{entity_id}.")
        entities.add(entity)
    return entities


@pytest.mark.integration
def test_edits_across_entities_undo_in_reverse_order(scene, history):
    light = scene.get(1)
    camera = scene.get(2)

    light.set("name", "Sun")
    camera.set("position", [0, 5, 10])
    light.set("components.script", {"enabled": True})

    assert [action.name for action in history.actions] == [
        "entity.1.name",
        "entity.2.position",
        "entity.1.components.script",
    ]

    history.undo()
    assert light.get("components") == {}

    history.undo()
    assert camera.get("position") == [0, 0, 0]

    history.undo()
    assert light.get("name") == "Light"
    assert not history.can_undo

    for _ in range(3):
        history.redo()

    assert light.json() == {
        "id": 1,
        "name": "Sun",
        "position": [0, 0, 0],
        "components": {"script": {"enabled": True}},
    }
    assert camera.get("position") == [0, 5, 10]


@pytest.mark.integration
def test_sorted_index_order_is_kept(scene):
    assert [entity.get("name") for entity in scene] == ["Light", "Camera"]


@pytest.mark.integration
def test_drag_combines_into_one_step(history):
    """A stream of edits to the same path becomes one undo step"""
    gizmo = Observer({"position": {"x": 0, "y": 0}})
    ObserverHistory(item=gizmo, history=history, combine=True)

    for x in range(1, 6):
        gizmo.set("position.x", x)

    assert len(history) == 1

    history.undo()
    assert gizmo.get("position") == {"x": 0, "y": 0}

    history.redo()
    assert gizmo.get("position") == {"x": 5, "y": 0}


@pytest.mark.integration
def test_remote_changes_can_be_kept_out_of_history(history):
    """A sync layer applies remote edits with the recorder disabled"""
    doc = Observer({"title": "draft"})
    adapter = ObserverHistory(item=doc, history=history)

    doc.set("title", "local")
    adapter.enabled = False
    doc.set("title", "remote", remote=True)
    adapter.enabled = True

    assert len(history) == 1
    assert history.current_action.name == "title"


@pytest.mark.integration
def test_array_of_child_observers_full_cycle(history, recorder):
    root = Observer({"layers": [{"name": "base"}]})
    ObserverHistory(item=root, history=history)
    recorder.listen(root, "*:insert", "*:remove", "*:set")

    root.insert("layers", {"name": "overlay"})
    root.get_raw("layers.1").set("name", "hud")
    root.remove("layers", 0)

    assert root.json() == {"layers": [{"name": "hud"}]}
    assert [event for event, _ in recorder.events] == ["*:insert", "*:set", "*:remove"]

    history.undo()
    assert root.json() == {"layers": [{"name": "base"}, {"name": "hud"}]}

    history.undo()
    assert root.get("layers.1.name") == "overlay"

    history.undo()
    assert root.json() == {"layers": [{"name": "base"}]}
    assert len(history) == 3


@pytest.mark.integration
def test_events_forward_to_an_application_bus():
    bus = EventEmitter()
    seen = []
    bus.on("*:set", lambda path, value, old, remote: seen.append((path, value)))

    doc = Observer({"a": {"b": 1}})
    doc.add_emitter(bus)
    doc.set("a.b", 2)

    assert seen == [("a.b", 2)]


@pytest.mark.integration
def test_history_ui_state_tracks_flags():
    history = History()
    doc = Observer({"x": 0})
    ObserverHistory(item=doc, history=history)
    buttons = {"undo": False, "redo": False}
    history.on("can_undo", lambda value: buttons.update(undo=value))
    history.on("can_redo", lambda value: buttons.update(redo=value))

    doc.set("x", 1)
    assert buttons == {"undo": True, "redo": False}

    history.undo()
    assert buttons == {"undo": False, "redo": True}

    history.redo()
    assert buttons == {"undo": True, "redo": False}
