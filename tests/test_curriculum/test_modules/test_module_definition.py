import pytest

from progression.core.errors import InvalidStructureError
from curriculum.modules.definition import (
    NPC,
    Manifest,
    ModuleConfig,
    ModuleDefinition,
    ObjectInteraction,
    WorldObject,
    define_module,
)
from curriculum.tasks.task import Task


def test_manifest_id_must_match():
    with pytest.raises(InvalidStructureError):
        ModuleDefinition(id="intro", config=ModuleConfig(manifest=Manifest(id="other", name="Other")))


def test_interactable_ids_are_unique():
    with pytest.raises(InvalidStructureError):
        define_module("intro", "Intro", interactables=(
            NPC(id="guide", name="Guide"),
            WorldObject(id="guide", name="Statue"),
        ))


def test_declared_tasks_include_npc_tasks_once(guide, write_intro):
    extra = Task(id="extra", name="Extra")
    module = define_module("intro", "Intro", tasks=(write_intro, extra), interactables=(guide,))

    assert [t.id for t in module.declared_tasks] == ["write_intro", "extra", "second_step"]
    assert module.get_task("second_step").name == "Second Step"
    assert module.get_task("nope") is None


def test_lookups(intro_module):
    board = WorldObject(id="board", name="Board", interaction=ObjectInteraction(component="NoticeBoard"))
    module = define_module("intro", "Intro", interactables=(*intro_module.interactables, board))

    assert module.name == "Intro"
    assert [n.id for n in module.npcs] == ["guide"]
    assert [o.id for o in module.objects] == ["board"]
    assert module.get_npc("guide").name == "Guide"
    assert module.get_npc("board") is None
    assert module.get_interactable("board").id == "board"
    assert module.unlock_requirement is None


def test_interactables_parse_by_type():
    module = ModuleDefinition.model_validate({
        "id": "intro",
        "config": {"manifest": {"id": "intro", "name": "Intro"}},
        "interactables": [
            {"type": "npc", "id": "guide", "name": "Guide", "position": {"x": 10, "y": 20}},
            {"type": "object", "id": "board", "name": "Board"},
        ],
    })

    assert isinstance(module.interactables[0], NPC)
    assert module.interactables[0].position.x == 10
    assert isinstance(module.interactables[1], WorldObject)
