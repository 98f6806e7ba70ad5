import json

import pytest

from progression.core.errors import HandlerNotFoundError, InvalidStructureError, TaskNotFoundError
from progression.resources.database import ContentDatabase
from curriculum.dialogue.actions import AcceptTask, CallHandler, OpenTaskSubmission, SetState
from curriculum.dialogue.conditions import StateCheckCondition, TaskActiveCondition
from curriculum.dialogue.tree import EntryResolver
from curriculum.modules.definition import NPC, WorldObject
from curriculum.modules.loader import ModuleLoader, build_validator, load_content
from curriculum.modules.registry import ModuleRegistry
from curriculum.tasks.task import TaskSubmission
from curriculum.unlock.requirements import AndRequirement, CustomRequirement, ModuleCompleteRequirement, PasswordRequirement


def module_doc(**extra):
    doc = {"id": "lab", "manifest": {"name": "Lab"}}
    doc.update(extra)
    return doc


def test_load_bundled_content(content_dir, registry):
    loaded = load_content(str(content_dir), registry)

    assert loaded == ["intro", "forest", "summit", "vault"]
    assert registry.get_registered_module_ids() == loaded

    intro = registry.get_module("intro")
    assert intro.name == "Welcome"
    assert intro.config.welcome.id == "intro_welcome"
    assert [t.id for t in intro.declared_tasks] == ["introduce_yourself", "pick_a_color"]

    guide = intro.get_npc("guide")
    assert [t.id for t in guide.tasks] == ["introduce_yourself", "pick_a_color"]
    assert isinstance(intro.get_interactable("notice_board"), WorldObject)


def test_bundled_dialogue_entry(content_dir, registry):
    load_content(str(content_dir), registry)
    tree = registry.get_module("intro").get_npc("guide").dialogue

    assert isinstance(tree.entry, EntryResolver)
    assert tree.entry.default == "hello"
    first, second = tree.entry.conditions
    assert isinstance(first.condition, TaskActiveCondition)
    assert first.node == "waiting"
    assert isinstance(second.condition, StateCheckCondition)
    assert second.condition.value is True

    hello = tree.get_node("hello")
    assert hello.choices["help"].actions == (SetState("met_guide", True),)
    assert tree.get_node("offer").choices["accept"].actions == (AcceptTask("introduce_yourself"),)
    assert tree.get_node("waiting").choices["submit"].actions == (OpenTaskSubmission("introduce_yourself"),)


def test_bundled_requirements(content_dir, registry):
    load_content(str(content_dir), registry)

    forest = registry.get_module("forest").unlock_requirement
    assert isinstance(forest, ModuleCompleteRequirement)
    assert forest.module_id == "intro"

    vault = registry.get_module("vault")
    assert isinstance(vault.unlock_requirement, PasswordRequirement)
    assert vault.unlock_requirement.hint == "The ranger's favorite tree"
    assert vault.config.worldmap.icon.shape == "diamond"
    assert vault.config.worldmap.icon.size == 48


def test_bundled_validators(content_dir, registry):
    load_content(str(content_dir), registry)
    intro = registry.get_module("intro")

    introduce = intro.get_task("introduce_yourself")
    assert not introduce.validate_submission(TaskSubmission.of_text("Hi there")).solved
    assert introduce.validate_submission(TaskSubmission.of_text("Hi there, I like painting birds")).solved

    color = intro.get_task("pick_a_color")
    assert color.submission.options == ("red", "blue", "green")
    assert color.validate_submission(TaskSubmission.of_choice("blue")).solved
    assert color.validate_submission(TaskSubmission.of_choice("red")).reason == "incorrect"


def test_custom_check_bound_by_id(handlers):
    handlers.register_check("has_lantern", lambda ctx: True)
    loader = ModuleLoader(handlers)

    module = loader.build_module(module_doc(
        unlock_requirement={
            "type": "and",
            "requirements": [
                {"type": "module-complete", "module_id": "intro"},
                {"type": "custom", "check": "has_lantern", "description": "Carry a lantern"},
            ],
        },
    ))

    assert isinstance(module.unlock_requirement, AndRequirement)
    custom = module.unlock_requirement.requirements[1]
    assert isinstance(custom, CustomRequirement)
    assert custom.check is handlers.get_check("has_lantern")
    assert custom.description == "Carry a lantern"


def test_custom_condition_bound_inside_requirement_condition(handlers):
    handlers.register_check("sunny", lambda ctx: True)
    loader = ModuleLoader(handlers)

    condition = loader.build_condition({
        "type": "requirement",
        "requirement": {"type": "or", "requirements": [{"type": "custom", "check": "sunny"}]},
    })

    assert condition.requirement.requirements[0].check is handlers.get_check("sunny")


def test_missing_check_handler(handlers):
    doc = module_doc(unlock_requirement={"type": "custom", "check": "nowhere"})

    with pytest.raises(HandlerNotFoundError):
        ModuleLoader(handlers).build_module(doc)


def test_unloadable_module_is_skipped(tmp_path, handlers):
    modules_dir = tmp_path / "modules"
    modules_dir.mkdir()
    (modules_dir / "01_lab.json").write_text(json.dumps(
        module_doc(unlock_requirement={"type": "custom", "check": "nowhere"})
    ))
    (modules_dir / "02_ok.json").write_text(json.dumps({"id": "ok", "manifest": {"name": "Ok"}}))

    database = ContentDatabase(tmp_path)
    database.load_all()
    registry = ModuleRegistry()

    assert ModuleLoader(handlers).load_database(database, registry) == ["ok"]
    assert "lab" not in registry


def test_unknown_npc_task():
    doc = module_doc(interactables=[{"type": "npc", "id": "npc", "name": "Npc", "tasks": ["ghost"]}])

    with pytest.raises(TaskNotFoundError):
        ModuleLoader().build_module(doc)


def test_npc_with_plain_entry():
    doc = module_doc(
        tasks=[{"id": "t1", "name": "T1"}],
        interactables=[{
            "type": "npc",
            "id": "npc",
            "name": "Npc",
            "tasks": ["t1"],
            "greeting": {"id": "npc_hi", "lines": ["Hi"]},
            "dialogue": {"entry": "start", "nodes": [{"id": "start", "lines": ["Hello"]}]},
        }],
    )

    module = ModuleLoader().build_module(doc)
    npc = module.get_npc("npc")

    assert isinstance(npc, NPC)
    assert npc.dialogue.entry == "start"
    assert npc.greeting.id == "npc_hi"
    assert module.declared_tasks == [npc.tasks[0]]


def test_call_action_requires_registered_handler(handlers):
    loader = ModuleLoader(handlers)

    with pytest.raises(HandlerNotFoundError):
        loader.build_action({"type": "call", "handler": "ring_bell"})

    handlers.register_action("ring_bell", lambda ctx: None)
    assert loader.build_action({"type": "call", "handler": "ring_bell"}) == CallHandler("ring_bell")


def test_unknown_action_type():
    with pytest.raises(InvalidStructureError):
        ModuleLoader().build_action({"type": "dance"})


def test_build_validator_combinations():
    assert build_validator(None) is None
    assert build_validator({}) is None
    assert build_validator({"keywords": []}) is None

    combined = build_validator({"min_length": 10, "keywords": ["bark"]})
    assert combined(TaskSubmission.of_text("bark")).reason == "too_short"
    assert combined(TaskSubmission.of_text("smooth leaves only")).reason == "missing_keywords"
    assert combined(TaskSubmission.of_text("rough bark everywhere")).solved
