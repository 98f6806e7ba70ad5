import asyncio

import pytest

from progression.core.config import EngineConfig
from progression.core.events import ProgressionEvent
from progression.state.progression import ModuleProgressionState
from curriculum.modules.definition import NPC, define_module
from curriculum.modules.registry import ModuleRegistry
from curriculum.runtime import Curriculum
from curriculum.tasks.task import Task
from curriculum.unlock.requirements import all_of, module_complete, password, state_check

LOCKED = ModuleProgressionState.LOCKED
UNLOCKED = ModuleProgressionState.UNLOCKED
COMPLETED = ModuleProgressionState.COMPLETED

run = asyncio.run


@pytest.fixture
def summit_module():
    return define_module(
        "summit", "Summit",
        tasks=(Task(id="reflect", name="Reflect"),),
        unlock_requirement=module_complete("forest"),
    )


@pytest.fixture
def three(intro_module, forest_module, summit_module, event_bus):
    return Curriculum(registry=ModuleRegistry([intro_module, forest_module, summit_module]), events=event_bus)


def test_default_initialization_unlocks_first_two(three):
    actions = run(three.initialize())

    assert actions.to_unlock == ("intro", "forest")
    assert actions.to_lock == ("summit",)
    assert three.progression.get_state("intro") is UNLOCKED
    assert three.progression.get_state("forest") is UNLOCKED
    assert three.progression.get_state("summit") is LOCKED


def test_manual_initialization(intro_module, forest_module, summit_module):
    curriculum = Curriculum(
        registry=ModuleRegistry([intro_module, forest_module, summit_module]),
        config=EngineConfig(initially_unlocked=["forest"]),
    )

    actions = run(curriculum.initialize())

    assert actions.to_unlock == ("forest",)
    assert actions.to_lock == ("intro", "summit")


def test_initialization_preserves_completed(three):
    three.progression.set_state("intro", COMPLETED)
    three.progression.set_state("summit", UNLOCKED)

    actions = run(three.initialize())

    assert "intro" not in actions.to_unlock + actions.to_lock
    assert three.progression.get_state("intro") is COMPLETED
    # Unlocked modules outside the policy are locked again
    assert three.progression.get_state("summit") is LOCKED


def test_initialization_of_selected_modules(three):
    actions = run(three.initialize(["summit", "forest"]))
    assert actions.to_unlock == ("summit", "forest")
    assert actions.to_lock == ()


def test_transitions(three, recorded):
    service = three.modules

    assert service.unlock("intro")
    assert not service.unlock("intro")
    assert service.complete("intro")
    assert not service.complete("intro")
    assert not service.unlock("intro")
    assert not service.lock("intro")
    assert service.get_state("intro") is COMPLETED

    assert [e.type for e in recorded] == [ProgressionEvent.MODULE_UNLOCKED, ProgressionEvent.MODULE_COMPLETED]


def test_module_without_tasks_never_completes():
    empty = define_module("empty", "Empty", interactables=(NPC(id="idle", name="Idle"),))
    curriculum = Curriculum(registry=ModuleRegistry([empty]))

    assert not curriculum.modules.is_fully_completed("empty")
    assert run(curriculum.modules.evaluate_module_completion("empty")) == []
    assert curriculum.progression.get_state("empty") is LOCKED


def test_completion_counts_npc_tasks(curriculum):
    curriculum.progress.complete_task("intro", "write_intro")
    assert not curriculum.modules.is_fully_completed("intro")

    curriculum.progress.complete_task("intro", "second_step")
    assert curriculum.modules.is_fully_completed("intro")


def test_completion_cascade(three, recorded):
    three.progress.complete_task("intro", "write_intro")
    three.progress.complete_task("intro", "second_step")

    unlocked = run(three.modules.evaluate_module_completion("intro"))

    assert unlocked == ["forest"]
    assert three.progression.get_state("intro") is COMPLETED
    assert three.progression.get_state("forest") is UNLOCKED
    assert three.progression.get_state("summit") is LOCKED
    assert [e.type for e in recorded] == [ProgressionEvent.MODULE_COMPLETED, ProgressionEvent.MODULE_UNLOCKED]


def test_check_completion_status_applies_nothing(three):
    three.modules.unlock("intro")
    three.progress.complete_task("intro", "write_intro")
    three.progress.complete_task("intro", "second_step")
    three.progression.set_state("intro", COMPLETED)

    status = run(three.modules.check_completion_status("intro"))

    assert status.is_completed
    assert status.modules_to_unlock == ("forest",)
    assert three.progression.get_state("forest") is LOCKED


def test_incomplete_module_reports_nothing(three):
    status = run(three.modules.check_completion_status("intro"))
    assert not status.is_completed
    assert status.modules_to_unlock == ()


def test_check_unlock_status(three):
    modules = three.modules

    assert run(modules.check_unlock_status("intro"))
    assert not run(modules.check_unlock_status("forest"))
    assert not run(modules.check_unlock_status("nowhere"))

    modules.unlock("intro")
    assert not run(modules.check_unlock_status("intro"))


def test_password_unlock():
    vault = define_module("vault", "Vault", unlock_requirement=password("open sesame"))
    curriculum = Curriculum(registry=ModuleRegistry([vault]))
    modules = curriculum.modules

    check = run(modules.can_unlock("vault"))
    assert not check.can_unlock
    assert check.requires_interaction

    assert not run(modules.can_unlock("vault", "wrong")).can_unlock
    assert run(modules.can_unlock("vault", "open sesame")).can_unlock

    result = run(modules.try_unlock("vault"))
    assert not result.success
    assert result.requires_password

    result = run(modules.try_unlock("vault", "open sesame"))
    assert result.success
    assert result.unlocked == ["vault"]
    assert curriculum.progression.get_state("vault") is UNLOCKED


def test_nested_password_reports_interaction_only_while_unmet():
    gate = define_module("gate", "Gate", unlock_requirement=all_of(state_check("ready"), password("x")))
    curriculum = Curriculum(registry=ModuleRegistry([gate]))

    check = run(curriculum.modules.can_unlock("gate"))
    assert not check.can_unlock
    assert check.requires_interaction


def test_can_unlock_without_requirement(three):
    assert run(three.modules.can_unlock("intro")).can_unlock
    assert not run(three.modules.can_unlock("nowhere")).can_unlock

    result = run(three.modules.try_unlock("intro"))
    assert result.success


def test_interactable_gating(three):
    hermit = NPC(id="hermit", name="Hermit", unlock_requirement=module_complete("intro"))

    assert not run(three.modules.is_interactable_unlocked("forest", hermit))
    three.modules.complete("intro")
    assert run(three.modules.is_interactable_unlocked("forest", hermit))
