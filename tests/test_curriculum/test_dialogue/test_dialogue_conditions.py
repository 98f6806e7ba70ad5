import asyncio

from pydantic import TypeAdapter

from progression.core.errors import EvaluationFailure
from progression.state.progression import ModuleProgressionState
from curriculum.dialogue.conditions import (
    AndCondition,
    DialogueCondition,
    InteractableStateCondition,
    all_conditions,
    any_condition,
    check,
    evaluate_condition,
    interactable_state_is,
    requirement_met,
    state_is,
    task_active,
    task_completed,
)
from curriculum.unlock.requirements import module_complete


def holds(condition, context):
    return asyncio.run(evaluate_condition(condition, context))


def test_missing_condition_holds(curriculum):
    assert holds(None, curriculum.context("intro"))


def test_task_conditions(curriculum):
    context = curriculum.context("intro")

    assert not holds(task_active("write_intro"), context)
    context.accept_task("write_intro")
    assert holds(task_active("write_intro"), context)
    assert not holds(task_completed("write_intro"), context)

    context.complete_task("write_intro")
    assert not holds(task_active("write_intro"), context)
    assert holds(task_completed("write_intro"), context)


def test_state_conditions(curriculum):
    context = curriculum.context("intro")

    assert not holds(state_is("met_guide"), context)
    context.set_state("met_guide", True)
    assert holds(state_is("met_guide"), context)

    context.set_interactable_state("chest", "open", True)
    assert holds(interactable_state_is("chest", "open"), context)
    assert not holds(interactable_state_is("chest", "open", False), context)


def test_requirement_condition(curriculum):
    context = curriculum.context("forest")
    condition = requirement_met(module_complete("intro"))

    assert not holds(condition, context)
    curriculum.progression.set_state("intro", ModuleProgressionState.COMPLETED)
    assert holds(condition, context)


def test_combinators(curriculum):
    context = curriculum.context("intro")
    context.set_state("a", True)

    assert holds(all_conditions(), context)
    assert not holds(any_condition(), context)
    assert holds(all_conditions(state_is("a")), context)
    assert not holds(all_conditions(state_is("a"), state_is("b")), context)
    assert holds(any_condition(state_is("b"), state_is("a")), context)


def test_custom_condition_sees_module_context(curriculum):
    seen = []

    async def is_intro(ctx):
        seen.append(ctx.module_id)
        return ctx.module_id == "intro"

    assert holds(check(is_intro), curriculum.context("intro"))
    assert not holds(check(is_intro), curriculum.context("forest"))
    assert seen == ["intro", "forest"]


def test_failing_custom_condition_is_reported(curriculum):
    errors = []
    curriculum.evaluator.error_handler = errors.append

    def broken(ctx):
        raise KeyError("missing")

    assert not holds(check(broken), curriculum.context("intro"))
    assert isinstance(errors[0], EvaluationFailure)


def test_parse_condition():
    condition = TypeAdapter(DialogueCondition).validate_python({
        "type": "and",
        "conditions": [
            {"type": "task-active", "task_id": "write_intro"},
            {"type": "interactable-state", "interactable_id": "chest", "key": "open", "value": True},
        ],
    })

    assert isinstance(condition, AndCondition)
    assert condition.conditions[0] == task_active("write_intro")
    assert isinstance(condition.conditions[1], InteractableStateCondition)
