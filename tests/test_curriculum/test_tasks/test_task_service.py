import asyncio

import pytest

from progression.core.errors import TaskNotFoundError, TaskUnavailableError, UnknownModuleError
from progression.core.events import ProgressionEvent
from progression.state.progression import ModuleProgressionState
from curriculum.tasks.availability import TaskStatus
from curriculum.tasks.task import TaskSubmission


def test_accept_task(curriculum, recorded):
    task = asyncio.run(curriculum.tasks.accept_task("intro", "write_intro"))

    assert task.id == "write_intro"
    assert curriculum.progress.get_current_task_id("intro") == "write_intro"
    assert [e.type for e in recorded] == [ProgressionEvent.TASK_ACCEPTED]


def test_accept_locked_task_is_rejected(curriculum):
    with pytest.raises(TaskUnavailableError):
        asyncio.run(curriculum.tasks.accept_task("intro", "second_step"))


def test_accept_unknown_ids(curriculum):
    with pytest.raises(TaskNotFoundError):
        asyncio.run(curriculum.tasks.accept_task("intro", "nope"))
    with pytest.raises(UnknownModuleError):
        asyncio.run(curriculum.tasks.accept_task("nowhere", "write_intro"))


def test_failed_submission_changes_nothing(curriculum, recorded):
    outcome = asyncio.run(
        curriculum.tasks.submit_task("intro", "write_intro", TaskSubmission.of_text("hi"))
    )

    assert not outcome.solved
    assert outcome.result.reason == "too_short"
    assert not curriculum.progress.is_task_completed("intro", "write_intro")
    assert [e.type for e in recorded] == [ProgressionEvent.TASK_SUBMISSION_FAILED]


def test_solved_submission_completes_task(curriculum):
    asyncio.run(curriculum.tasks.accept_task("intro", "write_intro"))
    outcome = asyncio.run(
        curriculum.tasks.submit_task("intro", "write_intro", TaskSubmission.of_text("hello there"))
    )

    assert outcome.solved
    assert not outcome.module_completed
    assert outcome.unlocked_modules == []
    assert curriculum.progress.is_task_completed("intro", "write_intro")
    assert curriculum.progress.get_current_task_id("intro") is None


def test_last_submission_completes_module_and_unlocks_dependents(curriculum, recorded):
    submit = curriculum.tasks.submit_task
    asyncio.run(submit("intro", "write_intro", TaskSubmission.of_text("hello there")))
    outcome = asyncio.run(submit("intro", "second_step", TaskSubmission.of_text("done")))

    assert outcome.module_completed
    assert outcome.unlocked_modules == ["forest"]
    assert curriculum.progression.get_state("intro") is ModuleProgressionState.COMPLETED
    assert curriculum.progression.get_state("forest") is ModuleProgressionState.UNLOCKED
    types = [e.type for e in recorded]
    assert types.index(ProgressionEvent.MODULE_COMPLETED) < types.index(ProgressionEvent.MODULE_UNLOCKED)


def test_resubmitting_completed_task_is_rejected(curriculum):
    curriculum.progress.complete_task("intro", "write_intro")
    with pytest.raises(TaskUnavailableError):
        asyncio.run(
            curriculum.tasks.submit_task("intro", "write_intro", TaskSubmission.of_text("hello again"))
        )


def test_task_status(curriculum):
    assert asyncio.run(curriculum.tasks.task_status("intro", "write_intro")) is TaskStatus.AVAILABLE
    assert asyncio.run(curriculum.tasks.task_status("intro", "second_step")) is TaskStatus.LOCKED
    assert asyncio.run(curriculum.tasks.task_status("intro", "nope")) is None


def test_next_sequential_task(curriculum):
    assert curriculum.tasks.next_sequential_task("intro").id == "write_intro"
    curriculum.progress.complete_task("intro", "write_intro")
    assert curriculum.tasks.next_sequential_task("intro").id == "second_step"


def test_next_sequential_task_unknown_module(curriculum):
    errors = []
    curriculum.tasks.error_handler = errors.append

    assert curriculum.tasks.next_sequential_task("nowhere") is None
    assert isinstance(errors[0], UnknownModuleError)
