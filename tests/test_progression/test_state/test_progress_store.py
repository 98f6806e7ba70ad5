import pytest

from progression.state.progress import InMemoryProgressStore, ModuleProgress, ProgressStore


def test_in_memory_store_satisfies_protocol():
    assert isinstance(InMemoryProgressStore(), ProgressStore)


def test_unknown_module_reads_empty(progress):
    assert progress.get_progress("forest") is None
    assert not progress.is_task_completed("forest", "gather")
    assert progress.get_current_task_id("forest") is None
    assert progress.get_state_field("forest", "key", "fallback") == "fallback"


def test_complete_task_clears_current_task(progress):
    progress.accept_task("forest", "gather")
    assert progress.get_current_task_id("forest") == "gather"

    progress.complete_task("forest", "gather")

    assert progress.is_task_completed("forest", "gather")
    assert progress.get_current_task_id("forest") is None


def test_completing_another_task_keeps_current(progress):
    progress.accept_task("forest", "gather")
    progress.complete_task("forest", "chop")

    assert progress.get_current_task_id("forest") == "gather"
    assert progress.get_progress("forest").completed_tasks == {"chop"}


def test_state_fields(progress):
    progress.set_state_field("forest", "found_key", True)
    progress.set_interactable_field("forest", "chest", "open", True)

    assert progress.get_state_field("forest", "found_key") is True
    assert progress.get_interactable_field("forest", "chest", "open") is True
    assert progress.get_interactable_field("forest", "door", "open", False) is False


def test_greetings(progress):
    assert not progress.has_seen_greeting("forest", "welcome")
    progress.mark_greeting_seen("forest", "welcome")
    assert progress.has_seen_greeting("forest", "welcome")


def test_update_progress(progress):
    progress.update_progress("forest", current_task_id="gather")
    assert progress.get_current_task_id("forest") == "gather"

    with pytest.raises(AttributeError):
        progress.update_progress("forest", unknown_field=1)


def test_snapshot_restore(progress):
    progress.accept_task("forest", "gather")
    progress.complete_task("forest", "chop")
    progress.set_state_field("forest", "lit", True)

    snapshot = progress.snapshot()
    assert snapshot["forest"]["completed_tasks"] == ["chop"]

    restored = InMemoryProgressStore()
    restored.restore(snapshot)
    assert restored.is_task_completed("forest", "chop")
    assert restored.get_current_task_id("forest") == "gather"
    assert restored.get_state_field("forest", "lit") is True


def test_reset(progress):
    progress.complete_task("forest", "chop")
    progress.complete_task("cave", "dig")

    progress.reset("forest")
    assert progress.get_progress("forest") is None
    assert progress.is_task_completed("cave", "dig")

    progress.reset()
    assert progress.get_progress("cave") is None


def test_module_progress_round_trip():
    record = ModuleProgress(completed_tasks={"b", "a"}, current_task_id="c")
    data = record.to_dict()
    assert data["completed_tasks"] == ["a", "b"]
    assert ModuleProgress.from_dict(data) == record
