from itertools import count

from progression.state.progression import ModuleProgressionState, ProgressionStore


def make_store():
    ticks = count()
    return ProgressionStore(clock=lambda: float(next(ticks)))


def test_unknown_module_is_locked():
    store = ProgressionStore()
    assert store.get_state("forest") is ModuleProgressionState.LOCKED
    assert store.get_record("forest") is None
    assert not store.is_completed("forest")


def test_timestamps_are_recorded_once():
    store = make_store()

    store.set_state("forest", ModuleProgressionState.UNLOCKED)
    store.set_state("forest", ModuleProgressionState.LOCKED)
    store.set_state("forest", ModuleProgressionState.UNLOCKED)
    record = store.set_state("forest", ModuleProgressionState.COMPLETED)

    assert record.unlocked_at == 0.0
    assert record.completed_at == 3.0
    assert store.is_completed("forest")


def test_snapshot_restore():
    store = make_store()
    store.set_state("forest", ModuleProgressionState.UNLOCKED)

    restored = ProgressionStore()
    restored.restore(store.snapshot())

    assert restored.get_state("forest") is ModuleProgressionState.UNLOCKED
    assert restored.get_record("forest").unlocked_at == 0.0
