# tests/test_timer_engine.py

from __future__ import annotations

from tempo_tasks.tasks.task_store import TaskStore
from tempo_tasks.tasks.timer_engine import (
    BREAK_SECONDS,
    IDLE,
    WORK_SECONDS,
    Active,
    PhaseTransition,
    PomodoroPhase,
    TimerEngine,
)


def _store_with(*texts: str) -> tuple[TaskStore, list[int]]:
    store = TaskStore()
    ids = [store.add_task(t).id for t in texts]
    return store, ids


def test_toggle_timer_takes_over_the_single_slot() -> None:
    store, (a, b) = _store_with("A", "B")
    engine = TimerEngine()

    assert engine.toggle_timer(a) == Active(a)
    assert engine.toggle_timer(b) == Active(b)
    assert engine.active_task_id == b

    engine.tick(store)
    assert store.get(a).time_spent == 0
    assert store.get(b).time_spent == 1


def test_toggle_timer_twice_pauses() -> None:
    engine = TimerEngine()
    engine.toggle_timer(7)
    assert engine.toggle_timer(7) is IDLE
    assert engine.active_task_id is None


def test_stop_only_clears_matching_task() -> None:
    engine = TimerEngine()
    engine.toggle_timer(1)

    assert engine.stop(2) is False
    assert engine.active_task_id == 1
    assert engine.stop(1) is True
    assert engine.stop() is False


def test_n_ticks_add_exactly_n_seconds() -> None:
    store, (a,) = _store_with("A")
    engine = TimerEngine()
    engine.toggle_timer(a)

    for _ in range(42):
        result = engine.tick(store)
        assert result.accrued_task_id == a

    assert store.get(a).time_spent == 42


def test_tick_does_not_accrue_on_completed_task() -> None:
    store, (a,) = _store_with("A")
    engine = TimerEngine()
    engine.toggle_timer(a)
    store.toggle_complete(a)

    assert engine.tick(store).accrued_task_id is None
    assert store.get(a).time_spent == 0


def test_tick_clears_slot_when_target_vanished() -> None:
    store, (a,) = _store_with("A")
    engine = TimerEngine()
    engine.toggle_timer(a)
    store.replace_all([])

    engine.tick(store)
    assert engine.slot is IDLE


def test_pomodoro_work_session_round_trip() -> None:
    store = TaskStore()
    engine = TimerEngine()
    engine.start_pomodoro()
    assert engine.pomodoro.remaining == 1500

    transitions = [engine.tick(store).transition for _ in range(1500)]

    assert transitions[-1] == PhaseTransition.WORK_TO_BREAK
    assert transitions.count(PhaseTransition.WORK_TO_BREAK) == 1
    assert engine.pomodoro.phase == PomodoroPhase.BREAK
    assert engine.pomodoro.remaining == BREAK_SECONDS
    assert engine.pomodoro.completed_sessions == 1
    # Auto-continues into the break.
    assert engine.pomodoro.running is True


def test_pomodoro_break_flips_back_to_work_and_keeps_running() -> None:
    store = TaskStore()
    engine = TimerEngine(work_seconds=3, break_seconds=2)
    engine.start_pomodoro()

    results = [engine.tick(store).transition for _ in range(5)]

    assert results == [None, None, PhaseTransition.WORK_TO_BREAK, None, PhaseTransition.BREAK_TO_WORK]
    assert engine.pomodoro.phase == PomodoroPhase.WORK
    assert engine.pomodoro.remaining == 3
    assert engine.pomodoro.running is True
    assert engine.pomodoro.completed_sessions == 1


def test_pause_keeps_phase_and_remaining() -> None:
    store = TaskStore()
    engine = TimerEngine()
    engine.start_pomodoro()
    for _ in range(10):
        engine.tick(store)

    engine.pause_pomodoro()
    engine.tick(store)

    assert engine.pomodoro.remaining == WORK_SECONDS - 10
    assert engine.status() == "work-paused"


def test_start_is_a_hard_reset_and_reset_goes_idle() -> None:
    store = TaskStore()
    engine = TimerEngine(work_seconds=2, break_seconds=5)
    engine.start_pomodoro()
    engine.tick(store)
    engine.tick(store)
    assert engine.status() == "break-running"

    engine.start_pomodoro()
    assert engine.pomodoro.phase == PomodoroPhase.WORK
    assert engine.pomodoro.remaining == 2
    assert engine.status() == "work-running"

    engine.reset_pomodoro()
    assert engine.status() == "idle"


def test_pomodoro_and_task_timer_share_the_tick() -> None:
    store, (a,) = _store_with("A")
    engine = TimerEngine()
    engine.toggle_timer(a)
    engine.start_pomodoro()

    for _ in range(60):
        engine.tick(store)

    assert store.get(a).time_spent == 60
    assert engine.pomodoro.remaining == WORK_SECONDS - 60
