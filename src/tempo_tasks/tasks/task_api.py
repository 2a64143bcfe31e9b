# src/tempo_tasks/tasks/task_api.py

"""
Command layer.

Every user command and the tick handler go through here. After a mutation:
1. derived metrics are recomputed (pure, explicit; no hidden triggers),
2. newly earned achievements are added to the monotonic set,
3. the snapshot is saved (fire-and-forget: a failed save never rolls back).

Commands addressing an unknown id return None and change nothing.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from ..core.state import AppState
from ..errors import PersistenceError
from ..metrics.metrics import Achievement, Metrics, evaluate_achievements, recompute_metrics
from ..storage.gateway import export_tasks as _export_tasks
from ..storage.gateway import parse_import
from .task_models import Category, Priority, Subtask, Task
from .timer_engine import PhaseTransition, TickResult, TimerSlot

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ACHIEVEMENT_TEXT = {
    Achievement.FIRST_TASK: "You added your first task.",
    Achievement.TASK_COMPLETED: "You completed a task.",
    Achievement.PRODUCTIVITY_EXPERT: "10 tasks completed!",
    Achievement.POMODORO_MASTER: "You finished a Pomodoro work session.",
}


# ---- plumbing ----


def notify(state: AppState, title: str, body: str) -> None:
    """Best-effort alert; silently skipped when notifications are off."""
    if not getattr(state.settings, "notifications_enabled", True):
        return
    try:
        state.notifier.notify(title, body)
    except Exception:
        logger.debug("Notification delivery failed (%s).", title, exc_info=True)


def save_state(state: AppState) -> bool:
    """Persist the current snapshot. Failure degrades to in-memory mode."""
    try:
        state.gateway.save(state.snapshot())
    except PersistenceError:
        if not state.persistence_degraded:
            logger.warning("Saving failed; continuing in memory only.", exc_info=True)
        state.persistence_degraded = True
        return False
    except Exception:
        logger.exception("Unexpected error while saving state.")
        state.persistence_degraded = True
        return False

    if state.persistence_degraded:
        logger.info("Saving works again.")
    state.persistence_degraded = False
    return True


def _commit(
    state: AppState,
    *,
    added_to_empty: bool = False,
    pomodoro_work_done: bool = False,
) -> list[Achievement]:
    metrics = recompute_metrics(state.tasks.list_tasks(include_archived=True))
    earned = evaluate_achievements(
        state.achievements,
        metrics,
        added_to_empty=added_to_empty,
        pomodoro_work_done=pomodoro_work_done,
    )
    for ach in earned:
        state.achievements.add(ach.value)
        logger.info("Achievement unlocked: %s", ach.value)
        notify(state, "Achievement unlocked", _ACHIEVEMENT_TEXT[ach])

    state.metrics = metrics

    if getattr(state.settings, "autosave", True):
        save_state(state)
    return earned


def _after(state: AppState, result: T | None) -> T | None:
    if result is not None:
        _commit(state)
    return result


# ---- reads ----


def get_metrics(state: AppState) -> Metrics:
    return state.metrics


def active_task(state: AppState) -> Task | None:
    """The task currently accruing time ("Working on: ...")."""
    task_id = state.timer.active_task_id
    return state.tasks.get(task_id) if task_id is not None else None


# ---- task commands ----


def add_task(
    state: AppState,
    text: str,
    category: Category | str = Category.WORK,
    *,
    priority: Priority | str = Priority.MEDIUM,
    due_date: str | None = None,
    notes: str = "",
    estimated_time: int | None = None,
) -> Task:
    """Raises ValidationError on empty text; the store is left untouched."""
    was_empty = state.tasks.count_tasks() == 0
    task = state.tasks.add_task(
        text,
        category,
        priority=priority,
        due_date=due_date,
        notes=notes,
        estimated_time=estimated_time,
    )
    _commit(state, added_to_empty=was_empty)
    return task


def toggle_complete(state: AppState, task_id: int) -> Task | None:
    task = state.tasks.toggle_complete(task_id)
    if task is None:
        return None
    # A completed task cannot keep accruing time.
    state.timer.stop(task_id)
    _commit(state)
    return task


def delete_task(state: AppState, task_id: int) -> Task | None:
    task = state.tasks.delete_task(task_id)
    if task is None:
        return None
    state.timer.stop(task_id)
    _commit(state)
    return task


def archive_task(state: AppState, task_id: int) -> Task | None:
    # The timer keeps running on an archived task until stopped explicitly.
    return _after(state, state.tasks.archive_task(task_id))


def unarchive_task(state: AppState, task_id: int) -> Task | None:
    return _after(state, state.tasks.unarchive_task(task_id))


def toggle_star(state: AppState, task_id: int) -> Task | None:
    return _after(state, state.tasks.toggle_star(task_id))


def reset_timer(state: AppState, task_id: int) -> Task | None:
    task = state.tasks.reset_time(task_id)
    if task is None:
        return None
    state.timer.stop(task_id)
    _commit(state)
    return task


def edit_text(state: AppState, task_id: int, new_text: str) -> Task | None:
    return _after(state, state.tasks.edit_text(task_id, new_text))


def set_priority(state: AppState, task_id: int, priority: Priority | str) -> Task | None:
    return _after(state, state.tasks.set_priority(task_id, priority))


def set_category(state: AppState, task_id: int, category: Category | str) -> Task | None:
    return _after(state, state.tasks.set_category(task_id, category))


def set_due_date(state: AppState, task_id: int, due_date: str | None) -> Task | None:
    return _after(state, state.tasks.set_due_date(task_id, due_date))


def set_notes(state: AppState, task_id: int, notes: str) -> Task | None:
    return _after(state, state.tasks.set_notes(task_id, notes))


def set_estimate(state: AppState, task_id: int, minutes: int | None) -> Task | None:
    return _after(state, state.tasks.set_estimate(task_id, minutes))


def add_tag(state: AppState, task_id: int, tag: str) -> Task | None:
    return _after(state, state.tasks.add_tag(task_id, tag))


def remove_tag(state: AppState, task_id: int, tag: str) -> Task | None:
    return _after(state, state.tasks.remove_tag(task_id, tag))


def add_subtask(state: AppState, task_id: int, text: str) -> Subtask | None:
    return _after(state, state.tasks.add_subtask(task_id, text))


def toggle_subtask(state: AppState, task_id: int, subtask_id: int) -> Subtask | None:
    return _after(state, state.tasks.toggle_subtask(task_id, subtask_id))


def delete_subtask(state: AppState, task_id: int, subtask_id: int) -> Subtask | None:
    return _after(state, state.tasks.delete_subtask(task_id, subtask_id))


# ---- timers ----


def toggle_timer(state: AppState, task_id: int) -> TimerSlot | None:
    """
    Start/pause the task timer. Starting takes the single slot over from
    whichever task held it. Unknown or completed tasks are ignored.
    """
    task = state.tasks.get(task_id)
    if task is None or task.completed:
        return None
    return state.timer.toggle_timer(task_id)


def start_pomodoro(state: AppState) -> None:
    state.timer.start_pomodoro()


def pause_pomodoro(state: AppState) -> None:
    state.timer.pause_pomodoro()


def reset_pomodoro(state: AppState) -> None:
    state.timer.reset_pomodoro()


def tick(state: AppState) -> TickResult:
    """One clock second. Called by the clock loop with state.lock held."""
    result = state.timer.tick(state.tasks)

    work_done = result.transition == PhaseTransition.WORK_TO_BREAK
    if work_done:
        minutes = max(1, state.timer.break_seconds // 60)
        notify(state, "Pomodoro complete", f"Time for a {minutes}-minute break!")
    elif result.transition == PhaseTransition.BREAK_TO_WORK:
        notify(state, "Break over", "Back to work!")

    if result.accrued_task_id is not None or work_done:
        _commit(state, pomodoro_work_done=work_done)
    return result


# ---- import / export ----


def export_tasks(state: AppState) -> str:
    return _export_tasks(state.tasks.list_tasks(include_archived=True))


def import_tasks(state: AppState, text: str) -> int:
    """
    Replace the whole collection with an exported blob.

    Raises ImportFormatError before touching anything when the blob is invalid.
    """
    tasks = parse_import(text)
    state.tasks.replace_all(tasks)
    state.timer.stop()
    _commit(state)
    logger.info("Imported %d tasks.", len(tasks))
    return len(tasks)
