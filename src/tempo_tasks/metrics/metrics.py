# src/tempo_tasks/metrics/metrics.py

"""
Derived statistics and achievement rules.

Everything here is a pure function of the task collection (and, for
achievements, of the previously unlocked set). Nothing is stored.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from ..tasks.task_models import Task

TIME_TARGET_SECONDS = 36000  # 10h of tracked time saturates the time component
PRODUCTIVITY_EXPERT_THRESHOLD = 10


class Achievement(StrEnum):
    FIRST_TASK = "first_task"
    TASK_COMPLETED = "task_completed"
    PRODUCTIVITY_EXPERT = "productivity_expert"
    POMODORO_MASTER = "pomodoro_master"


@dataclass(frozen=True, slots=True)
class Metrics:
    active_count: int
    completed_count: int
    total_count: int
    completion_pct: int
    total_time_spent: int
    starred_count: int
    productivity_score: int


def _round_half_up(x: float) -> int:
    # Math.round semantics; Python's round() is banker's rounding.
    return int(x + 0.5)


def recompute_metrics(tasks: Iterable[Task]) -> Metrics:
    active = completed = total = starred = time_spent = 0
    for t in tasks:
        # Time spent deliberately counts archived tasks too.
        time_spent += t.time_spent
        if t.archived:
            continue
        total += 1
        if t.completed:
            completed += 1
        else:
            active += 1
        if t.starred:
            starred += 1

    completion_pct = _round_half_up(100 * completed / total) if total else 0

    denom = max(1, total)
    score = _round_half_up(
        50 * (completed / denom)
        + 25 * (min(time_spent, TIME_TARGET_SECONDS) / TIME_TARGET_SECONDS)
        + 25 * (starred / denom)
    )

    return Metrics(
        active_count=active,
        completed_count=completed,
        total_count=total,
        completion_pct=completion_pct,
        total_time_spent=time_spent,
        starred_count=starred,
        productivity_score=score,
    )


def evaluate_achievements(
    unlocked: set[str],
    metrics: Metrics,
    *,
    added_to_empty: bool = False,
    pomodoro_work_done: bool = False,
) -> list[Achievement]:
    """
    Return achievements that should be unlocked now and are not yet in `unlocked`.

    Counts come from the post-mutation metrics, so the 10th completion unlocks
    productivity_expert immediately. The caller adds the result to its set;
    nothing is ever removed.
    """
    earned: list[Achievement] = []
    if added_to_empty:
        earned.append(Achievement.FIRST_TASK)
    if metrics.completed_count > 0:
        earned.append(Achievement.TASK_COMPLETED)
    if metrics.completed_count >= PRODUCTIVITY_EXPERT_THRESHOLD:
        earned.append(Achievement.PRODUCTIVITY_EXPERT)
    if pomodoro_work_done:
        earned.append(Achievement.POMODORO_MASTER)
    return [a for a in earned if a.value not in unlocked]


def format_duration(seconds: int) -> str:
    """1:05:09 when over an hour, else 5:09."""
    seconds = max(0, int(seconds))
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
