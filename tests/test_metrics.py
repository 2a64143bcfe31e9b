# tests/test_metrics.py

from __future__ import annotations

import pytest

from tempo_tasks.metrics.metrics import (
    Achievement,
    evaluate_achievements,
    format_duration,
    recompute_metrics,
)
from tempo_tasks.tasks.task_models import Task


def _task(i: int, **kw) -> Task:
    return Task(id=i, text=f"t{i}", created_at=0.0, **kw)


def test_empty_collection() -> None:
    m = recompute_metrics([])
    assert (m.total_count, m.completed_count, m.active_count) == (0, 0, 0)
    assert m.completion_pct == 0
    assert m.productivity_score == 0


def test_counts_exclude_archived_but_time_includes_it() -> None:
    tasks = [
        _task(1, completed=True, time_spent=100),
        _task(2, time_spent=50, starred=True),
        _task(3, completed=True, archived=True, time_spent=1000, starred=True),
    ]
    m = recompute_metrics(tasks)

    assert m.total_count == 2
    assert m.completed_count == 1
    assert m.active_count == 1
    assert m.starred_count == 1
    assert m.completion_pct == 50
    assert m.total_time_spent == 1150


def test_completion_pct_rounds_half_up() -> None:
    # 1/8 = 12.5% -> 13 (Math.round), not 12 (banker's rounding)
    tasks = [_task(1, completed=True)] + [_task(i) for i in range(2, 9)]
    assert recompute_metrics(tasks).completion_pct == 13


def test_productivity_score_formula() -> None:
    tasks = [
        _task(1, completed=True, starred=True, time_spent=18000),
        _task(2),
    ]
    m = recompute_metrics(tasks)
    # 50*0.5 + 25*0.5 + 25*0.5
    assert m.productivity_score == 50


def test_productivity_score_caps_time_component() -> None:
    tasks = [_task(1, completed=True, starred=True, time_spent=10**7)]
    assert recompute_metrics(tasks).productivity_score == 100


def test_achievement_rules() -> None:
    zero = recompute_metrics([_task(1)])
    one = recompute_metrics([_task(1, completed=True)])
    ten = recompute_metrics([_task(i, completed=True) for i in range(10)])

    assert evaluate_achievements(set(), zero) == []
    assert evaluate_achievements(set(), zero, added_to_empty=True) == [Achievement.FIRST_TASK]
    assert evaluate_achievements(set(), one) == [Achievement.TASK_COMPLETED]
    assert Achievement.PRODUCTIVITY_EXPERT in evaluate_achievements(set(), ten)
    assert evaluate_achievements(set(), zero, pomodoro_work_done=True) == [Achievement.POMODORO_MASTER]


def test_achievements_already_unlocked_are_not_returned() -> None:
    one = recompute_metrics([_task(1, completed=True)])
    assert evaluate_achievements({"task_completed"}, one) == []


def test_archived_completions_do_not_count_for_expert() -> None:
    tasks = [_task(i, completed=True) for i in range(9)] + [_task(9, completed=True, archived=True)]
    m = recompute_metrics(tasks)
    assert Achievement.PRODUCTIVITY_EXPERT not in evaluate_achievements(set(), m)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0:00"), (9, "0:09"), (65, "1:05"), (3600, "1:00:00"), (3909, "1:05:09"), (-5, "0:00")],
)
def test_format_duration(seconds: int, expected: str) -> None:
    assert format_duration(seconds) == expected
