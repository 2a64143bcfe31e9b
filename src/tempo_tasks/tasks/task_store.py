# src/tempo_tasks/tasks/task_store.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator

from ..errors import ValidationError
from .task_models import Category, Priority, Subtask, Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory, ordered task collection.

    Every id-addressed mutation is total: an unknown id is a silent no-op that
    returns None (the UI may hold stale references), never an error.
    Mutations return the affected Task so callers can tell whether anything changed.

    The store knows nothing about the timer slot; callers that stop/clear the
    timer on complete/delete/reset do so in the command layer (task_api).
    """

    def __init__(
        self,
        tasks: Iterable[Task] | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._tasks: list[Task] = list(tasks or [])
        self._clock = clock
        self._last_id = max((t.id for t in self._tasks), default=0)
        logger.debug("TaskStore ready total=%s", len(self._tasks))

    # ---- low-level helpers ----

    def _next_id(self) -> int:
        # Time-derived (ms) like the browser app, but forced monotonic.
        candidate = int(self._clock() * 1000)
        self._last_id = max(candidate, self._last_id + 1)
        return self._last_id

    def _find(self, task_id: int) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    # ---- read API ----

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    def count_tasks(self) -> int:
        return len(self._tasks)

    def get(self, task_id: int) -> Task | None:
        return self._find(task_id)

    def list_tasks(self, *, include_archived: bool = False) -> list[Task]:
        if include_archived:
            return list(self._tasks)
        return [t for t in self._tasks if not t.archived]

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Swap the whole collection (import)."""
        self._tasks = list(tasks)
        self._last_id = max([self._last_id, *(t.id for t in self._tasks)])
        logger.info("TaskStore replaced total=%s", len(self._tasks))

    # ---- task lifecycle ----

    def add_task(
        self,
        text: str,
        category: Category | str = Category.WORK,
        *,
        priority: Priority | str = Priority.MEDIUM,
        due_date: str | None = None,
        notes: str = "",
        estimated_time: int | None = None,
    ) -> Task:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Please enter a task")

        cat = category if isinstance(category, Category) else Category.parse(category)
        if cat is None:
            raise ValidationError(f"Unknown category: {category}")
        pri = priority if isinstance(priority, Priority) else Priority.parse(priority)
        if pri is None:
            raise ValidationError(f"Unknown priority: {priority}")

        task = Task(
            id=self._next_id(),
            text=text,
            created_at=self._clock(),
            category=cat,
            priority=pri,
            due_date=due_date or None,
            notes=notes or "",
            estimated_time=estimated_time,
        )
        self._tasks.append(task)
        logger.debug("Task added id=%s category=%s priority=%s", task.id, cat.value, pri.value)
        return task

    def toggle_complete(self, task_id: int) -> Task | None:
        task = self._find(task_id)
        if task is None:
            return None
        task.completed = not task.completed
        logger.debug("Task %s completed=%s", task_id, task.completed)
        return task

    def delete_task(self, task_id: int) -> Task | None:
        task = self._find(task_id)
        if task is None:
            return None
        # Subtasks are owned by the task and go with it.
        self._tasks.remove(task)
        logger.debug("Task deleted id=%s", task_id)
        return task

    def archive_task(self, task_id: int) -> Task | None:
        task = self._find(task_id)
        if task is None:
            return None
        task.archived = True
        return task

    def unarchive_task(self, task_id: int) -> Task | None:
        task = self._find(task_id)
        if task is None:
            return None
        task.archived = False
        return task

    def toggle_star(self, task_id: int) -> Task | None:
        task = self._find(task_id)
        if task is None:
            return None
        task.starred = not task.starred
        return task

    # ---- time tracking ----

    def accrue_time(self, task_id: int, seconds: int = 1) -> Task | None:
        """Advance elapsed time. Completed tasks never accrue."""
        task = self._find(task_id)
        if task is None or task.completed:
            return None
        task.time_spent += max(0, int(seconds))
        return task

    def reset_time(self, task_id: int) -> Task | None:
        task = self._find(task_id)
        if task is None:
            return None
        task.time_spent = 0
        return task

    # ---- field edits ----

    def edit_text(self, task_id: int, new_text: str) -> Task | None:
        new_text = (new_text or "").strip()
        task = self._find(task_id)
        if task is None or not new_text:
            return None
        task.text = new_text
        return task

    def set_priority(self, task_id: int, priority: Priority | str) -> Task | None:
        pri = priority if isinstance(priority, Priority) else Priority.parse(priority)
        task = self._find(task_id)
        if task is None or pri is None:
            return None
        task.priority = pri
        return task

    def set_category(self, task_id: int, category: Category | str) -> Task | None:
        cat = category if isinstance(category, Category) else Category.parse(category)
        task = self._find(task_id)
        if task is None or cat is None:
            return None
        task.category = cat
        return task

    def set_due_date(self, task_id: int, due_date: str | None) -> Task | None:
        task = self._find(task_id)
        if task is None:
            return None
        task.due_date = (due_date or "").strip() or None
        return task

    def set_notes(self, task_id: int, notes: str) -> Task | None:
        task = self._find(task_id)
        if task is None:
            return None
        task.notes = notes or ""
        return task

    def set_estimate(self, task_id: int, minutes: int | None) -> Task | None:
        task = self._find(task_id)
        if task is None:
            return None
        task.estimated_time = None if minutes is None else max(0, int(minutes))
        return task

    # ---- tags ----

    def add_tag(self, task_id: int, tag: str) -> Task | None:
        """Set semantics: adding an existing tag leaves the task unchanged."""
        tag = (tag or "").strip()
        task = self._find(task_id)
        if task is None or not tag or tag in task.tags:
            return None
        task.tags.append(tag)
        return task

    def remove_tag(self, task_id: int, tag: str) -> Task | None:
        tag = (tag or "").strip()
        task = self._find(task_id)
        if task is None or tag not in task.tags:
            return None
        task.tags.remove(tag)
        return task

    # ---- subtasks ----

    def add_subtask(self, task_id: int, text: str) -> Subtask | None:
        text = (text or "").strip()
        task = self._find(task_id)
        if task is None or not text:
            return None
        sub = Subtask(id=max((s.id for s in task.subtasks), default=0) + 1, text=text)
        task.subtasks.append(sub)
        return sub

    def toggle_subtask(self, task_id: int, subtask_id: int) -> Subtask | None:
        task = self._find(task_id)
        if task is None:
            return None
        for sub in task.subtasks:
            if sub.id == subtask_id:
                sub.completed = not sub.completed
                return sub
        return None

    def delete_subtask(self, task_id: int, subtask_id: int) -> Subtask | None:
        task = self._find(task_id)
        if task is None:
            return None
        for sub in task.subtasks:
            if sub.id == subtask_id:
                task.subtasks.remove(sub)
                return sub
        return None
