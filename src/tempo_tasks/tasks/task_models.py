# src/tempo_tasks/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

TaskDict = dict[str, Any]
# JSON shape of a task: camelCase keys, compatible with the browser app's storage.


class Category(StrEnum):
    WORK = "work"
    PERSONAL = "personal"
    SHOPPING = "shopping"
    HEALTH = "health"
    LEARNING = "learning"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: object) -> Category | None:
        if not isinstance(raw, str) or not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, raw: object) -> Priority | None:
        if not isinstance(raw, str) or not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


@dataclass(slots=True)
class Subtask:
    id: int
    text: str
    completed: bool = False

    def to_dict(self) -> TaskDict:
        return {"id": self.id, "text": self.text, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: Any) -> Subtask:
        if not isinstance(data, dict):
            raise ValueError("subtask must be an object")
        text = data.get("text")
        if not isinstance(text, str):
            raise ValueError("subtask.text must be a string")
        return cls(
            id=_as_int(data.get("id"), "subtask.id"),
            text=text,
            completed=_as_bool(data.get("completed"), "subtask.completed"),
        )


@dataclass(slots=True)
class Task:
    """
    A single task record.

    time_spent is in whole seconds and only grows, except on an explicit timer reset.
    Archived tasks are soft-deleted: kept in the collection, hidden from active views.
    """

    id: int
    text: str
    created_at: float

    completed: bool = False
    archived: bool = False
    starred: bool = False
    category: Category = Category.WORK
    priority: Priority = Priority.MEDIUM
    time_spent: int = 0
    due_date: str | None = None
    notes: str = ""
    tags: list[str] = field(default_factory=list)
    subtasks: list[Subtask] = field(default_factory=list)
    estimated_time: int | None = None  # minutes

    def to_dict(self) -> TaskDict:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "archived": self.archived,
            "starred": self.starred,
            "category": self.category.value,
            "priority": self.priority.value,
            "createdAt": self.created_at,
            "timeSpent": self.time_spent,
            "dueDate": self.due_date,
            "notes": self.notes,
            "tags": list(self.tags),
            "subtasks": [s.to_dict() for s in self.subtasks],
            "estimatedTime": self.estimated_time,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Task:
        """
        Strict parse of a stored/imported task.

        Raises ValueError on structural problems; unknown enum values fall back to defaults.
        """
        if not isinstance(data, dict):
            raise ValueError("task must be an object")

        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            raise ValueError("task.text must be a non-empty string")

        tags_raw = data.get("tags") or []
        if not isinstance(tags_raw, list) or not all(isinstance(t, str) for t in tags_raw):
            raise ValueError("task.tags must be a list of strings")
        tags: list[str] = []
        for t in tags_raw:
            if t.strip() and t.strip() not in tags:
                tags.append(t.strip())

        subtasks_raw = data.get("subtasks") or []
        if not isinstance(subtasks_raw, list):
            raise ValueError("task.subtasks must be a list")

        due_date = data.get("dueDate")
        if due_date is not None and not isinstance(due_date, str):
            raise ValueError("task.dueDate must be a string or null")

        notes = data.get("notes") or ""
        if not isinstance(notes, str):
            raise ValueError("task.notes must be a string")

        subtasks = [Subtask.from_dict(s) for s in subtasks_raw]
        if len({s.id for s in subtasks}) != len(subtasks):
            raise ValueError("task.subtasks has duplicate ids")

        estimated = data.get("estimatedTime")

        return cls(
            id=_as_int(data.get("id"), "task.id"),
            text=text.strip(),
            created_at=_as_timestamp(data.get("createdAt")),
            completed=_as_bool(data.get("completed"), "task.completed"),
            archived=_as_bool(data.get("archived"), "task.archived"),
            starred=_as_bool(data.get("starred"), "task.starred"),
            category=Category.parse(data.get("category")) or Category.WORK,
            priority=Priority.parse(data.get("priority")) or Priority.MEDIUM,
            time_spent=max(0, _as_int(data.get("timeSpent") or 0, "task.timeSpent")),
            due_date=due_date,
            notes=notes,
            tags=tags,
            subtasks=subtasks,
            estimated_time=None if estimated in (None, "") else _as_int(estimated, "task.estimatedTime"),
        )


def _as_bool(value: Any, name: str) -> bool:
    # Absent means false; "false" or 1 are rejected, not coerced.
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise ValueError(f"{name} must be a boolean")


def _as_int(value: Any, name: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValueError(f"{name} must be an integer")


def _as_timestamp(value: Any) -> float:
    """createdAt may be epoch seconds or an ISO string (older exports)."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ValueError("task.createdAt must be a timestamp")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
        except ValueError:
            raise ValueError("task.createdAt is not a valid ISO timestamp") from None
    raise ValueError("task.createdAt must be a timestamp")
