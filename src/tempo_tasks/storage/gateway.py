# src/tempo_tasks/storage/gateway.py

"""
Persistence gateway and import/export codec.

The blob store holds three fixed keys, each a JSON text value:
- "tasks"             -> list of task objects (camelCase, see Task.to_dict)
- "achievements"      -> list of achievement ids
- "productivityScore" -> integer

Loading fails closed: any malformed value makes load() return None, and the
app starts empty instead of crashing.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..core.ports import BlobStore
from ..errors import ImportFormatError, PersistenceError
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
ACHIEVEMENTS_KEY = "achievements"
SCORE_KEY = "productivityScore"


@dataclass(slots=True)
class Snapshot:
    tasks: list[Task] = field(default_factory=list)
    achievements: list[str] = field(default_factory=list)
    productivity_score: int = 0


def _parse_task_list(data: Any) -> list[Task]:
    if not isinstance(data, list):
        raise ValueError("task collection must be a JSON array")
    tasks: list[Task] = []
    seen: set[int] = set()
    for i, item in enumerate(data):
        try:
            task = Task.from_dict(item)
        except ValueError as e:
            raise ValueError(f"task #{i}: {e}") from None
        if task.id in seen:
            raise ValueError(f"task #{i}: duplicate id {task.id}")
        seen.add(task.id)
        tasks.append(task)
    return tasks


def export_tasks(tasks: Iterable[Task]) -> str:
    """Serialize the whole collection (archived included) for download/backup."""
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=2)


def parse_import(text: str) -> list[Task]:
    """
    Parse a user-supplied export.

    Accepts a bare task array or an object with a "tasks" array.
    Raises ImportFormatError; never returns a partial collection.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ImportFormatError(f"Invalid JSON: {e}") from None
    except RecursionError:
        raise ImportFormatError("Invalid JSON: nested too deeply") from None

    if isinstance(data, dict) and "tasks" in data:
        data = data["tasks"]

    try:
        return _parse_task_list(data)
    except ValueError as e:
        raise ImportFormatError(str(e)) from None


class PersistenceGateway:
    def __init__(self, store: BlobStore) -> None:
        self._store = store

    def load(self) -> Snapshot | None:
        try:
            raw_tasks = self._store.get(TASKS_KEY)
            raw_ach = self._store.get(ACHIEVEMENTS_KEY)
            raw_score = self._store.get(SCORE_KEY)
        except PersistenceError:
            logger.warning("Stored state unreadable; starting empty.", exc_info=True)
            return None

        if raw_tasks is None and raw_ach is None and raw_score is None:
            logger.info("No stored state found.")
            return None

        try:
            tasks = _parse_task_list(json.loads(raw_tasks)) if raw_tasks is not None else []

            achievements: list[str] = []
            if raw_ach is not None:
                ach = json.loads(raw_ach)
                if not isinstance(ach, list) or not all(isinstance(a, str) for a in ach):
                    raise ValueError("achievements must be a list of strings")
                achievements = list(dict.fromkeys(ach))

            score = 0
            if raw_score is not None:
                score_any = json.loads(raw_score)
                if isinstance(score_any, bool) or not isinstance(score_any, (int, float)):
                    raise ValueError("productivityScore must be a number")
                score = int(score_any)
        except (ValueError, RecursionError):
            # json.JSONDecodeError is a ValueError too.
            logger.warning("Stored state is malformed; ignoring it.", exc_info=True)
            return None

        logger.info("Loaded %d tasks, %d achievements.", len(tasks), len(achievements))
        return Snapshot(tasks=tasks, achievements=achievements, productivity_score=score)

    def save(self, snapshot: Snapshot) -> None:
        """Write all three keys. Raises PersistenceError; no rollback, no retry."""
        self._store.set(TASKS_KEY, json.dumps([t.to_dict() for t in snapshot.tasks], ensure_ascii=False))
        self._store.set(ACHIEVEMENTS_KEY, json.dumps(sorted(snapshot.achievements)))
        self._store.set(SCORE_KEY, json.dumps(int(snapshot.productivity_score)))
        logger.debug("Saved %d tasks.", len(snapshot.tasks))
