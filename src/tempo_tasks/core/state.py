# src/tempo_tasks/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..metrics.metrics import Metrics, recompute_metrics
from ..storage.gateway import PersistenceGateway, Snapshot
from ..tasks.task_store import TaskStore
from ..tasks.timer_engine import TimerEngine
from .ports import Notifier


@dataclass
class AppState:
    """
    Everything the commands and the tick handler touch, in one place.

    No module-level globals: the console connector, the clock and the tests all
    pass this object explicitly. `lock` serialises commands against ticks.
    """

    settings: Any
    tasks: TaskStore
    timer: TimerEngine
    gateway: PersistenceGateway
    notifier: Notifier

    achievements: set[str] = field(default_factory=set)
    metrics: Metrics = field(default_factory=lambda: recompute_metrics([]))
    persistence_degraded: bool = False

    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def productivity_score(self) -> int:
        return self.metrics.productivity_score

    def snapshot(self) -> Snapshot:
        return Snapshot(
            tasks=self.tasks.list_tasks(include_archived=True),
            achievements=sorted(self.achievements),
            productivity_score=self.productivity_score,
        )
