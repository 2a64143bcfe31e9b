# src/tempo_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the blob store, notifier, task store and timer engine into AppState,
- restores the last saved snapshot (absent or malformed -> empty state).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import BlobStore, Notifier
from ..core.state import AppState
from ..errors import PersistenceError
from ..metrics.metrics import recompute_metrics
from ..notify import ConsoleNotifier, LogNotifier
from ..storage.blob_store import FileBlobStore, MemoryBlobStore
from ..storage.gateway import PersistenceGateway
from ..tasks.task_store import TaskStore
from ..tasks.timer_engine import TimerEngine

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_dir.mkdir(parents=True, exist_ok=True)


def _default_blob_store(settings) -> BlobStore:
    try:
        _ensure_local_dirs(settings)
        return FileBlobStore(settings.store_dir)
    except (OSError, PersistenceError):
        logger.warning("Store dir %s unusable; running in memory only.", settings.store_dir, exc_info=True)
        return MemoryBlobStore()


def create_initial_state(
    *,
    settings=None,
    blob_store: BlobStore | None = None,
    notifier: Notifier | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and backends injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if blob_store is None:
        blob_store = _default_blob_store(settings)

    if notifier is None:
        notifier = ConsoleNotifier() if getattr(settings, "console_enabled", True) else LogNotifier()

    gateway = PersistenceGateway(blob_store)
    snapshot = gateway.load()

    tasks = TaskStore(snapshot.tasks if snapshot else [])
    state = AppState(
        settings=settings,
        tasks=tasks,
        timer=TimerEngine(
            work_seconds=settings.pomodoro_work_seconds,
            break_seconds=settings.pomodoro_break_seconds,
        ),
        gateway=gateway,
        notifier=notifier,
        achievements=set(snapshot.achievements) if snapshot else set(),
    )
    # The stored score is informational only; it is always re-derived.
    state.metrics = recompute_metrics(tasks.list_tasks(include_archived=True))
    if snapshot and snapshot.productivity_score != state.productivity_score:
        logger.debug(
            "Stored score %s differs from derived %s.",
            snapshot.productivity_score,
            state.productivity_score,
        )

    logger.info("State ready: %d tasks, %d achievements.", len(tasks), len(state.achievements))
    return state
