# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tempo_tasks.cli.bootstrap import create_initial_state
from tempo_tasks.core.state import AppState
from tempo_tasks.storage.blob_store import MemoryBlobStore

from .fakes import RecordingNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="tempo-test",
        log_level="DEBUG",
        console_enabled=False,
        notifications_enabled=True,
        autosave=True,
        tick_seconds=0.01,
        pomodoro_work_seconds=25 * 60,
        pomodoro_break_seconds=5 * 60,
        data_dir=tmp_path / "data",
        store_dir=tmp_path / "data" / "store",
    )


@pytest.fixture()
def blob_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def state(settings: SimpleNamespace, blob_store: MemoryBlobStore, notifier: RecordingNotifier) -> AppState:
    """Empty AppState wired with an in-memory blob store and a recording notifier."""
    return create_initial_state(settings=settings, blob_store=blob_store, notifier=notifier)
