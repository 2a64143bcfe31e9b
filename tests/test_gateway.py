# tests/test_gateway.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tempo_tasks.errors import ImportFormatError, PersistenceError
from tempo_tasks.storage.blob_store import FileBlobStore, MemoryBlobStore
from tempo_tasks.storage.gateway import (
    ACHIEVEMENTS_KEY,
    SCORE_KEY,
    TASKS_KEY,
    PersistenceGateway,
    Snapshot,
    export_tasks,
    parse_import,
)
from tempo_tasks.tasks.task_models import Category, Priority, Subtask, Task


def _sample_task() -> Task:
    return Task(
        id=1700000000000,
        text="Write report",
        created_at=1700000000.0,
        starred=True,
        category=Category.LEARNING,
        priority=Priority.HIGH,
        time_spent=125,
        due_date="2026-11-01",
        notes="draft first",
        tags=["q4", "writing"],
        subtasks=[Subtask(id=1, text="outline", completed=True)],
        estimated_time=90,
    )


def test_save_then_load(tmp_path: Path) -> None:
    gateway = PersistenceGateway(FileBlobStore(tmp_path / "store"))
    gateway.save(Snapshot(tasks=[_sample_task()], achievements=["first_task"], productivity_score=42))

    snap = PersistenceGateway(FileBlobStore(tmp_path / "store")).load()

    assert snap is not None
    assert snap.tasks == [_sample_task()]
    assert snap.achievements == ["first_task"]
    assert snap.productivity_score == 42


def test_uses_the_three_fixed_keys() -> None:
    store = MemoryBlobStore()
    PersistenceGateway(store).save(Snapshot(tasks=[_sample_task()], achievements=["b", "a"], productivity_score=7))

    assert set(store.data) == {TASKS_KEY, ACHIEVEMENTS_KEY, SCORE_KEY}
    stored = json.loads(store.data[TASKS_KEY])
    assert stored[0]["timeSpent"] == 125
    assert stored[0]["createdAt"] == 1700000000.0
    assert json.loads(store.data[ACHIEVEMENTS_KEY]) == ["a", "b"]
    assert json.loads(store.data[SCORE_KEY]) == 7


def test_load_empty_store_is_absent() -> None:
    assert PersistenceGateway(MemoryBlobStore()).load() is None


@pytest.mark.parametrize(
    "data",
    [
        {TASKS_KEY: "{not json"},
        {TASKS_KEY: '{"a": 1}'},
        {TASKS_KEY: '[{"id": 1}]'},
        {TASKS_KEY: "[]", ACHIEVEMENTS_KEY: '"first_task"'},
        {TASKS_KEY: "[]", SCORE_KEY: '"high"'},
        {TASKS_KEY: '[{"id": 1, "text": "x", "archived": "false"}]'},
        {TASKS_KEY: "[" * 100000 + "]" * 100000},
    ],
)
def test_malformed_stored_data_fails_closed(data: dict[str, str]) -> None:
    assert PersistenceGateway(MemoryBlobStore(data)).load() is None


def test_load_accepts_iso_created_at_from_older_data() -> None:
    raw = json.dumps([{"id": 5, "text": "legacy", "completed": True, "createdAt": "2025-01-02T03:04:05Z"}])
    snap = PersistenceGateway(MemoryBlobStore({TASKS_KEY: raw})).load()

    assert snap is not None
    task = snap.tasks[0]
    assert task.completed is True
    assert task.category == Category.WORK
    assert task.created_at > 0


def test_file_blob_store_rejects_path_like_keys(tmp_path: Path) -> None:
    store = FileBlobStore(tmp_path)
    with pytest.raises(PersistenceError):
        store.set("../escape", "x")


def test_undecodable_store_file_is_absent(tmp_path: Path) -> None:
    root = tmp_path / "store"
    root.mkdir()
    (root / f"{TASKS_KEY}.json").write_bytes(b'[{"id": 1, "text": "\xff\xfe"}]')

    with pytest.raises(PersistenceError):
        FileBlobStore(root).get(TASKS_KEY)
    assert PersistenceGateway(FileBlobStore(root)).load() is None


def test_export_then_import() -> None:
    text = export_tasks([_sample_task()])
    assert parse_import(text) == [_sample_task()]


def test_import_accepts_object_with_tasks_key() -> None:
    text = json.dumps({"tasks": [{"id": 1, "text": "a"}], "version": 1})
    tasks = parse_import(text)
    assert [t.text for t in tasks] == ["a"]


@pytest.mark.parametrize(
    "text",
    [
        "not json at all",
        '{"tasks": 3}',
        '"just a string"',
        '[{"id": 1, "text": ""}]',
        '[{"id": true, "text": "bool id"}]',
        '[{"id": 1, "text": "a"}, {"id": 1, "text": "dup"}]',
        '[{"id": 1, "text": "a", "tags": "x"}]',
        '[{"id": 1, "text": "a", "subtasks": [{"id": 1}]}]',
        '[{"id": 1, "text": "x", "completed": "false"}]',
        '[{"id": 1, "text": "x", "starred": 1}]',
        '[{"id": 1, "text": "x", "subtasks": [{"id": 1, "text": "s", "completed": "no"}]}]',
        '[{"id": 1, "text": "x", "subtasks": [{"id": 1, "text": "s"}, {"id": 1, "text": "t"}]}]',
        pytest.param("[" * 100000 + "]" * 100000, id="deeply-nested"),
    ],
)
def test_import_rejects_invalid_structure(text: str) -> None:
    with pytest.raises(ImportFormatError):
        parse_import(text)
