# src/tempo_tasks/storage/blob_store.py

from __future__ import annotations

import contextlib
import logging
import os
import re
from pathlib import Path

from ..errors import PersistenceError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileBlobStore:
    """
    One file per key under a local (gitignored) directory.

    Writes go to a temp file first and are swapped in with os.replace,
    so a crash mid-write never leaves a half-written value behind.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)
        logger.info("FileBlobStore ready root=%s", self._root)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key or ""):
            raise PersistenceError(f"invalid blob key: {key!r}")
        return self._root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"failed to read {path}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(value, "utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise PersistenceError(f"failed to write {path}") from e
        with contextlib.suppress(OSError):
            os.chmod(path, 0o600)


class MemoryBlobStore:
    """Volatile store used in tests and as the degraded fallback."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
