# src/tempo_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/notification backends swappable and makes testing easier.
"""

from typing import Protocol


class BlobStore(Protocol):
    """
    Durable key -> text store (the browser's localStorage, a directory, ...).

    get() returns None for a missing key. Both methods may raise PersistenceError.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class Notifier(Protocol):
    """Best-effort local alert. No delivery guarantee."""

    def notify(self, title: str, body: str) -> None: ...
