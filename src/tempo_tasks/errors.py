# src/tempo_tasks/errors.py

"""
Error kinds surfaced by the core.

None of these are fatal: command handlers turn them into user-facing messages,
and persistence failures only degrade the app to in-memory operation.
"""

from __future__ import annotations


class TempoError(Exception):
    """Base class for all tempo_tasks errors."""


class ValidationError(TempoError):
    """Rejected user input (e.g. empty task text)."""


class ImportFormatError(TempoError):
    """An import payload could not be parsed as a task collection."""


class PersistenceError(TempoError):
    """The blob store could not be read or written."""
