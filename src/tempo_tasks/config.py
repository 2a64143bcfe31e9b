# src/tempo_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TEMPO"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Local .env (gitignored) never overrides the real environment.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Switches ----
    console_enabled: bool
    notifications_enabled: bool
    autosave: bool

    # ---- Clock / Pomodoro ----
    tick_seconds: float
    pomodoro_work_seconds: int
    pomodoro_break_seconds: int

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tempo").strip() or "tempo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        notifications_enabled = _env_bool(_k("NOTIFICATIONS"), True)
        autosave = _env_bool(_k("AUTOSAVE"), True)

        tick_seconds = max(0.05, _env_float(_k("TICK_SECONDS"), 1.0))
        work_minutes = _env_int(_k("POMODORO_WORK_MINUTES"), 25)
        break_minutes = _env_int(_k("POMODORO_BREAK_MINUTES"), 5)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tempo"))
        store_dir = _env_path(_k("STORE_DIR"), data_dir / "store")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            notifications_enabled=notifications_enabled,
            autosave=autosave,
            tick_seconds=tick_seconds,
            pomodoro_work_seconds=max(1, work_minutes) * 60,
            pomodoro_break_seconds=max(1, break_minutes) * 60,
            data_dir=data_dir,
            store_dir=store_dir,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
