# src/tempo_tasks/notify.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

logger = logging.getLogger(__name__)


class LogNotifier:
    """Notifications as log records (headless runs)."""

    def notify(self, title: str, body: str) -> None:
        logger.info("[NOTIFY] %s: %s", title, body)


class ConsoleNotifier:
    """Print an alert line (with a terminal bell when attached to a TTY)."""

    def __init__(self, bell: bool = True) -> None:
        self.bell = bell

    def notify(self, title: str, body: str) -> None:
        ts = datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")
        bell = "\a" if self.bell and sys.stdout.isatty() else ""
        print(f"\n[{ts}] {bell}[{title}] {body}", flush=True)
