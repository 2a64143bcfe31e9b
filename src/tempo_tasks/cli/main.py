# src/tempo_tasks/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState from the saved snapshot, starts the
1 Hz clock in a background thread, then runs the console REPL (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.clock import start_clock_in_background
from ..tasks.task_api import save_state

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Final save. Best-effort: no exceptions should escape."""
    try:
        with state.lock:
            ok = save_state(state)
        if not ok:
            logger.warning("Final save failed; changes since the last save are lost.")
    except Exception:
        logger.exception("Final save crashed.")


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    clock = start_clock_in_background(state, interval_seconds=settings.tick_seconds)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        if not settings.console_enabled:
            signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Some platforms may not support SIGTERM, etc.
        logger.debug("Signal handlers not installed.", exc_info=True)

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running the clock only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        if clock is not None:
            clock.stop()
            clock.join(timeout=5.0)

        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
