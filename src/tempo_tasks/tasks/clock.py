# src/tempo_tasks/tasks/clock.py

from __future__ import annotations

"""
Process-wide 1 Hz clock.

A small asyncio loop that calls task_api.tick(state) once per period with the
state lock held, so a tick never interleaves with a user command.

The console REPL blocks on input(), so the app runs this loop in a background
thread with its own event loop (start_clock_in_background).
"""

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..core.state import AppState
from . import task_api

logger = logging.getLogger(__name__)


async def run_clock(
    state: AppState,
    *,
    interval_seconds: float = 1.0,
    stop_event: asyncio.Event | None = None,
) -> None:
    """
    Tick until stop_event is set or the coroutine is cancelled.

    Deadlines are scheduled from the loop clock so ticks do not drift;
    after a long stall (suspend) the schedule restarts instead of bursting.
    """
    period = max(0.05, float(interval_seconds))
    loop = asyncio.get_running_loop()
    next_at = loop.time() + period

    while True:
        delay = max(0.0, next_at - loop.time())
        if stop_event is None:
            await asyncio.sleep(delay)
        else:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay)
                break
            except asyncio.TimeoutError:
                pass

        try:
            with state.lock:
                task_api.tick(state)
        except Exception:
            logger.exception("Clock tick failed.")

        now = loop.time()
        next_at += period
        if next_at < now - period:
            logger.warning("Clock stalled; resynchronising.")
            next_at = now + period

    logger.info("Clock stopped.")


@dataclass(slots=True)
class ClockRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal clock stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_clock_in_background(state: AppState, *, interval_seconds: float = 1.0) -> ClockRunner | None:
    """Run the clock in a daemon thread with its own event loop."""
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(run_clock(state, interval_seconds=interval_seconds, stop_event=stop_event))
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="tempo-clock", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Clock thread did not initialize properly.")
        return None

    logger.info("Clock started (%.2fs period).", interval_seconds)
    return ClockRunner(thread=t, loop=loop, stop_event=stop_event)
