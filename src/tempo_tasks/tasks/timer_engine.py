# src/tempo_tasks/tasks/timer_engine.py

from __future__ import annotations

"""
Timer engine.

Two independent clocks advanced by the same 1 Hz tick:
- the task timer slot: at most one task accrues elapsed time,
- the Pomodoro countdown with its work/break phase machine.

The slot is a single value (Idle | Active), never a collection, so "only one task
timer advances per tick" holds by construction. Starting a timer on another task
silently takes the slot over.
"""

import logging
from dataclasses import dataclass
from enum import Enum, StrEnum

from .task_store import TaskStore

logger = logging.getLogger(__name__)

WORK_SECONDS = 25 * 60
BREAK_SECONDS = 5 * 60


@dataclass(frozen=True, slots=True)
class Idle:
    """No task timer is running."""


@dataclass(frozen=True, slots=True)
class Active:
    task_id: int


TimerSlot = Idle | Active
IDLE = Idle()


class PomodoroPhase(StrEnum):
    WORK = "work"
    BREAK = "break"


class PhaseTransition(str, Enum):
    WORK_TO_BREAK = "work_to_break"
    BREAK_TO_WORK = "break_to_work"


@dataclass(slots=True)
class PomodoroState:
    phase: PomodoroPhase = PomodoroPhase.WORK
    remaining: int = WORK_SECONDS
    running: bool = False
    completed_sessions: int = 0
    started: bool = False  # false until the first start after a reset


@dataclass(frozen=True, slots=True)
class TickResult:
    accrued_task_id: int | None = None
    transition: PhaseTransition | None = None


class TimerEngine:
    def __init__(self, *, work_seconds: int = WORK_SECONDS, break_seconds: int = BREAK_SECONDS) -> None:
        self.work_seconds = max(1, int(work_seconds))
        self.break_seconds = max(1, int(break_seconds))
        self.slot: TimerSlot = IDLE
        self.pomodoro = PomodoroState(remaining=self.work_seconds)

    # ---- task timer slot ----

    @property
    def active_task_id(self) -> int | None:
        match self.slot:
            case Active(task_id=task_id):
                return task_id
            case _:
                return None

    def is_active_on(self, task_id: int) -> bool:
        return self.slot == Active(task_id)

    def toggle_timer(self, task_id: int) -> TimerSlot:
        """Pause when task_id holds the slot, otherwise take the slot over."""
        if self.is_active_on(task_id):
            self.slot = IDLE
            logger.debug("Timer paused task=%s", task_id)
        else:
            previous = self.active_task_id
            self.slot = Active(task_id)
            logger.debug("Timer started task=%s (was %s)", task_id, previous)
        return self.slot

    def stop(self, task_id: int | None = None) -> bool:
        """
        Clear the slot.

        With task_id, only clears when that task holds it. Returns True if cleared.
        """
        if isinstance(self.slot, Idle):
            return False
        if task_id is not None and not self.is_active_on(task_id):
            return False
        self.slot = IDLE
        return True

    # ---- pomodoro ----

    def status(self) -> str:
        """idle | work-running | work-paused | break-running | break-paused"""
        p = self.pomodoro
        if not p.started:
            return "idle"
        return f"{p.phase.value}-{'running' if p.running else 'paused'}"

    def start_pomodoro(self) -> None:
        # Hard reset-and-start, not a resume.
        self.pomodoro.phase = PomodoroPhase.WORK
        self.pomodoro.remaining = self.work_seconds
        self.pomodoro.running = True
        self.pomodoro.started = True
        logger.info("Pomodoro started (%ss work).", self.work_seconds)

    def pause_pomodoro(self) -> None:
        self.pomodoro.running = False

    def reset_pomodoro(self) -> None:
        self.pomodoro.running = False
        self.pomodoro.started = False
        self.pomodoro.phase = PomodoroPhase.WORK
        self.pomodoro.remaining = self.work_seconds

    # ---- tick ----

    def tick(self, store: TaskStore) -> TickResult:
        """
        Advance both clocks by one second.

        1. the task holding the slot accrues 1s (if it exists and is not completed),
        2. a running Pomodoro counts down,
        3. reaching zero flips the phase; running stays True (auto-continue).
        """
        accrued: int | None = None
        task_id = self.active_task_id
        if task_id is not None:
            if store.get(task_id) is None:
                # Target vanished without going through delete (e.g. an import).
                self.slot = IDLE
            elif store.accrue_time(task_id, 1) is not None:
                accrued = task_id

        transition: PhaseTransition | None = None
        p = self.pomodoro
        if p.running:
            if p.remaining > 0:
                p.remaining -= 1
            if p.remaining == 0:
                transition = self._flip_phase()

        return TickResult(accrued_task_id=accrued, transition=transition)

    def _flip_phase(self) -> PhaseTransition:
        p = self.pomodoro
        if p.phase == PomodoroPhase.WORK:
            p.completed_sessions += 1
            p.phase = PomodoroPhase.BREAK
            p.remaining = self.break_seconds
            logger.info("Pomodoro work session %s complete -> break.", p.completed_sessions)
            return PhaseTransition.WORK_TO_BREAK

        p.phase = PomodoroPhase.WORK
        p.remaining = self.work_seconds
        logger.info("Pomodoro break over -> work.")
        return PhaseTransition.BREAK_TO_WORK
