# src/tempo_tasks/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import cast

from ..core.state import AppState
from ..errors import ImportFormatError, ValidationError
from ..metrics.metrics import format_duration
from ..tasks import task_api
from ..tasks.task_models import Category, Priority, Task
from ..tasks.timer_engine import Active

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _resolve_task(state: AppState, token: str | None) -> Task | None:
    """Accept a list position (#3 / 3) or a raw task id."""
    if not token:
        return None
    try:
        n = int(token.lstrip("#"))
    except ValueError:
        return None
    all_tasks = state.tasks.list_tasks(include_archived=True)
    if 1 <= n <= len(all_tasks):
        return all_tasks[n - 1]
    return state.tasks.get(n)


def _position(state: AppState, task: Task) -> int:
    for i, t in enumerate(state.tasks.list_tasks(include_archived=True), start=1):
        if t.id == task.id:
            return i
    return 0


def render_task(state: AppState, task: Task, position: int) -> str:
    mark = "x" if task.completed else " "
    star = "*" if task.starred else " "
    line = (
        f"#{position} [{mark}]{star} {task.text} "
        f"({task.category.value}, {task.priority.value}) {format_duration(task.time_spent)}"
    )
    if task.due_date:
        line += f" due {task.due_date}"
    if task.tags:
        line += f" [tags: {', '.join(task.tags)}]"
    if task.archived:
        line += " (archived)"
    if state.timer.is_active_on(task.id):
        line += "  <- timer running"
    out = [line]
    for sub in task.subtasks:
        out.append(f"      {sub.id}. [{'x' if sub.completed else ' '}] {sub.text}")
    return "\n".join(out)


def _usage(text: str) -> str:
    return f"Usage: {text}"


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add [@category] [!priority] text...
    """
    category: str = Category.WORK.value
    priority: str = Priority.MEDIUM.value
    words: list[str] = []
    for a in args:
        if a.startswith("@") and len(a) > 1 and not words:
            category = a[1:]
        elif a.startswith("!") and len(a) > 1 and not words:
            priority = a[1:]
        else:
            words.append(a)

    try:
        task = task_api.add_task(state, " ".join(words), category, priority=priority)
    except ValidationError as e:
        return str(e)
    return f"Added #{_position(state, task)}: {task.text}"


def cmd_list(state: AppState, args: list[str]) -> str:
    show_all = bool(args) and args[0].lower() in ("all", "-a")
    lines: list[str] = []
    for i, task in enumerate(state.tasks.list_tasks(include_archived=True), start=1):
        if task.archived and not show_all:
            continue
        lines.append(render_task(state, task, i))
    if not lines:
        return "No tasks yet. Add one with /add <text>."
    return "\n".join(lines)


def _simple(action: Callable[[AppState, int], object], done: str) -> Callable[[AppState, list[str]], str]:
    def handler(state: AppState, args: list[str]) -> str:
        task = _resolve_task(state, args[0] if args else None)
        if task is None:
            return "No such task."
        if action(state, task.id) is None:
            return "Nothing changed."
        return f"{done}: {task.text}"

    return handler


cmd_done = _simple(task_api.toggle_complete, "Toggled")
cmd_delete = _simple(task_api.delete_task, "Deleted")
cmd_archive = _simple(task_api.archive_task, "Archived")
cmd_unarchive = _simple(task_api.unarchive_task, "Restored")
cmd_star = _simple(task_api.toggle_star, "Star toggled")
cmd_reset = _simple(task_api.reset_timer, "Timer reset")


def _with_text(
    action: Callable[[AppState, int, str], object],
    done: str,
    usage: str,
) -> Callable[[AppState, list[str]], str]:
    def handler(state: AppState, args: list[str]) -> str:
        if len(args) < 2:
            return _usage(usage)
        task = _resolve_task(state, args[0])
        if task is None:
            return "No such task."
        if action(state, task.id, " ".join(args[1:])) is None:
            return "Nothing changed."
        return f"{done}: {task.text}"

    return handler


cmd_edit = _with_text(task_api.edit_text, "Edited", "/edit N new text")
cmd_priority = _with_text(task_api.set_priority, "Priority set", "/pri N low|medium|high|critical")
cmd_category = _with_text(task_api.set_category, "Category set", "/cat N " + "|".join(c.value for c in Category))
cmd_notes = _with_text(task_api.set_notes, "Notes saved", "/note N text")
cmd_tag = _with_text(task_api.add_tag, "Tagged", "/tag N tag")
cmd_untag = _with_text(task_api.remove_tag, "Untagged", "/untag N tag")
cmd_subtask = _with_text(task_api.add_subtask, "Subtask added", "/sub N text")


def cmd_due(state: AppState, args: list[str]) -> str:
    if not args:
        return _usage("/due N YYYY-MM-DD | /due N -")
    task = _resolve_task(state, args[0])
    if task is None:
        return "No such task."
    raw = args[1] if len(args) > 1 else "-"
    if raw == "-":
        task_api.set_due_date(state, task.id, None)
        return f"Due date cleared: {task.text}"
    try:
        datetime.strptime(raw, "%Y-%m-%d")
    except ValueError:
        return "Due date must look like YYYY-MM-DD."
    task_api.set_due_date(state, task.id, raw)
    return f"Due {raw}: {task.text}"


def cmd_estimate(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return _usage("/est N minutes | /est N -")
    task = _resolve_task(state, args[0])
    if task is None:
        return "No such task."
    if args[1] == "-":
        task_api.set_estimate(state, task.id, None)
        return f"Estimate cleared: {task.text}"
    try:
        minutes = int(args[1])
    except ValueError:
        return "Estimate must be a number of minutes."
    task_api.set_estimate(state, task.id, minutes)
    return f"Estimated {minutes} min: {task.text}"


def _subtask_cmd(action: Callable[[AppState, int, int], object], done: str, usage: str):
    def handler(state: AppState, args: list[str]) -> str:
        if len(args) < 2:
            return _usage(usage)
        task = _resolve_task(state, args[0])
        if task is None:
            return "No such task."
        try:
            sub_id = int(args[1])
        except ValueError:
            return _usage(usage)
        if action(state, task.id, sub_id) is None:
            return "No such subtask."
        return done

    return handler


cmd_subdone = _subtask_cmd(task_api.toggle_subtask, "Subtask toggled.", "/subdone N S")
cmd_subdel = _subtask_cmd(task_api.delete_subtask, "Subtask deleted.", "/subdel N S")


def cmd_timer(state: AppState, args: list[str]) -> str:
    if not args:
        task = task_api.active_task(state)
        if task is None:
            return "No timer running."
        return f"Working on: {task.text} ({format_duration(task.time_spent)})"

    task = _resolve_task(state, args[0])
    if task is None:
        return "No such task."
    slot = task_api.toggle_timer(state, task.id)
    if slot is None:
        return "Completed tasks cannot be timed."
    if isinstance(slot, Active):
        return f"Timer started: {task.text}"
    return f"Timer paused: {task.text} ({format_duration(task.time_spent)})"


def cmd_pomo(state: AppState, args: list[str]) -> str:
    """
    /pomo           -> status
    /pomo start     -> (re)start a work session
    /pomo pause     -> pause the countdown
    /pomo reset     -> back to an idle work session
    """
    sub = args[0].lower() if args else "status"
    if sub == "start":
        task_api.start_pomodoro(state)
    elif sub == "pause":
        task_api.pause_pomodoro(state)
    elif sub == "reset":
        task_api.reset_pomodoro(state)
    elif sub != "status":
        return _usage("/pomo start | pause | reset | status")

    p = state.timer.pomodoro
    return (
        f"Pomodoro: {state.timer.status()} | {p.phase.value} {format_duration(p.remaining)} left"
        f" | sessions completed: {p.completed_sessions}"
    )


def cmd_stats(state: AppState, args: list[str]) -> str:
    m = task_api.get_metrics(state)
    lines = [
        "Stats:",
        f"  Active tasks: {m.active_count}",
        f"  Completed: {m.completed_count}",
        f"  Time spent: {format_duration(m.total_time_spent)}",
        f"  Progress: {m.completion_pct}%",
        f"  Starred: {m.starred_count}",
        f"  Productivity score: {m.productivity_score}/100",
    ]
    task = task_api.active_task(state)
    if task is not None:
        lines.append(f"  Working on: {task.text} ({format_duration(task.time_spent)})")
    if state.persistence_degraded:
        lines.append("  WARNING: saving failed, changes are kept in memory only.")
    return "\n".join(lines)


def cmd_achievements(state: AppState, args: list[str]) -> str:
    if not state.achievements:
        return "No achievements unlocked yet."
    return "Achievements: " + ", ".join(sorted(state.achievements))


def cmd_export(state: AppState, args: list[str]) -> str:
    payload = task_api.export_tasks(state)
    if not args:
        return payload
    path = Path(args[0]).expanduser()
    try:
        path.write_text(payload, "utf-8")
    except OSError as e:
        logger.warning("Export to %s failed: %s", path, e)
        return f"Export failed: {e}"
    return f"Exported {len(state.tasks)} tasks to {path}"


def cmd_import(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return _usage("/import PATH")
    path = Path(args[0]).expanduser()
    try:
        text = path.read_text("utf-8")
    except OSError as e:
        return f"Cannot read {path}: {e}"

    if emit:
        emit(f"[IMPORT] Replacing all tasks with {path}...")
    try:
        n = task_api.import_tasks(state, text)
    except ImportFormatError as e:
        return f"Import failed, tasks unchanged: {e}"
    return f"Imported {n} tasks."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add [@category] [!priority] text.")
registry.register("list", cmd_list, help_text="List tasks (/list all includes archived).", aliases=["ls"])
registry.register("done", cmd_done, help_text="Toggle completion: /done N.")
registry.register("del", cmd_delete, help_text="Delete a task: /del N.", aliases=["rm"])
registry.register("archive", cmd_archive, help_text="Archive a task: /archive N.")
registry.register("unarchive", cmd_unarchive, help_text="Restore an archived task: /unarchive N.")
registry.register("star", cmd_star, help_text="Toggle star: /star N.")
registry.register("edit", cmd_edit, help_text="Rename: /edit N text.")
registry.register("pri", cmd_priority, help_text="Priority: /pri N low|medium|high|critical.")
registry.register("cat", cmd_category, help_text="Category: /cat N category.")
registry.register("due", cmd_due, help_text="Due date: /due N YYYY-MM-DD | /due N -.")
registry.register("note", cmd_notes, help_text="Notes: /note N text.")
registry.register("est", cmd_estimate, help_text="Estimate: /est N minutes.")
registry.register("tag", cmd_tag, help_text="Add tag: /tag N tag.")
registry.register("untag", cmd_untag, help_text="Remove tag: /untag N tag.")
registry.register("sub", cmd_subtask, help_text="Add subtask: /sub N text.")
registry.register("subdone", cmd_subdone, help_text="Toggle subtask: /subdone N S.")
registry.register("subdel", cmd_subdel, help_text="Delete subtask: /subdel N S.")
registry.register("timer", cmd_timer, help_text="Start/pause a task timer: /timer N (no arg: status).", aliases=["t"])
registry.register("reset", cmd_reset, help_text="Zero a task's time: /reset N.")
registry.register("pomo", cmd_pomo, help_text="Pomodoro: /pomo start | pause | reset | status.")
registry.register("stats", cmd_stats, help_text="Show statistics and productivity score.")
registry.register("achievements", cmd_achievements, help_text="Show unlocked achievements.")
registry.register("export", cmd_export, help_text="Export tasks as JSON: /export [PATH].")
registry.register("import", cmd_import, help_text="Replace tasks from a JSON export: /import PATH.")
