from __future__ import annotations

from datetime import datetime
from html import escape
from typing import Sequence

from tasktracker.domain.tasks.models import STATUS_DONE, STATUS_IN_PROGRESS, STATUS_TODO, Task, TaskSummary

STATUS_ICONS = {
    STATUS_TODO: "⬜",
    STATUS_IN_PROGRESS: "🔄",
    STATUS_DONE: "✅",
}

ASK_NAME = "Task name? (max 200 chars, /cancel to abort)"
CANCELLED = "Cancelled."
NO_TASKS = "No tasks."
USAGE_ADD = "Usage: /add name | optional description"
USAGE_STATUS = "Usage: /status <id> <todo|in_progress|done>"
USAGE_TIMER = "Usage: /timer_start <id> or /timer_stop <id>"


def format_duration(seconds: int) -> str:
    seconds = max(0, int(seconds))
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    if h:
        return f"{h}h {m:02d}m"
    if m:
        return f"{m}m {s:02d}s"
    return f"{s}s"


def render_task_line(task: Task, now: datetime) -> str:
    icon = STATUS_ICONS.get(task.status, "•")
    line = f"{icon} <b>#{task.id}</b> {escape(task.name)}"
    elapsed = task.elapsed_at(now)
    if task.timer_running:
        line += f" ⏱ {format_duration(elapsed)} (running)"
    elif elapsed:
        line += f" ⏱ {format_duration(elapsed)}"
    return line


def render_task(task: Task, now: datetime) -> str:
    lines = [render_task_line(task, now), f"Status: {task.status}"]
    if task.description:
        lines.append(escape(task.description))
    return "\n".join(lines)


def render_tasks_text(tasks: Sequence[Task], now: datetime) -> str:
    if not tasks:
        return NO_TASKS
    return "\n".join(["Tasks:"] + [render_task_line(t, now) for t in tasks])


def render_summary(summary: TaskSummary) -> str:
    lines = [
        "<b>Dashboard</b>",
        f"Total: {summary.total}",
    ]
    for status, count in summary.by_status.items():
        lines.append(f"{STATUS_ICONS.get(status, '•')} {status}: {count}")
    lines.append(f"Running timers: {summary.running_timers}")
    lines.append(f"Tracked time: {format_duration(summary.elapsed_seconds)}")
    return "\n".join(lines)
