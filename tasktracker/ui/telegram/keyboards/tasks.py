from __future__ import annotations

from typing import Sequence

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from tasktracker.domain.tasks.models import STATUS_DONE, STATUS_IN_PROGRESS, Task

TASK_CB_PREFIX = "tk"


def task_cb(action: str, task_id: int) -> str:
    return f"{TASK_CB_PREFIX}:{action}:{task_id}"


def tasks_list_kb(tasks: Sequence[Task]) -> InlineKeyboardMarkup:
    """One row per task: timer toggle, in progress, done."""
    kb = InlineKeyboardBuilder()
    for t in tasks:
        if t.timer_running:
            kb.button(text=f"⏹ #{t.id}", callback_data=task_cb("stop", t.id))
        else:
            kb.button(text=f"▶️ #{t.id}", callback_data=task_cb("start", t.id))
        kb.button(text="🔄", callback_data=task_cb(STATUS_IN_PROGRESS, t.id))
        kb.button(text="✅", callback_data=task_cb(STATUS_DONE, t.id))
    kb.adjust(3)
    return kb.as_markup()
