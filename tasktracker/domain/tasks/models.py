from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from tasktracker.domain.common.time import whole_seconds_between


STATUS_TODO = "todo"
STATUS_IN_PROGRESS = "in_progress"
STATUS_DONE = "done"

TASK_STATUSES = (STATUS_TODO, STATUS_IN_PROGRESS, STATUS_DONE)

NAME_MAX_LEN = 200


@dataclass(frozen=True)
class Task:
    id: int
    user_id: int
    name: str
    description: str
    status: str  # one of TASK_STATUSES
    timer_running: bool
    timer_started_at: Optional[datetime]  # set only while timer_running
    elapsed_seconds: int  # closed intervals only
    created_at: datetime
    updated_at: datetime

    def elapsed_at(self, now: datetime) -> int:
        """Elapsed seconds including the currently open interval, if any."""
        if not self.timer_running or self.timer_started_at is None:
            return self.elapsed_seconds
        return self.elapsed_seconds + whole_seconds_between(self.timer_started_at, now)


@dataclass(frozen=True)
class NewTask:
    """Row to insert; the repository assigns the id."""

    user_id: int
    name: str
    description: str
    status: str
    created_at: datetime


@dataclass(frozen=True)
class TaskFilters:
    status: Optional[str] = None
    search: Optional[str] = None
    user_id: Optional[int] = None


@dataclass(frozen=True)
class CreateTaskRequest:
    user_id: int
    name: Optional[str]
    description: Optional[str] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class TaskSummary:
    total: int
    by_status: Dict[str, int] = field(default_factory=dict)
    running_timers: int = 0
    elapsed_seconds: int = 0
