from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from tasktracker.domain.requestlog.models import RequestLogEntry
from tasktracker.domain.tasks.models import NewTask, Task, TaskFilters


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime: ...


class TaskRepository(ABC):
    """
    Durable task storage. Implementations raise their own exceptions for
    storage faults. get_task reports a missing task as None; update_task
    raises NotFoundError when there is no row to update.
    """

    @abstractmethod
    async def insert_task(self, task: NewTask) -> Task: ...

    @abstractmethod
    async def update_task(self, task: Task) -> None: ...

    @abstractmethod
    async def get_task(self, task_id: int) -> Optional[Task]: ...

    @abstractmethod
    async def query_tasks(self, filters: TaskFilters) -> Sequence[Task]: ...


class RequestLogRepository(ABC):
    @abstractmethod
    async def insert_log_entry(self, entry: RequestLogEntry) -> None: ...
