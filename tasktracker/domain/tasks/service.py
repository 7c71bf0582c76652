from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from tasktracker.domain.common.errors import (
    NotFoundError,
    TimerAlreadyRunningError,
    TimerNotRunningError,
)
from tasktracker.domain.common.time import whole_seconds_between
from tasktracker.domain.tasks.locks import KeyedLock
from tasktracker.domain.tasks.models import (
    STATUS_TODO,
    TASK_STATUSES,
    CreateTaskRequest,
    NewTask,
    Task,
    TaskFilters,
    TaskSummary,
)
from tasktracker.domain.tasks.ports import Clock, TaskRepository
from tasktracker.domain.tasks.rules import (
    normalize_name,
    validate_optional_status,
    validate_status,
)

logger = logging.getLogger(__name__)


class TaskService:
    """
    Task lifecycle and timer state machine. No aiogram. No sqlite.

    Every read-modify-write on a task runs under a lock keyed by the task id,
    so two coroutines racing on start/stop of the same task are applied one
    after the other. Operations on different ids do not wait on each other.
    """

    def __init__(self, repo: TaskRepository, clock: Clock) -> None:
        self._repo = repo
        self._clock = clock
        self._locks = KeyedLock()

    async def list(self, filters: Optional[TaskFilters] = None) -> Sequence[Task]:
        filters = filters or TaskFilters()
        status = validate_optional_status(filters.status)
        search = (filters.search or "").strip() or None
        tasks = await self._repo.query_tasks(replace(filters, status=status, search=search))
        return sorted(tasks, key=lambda t: t.id)

    async def get(self, task_id: int) -> Task:
        task = await self._repo.get_task(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def create(self, req: CreateTaskRequest) -> Task:
        name = normalize_name(req.name)
        status = validate_optional_status(req.status) or STATUS_TODO

        now = self._clock.now()
        task = await self._repo.insert_task(
            NewTask(
                user_id=req.user_id,
                name=name,
                description=req.description or "",
                status=status,
                created_at=now,
            )
        )
        logger.debug("Task created: id=%s status=%s", task.id, task.status)
        return task

    async def update_status(self, task_id: int, status: Optional[str]) -> Task:
        status = validate_status(status)

        async with self._locks.hold(task_id):
            task = await self.get(task_id)
            updated = replace(task, status=status, updated_at=self._clock.now())
            await self._repo.update_task(updated)
            return updated

    async def start_timer(self, task_id: int) -> Task:
        async with self._locks.hold(task_id):
            task = await self.get(task_id)
            if task.timer_running:
                raise TimerAlreadyRunningError()

            now = self._clock.now()
            updated = replace(task, timer_running=True, timer_started_at=now, updated_at=now)
            await self._repo.update_task(updated)
            logger.debug("Timer started: task_id=%s", task_id)
            return updated

    async def stop_timer(self, task_id: int) -> Task:
        async with self._locks.hold(task_id):
            task = await self.get(task_id)
            if not task.timer_running or task.timer_started_at is None:
                raise TimerNotRunningError()

            now = self._clock.now()
            delta = whole_seconds_between(task.timer_started_at, now)
            if delta == 0 and now < task.timer_started_at:
                logger.warning(
                    "Clock moved backwards while timer was running: task_id=%s started_at=%s now=%s",
                    task_id,
                    task.timer_started_at.isoformat(),
                    now.isoformat(),
                )

            updated = replace(
                task,
                timer_running=False,
                timer_started_at=None,
                elapsed_seconds=task.elapsed_seconds + delta,
                updated_at=now,
            )
            await self._repo.update_task(updated)
            logger.debug("Timer stopped: task_id=%s delta=%ss", task_id, delta)
            return updated

    async def summary(self, user_id: Optional[int] = None) -> TaskSummary:
        tasks = await self._repo.query_tasks(TaskFilters(user_id=user_id))
        by_status = {s: 0 for s in TASK_STATUSES}
        running = 0
        elapsed = 0
        for t in tasks:
            by_status[t.status] = by_status.get(t.status, 0) + 1
            if t.timer_running:
                running += 1
            elapsed += t.elapsed_seconds
        return TaskSummary(
            total=len(tasks),
            by_status=by_status,
            running_timers=running,
            elapsed_seconds=elapsed,
        )
