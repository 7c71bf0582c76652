from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from tasktracker.domain.common.errors import (
    ConflictError,
    NotFoundError,
    TimerAlreadyRunningError,
    TimerNotRunningError,
    ValidationError,
)
from tasktracker.domain.requestlog.service import RequestLogger
from tasktracker.domain.tasks.models import CreateTaskRequest, TaskFilters
from tasktracker.domain.tasks.service import TaskService

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_BAD_REQUEST = 400
HTTP_NOT_FOUND = 404
HTTP_INTERNAL_ERROR = 500

INTERNAL_ERROR_MESSAGE = "Internal server error"


@dataclass(frozen=True)
class OperationResult:
    status_code: int
    body: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code < 400


def status_for_error(exc: BaseException) -> int:
    if isinstance(exc, (ValidationError, TimerAlreadyRunningError, TimerNotRunningError)):
        return HTTP_BAD_REQUEST
    if isinstance(exc, NotFoundError):
        return HTTP_NOT_FOUND
    if isinstance(exc, ConflictError):
        return HTTP_BAD_REQUEST
    return HTTP_INTERNAL_ERROR


class TaskOperations:
    """
    Entry point for callers (bot handlers, scripts, tests).

    Each call is timed, its outcome mapped to a status code, and exactly one
    request log entry written before the result is handed back. Errors never
    escape: the result carries the status code and a short message instead.
    """

    def __init__(self, tasks: TaskService, request_logger: RequestLogger, default_user_id: int = 1) -> None:
        self._tasks = tasks
        self._log = request_logger
        self._default_user_id = default_user_id

    async def list_tasks(self, status: Optional[str] = None, search: Optional[str] = None) -> OperationResult:
        filters = TaskFilters(status=status or None, search=search or None)
        return await self._run("/tasks", "GET", HTTP_OK, lambda: self._tasks.list(filters))

    async def create_task(
        self,
        name: Optional[str],
        description: Optional[str] = None,
        status: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> OperationResult:
        req = CreateTaskRequest(
            user_id=self._default_user_id if user_id is None else user_id,
            name=name,
            description=description,
            status=status,
        )
        return await self._run("/tasks", "POST", HTTP_CREATED, lambda: self._tasks.create(req))

    async def update_status(self, task_id: int, status: Optional[str]) -> OperationResult:
        return await self._run(
            f"/tasks/{task_id}/status",
            "PATCH",
            HTTP_OK,
            lambda: self._tasks.update_status(task_id, status),
        )

    async def start_timer(self, task_id: int) -> OperationResult:
        return await self._run(
            f"/tasks/{task_id}/start", "POST", HTTP_OK, lambda: self._tasks.start_timer(task_id)
        )

    async def stop_timer(self, task_id: int) -> OperationResult:
        return await self._run(
            f"/tasks/{task_id}/stop", "POST", HTTP_OK, lambda: self._tasks.stop_timer(task_id)
        )

    async def dashboard_summary(self, user_id: Optional[int] = None) -> OperationResult:
        return await self._run(
            "/dashboard/summary", "GET", HTTP_OK, lambda: self._tasks.summary(user_id)
        )

    async def _run(
        self,
        route: str,
        method: str,
        success_code: int,
        call: Callable[[], Awaitable[Any]],
    ) -> OperationResult:
        start = time.perf_counter()
        try:
            body = await call()
        except Exception as e:
            code = status_for_error(e)
            if code == HTTP_INTERNAL_ERROR:
                logger.error("%s %s failed", method, route, exc_info=True)
                audit_message = str(e) or type(e).__name__
                result = OperationResult(status_code=code, error=INTERNAL_ERROR_MESSAGE)
            else:
                audit_message = str(e)
                result = OperationResult(status_code=code, error=audit_message)
            self._log.log_request(route, method, code, _elapsed_ms(start), audit_message)
            return result

        duration = _elapsed_ms(start)
        self._log.log_request(route, method, success_code, duration)
        logger.debug("[PERF] %s %s - %s ms", method, route, duration)
        return OperationResult(status_code=success_code, body=body)


def _elapsed_ms(start: float) -> int:
    return max(0, int((time.perf_counter() - start) * 1000))

