from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Callable, Optional, Set

from tasktracker.domain.requestlog.models import RequestLogEntry
from tasktracker.domain.tasks.ports import Clock, RequestLogRepository

REQUESTS_LOGGER_NAME = "tasktracker.requests"

DiagnosticSink = Callable[[str], None]


def stderr_diagnostics(message: str) -> None:
    try:
        print(message, file=sys.stderr)
    except Exception:
        # stderr gone (closed pipe, detached process): nothing left to report to
        pass


class RequestLogger:
    """
    Records the outcome of every operation.

    - structured stream: one JSON line on the `tasktracker.requests` logger,
      written synchronously before log_request returns
    - durable store: insert scheduled as a background task, the caller
      never waits for it

    Nothing raised while logging reaches the caller. Failures go to the
    diagnostic sink and are dropped.
    """

    def __init__(
        self,
        repo: RequestLogRepository,
        clock: Clock,
        diagnostics: Optional[DiagnosticSink] = None,
        stream: Optional[logging.Logger] = None,
    ) -> None:
        self._repo = repo
        self._clock = clock
        self._diagnostics = diagnostics or stderr_diagnostics
        self._stream = stream or logging.getLogger(REQUESTS_LOGGER_NAME)
        self._pending: Set[asyncio.Task] = set()
        self._closed = False

    def log_request(
        self,
        route: str,
        method: str,
        status_code: int,
        duration_ms: int,
        error_message: Optional[str] = None,
    ) -> Optional[RequestLogEntry]:
        try:
            entry = RequestLogEntry(
                route=route,
                method=method,
                status_code=int(status_code),
                duration_ms=max(0, int(duration_ms)),
                error_message=error_message or None,
                created_at=self._clock.now(),
            )
        except Exception as e:
            self._report(f"Error building request_log entry for {method} {route}: {e!r}")
            return None

        self._write_stream(entry)

        if self._closed:
            self._report(f"Request logger closed, request_log not persisted: {method} {route}")
            return entry

        try:
            task = asyncio.get_running_loop().create_task(self._persist(entry))
        except RuntimeError as e:
            self._report(f"Error scheduling request_log insert: {e!r}")
            return entry

        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return entry

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled durable write to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        self._closed = True
        await self.drain()

    def _write_stream(self, entry: RequestLogEntry) -> None:
        try:
            record = {
                "route": entry.route,
                "method": entry.method,
                "status_code": entry.status_code,
                "duration_ms": entry.duration_ms,
            }
            if entry.error_message:
                record["error"] = entry.error_message
            self._stream.info(json.dumps(record, ensure_ascii=False))
        except Exception as e:
            self._report(f"Error writing request log line: {e!r}")

    async def _persist(self, entry: RequestLogEntry) -> None:
        try:
            await self._repo.insert_log_entry(entry)
        except Exception as e:
            self._report(f"Error inserting request_log: {e!r}")

    def _report(self, message: str) -> None:
        try:
            self._diagnostics(message)
        except Exception:
            stderr_diagnostics(message)
