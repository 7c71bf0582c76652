from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from tasktracker.domain.common.time import from_iso_opt, to_iso
from tasktracker.domain.requestlog.models import RequestLogEntry
from tasktracker.domain.tasks.ports import RequestLogRepository
from tasktracker.infra.db.connection import Database


class RequestLogsSqliteRepo(RequestLogRepository):
    """Append-only request_logs table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def insert_log_entry(self, entry: RequestLogEntry) -> None:
        created_at = entry.created_at or datetime.now(timezone.utc)
        await self._db.insert(
            """
            INSERT INTO request_logs(route, method, status_code, duration_ms, error_message, created_at)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                entry.route,
                entry.method,
                entry.status_code,
                entry.duration_ms,
                entry.error_message,
                to_iso(created_at),
            ),
        )

    async def list_recent(self, limit: int = 50) -> Sequence[RequestLogEntry]:
        rows = await self._db.fetchall(
            """
            SELECT route, method, status_code, duration_ms, error_message, created_at
            FROM request_logs
            ORDER BY id DESC
            LIMIT ?;
            """,
            (limit,),
        )
        return [
            RequestLogEntry(
                route=r["route"],
                method=r["method"],
                status_code=int(r["status_code"]),
                duration_ms=int(r["duration_ms"]),
                error_message=r["error_message"],
                created_at=from_iso_opt(r["created_at"]),
            )
            for r in rows
        ]
