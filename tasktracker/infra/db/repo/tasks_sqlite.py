from __future__ import annotations

from typing import Any, List, Optional, Sequence

from tasktracker.domain.common.errors import NotFoundError
from tasktracker.domain.common.time import from_iso, from_iso_opt, to_iso
from tasktracker.domain.tasks.models import NewTask, Task, TaskFilters
from tasktracker.domain.tasks.ports import TaskRepository
from tasktracker.infra.db.connection import Database


class TasksSqliteRepo(TaskRepository):
    def __init__(self, db: Database) -> None:
        self._db = db

    async def insert_task(self, task: NewTask) -> Task:
        now_iso = to_iso(task.created_at)
        task_id = await self._db.insert(
            """
            INSERT INTO tasks(
              user_id, name, description, status,
              timer_running, timer_started_at, elapsed_seconds,
              created_at, updated_at
            ) VALUES (?, ?, ?, ?, 0, NULL, 0, ?, ?);
            """,
            (task.user_id, task.name, task.description, task.status, now_iso, now_iso),
        )
        return Task(
            id=task_id,
            user_id=task.user_id,
            name=task.name,
            description=task.description,
            status=task.status,
            timer_running=False,
            timer_started_at=None,
            elapsed_seconds=0,
            created_at=task.created_at,
            updated_at=task.created_at,
        )

    async def update_task(self, task: Task) -> None:
        # all mutable columns in one statement: the row is either fully old or fully new
        updated = await self._db.execute(
            """
            UPDATE tasks
            SET name = ?,
                description = ?,
                status = ?,
                timer_running = ?,
                timer_started_at = ?,
                elapsed_seconds = ?,
                updated_at = ?
            WHERE id = ?;
            """,
            (
                task.name,
                task.description,
                task.status,
                1 if task.timer_running else 0,
                to_iso(task.timer_started_at) if task.timer_started_at else None,
                task.elapsed_seconds,
                to_iso(task.updated_at),
                task.id,
            ),
        )
        if updated != 1:
            raise NotFoundError("Task not found")

    async def get_task(self, task_id: int) -> Optional[Task]:
        row = await self._db.fetchone("SELECT * FROM tasks WHERE id = ?;", (task_id,))
        return self._row_to_task(row) if row else None

    async def query_tasks(self, filters: TaskFilters) -> Sequence[Task]:
        where: List[str] = []
        params: List[Any] = []
        if filters.user_id is not None:
            where.append("user_id = ?")
            params.append(filters.user_id)
        if filters.status:
            where.append("status = ?")
            params.append(filters.status)
        if filters.search:
            # plain substring on casefolded text; LIKE only folds ASCII
            where.append("instr(casefold(name), ?) > 0")
            params.append(filters.search.casefold())

        sql = "SELECT * FROM tasks"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY id ASC;"

        rows = await self._db.fetchall(sql, params)
        return [self._row_to_task(r) for r in rows]

    def _row_to_task(self, row) -> Task:
        return Task(
            id=int(row["id"]),
            user_id=int(row["user_id"]),
            name=row["name"],
            description=row["description"] or "",
            status=row["status"],
            timer_running=bool(row["timer_running"]),
            timer_started_at=from_iso_opt(row["timer_started_at"]),
            elapsed_seconds=int(row["elapsed_seconds"] or 0),
            created_at=from_iso(row["created_at"]),
            updated_at=from_iso(row["updated_at"]),
        )
