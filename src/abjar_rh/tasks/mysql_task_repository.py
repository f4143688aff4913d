from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import CompletionStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Task, TaskCompletion, TaskCompletionStat, TaskInput
from .repository import TaskRepository

_SELECT = """
    SELECT t.id, t.course_name, t.deadline, t.description, t.created_by,
           u.full_name AS creator_name, t.created_at
    FROM tasks t
    LEFT JOIN users u ON u.id = t.created_by
"""


def _to_task(r: dict) -> Task:
    return Task(
        task_id=int(r["id"]),
        course_name=r["course_name"],
        deadline=r["deadline"],
        description=r["description"],
        created_by=r.get("created_by"),
        creator_name=r.get("creator_name"),
        created_at=r.get("created_at"),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} ORDER BY t.deadline ASC")
            return [_to_task(r) for r in fetchall(cur)]

    def list_upcoming(self, *, now: datetime, limit: int) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE t.deadline >= %s ORDER BY t.deadline ASC LIMIT %s", (now, int(limit)))
            return [_to_task(r) for r in fetchall(cur)]

    def count_active(self, *, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM tasks WHERE deadline >= %s", (now,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE t.id=%s", (int(task_id),))
            r = fetchone(cur)
            return _to_task(r) if r else None

    def create(self, data: TaskInput, *, created_by: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO tasks(course_name, deadline, description, created_by) VALUES(%s,%s,%s,%s)",
                (data.course_name, data.deadline, data.description, int(created_by)),
            )
            return int(cur.lastrowid)

    def update(self, task_id: int, data: TaskInput) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE tasks SET course_name=%s, deadline=%s, description=%s WHERE id=%s",
                (data.course_name, data.deadline, data.description, int(task_id)),
            )
            return cur.rowcount > 0

    def delete(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE id=%s", (int(task_id),))
            return cur.rowcount > 0

    def completions_for_user(self, user_id: int) -> Sequence[TaskCompletion]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT task_id, user_id, status, completed_at FROM task_completions WHERE user_id=%s",
                (int(user_id),),
            )
            return [
                TaskCompletion(
                    task_id=int(r["task_id"]),
                    user_id=int(r["user_id"]),
                    status=CompletionStatus(r["status"]),
                    completed_at=r.get("completed_at"),
                )
                for r in fetchall(cur)
            ]

    def upsert_completion(
        self,
        *,
        task_id: int,
        user_id: int,
        status: CompletionStatus,
        completed_at: Optional[datetime],
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO task_completions(task_id, user_id, status, completed_at)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), completed_at=VALUES(completed_at)
                """,
                (int(task_id), int(user_id), status.value, completed_at),
            )

    def completion_stats(self) -> Sequence[TaskCompletionStat]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT t.id, t.course_name,
                       COUNT(c.id) AS completed_count,
                       (SELECT COUNT(*) FROM users WHERE role IN (%s, %s)) AS total_users
                FROM tasks t
                LEFT JOIN task_completions c ON c.task_id = t.id AND c.status = %s
                GROUP BY t.id, t.course_name
                ORDER BY t.deadline ASC
                """,
                (Role.MEMBER.value, Role.ADMIN.value, CompletionStatus.COMPLETED.value),
            )
            return [
                TaskCompletionStat(
                    task_id=int(r["id"]),
                    course_name=r["course_name"],
                    completed_count=int(r["completed_count"]),
                    total_users=int(r["total_users"]),
                )
                for r in fetchall(cur)
            ]
