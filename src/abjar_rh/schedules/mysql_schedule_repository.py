from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Schedule, ScheduleInput
from .repository import ScheduleRepository

_SELECT = """
    SELECT j.id, j.course_name, j.day, j.start_time, j.end_time, j.description,
           j.created_by, u.full_name AS creator_name, j.created_at, j.updated_at
    FROM schedules j
    LEFT JOIN users u ON u.id = j.created_by
"""

# ENUM columns sort by declaration order: Senin..Minggu
_ORDER = "ORDER BY j.day ASC, j.start_time ASC"


def _to_schedule(r: dict) -> Schedule:
    return Schedule(
        schedule_id=int(r["id"]),
        course_name=r["course_name"],
        day=Weekday(r["day"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        description=r.get("description"),
        created_by=r.get("created_by"),
        creator_name=r.get("creator_name"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {_ORDER}")
            return [_to_schedule(r) for r in fetchall(cur)]

    def list_for_day(self, day: Weekday) -> Sequence[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE j.day=%s {_ORDER}", (day.value,))
            return [_to_schedule(r) for r in fetchall(cur)]

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE j.id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def create(self, data: ScheduleInput, *, created_by: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedules(course_name, day, start_time, end_time, description, created_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (data.course_name, data.day.value, data.start_time, data.end_time, data.description, int(created_by)),
            )
            return int(cur.lastrowid)

    def update(self, schedule_id: int, data: ScheduleInput) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE schedules
                SET course_name=%s, day=%s, start_time=%s, end_time=%s, description=%s, updated_at=NOW()
                WHERE id=%s
                """,
                (data.course_name, data.day.value, data.start_time, data.end_time, data.description, int(schedule_id)),
            )
            return cur.rowcount > 0

    def delete(self, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedules WHERE id=%s", (int(schedule_id),))
            return cur.rowcount > 0

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM schedules")
            r = fetchone(cur)
            return int(r["n"]) if r else 0
