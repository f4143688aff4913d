from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository

_SELECT_ROWS = """
    SELECT a.id, a.user_id, u.full_name AS user_name, u.npm, u.role AS user_role,
           a.schedule_id, j.course_name, a.attendance_date, a.status, a.created_at,
           a.approved_by, ap.full_name AS approver_name, a.approved_at
    FROM attendance a
    JOIN users u ON u.id = a.user_id
    JOIN schedules j ON j.id = a.schedule_id
    LEFT JOIN users ap ON ap.id = a.approved_by
"""


def _to_row(r: dict) -> AttendanceRow:
    return AttendanceRow(
        attendance_id=int(r["id"]),
        user_id=int(r["user_id"]),
        user_name=r["user_name"],
        npm=str(r["npm"]),
        user_role=Role(r["user_role"]),
        schedule_id=int(r["schedule_id"]),
        course_name=r["course_name"],
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        created_at=r["created_at"],
        approved_by=r.get("approved_by"),
        approver_name=r.get("approver_name"),
        approved_at=r.get("approved_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_rows(
        self,
        *,
        user_id: Optional[int] = None,
        attendance_date: Optional[date] = None,
        status: Optional[AttendanceStatus] = None,
        submitter_role: Optional[Role] = None,
        oldest_first: bool = False,
    ) -> Sequence[AttendanceRow]:
        clauses = ["1=1"]
        params: list[object] = []

        if user_id is not None:
            clauses.append("a.user_id=%s")
            params.append(int(user_id))
        if attendance_date is not None:
            clauses.append("a.attendance_date=%s")
            params.append(attendance_date)
        if status is not None:
            clauses.append("a.status=%s")
            params.append(status.value)
        if submitter_role is not None:
            clauses.append("u.role=%s")
            params.append(submitter_role.value)

        where = " AND ".join(clauses)
        order = "a.attendance_date ASC, a.created_at ASC" if oldest_first else "a.created_at DESC, a.id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT_ROWS} WHERE {where} ORDER BY {order}", tuple(params))
            return [_to_row(r) for r in fetchall(cur)]

    def get_row(self, attendance_id: int) -> Optional[AttendanceRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT_ROWS} WHERE a.id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_row(r) if r else None

    def list_for_user_between(self, *, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, schedule_id, attendance_date, status, approved_by, approved_at, created_at
                FROM attendance
                WHERE user_id=%s AND attendance_date BETWEEN %s AND %s
                ORDER BY attendance_date ASC
                """,
                (int(user_id), start, end),
            )
            return [
                AttendanceRecord(
                    attendance_id=int(r["id"]),
                    user_id=int(r["user_id"]),
                    schedule_id=int(r["schedule_id"]),
                    attendance_date=r["attendance_date"],
                    status=AttendanceStatus(r["status"]),
                    approved_by=r.get("approved_by"),
                    approved_at=r.get("approved_at"),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]

    def attended_schedule_ids(self, *, user_id: int, attendance_date: date) -> set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT schedule_id FROM attendance WHERE user_id=%s AND attendance_date=%s",
                (int(user_id), attendance_date),
            )
            return {int(r["schedule_id"]) for r in fetchall(cur)}

    def create(self, *, user_id: int, schedule_id: int, attendance_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(user_id, schedule_id, attendance_date, status)
                VALUES(%s,%s,%s,%s)
                """,
                (int(user_id), int(schedule_id), attendance_date, AttendanceStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def decide(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        approved_by: int,
        approved_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET status=%s, approved_by=%s, approved_at=%s
                WHERE id=%s AND status=%s
                """,
                (status.value, int(approved_by), approved_at, int(attendance_id), AttendanceStatus.PENDING.value),
            )
            return cur.rowcount > 0
