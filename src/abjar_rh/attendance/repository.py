from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, Role
from .model import AttendanceRecord, AttendanceRow


class AttendanceRepository(Protocol):
    def list_rows(
        self,
        *,
        user_id: Optional[int] = None,
        attendance_date: Optional[date] = None,
        status: Optional[AttendanceStatus] = None,
        submitter_role: Optional[Role] = None,
        oldest_first: bool = False,
    ) -> Sequence[AttendanceRow]:
        """Joined rows; newest submission first unless `oldest_first` (by date)."""

        raise NotImplementedError

    def get_row(self, attendance_id: int) -> Optional[AttendanceRow]:
        raise NotImplementedError

    def list_for_user_between(self, *, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def attended_schedule_ids(self, *, user_id: int, attendance_date: date) -> set[int]:
        raise NotImplementedError

    def create(self, *, user_id: int, schedule_id: int, attendance_date: date) -> int:
        """Insert a pending record; raises ConflictError on a repeat submission."""

        raise NotImplementedError

    def decide(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        approved_by: int,
        approved_at: datetime,
    ) -> bool:
        """Move a pending record to approved/rejected; False if it was not pending."""

        raise NotImplementedError
