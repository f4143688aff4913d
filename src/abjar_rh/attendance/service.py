from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import weekday_of
from ..common.pagination import paginate
from ..core.constants import ATTENDANCE_PAGE_SIZE
from ..core.enums import AttendanceStatus, NotificationType, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import (
    can_approve_attendance,
    can_attend_class,
    can_download_attendance,
    can_export_all_attendance,
    can_filter_attendance,
)
from ..notifications.service import NotificationService
from ..schedules.repository import ScheduleRepository
from ..users.model import SessionUser
from ..users.repository import UserRepository
from ..users.service import refresh_actor
from .export import build_workbook, export_filename
from .model import AttendanceRow
from .repository import AttendanceRepository


@dataclass(frozen=True)
class ExportFile:
    content: bytes
    filename: str


def _row_to_dict(row: AttendanceRow, *, can_approve: bool) -> dict:
    return {
        "id": row.attendance_id,
        "user_id": row.user_id,
        "user_name": row.user_name,
        "npm": row.npm,
        "user_role": row.user_role.value,
        "schedule_id": row.schedule_id,
        "course_name": row.course_name,
        "attendance_date": row.attendance_date.isoformat(),
        "status": row.status.value,
        "status_label": row.status.label,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "approver_name": row.approver_name,
        "approved_at": row.approved_at.isoformat() if row.approved_at else None,
        "can_approve": can_approve,
    }


class AttendanceService:
    """Use case: submit class attendance, review it up the role chain, export it."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        users: UserRepository,
        notifications: NotificationService,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._users = users
        self._notifications = notifications

    def today_schedules(self, actor: SessionUser, *, now: datetime) -> list[dict]:
        if not can_attend_class(actor.role):
            return []

        attended = self._attendance.attended_schedule_ids(user_id=actor.user_id, attendance_date=now.date())
        out = []
        for s in self._schedules.list_for_day(weekday_of(now.date())):
            has_attended = s.schedule_id in attended
            row = s.to_dict()
            row["has_attended"] = has_attended
            row["can_attend"] = (not has_attended) and s.is_open_at(now.time())
            out.append(row)
        return out

    def submit(self, actor: SessionUser, schedule_id: int, *, now: datetime) -> int:
        actor = refresh_actor(self._users, actor)
        if not can_attend_class(actor.role):
            raise AuthorizationError("Anda tidak dapat melakukan absensi")

        schedule = self._schedules.get_by_id(int(schedule_id))
        if not schedule:
            raise NotFoundError("Jadwal tidak ditemukan")
        if schedule.day != weekday_of(now.date()):
            raise ValidationError("Jadwal ini bukan untuk hari ini")
        if not schedule.is_open_at(now.time()):
            raise ValidationError("Absensi hanya dapat dilakukan selama jam kuliah")

        try:
            return self._attendance.create(
                user_id=actor.user_id,
                schedule_id=schedule.schedule_id,
                attendance_date=now.date(),
            )
        except ConflictError as e:
            raise ConflictError("Anda sudah absen untuk jadwal ini hari ini") from e

    def list_records(
        self,
        actor: SessionUser,
        *,
        date_filter: Optional[date] = None,
        status_filter: Optional[AttendanceStatus] = None,
        page: int = 1,
    ) -> dict:
        actor = refresh_actor(self._users, actor)

        if can_filter_attendance(actor.role):
            rows = list(self._attendance.list_rows(attendance_date=date_filter, status=status_filter))
        else:
            rows = list(self._attendance.list_rows(user_id=actor.user_id))

        result = paginate(rows, page=page, per_page=ATTENDANCE_PAGE_SIZE)
        return {
            "items": [
                _row_to_dict(r, can_approve=can_approve_attendance(actor.role, r.user_role, r.status))
                for r in result.items
            ],
            "pagination": result.to_dict(),
            "stats": {
                "total": len(rows),
                AttendanceStatus.PENDING.value: sum(1 for r in rows if r.status == AttendanceStatus.PENDING),
                AttendanceStatus.APPROVED.value: sum(1 for r in rows if r.status == AttendanceStatus.APPROVED),
                AttendanceStatus.REJECTED.value: sum(1 for r in rows if r.status == AttendanceStatus.REJECTED),
            },
        }

    def decide(self, actor: SessionUser, attendance_id: int, status: AttendanceStatus, *, now: datetime) -> AttendanceRow:
        if status == AttendanceStatus.PENDING:
            raise ValidationError("Status tidak valid")

        actor = refresh_actor(self._users, actor)
        row = self._attendance.get_row(int(attendance_id))
        if not row:
            raise NotFoundError("Data absensi tidak ditemukan")
        if row.status != AttendanceStatus.PENDING:
            raise ValidationError("Absensi sudah diproses")

        submitter = self._users.get_by_id(row.user_id)
        if not submitter:
            raise NotFoundError("Pengguna tidak ditemukan")
        if not can_approve_attendance(actor.role, submitter.role, row.status):
            raise AuthorizationError("Anda tidak memiliki akses untuk memproses absensi ini")

        if not self._attendance.decide(
            attendance_id=row.attendance_id,
            status=status,
            approved_by=actor.user_id,
            approved_at=now,
        ):
            raise ValidationError("Absensi sudah diproses")

        verb = "disetujui" if status == AttendanceStatus.APPROVED else "ditolak"
        self._notifications.notify(
            user_id=row.user_id,
            title=f"Absensi {status.label}",
            message=f"Absensi {row.course_name} tanggal {row.attendance_date.strftime('%d/%m/%Y')} telah {verb}",
            type=NotificationType.ATTENDANCE,
        )

        updated = self._attendance.get_row(row.attendance_id)
        return updated or row

    def pending_count_for(self, actor: SessionUser) -> int:
        """Rows waiting on this actor (or, for members, their own pending rows)."""
        if actor.role == Role.SUPER_ADMIN:
            rows = self._attendance.list_rows(status=AttendanceStatus.PENDING, submitter_role=Role.ADMIN)
        elif actor.role == Role.ADMIN:
            rows = self._attendance.list_rows(status=AttendanceStatus.PENDING, submitter_role=Role.MEMBER)
        else:
            rows = self._attendance.list_rows(status=AttendanceStatus.PENDING, user_id=actor.user_id)
        return len(rows)

    def export(self, actor: SessionUser, *, today: date) -> ExportFile:
        actor = refresh_actor(self._users, actor)
        if not can_download_attendance(actor.role):
            raise AuthorizationError("Anda tidak memiliki akses untuk mengunduh absensi")

        export_all = can_export_all_attendance(actor.role)
        if export_all:
            rows = self._attendance.list_rows(oldest_first=True)
        else:
            rows = self._attendance.list_rows(user_id=actor.user_id, oldest_first=True)

        return ExportFile(
            content=build_workbook(rows),
            filename=export_filename(full_name=actor.full_name, export_all=export_all, today=today),
        )
