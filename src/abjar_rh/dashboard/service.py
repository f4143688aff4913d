from __future__ import annotations

from datetime import datetime

from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..core.enums import Role
from ..schedules.service import ScheduleService
from ..tasks.service import TaskService, days_until_label
from ..users.model import SessionUser
from ..users.repository import UserRepository
from ..users.service import refresh_actor
from .aggregation import weekly_attendance, window_start

PENDING_LABELS = {
    Role.SUPER_ADMIN: "Pending Admin",
    Role.ADMIN: "Pending Anggota",
    Role.MEMBER: "Absensi Pending",
}


class DashboardService:
    def __init__(
        self,
        *,
        users: UserRepository,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
        schedule_service: ScheduleService,
        task_service: TaskService,
    ):
        self._users = users
        self._attendance = attendance
        self._attendance_service = attendance_service
        self._schedule_service = schedule_service
        self._task_service = task_service

    def overview(self, actor: SessionUser, *, now: datetime) -> dict:
        actor = refresh_actor(self._users, actor)
        today = now.date()

        upcoming = [
            {
                "id": t.task_id,
                "course_name": t.course_name,
                "deadline": t.deadline.isoformat(),
                "description": t.description,
                "due_label": days_until_label(t.deadline, now),
            }
            for t in self._task_service.upcoming(now=now)
        ]

        out = {
            "greeting": actor.first_name,
            "role": actor.role.value,
            "role_label": actor.role.label,
            "today_schedules": [s.to_dict() for s in self._schedule_service.today(now)],
            "upcoming_tasks": upcoming,
            "stats": {
                "total_schedules": self._schedule_service.count(),
                "active_tasks": self._task_service.count_active(now=now),
                "pending": self._attendance_service.pending_count_for(actor),
                "pending_label": PENDING_LABELS[actor.role],
            },
        }

        if actor.role == Role.SUPER_ADMIN:
            counts = self._users.count_by_role()
            out["user_totals"] = {
                "users": sum(counts.values()),
                "admins": counts.get(Role.ADMIN, 0),
                "members": counts.get(Role.MEMBER, 0),
            }
        else:
            records = self._attendance.list_for_user_between(
                user_id=actor.user_id,
                start=window_start(today),
                end=today,
            )
            out["weekly_attendance"] = weekly_attendance(records, today).to_dict()

        return out
