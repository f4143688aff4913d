from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import parse_hhmm, weekday_of
from ..common.validators import require_non_empty
from ..core.enums import Weekday
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import can_manage_schedule
from ..users.model import SessionUser
from ..users.repository import UserRepository
from ..users.service import refresh_actor
from .model import Schedule, ScheduleInput
from .repository import ScheduleRepository


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository, users: UserRepository):
        self._schedules = schedules
        self._users = users

    @staticmethod
    def build_input(
        *,
        course_name: str,
        day: str,
        start_time: str,
        end_time: str,
        description: Optional[str] = None,
    ) -> ScheduleInput:
        course_name = require_non_empty(course_name, "Mata kuliah")
        try:
            weekday = Weekday((day or "").strip())
        except ValueError:
            raise ValidationError("Hari tidak valid")

        start = parse_hhmm(start_time, "Jam mulai")
        end = parse_hhmm(end_time, "Jam selesai")
        if end <= start:
            raise ValidationError("Jam selesai harus setelah jam mulai")

        description = (description or "").strip() or None
        return ScheduleInput(course_name=course_name, day=weekday, start_time=start, end_time=end, description=description)

    def _require_manager(self, actor: SessionUser) -> SessionUser:
        actor = refresh_actor(self._users, actor)
        if not can_manage_schedule(actor.role):
            raise AuthorizationError("Anda tidak memiliki akses untuk mengelola jadwal")
        return actor

    def list_all(self) -> list[Schedule]:
        return list(self._schedules.list_all())

    def list_grouped(self) -> dict[str, list[Schedule]]:
        grouped: dict[str, list[Schedule]] = {day.value: [] for day in Weekday.ordered()}
        for s in self._schedules.list_all():
            grouped[s.day.value].append(s)
        return grouped

    def today(self, now: datetime) -> list[Schedule]:
        return list(self._schedules.list_for_day(weekday_of(now.date())))

    def course_names(self) -> list[str]:
        return sorted({s.course_name for s in self._schedules.list_all()})

    def count(self) -> int:
        return self._schedules.count()

    def create(self, actor: SessionUser, data: ScheduleInput) -> int:
        actor = self._require_manager(actor)
        return self._schedules.create(data, created_by=actor.user_id)

    def update(self, actor: SessionUser, schedule_id: int, data: ScheduleInput) -> None:
        self._require_manager(actor)
        if not self._schedules.get_by_id(int(schedule_id)):
            raise NotFoundError("Jadwal tidak ditemukan")
        self._schedules.update(int(schedule_id), data)

    def delete(self, actor: SessionUser, schedule_id: int) -> None:
        self._require_manager(actor)
        if not self._schedules.delete(int(schedule_id)):
            raise NotFoundError("Jadwal tidak ditemukan")
