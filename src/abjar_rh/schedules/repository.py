from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Weekday
from .model import Schedule, ScheduleInput


class ScheduleRepository(Protocol):
    def list_all(self) -> Sequence[Schedule]:
        """Ordered by day (Senin..Minggu) then start time, with creator name."""

        raise NotImplementedError

    def list_for_day(self, day: Weekday) -> Sequence[Schedule]:
        raise NotImplementedError

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        raise NotImplementedError

    def create(self, data: ScheduleInput, *, created_by: int) -> int:
        raise NotImplementedError

    def update(self, schedule_id: int, data: ScheduleInput) -> bool:
        raise NotImplementedError

    def delete(self, schedule_id: int) -> bool:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
