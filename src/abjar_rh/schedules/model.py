from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ..core.enums import Weekday


@dataclass(frozen=True)
class Schedule:
    schedule_id: int
    course_name: str
    day: Weekday
    start_time: time
    end_time: time
    description: Optional[str] = None
    created_by: Optional[int] = None
    creator_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_open_at(self, moment: time) -> bool:
        """True while `moment` is inside the class window (inclusive, minute precision)."""
        now = moment.replace(second=0, microsecond=0)
        start = self.start_time.replace(second=0, microsecond=0)
        end = self.end_time.replace(second=0, microsecond=0)
        return start <= now <= end

    def to_dict(self) -> dict:
        return {
            "id": self.schedule_id,
            "course_name": self.course_name,
            "day": self.day.value,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "description": self.description or "",
            "created_by": self.created_by,
            "creator_name": self.creator_name,
        }


@dataclass(frozen=True)
class ScheduleInput:
    course_name: str
    day: Weekday
    start_time: time
    end_time: time
    description: Optional[str] = None
