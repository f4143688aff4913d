from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import is_weekday, round_half_up, weekday_of
from ..core.constants import DASHBOARD_WINDOW_DAYS
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class DayPoint:
    day_date: date
    label: str
    count: int

    def to_dict(self) -> dict:
        return {"date": self.day_date.isoformat(), "day": self.label, "count": self.count}


@dataclass(frozen=True)
class WeeklyAttendance:
    rate: int
    series: list[DayPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"rate": self.rate, "series": [p.to_dict() for p in self.series]}


def window_start(today: date, days: int = DASHBOARD_WINDOW_DAYS) -> date:
    return today - timedelta(days=days - 1)


def weekly_attendance(records: Iterable[AttendanceRecord], today: date) -> WeeklyAttendance:
    """Approved-per-day series for the last 7 days and the weekday approval rate.

    The rate only counts Monday-Friday records; weekends still show up in the
    series so the chart has seven points.
    """
    start = window_start(today)
    in_window = [r for r in records if start <= r.attendance_date <= today]

    weekday_rows = [r for r in in_window if is_weekday(r.attendance_date)]
    approved = sum(1 for r in weekday_rows if r.status == AttendanceStatus.APPROVED)
    rate = round_half_up(100 * approved / len(weekday_rows)) if weekday_rows else 0

    series = []
    for offset in range(DASHBOARD_WINDOW_DAYS):
        d = start + timedelta(days=offset)
        count = sum(1 for r in in_window if r.attendance_date == d and r.status == AttendanceStatus.APPROVED)
        series.append(DayPoint(day_date=d, label=weekday_of(d).short, count=count))

    return WeeklyAttendance(rate=rate, series=series)
