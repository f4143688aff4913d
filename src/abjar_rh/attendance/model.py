from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, Role


@dataclass(frozen=True)
class AttendanceRecord:
    """Entitas domain: satu pengajuan absensi untuk satu jadwal pada satu tanggal."""

    attendance_id: int
    user_id: int
    schedule_id: int
    attendance_date: date
    status: AttendanceStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceRow:
    """Read-model untuk tabel/ekspor (join dengan user, jadwal dan approver)."""

    attendance_id: int
    user_id: int
    user_name: str
    npm: str
    user_role: Role
    schedule_id: int
    course_name: str
    attendance_date: date
    status: AttendanceStatus
    created_at: datetime
    approved_by: Optional[int] = None
    approver_name: Optional[str] = None
    approved_at: Optional[datetime] = None
