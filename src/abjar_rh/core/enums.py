from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Peran pengguna untuk otorisasi."""

    MEMBER = "member"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def label(self) -> str:
        return {
            Role.MEMBER: "Anggota",
            Role.ADMIN: "Admin",
            Role.SUPER_ADMIN: "Super Admin",
        }[self]


class AttendanceStatus(str, Enum):
    """Status absensi; pending hanya bisa berpindah ke approved/rejected."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def label(self) -> str:
        return {
            AttendanceStatus.PENDING: "Menunggu",
            AttendanceStatus.APPROVED: "Disetujui",
            AttendanceStatus.REJECTED: "Ditolak",
        }[self]


class CompletionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class TaskState(str, Enum):
    """Derived display state of a task for one user."""

    COMPLETED = "completed"
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    UPCOMING = "upcoming"


class TaskFilter(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"
    OVERDUE = "overdue"


class NotificationType(str, Enum):
    TASK = "task"
    ROLE_CHANGE = "role_change"
    ATTENDANCE = "attendance"
    INFO = "info"


class Weekday(str, Enum):
    """Nama hari (Bahasa Indonesia) seperti yang disimpan di tabel jadwal."""

    SENIN = "Senin"
    SELASA = "Selasa"
    RABU = "Rabu"
    KAMIS = "Kamis"
    JUMAT = "Jumat"
    SABTU = "Sabtu"
    MINGGU = "Minggu"

    @classmethod
    def ordered(cls) -> list["Weekday"]:
        return list(cls)

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        """Map `date.weekday()` (Monday=0) to a weekday name."""
        return cls.ordered()[index]

    @property
    def short(self) -> str:
        return {
            Weekday.SENIN: "Sen",
            Weekday.SELASA: "Sel",
            Weekday.RABU: "Rab",
            Weekday.KAMIS: "Kam",
            Weekday.JUMAT: "Jum",
            Weekday.SABTU: "Sab",
            Weekday.MINGGU: "Min",
        }[self]
