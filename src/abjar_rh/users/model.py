from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Entitas domain: User.

    Catatan: objek data murni (tanpa kode akses DB).
    """

    user_id: int
    full_name: str
    npm: str
    password_hash: str
    role: Role
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SessionUser:
    """The authenticated actor handed to every service call."""

    user_id: int
    full_name: str
    npm: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(user_id=user.user_id, full_name=user.full_name, npm=user.npm, role=user.role)

    @classmethod
    def from_session(cls, data: dict) -> "SessionUser":
        return cls(
            user_id=int(data["user_id"]),
            full_name=str(data["full_name"]),
            npm=str(data["npm"]),
            role=Role(data["role"]),
        )

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "full_name": self.full_name,
            "npm": self.npm,
            "role": self.role.value,
        }

    @property
    def first_name(self) -> str:
        parts = (self.full_name or "").split()
        return parts[0] if parts else "User"
