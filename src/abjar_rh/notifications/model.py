from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    is_read: bool
    created_at: datetime

    def mark_read(self) -> "Notification":
        return replace(self, is_read=True)

    def to_dict(self) -> dict:
        return {
            "id": self.notification_id,
            "user_id": self.user_id,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class NewNotification:
    user_id: int
    title: str
    message: str
    type: NotificationType
