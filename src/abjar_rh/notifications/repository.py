from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewNotification, Notification


class NotificationRepository(Protocol):
    def list_for_user(self, user_id: int, *, limit: int) -> Sequence[Notification]:
        raise NotImplementedError

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def create_many(self, items: Sequence[NewNotification]) -> list[int]:
        """Insert notifications; returns the new ids in input order."""

        raise NotImplementedError

    def mark_read(self, *, user_id: int, notification_ids: Sequence[int]) -> int:
        """Mark the user's notifications as read; returns rows changed."""

        raise NotImplementedError

    def delete(self, *, user_id: int, notification_id: int) -> bool:
        raise NotImplementedError
