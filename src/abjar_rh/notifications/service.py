from __future__ import annotations

from typing import Iterable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import NOTIFICATION_LIMIT
from ..core.enums import NotificationType
from ..core.exceptions import NotFoundError
from ..users.model import SessionUser
from .hub import EventType, Listener, NotificationHub, Subscription
from .model import NewNotification, Notification
from .repository import NotificationRepository


class NotificationService:
    """Use case: per-user notifications, plus the push channel for them."""

    def __init__(self, notifications: NotificationRepository, hub: Optional[NotificationHub] = None):
        self._notifications = notifications
        self._hub = hub or NotificationHub()

    @property
    def hub(self) -> NotificationHub:
        return self._hub

    def notify(self, *, user_id: int, title: str, message: str, type: NotificationType) -> Notification:
        return self.notify_many([int(user_id)], title=title, message=message, type=type)[0]

    def notify_many(self, user_ids: Iterable[int], *, title: str, message: str, type: NotificationType) -> list[Notification]:
        items = [NewNotification(user_id=int(uid), title=title, message=message, type=type) for uid in user_ids]
        ids = self._notifications.create_many(items)
        created_at = now_local()

        out: list[Notification] = []
        for nid, item in zip(ids, items):
            n = Notification(
                notification_id=nid,
                user_id=item.user_id,
                title=item.title,
                message=item.message,
                type=item.type,
                is_read=False,
                created_at=created_at,
            )
            self._hub.publish(EventType.INSERT, n)
            out.append(n)
        return out

    def list_for(self, actor: SessionUser, *, limit: int = NOTIFICATION_LIMIT) -> dict:
        items = list(self._notifications.list_for_user(actor.user_id, limit=limit))
        return {
            "items": items,
            "unread": sum(1 for n in items if not n.is_read),
        }

    def mark_read(self, actor: SessionUser, notification_id: int) -> Notification:
        n = self._notifications.get_by_id(int(notification_id))
        if not n or n.user_id != actor.user_id:
            raise NotFoundError("Notifikasi tidak ditemukan")
        if n.is_read:
            return n

        self._notifications.mark_read(user_id=actor.user_id, notification_ids=[n.notification_id])
        updated = n.mark_read()
        self._hub.publish(EventType.UPDATE, updated)
        return updated

    def mark_all_read(self, actor: SessionUser) -> int:
        unread = [n for n in self._notifications.list_for_user(actor.user_id, limit=NOTIFICATION_LIMIT) if not n.is_read]
        if not unread:
            return 0

        changed = self._notifications.mark_read(
            user_id=actor.user_id,
            notification_ids=[n.notification_id for n in unread],
        )
        for n in unread:
            self._hub.publish(EventType.UPDATE, n.mark_read())
        return changed

    def delete(self, actor: SessionUser, notification_id: int) -> None:
        n = self._notifications.get_by_id(int(notification_id))
        if not n or n.user_id != actor.user_id:
            raise NotFoundError("Notifikasi tidak ditemukan")
        if not self._notifications.delete(user_id=actor.user_id, notification_id=n.notification_id):
            raise NotFoundError("Notifikasi tidak ditemukan")
        self._hub.publish(EventType.DELETE, n)

    def subscribe(self, actor: SessionUser, listener: Listener) -> Subscription:
        return self._hub.subscribe(actor.user_id, listener)
