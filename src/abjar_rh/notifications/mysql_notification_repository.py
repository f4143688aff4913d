from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import NewNotification, Notification
from .repository import NotificationRepository

_COLUMNS = "id, user_id, title, message, type, is_read, created_at"


def _to_notification(r: dict) -> Notification:
    return Notification(
        notification_id=int(r["id"]),
        user_id=int(r["user_id"]),
        title=r["title"],
        message=r["message"],
        type=NotificationType(r["type"]),
        is_read=bool(r["is_read"]),
        created_at=r["created_at"],
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_user(self, user_id: int, *, limit: int) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM notifications
                WHERE user_id=%s
                ORDER BY created_at DESC, id DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_to_notification(r) for r in fetchall(cur)]

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notifications WHERE id=%s", (int(notification_id),))
            r = fetchone(cur)
            return _to_notification(r) if r else None

    def create_many(self, items: Sequence[NewNotification]) -> list[int]:
        ids: list[int] = []
        if not items:
            return ids
        with db_cursor(self._conn_factory) as (_, cur):
            for n in items:
                cur.execute(
                    "INSERT INTO notifications(user_id, title, message, type, is_read) VALUES(%s,%s,%s,%s,0)",
                    (int(n.user_id), n.title, n.message, n.type.value),
                )
                ids.append(int(cur.lastrowid))
        return ids

    def mark_read(self, *, user_id: int, notification_ids: Sequence[int]) -> int:
        if not notification_ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE notifications SET is_read=1 WHERE user_id=%s AND id IN ({in_clause(notification_ids)})",
                (int(user_id), *[int(i) for i in notification_ids]),
            )
            return int(cur.rowcount)

    def delete(self, *, user_id: int, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM notifications WHERE id=%s AND user_id=%s",
                (int(notification_id), int(user_id)),
            )
            return cur.rowcount > 0
