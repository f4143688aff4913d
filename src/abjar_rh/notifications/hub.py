"""In-process push channel for notification row events.

Every write made through `NotificationService` is published here; a
`Subscription` receives the events of one user while it is started.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .model import Notification

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class NotificationEvent:
    event_id: int
    type: EventType
    notification: Notification

    @property
    def user_id(self) -> int:
        return self.notification.user_id

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "event": self.type.value,
            "new": self.notification.to_dict(),
        }


Listener = Callable[[NotificationEvent], None]


class Subscription:
    """Handle for one listener filtered to one user.

    `start()` and `stop()` are idempotent; an event id is handed to the
    listener at most once for the lifetime of the handle. The listener runs
    outside the lock, so a delivery already past the active check when
    `stop()` returns still lands once.
    """

    def __init__(self, hub: "NotificationHub", *, user_id: int, listener: Listener, memory: int = 1024):
        self._hub = hub
        self.user_id = int(user_id)
        self._listener = listener
        self._lock = threading.Lock()
        self._seen: set[int] = set()
        self._seen_order: deque[int] = deque()
        self._memory = memory
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> "Subscription":
        with self._lock:
            if self._active:
                return self
            self._active = True
        self._hub._attach(self)
        return self

    def stop(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._hub._detach(self)

    def __enter__(self) -> "Subscription":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()

    def _deliver(self, event: NotificationEvent) -> bool:
        if event.user_id != self.user_id:
            return False
        with self._lock:
            if not self._active:
                return False
            if event.event_id in self._seen:
                return False
            self._seen.add(event.event_id)
            self._seen_order.append(event.event_id)
            if len(self._seen_order) > self._memory:
                self._seen.discard(self._seen_order.popleft())
        self._listener(event)
        return True


class NotificationHub:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: dict[int, list[Subscription]] = {}
        self._ids = itertools.count(1)

    def subscribe(self, user_id: int, listener: Listener) -> Subscription:
        """Create a (not yet started) subscription for `user_id`."""
        return Subscription(self, user_id=user_id, listener=listener)

    def subscriber_count(self, user_id: Optional[int] = None) -> int:
        with self._lock:
            if user_id is None:
                return sum(len(v) for v in self._subscriptions.values())
            return len(self._subscriptions.get(int(user_id), []))

    def publish(self, event_type: EventType, notification: Notification) -> NotificationEvent:
        event = NotificationEvent(event_id=next(self._ids), type=event_type, notification=notification)
        with self._lock:
            targets = list(self._subscriptions.get(notification.user_id, []))
        for sub in targets:
            try:
                sub._deliver(event)
            except Exception:
                logger.exception("notification listener failed (user_id=%s, event_id=%s)", sub.user_id, event.event_id)
        return event

    def _attach(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.setdefault(sub.user_id, [])
            if sub not in subs:
                subs.append(sub)
        logger.debug("subscribed to notifications (user_id=%s)", sub.user_id)

    def _detach(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(sub.user_id, [])
            if sub in subs:
                subs.remove(sub)
            if not subs:
                self._subscriptions.pop(sub.user_id, None)
        logger.debug("unsubscribed from notifications (user_id=%s)", sub.user_id)
