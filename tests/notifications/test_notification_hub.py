from datetime import datetime

from abjar_rh.core.enums import NotificationType
from abjar_rh.notifications.hub import EventType, NotificationEvent, NotificationHub
from abjar_rh.notifications.model import Notification


def _n(nid: int, user_id: int) -> Notification:
    return Notification(
        notification_id=nid,
        user_id=user_id,
        title="Tugas Baru",
        message="x",
        type=NotificationType.TASK,
        is_read=False,
        created_at=datetime(2025, 1, 1, 9, 0),
    )


def test_subscription_receives_only_while_started():
    hub = NotificationHub()
    received = []
    sub = hub.subscribe(1, received.append)

    hub.publish(EventType.INSERT, _n(1, 1))
    assert received == []

    sub.start()
    assert hub.subscriber_count(1) == 1
    hub.publish(EventType.INSERT, _n(2, 1))

    sub.stop()
    assert hub.subscriber_count(1) == 0
    hub.publish(EventType.INSERT, _n(3, 1))

    assert [e.notification.notification_id for e in received] == [2]


def test_filters_by_user():
    hub = NotificationHub()
    mine, theirs = [], []
    with hub.subscribe(1, mine.append), hub.subscribe(2, theirs.append):
        hub.publish(EventType.INSERT, _n(1, 1))
        hub.publish(EventType.UPDATE, _n(1, 1).mark_read())
        hub.publish(EventType.INSERT, _n(2, 2))

    assert [e.type for e in mine] == [EventType.INSERT, EventType.UPDATE]
    assert [e.notification.notification_id for e in theirs] == [2]
    assert hub.subscriber_count() == 0


def test_event_delivered_at_most_once_per_handle():
    hub = NotificationHub()
    received = []
    sub = hub.subscribe(1, received.append).start()
    # start() twice must not double-register
    sub.start()

    event = hub.publish(EventType.INSERT, _n(1, 1))
    assert len(received) == 1

    # a replayed event is ignored
    assert sub._deliver(NotificationEvent(event_id=event.event_id, type=event.type, notification=event.notification)) is False
    assert len(received) == 1
    sub.stop()
    sub.stop()


def test_failing_listener_does_not_block_others():
    hub = NotificationHub()
    received = []

    def broken(_event):
        raise RuntimeError("boom")

    with hub.subscribe(1, broken), hub.subscribe(1, received.append):
        hub.publish(EventType.INSERT, _n(1, 1))

    assert len(received) == 1


def test_event_payload():
    hub = NotificationHub()
    event = hub.publish(EventType.DELETE, _n(7, 3))
    payload = event.to_dict()
    assert payload["event"] == "DELETE"
    assert payload["new"]["id"] == 7
    assert payload["new"]["type"] == "task"


def test_stop_during_publish_skips_remaining_delivery():
    hub = NotificationHub()
    received = []
    second = hub.subscribe(1, received.append)

    first = hub.subscribe(1, lambda _event: second.stop()).start()
    second.start()
    hub.publish(EventType.INSERT, _n(1, 1))

    assert received == []
    assert second.active is False
    first.stop()
    assert hub.subscriber_count() == 0
