from __future__ import annotations

import json
import queue

from flask import Flask, Response

from ..common.web import api_view, current_actor, json_ok, make_login_required
from ..container import Container
from .hub import NotificationEvent

KEEPALIVE_SECONDS = 15


def _sse_frame(event: NotificationEvent) -> str:
    return f"id: {event.event_id}\nevent: {event.type.value.lower()}\ndata: {json.dumps(event.to_dict())}\n\n"


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.refresh)

    @app.route("/api/notifications", methods=["GET"], endpoint="notifications_list")
    @api_view
    @login_required
    def notifications_list():
        result = container.notification_service.list_for(current_actor())
        return json_ok({"items": [n.to_dict() for n in result["items"]], "unread": result["unread"]})

    @app.route("/api/notifications/<int:notification_id>/read", methods=["POST"], endpoint="notifications_read")
    @api_view
    @login_required
    def notifications_read(notification_id: int):
        n = container.notification_service.mark_read(current_actor(), notification_id)
        return json_ok(n.to_dict())

    @app.route("/api/notifications/read-all", methods=["POST"], endpoint="notifications_read_all")
    @api_view
    @login_required
    def notifications_read_all():
        changed = container.notification_service.mark_all_read(current_actor())
        return json_ok({"updated": changed})

    @app.route("/api/notifications/<int:notification_id>", methods=["DELETE"], endpoint="notifications_delete")
    @api_view
    @login_required
    def notifications_delete(notification_id: int):
        container.notification_service.delete(current_actor(), notification_id)
        return json_ok(message="Notifikasi dihapus")

    @app.route("/api/notifications/stream", methods=["GET"], endpoint="notifications_stream")
    @api_view
    @login_required
    def notifications_stream():
        actor = current_actor()
        events: "queue.Queue[NotificationEvent]" = queue.Queue()
        subscription = container.notification_service.subscribe(actor, events.put)

        def generate():
            subscription.start()
            try:
                yield ": connected\n\n"
                while True:
                    try:
                        event = events.get(timeout=KEEPALIVE_SECONDS)
                    except queue.Empty:
                        yield ": keep-alive\n\n"
                        continue
                    yield _sse_frame(event)
            finally:
                # the server closes the generator when the client goes away
                subscription.stop()

        return Response(
            generate(),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
