from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import now_local
from ..common.web import api_view, current_actor, json_body, json_ok, make_login_required
from ..container import Container
from .service import ScheduleService


def _input_from_body():
    data = json_body()
    return ScheduleService.build_input(
        course_name=str(data.get("course_name", "")),
        day=str(data.get("day", "")),
        start_time=str(data.get("start_time", "")),
        end_time=str(data.get("end_time", "")),
        description=data.get("description"),
    )


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.refresh)

    @app.route("/api/schedules", methods=["GET"], endpoint="schedules_list")
    @api_view
    @login_required
    def schedules_list():
        grouped = container.schedule_service.list_grouped()
        return json_ok(
            {
                "days": {day: [s.to_dict() for s in items] for day, items in grouped.items()},
                "total": sum(len(items) for items in grouped.values()),
                "course_names": container.schedule_service.course_names(),
            }
        )

    @app.route("/api/schedules/today", methods=["GET"], endpoint="schedules_today")
    @api_view
    @login_required
    def schedules_today():
        return json_ok([s.to_dict() for s in container.schedule_service.today(now_local())])

    @app.route("/api/schedules", methods=["POST"], endpoint="schedules_create")
    @api_view
    @login_required
    def schedules_create():
        schedule_id = container.schedule_service.create(current_actor(), _input_from_body())
        return json_ok({"id": schedule_id}, message="Jadwal berhasil ditambahkan", status=201)

    @app.route("/api/schedules/<int:schedule_id>", methods=["PUT"], endpoint="schedules_update")
    @api_view
    @login_required
    def schedules_update(schedule_id: int):
        container.schedule_service.update(current_actor(), schedule_id, _input_from_body())
        return json_ok({"id": schedule_id}, message="Jadwal berhasil diperbarui")

    @app.route("/api/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="schedules_delete")
    @api_view
    @login_required
    def schedules_delete(schedule_id: int):
        container.schedule_service.delete(current_actor(), schedule_id)
        return json_ok(message="Jadwal berhasil dihapus")
