from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.web import api_view, current_actor, json_body, json_ok, make_login_required
from ..core.enums import CompletionStatus, TaskFilter
from ..core.exceptions import ValidationError
from ..container import Container
from .service import TaskService


def _input_from_body():
    data = json_body()
    return TaskService.build_input(
        course_name=str(data.get("course_name", "")),
        deadline=str(data.get("deadline", "")),
        description=str(data.get("description", "")),
    )


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.refresh)

    @app.route("/api/tasks", methods=["GET"], endpoint="tasks_list")
    @api_view
    @login_required
    def tasks_list():
        try:
            task_filter = TaskFilter(request.args.get("filter", TaskFilter.ALL.value))
        except ValueError:
            raise ValidationError("Filter tidak valid")
        return json_ok(container.task_service.list_for(current_actor(), now=now_local(), task_filter=task_filter))

    @app.route("/api/tasks/stats", methods=["GET"], endpoint="tasks_stats")
    @api_view
    @login_required
    def tasks_stats():
        return json_ok(container.task_service.overall_stats(current_actor()))

    @app.route("/api/tasks", methods=["POST"], endpoint="tasks_create")
    @api_view
    @login_required
    def tasks_create():
        task_id = container.task_service.create(current_actor(), _input_from_body())
        return json_ok({"id": task_id}, message="Tugas berhasil ditambahkan", status=201)

    @app.route("/api/tasks/<int:task_id>", methods=["PUT"], endpoint="tasks_update")
    @api_view
    @login_required
    def tasks_update(task_id: int):
        container.task_service.update(current_actor(), task_id, _input_from_body())
        return json_ok({"id": task_id}, message="Tugas berhasil diperbarui")

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="tasks_delete")
    @api_view
    @login_required
    def tasks_delete(task_id: int):
        container.task_service.delete(current_actor(), task_id)
        return json_ok(message="Tugas berhasil dihapus")

    @app.route("/api/tasks/<int:task_id>/toggle", methods=["POST"], endpoint="tasks_toggle")
    @api_view
    @login_required
    def tasks_toggle(task_id: int):
        completion = container.task_service.toggle_completion(current_actor(), task_id, now=now_local())
        done = completion.status == CompletionStatus.COMPLETED
        return json_ok(
            {
                "task_id": completion.task_id,
                "status": completion.status.value,
                "completed_at": completion.completed_at.isoformat() if completion.completed_at else None,
            },
            message="Tugas ditandai selesai" if done else "Tugas ditandai belum selesai",
        )
