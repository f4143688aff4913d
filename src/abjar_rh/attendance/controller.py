from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.web import api_view, current_actor, int_arg, json_body, json_ok, make_login_required
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .export import XLSX_MIMETYPE


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.refresh)

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @api_view
    @login_required
    def attendance_list():
        date_s = request.args.get("date") or ""
        status_s = request.args.get("status") or ""

        status = None
        if status_s and status_s != "all":
            try:
                status = AttendanceStatus(status_s)
            except ValueError:
                raise ValidationError("Status tidak valid")

        result = container.attendance_service.list_records(
            current_actor(),
            date_filter=parse_iso_date(date_s) if date_s else None,
            status_filter=status,
            page=int_arg("page"),
        )
        return json_ok(result)

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @api_view
    @login_required
    def attendance_today():
        return json_ok(container.attendance_service.today_schedules(current_actor(), now=now_local()))

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_submit")
    @api_view
    @login_required
    def attendance_submit():
        raw = json_body().get("schedule_id")
        try:
            schedule_id = int(raw)
        except (TypeError, ValueError):
            raise ValidationError("Jadwal harus dipilih")

        attendance_id = container.attendance_service.submit(current_actor(), schedule_id, now=now_local())
        return json_ok({"id": attendance_id}, message="Absensi berhasil! Menunggu persetujuan.", status=201)

    def _decide(attendance_id: int, status: AttendanceStatus):
        actor = current_actor()
        row = container.attendance_service.decide(actor, attendance_id, status, now=now_local())
        app.logger.info("attendance id=%s %s by user id=%s", row.attendance_id, status.value, actor.user_id)
        return json_ok(
            {"id": row.attendance_id, "status": status.value, "status_label": status.label},
            message=f"Absensi {status.label.lower()}",
        )

    @app.route("/api/attendance/<int:attendance_id>/approve", methods=["POST"], endpoint="attendance_approve")
    @api_view
    @login_required
    def attendance_approve(attendance_id: int):
        return _decide(attendance_id, AttendanceStatus.APPROVED)

    @app.route("/api/attendance/<int:attendance_id>/reject", methods=["POST"], endpoint="attendance_reject")
    @api_view
    @login_required
    def attendance_reject(attendance_id: int):
        return _decide(attendance_id, AttendanceStatus.REJECTED)

    @app.route("/api/attendance/export", methods=["GET"], endpoint="attendance_export")
    @api_view
    @login_required
    def attendance_export():
        export = container.attendance_service.export(current_actor(), today=now_local().date())
        return send_file(
            io.BytesIO(export.content),
            download_name=export.filename,
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )
