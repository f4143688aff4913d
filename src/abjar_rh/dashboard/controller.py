from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import now_local
from ..common.web import api_view, current_actor, json_ok, make_login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.refresh)

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @api_view
    @login_required
    def dashboard():
        return json_ok(container.dashboard_service.overview(current_actor(), now=now_local()))
