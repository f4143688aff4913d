from __future__ import annotations

from flask import Flask, request, session

from ..common.web import api_view, current_actor, int_arg, json_body, json_ok, make_login_required, store_actor
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.refresh)

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    @api_view
    def auth_register():
        data = json_body()
        user_id = container.auth_service.register(
            full_name=str(data.get("full_name", "")),
            npm=str(data.get("npm", "")),
            password=str(data.get("password", "")),
            code=str(data.get("code", "")),
        )
        app.logger.info("registered user id=%s", user_id)
        return json_ok({"id": user_id}, message="Registrasi berhasil! Silakan login.", status=201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    @api_view
    def auth_login():
        data = json_body()
        actor = container.auth_service.authenticate(str(data.get("npm", "")), str(data.get("password", "")))

        session.clear()
        session.permanent = bool(data.get("remember", True))
        store_actor(actor)
        return json_ok(actor.to_session(), message="Login berhasil")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    @api_view
    def auth_logout():
        session.clear()
        return json_ok(message="Anda telah logout")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @api_view
    @login_required
    def auth_me():
        actor = current_actor()
        data = actor.to_session()
        data["role_label"] = actor.role.label
        data["first_name"] = actor.first_name
        return json_ok(data)

    @app.route("/api/auth/password-strength", methods=["POST"], endpoint="auth_password_strength")
    @api_view
    def auth_password_strength():
        result = container.auth_service.password_strength(json_body().get("password") or "")
        return json_ok({"score": result.score, "label": result.label, "feedback": list(result.feedback)})

    @app.route("/api/auth/generate-password", methods=["GET"], endpoint="auth_generate_password")
    @api_view
    def auth_generate_password():
        return json_ok({"password": container.auth_service.generate_password()})

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @api_view
    @login_required
    def users_list():
        result = container.user_service.list_users(
            current_actor(),
            query=request.args.get("q", ""),
            page=int_arg("page"),
        )
        return json_ok(result)

    @app.route("/api/users/<int:user_id>/role", methods=["POST"], endpoint="users_change_role")
    @api_view
    @login_required
    def users_change_role(user_id: int):
        try:
            new_role = Role(str(json_body().get("role", "")))
        except ValueError:
            raise ValidationError("Role tidak valid")

        user = container.user_service.change_role(current_actor(), target_id=user_id, new_role=new_role)
        app.logger.info("role changed user id=%s role=%s by id=%s", user.user_id, user.role.value, current_actor().user_id)
        return json_ok(
            {"id": user.user_id, "role": user.role.value, "role_label": user.role.label},
            message=f"Role berhasil diubah menjadi {user.role.label}",
        )
