"""JSON helpers shared by the feature controllers."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional

from flask import current_app, g, jsonify, request, session

from ..core.exceptions import DomainError, ErrorKind, ValidationError
from ..users.model import SessionUser

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
}

SESSION_KEY = "actor"


def json_ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def json_error(err: DomainError):
    body = {
        "success": False,
        "kind": err.kind.value,
        "message": str(err),
        "errors": getattr(err, "field_errors", {}) or {},
    }
    return jsonify(body), STATUS_BY_KIND.get(err.kind, 400)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def int_arg(name: str, default: int = 1) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Parameter {name} tidak valid")


def api_view(view: Callable):
    """Map domain errors to JSON responses; log anything else as a 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return json_error(e)
        except Exception:
            current_app.logger.exception("unhandled error on %s %s", request.method, request.path)
            return jsonify({"success": False, "kind": "internal", "message": "Terjadi kesalahan sistem", "errors": {}}), 500

    return wrapper


def store_actor(actor: SessionUser) -> None:
    session[SESSION_KEY] = actor.to_session()


def make_login_required(refresh: Callable[[SessionUser], SessionUser]):
    """Build a decorator that resolves the session actor into `g.actor`.

    The role is re-read on every request; a user removed from the store
    gets a 401 and a cleared session.
    """

    def login_required(view: Callable):
        @wraps(view)
        def wrapper(*args, **kwargs):
            data = session.get(SESSION_KEY)
            if not data:
                return jsonify({"success": False, "kind": ErrorKind.UNAUTHENTICATED.value, "message": "Silakan login terlebih dahulu", "errors": {}}), 401

            try:
                actor = refresh(SessionUser.from_session(data))
            except (KeyError, ValueError):
                session.clear()
                return jsonify({"success": False, "kind": ErrorKind.UNAUTHENTICATED.value, "message": "Sesi tidak valid", "errors": {}}), 401
            except DomainError as e:
                session.clear()
                return json_error(e)

            store_actor(actor)
            g.actor = actor
            return view(*args, **kwargs)

        return wrapper

    return login_required


def current_actor() -> SessionUser:
    return g.actor
