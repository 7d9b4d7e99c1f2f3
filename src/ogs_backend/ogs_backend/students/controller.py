from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..access.model import RequesterClaims
from ..common.validators import parse_id
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..container import Container
from .model import StudentFilter

logger = logging.getLogger(__name__)


def _ok(data, message: str, status: int = 200):
    return jsonify({"success": True, "data": data, "message": message}), status


def _fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def register(app: Flask, container: Container) -> None:
    def api_view(view):
        """Login check plus domain-error → HTTP status mapping for JSON endpoints."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                if "account_id" not in session:
                    raise AuthenticationError("authentication required")
                return view(*args, **kwargs)
            except ValidationError as e:
                return _fail(str(e), 400)
            except AuthenticationError as e:
                return _fail(str(e), 401)
            except AuthorizationError as e:
                return _fail(str(e), 403)
            except NotFoundError as e:
                return _fail(str(e), 404)
            except Exception:
                logger.exception("unhandled error on %s %s", request.method, request.path)
                return _fail("internal server error", 500)

        return wrapper

    def current_claims() -> RequesterClaims:
        return RequesterClaims.from_session(
            account_id=session["account_id"],
            permissions=session.get("permissions") or [],
            staff_id=session.get("staff_id"),
        )

    def _student_id(raw: str) -> int:
        return parse_id(raw, "student ID")

    def _optional_int(name: str):
        raw = request.args.get(name)
        if raw is None or raw == "":
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    @api_view
    def list_students():
        filters = StudentFilter(
            search=request.args.get("search") or None,
            first_name=request.args.get("first_name") or None,
            last_name=request.args.get("last_name") or None,
            school_class=request.args.get("school_class") or None,
            guardian_name=request.args.get("guardian_name") or None,
            group_id=_optional_int("group_id"),
        )
        result = container.student_service.list_students(
            current_claims(),
            filters=filters,
            location=request.args.get("location"),
            page=_optional_int("page") or 1,
            page_size=_optional_int("page_size"),
        )
        return jsonify(
            {
                "success": True,
                "data": result.items,
                "pagination": result.pagination(),
                "message": "Students retrieved successfully",
            }
        ), 200

    @app.route("/api/students/<raw_id>", methods=["GET"], endpoint="get_student")
    @api_view
    def get_student(raw_id: str):
        data = container.student_service.get_student(current_claims(), _student_id(raw_id))
        return _ok(data, "Student retrieved successfully")

    @app.route("/api/students", methods=["POST"], endpoint="create_student")
    @api_view
    def create_student():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValidationError("invalid request body")
        data = container.student_service.create_student(current_claims(), payload)
        return _ok(data, "Student created successfully", 201)

    @app.route("/api/students/<raw_id>", methods=["PUT"], endpoint="update_student")
    @api_view
    def update_student(raw_id: str):
        student_id = _student_id(raw_id)
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValidationError("invalid request body")
        data = container.student_service.update_student(current_claims(), student_id, payload)
        return _ok(data, "Student updated successfully")

    @app.route("/api/students/<raw_id>", methods=["DELETE"], endpoint="delete_student")
    @api_view
    def delete_student(raw_id: str):
        container.student_service.delete_student(current_claims(), _student_id(raw_id))
        return _ok(None, "Student deleted successfully")

    @app.route("/api/students/<raw_id>/current-location", methods=["GET"], endpoint="student_current_location")
    @api_view
    def student_current_location(raw_id: str):
        data = container.student_service.get_current_location(current_claims(), _student_id(raw_id))
        return _ok(data, "Student location retrieved successfully")

    @app.route("/api/students/<raw_id>/in-group-room", methods=["GET"], endpoint="student_in_group_room")
    @api_view
    def student_in_group_room(raw_id: str):
        data = container.student_service.get_in_group_room(current_claims(), _student_id(raw_id))
        return _ok(data, "Student room status retrieved successfully")
