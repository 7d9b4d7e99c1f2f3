from __future__ import annotations

from types import SimpleNamespace

import pytest
from flask import Flask

from src.ogs_backend.ogs_backend.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.ogs_backend.ogs_backend.students.controller import register
from src.ogs_backend.ogs_backend.students.service import StudentPage


class FakeStudentService:
    def __init__(self):
        self.calls: list[tuple] = []
        self.error: Exception | None = None

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if self.error is not None:
            raise self.error

    def get_student(self, claims, student_id):
        self._record("get_student", claims, student_id)
        return {"id": student_id, "current_location": "Anwesend", "has_full_access": False}

    def list_students(self, claims, **kwargs):
        self._record("list_students", claims, **kwargs)
        return StudentPage(items=[{"id": 1}], page=kwargs["page"], page_size=kwargs["page_size"] or 50, total_records=1)

    def create_student(self, claims, payload):
        self._record("create_student", claims, payload)
        return {"id": 5, **payload}

    def update_student(self, claims, student_id, payload):
        self._record("update_student", claims, student_id, payload)
        return {"id": student_id}

    def delete_student(self, claims, student_id):
        self._record("delete_student", claims, student_id)

    def get_current_location(self, claims, student_id):
        self._record("get_current_location", claims, student_id)
        return {"current_location": "Abwesend"}

    def get_in_group_room(self, claims, student_id):
        self._record("get_in_group_room", claims, student_id)
        return {"in_group_room": False, "reason": "no_group"}


@pytest.fixture
def service() -> FakeStudentService:
    return FakeStudentService()


@pytest.fixture
def client(service: FakeStudentService):
    app = Flask(__name__)
    app.secret_key = "test-secret"
    register(app, SimpleNamespace(student_service=service))
    test_client = app.test_client()
    with test_client.session_transaction() as sess:
        sess["account_id"] = 4
        sess["permissions"] = ["students:read"]
        sess["staff_id"] = 7
    return test_client


def test_requests_without_session_are_rejected(service: FakeStudentService):
    app = Flask(__name__)
    app.secret_key = "test-secret"
    register(app, SimpleNamespace(student_service=service))

    resp = app.test_client().get("/api/students/1")

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "authentication required"}
    assert service.calls == []


def test_get_student_passes_claims_from_session(client, service: FakeStudentService):
    resp = client.get("/api/students/12")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["id"] == 12
    name, (claims, student_id), _ = service.calls[0]
    assert name == "get_student"
    assert student_id == 12
    assert claims.account_id == 4
    assert claims.staff_id == 7
    assert claims.permissions == frozenset({"students:read"})


def test_invalid_student_id_is_bad_request(client, service: FakeStudentService):
    resp = client.get("/api/students/abc")

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "invalid student ID"
    assert service.calls == []


@pytest.mark.parametrize(
    "error,status",
    [
        (ValidationError("first name is required"), 400),
        (AuthorizationError("you can only update students in groups you supervise"), 403),
        (NotFoundError("student not found"), 404),
        (RuntimeError("boom"), 500),
    ],
)
def test_domain_errors_map_to_status_codes(client, service: FakeStudentService, error, status):
    service.error = error

    resp = client.put("/api/students/1", json={"school_class": "1a"})

    assert resp.status_code == status
    body = resp.get_json()
    assert body["success"] is False
    if status == 500:
        assert body["message"] == "internal server error"
    else:
        assert body["message"] == str(error)


def test_list_students_forwards_filters_and_pagination(client, service: FakeStudentService):
    resp = client.get("/api/students?group_id=10&school_class=3a&location=Anwesend&page=2&page_size=10")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["data"] == [{"id": 1}]
    assert body["pagination"]["current_page"] == 2
    _, _, kwargs = service.calls[0]
    assert kwargs["filters"].group_id == 10
    assert kwargs["filters"].school_class == "3a"
    assert kwargs["location"] == "Anwesend"
    assert kwargs["page_size"] == 10


def test_create_requires_json_object(client, service: FakeStudentService):
    resp = client.post("/api/students", data="nope", content_type="text/plain")

    assert resp.status_code == 400
    assert service.calls == []


def test_create_returns_201(client):
    resp = client.post("/api/students", json={"first_name": "Tim"})

    assert resp.status_code == 201
    assert resp.get_json()["data"]["first_name"] == "Tim"


def test_delete_and_status_endpoints(client, service: FakeStudentService):
    assert client.delete("/api/students/3").status_code == 200
    assert client.get("/api/students/3/current-location").get_json()["data"] == {"current_location": "Abwesend"}
    assert client.get("/api/students/3/in-group-room").get_json()["data"]["reason"] == "no_group"
    assert [c[0] for c in service.calls] == ["delete_student", "get_current_location", "get_in_group_room"]
