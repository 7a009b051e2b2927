"""
tests/test_school_routes.py -- Integration tests for the student and teacher routes.

Coverage:
  - Create / list / delete happy paths for both record types
  - user_id is stored as given, with no users lookup
  - Deleting an unknown id is a plain-text 404
  - Store failures on delete are a plain-text 500; on insert a JSON 500
  - Non-integer path ids are a 400
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError


def _raise_operational(*args, **kwargs):
    raise OperationalError("DELETE", {}, Exception("database is locked"))


class TestStudentRoutes:
    def test_create_list_delete(self, api_client) -> None:
        headers = api_client.auth(api_client.teacher_token)
        created = api_client.client.post(
            "/students", json={"name": "Ada", "grade": "7", "user_id": api_client.student_id}, headers=headers
        )
        assert created.status_code == 200, created.text
        student_id = created.json()["student_id"]

        listing = api_client.client.get("/students", headers=headers).json()
        assert {"student_id": student_id, "name": "Ada", "grade": "7", "user_id": api_client.student_id} in listing

        deleted = api_client.client.delete(f"/students/{student_id}", headers=headers)
        assert deleted.status_code == 200
        assert deleted.text == "Student deleted successfully"
        assert deleted.headers["content-type"].startswith("text/plain")

        remaining = api_client.client.get("/students", headers=headers).json()
        assert all(s["student_id"] != student_id for s in remaining)

    def test_user_id_is_not_checked(self, api_client) -> None:
        resp = api_client.client.post(
            "/students",
            json={"name": "Ghost", "grade": "1", "user_id": 424242},
            headers=api_client.auth(api_client.teacher_token),
        )
        assert resp.status_code == 200

    def test_delete_unknown_id_is_404(self, api_client) -> None:
        resp = api_client.client.delete("/students/999999", headers=api_client.auth(api_client.teacher_token))
        assert resp.status_code == 404
        assert resp.text == "Student not found"

    def test_delete_twice_reports_not_found(self, api_client) -> None:
        headers = api_client.auth(api_client.teacher_token)
        student_id = api_client.client.post(
            "/students", json={"name": "Once", "grade": "2", "user_id": 1}, headers=headers
        ).json()["student_id"]
        assert api_client.client.delete(f"/students/{student_id}", headers=headers).status_code == 200
        assert api_client.client.delete(f"/students/{student_id}", headers=headers).status_code == 404

    def test_delete_store_failure_is_500(self, api_client, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(api_client.client.app.state.school_store, "delete_student", _raise_operational)
        resp = api_client.client.delete("/students/1", headers=api_client.auth(api_client.teacher_token))
        assert resp.status_code == 500
        assert resp.text == "Error deleting student"

    def test_create_store_failure_is_500(self, api_client, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(api_client.client.app.state.school_store, "create_student", _raise_operational)
        resp = api_client.client.post(
            "/students",
            json={"name": "Ada", "grade": "7", "user_id": 1},
            headers=api_client.auth(api_client.teacher_token),
        )
        assert resp.status_code == 500
        error = resp.json()["error"]
        assert error["code"] == "store_error"
        assert "locked" not in error["message"]

    def test_non_integer_id_is_400(self, api_client) -> None:
        resp = api_client.client.delete("/students/abc", headers=api_client.auth(api_client.teacher_token))
        assert resp.status_code == 400

    def test_missing_fields_is_400(self, api_client) -> None:
        resp = api_client.client.post(
            "/students", json={"name": "Ada"}, headers=api_client.auth(api_client.teacher_token)
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"


class TestTeacherRoutes:
    def test_create_list_delete(self, api_client) -> None:
        headers = api_client.auth(api_client.teacher_token)
        created = api_client.client.post(
            "/teachers",
            json={"name": "Ms. Frizzle", "subject": "Science", "user_id": api_client.teacher_id},
            headers=headers,
        )
        assert created.status_code == 200, created.text
        teacher_id = created.json()["teacher_id"]

        listing = api_client.client.get("/teachers", headers=headers).json()
        assert {
            "teacher_id": teacher_id,
            "name": "Ms. Frizzle",
            "subject": "Science",
            "user_id": api_client.teacher_id,
        } in listing

        deleted = api_client.client.delete(f"/teachers/{teacher_id}", headers=headers)
        assert deleted.status_code == 200
        assert deleted.text == "Teacher deleted successfully"

    def test_delete_unknown_id_is_404(self, api_client) -> None:
        resp = api_client.client.delete("/teachers/999999", headers=api_client.auth(api_client.teacher_token))
        assert resp.status_code == 404
        assert resp.text == "Teacher not found"

    def test_delete_store_failure_is_500(self, api_client, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(api_client.client.app.state.school_store, "delete_teacher", _raise_operational)
        resp = api_client.client.delete("/teachers/1", headers=api_client.auth(api_client.teacher_token))
        assert resp.status_code == 500
        assert resp.text == "Error deleting teacher"
