"""
Behavior report endpoint tests.
"""

import pytest

from educonnect_backend.model.academics import Behavior


def post_report(client, school, author="teacher", **overrides):
    payload = {
        "studentId": "STU0001",
        "type": "positive",
        "category": "participation",
        "title": "Helped a classmate",
        "description": "Explained fractions during group work",
    }
    payload.update(overrides)
    return client.post("/api/behavior", json=payload, headers=school.headers(author))


@pytest.mark.integration
class TestBehavior:

    def test_report(self, client, school):
        response = post_report(client, school)
        assert response.status_code == 201
        body = response.json()
        assert body["severity"] == "medium"
        assert body["teacherId"] == school.ids["teacher"]
        assert body["studentId"] == school.students["alice"]

    def test_invalid_category(self, client, school):
        assert post_report(client, school, category="sports").status_code == 400

    def test_parent_sees_child_reports(self, client, school):
        post_report(client, school)
        post_report(client, school, author="other_teacher", studentId="STU0002", type="negative")
        mine = client.get("/api/behavior", headers=school.headers("parent"))
        assert [report["studentId"] for report in mine.json()] == [school.students["alice"]]
        theirs = client.get("/api/behavior", headers=school.headers("other_parent"))
        assert [report["type"] for report in theirs.json()] == ["negative"]

    def test_type_filter(self, client, school):
        post_report(client, school)
        post_report(client, school, type="negative", category="behavioral", severity="high")
        response = client.get("/api/behavior", params={"type": "negative"}, headers=school.headers("teacher"))
        assert [report["severity"] for report in response.json()] == ["high"]

    def test_parent_cannot_report(self, client, school):
        assert post_report(client, school, author="parent").status_code == 403

    def test_author_updates(self, client, school):
        report = post_report(client, school).json()
        response = client.put(f"/api/behavior/{report['id']}", json={"severity": "low"}, headers=school.headers("teacher"))
        assert response.status_code == 200
        assert response.json()["severity"] == "low"

    def test_foreign_teacher_cannot_update(self, client, school):
        report = post_report(client, school).json()
        response = client.put(f"/api/behavior/{report['id']}", json={"severity": "low"}, headers=school.headers("other_teacher"))
        assert response.status_code == 403

    def test_required_fields_cannot_be_cleared(self, client, session, school):
        report = post_report(client, school).json()
        for body in ({"title": None}, {"description": None}, {"date": None}):
            response = client.put(f"/api/behavior/{report['id']}", json=body, headers=school.headers("teacher"))
            assert response.status_code == 400
            assert "NOT NULL" not in response.json()["message"]
        session.expire_all()
        assert session.get(Behavior, report["id"]).title == report["title"]

    def test_delete(self, client, school):
        report = post_report(client, school).json()
        response = client.delete(f"/api/behavior/{report['id']}", headers=school.headers("admin"))
        assert response.json() == {"message": "Behavior deleted successfully"}
        assert client.get(f"/api/behavior/{report['id']}", headers=school.headers("teacher")).status_code == 404
