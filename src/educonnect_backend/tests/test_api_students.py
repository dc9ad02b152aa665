"""
Student endpoint tests: visibility per role, parent linking and business key uniqueness.
"""

import pytest

from educonnect_backend.model.auth import User
from educonnect_backend.settings import settings


NEW_STUDENT = {
    "studentId": "STU0100",
    "firstName": "Dana",
    "lastName": "Parker",
    "dateOfBirth": "2016-01-02",
    "grade": "Grade 3",
    "section": "B",
}


@pytest.fixture(autouse=True)
def unrestricted_teachers(monkeypatch):
    monkeypatch.setattr(settings, "RESTRICT_TEACHER_STUDENTS", False)


def names(response):
    return [student["firstName"] for student in response.json()]


@pytest.mark.integration
class TestStudentVisibility:

    def test_parent_sees_only_children(self, client, school):
        response = client.get("/api/students", headers=school.headers("parent"))
        assert response.status_code == 200
        assert names(response) == ["Alice"]
        assert response.headers["X-Total-Count"] == "1"

    def test_parent_cannot_get_other_student(self, client, school):
        response = client.get(f"/api/students/{school.students['bob']}", headers=school.headers("parent"))
        assert response.status_code == 404

    def test_parent_gets_child(self, client, school):
        response = client.get(f"/api/students/{school.students['alice']}", headers=school.headers("parent"))
        assert response.status_code == 200
        body = response.json()
        assert body["studentId"] == "STU0001"
        assert body["parentIds"] == [school.ids["parent"]]
        assert body["linkStatus"] == "linked"
        assert body["parents"][0]["firstName"] == "Pat"

    def test_teacher_sees_all_ordered_by_name(self, client, school):
        response = client.get("/api/students", headers=school.headers("teacher"))
        assert names(response) == ["Carol", "Bob", "Alice"]

    def test_teacher_restricted_to_assigned(self, client, school, monkeypatch):
        monkeypatch.setattr(settings, "RESTRICT_TEACHER_STUDENTS", True)
        response = client.get("/api/students", headers=school.headers("teacher"))
        assert names(response) == ["Alice"]

    def test_link_status_filter(self, client, school):
        awaiting = client.get("/api/students", params={"linkStatus": "awaiting_parent"}, headers=school.headers("admin"))
        linked = client.get("/api/students", params={"linkStatus": "linked"}, headers=school.headers("admin"))
        assert names(awaiting) == ["Carol"]
        assert names(linked) == ["Bob", "Alice"]

    def test_paging(self, client, school):
        response = client.get("/api/students", params={"skip": 1, "limit": 1}, headers=school.headers("admin"))
        assert names(response) == ["Bob"]
        assert response.headers["X-Total-Count"] == "3"

    def test_inactive_students_hidden_from_list(self, client, school):
        client.put(f"/api/students/{school.students['carol']}", json={"isActive": False}, headers=school.headers("admin"))
        response = client.get("/api/students", headers=school.headers("admin"))
        assert names(response) == ["Bob", "Alice"]


@pytest.mark.integration
class TestStudentCreate:

    def test_create_links_parents_both_ways(self, client, session, school):
        payload = dict(NEW_STUDENT, parentIds=[school.ids["parent"]], teacherIds=[school.ids["teacher"]])
        response = client.post("/api/students", json=payload, headers=school.headers("teacher"))
        assert response.status_code == 201
        body = response.json()
        assert body["parentIds"] == [school.ids["parent"]]
        assert body["teacherIds"] == [school.ids["teacher"]]
        assert body["linkStatus"] == "linked"

        session.expire_all()
        parent = session.get(User, school.ids["parent"])
        assert parent.associated_ids == [school.students["alice"], body["id"]]

        children = client.get("/api/students", headers=school.headers("parent"))
        assert sorted(names(children)) == ["Alice", "Dana"]

    def test_create_without_parents_awaits_link(self, client, school):
        response = client.post("/api/students", json=NEW_STUDENT, headers=school.headers("admin"))
        assert response.status_code == 201
        assert response.json()["linkStatus"] == "awaiting_parent"
        assert response.json()["parentIds"] == []

    def test_parent_cannot_create(self, client, school):
        response = client.post("/api/students", json=NEW_STUDENT, headers=school.headers("parent"))
        assert response.status_code == 403

    def test_duplicate_student_id(self, client, school):
        payload = dict(NEW_STUDENT, studentId="STU0001")
        response = client.post("/api/students", json=payload, headers=school.headers("admin"))
        assert response.status_code == 400
        assert response.json() == {"message": "Student ID already exists"}

    def test_parent_ids_must_be_parents(self, client, school):
        payload = dict(NEW_STUDENT, parentIds=[school.ids["teacher"]])
        response = client.post("/api/students", json=payload, headers=school.headers("admin"))
        assert response.status_code == 400
        listed = client.get("/api/students", headers=school.headers("admin"))
        assert "Dana" not in names(listed)

    def test_missing_required_field(self, client, school):
        payload = {k: v for k, v in NEW_STUDENT.items() if k != "dateOfBirth"}
        response = client.post("/api/students", json=payload, headers=school.headers("admin"))
        assert response.status_code == 400

    def test_parent_adds_child(self, client, session, school):
        response = client.post("/api/students/children", json=NEW_STUDENT, headers=school.headers("other_parent"))
        assert response.status_code == 201
        body = response.json()
        assert body["parentIds"] == [school.ids["other_parent"]]

        session.expire_all()
        assert body["id"] in session.get(User, school.ids["other_parent"]).associated_ids

        children = client.get("/api/students", headers=school.headers("other_parent"))
        assert sorted(names(children)) == ["Bob", "Dana"]

    def test_teacher_cannot_add_child(self, client, school):
        response = client.post("/api/students/children", json=NEW_STUDENT, headers=school.headers("teacher"))
        assert response.status_code == 403


@pytest.mark.integration
class TestStudentUpdate:

    def test_parents_are_appended(self, client, session, school):
        alice = school.students["alice"]
        response = client.put(f"/api/students/{alice}", json={"parentIds": [school.ids["other_parent"]]}, headers=school.headers("admin"))
        assert response.status_code == 200
        assert set(response.json()["parentIds"]) == {school.ids["parent"], school.ids["other_parent"]}

        session.expire_all()
        assert alice in session.get(User, school.ids["other_parent"]).associated_ids

    def test_linking_is_idempotent(self, client, session, school):
        alice = school.students["alice"]
        response = client.put(f"/api/students/{alice}", json={"parentIds": [school.ids["parent"]]}, headers=school.headers("admin"))
        assert response.json()["parentIds"] == [school.ids["parent"]]
        session.expire_all()
        assert session.get(User, school.ids["parent"]).associated_ids == [alice]

    def test_teachers_are_replaced(self, client, school):
        alice = school.students["alice"]
        response = client.put(f"/api/students/{alice}", json={"teacherIds": [school.ids["other_teacher"]]}, headers=school.headers("teacher"))
        assert response.status_code == 200
        assert response.json()["teacherIds"] == [school.ids["other_teacher"]]

    def test_student_id_is_immutable(self, client, school):
        alice = school.students["alice"]
        response = client.put(f"/api/students/{alice}", json={"studentId": "STU9999", "section": "C"}, headers=school.headers("admin"))
        assert response.status_code == 200
        assert response.json()["studentId"] == "STU0001"
        assert response.json()["section"] == "C"

    def test_parent_cannot_update(self, client, school):
        response = client.put(f"/api/students/{school.students['alice']}", json={"section": "C"}, headers=school.headers("parent"))
        assert response.status_code == 403

    def test_update_missing(self, client, school):
        response = client.put("/api/students/missing", json={"section": "C"}, headers=school.headers("admin"))
        assert response.status_code == 404
