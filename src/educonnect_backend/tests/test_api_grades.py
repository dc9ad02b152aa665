"""
Grade endpoint tests: authorship, visibility through children and grade bounds.
"""

import pytest

from educonnect_backend.model.academics import Grade


def post_grade(client, school, author="teacher", **overrides):
    payload = {"studentId": "STU0001", "subject": "Math", "grade": 85, "maxGrade": 100}
    payload.update(overrides)
    return client.post("/api/grades", json=payload, headers=school.headers(author))


@pytest.mark.integration
class TestGradeCreate:

    def test_teacher_records_grade_and_parent_sees_it(self, client, school):
        response = post_grade(client, school)
        assert response.status_code == 201
        body = response.json()
        assert body["studentId"] == school.students["alice"]
        assert body["teacherId"] == school.ids["teacher"]
        assert body["percentage"] == 85.0
        assert body["gradeType"] == "assignment"
        assert body["student"]["studentId"] == "STU0001"

        listed = client.get("/api/grades", headers=school.headers("parent"))
        assert listed.status_code == 200
        assert [grade["id"] for grade in listed.json()] == [body["id"]]
        assert listed.json()[0]["percentage"] == 85.0

    def test_author_is_always_current_user(self, client, school):
        response = post_grade(client, school, teacherId=school.ids["other_teacher"])
        assert response.status_code == 201
        assert response.json()["teacherId"] == school.ids["teacher"]

    def test_grade_above_max(self, client, session, school):
        response = post_grade(client, school, grade=120)
        assert response.status_code == 400
        assert session.query(Grade).count() == 0

    def test_negative_grade(self, client, school):
        assert post_grade(client, school, grade=-1).status_code == 400

    def test_unknown_student(self, client, school):
        response = post_grade(client, school, studentId="STU9999")
        assert response.status_code == 400

    def test_unknown_assignment(self, client, school):
        response = post_grade(client, school, assignmentId="nope")
        assert response.status_code == 400

    def test_parent_cannot_grade(self, client, session, school):
        response = post_grade(client, school, author="parent")
        assert response.status_code == 403
        assert session.query(Grade).count() == 0

    def test_admin_can_grade(self, client, school):
        response = post_grade(client, school, author="admin")
        assert response.status_code == 201
        assert response.json()["teacherId"] == school.ids["admin"]


@pytest.mark.integration
class TestGradeVisibility:

    def test_other_parent_sees_nothing(self, client, school):
        post_grade(client, school)
        listed = client.get("/api/grades", headers=school.headers("other_parent"))
        assert listed.json() == []
        assert listed.headers["X-Total-Count"] == "0"

    def test_invisible_grade_is_not_found(self, client, school):
        grade_id = post_grade(client, school).json()["id"]
        assert client.get(f"/api/grades/{grade_id}", headers=school.headers("other_parent")).status_code == 404
        assert client.get(f"/api/grades/{grade_id}", headers=school.headers("other_teacher")).status_code == 404
        assert client.get(f"/api/grades/{grade_id}", headers=school.headers("parent")).status_code == 200

    def test_teacher_sees_own_grades_only(self, client, school):
        post_grade(client, school)
        post_grade(client, school, author="other_teacher", studentId="STU0002", subject="Art")
        listed = client.get("/api/grades", headers=school.headers("teacher"))
        assert [grade["subject"] for grade in listed.json()] == ["Math"]
        everything = client.get("/api/grades", headers=school.headers("admin"))
        assert everything.headers["X-Total-Count"] == "2"

    def test_filters(self, client, school):
        post_grade(client, school, date="2024-01-10T00:00:00Z")
        post_grade(client, school, subject="Science", gradeType="exam", date="2024-02-10T00:00:00Z")
        headers = school.headers("teacher")

        by_type = client.get("/api/grades", params={"gradeType": "exam"}, headers=headers)
        assert [grade["subject"] for grade in by_type.json()] == ["Science"]

        by_student = client.get("/api/grades", params={"studentId": "STU0001"}, headers=headers)
        assert [grade["subject"] for grade in by_student.json()] == ["Science", "Math"]

        by_date = client.get("/api/grades", params={"endDate": "2024-01-31T00:00:00Z"}, headers=headers)
        assert [grade["subject"] for grade in by_date.json()] == ["Math"]


@pytest.mark.integration
class TestGradeMutation:

    def test_author_updates(self, client, school):
        grade_id = post_grade(client, school).json()["id"]
        response = client.put(f"/api/grades/{grade_id}", json={"grade": 90, "comments": "Better"}, headers=school.headers("teacher"))
        assert response.status_code == 200
        assert response.json()["percentage"] == 90.0
        assert response.json()["comments"] == "Better"

    def test_foreign_teacher_cannot_update(self, client, session, school):
        grade_id = post_grade(client, school).json()["id"]
        response = client.put(f"/api/grades/{grade_id}", json={"grade": 10}, headers=school.headers("other_teacher"))
        assert response.status_code == 403
        session.expire_all()
        assert session.get(Grade, grade_id).grade == 85

    def test_foreign_teacher_cannot_delete(self, client, session, school):
        grade_id = post_grade(client, school).json()["id"]
        response = client.delete(f"/api/grades/{grade_id}", headers=school.headers("other_teacher"))
        assert response.status_code == 403
        assert session.get(Grade, grade_id) is not None

    def test_update_beyond_max(self, client, session, school):
        grade_id = post_grade(client, school).json()["id"]
        response = client.put(f"/api/grades/{grade_id}", json={"maxGrade": 50}, headers=school.headers("teacher"))
        assert response.status_code == 400
        session.expire_all()
        assert session.get(Grade, grade_id).max_grade == 100

    def test_null_score_rejected(self, client, session, school):
        grade_id = post_grade(client, school).json()["id"]
        headers = school.headers("teacher")
        for body in ({"grade": None}, {"maxGrade": None}):
            response = client.put(f"/api/grades/{grade_id}", json=body, headers=headers)
            assert response.status_code == 400
            assert "cannot be null" in response.json()["message"]
        session.expire_all()
        stored = session.get(Grade, grade_id)
        assert (stored.grade, stored.max_grade) == (85, 100)

    def test_admin_updates_any(self, client, school):
        grade_id = post_grade(client, school).json()["id"]
        response = client.put(f"/api/grades/{grade_id}", json={"subject": "Maths"}, headers=school.headers("admin"))
        assert response.status_code == 200
        assert response.json()["teacherId"] == school.ids["teacher"]

    def test_update_missing(self, client, school):
        response = client.put("/api/grades/missing", json={"grade": 1}, headers=school.headers("teacher"))
        assert response.status_code == 404

    def test_delete(self, client, session, school):
        grade_id = post_grade(client, school).json()["id"]
        response = client.delete(f"/api/grades/{grade_id}", headers=school.headers("teacher"))
        assert response.status_code == 200
        assert response.json() == {"message": "Grade deleted successfully"}
        session.expire_all()
        assert session.get(Grade, grade_id) is None
