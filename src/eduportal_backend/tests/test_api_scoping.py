"""
Teacher scoping on the portal endpoints.

The teacher is assigned to Math in Grade 1 only. Grade 2 exists in the
same tenant but is outside the teacher's reach.
"""

import pytest

from eduportal_backend.services.grading import ensure_grade_types
from eduportal_backend.tests.fixtures import (
    assign,
    auth,
    make_class,
    make_student,
    make_subject,
    make_user,
    tenant_token,
)


@pytest.fixture
def campus(db, school):
    tenant_id = school.tenant.id

    teacher = make_user(db, tenant_id, "teacher@springfield.edu")
    grade_1 = make_class(db, tenant_id, "Grade 1")
    grade_2 = make_class(db, tenant_id, "Grade 2")
    math = make_subject(db, tenant_id, "Math", "MATH")
    art = make_subject(db, tenant_id, "Art", "ART")

    assign(db, tenant_id, grade_1.id, math.id, teacher.id)
    assign(db, tenant_id, grade_2.id, art.id, school.admin_user.id)

    return {
        "teacher": auth(tenant_token(teacher)),
        "admin": auth(tenant_token(school.admin_user)),
        "grade_1": grade_1,
        "grade_2": grade_2,
        "math": math,
        "art": art,
        "bart": make_student(db, tenant_id, grade_1.id, "Bart"),
        "lisa": make_student(db, tenant_id, grade_2.id, "Lisa"),
        "grade_types": ensure_grade_types(db, tenant_id),
    }


class TestClassScoping:

    def test_teacher_sees_assigned_classes_only(self, client, campus):
        response = client.get("/api/portal/classes", headers=campus["teacher"])

        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == [campus["grade_1"].id]
        assert response.json()[0]["student_count"] == 1

    def test_admin_sees_every_class(self, client, campus):
        response = client.get("/api/portal/classes", headers=campus["admin"])
        assert {c["name"] for c in response.json()} == {"Grade 1", "Grade 2"}

    def test_teacher_cannot_open_other_class(self, client, campus):
        response = client.get(f"/api/portal/classes/{campus['grade_2'].id}", headers=campus["teacher"])
        assert response.status_code == 403

    def test_my_classes(self, client, campus):
        response = client.get("/api/portal/my/classes", headers=campus["teacher"])
        assert [c["id"] for c in response.json()] == [campus["grade_1"].id]


class TestStudentScoping:

    def test_teacher_student_list(self, client, campus):
        response = client.get("/api/portal/students", headers=campus["teacher"])
        assert [s["first_name"] for s in response.json()] == ["Bart"]

    def test_requesting_unassigned_class_fails_fast(self, client, campus):
        response = client.get(
            "/api/portal/students",
            params={"class_id": campus["grade_2"].id},
            headers=campus["teacher"],
        )

        assert response.status_code == 403
        assert response.json()["detail"]["required"] == [f"class:{campus['grade_2'].id}"]

    def test_admin_may_filter_any_class(self, client, campus):
        response = client.get(
            "/api/portal/students",
            params={"class_id": campus["grade_2"].id},
            headers=campus["admin"],
        )

        assert response.status_code == 200
        assert [s["first_name"] for s in response.json()] == ["Lisa"]

    def test_student_of_other_class_is_forbidden(self, client, campus):
        response = client.get(f"/api/portal/students/{campus['lisa'].id}", headers=campus["teacher"])
        assert response.status_code == 403

    def test_missing_student_is_not_found(self, client, campus):
        response = client.get("/api/portal/students/does-not-exist", headers=campus["teacher"])
        assert response.status_code == 404

    def test_teacher_cannot_create_students(self, client, campus):
        response = client.post(
            "/api/portal/students",
            json={"first_name": "Ralph", "last_name": "Wiggum", "class_id": campus["grade_1"].id},
            headers=campus["teacher"],
        )
        assert response.status_code == 403


class TestSubjectScoping:

    def test_teacher_subjects(self, client, campus):
        response = client.get("/api/portal/subjects", headers=campus["teacher"])
        assert [s["code"] for s in response.json()] == ["MATH"]

    def test_my_subjects_for_class(self, client, campus):
        response = client.get(
            "/api/portal/my/subjects",
            params={"class_id": campus["grade_2"].id},
            headers=campus["teacher"],
        )
        assert response.json() == []


class TestGradeScoping:

    def _grade(self, campus, student, class_id, subject_id):
        return {
            "student_id": student.id,
            "class_id": class_id,
            "subject_id": subject_id,
            "grade_type_id": campus["grade_types"][0].id,
            "score": 45,
            "max_score": 50,
            "assessment_date": "2025-03-01",
        }

    def test_teacher_grades_assigned_pair(self, client, campus):
        payload = self._grade(campus, campus["bart"], campus["grade_1"].id, campus["math"].id)
        response = client.post("/api/portal/grades", json=payload, headers=campus["teacher"])

        assert response.status_code == 201
        body = response.json()
        assert body["percentage"] == 90
        assert body["letter_grade"] == "A-"
        assert body["is_published"] is False

    def test_teacher_cannot_grade_unassigned_subject(self, client, campus):
        payload = self._grade(campus, campus["bart"], campus["grade_1"].id, campus["art"].id)
        response = client.post("/api/portal/grades", json=payload, headers=campus["teacher"])
        assert response.status_code == 403

    def test_teacher_cannot_grade_unassigned_class(self, client, campus):
        payload = self._grade(campus, campus["lisa"], campus["grade_2"].id, campus["art"].id)
        response = client.post("/api/portal/grades", json=payload, headers=campus["teacher"])
        assert response.status_code == 403

    def test_student_must_belong_to_class(self, client, campus):
        payload = self._grade(campus, campus["lisa"], campus["grade_1"].id, campus["math"].id)
        response = client.post("/api/portal/grades", json=payload, headers=campus["teacher"])
        assert response.status_code == 400

    def test_grade_list_is_limited_to_assignments(self, client, campus):
        own = self._grade(campus, campus["bart"], campus["grade_1"].id, campus["math"].id)
        other = self._grade(campus, campus["lisa"], campus["grade_2"].id, campus["art"].id)

        assert client.post("/api/portal/grades", json=own, headers=campus["teacher"]).status_code == 201
        assert client.post("/api/portal/grades", json=other, headers=campus["admin"]).status_code == 201

        teacher_view = client.get("/api/portal/grades", headers=campus["teacher"])
        admin_view = client.get("/api/portal/grades", headers=campus["admin"])

        assert [g["student_id"] for g in teacher_view.json()] == [campus["bart"].id]
        assert admin_view.headers["X-Total-Count"] == "2"
