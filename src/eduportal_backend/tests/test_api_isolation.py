"""
Tenant isolation at the HTTP surface: another school's rows look like they
do not exist, and a tenant id in a payload never moves a row.
"""

import datetime
import pytest

from eduportal_backend.model.academic import Student
from eduportal_backend.model.auth import Role
from eduportal_backend.model.finance import Fee
from eduportal_backend.model.grading import Grade, GradeType, Term
from eduportal_backend.model.records import TermReport
from eduportal_backend.services.users import role_by_name
from eduportal_backend.tests.fixtures import assign, auth, make_class, make_student, make_subject, make_term, make_user, tenant_token


@pytest.fixture
def foreign(db, other_school):
    school_class = make_class(db, other_school.tenant.id, "Grade 9")
    student = make_student(db, other_school.tenant.id, school_class.id, "Nelson")
    fee = Fee(
        tenant_id=other_school.tenant.id,
        student_id=student.id,
        title="Tuition",
        amount=500,
        due_date=datetime.date(2025, 1, 31),
    )
    db.add(fee)
    db.commit()
    return {"class": school_class, "student": student, "fee": fee}


class TestCrossTenantAccess:

    def test_student_is_invisible(self, client, school, foreign):
        headers = auth(tenant_token(school.admin_user))
        student_id = foreign["student"].id

        assert client.get(f"/api/portal/students/{student_id}", headers=headers).status_code == 404
        assert client.put(f"/api/portal/students/{student_id}", json={"first_name": "Hacked"}, headers=headers).status_code == 404
        assert client.delete(f"/api/portal/students/{student_id}", headers=headers).status_code == 404

    def test_student_list_only_shows_own_tenant(self, client, db, school, foreign):
        school_class = make_class(db, school.tenant.id, "Grade 1")
        make_student(db, school.tenant.id, school_class.id, "Bart")

        response = client.get("/api/portal/students", headers=auth(tenant_token(school.admin_user)))

        assert response.status_code == 200
        assert [s["first_name"] for s in response.json()] == ["Bart"]
        assert response.headers["X-Total-Count"] == "1"

    def test_fee_is_invisible(self, client, db, school, foreign):
        headers = auth(tenant_token(school.admin_user))
        fee_id = foreign["fee"].id

        assert client.get(f"/api/fees/{fee_id}", headers=headers).status_code == 404
        assert client.put(f"/api/fees/{fee_id}", json={"amount": 1}, headers=headers).status_code == 404
        assert client.delete(f"/api/fees/{fee_id}", headers=headers).status_code == 404

        db.expire_all()
        fee = db.query(Fee).filter(Fee.id == fee_id).one()
        assert fee.amount == 500
        assert not fee.deleted

    def test_foreign_reference_is_rejected(self, client, school, foreign):
        response = client.post("/api/fees", json={
            "student_id": foreign["student"].id,
            "title": "Books",
            "amount": 20,
            "due_date": "2025-02-01",
        }, headers=auth(tenant_token(school.admin_user)))

        assert response.status_code == 400


class TestTenantIdInjection:

    def test_create_ignores_tenant_id(self, client, db, school, other_school):
        response = client.post("/api/portal/students", json={
            "first_name": "Lisa",
            "last_name": "Simpson",
            "tenant_id": other_school.tenant.id,
        }, headers=auth(tenant_token(school.admin_user)))

        assert response.status_code == 201
        assert response.json()["tenant_id"] == school.tenant.id

    def test_update_ignores_tenant_id(self, client, db, school, other_school):
        school_class = make_class(db, school.tenant.id, "Grade 2")
        student = make_student(db, school.tenant.id, school_class.id, "Milhouse")

        response = client.put(f"/api/portal/students/{student.id}", json={
            "first_name": "Milhouse",
            "tenant_id": other_school.tenant.id,
        }, headers=auth(tenant_token(school.admin_user)))

        assert response.status_code == 200

        db.expire_all()
        assert db.query(Student).filter(Student.id == student.id).one().tenant_id == school.tenant.id


@pytest.fixture
def foreign_academics(db, other_school, foreign):
    tenant_id = other_school.tenant.id

    teacher = make_user(db, tenant_id, "teacher@shelbyville.edu")
    subject = make_subject(db, tenant_id, "History", "HIS")
    assignment = assign(db, tenant_id, foreign["class"].id, subject.id, teacher.id)
    term = make_term(db, tenant_id, "Autumn")

    grade_type = GradeType(tenant_id=tenant_id, name="Essay", weight=0.5, max_score=100)
    db.add(grade_type)
    db.commit()

    grade = Grade(
        tenant_id=tenant_id,
        student_id=foreign["student"].id,
        class_id=foreign["class"].id,
        subject_id=subject.id,
        teacher_id=teacher.id,
        grade_type_id=grade_type.id,
        term_id=term.id,
        score=80,
        max_score=100,
        is_published=False,
    )
    report = TermReport(tenant_id=tenant_id, student_id=foreign["student"].id, term_id=term.id, subjects=[])
    db.add_all([grade, report])
    db.commit()

    return {
        "teacher": teacher,
        "subject": subject,
        "assignment": assignment,
        "term": term,
        "grade_type": grade_type,
        "grade": grade,
        "report": report,
        "role": role_by_name(db, tenant_id, "TEACHER"),
    }


@pytest.fixture
def admin_headers(school):
    return auth(tenant_token(school.admin_user))


class TestCrossTenantAcademics:

    def test_class_is_invisible(self, client, school, foreign, admin_headers):
        class_id = foreign["class"].id

        assert client.get(f"/api/portal/classes/{class_id}", headers=admin_headers).status_code == 404
        assert client.put(f"/api/portal/classes/{class_id}", json={"name": "Hacked"}, headers=admin_headers).status_code == 404
        assert client.patch(f"/api/portal/classes/{class_id}/status", json={"is_active": False}, headers=admin_headers).status_code == 404
        assert client.delete(f"/api/portal/classes/{class_id}", headers=admin_headers).status_code == 404

    def test_subject_is_invisible(self, client, foreign_academics, admin_headers):
        subject_id = foreign_academics["subject"].id

        assert client.get(f"/api/portal/subjects/{subject_id}", headers=admin_headers).status_code == 404
        assert client.put(f"/api/portal/subjects/{subject_id}", json={"name": "Hacked"}, headers=admin_headers).status_code == 404
        assert client.delete(f"/api/portal/subjects/{subject_id}", headers=admin_headers).status_code == 404

    def test_class_subject_is_invisible(self, client, db, school, foreign_academics, admin_headers):
        assignment_id = foreign_academics["assignment"].id
        teacher = make_user(db, school.tenant.id, "teacher@springfield.edu")

        assert client.get(f"/api/portal/class-subjects/{assignment_id}", headers=admin_headers).status_code == 404
        assert client.put(f"/api/portal/class-subjects/{assignment_id}", json={"teacher_id": teacher.id}, headers=admin_headers).status_code == 404
        assert client.delete(f"/api/portal/class-subjects/{assignment_id}", headers=admin_headers).status_code == 404

    def test_grade_is_invisible(self, client, db, foreign_academics, admin_headers):
        grade_id = foreign_academics["grade"].id

        assert client.get(f"/api/portal/grades/{grade_id}", headers=admin_headers).status_code == 404
        assert client.put(f"/api/portal/grades/{grade_id}", json={"score": 1}, headers=admin_headers).status_code == 404
        assert client.patch(f"/api/portal/grades/{grade_id}/publish", headers=admin_headers).status_code == 404
        assert client.delete(f"/api/portal/grades/{grade_id}", headers=admin_headers).status_code == 404

        db.expire_all()
        grade = db.query(Grade).filter(Grade.id == grade_id).one()
        assert grade.score == 80
        assert not grade.is_published
        assert not grade.deleted

    def test_grade_reports_are_invisible(self, client, foreign, foreign_academics, admin_headers):
        student_id = foreign["student"].id
        class_id = foreign["class"].id
        subject_id = foreign_academics["subject"].id

        assert client.get(f"/api/portal/grades/by-class/{class_id}", headers=admin_headers).status_code == 404
        assert client.get(f"/api/portal/grades/by-student/{student_id}", headers=admin_headers).status_code == 404
        assert client.get(f"/api/portal/grades/reports/student/{student_id}", headers=admin_headers).status_code == 404
        assert client.get(f"/api/portal/grades/reports/student/{student_id}/subject/{subject_id}", headers=admin_headers).status_code == 404
        assert client.get(f"/api/portal/grades/reports/class/{class_id}/subject/{subject_id}", headers=admin_headers).status_code == 404

    def test_term_is_invisible(self, client, db, foreign_academics, admin_headers):
        term_id = foreign_academics["term"].id

        assert client.get(f"/api/portal/terms/{term_id}", headers=admin_headers).status_code == 404
        assert client.put(f"/api/portal/terms/{term_id}", json={"name": "Hacked"}, headers=admin_headers).status_code == 404
        assert client.patch(f"/api/portal/terms/{term_id}/current", headers=admin_headers).status_code == 404

        db.expire_all()
        term = db.query(Term).filter(Term.id == term_id).one()
        assert term.name == "Autumn"
        assert not term.is_current

    def test_grade_type_is_invisible(self, client, db, foreign_academics, admin_headers):
        grade_type_id = foreign_academics["grade_type"].id

        assert client.put(f"/api/portal/grade-types/{grade_type_id}", json={"weight": 0.9}, headers=admin_headers).status_code == 404
        assert client.delete(f"/api/portal/grade-types/{grade_type_id}", headers=admin_headers).status_code == 404

        db.expire_all()
        grade_type = db.query(GradeType).filter(GradeType.id == grade_type_id).one()
        assert grade_type.weight == 0.5
        assert grade_type.is_active

    def test_term_report_is_invisible(self, client, foreign, foreign_academics, admin_headers):
        report_id = foreign_academics["report"].id

        assert client.get(f"/api/term-reports/{report_id}", headers=admin_headers).status_code == 404
        assert client.put(f"/api/term-reports/{report_id}", json={"overall_comments": "Hacked"}, headers=admin_headers).status_code == 404
        assert client.get(f"/api/term-reports/student/{foreign['student'].id}", headers=admin_headers).status_code == 404


class TestCrossTenantIdentity:

    def test_role_is_invisible(self, client, db, foreign_academics, admin_headers):
        role_id = foreign_academics["role"].id

        assert client.get(f"/api/roles/{role_id}", headers=admin_headers).status_code == 404
        assert client.put(f"/api/roles/{role_id}", json={"permissions": []}, headers=admin_headers).status_code == 404
        assert client.delete(f"/api/roles/{role_id}", headers=admin_headers).status_code == 404

        db.expire_all()
        assert db.query(Role).filter(Role.id == role_id).one().permissions

    def test_user_is_invisible(self, client, db, other_school, admin_headers):
        user_id = other_school.admin_user.id

        assert client.get(f"/api/users/{user_id}", headers=admin_headers).status_code == 404
        assert client.put(f"/api/users/{user_id}", json={"first_name": "Hacked"}, headers=admin_headers).status_code == 404
        assert client.delete(f"/api/users/{user_id}", headers=admin_headers).status_code == 404

        assert client.post("/api/auth/login", json={"email": "admin@shelbyville.edu", "password": "secret123"}).status_code == 200
