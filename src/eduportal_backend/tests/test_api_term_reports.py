"""
Term reports: generation from published grades, lookups and the CRUD surface.
"""

import pytest

from eduportal_backend.tests.fixtures import (
    assign,
    auth,
    make_class,
    make_student,
    make_subject,
    make_term,
    make_user,
    tenant_token,
)


@pytest.fixture
def report_card(client, db, school):
    tenant_id = school.tenant.id

    teacher = make_user(db, tenant_id, "teacher@springfield.edu")
    outsider = make_user(db, tenant_id, "sub@springfield.edu")
    school_class = make_class(db, tenant_id, "Grade 4")
    science = make_subject(db, tenant_id, "Science", "SCI")
    assign(db, tenant_id, school_class.id, science.id, teacher.id)

    headers = auth(tenant_token(teacher))
    grade_types = {gt["name"]: gt["id"] for gt in client.get("/api/portal/grade-types", headers=headers).json()}

    return {
        "teacher": headers,
        "outsider": auth(tenant_token(outsider)),
        "admin": auth(tenant_token(school.admin_user)),
        "class": school_class,
        "science": science,
        "student": make_student(db, tenant_id, school_class.id, "Milhouse"),
        "term": make_term(db, tenant_id, "Term 1"),
        "next_term": make_term(db, tenant_id, "Term 2"),
        "grade_types": grade_types,
    }


def grade(client, card, score, term, published=True):
    response = client.post("/api/portal/grades", json={
        "student_id": card["student"].id,
        "class_id": card["class"].id,
        "subject_id": card["science"].id,
        "grade_type_id": card["grade_types"]["Test"],
        "term_id": term.id,
        "score": score,
        "assessment_date": "2025-02-01",
    }, headers=card["teacher"])
    assert response.status_code == 201
    if published:
        assert client.patch(f"/api/portal/grades/{response.json()['id']}/publish", headers=card["teacher"]).status_code == 200
    return response.json()


def generate(client, card, headers=None, term=None):
    return client.post("/api/term-reports/generate", json={
        "student_id": card["student"].id,
        "term_id": (term or card["term"]).id,
    }, headers=headers or card["teacher"])


class TestGenerate:

    def test_snapshots_published_grades_of_the_term(self, client, report_card):
        grade(client, report_card, 90, report_card["term"])
        grade(client, report_card, 10, report_card["term"], published=False)
        grade(client, report_card, 40, report_card["next_term"])

        response = generate(client, report_card)

        assert response.status_code == 201
        body = response.json()
        assert body["student_id"] == report_card["student"].id
        assert body["class_id"] == report_card["class"].id
        assert body["overall_average"] == 90
        assert [(s["subject_id"], s["average"], s["letter_grade"]) for s in body["subjects"]] == [
            (report_card["science"].id, 90, "A-"),
        ]

    def test_matches_student_report(self, client, report_card):
        grade(client, report_card, 72, report_card["term"])
        grade(client, report_card, 95, report_card["term"])

        body = generate(client, report_card).json()
        summary = client.get(
            f"/api/portal/grades/reports/student/{report_card['student'].id}",
            params={"term_id": report_card["term"].id},
            headers=report_card["teacher"],
        ).json()

        assert body["overall_average"] == summary["overall_average"]
        assert body["overall_gpa"] == summary["overall_gpa"]
        assert [s["letter_grade"] for s in body["subjects"]] == [s["letter_grade"] for s in summary["subjects"]]

    def test_without_grades_is_empty(self, client, report_card):
        body = generate(client, report_card).json()

        assert body["subjects"] == []
        assert body["overall_average"] is None

    def test_one_report_per_student_and_term(self, client, report_card):
        assert generate(client, report_card).status_code == 201
        assert generate(client, report_card).status_code == 400
        assert generate(client, report_card, term=report_card["next_term"]).status_code == 201

    def test_deleted_report_can_be_regenerated(self, client, report_card):
        report = generate(client, report_card).json()

        assert client.delete(f"/api/term-reports/{report['id']}", headers=report_card["admin"]).status_code == 200
        assert generate(client, report_card).status_code == 201

    def test_unassigned_teacher_is_forbidden(self, client, report_card):
        assert generate(client, report_card, headers=report_card["outsider"]).status_code == 403

    def test_unknown_student_or_term(self, client, report_card):
        response = client.post("/api/term-reports/generate", json={
            "student_id": "missing",
            "term_id": report_card["term"].id,
        }, headers=report_card["admin"])
        assert response.status_code == 404

        response = client.post("/api/term-reports/generate", json={
            "student_id": report_card["student"].id,
            "term_id": "missing",
        }, headers=report_card["admin"])
        assert response.status_code == 404


class TestByStudent:

    def test_lists_reports_of_student(self, client, report_card):
        first = generate(client, report_card).json()
        second = generate(client, report_card, term=report_card["next_term"]).json()

        response = client.get(f"/api/term-reports/student/{report_card['student'].id}", headers=report_card["teacher"])

        assert response.status_code == 200
        assert {r["id"] for r in response.json()} == {first["id"], second["id"]}

    def test_unassigned_teacher_is_forbidden(self, client, report_card):
        response = client.get(f"/api/term-reports/student/{report_card['student'].id}", headers=report_card["outsider"])

        assert response.status_code == 403


class TestCrud:

    def test_manual_report_records_author(self, client, report_card, school):
        response = client.post("/api/term-reports", json={
            "student_id": report_card["student"].id,
            "term_id": report_card["term"].id,
            "subjects": [{"subject_id": report_card["science"].id, "letter_grade": "B", "comments": "Steady"}],
        }, headers=report_card["admin"])

        assert response.status_code == 201
        assert response.json()["generated_by"] == school.admin_user.id
        assert response.json()["class_id"] == report_card["class"].id

    def test_manual_report_rejects_unknown_subject(self, client, report_card):
        response = client.post("/api/term-reports", json={
            "student_id": report_card["student"].id,
            "term_id": report_card["term"].id,
            "subjects": [{"subject_id": "missing"}],
        }, headers=report_card["admin"])

        assert response.status_code == 400

    def test_manual_report_after_generation_is_duplicate(self, client, report_card):
        generate(client, report_card)

        response = client.post("/api/term-reports", json={
            "student_id": report_card["student"].id,
            "term_id": report_card["term"].id,
        }, headers=report_card["admin"])

        assert response.status_code == 400

    def test_comments_can_be_updated(self, client, report_card):
        report = generate(client, report_card).json()

        response = client.put(f"/api/term-reports/{report['id']}", json={"overall_comments": "Great term"}, headers=report_card["teacher"])

        assert response.status_code == 200
        assert response.json()["overall_comments"] == "Great term"

    def test_list_filters_by_term(self, client, report_card):
        generate(client, report_card)
        generate(client, report_card, term=report_card["next_term"])

        response = client.get("/api/term-reports", params={"term_id": report_card["term"].id}, headers=report_card["admin"])

        assert response.headers["X-Total-Count"] == "1"
        assert response.json()[0]["term_id"] == report_card["term"].id
