"""
Grade entry and grade reports.

Teachers only see and write grades of their assigned class and subject
pairs. Only the teacher who entered a grade, or an admin, may change or
remove it.
"""

from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import and_, false, or_
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequirePermission
from eduportal_backend.api.crud import apply_values, create_entity, get_or_404, paginate, repository
from eduportal_backend.api.exceptions import BadRequestException, forbidden
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import MessageResponse
from eduportal_backend.interface.grades import (
    BulkGradeCreate,
    BulkGradeResult,
    ClassSubjectAverage,
    GradeCreate,
    GradeGet,
    GradePublish,
    GradeQuery,
    GradeUpdate,
    StudentSummary,
    SubjectAverage,
    TypeBreakdown,
)
from eduportal_backend.model.academic import SchoolClass, Student, Subject
from eduportal_backend.model.grading import Grade, GradeType, Term, round_percentage
from eduportal_backend.permissions.core import is_admin
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.permissions.scoping import (
    allowed_class_ids,
    get_teacher_class_subject_pairs,
    require_teacher_assignment,
    require_teacher_class_access,
)
from eduportal_backend.services.grading import (
    SubjectReport,
    calculate_class_subject_average,
    calculate_student_subject_average,
    calculate_student_summary,
    get_grading_scale,
    letter_for,
)

grades_router = APIRouter()

CanRead = Annotated[Principal, Depends(RequirePermission("grades.read"))]
CanCreate = Annotated[Principal, Depends(RequirePermission("grades.create"))]
CanUpdate = Annotated[Principal, Depends(RequirePermission("grades.update"))]
CanDelete = Annotated[Principal, Depends(RequirePermission("grades.delete", "grades.update"))]


def scope_to_assignments(principal: Principal, db: Session, query):
    """Limit a grade query to the caller's class/subject pairs unless admin."""
    if is_admin(principal, db):
        return query

    pairs = get_teacher_class_subject_pairs(db, principal.tenant_id, principal.user_id)
    if not pairs:
        return query.filter(false())

    return query.filter(or_(*[
        and_(Grade.class_id == pair["class_id"], Grade.subject_id == pair["subject_id"])
        for pair in pairs
    ]))


def require_grade_owner(principal: Principal, db: Session, grade: Grade):
    if is_admin(principal, db):
        return
    if grade.teacher_id != principal.user_id:
        raise forbidden("Only the teacher who entered this grade can change it", ["grade:owner"], principal.role_names)


def _active_grade_type(principal: Principal, db: Session, grade_type_id: str) -> GradeType:
    grade_type = repository(principal, db, GradeType).get_by_id_optional(grade_type_id)
    if grade_type is None or not grade_type.is_active:
        raise BadRequestException("Grade type not found or inactive")
    return grade_type


def _check_context(principal: Principal, db: Session, class_id: str, subject_id: str, term_id: Optional[str]):
    if repository(principal, db, SchoolClass).get_by_id_optional(class_id) is None:
        raise BadRequestException("Class not found")
    if repository(principal, db, Subject).get_by_id_optional(subject_id) is None:
        raise BadRequestException("Subject not found")
    if term_id is not None and repository(principal, db, Term).get_by_id_optional(term_id) is None:
        raise BadRequestException("Term not found")


def _student_in_class(principal: Principal, db: Session, student_id: str, class_id: str) -> Student:
    student = repository(principal, db, Student).get_by_id_optional(student_id)
    if student is None:
        raise BadRequestException("Student not found")
    if student.class_id != class_id:
        raise BadRequestException("Student does not belong to this class")
    return student


def _score_fields(score: float, max_score: float, scales) -> dict:
    percentage = round_percentage(score / max_score * 100)
    return {"percentage": percentage, "letter_grade": letter_for(percentage, scales)}


def _subject_average(report: SubjectReport) -> SubjectAverage:
    return SubjectAverage(
        subject_id=report.subject_id,
        weighted_average=report.weighted_average,
        letter_grade=report.letter_grade,
        gpa=report.gpa,
        trend=report.trend,
        breakdown=[
            TypeBreakdown(
                grade_type_id=item.grade_type_id,
                name=item.name,
                weight=item.weight,
                average=item.average,
                count=item.count,
            )
            for item in report.breakdown
        ],
    )


@grades_router.get("", response_model=list[GradeGet])
async def list_grades(principal: CanRead, response: Response, params: GradeQuery = Depends(), db: Session = Depends(get_db)):

    if params.class_id is not None:
        allowed_class_ids(principal, db, params.class_id)

    query = scope_to_assignments(principal, db, repository(principal, db, Grade).query())

    for column in ("class_id", "subject_id", "student_id", "grade_type_id", "term_id", "is_published"):
        value = getattr(params, column)
        if value is not None:
            query = query.filter(getattr(Grade, column) == value)

    if params.start_date is not None:
        query = query.filter(Grade.assessment_date >= params.start_date)
    if params.end_date is not None:
        query = query.filter(Grade.assessment_date <= params.end_date)

    return paginate(query.order_by(Grade.assessment_date.desc(), Grade.created_at.desc()), params, response)


@grades_router.get("/by-class/{class_id}", response_model=list[GradeGet])
async def grades_by_class(principal: CanRead, class_id: str, subject_id: Optional[str] = None, term_id: Optional[str] = None, db: Session = Depends(get_db)):

    get_or_404(principal, db, SchoolClass, class_id, "Class")
    require_teacher_class_access(principal, class_id, db)

    query = scope_to_assignments(principal, db, repository(principal, db, Grade).query()).filter(Grade.class_id == class_id)

    if subject_id is not None:
        query = query.filter(Grade.subject_id == subject_id)
    if term_id is not None:
        query = query.filter(Grade.term_id == term_id)

    return query.order_by(Grade.assessment_date, Grade.created_at).all()


@grades_router.get("/by-student/{student_id}", response_model=list[GradeGet])
async def grades_by_student(principal: CanRead, student_id: str, subject_id: Optional[str] = None, term_id: Optional[str] = None, db: Session = Depends(get_db)):

    student = get_or_404(principal, db, Student, student_id)
    require_teacher_class_access(principal, student.class_id, db, "Not assigned to this student's class")

    query = scope_to_assignments(principal, db, repository(principal, db, Grade).query()).filter(Grade.student_id == student.id)

    if subject_id is not None:
        query = query.filter(Grade.subject_id == subject_id)
    if term_id is not None:
        query = query.filter(Grade.term_id == term_id)

    return query.order_by(Grade.assessment_date, Grade.created_at).all()


@grades_router.get("/reports/student/{student_id}", response_model=StudentSummary)
async def student_report(principal: CanRead, student_id: str, term_id: Optional[str] = None, db: Session = Depends(get_db)):

    student = get_or_404(principal, db, Student, student_id)
    require_teacher_class_access(principal, student.class_id, db, "Not assigned to this student's class")

    report = calculate_student_summary(db, principal.tenant_id, student.id, term_id)

    return StudentSummary(
        student_id=report.student_id,
        subjects=[_subject_average(subject) for subject in report.subjects],
        overall_average=report.overall_average,
        overall_gpa=report.overall_gpa,
    )


@grades_router.get("/reports/student/{student_id}/subject/{subject_id}", response_model=SubjectAverage)
async def student_subject_report(principal: CanRead, student_id: str, subject_id: str, term_id: Optional[str] = None, db: Session = Depends(get_db)):

    student = get_or_404(principal, db, Student, student_id)
    get_or_404(principal, db, Subject, subject_id)

    require_teacher_class_access(principal, student.class_id, db, "Not assigned to this student's class")
    require_teacher_assignment(principal, student.class_id, subject_id, db)

    return _subject_average(calculate_student_subject_average(db, principal.tenant_id, student.id, subject_id, term_id))


@grades_router.get("/reports/class/{class_id}/subject/{subject_id}", response_model=ClassSubjectAverage)
async def class_subject_report(principal: CanRead, class_id: str, subject_id: str, term_id: Optional[str] = None, db: Session = Depends(get_db)):

    get_or_404(principal, db, SchoolClass, class_id, "Class")
    get_or_404(principal, db, Subject, subject_id)

    require_teacher_assignment(principal, class_id, subject_id, db)

    report = calculate_class_subject_average(db, principal.tenant_id, class_id, subject_id, term_id)

    return ClassSubjectAverage(
        class_id=report.class_id,
        subject_id=report.subject_id,
        class_average=report.class_average,
        student_count=report.student_count,
        distribution=report.distribution,
    )


@grades_router.get("/{grade_id}", response_model=GradeGet)
async def get_grade(principal: CanRead, grade_id: str, db: Session = Depends(get_db)):

    grade = get_or_404(principal, db, Grade, grade_id)
    require_teacher_assignment(principal, grade.class_id, grade.subject_id, db)
    return grade


@grades_router.post("", response_model=GradeGet, status_code=status.HTTP_201_CREATED)
async def create_grade(principal: CanCreate, payload: GradeCreate, db: Session = Depends(get_db)):

    _check_context(principal, db, payload.class_id, payload.subject_id, payload.term_id)
    _student_in_class(principal, db, payload.student_id, payload.class_id)
    _active_grade_type(principal, db, payload.grade_type_id)

    require_teacher_assignment(principal, payload.class_id, payload.subject_id, db)

    scales = get_grading_scale(db, principal.tenant_id).scales

    return create_entity(
        repository(principal, db, Grade),
        **payload.model_dump(),
        **_score_fields(payload.score, payload.max_score, scales),
        teacher_id=principal.user_id,
        is_published=False,
    )


@grades_router.post("/bulk", response_model=BulkGradeResult, status_code=status.HTTP_201_CREATED)
async def create_grades_bulk(principal: CanCreate, payload: BulkGradeCreate, db: Session = Depends(get_db)):
    """Enter one assessment for many students of a class in one transaction."""

    _check_context(principal, db, payload.class_id, payload.subject_id, payload.term_id)
    _active_grade_type(principal, db, payload.grade_type_id)

    require_teacher_assignment(principal, payload.class_id, payload.subject_id, db)

    scales = get_grading_scale(db, principal.tenant_id).scales
    repo = repository(principal, db, Grade)

    for entry in payload.grades:
        _student_in_class(principal, db, entry.student_id, payload.class_id)

    for entry in payload.grades:
        repo.add(repo.build(
            student_id=entry.student_id,
            class_id=payload.class_id,
            subject_id=payload.subject_id,
            grade_type_id=payload.grade_type_id,
            term_id=payload.term_id,
            title=payload.title,
            assessment_date=payload.assessment_date,
            score=entry.score,
            max_score=payload.max_score,
            teacher_notes=entry.teacher_notes,
            student_feedback=entry.student_feedback,
            teacher_id=principal.user_id,
            is_published=False,
            **_score_fields(entry.score, payload.max_score, scales),
        ))

    repo.commit()

    return BulkGradeResult(message="Grades created successfully", count=len(payload.grades))


@grades_router.put("/{grade_id}", response_model=GradeGet)
async def update_grade(principal: CanUpdate, grade_id: str, payload: GradeUpdate, db: Session = Depends(get_db)):

    grade = get_or_404(principal, db, Grade, grade_id)
    require_teacher_assignment(principal, grade.class_id, grade.subject_id, db)
    require_grade_owner(principal, db, grade)

    values = payload.model_dump(exclude_unset=True)

    if values.get("grade_type_id") is not None:
        _active_grade_type(principal, db, values["grade_type_id"])

    for key in ("score", "max_score", "grade_type_id", "assessment_date"):
        if key in values and values[key] is None:
            values.pop(key)

    if "score" in values or "max_score" in values:
        scales = get_grading_scale(db, principal.tenant_id).scales
        values.update(_score_fields(values.get("score", grade.score), values.get("max_score", grade.max_score), scales))

    return apply_values(repository(principal, db, Grade), grade, values)


@grades_router.patch("/{grade_id}/publish", response_model=GradeGet)
async def publish_grade(principal: CanUpdate, grade_id: str, payload: Optional[GradePublish] = None, db: Session = Depends(get_db)):

    grade = get_or_404(principal, db, Grade, grade_id)
    require_teacher_assignment(principal, grade.class_id, grade.subject_id, db)
    require_grade_owner(principal, db, grade)

    return apply_values(repository(principal, db, Grade), grade, {"is_published": payload.is_published if payload is not None else True})


@grades_router.delete("/{grade_id}", response_model=MessageResponse)
async def delete_grade(principal: CanDelete, grade_id: str, db: Session = Depends(get_db)):

    grade = get_or_404(principal, db, Grade, grade_id)
    require_grade_owner(principal, db, grade)

    grade.soft_delete()
    db.commit()

    return {"message": "Grade deleted successfully"}
