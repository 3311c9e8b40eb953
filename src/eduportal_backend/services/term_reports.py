import logging
from typing import Optional
from sqlalchemy.orm import Session

from eduportal_backend.api.exceptions import BadRequestException
from eduportal_backend.model.academic import Student
from eduportal_backend.model.grading import Term
from eduportal_backend.model.records import TermReport
from eduportal_backend.services.grading import calculate_student_summary

logger = logging.getLogger(__name__)


def find_term_report(db: Session, tenant_id: str, student_id: str, term_id: str) -> Optional[TermReport]:
    return (
        db.query(TermReport)
        .filter(
            TermReport.tenant_id == tenant_id,
            TermReport.student_id == student_id,
            TermReport.term_id == term_id,
            TermReport.deleted == False,
        )
        .first()
    )


def ensure_no_term_report(db: Session, tenant_id: str, student_id: str, term: Term):
    """One live report per student and term."""
    if find_term_report(db, tenant_id, student_id, term.id) is not None:
        raise BadRequestException(f"Term report already exists for this student in {term.name} {term.academic_year}")


def generate_term_report(db: Session, tenant_id: str, student: Student, term: Term, generated_by: Optional[str] = None) -> TermReport:
    """
    Snapshot the student's published grades for a term into a report.

    Each subject entry carries the weighted average, letter grade and GPA
    computed by the grading engine at generation time. Later grade
    changes do not alter a stored report.
    """
    ensure_no_term_report(db, tenant_id, student.id, term)

    summary = calculate_student_summary(db, tenant_id, student.id, term.id)

    report = TermReport(
        tenant_id=tenant_id,
        student_id=student.id,
        term_id=term.id,
        class_id=student.class_id,
        subjects=[
            {
                "subject_id": subject.subject_id,
                "average": subject.weighted_average,
                "letter_grade": subject.letter_grade,
                "gpa": subject.gpa,
                "comments": None,
            }
            for subject in summary.subjects
        ],
        overall_average=summary.overall_average,
        overall_gpa=summary.overall_gpa,
        generated_by=generated_by,
    )
    db.add(report)
    db.commit()
    db.refresh(report)

    logger.info(f"Generated term report {report.id} for student {student.id} in term {term.id}")
    return report
