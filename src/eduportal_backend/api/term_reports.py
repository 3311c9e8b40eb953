from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequirePermission
from eduportal_backend.api.crud import get_or_404, repository
from eduportal_backend.database import get_db
from eduportal_backend.interface.term_reports import TermReportGenerate, TermReportGet
from eduportal_backend.model.academic import Student
from eduportal_backend.model.grading import Term
from eduportal_backend.model.records import TermReport
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.permissions.scoping import require_teacher_class_access
from eduportal_backend.services.term_reports import generate_term_report

term_reports_router = APIRouter()

CanRead = Annotated[Principal, Depends(RequirePermission("term-reports.read"))]
CanCreate = Annotated[Principal, Depends(RequirePermission("term-reports.create"))]


@term_reports_router.post("/generate", response_model=TermReportGet, status_code=status.HTTP_201_CREATED)
async def generate_report(principal: CanCreate, payload: TermReportGenerate, db: Session = Depends(get_db)):

    student = get_or_404(principal, db, Student, payload.student_id)
    term = get_or_404(principal, db, Term, payload.term_id)
    require_teacher_class_access(principal, student.class_id, db, "Not assigned to this student's class")

    return generate_term_report(db, principal.tenant_id, student, term, principal.user_id)


@term_reports_router.get("/student/{student_id}", response_model=list[TermReportGet])
async def reports_by_student(principal: CanRead, student_id: str, db: Session = Depends(get_db)):

    student = get_or_404(principal, db, Student, student_id)
    require_teacher_class_access(principal, student.class_id, db, "Not assigned to this student's class")

    return (
        repository(principal, db, TermReport).query()
        .filter(TermReport.student_id == student.id)
        .order_by(TermReport.created_at.desc())
        .all()
    )
