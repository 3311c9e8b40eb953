from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session
from eduportal_backend.interface.base import EntityInterface, ListQuery
from eduportal_backend.model.academic import Student, Subject
from eduportal_backend.model.grading import Term
from eduportal_backend.model.records import TermReport
from eduportal_backend.repositories import TenantRepository
from eduportal_backend.api.exceptions import BadRequestException
from eduportal_backend.services.term_reports import ensure_no_term_report

class TermReportSubject(BaseModel):
    subject_id: str
    average: Optional[float] = None
    letter_grade: Optional[str] = None
    gpa: Optional[float] = None
    comments: Optional[str] = None

class TermReportCreate(BaseModel):
    student_id: str
    term_id: str
    subjects: list[TermReportSubject] = Field(default_factory=list)
    overall_average: Optional[float] = None
    overall_gpa: Optional[float] = None
    overall_comments: Optional[str] = None

class TermReportUpdate(BaseModel):
    subjects: Optional[list[TermReportSubject]] = None
    overall_comments: Optional[str] = None

class TermReportGenerate(BaseModel):
    student_id: str
    term_id: str

class TermReportGet(BaseModel):
    id: str
    tenant_id: str
    student_id: str
    term_id: str
    class_id: Optional[str] = None
    subjects: list[TermReportSubject] = Field(default_factory=list)
    overall_average: Optional[float] = None
    overall_gpa: Optional[float] = None
    overall_comments: Optional[str] = None
    generated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class TermReportQuery(ListQuery):
    student_id: Optional[str] = None
    term_id: Optional[str] = None
    class_id: Optional[str] = None

def term_report_search(db: Session, query, params: Optional[TermReportQuery]):
    if params.student_id != None:
        query = query.filter(TermReport.student_id == params.student_id)
    if params.term_id != None:
        query = query.filter(TermReport.term_id == params.term_id)
    if params.class_id != None:
        query = query.filter(TermReport.class_id == params.class_id)
    return query.order_by(TermReport.created_at.desc())

def check_report_subjects(db: Session, tenant_id: str, subjects: list):
    repo = TenantRepository(db, Subject, tenant_id)
    for entry in subjects or []:
        if repo.get_by_id_optional(entry["subject_id"]) is None:
            raise BadRequestException(f"Subject {entry['subject_id']} not found")

def term_report_pre_create(db: Session, principal, values: dict) -> dict:
    student = TenantRepository(db, Student, principal.tenant_id).get_by_id(values["student_id"])
    term = TenantRepository(db, Term, principal.tenant_id).get_by_id(values["term_id"])
    ensure_no_term_report(db, principal.tenant_id, student.id, term)
    check_report_subjects(db, principal.tenant_id, values.get("subjects"))
    values["class_id"] = student.class_id
    values["generated_by"] = principal.user_id
    return values

class TermReportInterface(EntityInterface):
    create = TermReportCreate
    get = TermReportGet
    list = TermReportGet
    update = TermReportUpdate
    query = TermReportQuery
    search = term_report_search
    endpoint = "term-reports"
    resource = "term-reports"
    references = {"student_id": Student, "term_id": Term}
    model = TermReport
    pre_create = term_report_pre_create
