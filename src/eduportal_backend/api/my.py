from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import CurrentPrincipal
from eduportal_backend.api.crud import repository
from eduportal_backend.database import get_db
from eduportal_backend.interface.class_subjects import ClassSubjectGet
from eduportal_backend.interface.classes import ClassGet
from eduportal_backend.interface.subjects import SubjectGet
from eduportal_backend.model.academic import ClassSubject, SchoolClass, Subject
from eduportal_backend.permissions.scoping import get_teacher_class_ids, get_teacher_subject_ids

my_router = APIRouter()


@my_router.get("/assignments", response_model=list[ClassSubjectGet])
async def my_assignments(principal: CurrentPrincipal, db: Session = Depends(get_db)):
    return repository(principal, db, ClassSubject).find_by(teacher_id=principal.user_id)


@my_router.get("/classes", response_model=list[ClassGet])
async def my_classes(principal: CurrentPrincipal, db: Session = Depends(get_db)):

    class_ids = get_teacher_class_ids(db, principal.tenant_id, principal.user_id)
    if not class_ids:
        return []

    return (
        repository(principal, db, SchoolClass).query()
        .filter(SchoolClass.id.in_(class_ids))
        .order_by(SchoolClass.name)
        .all()
    )


@my_router.get("/subjects", response_model=list[SubjectGet])
async def my_subjects(principal: CurrentPrincipal, class_id: Optional[str] = None, db: Session = Depends(get_db)):

    subject_ids = get_teacher_subject_ids(db, principal.tenant_id, principal.user_id, class_id)
    if not subject_ids:
        return []

    return (
        repository(principal, db, Subject).query()
        .filter(Subject.id.in_(subject_ids))
        .order_by(Subject.name)
        .all()
    )
