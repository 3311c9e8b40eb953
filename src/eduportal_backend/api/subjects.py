from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequireAdmin, RequirePermission
from eduportal_backend.api.crud import apply_values, create_entity, get_or_404, paginate, repository
from eduportal_backend.api.exceptions import forbidden
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import MessageResponse, StatusUpdate
from eduportal_backend.interface.class_subjects import ClassSubjectGet
from eduportal_backend.interface.subjects import SubjectCreate, SubjectDetail, SubjectGet, SubjectQuery, SubjectUpdate
from eduportal_backend.model.academic import ClassSubject, Subject
from eduportal_backend.permissions.core import is_admin
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.permissions.scoping import allowed_subject_ids, get_teacher_subject_ids

subjects_router = APIRouter()

Admin = Annotated[Principal, Depends(RequireAdmin)]


@subjects_router.get("", response_model=list[SubjectGet])
async def list_subjects(principal: Annotated[Principal, Depends(RequirePermission("subjects.read"))], response: Response, params: SubjectQuery = Depends(), db: Session = Depends(get_db)):

    query = repository(principal, db, Subject).query()

    subject_ids = allowed_subject_ids(principal, db, params.class_id)

    if subject_ids is not None:
        query = query.filter(Subject.id.in_(subject_ids))
    elif params.class_id is not None:
        assigned = repository(principal, db, ClassSubject).query().filter(ClassSubject.class_id == params.class_id)
        query = query.filter(Subject.id.in_([a.subject_id for a in assigned]))

    if params.is_active is not None:
        query = query.filter(Subject.is_active == params.is_active)

    return paginate(query.order_by(Subject.name), params, response)


@subjects_router.get("/{subject_id}", response_model=SubjectDetail)
async def get_subject(principal: Annotated[Principal, Depends(RequirePermission("subjects.read"))], subject_id: str, db: Session = Depends(get_db)):

    subject = get_or_404(principal, db, Subject, subject_id)

    assignments = repository(principal, db, ClassSubject).query().filter(ClassSubject.subject_id == subject.id)

    if not is_admin(principal, db):
        if subject.id not in get_teacher_subject_ids(db, principal.tenant_id, principal.user_id):
            raise forbidden("Not assigned to this subject", [f"subject:{subject.id}"], principal.role_names)
        assignments = assignments.filter(ClassSubject.teacher_id == principal.user_id)

    return SubjectDetail(
        **SubjectGet.model_validate(subject).model_dump(),
        assignments=[ClassSubjectGet.model_validate(a) for a in assignments.all()],
    )


@subjects_router.post("", response_model=SubjectGet, status_code=status.HTTP_201_CREATED)
async def create_subject(principal: Admin, payload: SubjectCreate, db: Session = Depends(get_db)):
    return create_entity(repository(principal, db, Subject), **payload.model_dump())


@subjects_router.put("/{subject_id}", response_model=SubjectGet)
async def update_subject(principal: Admin, subject_id: str, payload: SubjectUpdate, db: Session = Depends(get_db)):
    subject = get_or_404(principal, db, Subject, subject_id)
    return apply_values(repository(principal, db, Subject), subject, payload.model_dump(exclude_unset=True))


@subjects_router.patch("/{subject_id}/status", response_model=SubjectGet)
async def set_subject_status(principal: Admin, subject_id: str, payload: StatusUpdate, db: Session = Depends(get_db)):
    subject = get_or_404(principal, db, Subject, subject_id)
    return apply_values(repository(principal, db, Subject), subject, {"is_active": payload.is_active})


@subjects_router.delete("/{subject_id}", response_model=MessageResponse)
async def delete_subject(principal: Admin, subject_id: str, db: Session = Depends(get_db)):

    subject = get_or_404(principal, db, Subject, subject_id)

    (
        db.query(ClassSubject)
        .filter(ClassSubject.tenant_id == principal.tenant_id, ClassSubject.subject_id == subject.id)
        .delete(synchronize_session="fetch")
    )

    subject.soft_delete()
    db.commit()

    return {"message": "Subject deleted successfully"}
