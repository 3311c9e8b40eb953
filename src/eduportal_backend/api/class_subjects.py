from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequireAdmin
from eduportal_backend.api.crud import apply_values, create_entity, get_or_404, paginate, repository
from eduportal_backend.api.exceptions import BadRequestException
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import MessageResponse
from eduportal_backend.interface.class_subjects import ClassSubjectCreate, ClassSubjectGet, ClassSubjectQuery, ClassSubjectUpdate
from eduportal_backend.model.academic import ClassSubject, SchoolClass, Subject
from eduportal_backend.model.auth import User
from eduportal_backend.permissions.principal import Principal, TEACHER_ROLE
from eduportal_backend.services.users import users_with_role

class_subjects_router = APIRouter()

Admin = Annotated[Principal, Depends(RequireAdmin)]


def _check_teacher(principal: Principal, db: Session, teacher_id: str):
    teacher = users_with_role(db, principal.tenant_id, TEACHER_ROLE).filter(User.id == teacher_id).first()
    if teacher is None:
        raise BadRequestException("Teacher not found or user is not a teacher")


@class_subjects_router.get("", response_model=list[ClassSubjectGet])
async def list_class_subjects(principal: Admin, response: Response, params: ClassSubjectQuery = Depends(), db: Session = Depends(get_db)):

    query = repository(principal, db, ClassSubject).query()

    if params.class_id is not None:
        query = query.filter(ClassSubject.class_id == params.class_id)
    if params.subject_id is not None:
        query = query.filter(ClassSubject.subject_id == params.subject_id)
    if params.teacher_id is not None:
        query = query.filter(ClassSubject.teacher_id == params.teacher_id)

    return paginate(query.order_by(ClassSubject.created_at), params, response)


@class_subjects_router.get("/{class_subject_id}", response_model=ClassSubjectGet)
async def get_class_subject(principal: Admin, class_subject_id: str, db: Session = Depends(get_db)):
    return get_or_404(principal, db, ClassSubject, class_subject_id, "Assignment")


@class_subjects_router.post("", response_model=ClassSubjectGet, status_code=status.HTTP_201_CREATED)
async def create_class_subject(principal: Admin, payload: ClassSubjectCreate, db: Session = Depends(get_db)):

    if repository(principal, db, SchoolClass).get_by_id_optional(payload.class_id) is None:
        raise BadRequestException("Class not found")
    if repository(principal, db, Subject).get_by_id_optional(payload.subject_id) is None:
        raise BadRequestException("Subject not found")

    _check_teacher(principal, db, payload.teacher_id)

    repo = repository(principal, db, ClassSubject)

    # the unique index is authoritative, this only gives a clearer message
    if repo.find_one_by(class_id=payload.class_id, subject_id=payload.subject_id) is not None:
        raise BadRequestException("Subject is already assigned to this class")

    return create_entity(repo, **payload.model_dump())


@class_subjects_router.put("/{class_subject_id}", response_model=ClassSubjectGet)
async def update_class_subject(principal: Admin, class_subject_id: str, payload: ClassSubjectUpdate, db: Session = Depends(get_db)):

    assignment = get_or_404(principal, db, ClassSubject, class_subject_id, "Assignment")
    _check_teacher(principal, db, payload.teacher_id)

    return apply_values(repository(principal, db, ClassSubject), assignment, {"teacher_id": payload.teacher_id})


@class_subjects_router.delete("/{class_subject_id}", response_model=MessageResponse)
async def delete_class_subject(principal: Admin, class_subject_id: str, db: Session = Depends(get_db)):

    assignment = get_or_404(principal, db, ClassSubject, class_subject_id, "Assignment")
    db.delete(assignment)
    db.commit()

    return {"message": "Assignment deleted successfully"}
