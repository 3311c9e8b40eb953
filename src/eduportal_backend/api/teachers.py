from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequireAdmin
from eduportal_backend.api.crud import apply_values, paginate, repository
from eduportal_backend.api.exceptions import BadRequestException, InternalServerException, NotFoundException
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import ListQuery, MessageResponse, StatusUpdate
from eduportal_backend.interface.class_subjects import ClassSubjectGet
from eduportal_backend.interface.teachers import TeacherCreate, TeacherCreated, TeacherDetail, TeacherUpdate
from eduportal_backend.interface.users import PasswordReset, UserGet
from eduportal_backend.model.academic import ClassSubject
from eduportal_backend.model.auth import User
from eduportal_backend.permissions.principal import Principal, TEACHER_ROLE
from eduportal_backend.services.users import create_tenant_user, reset_password, role_by_name, users_with_role

teachers_router = APIRouter()

Admin = Annotated[Principal, Depends(RequireAdmin)]


def teacher_or_404(principal: Principal, db: Session, teacher_id: str) -> User:
    teacher = users_with_role(db, principal.tenant_id, TEACHER_ROLE).filter(User.id == teacher_id).first()
    if teacher is None:
        raise NotFoundException("Teacher not found")
    return teacher


def _assignments(principal: Principal, db: Session, teacher_id: str):
    return [
        ClassSubjectGet.model_validate(a)
        for a in repository(principal, db, ClassSubject).find_by(teacher_id=teacher_id)
    ]


@teachers_router.get("", response_model=list[UserGet])
async def list_teachers(principal: Admin, response: Response, params: ListQuery = Depends(), db: Session = Depends(get_db)):
    query = users_with_role(db, principal.tenant_id, TEACHER_ROLE).order_by(User.last_name, User.first_name)
    return paginate(query, params, response)


@teachers_router.get("/{teacher_id}", response_model=TeacherDetail)
async def get_teacher(principal: Admin, teacher_id: str, db: Session = Depends(get_db)):
    teacher = teacher_or_404(principal, db, teacher_id)
    return TeacherDetail(**UserGet.model_validate(teacher).model_dump(), assignments=_assignments(principal, db, teacher.id))


@teachers_router.post("", response_model=TeacherCreated, status_code=status.HTTP_201_CREATED)
async def create_teacher(principal: Admin, payload: TeacherCreate, db: Session = Depends(get_db)):

    role = role_by_name(db, principal.tenant_id, TEACHER_ROLE)
    if role is None:
        raise InternalServerException("TEACHER role is missing for this tenant")

    teacher, temp_password = create_tenant_user(
        db,
        principal.tenant_id,
        payload.first_name,
        payload.last_name,
        payload.email,
        password=payload.password,
        roles=[role],
        phone_number=payload.phone_number,
    )

    created = TeacherCreated.model_validate(teacher)
    created.temp_password = temp_password
    return created


@teachers_router.put("/{teacher_id}", response_model=UserGet)
async def update_teacher(principal: Admin, teacher_id: str, payload: TeacherUpdate, db: Session = Depends(get_db)):
    teacher = teacher_or_404(principal, db, teacher_id)
    return apply_values(repository(principal, db, User), teacher, payload.model_dump(exclude_unset=True))


@teachers_router.patch("/{teacher_id}/status", response_model=UserGet)
async def set_teacher_status(principal: Admin, teacher_id: str, payload: StatusUpdate, db: Session = Depends(get_db)):
    teacher = teacher_or_404(principal, db, teacher_id)
    return apply_values(repository(principal, db, User), teacher, {"is_active": payload.is_active})


@teachers_router.post("/{teacher_id}/reset-password", response_model=PasswordReset)
async def reset_teacher_password(principal: Admin, teacher_id: str, db: Session = Depends(get_db)):
    teacher = teacher_or_404(principal, db, teacher_id)
    temp_password = reset_password(db, teacher)
    return PasswordReset(user=UserGet.model_validate(teacher), temp_password=temp_password)


@teachers_router.delete("/{teacher_id}", response_model=MessageResponse)
async def delete_teacher(principal: Admin, teacher_id: str, db: Session = Depends(get_db)):

    teacher = teacher_or_404(principal, db, teacher_id)

    if repository(principal, db, ClassSubject).count(teacher_id=teacher.id) > 0:
        raise BadRequestException("Teacher still has class assignments")

    teacher.soft_delete()
    db.commit()

    return {"message": "Teacher deleted successfully"}
