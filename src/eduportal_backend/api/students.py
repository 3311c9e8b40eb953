from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequireAdmin, RequirePermission
from eduportal_backend.api.crud import apply_values, create_entity, get_or_404, paginate, repository
from eduportal_backend.api.exceptions import BadRequestException
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import MessageResponse, StatusUpdate
from eduportal_backend.interface.students import StudentCreate, StudentGet, StudentQuery, StudentUpdate
from eduportal_backend.model.academic import SchoolClass, Student
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.permissions.scoping import allowed_class_ids, require_teacher_class_access

students_router = APIRouter()

Admin = Annotated[Principal, Depends(RequireAdmin)]


def _check_class(principal: Principal, db: Session, class_id):
    if class_id is not None and repository(principal, db, SchoolClass).get_by_id_optional(class_id) is None:
        raise BadRequestException("Class not found")


@students_router.get("", response_model=list[StudentGet])
async def list_students(principal: Annotated[Principal, Depends(RequirePermission("students.read"))], response: Response, params: StudentQuery = Depends(), db: Session = Depends(get_db)):

    # validated against the caller's assignments before querying
    class_ids = allowed_class_ids(principal, db, params.class_id)

    query = repository(principal, db, Student).query()

    if class_ids is not None:
        query = query.filter(Student.class_id.in_(class_ids))
    if params.is_active is not None:
        query = query.filter(Student.is_active == params.is_active)

    return paginate(query.order_by(Student.last_name, Student.first_name), params, response)


@students_router.get("/{student_id}", response_model=StudentGet)
async def get_student(principal: Annotated[Principal, Depends(RequirePermission("students.read"))], student_id: str, db: Session = Depends(get_db)):

    student = get_or_404(principal, db, Student, student_id)
    require_teacher_class_access(principal, student.class_id, db, "Not assigned to this student's class")
    return student


@students_router.post("", response_model=StudentGet, status_code=status.HTTP_201_CREATED)
async def create_student(principal: Admin, payload: StudentCreate, db: Session = Depends(get_db)):
    _check_class(principal, db, payload.class_id)
    return create_entity(repository(principal, db, Student), **payload.model_dump())


@students_router.put("/{student_id}", response_model=StudentGet)
async def update_student(principal: Admin, student_id: str, payload: StudentUpdate, db: Session = Depends(get_db)):

    student = get_or_404(principal, db, Student, student_id)
    values = payload.model_dump(exclude_unset=True)

    _check_class(principal, db, values.get("class_id"))

    return apply_values(repository(principal, db, Student), student, values)


@students_router.patch("/{student_id}/status", response_model=StudentGet)
async def set_student_status(principal: Admin, student_id: str, payload: StatusUpdate, db: Session = Depends(get_db)):
    student = get_or_404(principal, db, Student, student_id)
    return apply_values(repository(principal, db, Student), student, {"is_active": payload.is_active})


@students_router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(principal: Admin, student_id: str, db: Session = Depends(get_db)):

    student = get_or_404(principal, db, Student, student_id)
    student.soft_delete()
    db.commit()

    return {"message": "Student deleted successfully"}
