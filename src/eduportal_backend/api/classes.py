from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequireAdmin, RequirePermission
from eduportal_backend.api.crud import apply_values, create_entity, get_or_404, paginate, repository
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import MessageResponse, StatusUpdate
from eduportal_backend.interface.class_subjects import ClassSubjectGet
from eduportal_backend.interface.classes import ClassCreate, ClassDetail, ClassGet, ClassList, ClassQuery, ClassUpdate
from eduportal_backend.interface.students import StudentGet
from eduportal_backend.model.academic import ClassSubject, SchoolClass, Student
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.permissions.scoping import allowed_class_ids, require_teacher_class_access

classes_router = APIRouter()

Admin = Annotated[Principal, Depends(RequireAdmin)]


def student_counts(db: Session, tenant_id: str, class_ids) -> dict:
    if not class_ids:
        return {}
    rows = (
        db.query(Student.class_id, func.count(Student.id))
        .filter(Student.tenant_id == tenant_id, Student.deleted == False, Student.class_id.in_(class_ids))
        .group_by(Student.class_id)
        .all()
    )
    return {class_id: count for class_id, count in rows}


@classes_router.get("", response_model=list[ClassList])
async def list_classes(principal: Annotated[Principal, Depends(RequirePermission("classes.read"))], response: Response, params: ClassQuery = Depends(), db: Session = Depends(get_db)):

    class_ids = allowed_class_ids(principal, db)

    query = repository(principal, db, SchoolClass).query()

    if class_ids is not None:
        query = query.filter(SchoolClass.id.in_(class_ids))
    if params.is_active is not None:
        query = query.filter(SchoolClass.is_active == params.is_active)

    classes = paginate(query.order_by(SchoolClass.name), params, response)
    counts = student_counts(db, principal.tenant_id, [c.id for c in classes])

    return [
        ClassList(**ClassGet.model_validate(c).model_dump(), student_count=counts.get(c.id, 0))
        for c in classes
    ]


@classes_router.get("/{class_id}", response_model=ClassDetail)
async def get_class(principal: Annotated[Principal, Depends(RequirePermission("classes.read"))], class_id: str, db: Session = Depends(get_db)):

    school_class = get_or_404(principal, db, SchoolClass, class_id, "Class")
    require_teacher_class_access(principal, school_class.id, db)

    students = (
        repository(principal, db, Student).query()
        .filter(Student.class_id == school_class.id)
        .order_by(Student.last_name, Student.first_name)
        .all()
    )
    assignments = repository(principal, db, ClassSubject).find_by(class_id=school_class.id)

    return ClassDetail(
        **ClassGet.model_validate(school_class).model_dump(),
        students=[StudentGet.model_validate(s) for s in students],
        assignments=[ClassSubjectGet.model_validate(a) for a in assignments],
    )


@classes_router.post("", response_model=ClassGet, status_code=status.HTTP_201_CREATED)
async def create_class(principal: Admin, payload: ClassCreate, db: Session = Depends(get_db)):
    return create_entity(repository(principal, db, SchoolClass), **payload.model_dump())


@classes_router.put("/{class_id}", response_model=ClassGet)
async def update_class(principal: Admin, class_id: str, payload: ClassUpdate, db: Session = Depends(get_db)):
    school_class = get_or_404(principal, db, SchoolClass, class_id, "Class")
    return apply_values(repository(principal, db, SchoolClass), school_class, payload.model_dump(exclude_unset=True))


@classes_router.patch("/{class_id}/status", response_model=ClassGet)
async def set_class_status(principal: Admin, class_id: str, payload: StatusUpdate, db: Session = Depends(get_db)):
    school_class = get_or_404(principal, db, SchoolClass, class_id, "Class")
    return apply_values(repository(principal, db, SchoolClass), school_class, {"is_active": payload.is_active})


@classes_router.delete("/{class_id}", response_model=MessageResponse)
async def delete_class(principal: Admin, class_id: str, db: Session = Depends(get_db)):
    """Soft delete the class, detach its students and drop its assignments."""

    school_class = get_or_404(principal, db, SchoolClass, class_id, "Class")

    for student in repository(principal, db, Student).find_by(class_id=school_class.id):
        student.class_id = None

    (
        db.query(ClassSubject)
        .filter(ClassSubject.tenant_id == principal.tenant_id, ClassSubject.class_id == school_class.id)
        .delete(synchronize_session="fetch")
    )

    school_class.soft_delete()
    db.commit()

    return {"message": "Class deleted successfully"}
