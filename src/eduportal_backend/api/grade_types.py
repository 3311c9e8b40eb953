from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequireAdmin, RequirePermission
from eduportal_backend.api.crud import apply_values, create_entity, get_or_404, repository
from eduportal_backend.api.exceptions import BadRequestException
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import MessageResponse
from eduportal_backend.interface.grade_types import GradeTypeCreate, GradeTypeGet, GradeTypeUpdate
from eduportal_backend.model.grading import GradeType
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.services.grading import ensure_grade_types

grade_types_router = APIRouter()

Admin = Annotated[Principal, Depends(RequireAdmin)]


def _check_name(principal: Principal, db: Session, name: str, exclude_id: str = None):
    existing = repository(principal, db, GradeType).find_one_by(name=name)
    if existing is not None and existing.id != exclude_id:
        raise BadRequestException("Grade type with this name already exists")


@grade_types_router.get("", response_model=list[GradeTypeGet])
async def list_grade_types(principal: Annotated[Principal, Depends(RequirePermission("grades.read"))], include_inactive: bool = False, db: Session = Depends(get_db)):

    grade_types = ensure_grade_types(db, principal.tenant_id)

    if include_inactive:
        return grade_types
    return [grade_type for grade_type in grade_types if grade_type.is_active]


@grade_types_router.post("", response_model=GradeTypeGet, status_code=status.HTTP_201_CREATED)
async def create_grade_type(principal: Admin, payload: GradeTypeCreate, db: Session = Depends(get_db)):
    _check_name(principal, db, payload.name)
    return create_entity(repository(principal, db, GradeType), **payload.model_dump())


@grade_types_router.put("/{grade_type_id}", response_model=GradeTypeGet)
async def update_grade_type(principal: Admin, grade_type_id: str, payload: GradeTypeUpdate, db: Session = Depends(get_db)):

    grade_type = get_or_404(principal, db, GradeType, grade_type_id, "Grade type")
    values = payload.model_dump(exclude_unset=True)

    if values.get("name") is not None:
        _check_name(principal, db, values["name"], exclude_id=grade_type.id)

    return apply_values(repository(principal, db, GradeType), grade_type, values)


@grade_types_router.delete("/{grade_type_id}", response_model=MessageResponse)
async def delete_grade_type(principal: Admin, grade_type_id: str, db: Session = Depends(get_db)):

    # grades keep referencing the type, so it is only deactivated
    grade_type = get_or_404(principal, db, GradeType, grade_type_id, "Grade type")
    apply_values(repository(principal, db, GradeType), grade_type, {"is_active": False})

    return {"message": "Grade type deactivated successfully"}
