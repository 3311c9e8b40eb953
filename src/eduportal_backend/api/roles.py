from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequirePermission
from eduportal_backend.api.crud import apply_values, create_entity, get_or_404, paginate, repository
from eduportal_backend.api.exceptions import BadRequestException
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import MessageResponse
from eduportal_backend.interface.roles import RoleCreate, RoleGet, RoleQuery, RoleUpdate, role_search
from eduportal_backend.model.auth import Role, UserRole
from eduportal_backend.permissions.principal import Principal

roles_router = APIRouter()


@roles_router.post("", response_model=RoleGet, status_code=status.HTTP_201_CREATED)
async def create_role(principal: Annotated[Principal, Depends(RequirePermission("roles.create"))], payload: RoleCreate, db: Session = Depends(get_db)):
    return create_entity(repository(principal, db, Role), is_default=False, **payload.model_dump())


@roles_router.get("", response_model=list[RoleGet])
async def list_roles(principal: Annotated[Principal, Depends(RequirePermission("roles.read"))], response: Response, params: RoleQuery = Depends(), db: Session = Depends(get_db)):
    query = role_search(db, repository(principal, db, Role).query(), params)
    return paginate(query, params, response)


@roles_router.get("/{role_id}", response_model=RoleGet)
async def get_role(principal: Annotated[Principal, Depends(RequirePermission("roles.read"))], role_id: str, db: Session = Depends(get_db)):
    return get_or_404(principal, db, Role, role_id)


@roles_router.put("/{role_id}", response_model=RoleGet)
async def update_role(principal: Annotated[Principal, Depends(RequirePermission("roles.update"))], role_id: str, payload: RoleUpdate, db: Session = Depends(get_db)):

    role = get_or_404(principal, db, Role, role_id)

    if role.is_default:
        raise BadRequestException("Default roles cannot be updated")

    values = payload.model_dump(exclude_unset=True)

    if values.get("permissions") is None:
        values.pop("permissions", None)

    return apply_values(repository(principal, db, Role), role, values)


@roles_router.delete("/{role_id}", response_model=MessageResponse)
async def delete_role(principal: Annotated[Principal, Depends(RequirePermission("roles.delete"))], role_id: str, db: Session = Depends(get_db)):

    role = get_or_404(principal, db, Role, role_id)

    if role.is_default:
        raise BadRequestException("Default roles cannot be deleted")

    db.query(UserRole).filter(UserRole.role_id == role.id).delete(synchronize_session="fetch")
    role.soft_delete()
    db.commit()

    return {"message": "Role deleted successfully"}
