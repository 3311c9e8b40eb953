from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequirePermission
from eduportal_backend.api.crud import apply_values, get_or_404, paginate, repository
from eduportal_backend.api.exceptions import BadRequestException
from eduportal_backend.auth.passwords import hash_password
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import MessageResponse
from eduportal_backend.interface.users import UserCreate, UserCreated, UserGet, UserList, UserQuery, UserUpdate, user_search
from eduportal_backend.model.auth import User
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.services.users import assign_roles, create_tenant_user, ensure_email_available, tenant_roles

users_router = APIRouter()


@users_router.post("", response_model=UserCreated, status_code=status.HTTP_201_CREATED)
async def create_user(principal: Annotated[Principal, Depends(RequirePermission("users.create"))], payload: UserCreate, db: Session = Depends(get_db)):

    roles = tenant_roles(db, principal.tenant_id, payload.role_ids)

    user, temp_password = create_tenant_user(
        db,
        principal.tenant_id,
        payload.first_name,
        payload.last_name,
        payload.email,
        password=payload.password,
        roles=roles,
        phone_number=payload.phone_number,
    )

    created = UserCreated.model_validate(user)
    created.temp_password = temp_password
    return created


@users_router.get("", response_model=list[UserList])
async def list_users(principal: Annotated[Principal, Depends(RequirePermission("users.read"))], response: Response, params: UserQuery = Depends(), db: Session = Depends(get_db)):
    query = user_search(db, repository(principal, db, User).query(), params)
    return paginate(query, params, response)


@users_router.get("/{user_id}", response_model=UserGet)
async def get_user(principal: Annotated[Principal, Depends(RequirePermission("users.read"))], user_id: str, db: Session = Depends(get_db)):
    return get_or_404(principal, db, User, user_id)


@users_router.put("/{user_id}", response_model=UserGet)
async def update_user(principal: Annotated[Principal, Depends(RequirePermission("users.update"))], user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):

    user = get_or_404(principal, db, User, user_id)
    values = payload.model_dump(exclude_unset=True)

    if values.get("email") is not None:
        ensure_email_available(db, values["email"], exclude_user_id=user.id)
    else:
        values.pop("email", None)

    password = values.pop("password", None)
    if password:
        values["password"] = hash_password(password)

    role_ids = values.pop("role_ids", None)
    if role_ids is not None:
        assign_roles(user, tenant_roles(db, principal.tenant_id, role_ids))

    return apply_values(repository(principal, db, User), user, values)


@users_router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(principal: Annotated[Principal, Depends(RequirePermission("users.delete"))], user_id: str, db: Session = Depends(get_db)):

    if user_id == principal.user_id:
        raise BadRequestException("You cannot delete your own account")

    user = get_or_404(principal, db, User, user_id)
    user.soft_delete()
    db.commit()

    return {"message": "User deleted successfully"}
