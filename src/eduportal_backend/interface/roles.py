from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.orm import Session
from eduportal_backend.interface.base import BaseEntityGet, ListQuery
from eduportal_backend.model.auth import Role


def _clean_permissions(values):
    if values is None:
        return values
    cleaned = []
    for value in values:
        value = value.strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


class RoleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    permissions: list[str] = Field(default_factory=list)

    @field_validator("permissions")
    @classmethod
    def clean_permissions(cls, values):
        return _clean_permissions(values)


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    permissions: Optional[list[str]] = None

    @field_validator("permissions")
    @classmethod
    def clean_permissions(cls, values):
        return _clean_permissions(values)


class RolePermissionsUpdate(BaseModel):
    permissions: list[str]

    @field_validator("permissions")
    @classmethod
    def clean_permissions(cls, values):
        return _clean_permissions(values)


class RoleGet(BaseEntityGet):
    tenant_id: str
    name: str
    description: Optional[str] = None
    permissions: list[str] = Field(default_factory=list)
    is_default: bool

    model_config = ConfigDict(from_attributes=True)


class RoleBrief(BaseModel):
    id: str
    name: str
    permissions: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class RoleQuery(ListQuery):
    name: Optional[str] = None
    is_default: Optional[bool] = None


def role_search(db: Session, query, params: Optional[RoleQuery]):
    if params.name != None:
        query = query.filter(Role.name == params.name)
    if params.is_default != None:
        query = query.filter(Role.is_default == params.is_default)
    return query.order_by(Role.name)
