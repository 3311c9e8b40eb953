from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from sqlalchemy.orm import Session
from eduportal_backend.interface.auth import normalize_email
from eduportal_backend.interface.base import ListQuery
from eduportal_backend.interface.roles import RoleBrief
from eduportal_backend.model.auth import User


class UserCreate(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=6)
    phone_number: Optional[str] = None
    role_ids: list[str] = Field(default_factory=list)

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        return normalize_email(value)


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    phone_number: Optional[str] = None
    profile_image_url: Optional[str] = None
    is_active: Optional[bool] = None
    role_ids: Optional[list[str]] = None

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        return normalize_email(value)


class UserGet(BaseModel):
    id: str
    tenant_id: str
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    profile_image_url: Optional[str] = None
    is_active: bool
    roles: list[RoleBrief] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserList(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    is_active: bool
    roles: list[RoleBrief] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class UserCreated(UserGet):
    temp_password: Optional[str] = None


class UserQuery(ListQuery):
    email: Optional[str] = None
    is_active: Optional[bool] = None


def user_search(db: Session, query, params: Optional[UserQuery]):
    if params.email != None:
        query = query.filter(User.email == params.email.lower())
    if params.is_active != None:
        query = query.filter(User.is_active == params.is_active)
    return query.order_by(User.last_name, User.first_name)


class AuthResponse(BaseModel):
    token: str
    user: UserGet


class PasswordReset(BaseModel):
    user: UserGet
    temp_password: str
