from typing import Optional
from pydantic import BaseModel, Field
from eduportal_backend.interface.class_subjects import ClassSubjectGet
from eduportal_backend.interface.tenants import TenantAdmin
from eduportal_backend.interface.users import UserCreated, UserGet


class TeacherCreate(TenantAdmin):
    pass


class TeacherUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone_number: Optional[str] = None


class TeacherDetail(UserGet):
    assignments: list[ClassSubjectGet] = Field(default_factory=list)


class TeacherCreated(UserCreated):
    pass
