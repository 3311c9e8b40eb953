from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from eduportal_backend.interface.base import ListQuery
from eduportal_backend.interface.class_subjects import ClassSubjectGet


class SubjectCreate(BaseModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    description: Optional[str] = None


class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class SubjectGet(BaseModel):
    id: str
    tenant_id: str
    name: str
    code: str
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubjectDetail(SubjectGet):
    assignments: list[ClassSubjectGet] = Field(default_factory=list)


class SubjectQuery(ListQuery):
    is_active: Optional[bool] = None
    class_id: Optional[str] = None
