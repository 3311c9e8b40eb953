from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from eduportal_backend.interface.base import ListQuery


class ClassSubjectCreate(BaseModel):
    class_id: str
    subject_id: str
    teacher_id: str


class ClassSubjectUpdate(BaseModel):
    teacher_id: str


class ClassSubjectGet(BaseModel):
    id: str
    tenant_id: str
    class_id: str
    subject_id: str
    teacher_id: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ClassSubjectQuery(ListQuery):
    class_id: Optional[str] = None
    subject_id: Optional[str] = None
    teacher_id: Optional[str] = None


class ClassSubjectPair(BaseModel):
    class_id: str
    subject_id: str
