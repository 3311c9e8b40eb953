from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from eduportal_backend.interface.base import ListQuery
from eduportal_backend.interface.class_subjects import ClassSubjectGet
from eduportal_backend.interface.students import StudentGet


class ClassCreate(BaseModel):
    name: str = Field(min_length=1)
    grade_level: Optional[str] = None
    section: Optional[str] = None
    academic_year: Optional[str] = None
    room: Optional[str] = None


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    grade_level: Optional[str] = None
    section: Optional[str] = None
    academic_year: Optional[str] = None
    room: Optional[str] = None


class ClassGet(BaseModel):
    id: str
    tenant_id: str
    name: str
    grade_level: Optional[str] = None
    section: Optional[str] = None
    academic_year: Optional[str] = None
    room: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ClassList(ClassGet):
    student_count: int = 0


class ClassDetail(ClassGet):
    students: list[StudentGet] = Field(default_factory=list)
    assignments: list[ClassSubjectGet] = Field(default_factory=list)


class ClassQuery(ListQuery):
    is_active: Optional[bool] = None
