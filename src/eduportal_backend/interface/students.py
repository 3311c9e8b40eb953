from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from eduportal_backend.interface.base import ListQuery


class NotificationPreferences(BaseModel):
    grade_updates: bool = True
    attendance: bool = True
    reports: bool = True


class StudentCreate(BaseModel):
    class_id: Optional[str] = None
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    student_id_number: Optional[str] = None
    email: Optional[EmailStr] = None
    gender: Optional[Literal["M", "F", "Other"]] = None
    date_of_birth: Optional[date] = None
    guardian_name: Optional[str] = None
    guardian_email: Optional[EmailStr] = None
    guardian_phone: Optional[str] = None
    notification_preferences: NotificationPreferences = Field(default_factory=NotificationPreferences)


class StudentUpdate(BaseModel):
    class_id: Optional[str] = None
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    student_id_number: Optional[str] = None
    email: Optional[EmailStr] = None
    gender: Optional[Literal["M", "F", "Other"]] = None
    date_of_birth: Optional[date] = None
    guardian_name: Optional[str] = None
    guardian_email: Optional[EmailStr] = None
    guardian_phone: Optional[str] = None
    notification_preferences: Optional[NotificationPreferences] = None


class StudentGet(BaseModel):
    id: str
    tenant_id: str
    class_id: Optional[str] = None
    first_name: str
    last_name: str
    student_id_number: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    guardian_name: Optional[str] = None
    guardian_email: Optional[str] = None
    guardian_phone: Optional[str] = None
    notification_preferences: dict = Field(default_factory=dict)
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StudentQuery(ListQuery):
    class_id: Optional[str] = None
    is_active: Optional[bool] = None
