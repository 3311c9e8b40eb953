from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session
from eduportal_backend.interface.base import EntityInterface, ListQuery
from eduportal_backend.model.academic import SchoolClass, Student
from eduportal_backend.model.records import Attendance

AttendanceStatus = Literal["present", "absent", "late"]

class AttendanceCreate(BaseModel):
    student_id: str
    class_id: Optional[str] = None
    date: date
    status: AttendanceStatus
    notes: Optional[str] = None

class AttendanceUpdate(BaseModel):
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None

class AttendanceGet(BaseModel):
    id: str
    tenant_id: str
    student_id: str
    class_id: Optional[str] = None
    date: date
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class AttendanceQuery(ListQuery):
    student_id: Optional[str] = None
    class_id: Optional[str] = None
    status: Optional[AttendanceStatus] = None

def attendance_search(db: Session, query, params: Optional[AttendanceQuery]):
    if params.student_id != None:
        query = query.filter(Attendance.student_id == params.student_id)
    if params.class_id != None:
        query = query.filter(Attendance.class_id == params.class_id)
    if params.status != None:
        query = query.filter(Attendance.status == params.status)
    return query.order_by(Attendance.date.desc())

class AttendanceInterface(EntityInterface):
    create = AttendanceCreate
    get = AttendanceGet
    list = AttendanceGet
    update = AttendanceUpdate
    query = AttendanceQuery
    search = attendance_search
    endpoint = "attendance"
    resource = "attendance"
    references = {"student_id": Student, "class_id": SchoolClass}
    model = Attendance
