from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session
from eduportal_backend.interface.base import EntityInterface, ListQuery
from eduportal_backend.model.academic import Student
from eduportal_backend.model.records import BehaviorRecord

class BehaviorRecordCreate(BaseModel):
    student_id: str
    incident_date: Optional[date] = None
    description: str = Field(min_length=1)
    action_taken: Optional[str] = None

class BehaviorRecordUpdate(BaseModel):
    incident_date: Optional[date] = None
    description: Optional[str] = Field(None, min_length=1)
    action_taken: Optional[str] = None

class BehaviorRecordGet(BaseModel):
    id: str
    tenant_id: str
    student_id: str
    incident_date: Optional[date] = None
    description: str
    action_taken: Optional[str] = None
    reported_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class BehaviorRecordQuery(ListQuery):
    student_id: Optional[str] = None

def behavior_record_search(db: Session, query, params: Optional[BehaviorRecordQuery]):
    if params.student_id != None:
        query = query.filter(BehaviorRecord.student_id == params.student_id)
    return query.order_by(BehaviorRecord.incident_date.desc())

def behavior_record_pre_create(db: Session, principal, values: dict) -> dict:
    values["reported_by"] = principal.user_id
    return values

class BehaviorRecordInterface(EntityInterface):
    create = BehaviorRecordCreate
    get = BehaviorRecordGet
    list = BehaviorRecordGet
    update = BehaviorRecordUpdate
    query = BehaviorRecordQuery
    search = behavior_record_search
    endpoint = "behavior-records"
    resource = "behavior-records"
    references = {"student_id": Student}
    model = BehaviorRecord
    pre_create = behavior_record_pre_create
