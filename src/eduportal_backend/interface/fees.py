from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session
from eduportal_backend.interface.base import EntityInterface, ListQuery
from eduportal_backend.model.academic import Student
from eduportal_backend.model.finance import Fee

FeeStatus = Literal["paid", "unpaid", "overdue"]

class FeeCreate(BaseModel):
    student_id: str
    title: str = Field(min_length=1)
    description: Optional[str] = None
    amount: float = Field(gt=0)
    due_date: date
    status: FeeStatus = "unpaid"

class FeeUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    due_date: Optional[date] = None
    status: Optional[FeeStatus] = None

class FeeGet(BaseModel):
    id: str
    tenant_id: str
    student_id: str
    title: str
    description: Optional[str] = None
    amount: float
    due_date: date
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class FeeQuery(ListQuery):
    student_id: Optional[str] = None
    status: Optional[FeeStatus] = None

def fee_search(db: Session, query, params: Optional[FeeQuery]):
    if params.student_id != None:
        query = query.filter(Fee.student_id == params.student_id)
    if params.status != None:
        query = query.filter(Fee.status == params.status)
    return query.order_by(Fee.due_date)

class FeeInterface(EntityInterface):
    create = FeeCreate
    get = FeeGet
    list = FeeGet
    update = FeeUpdate
    query = FeeQuery
    search = fee_search
    endpoint = "fees"
    resource = "fees"
    references = {"student_id": Student}
    model = Fee
