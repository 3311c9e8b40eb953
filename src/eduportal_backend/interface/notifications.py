from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session
from eduportal_backend.interface.base import EntityInterface, ListQuery
from eduportal_backend.model.auth import User
from eduportal_backend.model.records import Notification

class NotificationCreate(BaseModel):
    user_id: str
    message: str = Field(min_length=1)

class NotificationUpdate(BaseModel):
    message: Optional[str] = Field(None, min_length=1)
    is_read: Optional[bool] = None

class NotificationGet(BaseModel):
    id: str
    tenant_id: str
    user_id: str
    message: str
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class NotificationQuery(ListQuery):
    user_id: Optional[str] = None
    is_read: Optional[bool] = None

def notification_search(db: Session, query, params: Optional[NotificationQuery]):
    if params.user_id != None:
        query = query.filter(Notification.user_id == params.user_id)
    if params.is_read != None:
        query = query.filter(Notification.is_read == params.is_read)
    return query.order_by(Notification.created_at.desc())

class NotificationInterface(EntityInterface):
    create = NotificationCreate
    get = NotificationGet
    list = NotificationGet
    update = NotificationUpdate
    query = NotificationQuery
    search = notification_search
    endpoint = "notifications"
    resource = "notifications"
    references = {"user_id": User}
    model = Notification
