from abc import ABC
from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field

class ListQuery(BaseModel):
    skip: Optional[int] = Field(0, ge=0)
    limit: Optional[int] = Field(100, ge=1, le=1000)

class EntityInterface(ABC):
    create: BaseModel = None
    get: BaseModel = None
    list: BaseModel = None
    update: BaseModel = None
    query: BaseModel = None
    search: Any = None
    endpoint: str = None
    model: Any = None

    # permission prefix, e.g. "fees" for fees.create
    resource: str = None

    # {field: model} foreign keys that must resolve inside the tenant
    references: dict = {}

    # pre_create(db, principal, values) -> values, runs before insert
    # post_create(db, principal, entity), runs after commit
    pre_create: Any = None
    post_create: Any = None

class BaseEntityList(BaseModel):
    id: str
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Update timestamp")

    model_config = ConfigDict(from_attributes=True)

class BaseEntityGet(BaseEntityList):
    pass

class StatusUpdate(BaseModel):
    is_active: bool = Field(strict=True)

class MessageResponse(BaseModel):
    message: str
