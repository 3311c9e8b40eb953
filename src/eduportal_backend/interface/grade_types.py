from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class GradeTypeCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    weight: Optional[float] = Field(None, ge=0, le=1)
    max_score: float = Field(100, gt=0)


class GradeTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    weight: Optional[float] = Field(None, ge=0, le=1)
    max_score: Optional[float] = Field(None, gt=0)
    is_active: Optional[bool] = None


class GradeTypeGet(BaseModel):
    id: str
    tenant_id: str
    name: str
    description: Optional[str] = None
    weight: Optional[float] = None
    max_score: float
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
