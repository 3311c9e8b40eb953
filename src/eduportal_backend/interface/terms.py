from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class TermCreate(BaseModel):
    name: str = Field(min_length=1)
    start_date: date
    end_date: date
    academic_year: str = Field(min_length=1)
    is_current: bool = False

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date cannot be after end_date")
        return self


class TermUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    academic_year: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None


class TermGet(BaseModel):
    id: str
    tenant_id: str
    name: str
    start_date: date
    end_date: date
    academic_year: str
    is_current: bool
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
