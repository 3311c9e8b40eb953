from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ScaleBand(BaseModel):
    letter: str = Field(min_length=1, max_length=8)
    min_percentage: float = Field(ge=0)
    max_percentage: float = Field(ge=0)
    gpa: float = Field(0.0, ge=0)

    @model_validator(mode="after")
    def check_range(self):
        if self.min_percentage > self.max_percentage:
            raise ValueError("min_percentage cannot be greater than max_percentage")
        return self


class GradingScaleUpdate(BaseModel):
    name: Optional[str] = None
    scales: list[ScaleBand] = Field(min_length=1)


class GradingScaleGet(BaseModel):
    id: str
    tenant_id: str
    name: str
    scales: list[ScaleBand]
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
