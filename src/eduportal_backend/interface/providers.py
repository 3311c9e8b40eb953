from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ProviderGet(BaseModel):
    id: str
    name: str
    legal_name: Optional[str] = None
    email: Optional[str] = None
    domain: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProviderUserGet(BaseModel):
    id: str
    provider_id: str
    first_name: str
    last_name: str
    email: str
    permissions: list[str] = Field(default_factory=list)
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProviderLoginResponse(BaseModel):
    token: str
    provider_user: ProviderUserGet


class ProviderSignupResponse(BaseModel):
    token: str
    provider: ProviderGet
    provider_user: ProviderUserGet
