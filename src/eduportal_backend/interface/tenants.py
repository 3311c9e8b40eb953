from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from eduportal_backend.interface.auth import normalize_email
from eduportal_backend.interface.roles import RoleGet
from eduportal_backend.interface.users import UserGet

TenantStatus = Literal["active", "inactive", "suspended"]
SubscriptionPlan = Literal["free", "basic", "premium"]


class TenantSettings(BaseModel):
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    timezone: str = "UTC"
    currency: str = "USD"


class TenantAdmin(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=6)
    phone_number: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        return normalize_email(value)


class TenantInfo(BaseModel):
    name: str = Field(min_length=1)
    slug: Optional[str] = None
    subscription_plan: SubscriptionPlan = "free"
    settings: TenantSettings = Field(default_factory=TenantSettings)


class TenantCreate(BaseModel):
    """Tenant together with its bootstrap admin."""
    tenant: TenantInfo
    admin: TenantAdmin


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = None
    subscription_plan: Optional[SubscriptionPlan] = None
    settings: Optional[TenantSettings] = None


class TenantStatusUpdate(BaseModel):
    status: TenantStatus


class TenantGet(BaseModel):
    id: str
    provider_id: Optional[str] = None
    name: str
    slug: str
    subscription_plan: str
    status: str
    settings: dict = Field(default_factory=dict)
    primary_admin_user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TenantDetail(TenantGet):
    admin_user: Optional[UserGet] = None


class TenantProvisioned(BaseModel):
    tenant: TenantGet
    admin_user: UserGet
    roles: list[RoleGet] = Field(default_factory=list)
    temp_password: Optional[str] = None


class TenantMetrics(BaseModel):
    tenant_id: str
    users: int
    students: int
    classes: int
    subjects: int


class TenantUserCreate(TenantAdmin):
    role_ids: list[str] = Field(default_factory=list)
