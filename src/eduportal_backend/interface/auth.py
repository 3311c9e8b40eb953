from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


def normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        return normalize_email(value)


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    tenant_name: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        return normalize_email(value)


class ProviderInfo(BaseModel):
    name: str = Field(min_length=1)
    legal_name: Optional[str] = None
    email: Optional[EmailStr] = None
    domain: Optional[str] = None


class ProviderManager(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    permissions: Optional[list[str]] = None

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        return normalize_email(value)


class ProviderSignupRequest(BaseModel):
    provider: ProviderInfo
    manager: ProviderManager


class ProviderUserRegister(ProviderManager):
    provider_id: str
