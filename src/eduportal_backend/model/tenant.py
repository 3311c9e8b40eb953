from sqlalchemy import Boolean, Column, ForeignKey, Index, JSON, String, text
from sqlalchemy.orm import relationship

from .base import Base, EntityMixin, SoftDeleteMixin

TENANT_STATUSES = ("active", "inactive", "suspended")
SUBSCRIPTION_PLANS = ("free", "basic", "premium")


class Provider(Base, EntityMixin, SoftDeleteMixin):
    __tablename__ = 'provider'

    name = Column(String(255), nullable=False)
    legal_name = Column(String(255))
    email = Column(String(320))
    domain = Column(String(255))
    is_active = Column(Boolean, nullable=False, default=True)

    users = relationship("ProviderUser", back_populates="provider", lazy="select")
    tenants = relationship("Tenant", back_populates="provider", lazy="select")


class ProviderUser(Base, EntityMixin, SoftDeleteMixin):
    __tablename__ = 'provider_user'
    __table_args__ = (
        Index('provider_user_email_key', 'email', unique=True,
              postgresql_where=text("NOT deleted"), sqlite_where=text("deleted = 0")),
    )

    provider_id = Column(ForeignKey('provider.id', ondelete='CASCADE'), nullable=False, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    password = Column(String(255), nullable=False)
    permissions = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    provider = relationship("Provider", back_populates="users", lazy="select")


class Tenant(Base, EntityMixin, SoftDeleteMixin):
    __tablename__ = 'tenant'
    __table_args__ = (
        Index('tenant_slug_key', 'slug', unique=True,
              postgresql_where=text("NOT deleted"), sqlite_where=text("deleted = 0")),
    )

    provider_id = Column(ForeignKey('provider.id', ondelete='SET NULL'), index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    subscription_plan = Column(String(32), nullable=False, default="free")
    status = Column(String(32), nullable=False, default="active")
    settings = Column(JSON, nullable=False, default=dict)
    primary_admin_user_id = Column(String(36))

    provider = relationship("Provider", back_populates="tenants", lazy="select")
