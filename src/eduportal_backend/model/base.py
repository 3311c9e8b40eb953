import uuid
import datetime
from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()
metadata = Base.metadata


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class EntityMixin:
    """Columns shared by every persisted entity."""

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(True), nullable=False, default=utcnow, onupdate=utcnow)


class SoftDeleteMixin:
    """Terminal two state lifecycle: live rows have deleted == False."""

    deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime(True))

    def soft_delete(self):
        self.deleted = True
        self.deleted_at = utcnow()


class TenantScopedMixin(EntityMixin, SoftDeleteMixin):
    tenant_id = Column(String(36), nullable=False, index=True)
