"""
Tenant provisioning.

Creates a tenant, its default roles and its first admin user. If the admin
user cannot be created the tenant and its roles are soft-deleted again
before the error propagates, so no active tenant is left without an admin.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduportal_backend.api.exceptions import BadRequestException, InternalServerException
from eduportal_backend.model.auth import Role, User
from eduportal_backend.model.base import utcnow
from eduportal_backend.model.tenant import Tenant
from eduportal_backend.permissions.defaults import default_roles
from eduportal_backend.services.users import create_tenant_user, ensure_email_available, role_by_name

logger = logging.getLogger(__name__)


@dataclass
class ProvisionResult:
    tenant: Tenant
    admin_user: User
    roles: List[Role] = field(default_factory=list)
    temp_password: Optional[str] = None


def slugify(name: str) -> str:
    slug = name.strip().lower()
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"[^a-z0-9-]", "", slug)


def slug_taken(db: Session, slug: str, exclude_tenant_id: Optional[str] = None) -> bool:
    query = db.query(Tenant.id).filter(Tenant.slug == slug, Tenant.deleted == False)
    if exclude_tenant_id is not None:
        query = query.filter(Tenant.id != exclude_tenant_id)
    return query.first() is not None


def create_default_roles(db: Session, tenant_id: str) -> List[Role]:
    """
    Seed ADMIN, TEACHER, STUDENT and PARENT for a tenant.

    Idempotent: a role that already exists is left alone. Any other
    database error propagates.
    """
    created = []
    for name, permissions in default_roles().items():
        role = Role(tenant_id=tenant_id, name=name, permissions=permissions, is_default=True)
        try:
            db.add(role)
            db.commit()
            created.append(role)
        except IntegrityError:
            db.rollback()
            logger.info(f"Default role {name} already exists for tenant {tenant_id}")
    return created


def _compensate(db: Session, tenant_id: str):
    db.rollback()

    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if tenant is None:
        return

    deactivate_tenant(db, tenant)
    logger.warning(f"Provisioning of tenant {tenant_id} rolled back")


def provision_tenant(
    db: Session,
    name: str,
    admin_first_name: str,
    admin_last_name: str,
    admin_email: str,
    admin_password: Optional[str] = None,
    slug: Optional[str] = None,
    subscription_plan: str = "free",
    settings: Optional[dict] = None,
    provider_id: Optional[str] = None,
    admin_phone_number: Optional[str] = None,
) -> ProvisionResult:

    if not name or not name.strip():
        raise BadRequestException("Tenant name is required")
    if not admin_first_name or not admin_last_name or not admin_email:
        raise BadRequestException("Admin first name, last name and email are required")

    admin_email = admin_email.strip().lower()
    ensure_email_available(db, admin_email)

    slug = slugify(slug or name)
    if not slug:
        raise BadRequestException("Tenant slug is empty")
    if slug_taken(db, slug):
        raise BadRequestException("Tenant with this slug already exists")

    tenant = Tenant(
        name=name.strip(),
        slug=slug,
        subscription_plan=subscription_plan,
        settings=settings or {},
        provider_id=provider_id,
    )
    try:
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
    except IntegrityError:
        db.rollback()
        raise BadRequestException("Tenant with this slug already exists")

    logger.info(f"Provisioning tenant {tenant.id} ({tenant.slug})")

    roles = create_default_roles(db, tenant.id)

    admin_role = role_by_name(db, tenant.id, "ADMIN")
    if admin_role is None:
        _compensate(db, tenant.id)
        raise InternalServerException("ADMIN role missing after seeding default roles")

    try:
        admin_user, temp_password = create_tenant_user(
            db,
            tenant.id,
            admin_first_name,
            admin_last_name,
            admin_email,
            password=admin_password,
            roles=[admin_role],
            phone_number=admin_phone_number,
        )
    except Exception:
        _compensate(db, tenant.id)
        raise

    tenant.primary_admin_user_id = admin_user.id
    db.commit()
    db.refresh(tenant)

    return ProvisionResult(tenant=tenant, admin_user=admin_user, roles=roles, temp_password=temp_password)


def deactivate_tenant(db: Session, tenant: Tenant):
    """Soft delete a tenant together with its roles."""
    now = utcnow()
    tenant.deleted = True
    tenant.deleted_at = now
    tenant.status = "inactive"
    for role in db.query(Role).filter(Role.tenant_id == tenant.id, Role.deleted == False).all():
        role.deleted = True
        role.deleted_at = now
    db.commit()
