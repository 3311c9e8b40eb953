"""
Provider side tenant management.

Every route loads the tenant through ``provider_tenant`` which filters on
the caller's provider id. A tenant of another provider is reported as
missing, never as forbidden.
"""

import logging
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequireProviderPermission
from eduportal_backend.api.crud import apply_values
from eduportal_backend.api.exceptions import BadRequestException, NotFoundException
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import MessageResponse, StatusUpdate
from eduportal_backend.interface.roles import RoleGet, RolePermissionsUpdate
from eduportal_backend.interface.tenants import (
    TenantCreate,
    TenantDetail,
    TenantGet,
    TenantMetrics,
    TenantProvisioned,
    TenantStatus,
    TenantStatusUpdate,
    TenantUpdate,
    TenantUserCreate,
)
from eduportal_backend.interface.users import PasswordReset, UserCreated, UserGet
from eduportal_backend.model.academic import SchoolClass, Student, Subject
from eduportal_backend.model.auth import Role, User
from eduportal_backend.model.tenant import Tenant
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.repositories import TenantRepository
from eduportal_backend.services.provisioning import deactivate_tenant, provision_tenant, slug_taken, slugify
from eduportal_backend.services.users import create_tenant_user, find_tenant_admin, reset_password, tenant_roles

logger = logging.getLogger(__name__)

provider_tenants_router = APIRouter()

CanCreate = Annotated[Principal, Depends(RequireProviderPermission("tenants.create"))]
CanRead = Annotated[Principal, Depends(RequireProviderPermission("tenants.read"))]
CanUpdate = Annotated[Principal, Depends(RequireProviderPermission("tenants.update"))]
CanDelete = Annotated[Principal, Depends(RequireProviderPermission("tenants.delete"))]


def provider_tenant(db: Session, principal: Principal, tenant_id: str) -> Tenant:
    tenant = (
        db.query(Tenant)
        .filter(
            Tenant.id == tenant_id,
            Tenant.provider_id == principal.provider_id,
            Tenant.deleted == False,
        )
        .first()
    )
    if tenant is None:
        raise NotFoundException("Tenant not found")
    return tenant


def _detail(db: Session, tenant: Tenant) -> TenantDetail:
    admin = find_tenant_admin(db, tenant)
    detail = TenantDetail.model_validate(tenant)
    detail.admin_user = UserGet.model_validate(admin) if admin is not None else None
    return detail


@provider_tenants_router.post("", response_model=TenantProvisioned, status_code=status.HTTP_201_CREATED)
async def create_tenant(principal: CanCreate, payload: TenantCreate, db: Session = Depends(get_db)):

    result = provision_tenant(
        db,
        name=payload.tenant.name,
        slug=payload.tenant.slug,
        subscription_plan=payload.tenant.subscription_plan,
        settings=payload.tenant.settings.model_dump(),
        provider_id=principal.provider_id,
        admin_first_name=payload.admin.first_name,
        admin_last_name=payload.admin.last_name,
        admin_email=payload.admin.email,
        admin_password=payload.admin.password,
        admin_phone_number=payload.admin.phone_number,
    )

    return TenantProvisioned(
        tenant=TenantGet.model_validate(result.tenant),
        admin_user=UserGet.model_validate(result.admin_user),
        roles=[RoleGet.model_validate(role) for role in result.roles],
        temp_password=result.temp_password,
    )


@provider_tenants_router.get("", response_model=list[TenantGet])
async def list_tenants(principal: CanRead, response: Response, tenant_status: Optional[TenantStatus] = Query(None, alias="status"), db: Session = Depends(get_db)):

    query = db.query(Tenant).filter(Tenant.provider_id == principal.provider_id, Tenant.deleted == False)

    if tenant_status is not None:
        query = query.filter(Tenant.status == tenant_status)

    tenants = query.order_by(Tenant.created_at.desc()).all()
    response.headers["X-Total-Count"] = str(len(tenants))
    return tenants


@provider_tenants_router.get("/{tenant_id}", response_model=TenantDetail)
async def get_tenant(principal: CanRead, tenant_id: str, db: Session = Depends(get_db)):
    return _detail(db, provider_tenant(db, principal, tenant_id))


@provider_tenants_router.put("/{tenant_id}", response_model=TenantDetail)
async def update_tenant(principal: CanUpdate, tenant_id: str, payload: TenantUpdate, db: Session = Depends(get_db)):

    tenant = provider_tenant(db, principal, tenant_id)
    values = payload.model_dump(exclude_unset=True)

    if values.get("slug") is not None:
        values["slug"] = slugify(values["slug"])
        if not values["slug"]:
            raise BadRequestException("Tenant slug is empty")
        if slug_taken(db, values["slug"], exclude_tenant_id=tenant.id):
            raise BadRequestException("Tenant with this slug already exists")

    for key, value in values.items():
        if value is None and key in ("name", "slug", "subscription_plan", "settings"):
            continue
        setattr(tenant, key, value)

    db.commit()
    db.refresh(tenant)
    return _detail(db, tenant)


@provider_tenants_router.put("/{tenant_id}/status", response_model=TenantGet)
async def set_tenant_status(principal: CanUpdate, tenant_id: str, payload: TenantStatusUpdate, db: Session = Depends(get_db)):

    tenant = provider_tenant(db, principal, tenant_id)
    tenant.status = payload.status
    db.commit()
    db.refresh(tenant)

    logger.info(f"Tenant {tenant.id} status set to {tenant.status}")
    return tenant


@provider_tenants_router.delete("/{tenant_id}", response_model=MessageResponse)
async def delete_tenant(principal: CanDelete, tenant_id: str, db: Session = Depends(get_db)):

    tenant = provider_tenant(db, principal, tenant_id)
    deactivate_tenant(db, tenant)

    logger.info(f"Tenant {tenant_id} deleted by provider {principal.provider_id}")
    return {"message": "Tenant deleted successfully"}


@provider_tenants_router.get("/{tenant_id}/users", response_model=list[UserGet])
async def list_tenant_users(principal: CanRead, tenant_id: str, db: Session = Depends(get_db)):
    tenant = provider_tenant(db, principal, tenant_id)
    return TenantRepository(db, User, tenant.id).query().order_by(User.created_at).all()


@provider_tenants_router.post("/{tenant_id}/users", response_model=UserCreated, status_code=status.HTTP_201_CREATED)
async def create_tenant_user_route(principal: CanUpdate, tenant_id: str, payload: TenantUserCreate, db: Session = Depends(get_db)):

    tenant = provider_tenant(db, principal, tenant_id)
    roles = tenant_roles(db, tenant.id, payload.role_ids)

    user, temp_password = create_tenant_user(
        db,
        tenant.id,
        payload.first_name,
        payload.last_name,
        payload.email,
        password=payload.password,
        roles=roles,
        phone_number=payload.phone_number,
    )

    created = UserCreated.model_validate(user)
    created.temp_password = temp_password
    return created


@provider_tenants_router.patch("/{tenant_id}/users/{user_id}/status", response_model=UserGet)
async def set_tenant_user_status(principal: CanUpdate, tenant_id: str, user_id: str, payload: StatusUpdate, db: Session = Depends(get_db)):

    tenant = provider_tenant(db, principal, tenant_id)
    repo = TenantRepository(db, User, tenant.id)

    user = repo.get_by_id_optional(user_id)
    if user is None:
        raise NotFoundException("User not found")

    return apply_values(repo, user, {"is_active": payload.is_active})


@provider_tenants_router.post("/{tenant_id}/admin/reset-password", response_model=PasswordReset)
async def reset_admin_password(principal: CanUpdate, tenant_id: str, db: Session = Depends(get_db)):

    tenant = provider_tenant(db, principal, tenant_id)
    admin = find_tenant_admin(db, tenant)

    if admin is None:
        raise NotFoundException("Tenant admin not found")

    temp_password = reset_password(db, admin)
    return PasswordReset(user=UserGet.model_validate(admin), temp_password=temp_password)


@provider_tenants_router.get("/{tenant_id}/roles", response_model=list[RoleGet])
async def list_tenant_roles(principal: CanRead, tenant_id: str, db: Session = Depends(get_db)):
    tenant = provider_tenant(db, principal, tenant_id)
    return TenantRepository(db, Role, tenant.id).query().order_by(Role.name).all()


@provider_tenants_router.get("/{tenant_id}/roles/{role_id}", response_model=RoleGet)
async def get_tenant_role(principal: CanRead, tenant_id: str, role_id: str, db: Session = Depends(get_db)):

    tenant = provider_tenant(db, principal, tenant_id)
    role = TenantRepository(db, Role, tenant.id).get_by_id_optional(role_id)

    if role is None:
        raise NotFoundException("Role not found")

    return role


@provider_tenants_router.put("/{tenant_id}/roles/{role_id}", response_model=RoleGet)
async def update_tenant_role(principal: CanUpdate, tenant_id: str, role_id: str, payload: RolePermissionsUpdate, db: Session = Depends(get_db)):

    tenant = provider_tenant(db, principal, tenant_id)
    repo = TenantRepository(db, Role, tenant.id)

    role = repo.get_by_id_optional(role_id)
    if role is None:
        raise NotFoundException("Role not found")

    return apply_values(repo, role, {"permissions": payload.permissions})


@provider_tenants_router.get("/{tenant_id}/metrics", response_model=TenantMetrics)
async def tenant_metrics(principal: CanRead, tenant_id: str, db: Session = Depends(get_db)):

    tenant = provider_tenant(db, principal, tenant_id)

    return TenantMetrics(
        tenant_id=tenant.id,
        users=TenantRepository(db, User, tenant.id).count(),
        students=TenantRepository(db, Student, tenant.id).count(),
        classes=TenantRepository(db, SchoolClass, tenant.id).count(),
        subjects=TenantRepository(db, Subject, tenant.id).count(),
    )
