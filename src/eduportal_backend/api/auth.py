"""
Request guards.

``get_current_principal`` resolves a tenant user from the bearer token and
rejects the request when the user or its tenant is unusable.
``get_provider_principal`` does the same for provider operators. The two
token namespaces never cross: each guard checks the ``type`` claim.
"""

import logging
from typing import Annotated
from fastapi import Depends, Request
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session

from eduportal_backend.api.exceptions import (
    AccountInactiveException,
    NotFoundException,
    TenantSuspendedException,
    UnauthorizedException,
)
from eduportal_backend.auth.tokens import PROVIDER, TokenExpired, TokenInvalid, verify_token
from eduportal_backend.database import get_db
from eduportal_backend.model.auth import User
from eduportal_backend.model.tenant import Provider, ProviderUser, Tenant
from eduportal_backend.permissions.core import (
    require_permission,
    require_provider_permission,
    require_role,
    resolve_roles,
)
from eduportal_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


def get_bearer_token(request: Request) -> str:
    scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
    if not token or scheme.lower() != "bearer":
        raise UnauthorizedException("Not authorized, no token")
    return token


def _claims(token: str) -> dict:
    try:
        return verify_token(token)
    except TokenExpired:
        raise UnauthorizedException("Token expired")
    except TokenInvalid:
        raise UnauthorizedException("Invalid token")


def get_current_principal(token: Annotated[str, Depends(get_bearer_token)], db: Session = Depends(get_db)) -> Principal:

    claims = _claims(token)

    if claims["type"] == PROVIDER:
        raise UnauthorizedException("Invalid token")

    user = db.query(User).filter(User.id == claims["sub"], User.deleted == False).first()

    if user is None:
        raise UnauthorizedException("User not found or deleted")

    if not user.is_active:
        raise AccountInactiveException("User account is inactive")

    tenant = db.query(Tenant).filter(Tenant.id == user.tenant_id, Tenant.deleted == False).first()

    if tenant is None:
        raise NotFoundException("Tenant not found")

    if tenant.status != "active":
        raise TenantSuspendedException(tenant.status)

    principal = Principal(
        kind="tenant_user",
        user_id=user.id,
        tenant_id=user.tenant_id,
        role_ids=user.role_ids,
    )

    return resolve_roles(principal, db)


def get_provider_principal(token: Annotated[str, Depends(get_bearer_token)], db: Session = Depends(get_db)) -> Principal:

    claims = _claims(token)

    if claims["type"] != PROVIDER:
        raise UnauthorizedException("Invalid token")

    provider_user = (
        db.query(ProviderUser)
        .filter(ProviderUser.id == claims["sub"], ProviderUser.deleted == False)
        .first()
    )

    if provider_user is None:
        raise UnauthorizedException("Provider user not found or deleted")

    if not provider_user.is_active:
        raise AccountInactiveException("Provider user account is inactive")

    provider = (
        db.query(Provider)
        .filter(Provider.id == provider_user.provider_id, Provider.deleted == False)
        .first()
    )

    if provider is None:
        raise NotFoundException("Provider not found")

    if not provider.is_active:
        raise AccountInactiveException("Provider account is inactive")

    return Principal(
        kind="provider",
        user_id=provider_user.id,
        provider_id=provider.id,
        permissions=list(provider_user.permissions or []),
    )


class RequirePermission:
    """Dependency passing when the tenant user holds any of the permissions."""

    def __init__(self, *permissions: str):
        self.permissions = list(permissions)

    def __call__(self, principal: Annotated[Principal, Depends(get_current_principal)], db: Session = Depends(get_db)) -> Principal:
        return require_permission(principal, self.permissions, db)


class RequireRole:
    """Dependency passing when the tenant user holds any of the role names."""

    def __init__(self, *names: str):
        self.names = list(names)

    def __call__(self, principal: Annotated[Principal, Depends(get_current_principal)], db: Session = Depends(get_db)) -> Principal:
        return require_role(principal, self.names, db)


class RequireProviderPermission:

    def __init__(self, *permissions: str):
        self.permissions = list(permissions)

    def __call__(self, principal: Annotated[Principal, Depends(get_provider_principal)]) -> Principal:
        return require_provider_permission(principal, self.permissions)


def tenant_of(principal: Principal) -> str:
    """The tenant every query of this request is bound to."""
    if principal.tenant_id is None:
        raise UnauthorizedException()
    return principal.tenant_id


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
ProviderPrincipal = Annotated[Principal, Depends(get_provider_principal)]

# ADMIN only mutations on the portal surface
RequireAdmin = RequireRole("ADMIN")
