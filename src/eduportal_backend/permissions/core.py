"""
Role resolution and the allow/deny decisions built on it.

Two orthogonal checks run over the same resolved role set:
``require_permission`` looks at the union of role permissions,
``require_role`` at role names. Both accept one value or a list and pass
when any of them matches.
"""

import logging
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from eduportal_backend.api.exceptions import forbidden
from eduportal_backend.model.auth import Role, User, UserRole
from eduportal_backend.permissions.principal import Principal, ResolvedRole, _as_list

logger = logging.getLogger(__name__)


def db_get_role_ids(user_id: str, tenant_id: str, db: Session) -> List[str]:
    """Role references held by a user, in assignment order."""
    values = (
        db.query(UserRole.role_id)
        .select_from(User)
        .join(UserRole, UserRole.user_id == User.id)
        .filter(User.id == user_id, User.tenant_id == tenant_id)
        .all()
    )
    return [role_id for (role_id,) in values]


def db_get_roles(role_ids: Iterable[str], tenant_id: str, db: Session) -> List[ResolvedRole]:
    """Load live role documents of one tenant. Foreign or deleted ids drop out."""
    role_ids = list(role_ids)
    if not role_ids:
        return []

    roles = (
        db.query(Role)
        .filter(
            Role.id.in_(role_ids),
            Role.tenant_id == tenant_id,
            Role.deleted == False,
        )
        .all()
    )
    by_id = {role.id: role for role in roles}
    return [ResolvedRole.model_validate(by_id[role_id]) for role_id in role_ids if role_id in by_id]


def resolve_roles(principal: Principal, db: Optional[Session] = None) -> Principal:
    """
    Make sure ``principal.roles`` holds full role documents.

    A principal built from bare role references is re-fetched here before
    any permission or role-name decision is taken.
    """
    if principal.is_provider or principal.resolved:
        return principal

    if db is None:
        raise ValueError("A database session is required to resolve role references")

    role_ids = principal.role_ids
    if not role_ids and principal.user_id is not None:
        role_ids = db_get_role_ids(principal.user_id, principal.tenant_id, db)
        principal.role_ids = role_ids

    principal.roles = db_get_roles(role_ids, principal.tenant_id, db)
    principal.clear_permission_cache()
    return principal


def require_permission(principal: Principal, required: str | Iterable[str], db: Optional[Session] = None) -> Principal:
    required = _as_list(required)
    resolve_roles(principal, db)

    if principal.has_any_permission(required):
        return principal

    logger.info(f"Permission denied for user {principal.user_id}: requires one of {required}")
    raise forbidden("Forbidden: insufficient permissions", required, principal.role_names)


def require_role(principal: Principal, names: str | Iterable[str], db: Optional[Session] = None) -> Principal:
    names = _as_list(names)
    resolve_roles(principal, db)

    if principal.has_role(names):
        return principal

    logger.info(f"Role check failed for user {principal.user_id}: requires one of {names}")
    raise forbidden("Forbidden: insufficient role", names, principal.role_names)


def require_provider_permission(principal: Principal, required: str | Iterable[str]) -> Principal:
    required = _as_list(required)

    if principal.is_provider and principal.has_any_permission(required):
        return principal

    raise forbidden("Forbidden: insufficient provider permissions", required, principal.permissions)


def is_admin(principal: Principal, db: Optional[Session] = None) -> bool:
    return resolve_roles(principal, db).is_admin


def is_teacher(principal: Principal, db: Optional[Session] = None) -> bool:
    return resolve_roles(principal, db).is_teacher
