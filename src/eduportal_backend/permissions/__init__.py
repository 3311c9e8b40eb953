"""
Authorization for the portal.

- principal: the authenticated actor and pure role/permission predicates
- core: role resolution, permission and role-name checks
- scoping: teacher visibility through ClassSubject assignments
- defaults: permission sets of the seeded tenant roles
"""

from .principal import (
    Principal,
    ResolvedRole,
    has_role,
    has_any_permission,
    effective_permissions,
)

from .core import (
    resolve_roles,
    require_permission,
    require_role,
    require_provider_permission,
    is_admin,
    is_teacher,
)

__all__ = [
    "Principal",
    "ResolvedRole",
    "has_role",
    "has_any_permission",
    "effective_permissions",
    "resolve_roles",
    "require_permission",
    "require_role",
    "require_provider_permission",
    "is_admin",
    "is_teacher",
]
