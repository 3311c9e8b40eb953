from typing import Iterable, List, Literal, Optional, Set
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


ADMIN_ROLE = "ADMIN"
TEACHER_ROLE = "TEACHER"

PrincipalKind = Literal["tenant_user", "provider"]


def _as_list(value: str | Iterable[str]) -> List[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


class ResolvedRole(BaseModel):
    """A role document as seen by the authorization engine."""

    id: str
    name: str
    permissions: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


def has_role(roles: Iterable[ResolvedRole], names: str | Iterable[str]) -> bool:
    """True if any role name matches any of ``names``, ignoring case."""
    wanted = {name.lower() for name in _as_list(names)}
    return any(role.name.lower() in wanted for role in roles)


def has_any_permission(granted: Iterable[str], required: str | Iterable[str]) -> bool:
    """OR semantics: one matching permission is enough."""
    granted = set(granted)
    return any(permission in granted for permission in _as_list(required))


def effective_permissions(roles: Iterable[ResolvedRole]) -> Set[str]:
    permissions: Set[str] = set()
    for role in roles:
        permissions.update(role.permissions)
    return permissions


class Principal(BaseModel):
    """
    Authenticated actor.

    ``tenant_user`` principals carry role references and are authorized
    through the permissions of those roles. ``provider`` principals carry a
    flat permission list and never share the tenant role namespace.

    ``roles`` is ``None`` until the role references have been resolved
    against the database; see ``permissions.core.resolve_roles``.
    """

    kind: PrincipalKind = "tenant_user"
    user_id: Optional[str] = None
    tenant_id: Optional[str] = None
    provider_id: Optional[str] = None

    role_ids: List[str] = Field(default_factory=list)
    roles: Optional[List[ResolvedRole]] = None

    # provider users only
    permissions: List[str] = Field(default_factory=list)

    _permission_cache: dict = PrivateAttr(default_factory=dict)

    @property
    def is_provider(self) -> bool:
        return self.kind == "provider"

    @property
    def resolved(self) -> bool:
        return self.roles is not None

    @property
    def role_names(self) -> List[str]:
        return [role.name for role in self.roles or []]

    @property
    def is_admin(self) -> bool:
        return has_role(self.roles or [], ADMIN_ROLE)

    @property
    def is_teacher(self) -> bool:
        return has_role(self.roles or [], TEACHER_ROLE)

    def granted(self) -> Set[str]:
        if self.is_provider:
            return set(self.permissions)
        return effective_permissions(self.roles or [])

    def has_role(self, names: str | Iterable[str]) -> bool:
        return has_role(self.roles or [], names)

    def has_any_permission(self, required: str | Iterable[str]) -> bool:
        required = _as_list(required)
        cache_key = "|".join(sorted(required))
        if cache_key not in self._permission_cache:
            self._permission_cache[cache_key] = has_any_permission(self.granted(), required)
        return self._permission_cache[cache_key]

    def clear_permission_cache(self):
        self._permission_cache.clear()
