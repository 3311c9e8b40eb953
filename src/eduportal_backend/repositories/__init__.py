"""
Tenant scoped data access.

Every query issued through these repositories carries the tenant id
predicate and, for soft deletable entities, ``deleted == False``.
"""

from .base import (
    BaseRepository,
    TenantRepository,
    RepositoryError,
    NotFoundError,
    DuplicateError,
)

__all__ = [
    "BaseRepository",
    "TenantRepository",
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
]
