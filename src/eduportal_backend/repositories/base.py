"""
Base repository pattern implementation.

Repositories own the two filters every read must carry: the soft delete
filter and, for tenant owned entities, the tenant id predicate. Routers
and services never build those predicates by hand.
"""

from typing import TypeVar, Generic, List, Optional, Dict, Any, Type
from sqlalchemy.orm import Session, Query
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from eduportal_backend.model.base import utcnow

T = TypeVar('T')


class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class NotFoundError(RepositoryError):
    """Exception raised when entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateError(RepositoryError):
    """Exception raised when attempting to create duplicate entity."""

    def __init__(self, entity_type: str, detail: Optional[str] = None):
        super().__init__(detail or f"{entity_type} already exists")
        self.entity_type = entity_type


class BaseRepository(Generic[T]):
    """
    Repository over a single model.

    Soft deleted rows are invisible: every query starts from ``query()``
    which drops rows with ``deleted == True`` when the model has that
    column.
    """

    protected_fields = frozenset({"id", "deleted", "deleted_at", "created_at"})

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    def query(self) -> Query:
        query = self.db.query(self.model)
        if hasattr(self.model, "deleted"):
            query = query.filter(self.model.deleted == False)
        return query

    def get_by_id(self, entity_id: Any) -> T:
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise NotFoundError(self.model.__name__, entity_id)
        return entity

    def get_by_id_optional(self, entity_id: Any) -> Optional[T]:
        return self.query().filter(self.model.id == entity_id).first()

    def _filtered(self, criteria: Dict[str, Any]) -> Query:
        query = self.query()
        for key, value in criteria.items():
            if value is None:
                continue
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)
        return query

    def find_by(self, **criteria) -> List[T]:
        return self._filtered(criteria).all()

    def find_one_by(self, **criteria) -> Optional[T]:
        return self._filtered(criteria).first()

    def count(self, **criteria) -> int:
        return self._filtered(criteria).count()

    def add(self, entity: T) -> T:
        """Stage an entity in the current unit of work without committing."""
        try:
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError:
            self.db.rollback()
            raise DuplicateError(self.model.__name__)

    def create(self, entity: T) -> T:
        try:
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
            return entity
        except IntegrityError:
            self.db.rollback()
            raise DuplicateError(self.model.__name__)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to create {self.model.__name__}: {str(e)}")

    def update(self, entity_id: Any, updates: Dict[str, Any]) -> T:
        entity = self.get_by_id(entity_id)
        return self.apply(entity, updates)

    def apply(self, entity: T, updates: Dict[str, Any]) -> T:
        try:
            for key, value in updates.items():
                if key in self.protected_fields:
                    continue
                if hasattr(entity, key):
                    setattr(entity, key, value)

            self.db.commit()
            self.db.refresh(entity)
            return entity
        except IntegrityError:
            self.db.rollback()
            raise DuplicateError(self.model.__name__)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to update {self.model.__name__}: {str(e)}")

    def soft_delete(self, entity_id: Any) -> T:
        entity = self.get_by_id(entity_id)

        try:
            entity.deleted = True
            entity.deleted_at = utcnow()
            self.db.commit()
            return entity
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to delete {self.model.__name__}: {str(e)}")

    def commit(self) -> None:
        self.db.commit()


class TenantRepository(BaseRepository[T]):
    """
    Repository bound to one tenant.

    ``tenant_id`` comes from the authenticated principal. It is added to
    every query, stamped on every created row and can never be changed
    through ``update``.
    """

    protected_fields = frozenset({"id", "tenant_id", "deleted", "deleted_at", "created_at"})

    def __init__(self, db: Session, model: Type[T], tenant_id: str):
        if not tenant_id:
            raise ValueError("tenant_id is required for tenant scoped access")
        super().__init__(db, model)
        self.tenant_id = tenant_id

    def query(self) -> Query:
        return super().query().filter(self.model.tenant_id == self.tenant_id)

    def build(self, **values) -> T:
        values.pop("tenant_id", None)
        return self.model(tenant_id=self.tenant_id, **values)

    def create(self, entity: T) -> T:
        entity.tenant_id = self.tenant_id
        return super().create(entity)

    def add(self, entity: T) -> T:
        entity.tenant_id = self.tenant_id
        return super().add(entity)
