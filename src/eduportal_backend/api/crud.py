from typing import Any
from fastapi import Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from eduportal_backend.api.exceptions import BadRequestException, InternalServerException, NotFoundException
from eduportal_backend.interface.base import EntityInterface, ListQuery
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.repositories import DuplicateError, NotFoundError, RepositoryError, TenantRepository


def http_error(e: RepositoryError):
    if isinstance(e, NotFoundError):
        return NotFoundException(detail=str(e))
    if isinstance(e, DuplicateError):
        return BadRequestException(detail=str(e))
    return InternalServerException(detail=str(e))


def repository(principal: Principal, db: Session, model: Any) -> TenantRepository:
    return TenantRepository(db, model, principal.tenant_id)


def check_references(principal: Principal, db: Session, interface: EntityInterface, values: dict):
    """Foreign keys on a payload must point at live rows of the caller's tenant."""
    for field, model in (interface.references or {}).items():
        value = values.get(field)
        if value is None:
            continue
        if repository(principal, db, model).get_by_id_optional(value) is None:
            raise BadRequestException(detail=f"{model.__name__} not found")


def get_or_404(principal: Principal, db: Session, model: Any, id: str, label: str = None):
    entity = repository(principal, db, model).get_by_id_optional(id)
    if entity is None:
        raise NotFoundException(detail=f"{label or model.__name__} not found")
    return entity


async def create_db(principal: Principal, db: Session, entity: BaseModel, interface: EntityInterface):

    values = entity.model_dump(exclude_unset=False)
    check_references(principal, db, interface, values)

    if interface.pre_create is not None:
        values = interface.pre_create(db, principal, values)

    repo = repository(principal, db, interface.model)

    try:
        db_item = repo.create(repo.build(**values))
    except RepositoryError as e:
        raise http_error(e)

    if interface.post_create is not None:
        interface.post_create(db, principal, db_item)

    return interface.get.model_validate(db_item, from_attributes=True)


async def get_id_db(principal: Principal, db: Session, id: str, interface: EntityInterface):
    item = get_or_404(principal, db, interface.model, id)
    return interface.get.model_validate(item, from_attributes=True)


async def list_db(principal: Principal, db: Session, params: ListQuery, interface: EntityInterface):

    query = repository(principal, db, interface.model).query()

    if interface.search is not None:
        query = interface.search(db, query, params)

    total = query.order_by(None).count()

    if params.skip:
        query = query.offset(params.skip)
    if params.limit:
        query = query.limit(params.limit)

    return [interface.list.model_validate(item, from_attributes=True) for item in query.all()], total


async def update_db(principal: Principal, db: Session, id: str, entity: BaseModel, interface: EntityInterface):

    values = entity.model_dump(exclude_unset=True)
    check_references(principal, db, interface, values)

    repo = repository(principal, db, interface.model)

    try:
        db_item = repo.update(id, values)
    except RepositoryError as e:
        raise http_error(e)

    return interface.get.model_validate(db_item, from_attributes=True)


async def delete_db(principal: Principal, db: Session, id: str, interface: EntityInterface):

    repo = repository(principal, db, interface.model)

    try:
        repo.soft_delete(id)
    except RepositoryError as e:
        raise http_error(e)

    return {"message": f"{interface.model.__name__} deleted successfully"}


def create_entity(repo: TenantRepository, **values):
    try:
        return repo.create(repo.build(**values))
    except RepositoryError as e:
        raise http_error(e)


def apply_values(repo: TenantRepository, entity: Any, values: dict):
    try:
        return repo.apply(entity, values)
    except RepositoryError as e:
        raise http_error(e)


def paginate(query, params: ListQuery, response: Response):
    """Apply skip/limit and report the unpaginated total in X-Total-Count."""
    total = query.order_by(None).count()
    response.headers["X-Total-Count"] = str(total)
    if params.skip:
        query = query.offset(params.skip)
    if params.limit:
        query = query.limit(params.limit)
    return query.all()
