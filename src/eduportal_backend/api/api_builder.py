from typing import Annotated, Optional
from fastapi import APIRouter, Depends, FastAPI, Response, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import RequirePermission
from eduportal_backend.api.crud import create_db, delete_db, get_id_db, list_db, update_db
from eduportal_backend.database import get_db
from eduportal_backend.interface.base import EntityInterface, MessageResponse
from eduportal_backend.permissions.principal import Principal


class CrudRouter:
    """
    Uniform tenant scoped CRUD for an entity interface.

    Every route requires ``<resource>.<action>`` where action is one of
    create, read, update or delete.
    """

    id_type = "id"

    path: str
    dto: EntityInterface

    def __init__(self, dto, endpoint: Optional[str] = None):
        self.dto = dto
        if endpoint == None:
            self.path = self.dto.endpoint
        else:
            self.path = endpoint

        self.router = APIRouter()

    def permission(self, action: str) -> RequirePermission:
        return RequirePermission(f"{self.dto.resource}.{action}")

    def create(self):
        async def route(permissions: Annotated[Principal, Depends(self.permission("create"))], entity: self.dto.create, db: Session = Depends(get_db)) -> self.dto.get:
            return await create_db(permissions, db, entity, self.dto)
        return route

    def get(self):
        async def route(permissions: Annotated[Principal, Depends(self.permission("read"))], id: str, db: Session = Depends(get_db)) -> self.dto.get:
            return await get_id_db(permissions, db, id, self.dto)
        return route

    def list(self):
        async def route(permissions: Annotated[Principal, Depends(self.permission("read"))], response: Response, params: self.dto.query = Depends(), db: Session = Depends(get_db)) -> list[self.dto.list]:
            list_result, total = await list_db(permissions, db, params, self.dto)
            response.headers["X-Total-Count"] = str(total)
            return list_result
        return route

    def update(self):
        async def route(permissions: Annotated[Principal, Depends(self.permission("update"))], id: str, entity: self.dto.update, db: Session = Depends(get_db)) -> self.dto.get:
            return await update_db(permissions, db, id, entity, self.dto)
        return route

    def delete(self):
        async def route(permissions: Annotated[Principal, Depends(self.permission("delete"))], id: str, db: Session = Depends(get_db)) -> MessageResponse:
            return await delete_db(permissions, db, id, self.dto)
        return route

    def register_routes(self, app: FastAPI, prefix: str = "/api"):

        scope_name = self.path.replace("/","").replace("-"," ")

        self.router.add_api_route("", self.create(), methods=["POST"],
                    status_code=status.HTTP_201_CREATED, name=f"create {scope_name}")
        self.router.add_api_route("", self.list(), methods=["GET"],
                    status_code=status.HTTP_200_OK, name=f"list {scope_name}")
        self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.get(), methods=["GET"],
                    status_code=status.HTTP_200_OK, name=f"get {scope_name}")
        self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.update(), methods=["PUT"],
                    status_code=status.HTTP_200_OK, name=f"update {scope_name}")
        self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.delete(), methods=["DELETE"],
                    status_code=status.HTTP_200_OK, name=f"delete {scope_name}")

        app.include_router(
            self.router,
            prefix=f"{prefix}/{self.path}",
            tags=[scope_name]
        )

        return self
