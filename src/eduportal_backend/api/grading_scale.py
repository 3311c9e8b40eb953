from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import CurrentPrincipal, RequireAdmin
from eduportal_backend.database import get_db
from eduportal_backend.interface.grading_scale import GradingScaleGet, GradingScaleUpdate
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.services.grading import DEFAULT_GRADING_SCALE, get_grading_scale

grading_scale_router = APIRouter()

Admin = Annotated[Principal, Depends(RequireAdmin)]


@grading_scale_router.get("", response_model=GradingScaleGet)
async def read_grading_scale(principal: CurrentPrincipal, db: Session = Depends(get_db)):
    return get_grading_scale(db, principal.tenant_id)


@grading_scale_router.put("", response_model=GradingScaleGet)
async def replace_grading_scale(principal: Admin, payload: GradingScaleUpdate, db: Session = Depends(get_db)):

    scale = get_grading_scale(db, principal.tenant_id)

    if payload.name:
        scale.name = payload.name
    scale.scales = [band.model_dump() for band in payload.scales]

    db.commit()
    db.refresh(scale)
    return scale


@grading_scale_router.post("/reset", response_model=GradingScaleGet)
async def reset_grading_scale(principal: Admin, db: Session = Depends(get_db)):

    scale = get_grading_scale(db, principal.tenant_id)
    scale.name = "Standard"
    scale.scales = [dict(band) for band in DEFAULT_GRADING_SCALE]

    db.commit()
    db.refresh(scale)
    return scale
