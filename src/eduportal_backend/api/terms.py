from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import CurrentPrincipal, RequireAdmin
from eduportal_backend.api.crud import apply_values, create_entity, get_or_404, repository
from eduportal_backend.api.exceptions import BadRequestException, NotFoundException
from eduportal_backend.database import get_db
from eduportal_backend.interface.terms import TermCreate, TermGet, TermUpdate
from eduportal_backend.model.grading import Term
from eduportal_backend.permissions.principal import Principal
from eduportal_backend.services.terms import set_current_term

terms_router = APIRouter()

Admin = Annotated[Principal, Depends(RequireAdmin)]


def _check_unique(principal: Principal, db: Session, name: str, academic_year: str, exclude_id: str = None):
    existing = repository(principal, db, Term).find_one_by(name=name, academic_year=academic_year)
    if existing is not None and existing.id != exclude_id:
        raise BadRequestException("Term with this name already exists for this academic year")


@terms_router.get("", response_model=list[TermGet])
async def list_terms(principal: CurrentPrincipal, db: Session = Depends(get_db)):
    return repository(principal, db, Term).query().order_by(Term.start_date.desc()).all()


@terms_router.get("/current", response_model=TermGet)
async def get_current_term(principal: CurrentPrincipal, db: Session = Depends(get_db)):

    term = repository(principal, db, Term).find_one_by(is_current=True)

    if term is None:
        raise NotFoundException("No current term set")

    return term


@terms_router.get("/{term_id}", response_model=TermGet)
async def get_term(principal: CurrentPrincipal, term_id: str, db: Session = Depends(get_db)):
    return get_or_404(principal, db, Term, term_id)


@terms_router.post("", response_model=TermGet, status_code=status.HTTP_201_CREATED)
async def create_term(principal: Admin, payload: TermCreate, db: Session = Depends(get_db)):

    _check_unique(principal, db, payload.name, payload.academic_year)

    values = payload.model_dump()
    make_current = values.pop("is_current")

    term = create_entity(repository(principal, db, Term), is_current=False, **values)

    if make_current:
        term = set_current_term(db, principal.tenant_id, term)

    return term


@terms_router.put("/{term_id}", response_model=TermGet)
async def update_term(principal: Admin, term_id: str, payload: TermUpdate, db: Session = Depends(get_db)):

    term = get_or_404(principal, db, Term, term_id)
    values = payload.model_dump(exclude_unset=True)

    name = values.get("name") or term.name
    academic_year = values.get("academic_year") or term.academic_year
    _check_unique(principal, db, name, academic_year, exclude_id=term.id)

    start_date = values.get("start_date") or term.start_date
    end_date = values.get("end_date") or term.end_date
    if start_date > end_date:
        raise BadRequestException("start_date cannot be after end_date")

    return apply_values(repository(principal, db, Term), term, values)


@terms_router.patch("/{term_id}/current", response_model=TermGet)
async def make_current_term(principal: Admin, term_id: str, db: Session = Depends(get_db)):
    term = get_or_404(principal, db, Term, term_id)
    return set_current_term(db, principal.tenant_id, term)
