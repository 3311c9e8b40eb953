import logging
import secrets
from typing import Optional
from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import ProviderPrincipal
from eduportal_backend.api.exceptions import (
    AccountInactiveException,
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)
from eduportal_backend.auth.passwords import hash_password, verify_password
from eduportal_backend.auth.tokens import issue_provider_token
from eduportal_backend.database import get_db
from eduportal_backend.interface.auth import LoginRequest, ProviderSignupRequest, ProviderUserRegister
from eduportal_backend.interface.providers import (
    ProviderGet,
    ProviderLoginResponse,
    ProviderSignupResponse,
    ProviderUserGet,
)
from eduportal_backend.model.tenant import Provider, ProviderUser
from eduportal_backend.permissions.defaults import DEFAULT_PROVIDER_PERMISSIONS
from eduportal_backend.settings import settings

logger = logging.getLogger(__name__)

provider_auth_router = APIRouter()


def provider_email_in_use(db: Session, email: str) -> bool:
    return db.query(ProviderUser.id).filter(ProviderUser.email == email, ProviderUser.deleted == False).first() is not None


def _new_provider_user(db: Session, provider_id: str, manager) -> ProviderUser:

    if provider_email_in_use(db, manager.email):
        raise BadRequestException("Provider user with this email already exists")

    permissions = manager.permissions if manager.permissions is not None else list(DEFAULT_PROVIDER_PERMISSIONS)

    return ProviderUser(
        provider_id=provider_id,
        first_name=manager.first_name,
        last_name=manager.last_name,
        email=manager.email,
        password=hash_password(manager.password),
        permissions=permissions,
        is_active=True,
    )


@provider_auth_router.post("/login", response_model=ProviderLoginResponse)
async def provider_login(payload: LoginRequest, db: Session = Depends(get_db)):

    provider_user = (
        db.query(ProviderUser)
        .filter(ProviderUser.email == payload.email, ProviderUser.deleted == False)
        .first()
    )

    if provider_user is None or not verify_password(payload.password, provider_user.password):
        logger.info("Failed provider login attempt")
        raise UnauthorizedException("Invalid credentials")

    if not provider_user.is_active:
        raise AccountInactiveException("Provider user account is inactive")

    provider = db.query(Provider).filter(Provider.id == provider_user.provider_id, Provider.deleted == False).first()

    if provider is None or not provider.is_active:
        raise AccountInactiveException("Provider account is inactive")

    return ProviderLoginResponse(
        token=issue_provider_token(provider_user.id),
        provider_user=ProviderUserGet.model_validate(provider_user),
    )


@provider_auth_router.get("/me", response_model=ProviderUserGet)
async def provider_me(principal: ProviderPrincipal, db: Session = Depends(get_db)):

    provider_user = (
        db.query(ProviderUser)
        .filter(ProviderUser.id == principal.user_id, ProviderUser.deleted == False)
        .first()
    )

    if provider_user is None:
        raise NotFoundException("Provider user not found")

    return provider_user


@provider_auth_router.post("/signup", response_model=ProviderSignupResponse, status_code=status.HTTP_201_CREATED)
async def provider_signup(payload: ProviderSignupRequest, db: Session = Depends(get_db)):
    """Create a provider organization and its first manager."""

    provider = Provider(
        name=payload.provider.name,
        legal_name=payload.provider.legal_name,
        email=payload.provider.email,
        domain=payload.provider.domain,
        is_active=True,
    )

    try:
        db.add(provider)
        db.flush()
        provider_user = _new_provider_user(db, provider.id, payload.manager)
        db.add(provider_user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BadRequestException("Provider user with this email already exists")
    except BadRequestException:
        db.rollback()
        raise

    db.refresh(provider)
    db.refresh(provider_user)

    logger.info(f"Provider {provider.id} signed up")

    return ProviderSignupResponse(
        token=issue_provider_token(provider_user.id),
        provider=ProviderGet.model_validate(provider),
        provider_user=ProviderUserGet.model_validate(provider_user),
    )


@provider_auth_router.post("/register", response_model=ProviderUserGet, status_code=status.HTTP_201_CREATED)
async def provider_register(payload: ProviderUserRegister, x_setup_secret: Optional[str] = Header(None), db: Session = Depends(get_db)):
    """Add an operator to an existing provider. Needs the setup secret header."""

    expected = settings.PROVIDER_SETUP_SECRET

    if not expected or not x_setup_secret or not secrets.compare_digest(x_setup_secret, expected):
        raise ForbiddenException("Invalid setup secret")

    provider = db.query(Provider).filter(Provider.id == payload.provider_id, Provider.deleted == False).first()

    if provider is None:
        raise NotFoundException("Provider not found")

    provider_user = _new_provider_user(db, provider.id, payload)

    try:
        db.add(provider_user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BadRequestException("Provider user with this email already exists")

    db.refresh(provider_user)
    return provider_user
