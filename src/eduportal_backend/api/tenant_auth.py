import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eduportal_backend.api.auth import CurrentPrincipal
from eduportal_backend.api.exceptions import AccountInactiveException, NotFoundException, UnauthorizedException
from eduportal_backend.auth.passwords import verify_password
from eduportal_backend.auth.tokens import issue_tenant_token
from eduportal_backend.database import get_db
from eduportal_backend.interface.auth import LoginRequest, RegisterRequest
from eduportal_backend.interface.users import AuthResponse, UserGet
from eduportal_backend.model.auth import User
from eduportal_backend.model.tenant import Tenant
from eduportal_backend.services.provisioning import provision_tenant

logger = logging.getLogger(__name__)

tenant_auth_router = APIRouter()


@tenant_auth_router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create a school together with its first administrator."""

    result = provision_tenant(
        db,
        name=payload.tenant_name,
        admin_first_name=payload.first_name,
        admin_last_name=payload.last_name,
        admin_email=payload.email,
        admin_password=payload.password,
    )

    token = issue_tenant_token(result.admin_user.id, result.tenant.id)
    return AuthResponse(token=token, user=UserGet.model_validate(result.admin_user))


@tenant_auth_router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, db: Session = Depends(get_db)):

    user = db.query(User).filter(User.email == payload.email, User.deleted == False).first()

    if user is None or not verify_password(payload.password, user.password):
        logger.info("Failed tenant login attempt")
        raise UnauthorizedException("Invalid credentials")

    if not user.is_active:
        raise AccountInactiveException("User account is inactive")

    tenant = db.query(Tenant).filter(Tenant.id == user.tenant_id, Tenant.deleted == False).first()

    if tenant is None or tenant.status != "active":
        raise AccountInactiveException("Tenant account is not active")

    token = issue_tenant_token(user.id, user.tenant_id)
    return AuthResponse(token=token, user=UserGet.model_validate(user))


@tenant_auth_router.get("/me", response_model=UserGet)
async def me(principal: CurrentPrincipal, db: Session = Depends(get_db)):

    user = (
        db.query(User)
        .filter(User.id == principal.user_id, User.tenant_id == principal.tenant_id, User.deleted == False)
        .first()
    )

    if user is None:
        raise NotFoundException("User not found")

    return user
