import logging
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduportal_backend.api.exceptions import BadRequestException
from eduportal_backend.auth.passwords import generate_temp_password, hash_password
from eduportal_backend.model.auth import Role, User, UserRole

logger = logging.getLogger(__name__)


def email_in_use(db: Session, email: str, exclude_user_id: Optional[str] = None) -> bool:
    """Emails are unique across every tenant, not per tenant."""
    query = db.query(User.id).filter(User.email == email.lower(), User.deleted == False)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def ensure_email_available(db: Session, email: str, exclude_user_id: Optional[str] = None):
    if email_in_use(db, email, exclude_user_id):
        raise BadRequestException("User with this email already exists")


def tenant_roles(db: Session, tenant_id: str, role_ids: Iterable[str]) -> List[Role]:
    """Resolve role ids inside one tenant; any foreign, deleted or unknown id fails."""
    role_ids = list(dict.fromkeys(role_ids))
    if not role_ids:
        return []

    roles = (
        db.query(Role)
        .filter(Role.id.in_(role_ids), Role.tenant_id == tenant_id, Role.deleted == False)
        .all()
    )
    if len(roles) != len(role_ids):
        raise BadRequestException("One or more roles are invalid for this tenant")

    by_id = {role.id: role for role in roles}
    return [by_id[role_id] for role_id in role_ids]


def role_by_name(db: Session, tenant_id: str, name: str) -> Optional[Role]:
    return (
        db.query(Role)
        .filter(Role.tenant_id == tenant_id, Role.name == name, Role.deleted == False)
        .first()
    )


def assign_roles(user: User, roles: Iterable[Role]):
    held = {user_role.role_id: user_role for user_role in user.user_roles}
    user.user_roles = [held.get(role.id) or UserRole(role_id=role.id) for role in roles]


def create_tenant_user(
    db: Session,
    tenant_id: str,
    first_name: str,
    last_name: str,
    email: str,
    password: Optional[str] = None,
    roles: Iterable[Role] = (),
    phone_number: Optional[str] = None,
) -> Tuple[User, Optional[str]]:
    """
    Create a user inside a tenant.

    Returns the user and the generated temporary password, which is
    ``None`` when the caller supplied a password.
    """
    email = email.strip().lower()
    ensure_email_available(db, email)

    temp_password = None
    if not password:
        temp_password = generate_temp_password()
        password = temp_password

    user = User(
        tenant_id=tenant_id,
        first_name=first_name,
        last_name=last_name,
        email=email,
        password=hash_password(password),
        phone_number=phone_number,
        is_active=True,
    )
    assign_roles(user, roles)

    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise BadRequestException("User with this email already exists")

    return user, temp_password


def reset_password(db: Session, user: User) -> str:
    temp_password = generate_temp_password()
    user.password = hash_password(temp_password)
    db.commit()
    db.refresh(user)
    logger.info(f"Password reset for user {user.id}")
    return temp_password


def users_with_role(db: Session, tenant_id: str, role_name: str):
    """Query of live users of a tenant that hold the named role."""
    return (
        db.query(User)
        .join(UserRole, UserRole.user_id == User.id)
        .join(Role, Role.id == UserRole.role_id)
        .filter(
            User.tenant_id == tenant_id,
            User.deleted == False,
            Role.tenant_id == tenant_id,
            Role.deleted == False,
            func.lower(Role.name) == role_name.lower(),
        )
    )


def find_tenant_admin(db: Session, tenant) -> Optional[User]:
    """The primary admin of a tenant, else the first user holding ADMIN."""
    if tenant.primary_admin_user_id:
        user = (
            db.query(User)
            .filter(User.id == tenant.primary_admin_user_id, User.tenant_id == tenant.id, User.deleted == False)
            .first()
        )
        if user is not None:
            return user
    return users_with_role(db, tenant.id, "ADMIN").order_by(User.created_at).first()
