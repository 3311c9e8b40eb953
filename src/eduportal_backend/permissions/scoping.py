"""
Teacher scoping.

Narrows what a non-admin tenant user may see or change to the classes and
subjects reachable through their ClassSubject assignments. Every function
takes the full principal and short-circuits on ``is_admin``, so the same
checks apply to any restricted role.
"""

from typing import Dict, List, Optional, Set
from sqlalchemy.orm import Session

from eduportal_backend.api.exceptions import forbidden
from eduportal_backend.model.academic import ClassSubject
from eduportal_backend.permissions.core import is_admin
from eduportal_backend.permissions.principal import Principal


def get_teacher_class_ids(db: Session, tenant_id: str, teacher_id: str) -> Set[str]:
    rows = (
        db.query(ClassSubject.class_id)
        .filter(ClassSubject.tenant_id == tenant_id, ClassSubject.teacher_id == teacher_id)
        .distinct()
        .all()
    )
    return {class_id for (class_id,) in rows}


def get_teacher_subject_ids(db: Session, tenant_id: str, teacher_id: str, class_id: Optional[str] = None) -> Set[str]:
    query = db.query(ClassSubject.subject_id).filter(
        ClassSubject.tenant_id == tenant_id,
        ClassSubject.teacher_id == teacher_id,
    )
    if class_id is not None:
        query = query.filter(ClassSubject.class_id == class_id)
    return {subject_id for (subject_id,) in query.distinct().all()}


def get_teacher_class_subject_pairs(db: Session, tenant_id: str, teacher_id: str) -> List[Dict[str, str]]:
    rows = (
        db.query(ClassSubject.class_id, ClassSubject.subject_id)
        .filter(ClassSubject.tenant_id == tenant_id, ClassSubject.teacher_id == teacher_id)
        .all()
    )
    return [{"class_id": class_id, "subject_id": subject_id} for class_id, subject_id in rows]


def _has_assignment(db: Session, principal: Principal, class_id: str, subject_id: Optional[str] = None) -> bool:
    query = db.query(ClassSubject.id).filter(
        ClassSubject.tenant_id == principal.tenant_id,
        ClassSubject.teacher_id == principal.user_id,
        ClassSubject.class_id == class_id,
    )
    if subject_id is not None:
        query = query.filter(ClassSubject.subject_id == subject_id)
    return query.first() is not None


def require_teacher_class_access(principal: Principal, class_id: Optional[str], db: Session, message: str = "Not assigned to this class"):
    if is_admin(principal, db):
        return
    if class_id is None or not _has_assignment(db, principal, class_id):
        raise forbidden(message, [f"class:{class_id}"], principal.role_names)


def require_teacher_assignment(principal: Principal, class_id: str, subject_id: str, db: Session, message: str = "Not assigned to this class/subject"):
    if is_admin(principal, db):
        return
    if not _has_assignment(db, principal, class_id, subject_id):
        raise forbidden(message, [f"class:{class_id}", f"subject:{subject_id}"], principal.role_names)


def allowed_class_ids(principal: Principal, db: Session, requested_class_id: Optional[str] = None) -> Optional[Set[str]]:
    """
    Class id filter for list queries.

    Returns ``None`` when the caller is unrestricted. Otherwise returns the
    set of class ids the query must be limited to. A requested class
    outside the allowed set fails here, before any query runs.
    """
    if is_admin(principal, db):
        return {requested_class_id} if requested_class_id is not None else None

    allowed = get_teacher_class_ids(db, principal.tenant_id, principal.user_id)

    if requested_class_id is not None:
        if requested_class_id not in allowed:
            raise forbidden("Not assigned to this class", [f"class:{requested_class_id}"], principal.role_names)
        return {requested_class_id}

    return allowed


def allowed_subject_ids(principal: Principal, db: Session, class_id: Optional[str] = None) -> Optional[Set[str]]:
    if is_admin(principal, db):
        return None
    return get_teacher_subject_ids(db, principal.tenant_id, principal.user_id, class_id)
