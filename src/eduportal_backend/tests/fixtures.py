"""
Builders for test data shared across test modules.
"""

import datetime

from eduportal_backend.auth.tokens import issue_provider_token, issue_tenant_token
from eduportal_backend.model.academic import ClassSubject, SchoolClass, Student, Subject
from eduportal_backend.model.grading import Term
from eduportal_backend.services.provisioning import provision_tenant
from eduportal_backend.services.users import create_tenant_user, role_by_name


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def tenant_token(user) -> str:
    return issue_tenant_token(user.id, user.tenant_id)


def provider_token(provider_user) -> str:
    return issue_provider_token(provider_user.id)


def make_school(db, name: str, email: str, provider_id: str = None):
    """Provision a tenant with default roles and an admin; returns the result."""
    return provision_tenant(
        db,
        name=name,
        admin_first_name="Ada",
        admin_last_name="Admin",
        admin_email=email,
        admin_password="secret123",
        provider_id=provider_id,
    )


def make_user(db, tenant_id: str, email: str, role_name: str = "TEACHER"):
    role = role_by_name(db, tenant_id, role_name)
    user, _ = create_tenant_user(db, tenant_id, "Tom", "Teacher", email, password="secret123", roles=[role])
    return user


def make_class(db, tenant_id: str, name: str) -> SchoolClass:
    school_class = SchoolClass(tenant_id=tenant_id, name=name, academic_year="2024/2025")
    db.add(school_class)
    db.commit()
    db.refresh(school_class)
    return school_class


def make_subject(db, tenant_id: str, name: str, code: str) -> Subject:
    subject = Subject(tenant_id=tenant_id, name=name, code=code)
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject


def make_student(db, tenant_id: str, class_id: str, first_name: str = "Sam") -> Student:
    student = Student(tenant_id=tenant_id, class_id=class_id, first_name=first_name, last_name="Student")
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


def assign(db, tenant_id: str, class_id: str, subject_id: str, teacher_id: str) -> ClassSubject:
    assignment = ClassSubject(tenant_id=tenant_id, class_id=class_id, subject_id=subject_id, teacher_id=teacher_id)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


def make_term(db, tenant_id: str, name: str = "Term 1", is_current: bool = False) -> Term:
    term = Term(
        tenant_id=tenant_id,
        name=name,
        start_date=datetime.date(2025, 1, 6),
        end_date=datetime.date(2025, 4, 4),
        academic_year="2024/2025",
        is_current=is_current,
    )
    db.add(term)
    db.commit()
    db.refresh(term)
    return term
