"""
Seed data for new tenants: the four default roles and their permission sets.
"""

from typing import Dict, List

CRUD_ACTIONS = ("create", "read", "update", "delete")

ADMIN_RESOURCES = (
    "users",
    "roles",
    "providers",
    "students",
    "classes",
    "subjects",
    "grades",
    "enrollments",
    "attendance",
    "schedules",
    "fees",
    "payments",
    "behavior-records",
    "notifications",
    "assets",
    "ai-report-requests",
    "term-reports",
)


def crud(resource: str, actions=CRUD_ACTIONS) -> List[str]:
    return [f"{resource}.{action}" for action in actions]


def admin_permissions() -> List[str]:
    permissions = []
    for resource in ADMIN_RESOURCES:
        permissions.extend(crud(resource))
    permissions.extend([
        "reports.read",
        "reports.create",
        "settings.read",
        "settings.update",
        "audit.read",
    ])
    return permissions


def teacher_permissions() -> List[str]:
    permissions = [
        "students.read",
        "classes.read",
        "subjects.read",
        "subjects.update",
    ]
    permissions.extend(crud("grades", ("create", "read", "update")))
    permissions.extend(crud("attendance", ("create", "read", "update")))
    permissions.extend([
        "schedules.read",
        "enrollments.read",
    ])
    permissions.extend(crud("behavior-records", ("create", "read", "update")))
    permissions.extend([
        "notifications.read",
        "assets.create",
        "assets.read",
    ])
    permissions.extend(crud("ai-report-requests", ("create", "read", "update")))
    permissions.extend(crud("term-reports", ("create", "read", "update")))
    permissions.extend([
        "reports.read",
        "reports.create",
    ])
    return permissions


def self_service_permissions() -> List[str]:
    """Read only access shared by students and parents."""
    return [
        "students.read",
        "grades.read",
        "attendance.read",
        "fees.read",
        "payments.read",
        "notifications.read",
        "term-reports.read",
        "ai-report-requests.read",
        "reports.read",
    ]


def default_roles() -> Dict[str, List[str]]:
    return {
        "ADMIN": admin_permissions(),
        "TEACHER": teacher_permissions(),
        "STUDENT": self_service_permissions(),
        "PARENT": self_service_permissions(),
    }


DEFAULT_PROVIDER_PERMISSIONS = crud("tenants")
