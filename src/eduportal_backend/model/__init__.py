from .base import Base, metadata
from .tenant import Provider, ProviderUser, Tenant
from .auth import User, Role, RolePermission, UserRole
from .academic import Student, SchoolClass, Subject, ClassSubject
from .grading import GradeType, GradingScale, Term, Grade
from .finance import Fee, Payment
from .records import Attendance, BehaviorRecord, Notification, TermReport

__all__ = [
    'Base',
    'metadata',
    # Platform
    'Provider',
    'ProviderUser',
    'Tenant',
    # Identity
    'User',
    'Role',
    'RolePermission',
    'UserRole',
    # Academic
    'Student',
    'SchoolClass',
    'Subject',
    'ClassSubject',
    'GradeType',
    'GradingScale',
    'Term',
    'Grade',
    # Ledger and records
    'Fee',
    'Payment',
    'Attendance',
    'BehaviorRecord',
    'Notification',
    'TermReport',
]
