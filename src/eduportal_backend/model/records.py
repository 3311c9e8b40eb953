from sqlalchemy import Boolean, Column, Date, Float, ForeignKey, Index, JSON, String, Text

from .base import Base, TenantScopedMixin

ATTENDANCE_STATUSES = ("present", "absent", "late")


class Attendance(Base, TenantScopedMixin):
    __tablename__ = 'attendance'

    student_id = Column(ForeignKey('student.id', ondelete='CASCADE'), nullable=False, index=True)
    class_id = Column(ForeignKey('school_class.id', ondelete='SET NULL'))
    date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False)
    notes = Column(Text)


class BehaviorRecord(Base, TenantScopedMixin):
    __tablename__ = 'behavior_record'

    student_id = Column(ForeignKey('student.id', ondelete='CASCADE'), nullable=False, index=True)
    incident_date = Column(Date)
    description = Column(Text, nullable=False)
    action_taken = Column(Text)
    reported_by = Column(ForeignKey('user.id', ondelete='SET NULL'))


class Notification(Base, TenantScopedMixin):
    __tablename__ = 'notification'

    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    message = Column(String(4096), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)


class TermReport(Base, TenantScopedMixin):
    __tablename__ = 'term_report'
    __table_args__ = (
        Index('term_report_tenant_student_term_idx', 'tenant_id', 'student_id', 'term_id'),
    )

    student_id = Column(ForeignKey('student.id', ondelete='CASCADE'), nullable=False)
    term_id = Column(ForeignKey('term.id', ondelete='CASCADE'), nullable=False)
    class_id = Column(ForeignKey('school_class.id', ondelete='SET NULL'))
    # list of {subject_id, average, letter_grade, gpa, comments}
    subjects = Column(JSON, nullable=False, default=list)
    overall_average = Column(Float)
    overall_gpa = Column(Float)
    overall_comments = Column(Text)
    generated_by = Column(ForeignKey('user.id', ondelete='SET NULL'))
