import math
from sqlalchemy import Boolean, Column, Date, Float, ForeignKey, Index, JSON, String, Text, UniqueConstraint, event
from sqlalchemy.orm import relationship

from .base import Base, EntityMixin, TenantScopedMixin


class GradeType(Base, EntityMixin):
    __tablename__ = 'grade_type'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='grade_type_tenant_name_key'),
    )

    tenant_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(4096))
    weight = Column(Float)
    max_score = Column(Float, nullable=False, default=100)
    is_active = Column(Boolean, nullable=False, default=True)


class GradingScale(Base, EntityMixin):
    __tablename__ = 'grading_scale'

    tenant_id = Column(String(36), nullable=False, unique=True)
    name = Column(String(255), nullable=False, default="Standard")
    # ordered list of {letter, min_percentage, max_percentage, gpa}
    scales = Column(JSON, nullable=False, default=list)


class Term(Base, EntityMixin):
    __tablename__ = 'term'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', 'academic_year', name='term_tenant_name_year_key'),
    )

    tenant_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    academic_year = Column(String(32), nullable=False)
    is_current = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)


class Grade(Base, TenantScopedMixin):
    __tablename__ = 'grade'
    __table_args__ = (
        Index('grade_tenant_student_subject_idx', 'tenant_id', 'student_id', 'subject_id'),
    )

    student_id = Column(ForeignKey('student.id', ondelete='CASCADE'), nullable=False)
    class_id = Column(ForeignKey('school_class.id', ondelete='CASCADE'), nullable=False)
    subject_id = Column(ForeignKey('subject.id', ondelete='CASCADE'), nullable=False)
    teacher_id = Column(ForeignKey('user.id', ondelete='SET NULL'))
    grade_type_id = Column(ForeignKey('grade_type.id', ondelete='RESTRICT'), nullable=False)
    term_id = Column(ForeignKey('term.id', ondelete='SET NULL'))
    title = Column(String(255))
    score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False, default=100)
    percentage = Column(Float, nullable=False, default=0)
    letter_grade = Column(String(8))
    teacher_notes = Column(Text)
    student_feedback = Column(Text)
    assessment_date = Column(Date)
    is_published = Column(Boolean, nullable=False, default=False)

    grade_type = relationship("GradeType", lazy="select")

    def recompute_percentage(self):
        max_score = self.max_score or 100
        self.percentage = round_percentage(self.score / max_score * 100)


def round_percentage(value: float) -> float:
    """Round half up to two decimals."""
    return math.floor(value * 100 + 0.5) / 100


@event.listens_for(Grade, "before_insert")
@event.listens_for(Grade, "before_update")
def _grade_percentage(mapper, connection, target: Grade):
    target.recompute_percentage()
