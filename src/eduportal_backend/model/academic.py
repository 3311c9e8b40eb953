from sqlalchemy import Boolean, Column, Date, ForeignKey, JSON, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base, EntityMixin, TenantScopedMixin


class Student(Base, TenantScopedMixin):
    __tablename__ = 'student'

    class_id = Column(ForeignKey('school_class.id', ondelete='SET NULL'), index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    student_id_number = Column(String(64))
    email = Column(String(320))
    gender = Column(String(16))
    date_of_birth = Column(Date)
    guardian_name = Column(String(255))
    guardian_email = Column(String(320))
    guardian_phone = Column(String(64))
    notification_preferences = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)

    school_class = relationship("SchoolClass", back_populates="students", lazy="select")


class SchoolClass(Base, TenantScopedMixin):
    __tablename__ = 'school_class'

    name = Column(String(255), nullable=False)
    grade_level = Column(String(64))
    section = Column(String(64))
    academic_year = Column(String(32))
    room = Column(String(64))
    is_active = Column(Boolean, nullable=False, default=True)

    students = relationship("Student", back_populates="school_class", lazy="select")


class Subject(Base, TenantScopedMixin):
    __tablename__ = 'subject'

    name = Column(String(255), nullable=False)
    code = Column(String(64), nullable=False)
    description = Column(String(4096))
    is_active = Column(Boolean, nullable=False, default=True)


class ClassSubject(Base, EntityMixin):
    """Binds one teacher to one class and subject pair."""

    __tablename__ = 'class_subject'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'class_id', 'subject_id', name='class_subject_tenant_class_subject_key'),
    )

    tenant_id = Column(String(36), nullable=False, index=True)
    class_id = Column(ForeignKey('school_class.id', ondelete='CASCADE'), nullable=False)
    subject_id = Column(ForeignKey('subject.id', ondelete='CASCADE'), nullable=False)
    teacher_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)

    school_class = relationship("SchoolClass", lazy="select")
    subject = relationship("Subject", lazy="select")
    teacher = relationship("User", lazy="select")
