from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from eduportal_backend.interface.base import ListQuery


class GradeCreate(BaseModel):
    student_id: str
    class_id: str
    subject_id: str
    grade_type_id: str
    term_id: Optional[str] = None
    title: Optional[str] = None
    score: float = Field(ge=0)
    max_score: float = Field(100, gt=0)
    teacher_notes: Optional[str] = None
    student_feedback: Optional[str] = None
    assessment_date: date


class BulkGradeEntry(BaseModel):
    student_id: str
    score: float = Field(ge=0)
    teacher_notes: Optional[str] = None
    student_feedback: Optional[str] = None


class BulkGradeCreate(BaseModel):
    class_id: str
    subject_id: str
    grade_type_id: str
    term_id: Optional[str] = None
    title: Optional[str] = None
    assessment_date: date
    max_score: float = Field(100, gt=0)
    grades: list[BulkGradeEntry] = Field(min_length=1)


class BulkGradeResult(BaseModel):
    message: str
    count: int


class GradeUpdate(BaseModel):
    title: Optional[str] = None
    score: Optional[float] = Field(None, ge=0)
    max_score: Optional[float] = Field(None, gt=0)
    teacher_notes: Optional[str] = None
    student_feedback: Optional[str] = None
    assessment_date: Optional[date] = None
    grade_type_id: Optional[str] = None
    letter_grade: Optional[str] = None


class GradePublish(BaseModel):
    is_published: bool = True


class GradeGet(BaseModel):
    id: str
    tenant_id: str
    student_id: str
    class_id: str
    subject_id: str
    teacher_id: Optional[str] = None
    grade_type_id: str
    term_id: Optional[str] = None
    title: Optional[str] = None
    score: float
    max_score: float
    percentage: float
    letter_grade: Optional[str] = None
    teacher_notes: Optional[str] = None
    student_feedback: Optional[str] = None
    assessment_date: Optional[date] = None
    is_published: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GradeQuery(ListQuery):
    class_id: Optional[str] = None
    subject_id: Optional[str] = None
    student_id: Optional[str] = None
    grade_type_id: Optional[str] = None
    term_id: Optional[str] = None
    is_published: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class TypeBreakdown(BaseModel):
    grade_type_id: str
    name: Optional[str] = None
    weight: Optional[float] = None
    average: float
    count: int


class SubjectAverage(BaseModel):
    subject_id: str
    weighted_average: Optional[float] = None
    letter_grade: Optional[str] = None
    gpa: Optional[float] = None
    breakdown: list[TypeBreakdown] = Field(default_factory=list)
    trend: Optional[Literal["improving", "declining", "stable"]] = None


class StudentSummary(BaseModel):
    student_id: str
    subjects: list[SubjectAverage] = Field(default_factory=list)
    overall_average: Optional[float] = None
    overall_gpa: Optional[float] = None


class ClassSubjectAverage(BaseModel):
    class_id: str
    subject_id: str
    class_average: Optional[float] = None
    student_count: int = 0
    distribution: dict[str, int] = Field(default_factory=dict)
