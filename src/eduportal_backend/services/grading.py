"""
Grade aggregation.

The arithmetic lives in pure functions operating on plain values so it can
be reasoned about in isolation; the ``calculate_*`` functions fetch rows
for one tenant and feed them through. Nothing here writes grades.
"""

import logging
from collections import OrderedDict, defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduportal_backend.model.grading import Grade, GradeType, GradingScale, round_percentage

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 5.0
TREND_MIN_GRADES = 3

DEFAULT_GRADING_SCALE = [
    {"letter": "A+", "min_percentage": 97, "max_percentage": 100, "gpa": 4.0},
    {"letter": "A", "min_percentage": 93, "max_percentage": 96, "gpa": 4.0},
    {"letter": "A-", "min_percentage": 90, "max_percentage": 92, "gpa": 3.7},
    {"letter": "B+", "min_percentage": 87, "max_percentage": 89, "gpa": 3.3},
    {"letter": "B", "min_percentage": 83, "max_percentage": 86, "gpa": 3.0},
    {"letter": "B-", "min_percentage": 80, "max_percentage": 82, "gpa": 2.7},
    {"letter": "C+", "min_percentage": 77, "max_percentage": 79, "gpa": 2.3},
    {"letter": "C", "min_percentage": 73, "max_percentage": 76, "gpa": 2.0},
    {"letter": "C-", "min_percentage": 70, "max_percentage": 72, "gpa": 1.7},
    {"letter": "D+", "min_percentage": 67, "max_percentage": 69, "gpa": 1.3},
    {"letter": "D", "min_percentage": 63, "max_percentage": 66, "gpa": 1.0},
    {"letter": "D-", "min_percentage": 60, "max_percentage": 62, "gpa": 0.7},
    {"letter": "F", "min_percentage": 0, "max_percentage": 59, "gpa": 0.0},
]

DEFAULT_GRADE_TYPES = [
    {"name": "Classwork", "weight": 0.20},
    {"name": "Homework", "weight": 0.10},
    {"name": "Quiz", "weight": 0.15},
    {"name": "Test", "weight": 0.25},
    {"name": "Exam", "weight": 0.30},
]

FALLBACK_LETTER = "F"


# Pure computation

def _band(percentage: float, scales: Sequence[dict]) -> Optional[dict]:
    # Integer band bounds cover everything up to the next whole number,
    # so 89.99 stays in 87-89 rather than falling between bands.
    for band in sorted(scales, key=lambda b: b["min_percentage"], reverse=True):
        if band["min_percentage"] <= percentage < band["max_percentage"] + 1:
            return band
    return None


def letter_for(percentage: Optional[float], scales: Sequence[dict]) -> Optional[str]:
    if percentage is None:
        return None
    band = _band(percentage, scales)
    return band["letter"] if band else FALLBACK_LETTER


def gpa_for(letter: Optional[str], scales: Sequence[dict]) -> float:
    for band in scales:
        if band["letter"] == letter:
            return float(band.get("gpa") or 0.0)
    return 0.0


def mean(values: Iterable[float]) -> Optional[float]:
    values = list(values)
    if not values:
        return None
    return sum(values) / len(values)


@dataclass
class TypeAverage:
    grade_type_id: str
    average: float
    count: int
    weight: Optional[float] = None
    name: Optional[str] = None


@dataclass
class WeightedResult:
    weighted_average: Optional[float]
    breakdown: List[TypeAverage] = field(default_factory=list)


def weighted_average(entries: Sequence[tuple], weights: Dict[str, Optional[float]], names: Optional[Dict[str, str]] = None) -> WeightedResult:
    """
    ``entries`` are ``(grade_type_id, percentage)`` pairs.

    Per type means go into the breakdown. Types with a positive weight are
    combined as sum(mean * weight) / sum(weight). When no type present has
    a positive weight the result is the flat mean of every percentage.
    """
    if not entries:
        return WeightedResult(weighted_average=None)

    names = names or {}
    grouped: "OrderedDict[str, List[float]]" = OrderedDict()
    for grade_type_id, percentage in entries:
        grouped.setdefault(grade_type_id, []).append(percentage)

    breakdown = []
    weighted_sum = 0.0
    weight_total = 0.0
    for grade_type_id, percentages in grouped.items():
        average = mean(percentages)
        weight = weights.get(grade_type_id)
        breakdown.append(TypeAverage(
            grade_type_id=grade_type_id,
            average=round_percentage(average),
            count=len(percentages),
            weight=weight,
            name=names.get(grade_type_id),
        ))
        if weight:
            weighted_sum += average * weight
            weight_total += weight

    if weight_total > 0:
        result = weighted_sum / weight_total
    else:
        result = mean(percentage for _, percentage in entries)

    return WeightedResult(weighted_average=round_percentage(result), breakdown=breakdown)


def calculate_trend(percentages: Sequence[float]) -> str:
    """Compare the later half of a chronological series with the earlier half."""
    if len(percentages) < TREND_MIN_GRADES:
        return "stable"

    mid = len(percentages) // 2
    first = mean(percentages[:mid])
    second = mean(percentages[mid:])
    difference = second - first

    if difference > TREND_THRESHOLD:
        return "improving"
    if difference < -TREND_THRESHOLD:
        return "declining"
    return "stable"


# Tenant seeding

def get_grading_scale(db: Session, tenant_id: str) -> GradingScale:
    scale = db.query(GradingScale).filter(GradingScale.tenant_id == tenant_id).first()
    if scale is not None:
        return scale

    scale = GradingScale(tenant_id=tenant_id, name="Standard", scales=[dict(b) for b in DEFAULT_GRADING_SCALE])
    try:
        db.add(scale)
        db.commit()
        db.refresh(scale)
    except IntegrityError:
        # seeded concurrently by another request
        db.rollback()
        scale = db.query(GradingScale).filter(GradingScale.tenant_id == tenant_id).one()
    return scale


def ensure_grade_types(db: Session, tenant_id: str) -> List[GradeType]:
    existing = db.query(GradeType).filter(GradeType.tenant_id == tenant_id).count()
    if existing == 0:
        for grade_type in DEFAULT_GRADE_TYPES:
            db.add(GradeType(tenant_id=tenant_id, name=grade_type["name"], weight=grade_type["weight"], max_score=100))
        try:
            db.commit()
            logger.info(f"Seeded default grade types for tenant {tenant_id}")
        except IntegrityError:
            db.rollback()
    return db.query(GradeType).filter(GradeType.tenant_id == tenant_id).order_by(GradeType.name).all()


def _grade_type_lookup(db: Session, tenant_id: str):
    grade_types = db.query(GradeType).filter(GradeType.tenant_id == tenant_id).all()
    weights = {gt.id: gt.weight for gt in grade_types}
    names = {gt.id: gt.name for gt in grade_types}
    return weights, names


def _published_grades(db: Session, tenant_id: str, student_id: str, subject_id: Optional[str] = None, term_id: Optional[str] = None) -> List[Grade]:
    query = db.query(Grade).filter(
        Grade.tenant_id == tenant_id,
        Grade.student_id == student_id,
        Grade.deleted == False,
        Grade.is_published == True,
    )
    if subject_id is not None:
        query = query.filter(Grade.subject_id == subject_id)
    if term_id is not None:
        query = query.filter(Grade.term_id == term_id)
    return query.order_by(Grade.assessment_date, Grade.created_at).all()


# Reports

@dataclass
class SubjectReport:
    subject_id: str
    weighted_average: Optional[float]
    letter_grade: Optional[str]
    breakdown: List[TypeAverage] = field(default_factory=list)
    gpa: Optional[float] = None
    trend: Optional[str] = None


def _subject_report(subject_id: str, grades: List[Grade], scales: List[dict], weights, names) -> SubjectReport:
    result = weighted_average([(g.grade_type_id, g.percentage) for g in grades], weights, names)
    letter = letter_for(result.weighted_average, scales)
    return SubjectReport(
        subject_id=subject_id,
        weighted_average=result.weighted_average,
        letter_grade=letter,
        breakdown=result.breakdown,
        gpa=gpa_for(letter, scales) if letter is not None else None,
        trend=calculate_trend([g.percentage for g in grades]),
    )


def calculate_student_subject_average(db: Session, tenant_id: str, student_id: str, subject_id: str, term_id: Optional[str] = None) -> SubjectReport:
    grades = _published_grades(db, tenant_id, student_id, subject_id, term_id)
    scales = get_grading_scale(db, tenant_id).scales
    weights, names = _grade_type_lookup(db, tenant_id)
    return _subject_report(subject_id, grades, scales, weights, names)


@dataclass
class StudentSummaryReport:
    student_id: str
    subjects: List[SubjectReport]
    overall_average: Optional[float]
    overall_gpa: Optional[float]


def calculate_student_summary(db: Session, tenant_id: str, student_id: str, term_id: Optional[str] = None) -> StudentSummaryReport:
    grades = _published_grades(db, tenant_id, student_id, term_id=term_id)
    scales = get_grading_scale(db, tenant_id).scales
    weights, names = _grade_type_lookup(db, tenant_id)

    by_subject: "OrderedDict[str, List[Grade]]" = OrderedDict()
    for grade in grades:
        by_subject.setdefault(grade.subject_id, []).append(grade)

    subjects = [_subject_report(subject_id, subject_grades, scales, weights, names) for subject_id, subject_grades in by_subject.items()]

    overall_average = mean(s.weighted_average for s in subjects)
    overall_gpa = mean(s.gpa or 0.0 for s in subjects)

    return StudentSummaryReport(
        student_id=student_id,
        subjects=subjects,
        overall_average=round_percentage(overall_average) if overall_average is not None else None,
        overall_gpa=round_percentage(overall_gpa) if overall_gpa is not None else None,
    )


@dataclass
class ClassSubjectReport:
    class_id: str
    subject_id: str
    class_average: Optional[float]
    student_count: int
    distribution: Dict[str, int]


def class_distribution(percentages_by_student: Dict[str, List[float]], scales: Sequence[dict]):
    student_averages = [mean(values) for values in percentages_by_student.values() if values]
    distribution: Dict[str, int] = defaultdict(int)
    for average in student_averages:
        distribution[letter_for(average, scales)] += 1
    class_average = mean(student_averages)
    return (
        round_percentage(class_average) if class_average is not None else None,
        len(student_averages),
        dict(distribution),
    )


def calculate_class_subject_average(db: Session, tenant_id: str, class_id: str, subject_id: str, term_id: Optional[str] = None) -> ClassSubjectReport:
    # unpublished grades count here, unlike the student facing reports
    query = db.query(Grade.student_id, Grade.percentage).filter(
        Grade.tenant_id == tenant_id,
        Grade.class_id == class_id,
        Grade.subject_id == subject_id,
        Grade.deleted == False,
    )
    if term_id is not None:
        query = query.filter(Grade.term_id == term_id)

    by_student: Dict[str, List[float]] = defaultdict(list)
    for student_id, percentage in query.all():
        by_student[student_id].append(percentage)

    scales = get_grading_scale(db, tenant_id).scales
    class_average, student_count, distribution = class_distribution(by_student, scales)

    return ClassSubjectReport(
        class_id=class_id,
        subject_id=subject_id,
        class_average=class_average,
        student_count=student_count,
        distribution=distribution,
    )
