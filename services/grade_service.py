"""
services/grade_service.py

Grade record manager.
- upsert_grade(): one stored value per (student, subject, task-or-final, semester, academic_year)
- every lookup is scoped to the requester's class through services/ownership.py
- the storage-level unique constraint (models/grades.py) backs the lookup-then-write
  sequence; a concurrent duplicate insert falls back to updating the winner's row
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.db import utc_now
from models.grades import Grade as GradeModel, GRADE_TYPE_TASK, GRADE_TYPE_FINAL
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from models.tasks import Task as TaskModel
from schemas.grades import Grade as GradeOut, GradeSummaryLine, StudentGradeSummary, UpsertResult
from schemas.students import Student as StudentOut
from services.errors import PersistenceError, ValidationError
from services.ownership import get_owned_grade, get_owned_student, get_owned_subject, get_owned_task

logger = logging.getLogger(__name__)

GRADE_TYPES = (GRADE_TYPE_TASK, GRADE_TYPE_FINAL)
SEMESTERS = (1, 2)
MIN_GRADE = 0
MAX_GRADE = 100


# ==========================================================
# [Validation]
# ==========================================================

def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def resolve_grade_type(task_id: Optional[int], grade_type: Optional[str]) -> str:
    """Explicit grade_type wins; otherwise "task" with a task_id, "final" without."""
    effective = grade_type or (GRADE_TYPE_TASK if task_id else GRADE_TYPE_FINAL)
    if effective not in GRADE_TYPES:
        raise ValidationError("grade_type must be 'task' or 'final'")
    if effective == GRADE_TYPE_TASK and not task_id:
        raise ValidationError("A task grade requires task_id")
    if effective == GRADE_TYPE_FINAL and task_id:
        raise ValidationError("A final grade cannot reference a task")
    return effective


# ==========================================================
# [Upsert]
# ==========================================================

def _find_slot(db: Session, student_id: int, subject_id: int, task_key: int,
               grade_type: str, semester: int, academic_year: str) -> Optional[GradeModel]:
    return (
        db.query(GradeModel)
        .filter(
            GradeModel.student_id == student_id,
            GradeModel.subject_id == subject_id,
            GradeModel.task_key == task_key,
            GradeModel.grade_type == grade_type,
            GradeModel.semester == semester,
            GradeModel.academic_year == academic_year,
        )
        .first()
    )


def _update_value(db: Session, grade: GradeModel, grade_value: float) -> UpsertResult:
    # row identity (id, created_at) is kept
    grade.grade_value = grade_value
    grade.updated_at = utc_now()
    db.commit()
    logger.info("Grade updated: id=%s", grade.id)
    return UpsertResult(created=False, grade_id=grade.id)


def upsert_grade(
    db: Session,
    requester_class_id: int,
    student_id: Optional[int],
    subject_id: Optional[int],
    grade_value: Optional[float],
    semester: Optional[int],
    academic_year: Optional[str],
    task_id: Optional[int] = None,
    grade_type: Optional[str] = None,
) -> UpsertResult:
    # 1. required fields
    if (_blank(student_id) or _blank(subject_id) or grade_value is None
            or _blank(semester) or _blank(academic_year)):
        raise ValidationError(
            "Required fields: student_id, subject_id, grade_value, semester, academic_year"
        )

    # 2. range
    if not MIN_GRADE <= grade_value <= MAX_GRADE:
        raise ValidationError("Grade must be between 0 and 100")

    if semester not in SEMESTERS:
        raise ValidationError("Semester must be 1 or 2")
    academic_year = academic_year.strip()

    # 3. effective grade type
    effective_type = resolve_grade_type(task_id, grade_type)

    # 4-6. ownership, in order: student, subject, task of that subject
    get_owned_student(db, student_id, requester_class_id)
    get_owned_subject(db, subject_id, requester_class_id)
    if task_id:
        get_owned_task(db, task_id, requester_class_id, subject_id=subject_id)

    task_key = task_id or 0
    existing = _find_slot(db, student_id, subject_id, task_key, effective_type, semester, academic_year)
    if existing is not None:
        return _update_value(db, existing, grade_value)

    grade = GradeModel(
        student_id=student_id,
        subject_id=subject_id,
        task_id=task_id or None,
        task_key=task_key,
        grade_value=grade_value,
        grade_type=effective_type,
        semester=semester,
        academic_year=academic_year,
    )
    db.add(grade)
    try:
        db.commit()
    except IntegrityError:
        # another request inserted the same slot between lookup and insert
        db.rollback()
        existing = _find_slot(db, student_id, subject_id, task_key, effective_type, semester, academic_year)
        if existing is None:
            raise PersistenceError("Failed to add grade")
        return _update_value(db, existing, grade_value)

    db.refresh(grade)
    logger.info("Grade created: id=%s student_id=%s subject_id=%s task_id=%s",
                grade.id, student_id, subject_id, task_id)
    return UpsertResult(created=True, grade_id=grade.id)


# ==========================================================
# [Read / delete]
# ==========================================================

def _grade_out(grade: GradeModel, student: StudentModel, subject: SubjectModel,
               task: Optional[TaskModel]) -> GradeOut:
    return GradeOut(
        id=grade.id,
        student_id=grade.student_id,
        student_name=student.name,
        subject_id=grade.subject_id,
        subject_name=subject.name,
        task_id=grade.task_id,
        task_name=task.name if task is not None else None,
        grade_value=grade.grade_value,
        grade_type=grade.grade_type,
        semester=grade.semester,
        academic_year=grade.academic_year,
        created_at=grade.created_at,
        updated_at=grade.updated_at,
    )


def list_grades(
    db: Session,
    class_id: int,
    semester: Optional[int] = None,
    academic_year: Optional[str] = None,
    subject_id: Optional[int] = None,
    grade_type: Optional[str] = None,
) -> List[GradeOut]:
    query = (
        db.query(GradeModel, StudentModel, SubjectModel, TaskModel)
        .join(StudentModel, GradeModel.student_id == StudentModel.id)
        .join(SubjectModel, GradeModel.subject_id == SubjectModel.id)
        .outerjoin(TaskModel, GradeModel.task_id == TaskModel.id)
        .filter(StudentModel.class_id == class_id)
    )
    if semester:
        query = query.filter(GradeModel.semester == semester)
    if academic_year:
        query = query.filter(GradeModel.academic_year == academic_year)
    if subject_id:
        query = query.filter(GradeModel.subject_id == subject_id)
    if grade_type:
        query = query.filter(GradeModel.grade_type == grade_type)

    rows = query.order_by(StudentModel.name, SubjectModel.name, GradeModel.created_at.desc()).all()
    return [_grade_out(g, st, sub, t) for g, st, sub, t in rows]


def delete_grade(db: Session, class_id: int, grade_id: int) -> None:
    grade = get_owned_grade(db, grade_id, class_id)
    db.delete(grade)
    db.commit()
    logger.info("Grade deleted: id=%s", grade_id)


def student_summary(db: Session, class_id: int, student_id: int) -> StudentGradeSummary:
    student = get_owned_student(db, student_id, class_id)
    rows = (
        db.query(GradeModel, SubjectModel, TaskModel)
        .join(SubjectModel, GradeModel.subject_id == SubjectModel.id)
        .outerjoin(TaskModel, GradeModel.task_id == TaskModel.id)
        .filter(GradeModel.student_id == student.id)
        .order_by(SubjectModel.name, GradeModel.academic_year, GradeModel.semester)
        .all()
    )
    return StudentGradeSummary(
        student=StudentOut.model_validate(student),
        grades=[
            GradeSummaryLine(
                subject_name=sub.name,
                task_name=t.name if t is not None else None,
                grade_type=g.grade_type,
                semester=g.semester,
                academic_year=g.academic_year,
                grade_value=g.grade_value,
            )
            for g, sub, t in rows
        ],
    )
