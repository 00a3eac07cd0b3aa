"""
services/student_service.py

Roster of the requester's class. NIS values are unique across the whole school.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.grades import Grade as GradeModel
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from models.tasks import Task as TaskModel
from schemas.students import Student as StudentOut, StudentDetail, StudentGrade
from services.errors import ConflictError, ValidationError
from services.ownership import get_owned_student

logger = logging.getLogger(__name__)

NIS_TAKEN = "NIS already exists"


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def _check_nis_free(db: Session, nis: Optional[str], exclude_id: Optional[int] = None) -> None:
    if not nis:
        return
    query = db.query(StudentModel.id).filter(StudentModel.nis == nis)
    if exclude_id is not None:
        query = query.filter(StudentModel.id != exclude_id)
    if query.first():
        raise ConflictError(NIS_TAKEN)


def list_students(db: Session, class_id: int) -> List[StudentModel]:
    return (
        db.query(StudentModel)
        .filter(StudentModel.class_id == class_id)
        .order_by(StudentModel.name)
        .all()
    )


def create_student(db: Session, class_id: int, name: Optional[str], nis: Optional[str] = None) -> int:
    name, nis = _clean(name), _clean(nis)
    if not name:
        raise ValidationError("Student name is required")
    _check_nis_free(db, nis)

    student = StudentModel(name=name, nis=nis, class_id=class_id)
    db.add(student)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(NIS_TAKEN)
    db.refresh(student)
    logger.info("Student created: id=%s class_id=%s", student.id, class_id)
    return student.id


def get_student_detail(db: Session, class_id: int, student_id: int) -> StudentDetail:
    student = get_owned_student(db, student_id, class_id)
    rows = (
        db.query(GradeModel, SubjectModel, TaskModel)
        .join(SubjectModel, GradeModel.subject_id == SubjectModel.id)
        .outerjoin(TaskModel, GradeModel.task_id == TaskModel.id)
        .filter(GradeModel.student_id == student.id)
        .order_by(SubjectModel.name, GradeModel.semester)
        .all()
    )
    return StudentDetail(
        student=StudentOut.model_validate(student),
        grades=[
            StudentGrade(
                id=g.id,
                subject_id=g.subject_id,
                subject_name=sub.name,
                task_id=g.task_id,
                task_name=t.name if t is not None else None,
                grade_value=g.grade_value,
                grade_type=g.grade_type,
                semester=g.semester,
                academic_year=g.academic_year,
            )
            for g, sub, t in rows
        ],
    )


def update_student(db: Session, class_id: int, student_id: int,
                   name: Optional[str], nis: Optional[str] = None) -> StudentModel:
    name, nis = _clean(name), _clean(nis)
    if not name:
        raise ValidationError("Student name is required")

    student = get_owned_student(db, student_id, class_id)
    if nis != student.nis:
        _check_nis_free(db, nis, exclude_id=student.id)

    student.name = name
    student.nis = nis
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(NIS_TAKEN)
    db.refresh(student)
    logger.info("Student updated: id=%s", student.id)
    return student


def delete_student(db: Session, class_id: int, student_id: int) -> int:
    """Delete the student and every grade of that student. Returns the number of grades removed."""
    student = get_owned_student(db, student_id, class_id)
    removed = (
        db.query(GradeModel)
        .filter(GradeModel.student_id == student.id)
        .delete(synchronize_session=False)
    )
    db.delete(student)
    db.commit()
    logger.info("Student deleted: id=%s (grades removed: %d)", student_id, removed)
    return removed
