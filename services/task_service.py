"""
services/task_service.py

Gradable tasks of the requester's class. A task always hangs off a subject of
the same class; deleting it removes every grade given for it.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from models.grades import Grade as GradeModel
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from models.tasks import Task as TaskModel
from schemas.tasks import Task as TaskOut, TaskGrades, TaskStudentGrade
from services.errors import ValidationError
from services.ownership import get_owned_subject, get_owned_task

logger = logging.getLogger(__name__)


def _task_out(task: TaskModel) -> TaskOut:
    return TaskOut(
        id=task.id,
        name=task.name,
        subject_id=task.subject_id,
        subject_name=task.subject.name if task.subject is not None else None,
        class_id=task.class_id,
        description=task.description,
        due_date=task.due_date,
    )


def _validate(name: Optional[str], subject_id: Optional[int]) -> str:
    name = (name or "").strip()
    if not name or not subject_id:
        raise ValidationError("Task name and subject are required")
    return name


def list_tasks(db: Session, class_id: int, subject_id: Optional[int] = None) -> List[TaskOut]:
    query = (
        db.query(TaskModel)
        .join(SubjectModel, TaskModel.subject_id == SubjectModel.id)
        .filter(TaskModel.class_id == class_id)
    )
    if subject_id:
        query = query.filter(TaskModel.subject_id == subject_id)
    tasks = query.order_by(SubjectModel.name, TaskModel.created_at.desc(), TaskModel.id.desc()).all()
    return [_task_out(t) for t in tasks]


def get_task(db: Session, class_id: int, task_id: int) -> TaskOut:
    return _task_out(get_owned_task(db, task_id, class_id))


def create_task(db: Session, class_id: int, name: Optional[str], subject_id: Optional[int],
                description: Optional[str] = None, due_date: Optional[date] = None) -> int:
    name = _validate(name, subject_id)
    get_owned_subject(db, subject_id, class_id)

    task = TaskModel(
        name=name,
        subject_id=subject_id,
        class_id=class_id,
        description=(description or "").strip() or None,
        due_date=due_date,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Task created: id=%s subject_id=%s", task.id, subject_id)
    return task.id


def update_task(db: Session, class_id: int, task_id: int, name: Optional[str], subject_id: Optional[int],
                description: Optional[str] = None, due_date: Optional[date] = None) -> TaskOut:
    name = _validate(name, subject_id)
    task = get_owned_task(db, task_id, class_id)
    get_owned_subject(db, subject_id, class_id)

    if subject_id != task.subject_id:
        # grades keep pointing at the subject they were given under
        db.query(GradeModel).filter(GradeModel.task_id == task.id).update(
            {GradeModel.subject_id: subject_id}, synchronize_session=False
        )

    task.name = name
    task.subject_id = subject_id
    task.description = (description or "").strip() or None
    task.due_date = due_date
    db.commit()
    db.refresh(task)
    logger.info("Task updated: id=%s", task.id)
    return _task_out(task)


def delete_task(db: Session, class_id: int, task_id: int) -> int:
    """Delete the task and all grades referencing it. Returns the number of grades removed."""
    task = get_owned_task(db, task_id, class_id)
    removed = (
        db.query(GradeModel)
        .filter(GradeModel.task_id == task.id)
        .delete(synchronize_session=False)
    )
    db.delete(task)
    db.commit()
    logger.info("Task deleted: id=%s (grades removed: %d)", task_id, removed)
    return removed


def task_grades(db: Session, class_id: int, task_id: int,
                semester: Optional[int] = None, academic_year: Optional[str] = None) -> TaskGrades:
    """Every student of the class with their grade for the task, or nulls when ungraded."""
    task = get_owned_task(db, task_id, class_id)

    join_cond = (GradeModel.student_id == StudentModel.id) & (GradeModel.task_id == task.id)
    if semester:
        join_cond = join_cond & (GradeModel.semester == semester)
    if academic_year:
        join_cond = join_cond & (GradeModel.academic_year == academic_year)

    rows = (
        db.query(StudentModel, GradeModel)
        .outerjoin(GradeModel, join_cond)
        .filter(StudentModel.class_id == class_id)
        .order_by(StudentModel.name, GradeModel.academic_year, GradeModel.semester)
        .all()
    )

    students = {}
    for student, grade in rows:
        # with no period filter the latest period wins
        students[student.id] = TaskStudentGrade(
            student_id=student.id,
            student_name=student.name,
            nis=student.nis,
            grade_id=grade.id if grade is not None else None,
            grade_value=grade.grade_value if grade is not None else None,
            semester=grade.semester if grade is not None else None,
            academic_year=grade.academic_year if grade is not None else None,
        )
    return TaskGrades(task=_task_out(task), students=list(students.values()))
