"""
services/ownership.py

Class-scoped ownership guard. Every read or write of a Student, Subject, Task or
Grade goes through one of these lookups, which raise NotFoundError both when the
row is missing and when it belongs to another class.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from models.tasks import Task as TaskModel
from models.grades import Grade as GradeModel
from services.errors import NotFoundError

logger = logging.getLogger(__name__)


def assert_owned(entity_class_id: Optional[int], requester_class_id: int, entity: str = "entity") -> None:
    if entity_class_id is None or entity_class_id != requester_class_id:
        logger.warning("Ownership check failed: %s class=%s requester=%s",
                       entity, entity_class_id, requester_class_id)
        raise NotFoundError(entity)


def get_owned_student(db: Session, student_id: int, class_id: int) -> StudentModel:
    student = db.get(StudentModel, student_id)
    assert_owned(student.class_id if student else None, class_id, "student")
    return student


def get_owned_subject(db: Session, subject_id: int, class_id: int) -> SubjectModel:
    subject = db.get(SubjectModel, subject_id)
    assert_owned(subject.class_id if subject else None, class_id, "subject")
    return subject


def get_owned_task(db: Session, task_id: int, class_id: int, subject_id: Optional[int] = None) -> TaskModel:
    task = db.get(TaskModel, task_id)
    assert_owned(task.class_id if task else None, class_id, "task")
    if subject_id is not None and task.subject_id != subject_id:
        raise NotFoundError("task")
    return task


def get_owned_grade(db: Session, grade_id: int, class_id: int) -> GradeModel:
    # a grade is owned through its student
    grade = db.get(GradeModel, grade_id)
    owner_class = grade.student.class_id if grade is not None and grade.student is not None else None
    assert_owned(owner_class, class_id, "grade")
    return grade
