"""
services/class_service.py

The six fixed classes and the dashboard counters of the requester's class.
"""

from typing import List

from sqlalchemy.orm import Session

from models.classes import Class as ClassModel
from models.grades import Grade as GradeModel
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from models.tasks import Task as TaskModel
from schemas.classes import ClassStats
from services.errors import NotFoundError


def list_classes(db: Session) -> List[ClassModel]:
    return db.query(ClassModel).order_by(ClassModel.id).all()


def get_class(db: Session, class_id: int) -> ClassModel:
    cls = db.get(ClassModel, class_id)
    if cls is None:
        raise NotFoundError("class")
    return cls


def class_stats(db: Session, class_id: int) -> ClassStats:
    return ClassStats(
        class_id=class_id,
        student_count=db.query(StudentModel).filter(StudentModel.class_id == class_id).count(),
        subject_count=db.query(SubjectModel).filter(SubjectModel.class_id == class_id).count(),
        task_count=db.query(TaskModel).filter(TaskModel.class_id == class_id).count(),
        grade_count=(
            db.query(GradeModel)
            .join(StudentModel, GradeModel.student_id == StudentModel.id)
            .filter(StudentModel.class_id == class_id)
            .count()
        ),
    )
