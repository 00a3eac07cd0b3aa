"""
services/subject_service.py

Subjects of the requester's class, the Seni (Arts) specialisation and
the tasks-by-subject view used by the grading screen.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from models.subjects import Subject as SubjectModel
from models.tasks import Task as TaskModel
from schemas.subjects import SeniOption
from schemas.tasks import SubjectTasks, TaskBrief
from services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

SENI_SUBJECT = "Seni"

# ✅ the four fixed Seni specialisations
SENI_OPTIONS = {
    "seni_rupa": "Seni Rupa",
    "seni_teater": "Seni Teater",
    "seni_musik": "Seni Musik",
    "seni_tari": "Seni Tari",
}


def list_subjects(db: Session, class_id: int) -> List[SubjectModel]:
    return (
        db.query(SubjectModel)
        .filter(SubjectModel.class_id == class_id)
        .order_by(SubjectModel.name)
        .all()
    )


def seni_options() -> List[SeniOption]:
    return [SeniOption(id=key, name=name) for key, name in SENI_OPTIONS.items()]


def update_seni(db: Session, class_id: int, seni_type: Optional[str]) -> SubjectModel:
    if not seni_type:
        raise ValidationError("Seni type is required")
    new_name = SENI_OPTIONS.get(seni_type)
    if new_name is None:
        raise ValidationError("Invalid seni type")

    subject = (
        db.query(SubjectModel)
        .filter(SubjectModel.class_id == class_id, SubjectModel.name == SENI_SUBJECT)
        .first()
    )
    if subject is None:
        raise NotFoundError("subject")

    subject.name = new_name
    subject.is_custom = True
    db.commit()
    db.refresh(subject)
    logger.info("Seni subject renamed: id=%s -> %s", subject.id, new_name)
    return subject


def tasks_by_subject(db: Session, class_id: int) -> List[SubjectTasks]:
    subjects = list_subjects(db, class_id)
    tasks = (
        db.query(TaskModel)
        .filter(TaskModel.class_id == class_id)
        .order_by(TaskModel.created_at.desc(), TaskModel.id.desc())
        .all()
    )
    grouped = {s.id: SubjectTasks(subject_id=s.id, subject_name=s.name, tasks=[]) for s in subjects}
    for task in tasks:
        if task.subject_id in grouped:
            grouped[task.subject_id].tasks.append(
                TaskBrief(id=task.id, name=task.name, description=task.description, due_date=task.due_date)
            )
    return list(grouped.values())
