from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import CurrentTeacherDep
from schemas.common import MessageResponse
from schemas.tasks import Task as TaskSchema, TaskCreate, TaskCreated, TaskGrades
from services import task_service

router = APIRouter(prefix="/tasks", tags=["Tasks"])


# ==========================================================
# [1] CRUD routes
# ==========================================================

# ✅ [READ] tasks of the class, optionally one subject
@router.get("", response_model=List[TaskSchema])
def read_tasks(current: CurrentTeacherDep, subject_id: Optional[int] = None, db: Session = Depends(get_db)):
    return task_service.list_tasks(db, current.class_id, subject_id)


# ✅ [CREATE] add a task under a subject of the class
@router.post("", response_model=TaskCreated, status_code=201)
def create_task(task: TaskCreate, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    task_id = task_service.create_task(
        db, current.class_id, task.name, task.subject_id, task.description, task.due_date
    )
    return TaskCreated(message="Task created successfully", taskId=task_id)


# ✅ [READ] one task
@router.get("/{task_id}", response_model=TaskSchema)
def read_task(task_id: int, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    return task_service.get_task(db, current.class_id, task_id)


# ✅ [UPDATE] task
@router.put("/{task_id}", response_model=MessageResponse)
def update_task(task_id: int, updated: TaskCreate, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    task_service.update_task(
        db, current.class_id, task_id, updated.name, updated.subject_id, updated.description, updated.due_date
    )
    return MessageResponse(message="Task updated successfully")


# ✅ [DELETE] task and every grade given for it
@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(task_id: int, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    task_service.delete_task(db, current.class_id, task_id)
    return MessageResponse(message="Task deleted successfully")


# ==========================================================
# [2] Grading view
# ==========================================================

# ✅ [READ] every student with their grade for this task
@router.get("/{task_id}/grades", response_model=TaskGrades)
def read_task_grades(task_id: int, current: CurrentTeacherDep, semester: Optional[int] = None,
                     academic_year: Optional[str] = None, db: Session = Depends(get_db)):
    return task_service.task_grades(db, current.class_id, task_id, semester, academic_year)
