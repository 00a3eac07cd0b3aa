from datetime import date
from pydantic import BaseModel, ConfigDict
from typing import List, Optional

# ✅ input (POST/PUT)
class TaskCreate(BaseModel):
    name: Optional[str] = None               # task name (required)
    subject_id: Optional[int] = None         # subject of the requester's class (required)
    description: Optional[str] = None
    due_date: Optional[date] = None

class TaskCreated(BaseModel):
    message: str
    taskId: int

# ✅ output
class Task(BaseModel):
    id: int
    name: str
    subject_id: int
    subject_name: Optional[str] = None
    class_id: int
    description: Optional[str] = None
    due_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)

# ✅ one row of GET /tasks/{id}/grades (every student, graded or not)
class TaskStudentGrade(BaseModel):
    student_id: int
    student_name: str
    nis: Optional[str] = None
    grade_id: Optional[int] = None
    grade_value: Optional[float] = None
    semester: Optional[int] = None
    academic_year: Optional[str] = None

class TaskGrades(BaseModel):
    task: Task
    students: List[TaskStudentGrade]

# ✅ GET /grades/tasks-by-subject
class TaskBrief(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    due_date: Optional[date] = None

class SubjectTasks(BaseModel):
    subject_id: int
    subject_name: str
    tasks: List[TaskBrief]
