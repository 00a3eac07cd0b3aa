from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import List, Optional

# ✅ input (POST/PUT); class_id always comes from the token
class StudentCreate(BaseModel):
    name: Optional[str] = None               # student name (required, checked by the service)
    nis: Optional[str] = None                # school-assigned number

class StudentCreated(BaseModel):
    message: str
    studentId: int

# ✅ output (GET)
class Student(BaseModel):
    id: int
    name: str
    nis: Optional[str] = None
    class_id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# ✅ one grade line shown on the student detail page
class StudentGrade(BaseModel):
    id: int
    subject_id: int
    subject_name: str
    task_id: Optional[int] = None
    task_name: Optional[str] = None
    grade_value: float
    grade_type: str
    semester: int
    academic_year: str

class StudentDetail(BaseModel):
    student: Student
    grades: List[StudentGrade]
