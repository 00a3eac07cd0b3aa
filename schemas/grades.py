from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import List, Optional

from schemas.students import Student as StudentOut

# ✅ input for POST /grades (checked in order by the grade service)
class GradeUpsert(BaseModel):
    student_id: Optional[int] = None         # student of the requester's class
    subject_id: Optional[int] = None         # subject of the requester's class
    task_id: Optional[int] = None            # task of that subject, omitted for a final grade
    grade_value: Optional[float] = None      # 0..100
    grade_type: Optional[str] = None         # task | final (derived from task_id when omitted)
    semester: Optional[int] = None           # 1 | 2
    academic_year: Optional[str] = None      # e.g. 2024/2025

# ✅ result of an upsert
class UpsertResult(BaseModel):
    created: bool
    grade_id: int

class GradeWriteResponse(BaseModel):
    message: str
    gradeId: Optional[int] = None

# ✅ output for GET /grades (joined names)
class Grade(BaseModel):
    id: int
    student_id: int
    student_name: str
    subject_id: int
    subject_name: str
    task_id: Optional[int] = None
    task_name: Optional[str] = None
    grade_value: float
    grade_type: str
    semester: int
    academic_year: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# ✅ output for GET /grades/student/{id}/summary
class GradeSummaryLine(BaseModel):
    subject_name: str
    task_name: Optional[str] = None
    grade_type: str
    semester: int
    academic_year: str
    grade_value: float

class StudentGradeSummary(BaseModel):
    student: StudentOut
    grades: List[GradeSummaryLine]

