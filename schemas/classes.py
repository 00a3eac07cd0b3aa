from pydantic import BaseModel, ConfigDict
from typing import Optional

# ✅ response schema for one of the six fixed classes
class Class(BaseModel):
    id: int                          # class id (1..6)
    name: str                        # class name
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ✅ dashboard counters of the requester's class
class ClassStats(BaseModel):
    class_id: int
    student_count: int
    subject_count: int
    task_count: int
    grade_count: int
