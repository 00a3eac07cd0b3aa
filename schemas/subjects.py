from pydantic import BaseModel, ConfigDict
from typing import Optional

# ✅ output: subject of the requester's class
class Subject(BaseModel):
    id: int                                  # subject id
    name: str                                # subject name
    class_id: int
    is_custom: bool = False                  # renamed Seni variant

    model_config = ConfigDict(from_attributes=True)

# ✅ one of the four Seni specialisations
class SeniOption(BaseModel):
    id: str
    name: str

# ✅ input for POST /grades/subjects/update-seni
class SeniUpdate(BaseModel):
    seni_type: Optional[str] = None
