from pydantic import BaseModel, ConfigDict
from typing import Optional

# ✅ registration request (fields are checked by the auth service so a missing one is a 400)
class RegisterRequest(BaseModel):
    username: Optional[str] = None           # login name
    password: Optional[str] = None           # plaintext, hashed before storage
    name: Optional[str] = None               # display name
    class_id: Optional[int] = None           # class taught (1..6)

class RegisterResponse(BaseModel):
    message: str
    userId: int

# ✅ login request
class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None

# ✅ teacher summary embedded in the login response
class TeacherSummary(BaseModel):
    id: int
    username: str
    name: str
    class_id: int

    model_config = ConfigDict(from_attributes=True)

class LoginResponse(BaseModel):
    message: str = "Login successful"
    token: str
    user: TeacherSummary

# ✅ profile / account maintenance
class ProfileUpdate(BaseModel):
    name: Optional[str] = None

class AccountDelete(BaseModel):
    password: Optional[str] = None

# ✅ identity carried by the bearer token; the only source of class scoping
class CurrentTeacher(BaseModel):
    id: int
    username: str
    class_id: int
