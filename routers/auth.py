from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import CurrentTeacherDep
from schemas.auth import (
    AccountDelete, LoginRequest, LoginResponse, ProfileUpdate,
    RegisterRequest, RegisterResponse, TeacherSummary,
)
from schemas.classes import Class as ClassSchema
from schemas.common import MessageResponse
from services import auth_service, class_service

router = APIRouter(prefix="/auth", tags=["Auth"])


# ==========================================================
# [1] Public routes
# ==========================================================

# ✅ [REGISTER] create a teacher account
@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    teacher_id = auth_service.register(
        db, request.username, request.password, request.name, request.class_id
    )
    return RegisterResponse(message="User created successfully", userId=teacher_id)


# ✅ [LOGIN] issue a bearer token
@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.login(db, request.username, request.password)


# ✅ [READ] the six fixed classes (registration form)
@router.get("/classes", response_model=List[ClassSchema])
def read_classes(db: Session = Depends(get_db)):
    return class_service.list_classes(db)


# ==========================================================
# [2] Account routes (bearer token)
# ==========================================================

# ✅ [READ] current teacher
@router.get("/me", response_model=TeacherSummary)
def read_me(current: CurrentTeacherDep, db: Session = Depends(get_db)):
    return auth_service.get_teacher(db, current)


# ✅ [UPDATE] display name
@router.put("/profile", response_model=TeacherSummary)
def update_profile(request: ProfileUpdate, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    return auth_service.update_profile(db, current, request.name)


# ✅ [DELETE] self-service account deletion (password re-confirmation)
@router.delete("/account", response_model=MessageResponse)
def delete_account(request: AccountDelete, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    auth_service.delete_account(db, current, request.password)
    return MessageResponse(message="Account deleted successfully")
