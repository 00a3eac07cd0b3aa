from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import CurrentTeacherDep
from schemas.common import MessageResponse
from schemas.students import Student as StudentSchema, StudentCreate, StudentCreated, StudentDetail
from services import student_service

router = APIRouter(prefix="/students", tags=["Students"])


# ==========================================================
# [1] CRUD routes (always scoped to the token's class)
# ==========================================================

# ✅ [READ] roster of the requester's class
@router.get("", response_model=List[StudentSchema])
def read_students(current: CurrentTeacherDep, db: Session = Depends(get_db)):
    return student_service.list_students(db, current.class_id)


# ✅ [CREATE] add a student
@router.post("", response_model=StudentCreated, status_code=201)
def create_student(student: StudentCreate, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    student_id = student_service.create_student(db, current.class_id, student.name, student.nis)
    return StudentCreated(message="Student added successfully", studentId=student_id)


# ✅ [READ] one student with grades
@router.get("/{student_id}", response_model=StudentDetail)
def read_student(student_id: int, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    return student_service.get_student_detail(db, current.class_id, student_id)


# ✅ [UPDATE] name / NIS
@router.put("/{student_id}", response_model=MessageResponse)
def update_student(student_id: int, updated: StudentCreate, current: CurrentTeacherDep,
                   db: Session = Depends(get_db)):
    student_service.update_student(db, current.class_id, student_id, updated.name, updated.nis)
    return MessageResponse(message="Student updated successfully")


# ✅ [DELETE] student and all of the student's grades
@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(student_id: int, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    student_service.delete_student(db, current.class_id, student_id)
    return MessageResponse(message="Student deleted successfully")
