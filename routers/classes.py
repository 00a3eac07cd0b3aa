from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import CurrentTeacherDep
from schemas.classes import Class as ClassSchema, ClassStats
from services import class_service

router = APIRouter(prefix="/classes", tags=["Classes"])


# ✅ [READ] the requester's class
@router.get("/my-class", response_model=ClassSchema)
def read_my_class(current: CurrentTeacherDep, db: Session = Depends(get_db)):
    return class_service.get_class(db, current.class_id)


# ✅ [SUMMARY] dashboard counters (students, subjects, tasks, grades)
@router.get("/my-class/stats", response_model=ClassStats)
def read_my_class_stats(current: CurrentTeacherDep, db: Session = Depends(get_db)):
    return class_service.class_stats(db, current.class_id)
