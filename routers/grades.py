from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import CurrentTeacherDep
from schemas.common import MessageResponse
from schemas.grades import Grade as GradeSchema, GradeUpsert, GradeWriteResponse, StudentGradeSummary
from schemas.subjects import SeniOption, SeniUpdate, Subject as SubjectSchema
from schemas.tasks import SubjectTasks
from services import grade_service, subject_service

router = APIRouter(prefix="/grades", tags=["Grades"])


# ==========================================================
# [1] Static routes (subjects / grading helpers)
# ==========================================================

# ✅ [READ] subjects of the requester's class
@router.get("/subjects", response_model=List[SubjectSchema])
def read_subjects(current: CurrentTeacherDep, db: Session = Depends(get_db)):
    return subject_service.list_subjects(db, current.class_id)


# ✅ [READ] the four Seni variants
@router.get("/subjects/seni-options", response_model=List[SeniOption])
def read_seni_options(current: CurrentTeacherDep):
    return subject_service.seni_options()


# ✅ [UPDATE] rename the class's Seni subject to one variant
@router.post("/subjects/update-seni", response_model=MessageResponse)
def update_seni(request: SeniUpdate, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    subject_service.update_seni(db, current.class_id, request.seni_type)
    return MessageResponse(message="Seni subject updated successfully")


# ✅ [READ] subjects each with their tasks (grading screen)
@router.get("/tasks-by-subject", response_model=List[SubjectTasks])
def read_tasks_by_subject(current: CurrentTeacherDep, db: Session = Depends(get_db)):
    return subject_service.tasks_by_subject(db, current.class_id)


# ✅ [SUMMARY] one student's grades
@router.get("/student/{student_id}/summary", response_model=StudentGradeSummary)
def read_student_summary(student_id: int, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    return grade_service.student_summary(db, current.class_id, student_id)


# ==========================================================
# [2] Grade routes
# ==========================================================

# ✅ [READ] grades of the class with joined names
@router.get("", response_model=List[GradeSchema])
def read_grades(
    current: CurrentTeacherDep,
    semester: Optional[int] = None,
    academic_year: Optional[str] = None,
    subject_id: Optional[int] = None,
    grade_type: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return grade_service.list_grades(db, current.class_id, semester, academic_year, subject_id, grade_type)


# ✅ [UPSERT] add a grade, or replace the value already stored for the same slot
@router.post("", response_model=GradeWriteResponse, status_code=201)
def upsert_grade(grade: GradeUpsert, response: Response, current: CurrentTeacherDep,
                 db: Session = Depends(get_db)):
    result = grade_service.upsert_grade(
        db,
        current.class_id,
        student_id=grade.student_id,
        subject_id=grade.subject_id,
        grade_value=grade.grade_value,
        semester=grade.semester,
        academic_year=grade.academic_year,
        task_id=grade.task_id,
        grade_type=grade.grade_type,
    )
    if result.created:
        return GradeWriteResponse(message="Grade added successfully", gradeId=result.grade_id)
    response.status_code = 200
    return GradeWriteResponse(message="Grade updated successfully", gradeId=result.grade_id)


# ✅ [DELETE] one grade (owned through its student)
@router.delete("/{grade_id}", response_model=MessageResponse)
def delete_grade(grade_id: int, current: CurrentTeacherDep, db: Session = Depends(get_db)):
    grade_service.delete_grade(db, current.class_id, grade_id)
    return MessageResponse(message="Grade deleted successfully")
