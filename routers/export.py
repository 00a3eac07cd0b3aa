from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import CurrentTeacherDep
from services import export_service

router = APIRouter(prefix="/export", tags=["Excel export"])


def _xlsx_response(workbook: export_service.Workbook) -> Response:
    content = export_service.render_workbook(workbook)
    return Response(
        content=content,
        media_type=export_service.XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": export_service.content_disposition(workbook.filename)},
    )


# ✅ [EXCEL] grades per subject + summary sheet
@router.get("/excel")
def export_grades(current: CurrentTeacherDep, semester: Optional[int] = None,
                  academic_year: Optional[str] = None, db: Session = Depends(get_db)):
    workbook = export_service.build_grade_export(db, current.class_id, semester, academic_year)
    return _xlsx_response(workbook)


# ✅ [EXCEL] class roster
@router.get("/students/excel")
def export_students(current: CurrentTeacherDep, db: Session = Depends(get_db)):
    workbook = export_service.build_student_export(db, current.class_id)
    return _xlsx_response(workbook)
