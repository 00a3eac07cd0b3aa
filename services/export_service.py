"""
services/export_service.py

Spreadsheet exports of the requester's class.

build_grade_export() turns the class's grades into one summary sheet (final grades
per subject) followed by one detail sheet per subject (task columns, final grade,
task total/average and the 70/30 combined average, plus a class-statistics row).
build_student_export() produces the roster sheet.
Both return a plain Workbook description; render_workbook() writes it with openpyxl.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import quote

from openpyxl import Workbook as XlsxWorkbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from models.grades import Grade as GradeModel, GRADE_TYPE_TASK
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from models.tasks import Task as TaskModel
from services.class_service import get_class

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# ✅ combined average policy: 70% task average, 30% final grade
TASK_WEIGHT = 0.7
FINAL_WEIGHT = 0.3

COL_NAME = "Student Name"
COL_NIS = "NIS"
COL_FINAL = "Final Grade"
COL_TASK_TOTAL = "Task Total"
COL_TASK_AVG = "Task Average"
COL_FINAL_AVG = "Final Average"
DEFAULT_TASK_COLUMN = "Task"

SUMMARY_SHEET = "Grade Summary"
NO_DATA = "No data yet"
NO_STUDENTS = "No students yet"
STATS_LABEL = "=== CLASS STATISTICS ==="
CLASS_AVERAGE_LABEL = "CLASS AVERAGE"
EMPTY = "-"

MAX_SHEET_NAME = 31
_ILLEGAL_NAME_CHARS = re.compile(r"[\\/?*\[\]:]")
# also unsafe inside a quoted Content-Disposition filename
_ILLEGAL_FILENAME_CHARS = re.compile(r"[\"\x00-\x1f\x7f]")


@dataclass
class Sheet:
    name: str
    columns: List[str]
    rows: List[Dict[str, Any]] = field(default_factory=list)
    widths: Dict[str, int] = field(default_factory=dict)


@dataclass
class Workbook:
    filename: str
    sheets: List[Sheet] = field(default_factory=list)


@dataclass
class GradeRow:
    student_id: int
    subject_name: str
    grade_type: str
    task_name: Optional[str]
    grade_value: float
    task_id: Optional[int] = None


@dataclass
class RosterEntry:
    id: int
    name: str
    nis: Optional[str] = None


# ==========================================================
# [Helpers]
# ==========================================================

def clean_excel_name(name: Optional[str]) -> str:
    """Strip the characters Excel rejects in sheet and file names."""
    if not name:
        return "Unknown"
    cleaned = _ILLEGAL_NAME_CHARS.sub("", name).strip()
    return cleaned or "Unknown"


def clean_filename(name: Optional[str]) -> str:
    """clean_excel_name() plus quotes and control characters removed (download file names)."""
    return clean_excel_name(_ILLEGAL_FILENAME_CHARS.sub("", name or ""))


def content_disposition(filename: str) -> str:
    """
    Attachment header for a download name that may hold non-ASCII text.
    Response headers are Latin-1, so the plain `filename` gets an ASCII fallback
    and the real name travels percent-encoded in `filename*` (RFC 6266).
    """
    filename = clean_filename(filename)
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def _unique_sheet_name(name: str, taken: set) -> str:
    base = clean_excel_name(name)[:MAX_SHEET_NAME]
    candidate, n = base, 2
    while candidate.lower() in taken:
        suffix = f" ({n})"
        candidate = base[:MAX_SHEET_NAME - len(suffix)] + suffix
        n += 1
    taken.add(candidate.lower())
    return candidate


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _fmt(value: float) -> str:
    return f"{value:.1f}"


def column_mean(values: Sequence[Any]) -> Optional[float]:
    """Arithmetic mean of the numeric entries, None when there are none."""
    numbers = [n for n in (_as_number(v) for v in values) if n is not None]
    if not numbers:
        return None
    return sum(numbers) / len(numbers)


def combined_average(task_scores: Sequence[float], final_grade: Optional[float]) -> Optional[float]:
    task_avg = sum(task_scores) / len(task_scores) if task_scores else None
    if task_avg is not None and final_grade is not None:
        return task_avg * TASK_WEIGHT + final_grade * FINAL_WEIGHT
    if task_avg is not None:
        return task_avg
    return final_grade


# ==========================================================
# [Aggregation]
# ==========================================================

# task cells are keyed by task id (or name when no id is known), never by a header label
TaskKey = Union[int, str]
FIXED_COLUMNS = (COL_NAME, COL_NIS, COL_FINAL, COL_TASK_TOTAL, COL_TASK_AVG, COL_FINAL_AVG)


def _task_key(grade: GradeRow) -> TaskKey:
    return grade.task_id if grade.task_id is not None else (grade.task_name or DEFAULT_TASK_COLUMN)


def _task_headers(task_keys: List[TaskKey], labels: Dict[TaskKey, str]) -> Dict[TaskKey, str]:
    """Header label per task, unique within the sheet and never equal to a fixed column."""
    taken = set(FIXED_COLUMNS)
    headers = {}
    for key in task_keys:
        label = labels[key]
        base = f"{label} (task)" if label in FIXED_COLUMNS else label
        candidate, n = base, 2
        while candidate in taken:
            candidate = f"{base} ({n})"
            n += 1
        taken.add(candidate)
        headers[key] = candidate
    return headers


def _subject_sheet(subject_name: str, students: List[RosterEntry], task_keys: List[TaskKey],
                   labels: Dict[TaskKey, str], task_cells: Dict[int, Dict[TaskKey, float]],
                   finals: Dict[int, float]) -> Sheet:
    headers = _task_headers(task_keys, labels)
    task_columns = [headers[key] for key in task_keys]
    columns = [COL_NAME, COL_NIS, *task_columns, COL_FINAL, COL_TASK_TOTAL, COL_TASK_AVG, COL_FINAL_AVG]
    rows = []
    for student in students:
        values = task_cells.get(student.id, {})
        task_scores = [values[key] for key in task_keys if key in values]
        final_grade = finals.get(student.id)

        row = {COL_NAME: student.name, COL_NIS: student.nis or EMPTY}
        for key in task_keys:
            row[headers[key]] = values.get(key)
        row[COL_FINAL] = final_grade
        if task_scores:
            total = sum(task_scores)
            row[COL_TASK_TOTAL] = _fmt(total)
            row[COL_TASK_AVG] = _fmt(total / len(task_scores))
        else:
            row[COL_TASK_TOTAL] = EMPTY
            row[COL_TASK_AVG] = EMPTY
        combined = combined_average(task_scores, final_grade)
        row[COL_FINAL_AVG] = _fmt(combined) if combined is not None else EMPTY
        rows.append(row)

    if not rows:
        rows.append({COL_NAME: NO_DATA, COL_NIS: EMPTY})
    else:
        stats = {COL_NAME: STATS_LABEL, COL_NIS: ""}
        for column in columns[2:]:
            mean = column_mean([r.get(column) for r in rows])
            stats[column] = f"Rata: {_fmt(mean)}" if mean is not None else EMPTY
        rows.append(stats)

    return Sheet(name=subject_name, columns=columns, rows=rows,
                 widths={COL_NAME: 25, COL_NIS: 15})


def _summary_sheet(students: List[RosterEntry], subject_names: List[str],
                   finals: Dict[str, Dict[int, float]]) -> Sheet:
    columns = [COL_NAME, COL_NIS, *subject_names]
    rows = []
    for student in students:
        row = {COL_NAME: student.name, COL_NIS: student.nis or EMPTY}
        for subject_name in subject_names:
            value = finals.get(subject_name, {}).get(student.id)
            row[subject_name] = value if value is not None else EMPTY
        rows.append(row)

    if not rows:
        rows.append({COL_NAME: NO_DATA, COL_NIS: EMPTY})
    elif subject_names:
        average = {COL_NAME: CLASS_AVERAGE_LABEL, COL_NIS: EMPTY}
        for subject_name in subject_names:
            mean = column_mean([r.get(subject_name) for r in rows])
            average[subject_name] = _fmt(mean) if mean is not None else EMPTY
        rows.append(average)

    return Sheet(name=SUMMARY_SHEET, columns=columns, rows=rows,
                 widths={COL_NAME: 25, COL_NIS: 15})


def aggregate_grades(students: List[RosterEntry], grades: List[GradeRow]) -> List[Sheet]:
    """
    Build the summary sheet and one sheet per graded subject.

    `students` is the whole roster (students without grades still get a row),
    `grades` must be ordered so that a later row for the same cell wins.
    """
    # subject -> student -> task key -> value, and subject -> student -> final grade
    task_cells: Dict[str, Dict[int, Dict[TaskKey, float]]] = {}
    finals: Dict[str, Dict[int, float]] = {}
    task_keys: Dict[str, List[TaskKey]] = {}
    labels: Dict[str, Dict[TaskKey, str]] = {}
    for grade in grades:
        if grade.subject_name is None or grade.grade_value is None:
            continue
        subject = grade.subject_name
        task_cells.setdefault(subject, {})
        finals.setdefault(subject, {})
        keys = task_keys.setdefault(subject, [])
        if grade.grade_type == GRADE_TYPE_TASK:
            key = _task_key(grade)
            if key not in keys:
                keys.append(key)
                labels.setdefault(subject, {})[key] = grade.task_name or DEFAULT_TASK_COLUMN
            task_cells[subject].setdefault(grade.student_id, {})[key] = grade.grade_value
        else:
            finals[subject][grade.student_id] = grade.grade_value

    subject_names = sorted(task_cells)

    sheets = [_summary_sheet(students, subject_names, finals)]
    taken = {SUMMARY_SHEET.lower()}
    for subject_name in subject_names:
        sheet = _subject_sheet(subject_name, students, task_keys[subject_name],
                               labels.get(subject_name, {}), task_cells[subject_name], finals[subject_name])
        sheet.name = _unique_sheet_name(subject_name, taken)
        sheets.append(sheet)
    return sheets


# ==========================================================
# [DB-backed exports]
# ==========================================================

def _roster(db: Session, class_id: int) -> List[StudentModel]:
    return (
        db.query(StudentModel)
        .filter(StudentModel.class_id == class_id)
        .order_by(StudentModel.name, StudentModel.id)
        .all()
    )


def build_grade_export(db: Session, class_id: int, semester: Optional[int] = None,
                       academic_year: Optional[str] = None, today: Optional[date] = None) -> Workbook:
    today = today or date.today()
    class_info = get_class(db, class_id)
    students = [RosterEntry(id=s.id, name=s.name, nis=s.nis) for s in _roster(db, class_id)]

    query = (
        db.query(
            GradeModel.student_id,
            SubjectModel.name.label("subject_name"),
            GradeModel.grade_type,
            GradeModel.task_id,
            TaskModel.name.label("task_name"),
            GradeModel.grade_value,
        )
        .join(StudentModel, GradeModel.student_id == StudentModel.id)
        .join(SubjectModel, GradeModel.subject_id == SubjectModel.id)
        .outerjoin(TaskModel, GradeModel.task_id == TaskModel.id)
        .filter(StudentModel.class_id == class_id)
    )
    if semester:
        query = query.filter(GradeModel.semester == semester)
    if academic_year:
        query = query.filter(GradeModel.academic_year == academic_year)
    # task columns follow task creation order, the latest period wins a cell
    rows = query.order_by(
        GradeModel.task_key, GradeModel.academic_year, GradeModel.semester, GradeModel.updated_at
    ).all()
    grades = [
        GradeRow(student_id=r.student_id, subject_name=r.subject_name, grade_type=r.grade_type,
                 task_name=r.task_name, grade_value=r.grade_value, task_id=r.task_id)
        for r in rows
    ]

    class_name = clean_excel_name(class_info.name)
    period = f"Sem{semester}_" if semester else ""
    filename = clean_filename(
        f"Grades_By_Subject_{class_name}_{period}{academic_year or today.year}_{today.isoformat()}"
    ) + ".xlsx"

    logger.info("Grade export built: class_id=%s students=%d grades=%d", class_id, len(students), len(grades))
    return Workbook(filename=filename, sheets=aggregate_grades(students, grades))


def build_student_export(db: Session, class_id: int, today: Optional[date] = None) -> Workbook:
    today = today or date.today()
    class_info = get_class(db, class_id)
    columns = ["No", COL_NAME, COL_NIS, "Registered"]

    rows = [
        {
            "No": index,
            COL_NAME: s.name,
            COL_NIS: s.nis or EMPTY,
            "Registered": s.created_at.strftime("%d/%m/%Y") if s.created_at else EMPTY,
        }
        for index, s in enumerate(_roster(db, class_id), start=1)
    ]
    if not rows:
        rows.append({"No": 1, COL_NAME: NO_STUDENTS, COL_NIS: EMPTY, "Registered": EMPTY})

    sheet_name = clean_excel_name(f"Student_List_{clean_excel_name(class_info.name)}")
    sheet = Sheet(
        name=sheet_name[:MAX_SHEET_NAME],
        columns=columns,
        rows=rows,
        widths={"No": 5, COL_NAME: 25, COL_NIS: 15, "Registered": 15},
    )
    filename = clean_filename(f"{sheet_name}_{today.isoformat()}") + ".xlsx"
    return Workbook(filename=filename, sheets=[sheet])


# ==========================================================
# [Rendering]
# ==========================================================

def render_workbook(workbook: Workbook) -> bytes:
    wb = XlsxWorkbook()
    wb.remove(wb.active)

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")

    for sheet in workbook.sheets:
        ws = wb.create_sheet(title=sheet.name)
        ws.append(sheet.columns)
        for cell in ws[1]:
            cell.font = header_font
            cell.fill = header_fill

        for row in sheet.rows:
            ws.append([row.get(column) for column in sheet.columns])

        for index, column in enumerate(sheet.columns, start=1):
            ws.column_dimensions[get_column_letter(index)].width = sheet.widths.get(column, 15)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
