from io import BytesIO

from fastapi.testclient import TestClient
from openpyxl import load_workbook

import main
from services.export_service import XLSX_MEDIA_TYPE
from tests.conftest import API, subject_id

YEAR = "2024/2025"


def _grade(client, headers, **body):
    payload = {"semester": 1, "academic_year": YEAR}
    payload.update(body)
    return client.post(f"{API}/grades", headers=headers, json=payload)


def _error(response):
    return response.json()["error"]


# ==========================================================
# [Students]
# ==========================================================

def test_student_crud(client, teacher1):
    created = client.post(f"{API}/students", headers=teacher1, json={"name": "Eka", "nis": "3001"})
    assert created.status_code == 201
    assert created.json()["message"] == "Student added successfully"
    student_id = created.json()["studentId"]

    roster = client.get(f"{API}/students", headers=teacher1).json()
    assert [(s["name"], s["nis"], s["class_id"]) for s in roster] == [("Eka", "3001", 1)]

    updated = client.put(f"{API}/students/{student_id}", headers=teacher1, json={"name": "Eka P", "nis": "3002"})
    assert updated.status_code == 200
    detail = client.get(f"{API}/students/{student_id}", headers=teacher1).json()
    assert detail["student"]["name"] == "Eka P"
    assert detail["student"]["nis"] == "3002"
    assert detail["grades"] == []

    deleted = client.delete(f"{API}/students/{student_id}", headers=teacher1)
    assert deleted.status_code == 200
    assert client.get(f"{API}/students/{student_id}", headers=teacher1).status_code == 404


def test_student_name_required(client, teacher1):
    response = client.post(f"{API}/students", headers=teacher1, json={"nis": "3001"})
    assert response.status_code == 400
    assert _error(response)["message"] == "Student name is required"


def test_nis_is_unique_across_classes(client, teacher1, teacher2, class1):
    response = client.post(f"{API}/students", headers=teacher2, json={"name": "Fajar", "nis": "1001"})
    assert response.status_code == 400
    assert _error(response)["message"] == "NIS already exists"


def test_keeping_own_nis_on_update_is_allowed(client, teacher1, class1):
    response = client.put(f"{API}/students/{class1['s1']}", headers=teacher1, json={"name": "Andi S", "nis": "1001"})
    assert response.status_code == 200


def test_students_of_other_class_are_invisible(client, teacher1, teacher2, class1, class2):
    roster = client.get(f"{API}/students", headers=teacher2).json()
    assert [s["name"] for s in roster] == ["Citra"]

    foreign = class1["s1"]
    for method in ("get", "delete"):
        response = getattr(client, method)(f"{API}/students/{foreign}", headers=teacher2)
        assert response.status_code == 404
        assert _error(response)["message"] == "Student not found or access denied"
    response = client.put(f"{API}/students/{foreign}", headers=teacher2, json={"name": "X"})
    assert response.status_code == 404

    # still there for its own class
    assert client.get(f"{API}/students/{foreign}", headers=teacher1).status_code == 200


def test_unknown_and_foreign_ids_read_the_same(client, teacher2, class1):
    unknown = client.get(f"{API}/students/999999", headers=teacher2)
    foreign = client.get(f"{API}/students/{class1['s1']}", headers=teacher2)
    assert unknown.status_code == foreign.status_code == 404
    assert _error(unknown) == _error(foreign)


# ==========================================================
# [Grades]
# ==========================================================

def test_grade_post_creates_then_updates(client, teacher1, class1):
    body = dict(student_id=class1["s1"], subject_id=class1["math_id"], task_id=class1["t1"])

    first = _grade(client, teacher1, grade_value=70, **body)
    assert first.status_code == 201
    assert first.json()["message"] == "Grade added successfully"

    second = _grade(client, teacher1, grade_value=90, **body)
    assert second.status_code == 200
    assert second.json()["message"] == "Grade updated successfully"
    assert second.json()["gradeId"] == first.json()["gradeId"]

    grades = client.get(f"{API}/grades", headers=teacher1).json()
    assert len(grades) == 1
    assert grades[0]["grade_value"] == 90
    assert grades[0]["student_name"] == "Andi"
    assert grades[0]["subject_name"] == "Matematika"
    assert grades[0]["task_name"] == "Tugas 1"
    assert grades[0]["grade_type"] == "task"


def test_grade_validation_errors(client, teacher1, class1):
    body = dict(student_id=class1["s1"], subject_id=class1["math_id"])

    out_of_range = _grade(client, teacher1, grade_value=101, **body)
    assert out_of_range.status_code == 400
    assert _error(out_of_range)["message"] == "Grade must be between 0 and 100"

    missing = client.post(f"{API}/grades", headers=teacher1, json={"student_id": class1["s1"]})
    assert missing.status_code == 400
    assert _error(missing)["message"].startswith("Required fields")

    not_a_number = _grade(client, teacher1, grade_value="abc", **body)
    assert not_a_number.status_code == 400
    assert _error(not_a_number)["code"] == "VALIDATION_ERROR"

    assert client.get(f"{API}/grades", headers=teacher1).json() == []


def test_grade_for_foreign_entities_is_not_found(client, teacher1, class1, class2):
    foreign_student = _grade(client, teacher1, student_id=class2["s1"], subject_id=class1["math_id"], grade_value=80)
    assert foreign_student.status_code == 404

    foreign_subject = _grade(client, teacher1, student_id=class1["s1"], subject_id=class2["math_id"], grade_value=80)
    assert foreign_subject.status_code == 404
    assert _error(foreign_subject)["message"] == "Subject not found or access denied"

    foreign_task = _grade(client, teacher1, student_id=class1["s1"], subject_id=class1["math_id"],
                          task_id=class2["t1"], grade_value=80)
    assert foreign_task.status_code == 404


def test_grade_filters_and_delete(client, teacher1, teacher2, class1, class2):
    _grade(client, teacher1, student_id=class1["s1"], subject_id=class1["math_id"], task_id=class1["t1"], grade_value=80)
    _grade(client, teacher1, student_id=class1["s1"], subject_id=class1["math_id"], grade_value=85, semester=2)
    _grade(client, teacher1, student_id=class1["s2"], subject_id=class1["ipa_id"], grade_value=70)
    _grade(client, teacher2, student_id=class2["s1"], subject_id=class2["math_id"], grade_value=60)

    assert len(client.get(f"{API}/grades", headers=teacher1).json()) == 3
    assert len(client.get(f"{API}/grades?semester=2", headers=teacher1).json()) == 1
    assert len(client.get(f"{API}/grades?grade_type=final", headers=teacher1).json()) == 2
    ipa = client.get(f"{API}/grades?subject_id={class1['ipa_id']}", headers=teacher1).json()
    assert [g["student_name"] for g in ipa] == ["Budi"]

    foreign_id = client.get(f"{API}/grades", headers=teacher2).json()[0]["id"]
    assert client.delete(f"{API}/grades/{foreign_id}", headers=teacher1).status_code == 404
    assert client.delete(f"{API}/grades/{foreign_id}", headers=teacher2).status_code == 200
    assert client.get(f"{API}/grades", headers=teacher2).json() == []


def test_student_detail_and_summary_list_grades(client, teacher1, class1):
    _grade(client, teacher1, student_id=class1["s1"], subject_id=class1["math_id"], task_id=class1["t1"], grade_value=80)
    _grade(client, teacher1, student_id=class1["s1"], subject_id=class1["math_id"], grade_value=88)

    detail = client.get(f"{API}/students/{class1['s1']}", headers=teacher1).json()
    assert sorted(g["grade_value"] for g in detail["grades"]) == [80, 88]

    summary = client.get(f"{API}/grades/student/{class1['s1']}/summary", headers=teacher1).json()
    assert summary["student"]["name"] == "Andi"
    assert {(g["grade_type"], g["task_name"]) for g in summary["grades"]} == {("task", "Tugas 1"), ("final", None)}


def test_deleting_student_removes_grades_over_http(client, teacher1, class1):
    _grade(client, teacher1, student_id=class1["s1"], subject_id=class1["math_id"], grade_value=88)
    client.delete(f"{API}/students/{class1['s1']}", headers=teacher1)
    assert client.get(f"{API}/grades", headers=teacher1).json() == []


# ==========================================================
# [Subjects]
# ==========================================================

def test_subjects_are_scoped_to_class(client, teacher1, teacher2):
    subjects = client.get(f"{API}/grades/subjects", headers=teacher1).json()
    assert len(subjects) == 8
    assert {s["class_id"] for s in subjects} == {1}
    assert "Seni" in {s["name"] for s in subjects}


def test_seni_options(client, teacher1):
    options = client.get(f"{API}/grades/subjects/seni-options", headers=teacher1).json()
    assert [o["id"] for o in options] == ["seni_rupa", "seni_teater", "seni_musik", "seni_tari"]


def test_update_seni_renames_only_own_class(client, db, teacher1, teacher2):
    response = client.post(f"{API}/grades/subjects/update-seni", headers=teacher1, json={"seni_type": "seni_musik"})
    assert response.status_code == 200

    names1 = {s["name"] for s in client.get(f"{API}/grades/subjects", headers=teacher1).json()}
    names2 = {s["name"] for s in client.get(f"{API}/grades/subjects", headers=teacher2).json()}
    assert "Seni Musik" in names1 and "Seni" not in names1
    assert "Seni" in names2
    assert subject_id(db, 1, "Seni Musik") is not None

    # nothing left to rename
    again = client.post(f"{API}/grades/subjects/update-seni", headers=teacher1, json={"seni_type": "seni_tari"})
    assert again.status_code == 404


def test_update_seni_rejects_unknown_type(client, teacher1):
    response = client.post(f"{API}/grades/subjects/update-seni", headers=teacher1, json={"seni_type": "seni_lukis"})
    assert response.status_code == 400
    assert _error(response)["message"] == "Invalid seni type"


# ==========================================================
# [Tasks]
# ==========================================================

def test_task_crud(client, teacher1, class1):
    created = client.post(f"{API}/tasks", headers=teacher1, json={
        "name": "Ulangan", "subject_id": class1["ipa_id"], "description": "Bab 1", "due_date": "2024-09-01",
    })
    assert created.status_code == 201
    task_id = created.json()["taskId"]

    task = client.get(f"{API}/tasks/{task_id}", headers=teacher1).json()
    assert task["subject_name"] == "IPA"
    assert task["due_date"] == "2024-09-01"

    ipa_tasks = client.get(f"{API}/tasks?subject_id={class1['ipa_id']}", headers=teacher1).json()
    assert [t["name"] for t in ipa_tasks] == ["Ulangan"]
    assert len(client.get(f"{API}/tasks", headers=teacher1).json()) == 3

    updated = client.put(f"{API}/tasks/{task_id}", headers=teacher1,
                         json={"name": "Ulangan 1", "subject_id": class1["ipa_id"]})
    assert updated.status_code == 200
    assert client.get(f"{API}/tasks/{task_id}", headers=teacher1).json()["name"] == "Ulangan 1"

    assert client.delete(f"{API}/tasks/{task_id}", headers=teacher1).status_code == 200
    assert client.get(f"{API}/tasks/{task_id}", headers=teacher1).status_code == 404


def test_task_requires_name_and_own_subject(client, teacher1, class1, class2):
    missing = client.post(f"{API}/tasks", headers=teacher1, json={"subject_id": class1["math_id"]})
    assert missing.status_code == 400
    assert _error(missing)["message"] == "Task name and subject are required"

    foreign = client.post(f"{API}/tasks", headers=teacher1, json={"name": "X", "subject_id": class2["math_id"]})
    assert foreign.status_code == 404


def test_task_of_other_class_is_invisible(client, teacher2, class1):
    assert client.get(f"{API}/tasks/{class1['t1']}", headers=teacher2).status_code == 404
    assert client.delete(f"{API}/tasks/{class1['t1']}", headers=teacher2).status_code == 404
    assert client.get(f"{API}/tasks/{class1['t1']}/grades", headers=teacher2).status_code == 404


def test_task_grades_lists_every_student(client, teacher1, class1):
    _grade(client, teacher1, student_id=class1["s1"], subject_id=class1["math_id"], task_id=class1["t1"], grade_value=75)

    body = client.get(f"{API}/tasks/{class1['t1']}/grades", headers=teacher1).json()
    assert body["task"]["name"] == "Tugas 1"
    rows = {s["student_name"]: s for s in body["students"]}
    assert rows["Andi"]["grade_value"] == 75
    assert rows["Budi"]["grade_value"] is None
    assert rows["Budi"]["grade_id"] is None


def test_tasks_by_subject(client, teacher1, class1):
    groups = client.get(f"{API}/grades/tasks-by-subject", headers=teacher1).json()
    assert len(groups) == 8
    by_name = {g["subject_name"]: g for g in groups}
    assert {t["name"] for t in by_name["Matematika"]["tasks"]} == {"Tugas 1", "Tugas 2"}
    assert by_name["IPA"]["tasks"] == []


# ==========================================================
# [Classes]
# ==========================================================

def test_my_class_and_stats(client, teacher1, class1):
    _grade(client, teacher1, student_id=class1["s1"], subject_id=class1["math_id"], grade_value=88)

    assert client.get(f"{API}/classes/my-class", headers=teacher1).json()["name"] == "Kelas 1"
    stats = client.get(f"{API}/classes/my-class/stats", headers=teacher1).json()
    assert stats == {
        "class_id": 1, "student_count": 2, "subject_count": 8, "task_count": 2, "grade_count": 1,
    }


# ==========================================================
# [Export]
# ==========================================================

def test_grade_export_download(client, teacher1, class1):
    _grade(client, teacher1, student_id=class1["s1"], subject_id=class1["math_id"], task_id=class1["t1"], grade_value=80)

    response = client.get(f"{API}/export/excel?semester=1&academic_year=2024/2025", headers=teacher1)
    assert response.status_code == 200
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="Grades_By_Subject_Kelas 1_Sem1_20242025_')
    assert disposition.endswith('.xlsx"')

    wb = load_workbook(BytesIO(response.content))
    assert wb.sheetnames == ["Grade Summary", "Matematika"]


def test_student_export_download(client, teacher1, class1):
    response = client.get(f"{API}/export/students/excel", headers=teacher1)
    assert response.status_code == 200
    assert 'filename="Student_List_Kelas 1_' in response.headers["content-disposition"]

    ws = load_workbook(BytesIO(response.content)).active
    assert [c.value for c in ws[1]] == ["No", "Student Name", "NIS", "Registered"]
    assert ws.max_row == 3


def test_grade_export_with_non_ascii_year(client, teacher1, class1):
    response = client.get(f"{API}/export/excel", headers=teacher1, params={"academic_year": "2024–2025"})
    assert response.status_code == 200
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE

    disposition = response.headers["content-disposition"]
    assert 'filename="Grades_By_Subject_Kelas 1_2024_2025_' in disposition
    assert "filename*=UTF-8''Grades_By_Subject_Kelas%201_2024%E2%80%932025_" in disposition
    load_workbook(BytesIO(response.content))


def test_grade_export_with_quote_in_year(client, teacher1, class1):
    response = client.get(f"{API}/export/excel", headers=teacher1, params={"academic_year": '2024"2025'})
    assert response.status_code == 200

    disposition = response.headers["content-disposition"]
    assert 'filename="Grades_By_Subject_Kelas 1_20242025_' in disposition
    assert disposition.count('"') == 2


def test_export_requires_token(client):
    assert client.get(f"{API}/export/excel").status_code == 401


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.headers["X-Request-ID"]


def test_database_is_initialised_once_at_startup(monkeypatch):
    calls = []
    monkeypatch.setattr(main, "init_db", lambda: calls.append("init"))

    with TestClient(main.app) as client:
        assert calls == ["init"]
        assert client.get("/health").status_code == 200
    assert calls == ["init"]
