from datetime import date, datetime

from src.school_attendance.school_attendance.access.scope import RosterScope
from src.school_attendance.school_attendance.common.datetime_utils import DateWindow
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, SubjectKind
from src.school_attendance.school_attendance.reports.service import AttendanceReportService
from src.school_attendance.school_attendance.roster.model import Student

from tests.fakes import FakeAttendanceRepo, FakeStudentRepo, FixedCalendar, sample_roster

P, A, L, H = AttendanceStatus.PRESENT, AttendanceStatus.ABSENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY
MARCH = DateWindow.for_month(2025, 3)


def _service(repo, students=None, now=datetime(2025, 3, 20, 9, 0)):
    default_students, teachers, parents = sample_roster()
    return AttendanceReportService(repo, students or default_students, teachers, parents, FixedCalendar(now))


def _student_repo():
    repo = FakeAttendanceRepo()
    repo.add(SubjectKind.STUDENT, "S1", date(2025, 3, 1), P)
    repo.add(SubjectKind.STUDENT, "S1", date(2025, 3, 2), A, reason="Sick")
    repo.add(SubjectKind.STUDENT, "S1", date(2025, 3, 3), L)
    repo.add(SubjectKind.STUDENT, "S1", date(2025, 4, 1), P)
    repo.add(SubjectKind.STUDENT, "S3", date(2025, 3, 1), P)
    return repo


def test_student_summary_counts_non_present_as_absent():
    summary = _service(_student_repo()).student_summary("S1", MARCH)

    assert summary == {
        "totalDays": 3,
        "presents": 1,
        "absents": 2,
        "attendancePercentage": "33.3%",
        "dailyStatus": {"2025-03-01": "present", "2025-03-02": "absent", "2025-03-03": "late"},
    }


def test_summary_without_records_is_zero_percent():
    summary = _service(FakeAttendanceRepo()).student_summary("S2", MARCH)

    assert summary["totalDays"] == 0
    assert summary["attendancePercentage"] == "0%"
    assert summary["dailyStatus"] == {}


def test_guardian_summaries_cover_every_linked_child():
    rows = _service(_student_repo()).guardian_summaries("P1", MARCH)

    assert [(r["studentId"], r["studentName"], r["class"], r["section"]) for r in rows] == [
        ("S1", "Aarav", "10", "A"),
        ("S3", "Kabir", "10", "B"),
    ]
    assert rows[1]["attendancePercentage"] == "100.0%"
    assert all((r["month"], r["year"]) == (3, 2025) for r in rows)


def test_guardian_summaries_for_unknown_parent_is_empty():
    assert _service(_student_repo()).guardian_summaries("P404", MARCH) == []


def test_teacher_summary_keeps_status_breakdown_and_detail():
    repo = FakeAttendanceRepo()
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 3), P)
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 4), L, notes="Traffic")
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 5), H)
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 6), A, reason="Leave")

    summary = _service(repo).teacher_summary("T1", MARCH)

    assert (summary["presents"], summary["absents"], summary["late"], summary["halfDay"]) == (1, 1, 1, 1)
    assert summary["totalDays"] == 4
    assert summary["attendancePercentage"] == "25.0%"
    assert summary["dailyStatus"]["2025-03-04"] == {
        "status": "late",
        "reason": "",
        "notes": "Traffic",
        "isModified": False,
        "modifiedAt": None,
    }


def test_monthly_sheets_group_by_section_with_one_column_per_day():
    svc = _service(_student_repo())
    students, teachers, _ = sample_roster()
    scope = RosterScope(tuple(students.list_by_sections(teachers.get_by_id("T1").section_assignments)))

    report = svc.monthly_sheets(scope, MARCH)

    assert set(report.sheets) == {"10-A", "10-B"}
    assert len(report.days) == 31
    assert len(report.header) == 3 + 31 + 3
    aarav = next(r for r in report.sheets["10-A"] if r.name == "Aarav")
    assert aarav.cells == {date(2025, 3, 1): "Present", date(2025, 3, 2): "Absent", date(2025, 3, 3): "Absent"}
    assert (aarav.presents, aarav.absents, aarav.percentage) == (1, 2, "33.3%")
    diya = next(r for r in report.sheets["10-A"] if r.name == "Diya")
    assert diya.as_list(report.days)[-3:] == [0, 0, "0%"]


def test_monthly_sheets_for_empty_scope_are_empty():
    report = _service(_student_repo()).monthly_sheets(RosterScope(()), MARCH)

    assert report.sheets == {}
    assert report.row_count() == 0


def _ten_students():
    return FakeStudentRepo(
        Student(f"X{i}", f"Student {i}", "9", "A" if i < 6 else "B") for i in range(10)
    )


def test_daily_roster_percentage_uses_roster_size():
    students = _ten_students()
    repo = FakeAttendanceRepo()
    day = date(2025, 3, 5)
    for i in range(7):
        repo.add(SubjectKind.STUDENT, f"X{i}", day, P)
    repo.add(SubjectKind.STUDENT, "X7", day, A)

    summary = _service(repo, students).daily_student_summary(RosterScope(tuple(students.list_all())), day)

    assert summary == {
        "totalStudents": 10,
        "presents": 7,
        "absents": 1,
        "attendancePercentage": 70,
        "date": "2025-03-05",
    }


def test_daily_summary_class_filter_and_section_override():
    students = _ten_students()
    repo = FakeAttendanceRepo()
    day = date(2025, 3, 5)
    repo.add(SubjectKind.STUDENT, "X0", day, P)
    repo.add(SubjectKind.STUDENT, "X9", day, P)
    svc = _service(repo, students)
    scope = RosterScope(tuple(students.list_all()))

    section_a = svc.daily_student_summary(scope, day, class_filter="9-A")
    section_b = svc.daily_student_summary(scope, day, class_filter="9-A", section_filter="B")
    everyone = svc.daily_student_summary(scope, day, class_filter="all")

    assert (section_a["totalStudents"], section_a["presents"], section_a["attendancePercentage"]) == (6, 1, 17)
    assert (section_b["totalStudents"], section_b["presents"], section_b["attendancePercentage"]) == (4, 1, 25)
    assert everyone["totalStudents"] == 10


def test_daily_teacher_summary():
    repo = FakeAttendanceRepo()
    day = date(2025, 3, 5)
    repo.add(SubjectKind.TEACHER, "T1", day, L)

    summary = _service(repo).daily_teacher_summary(day)

    assert summary == {
        "totalTeachers": 2,
        "presents": 0,
        "absents": 0,
        "late": 1,
        "halfDay": 0,
        "attendancePercentage": 0,
        "date": "2025-03-05",
    }


def test_teacher_window_overview_defaults_to_last_thirty_days():
    repo = FakeAttendanceRepo()
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 19), P)
    repo.add(SubjectKind.TEACHER, "T2", date(2025, 3, 19), P, is_modified=True)
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 18), A)
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 1, 2), P)

    overview = _service(repo).teacher_window_overview()

    assert overview["totalRecords"] == 3
    assert overview["presentRecords"] == 2
    assert overview["modifiedRecords"] == 1
    assert overview["attendancePercentage"] == 66.7
    assert overview["period"] == {"start": "2025-02-18", "end": "2025-03-20"}


def test_teacher_monthly_report_lists_every_teacher():
    repo = FakeAttendanceRepo()
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 3), P)
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 4), A)

    report = _service(repo).teacher_monthly_report(2025, 3)

    by_id = {row["teacherId"]: row for row in report["data"]}
    assert by_id["T1"]["attendancePercentage"] == "50.0%"
    assert by_id["T2"]["totalDays"] == 0
    assert by_id["T2"]["subject"] == "Science"
    assert "dailyStatus" not in by_id["T1"]
    assert report["period"] == {"year": 2025, "month": 3, "monthName": "March"}


def test_teachers_without_attendance():
    repo = FakeAttendanceRepo()
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 5), P)

    missing = _service(repo).teachers_without_attendance(date(2025, 3, 5))

    assert [t.teacher_id for t in missing] == ["T2"]


def test_teacher_statistics_today_month_and_trend():
    repo = FakeAttendanceRepo()
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 20), P)
    repo.add(SubjectKind.TEACHER, "T2", date(2025, 3, 20), A)
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 3, 2), P)
    repo.add(SubjectKind.TEACHER, "T1", date(2025, 2, 27), P)

    stats = _service(repo).teacher_statistics()

    assert stats["today"] == {"present": 1, "absent": 1, "late": 0, "halfDay": 0, "total": 2, "percentage": 50}
    assert stats["monthly"]["total"] == 3
    assert stats["monthly"]["percentage"] == 67
    assert stats["totalTeachers"] == 2
    assert stats["trends"] == [{"date": "2025-03-20", "present": 1, "absent": 1, "late": 0, "total": 2}]
