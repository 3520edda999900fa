from datetime import date, datetime, timezone

import pytest

from src.school_attendance.school_attendance.access.model import Actor
from src.school_attendance.school_attendance.attendance.factory import SubjectPolicyFactory
from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.attendance.service import SubmissionNormalizer
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, Role, SubjectKind
from src.school_attendance.school_attendance.core.exceptions import ValidationError

from tests.fakes import FakeAttendanceRepo, FixedCalendar, RecordingNotifier, sample_roster

ADMIN = Actor(user_id="u-admin", role=Role.ADMIN)
MARCH_5 = date(2025, 3, 5)


def _normalizer(repo=None, notifier=None, now=datetime(2025, 3, 5, 10, 0)):
    students, teachers, parents = sample_roster()
    repo = repo or FakeAttendanceRepo()
    notifier = notifier or RecordingNotifier()
    factory = SubjectPolicyFactory(students, teachers, parents, notifier)
    return SubmissionNormalizer(repo, factory, FixedCalendar(now)), repo, notifier


def _students(repo):
    return [r for r in repo.records.values() if r.subject_kind == SubjectKind.STUDENT]


def test_first_occurrence_in_batch_wins():
    normalizer, repo, _ = _normalizer()

    result = normalizer.submit(
        SubjectKind.STUDENT,
        [
            {"subjectId": "S1", "status": "absent", "reason": "Sick", "date": "2025-03-05"},
            {"subjectId": "S1", "status": "present", "date": "2025-03-05"},
        ],
        actor=ADMIN,
    )

    stored = _students(repo)
    assert len(stored) == 1
    assert stored[0].status == AttendanceStatus.ABSENT
    assert stored[0].reason == "Sick"
    assert result.count == 1
    assert result.skipped_subjects == ["S1"]


def test_date_and_datetime_on_same_local_day_are_duplicates():
    normalizer, repo, _ = _normalizer()

    result = normalizer.submit(
        SubjectKind.STUDENT,
        [
            {"studentId": "S2", "status": "present", "date": "2025-03-05"},
            {"studentId": "S2", "status": "late", "date": "2025-03-05T09:15:00"},
        ],
    )

    assert result.skipped_subjects == ["S2"]
    assert len(_students(repo)) == 1


def test_second_batch_overwrites_instead_of_duplicating():
    normalizer, repo, _ = _normalizer()

    normalizer.submit(SubjectKind.STUDENT, [{"subjectId": "S1", "status": "absent", "reason": "Fever", "date": "2025-03-05"}])
    result = normalizer.submit(SubjectKind.STUDENT, [{"subjectId": "S1", "status": "present", "date": "2025-03-05"}])

    stored = _students(repo)
    assert len(stored) == 1
    assert stored[0].status == AttendanceStatus.PRESENT
    assert stored[0].reason == ""
    assert result.count == 1
    assert repo.create_calls == 1


def test_reason_is_dropped_unless_absent():
    normalizer, repo, _ = _normalizer()

    normalizer.submit(SubjectKind.STUDENT, [{"subjectId": "S2", "status": "late", "reason": "Bus", "date": "2025-03-05"}])

    assert _students(repo)[0].reason == ""


def test_unknown_subject_fails_without_aborting_siblings():
    normalizer, repo, _ = _normalizer()

    result = normalizer.submit(
        SubjectKind.STUDENT,
        [
            {"subjectId": "S99", "status": "present", "date": "2025-03-05"},
            {"subjectId": "S2", "status": "present", "date": "2025-03-05"},
        ],
    )

    assert result.count == 1
    assert [(f.index, f.subject_id) for f in result.failed] == [(0, "S99")]
    assert [r.subject_id for r in _students(repo)] == ["S2"]


def test_malformed_entries_are_reported_and_do_not_claim_the_day():
    normalizer, repo, _ = _normalizer()

    result = normalizer.submit(
        SubjectKind.STUDENT,
        [
            {"subjectId": "S1", "status": "on-leave", "date": "2025-03-05"},
            {"status": "present"},
            {"subjectId": "S2", "status": "present", "date": "05/03/2025"},
            "not-an-object",
            {"subjectId": "S1", "status": "present", "date": "2025-03-05"},
        ],
    )

    assert [f.index for f in result.failed] == [0, 1, 2, 3]
    assert result.skipped_subjects == []
    assert result.count == 1
    assert _students(repo)[0].subject_id == "S1"


def test_entries_default_to_today_in_configured_timezone():
    # 20:00 UTC on the 5th is already the 6th in Asia/Kolkata.
    now = datetime(2025, 3, 5, 20, 0, tzinfo=timezone.utc)
    normalizer, repo, _ = _normalizer(now=now)

    normalizer.submit(
        SubjectKind.STUDENT,
        [
            {"subjectId": "S1", "status": "present"},
            {"subjectId": "S2", "status": "present", "date": "2025-03-05T20:00:00Z"},
        ],
    )

    assert {r.attend_date for r in _students(repo)} == {date(2025, 3, 6)}


def test_creation_records_the_marking_actor():
    normalizer, repo, _ = _normalizer()

    normalizer.submit(SubjectKind.STUDENT, [{"subjectId": "S2", "status": "present"}], actor=ADMIN)

    stored = _students(repo)[0]
    assert stored.marked_by == "u-admin"
    assert stored.marked_by_role == Role.ADMIN
    assert stored.is_modified is False


def test_absence_notifies_linked_guardian_only():
    normalizer, _, notifier = _normalizer()

    normalizer.submit(
        SubjectKind.STUDENT,
        [
            {"subjectId": "S1", "status": "absent", "reason": "Sick", "date": "2025-03-05"},
            {"subjectId": "S2", "status": "absent", "date": "2025-03-05"},
            {"subjectId": "S3", "status": "present", "date": "2025-03-05"},
        ],
    )

    assert notifier.calls == [("S1", "P1", MARCH_5, "Sick")]


def test_failing_notifier_never_fails_the_entry():
    normalizer, repo, _ = _normalizer(notifier=RecordingNotifier(fail=True))

    result = normalizer.submit(SubjectKind.STUDENT, [{"subjectId": "S1", "status": "absent", "date": "2025-03-05"}])

    assert result.count == 1
    assert result.failed == []
    assert _students(repo)[0].status == AttendanceStatus.ABSENT


def test_duplicate_key_on_insert_is_retried_as_update():
    repo = FakeAttendanceRepo()
    repo.competing_insert = AttendanceRecord(
        record_id=50,
        subject_kind=SubjectKind.STUDENT,
        subject_id="S1",
        attend_date=MARCH_5,
        status=AttendanceStatus.PRESENT,
    )
    normalizer, repo, _ = _normalizer(repo=repo)

    result = normalizer.submit(
        SubjectKind.STUDENT, [{"subjectId": "S1", "status": "absent", "reason": "Sick", "date": "2025-03-05"}]
    )

    assert result.count == 1
    assert result.failed == []
    assert list(repo.records) == [50]
    assert repo.records[50].status == AttendanceStatus.ABSENT


def test_teacher_amendment_carries_audit_trail():
    repo = FakeAttendanceRepo()
    repo.add(SubjectKind.TEACHER, "T1", MARCH_5, AttendanceStatus.PRESENT, marked_by="u-first")
    normalizer, repo, _ = _normalizer(repo=repo)

    normalizer.submit(SubjectKind.TEACHER, [{"teacherId": "T1", "status": "late", "date": "2025-03-05"}], actor=ADMIN)

    record = repo.get_for_subject_and_day(SubjectKind.TEACHER, "T1", MARCH_5)
    assert record.status == AttendanceStatus.LATE
    assert record.is_modified is True
    assert record.modified_by == "u-admin"
    assert record.modification_reason == "Status changed from present to late"
    assert record.marked_by == "u-first"


def test_teacher_amendment_keeps_supplied_modification_reason():
    repo = FakeAttendanceRepo()
    repo.add(SubjectKind.TEACHER, "T1", MARCH_5, AttendanceStatus.ABSENT, reason="Leave")
    normalizer, repo, _ = _normalizer(repo=repo)

    normalizer.submit(
        SubjectKind.TEACHER,
        [{"teacherId": "T1", "status": "present", "date": "2025-03-05", "modificationReason": "Arrived after all"}],
    )

    record = repo.get_for_subject_and_day(SubjectKind.TEACHER, "T1", MARCH_5)
    assert record.modification_reason == "Arrived after all"
    assert record.modified_by == "system"


def test_student_amendment_has_no_audit_trail():
    repo = FakeAttendanceRepo()
    repo.add(SubjectKind.STUDENT, "S1", MARCH_5, AttendanceStatus.PRESENT)
    normalizer, repo, _ = _normalizer(repo=repo)

    normalizer.submit(SubjectKind.STUDENT, [{"subjectId": "S1", "status": "absent", "date": "2025-03-05"}], actor=ADMIN)

    record = repo.get_for_subject_and_day(SubjectKind.STUDENT, "S1", MARCH_5)
    assert record.status == AttendanceStatus.ABSENT
    assert record.is_modified is False


def test_teacher_batch_reports_summary_from_stored_state():
    repo = FakeAttendanceRepo()
    repo.add(SubjectKind.TEACHER, "T2", MARCH_5, AttendanceStatus.ABSENT)
    normalizer, repo, _ = _normalizer(repo=repo)

    result = normalizer.submit(SubjectKind.TEACHER, [{"teacherId": "T1", "status": "half-day", "date": "2025-03-05"}])

    assert result.to_dict()["summary"] == {
        "total": 2,
        "present": 0,
        "absent": 1,
        "late": 0,
        "halfDay": 1,
        "date": "2025-03-05",
    }


def test_student_batch_has_no_summary():
    normalizer, _, _ = _normalizer()

    body = normalizer.submit(SubjectKind.STUDENT, [{"subjectId": "S1", "status": "present"}]).to_dict()

    assert "summary" not in body
    assert body["message"] == "Attendance updated successfully"


def test_empty_batch_reports_no_changes():
    normalizer, _, _ = _normalizer()

    body = normalizer.submit(SubjectKind.STUDENT, []).to_dict()

    assert body == {"message": "No changes made", "count": 0, "skippedSubjects": [], "failedEntries": []}


def test_non_list_payload_is_rejected():
    normalizer, _, _ = _normalizer()

    with pytest.raises(ValidationError):
        normalizer.submit(SubjectKind.STUDENT, None)
    with pytest.raises(ValidationError):
        normalizer.submit(SubjectKind.STUDENT, {"subjectId": "S1", "status": "present"})


def test_non_text_reason_fails_only_that_entry():
    normalizer, repo, _ = _normalizer()

    result = normalizer.submit(
        SubjectKind.STUDENT,
        [
            {"subjectId": "S1", "status": "present", "date": "2025-03-05"},
            {"subjectId": "S2", "status": "absent", "reason": 42, "date": "2025-03-05"},
            {"subjectId": "S3", "status": "present", "date": "2025-03-05"},
        ],
    )

    assert result.count == 2
    assert [(f.index, f.subject_id) for f in result.failed] == [(1, "S2")]
    assert sorted(r.subject_id for r in _students(repo)) == ["S1", "S3"]


def test_non_text_modification_reason_fails_only_that_entry():
    normalizer, repo, _ = _normalizer()

    result = normalizer.submit(
        SubjectKind.TEACHER,
        [
            {"teacherId": "T1", "status": "late", "date": "2025-03-05", "modificationReason": ["late bus"]},
            {"teacherId": "T2", "status": "present", "date": "2025-03-05"},
        ],
    )

    assert result.count == 1
    assert [f.index for f in result.failed] == [0]
    assert repo.get_for_subject_and_day(SubjectKind.TEACHER, "T1", MARCH_5) is None
