from __future__ import annotations

import calendar as calendar_names
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from ..access.scope import RosterScope
from ..attendance.model import AttendanceRecord, StatusCounts
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import DateWindow, LocalCalendar
from ..core.constants import DEFAULT_OVERVIEW_DAYS, DEFAULT_TREND_DAYS
from ..core.enums import AttendanceStatus, SubjectKind
from ..roster.model import Teacher
from ..roster.repository import ParentRepository, StudentRepository, TeacherRepository
from .calculator.base import PercentageCalculator
from .calculator.percentage import RecordedDaysPercentage, RecordSharePercentage, RosterPercentage
from .model import ABSENT_LABEL, PRESENT_LABEL, AggregateRow, SheetRow, TabularReport


class AttendanceReportService:
    """Aggregator: folds stored records of a window into per-subject rows.

    Every read is side-effect-free. A window or scope with no subjects gives
    an empty result, never an error.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        teachers: TeacherRepository,
        parents: ParentRepository,
        calendar: LocalCalendar,
        *,
        recorded_days: Optional[PercentageCalculator] = None,
        roster: Optional[PercentageCalculator] = None,
    ):
        self._attendance = attendance
        self._students = students
        self._teachers = teachers
        self._parents = parents
        self._calendar = calendar
        self._recorded_days = recorded_days or RecordedDaysPercentage()
        self._roster = roster or RosterPercentage()
        self._overview = RecordSharePercentage(digits=1)
        self._whole = RecordSharePercentage(digits=0)

    # ----- folding -----

    def fold(self, kind: SubjectKind, window: DateWindow, subject_ids: Iterable[str]) -> dict[str, AggregateRow]:
        ids = list(dict.fromkeys(str(s) for s in subject_ids))
        if not ids:
            return {}

        by_subject: dict[str, list[AttendanceRecord]] = {sid: [] for sid in ids}
        records = self._attendance.list_in_window(kind=kind, start=window.start, end=window.end, subject_ids=ids)
        for r in records:
            if r.subject_id in by_subject and window.contains(r.attend_date):
                by_subject[r.subject_id].append(r)

        return {
            sid: AggregateRow(subject_id=sid, counts=StatusCounts.of(recs), records=tuple(recs))
            for sid, recs in by_subject.items()
        }

    # ----- summary shape -----

    def _student_shape(self, row: AggregateRow) -> dict:
        return {
            "totalDays": row.total_days,
            "presents": row.counts.present,
            "absents": row.counts.not_present,
            "attendancePercentage": self._recorded_days.render(row.counts.present, row.total_days),
            "dailyStatus": {r.attend_date.isoformat(): r.status.value for r in row.records},
        }

    def _teacher_shape(self, row: AggregateRow) -> dict:
        return {
            "totalDays": row.total_days,
            "presents": row.counts.present,
            "absents": row.counts.absent,
            "late": row.counts.late,
            "halfDay": row.counts.half_day,
            "attendancePercentage": self._recorded_days.render(row.counts.present, row.total_days),
            "dailyStatus": {
                r.attend_date.isoformat(): {
                    "status": r.status.value,
                    "reason": r.reason,
                    "notes": r.notes,
                    "isModified": r.is_modified,
                    "modifiedAt": r.modified_at.isoformat() if r.modified_at else None,
                }
                for r in row.records
            },
        }

    def student_summary(self, student_id: str, window: DateWindow) -> dict:
        row = self.fold(SubjectKind.STUDENT, window, [student_id])[str(student_id)]
        return self._student_shape(row)

    def guardian_summaries(self, parent_id: str, window: DateWindow) -> list[dict]:
        parent = self._parents.get_by_id(parent_id)
        if not parent:
            return []

        children = self._students.list_by_parent(parent.parent_id)
        rows = self.fold(SubjectKind.STUDENT, window, [c.student_id for c in children])
        return [
            {
                "studentId": c.student_id,
                "studentName": c.name,
                "class": c.class_name,
                "section": c.section,
                "month": window.start.month,
                "year": window.start.year,
                **self._student_shape(rows[c.student_id]),
            }
            for c in children
        ]

    def teacher_summary(self, teacher_id: str, window: DateWindow) -> dict:
        row = self.fold(SubjectKind.TEACHER, window, [teacher_id])[str(teacher_id)]
        return self._teacher_shape(row)

    # ----- tabular shape -----

    def monthly_sheets(self, scope: RosterScope, window: DateWindow) -> TabularReport:
        days = list(window.days())
        report = TabularReport(days=days)
        rows = self.fold(SubjectKind.STUDENT, window, scope.subject_ids)

        for student in scope.students:
            row = rows[student.student_id]
            cells = {r.attend_date: PRESENT_LABEL if r.status == AttendanceStatus.PRESENT else ABSENT_LABEL for r in row.records}
            report.sheets.setdefault(student.section_key, []).append(
                SheetRow(
                    name=student.name,
                    class_name=student.class_name,
                    section=student.section,
                    cells=cells,
                    presents=row.counts.present,
                    absents=row.counts.not_present,
                    percentage=self._recorded_days.render(row.counts.present, row.total_days),
                )
            )
        return report

    # ----- same-day rollups -----

    def daily_student_summary(
        self,
        scope: RosterScope,
        day: date,
        *,
        class_filter: Optional[str] = None,
        section_filter: Optional[str] = None,
    ) -> dict:
        scope = self._filter_scope(scope, class_filter, section_filter)
        window = DateWindow.single(day)
        counts = StatusCounts.of(
            self._attendance.list_in_window(
                kind=SubjectKind.STUDENT, start=window.start, end=window.end, subject_ids=scope.subject_ids
            )
        )
        return {
            "totalStudents": len(scope),
            "presents": counts.present,
            "absents": counts.absent,
            "attendancePercentage": self._roster.render(counts.present, len(scope)),
            "date": day.isoformat(),
        }

    @staticmethod
    def _filter_scope(scope: RosterScope, class_filter: Optional[str], section_filter: Optional[str]) -> RosterScope:
        if not class_filter or class_filter == "all":
            return scope

        class_name, _, section = class_filter.partition("-")
        if section_filter and section_filter != "all":
            section = section_filter
        return scope.filter_section(class_name, section)

    def daily_teacher_summary(self, day: date) -> dict:
        total_teachers = len(self._teachers.list_all())
        window = DateWindow.single(day)
        counts = StatusCounts.of(self._attendance.list_in_window(kind=SubjectKind.TEACHER, start=window.start, end=window.end))
        return {
            "totalTeachers": total_teachers,
            "presents": counts.present,
            "absents": counts.absent,
            "late": counts.late,
            "halfDay": counts.half_day,
            "attendancePercentage": self._roster.render(counts.present, total_teachers),
            "date": day.isoformat(),
        }

    # ----- teacher administration views -----

    def teacher_window_overview(self, start: Optional[date] = None, end: Optional[date] = None) -> dict:
        today = self._calendar.today().day
        end = end or today
        start = start or (today - timedelta(days=DEFAULT_OVERVIEW_DAYS))
        window = DateWindow.inclusive(start, end)

        records = self._attendance.list_in_window(kind=SubjectKind.TEACHER, start=window.start, end=window.end)
        counts = StatusCounts.of(records)
        return {
            "totalRecords": counts.total,
            "presentRecords": counts.present,
            "absentRecords": counts.absent,
            "lateRecords": counts.late,
            "halfDayRecords": counts.half_day,
            "modifiedRecords": sum(1 for r in records if r.is_modified),
            "attendancePercentage": self._overview.render(counts.present, counts.total),
            "period": {"start": start.isoformat(), "end": end.isoformat()},
        }

    def teacher_monthly_report(self, year: int, month: int) -> dict:
        window = DateWindow.for_month(year, month)
        teachers: Sequence[Teacher] = self._teachers.list_all()
        rows = self.fold(SubjectKind.TEACHER, window, [t.teacher_id for t in teachers])

        data = []
        for t in teachers:
            shape = self._teacher_shape(rows[t.teacher_id])
            shape.pop("dailyStatus")
            data.append({"teacherId": t.teacher_id, "teacherName": t.name, "subject": t.subject or "N/A", **shape})

        return {
            "data": data,
            "period": {"year": int(year), "month": int(month), "monthName": calendar_names.month_name[int(month)]},
        }

    def teachers_without_attendance(self, day: date) -> list[Teacher]:
        window = DateWindow.single(day)
        marked = {r.subject_id for r in self._attendance.list_in_window(kind=SubjectKind.TEACHER, start=window.start, end=window.end)}
        return [t for t in self._teachers.list_all() if t.teacher_id not in marked]

    def teacher_statistics(self, today: Optional[date] = None) -> dict:
        today = today or self._calendar.today().day
        tomorrow = today + timedelta(days=1)

        def _stats(start: date) -> dict:
            counts = StatusCounts.of(self._attendance.list_in_window(kind=SubjectKind.TEACHER, start=start, end=tomorrow))
            return {
                "present": counts.present,
                "absent": counts.absent,
                "late": counts.late,
                "halfDay": counts.half_day,
                "total": counts.total,
                "percentage": self._whole.render(counts.present, counts.total),
            }

        trend_start = today - timedelta(days=DEFAULT_TREND_DAYS)
        by_day: dict[date, StatusCounts] = {}
        for r in self._attendance.list_in_window(kind=SubjectKind.TEACHER, start=trend_start, end=tomorrow):
            by_day.setdefault(r.attend_date, StatusCounts()).add(r.status)

        return {
            "today": _stats(today),
            "monthly": _stats(today.replace(day=1)),
            "totalTeachers": len(self._teachers.list_all()),
            "trends": [
                {"date": d.isoformat(), "present": c.present, "absent": c.absent, "late": c.late, "total": c.total}
                for d, c in sorted(by_day.items())
            ],
        }
