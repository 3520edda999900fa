from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.scope import ScopeResolver
from .attendance.factory import SubjectPolicyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import SubmissionNormalizer
from .calendar_sync.config import CalendarConfig
from .calendar_sync.service import CalendarService
from .common.datetime_utils import LocalCalendar
from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import AttendanceReportService
from .roster.mysql_parent_repository import MySQLParentRepository
from .roster.mysql_student_repository import MySQLStudentRepository
from .roster.mysql_teacher_repository import MySQLTeacherRepository
from .roster.service import ParentService
from .teacher_attendance.service import TeacherAttendanceService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    calendar: LocalCalendar

    students_repo: MySQLStudentRepository
    teachers_repo: MySQLTeacherRepository
    parents_repo: MySQLParentRepository
    attendance_repo: MySQLAttendanceRepository

    scope_resolver: ScopeResolver
    normalizer: SubmissionNormalizer
    report_service: AttendanceReportService
    teacher_attendance_service: TeacherAttendanceService
    parent_service: ParentService
    calendar_service: CalendarService


def build_container(
    *,
    db_config: dict,
    timezone: str = DEFAULT_TIMEZONE,
    calendar: Optional[CalendarConfig] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    local_calendar = LocalCalendar(timezone)

    students_repo = MySQLStudentRepository(conn)
    teachers_repo = MySQLTeacherRepository(conn)
    parents_repo = MySQLParentRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    scope_resolver = ScopeResolver(students_repo, teachers_repo, parents_repo)
    normalizer = SubmissionNormalizer(
        attendance_repo,
        SubjectPolicyFactory(students_repo, teachers_repo, parents_repo),
        local_calendar,
    )
    report_service = AttendanceReportService(attendance_repo, students_repo, teachers_repo, parents_repo, local_calendar)
    teacher_attendance_service = TeacherAttendanceService(attendance_repo, teachers_repo, local_calendar)
    parent_service = ParentService(parents_repo, students_repo)
    calendar_service = CalendarService(calendar or CalendarConfig(timezone=timezone))

    return Container(
        conn=conn,
        calendar=local_calendar,
        students_repo=students_repo,
        teachers_repo=teachers_repo,
        parents_repo=parents_repo,
        attendance_repo=attendance_repo,
        scope_resolver=scope_resolver,
        normalizer=normalizer,
        report_service=report_service,
        teacher_attendance_service=teacher_attendance_service,
        parent_service=parent_service,
        calendar_service=calendar_service,
    )
