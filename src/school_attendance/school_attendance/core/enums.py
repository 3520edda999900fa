from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles an upstream auth layer may place in the session."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class SubjectKind(str, Enum):
    """Whose attendance a record tracks."""

    STUDENT = "student"
    TEACHER = "teacher"


class AttendanceStatus(str, Enum):
    """Normalized attendance status stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half-day"


class Capability(str, Enum):
    MARK_STUDENT_ATTENDANCE = "mark_student_attendance"
    VIEW_ROSTER_REPORTS = "view_roster_reports"
    VIEW_OWN_ATTENDANCE = "view_own_attendance"
    VIEW_CHILDREN_ATTENDANCE = "view_children_attendance"
    MANAGE_TEACHER_ATTENDANCE = "manage_teacher_attendance"
    MANAGE_PARENTS = "manage_parents"
    VIEW_CALENDAR = "view_calendar"
    MANAGE_CALENDAR = "manage_calendar"


class CalendarState(str, Enum):
    """Lifecycle of the external calendar client, resolved once at startup."""

    UNCONFIGURED = "unconfigured"
    READY = "ready"
    FAILED = "failed"
