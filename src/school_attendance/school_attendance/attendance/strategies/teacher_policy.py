from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ...common.datetime_utils import CalendarDay
from ...core.enums import SubjectKind
from ...roster.model import Teacher
from ...roster.repository import TeacherRepository
from ..model import AttendanceEntry, AttendanceRecord, DaySummary, ModificationAudit, StatusCounts
from .base import SubjectPolicy


def default_modification_reason(old: str, new: str) -> str:
    return f"Status changed from {old} to {new}"


class TeacherPolicy(SubjectPolicy):
    """Teachers: amendments carry an audit trail and batches report a day summary."""

    kind = SubjectKind.TEACHER
    reports_day_summary = True

    def __init__(self, teachers: TeacherRepository):
        self._teachers = teachers

    def resolve_subject(self, subject_id: str) -> Optional[Teacher]:
        return self._teachers.get_by_id(subject_id)

    def amendment_audit(
        self,
        *,
        existing: AttendanceRecord,
        entry: AttendanceEntry,
        actor_id: Optional[str],
        now: datetime,
    ) -> Optional[ModificationAudit]:
        reason = entry.modification_reason or default_modification_reason(existing.status.value, entry.status.value)
        return ModificationAudit(modified_by=actor_id or "system", modified_at=now, reason=reason)

    def day_summary(self, *, day: CalendarDay, records: Sequence[AttendanceRecord]) -> Optional[DaySummary]:
        return DaySummary(day=day.day, counts=StatusCounts.of(records))
