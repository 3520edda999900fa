from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..access.model import Actor
from ..attendance.model import AttendanceRecord, ModificationAudit
from ..attendance.repository import AttendanceRepository
from ..attendance.service import reason_for
from ..attendance.strategies.teacher_policy import default_modification_reason
from ..common.datetime_utils import DateWindow, LocalCalendar
from ..common.validators import require_status
from ..core.constants import DEFAULT_PAGE_LIMIT
from ..core.enums import AttendanceStatus, SubjectKind
from ..core.exceptions import NotFoundError, ValidationError
from ..roster.model import Teacher
from ..roster.repository import TeacherRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryFilter:
    start: Optional[date] = None
    end: Optional[date] = None
    teacher_id: Optional[str] = None
    status: Optional[AttendanceStatus] = None
    subject: Optional[str] = None


@dataclass(frozen=True)
class Page:
    data: Sequence[dict]
    current: int
    limit: int
    total: int

    def to_dict(self) -> dict:
        return {
            "success": True,
            "data": list(self.data),
            "pagination": {
                "current": self.current,
                "pages": math.ceil(self.total / self.limit) if self.limit else 0,
                "total": self.total,
            },
        }


class TeacherAttendanceService:
    """Use case: administer stored teacher attendance (admin) and self-service reads."""

    def __init__(self, attendance: AttendanceRepository, teachers: TeacherRepository, calendar: LocalCalendar):
        self._attendance = attendance
        self._teachers = teachers
        self._calendar = calendar

    def _view(self, record: AttendanceRecord, teachers: dict[str, Teacher]) -> dict:
        out = record.to_dict()
        t = teachers.get(record.subject_id)
        out["teacherId"] = record.subject_id
        out["teacherName"] = t.name if t else "Unknown Teacher"
        out["subject"] = (t.subject if t else None) or "N/A"
        return out

    def _teacher_index(self) -> dict[str, Teacher]:
        return {t.teacher_id: t for t in self._teachers.list_all()}

    def history(self, filters: HistoryFilter, *, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> Page:
        page, limit = max(int(page), 1), max(int(limit), 1)
        teachers = self._teacher_index()

        subject_ids: Optional[set[str]] = None
        if filters.teacher_id:
            subject_ids = {str(filters.teacher_id)}
        if filters.subject:
            by_subject = {tid for tid, t in teachers.items() if t.subject == filters.subject}
            subject_ids = by_subject if subject_ids is None else subject_ids & by_subject

        start = end = None
        if filters.start and filters.end:
            window = DateWindow.inclusive(filters.start, filters.end)
            start, end = window.start, window.end

        records, total = self._attendance.search(
            kind=SubjectKind.TEACHER,
            start=start,
            end=end,
            subject_ids=subject_ids,
            status=filters.status,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return Page(data=[self._view(r, teachers) for r in records], current=page, limit=limit, total=total)

    def own_history(
        self,
        teacher_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> Page:
        if not self._teachers.get_by_id(teacher_id):
            raise NotFoundError("Teacher not found")
        return self.history(HistoryFilter(start=start, end=end, teacher_id=teacher_id), page=page, limit=limit)

    def amend(
        self,
        record_id: int,
        *,
        actor: Actor,
        status: Optional[str] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        modification_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        record = self._get_teacher_record(record_id)
        now = self._calendar.localize(now) if now else self._calendar.now()

        new_status = require_status(status) if status else record.status
        new_reason = reason_for(new_status, reason if reason is not None else record.reason)
        audit = ModificationAudit(
            modified_by=actor.user_id,
            modified_at=now,
            reason=(modification_reason or "").strip()
            or default_modification_reason(record.status.value, new_status.value),
        )

        self._attendance.update_status(
            record_id=record.record_id,
            status=new_status,
            reason=new_reason,
            updated_at=now,
            notes=notes,
            audit=audit,
        )
        logger.info("Teacher attendance %s amended by %s: %s", record.record_id, actor.user_id, audit.reason)

        updated = self._attendance.get_by_id(record.record_id) or record
        return self._view(updated, self._teacher_index())

    def delete(self, record_id: int) -> None:
        record = self._get_teacher_record(record_id)
        if not self._attendance.delete(record.record_id):
            raise NotFoundError("Attendance record not found")
        logger.info("Teacher attendance %s deleted", record.record_id)

    def today_status(self, teacher_id: str) -> Optional[dict]:
        if not self._teachers.get_by_id(teacher_id):
            raise NotFoundError("Teacher not found")
        today = self._calendar.today()
        record = self._attendance.get_for_subject_and_day(SubjectKind.TEACHER, teacher_id, today.day)
        return self._view(record, self._teacher_index()) if record else None

    def _get_teacher_record(self, record_id) -> AttendanceRecord:
        try:
            rid = int(record_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid attendance id")
        record = self._attendance.get_by_id(rid)
        if not record or record.subject_kind != SubjectKind.TEACHER:
            raise NotFoundError("Attendance record not found")
        return record
