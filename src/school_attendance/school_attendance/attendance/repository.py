from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, Role, SubjectKind
from .model import AttendanceRecord, ModificationAudit


class AttendanceRepository(Protocol):
    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_subject_and_day(self, kind: SubjectKind, subject_id: str, day: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        kind: SubjectKind,
        subject_id: str,
        attend_date: date,
        status: AttendanceStatus,
        reason: str,
        marked_by: Optional[str],
        marked_by_role: Optional[Role],
        created_at: datetime,
    ) -> int:
        """Insert a record and return its id.

        Raises DuplicateRecordError when the subject already has a record for the day.
        """

        raise NotImplementedError

    def update_status(
        self,
        *,
        record_id: int,
        status: AttendanceStatus,
        reason: str,
        updated_at: datetime,
        notes: Optional[str] = None,
        audit: Optional[ModificationAudit] = None,
    ) -> bool:
        """Overwrite status/reason in place; creation fields stay untouched.

        ``notes`` is only written when given; ``audit`` sets the modification trail.
        """

        raise NotImplementedError

    def list_in_window(
        self,
        *,
        kind: SubjectKind,
        start: date,
        end: date,
        subject_ids: Optional[Iterable[str]] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with ``start <= attend_date < end``; ``subject_ids=None`` means every subject."""

        raise NotImplementedError

    def search(
        self,
        *,
        kind: SubjectKind,
        start: Optional[date] = None,
        end: Optional[date] = None,
        subject_ids: Optional[Iterable[str]] = None,
        status: Optional[AttendanceStatus] = None,
        offset: int = 0,
        limit: int = 30,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        """Newest-first page of records plus the total number of matches."""

        raise NotImplementedError

    def delete(self, record_id: int) -> bool:
        raise NotImplementedError
