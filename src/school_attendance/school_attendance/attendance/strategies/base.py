from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional, Sequence

from ...common.datetime_utils import CalendarDay
from ...core.enums import SubjectKind
from ..model import AttendanceEntry, AttendanceRecord, DaySummary, ModificationAudit


class SubjectPolicy(ABC):
    """Strategy Pattern: what differs between student and teacher attendance."""

    kind: SubjectKind
    reports_day_summary: bool = False

    @abstractmethod
    def resolve_subject(self, subject_id: str) -> Optional[Any]:
        """Return the subject entity, or None when it does not exist."""

        raise NotImplementedError

    def amendment_audit(
        self,
        *,
        existing: AttendanceRecord,
        entry: AttendanceEntry,
        actor_id: Optional[str],
        now: datetime,
    ) -> Optional[ModificationAudit]:
        return None

    def on_absent(self, *, subject_id: str, entry: AttendanceEntry) -> None:
        """Best-effort side effect after an absence is stored."""

    def day_summary(self, *, day: CalendarDay, records: Sequence[AttendanceRecord]) -> Optional[DaySummary]:
        return None
