from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional

from ..common.datetime_utils import CalendarDay
from ..core.enums import AttendanceStatus, Role, SubjectKind


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one subject's attendance on one calendar day."""

    record_id: int
    subject_kind: SubjectKind
    subject_id: str
    attend_date: date
    status: AttendanceStatus
    reason: str = ""
    notes: Optional[str] = None
    marked_by: Optional[str] = None
    marked_by_role: Optional[Role] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_modified: bool = False
    modified_by: Optional[str] = None
    modified_at: Optional[datetime] = None
    modification_reason: Optional[str] = None

    def to_dict(self) -> dict:
        def _ts(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "id": self.record_id,
            "subjectKind": self.subject_kind.value,
            "subjectId": self.subject_id,
            "date": self.attend_date.isoformat(),
            "status": self.status.value,
            "reason": self.reason,
            "notes": self.notes,
            "markedBy": self.marked_by,
            "markedByRole": self.marked_by_role.value if self.marked_by_role else None,
            "createdAt": _ts(self.created_at),
            "updatedAt": _ts(self.updated_at),
            "isModified": self.is_modified,
            "modifiedBy": self.modified_by,
            "modifiedAt": _ts(self.modified_at),
            "modificationReason": self.modification_reason,
        }


@dataclass(frozen=True)
class ModificationAudit:
    """Audit trail stamped when an existing record is changed."""

    modified_by: str
    modified_at: datetime
    reason: str


@dataclass(frozen=True)
class AttendanceEntry:
    """One normalized line of a submitted batch."""

    subject_id: str
    status: AttendanceStatus
    day: CalendarDay
    reason: str = ""
    modification_reason: Optional[str] = None

    @property
    def dedup_key(self) -> tuple[str, date]:
        return (self.subject_id, self.day.day)


@dataclass
class StatusCounts:
    present: int = 0
    absent: int = 0
    late: int = 0
    half_day: int = 0

    def add(self, status: AttendanceStatus) -> None:
        if status == AttendanceStatus.PRESENT:
            self.present += 1
        elif status == AttendanceStatus.ABSENT:
            self.absent += 1
        elif status == AttendanceStatus.LATE:
            self.late += 1
        elif status == AttendanceStatus.HALF_DAY:
            self.half_day += 1

    @property
    def total(self) -> int:
        return self.present + self.absent + self.late + self.half_day

    @property
    def not_present(self) -> int:
        return self.total - self.present

    @classmethod
    def of(cls, records: Iterable[AttendanceRecord]) -> "StatusCounts":
        counts = cls()
        for r in records:
            counts.add(r.status)
        return counts


@dataclass(frozen=True)
class DaySummary:
    """Same-day counts recomputed from stored state after a batch."""

    day: date
    counts: StatusCounts

    def to_dict(self) -> dict:
        return {
            "total": self.counts.total,
            "present": self.counts.present,
            "absent": self.counts.absent,
            "late": self.counts.late,
            "halfDay": self.counts.half_day,
            "date": self.day.isoformat(),
        }


@dataclass(frozen=True)
class FailedEntry:
    index: int
    subject_id: Optional[str]
    error: str

    def to_dict(self) -> dict:
        return {"index": self.index, "subjectId": self.subject_id, "error": self.error}


@dataclass
class SubmissionResult:
    subject_kind: SubjectKind
    written: list[AttendanceRecord] = field(default_factory=list)
    skipped_subjects: list[str] = field(default_factory=list)
    failed: list[FailedEntry] = field(default_factory=list)
    summary: Optional[DaySummary] = None

    @property
    def count(self) -> int:
        return len(self.written)

    def to_dict(self) -> dict:
        out = {
            "message": "Attendance updated successfully" if self.count > 0 else "No changes made",
            "count": self.count,
            "skippedSubjects": list(self.skipped_subjects),
            "failedEntries": [f.to_dict() for f in self.failed],
        }
        if self.summary is not None:
            out["summary"] = self.summary.to_dict()
        return out
