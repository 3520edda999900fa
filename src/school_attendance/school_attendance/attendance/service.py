from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from ..access.model import Actor
from ..common.datetime_utils import CalendarDay, DateWindow, LocalCalendar
from ..common.validators import require_status
from ..core.enums import AttendanceStatus, SubjectKind
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from .factory import SubjectPolicyFactory
from .model import AttendanceEntry, AttendanceRecord, FailedEntry, SubmissionResult
from .repository import AttendanceRepository
from .strategies.base import SubjectPolicy

logger = logging.getLogger(__name__)

_ID_ALIASES = {
    SubjectKind.STUDENT: ("subjectId", "studentId"),
    SubjectKind.TEACHER: ("subjectId", "teacherId"),
}


def reason_for(status: AttendanceStatus, reason: Optional[str]) -> str:
    """A reason is only kept for absences."""
    if status != AttendanceStatus.ABSENT:
        return ""
    return (reason or "").strip()


def raw_subject_id(raw: Any, kind: SubjectKind) -> Optional[str]:
    if not isinstance(raw, Mapping):
        return None
    for key in _ID_ALIASES[kind]:
        value = raw.get(key)
        if value not in (None, ""):
            return str(value).strip()
    return None


def optional_text(raw: Mapping, key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be text")
    return value


def parse_entry(raw: Any, *, kind: SubjectKind, calendar: LocalCalendar) -> AttendanceEntry:
    if not isinstance(raw, Mapping):
        raise ValidationError("Entry must be an object")

    subject_id = raw_subject_id(raw, kind)
    if not subject_id:
        raise ValidationError("subjectId is required")
    if raw.get("status") in (None, ""):
        raise ValidationError("status is required")

    status = require_status(raw["status"])
    day = calendar.normalize(raw.get("date"))
    return AttendanceEntry(
        subject_id=subject_id,
        status=status,
        day=day,
        reason=reason_for(status, optional_text(raw, "reason")),
        modification_reason=(optional_text(raw, "modificationReason") or "").strip() or None,
    )


class SubmissionNormalizer:
    """Use case: reconcile a submitted batch against stored attendance.

    Per entry: normalize the day, drop in-batch duplicates (first occurrence
    wins), amend the stored record for that subject and day or create one.
    A bad entry is reported in the result and never aborts its siblings.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        policies: SubjectPolicyFactory,
        calendar: LocalCalendar,
    ):
        self._attendance = attendance
        self._policies = policies
        self._calendar = calendar

    def submit(
        self,
        kind: SubjectKind,
        entries: Iterable[Any],
        *,
        actor: Optional[Actor] = None,
        now: Optional[datetime] = None,
    ) -> SubmissionResult:
        if entries is None or isinstance(entries, (str, bytes, Mapping)):
            raise ValidationError("attendanceData must be a list")

        policy = self._policies.for_kind(kind)
        now = self._calendar.localize(now) if now else self._calendar.now()
        result = SubmissionResult(subject_kind=kind)
        applied: set[tuple[str, date]] = set()
        summary_day: Optional[CalendarDay] = None

        for index, raw in enumerate(entries):
            try:
                entry = parse_entry(raw, kind=kind, calendar=self._calendar)
            except ValidationError as e:
                logger.warning("Skipping malformed %s entry #%d: %s", kind.value, index, e)
                result.failed.append(FailedEntry(index, raw_subject_id(raw, kind), str(e)))
                continue

            if summary_day is None:
                summary_day = entry.day

            if entry.dedup_key in applied:
                logger.info("Duplicate %s %s for %s in batch; keeping the first", kind.value, entry.subject_id, entry.day.key)
                result.skipped_subjects.append(entry.subject_id)
                continue

            try:
                record = self._apply(policy, entry, actor=actor, now=now)
            except (NotFoundError, ValidationError) as e:
                logger.warning("Skipping %s %s: %s", kind.value, entry.subject_id, e)
                result.failed.append(FailedEntry(index, entry.subject_id, str(e)))
                continue

            applied.add(entry.dedup_key)
            result.written.append(record)

            if record.status == AttendanceStatus.ABSENT:
                policy.on_absent(subject_id=entry.subject_id, entry=entry)

        if policy.reports_day_summary:
            day = summary_day or self._calendar.today()
            window = DateWindow.single(day.day)
            records = self._attendance.list_in_window(kind=kind, start=window.start, end=window.end)
            result.summary = policy.day_summary(day=day, records=records)
        return result

    def _apply(
        self,
        policy: SubjectPolicy,
        entry: AttendanceEntry,
        *,
        actor: Optional[Actor],
        now: datetime,
    ) -> AttendanceRecord:
        existing = self._attendance.get_for_subject_and_day(policy.kind, entry.subject_id, entry.day.day)
        if existing:
            return self._amend(policy, existing, entry, actor=actor, now=now)

        if not policy.resolve_subject(entry.subject_id):
            raise NotFoundError(f"{policy.kind.value.capitalize()} {entry.subject_id} not found")

        try:
            record_id = self._attendance.create(
                kind=policy.kind,
                subject_id=entry.subject_id,
                attend_date=entry.day.day,
                status=entry.status,
                reason=entry.reason,
                marked_by=actor.user_id if actor else None,
                marked_by_role=actor.role if actor else None,
                created_at=now,
            )
        except DuplicateRecordError:
            # A concurrent submitter inserted first: retry as an update.
            existing = self._attendance.get_for_subject_and_day(policy.kind, entry.subject_id, entry.day.day)
            if not existing:
                raise
            logger.info("Concurrent insert for %s %s on %s; amending", policy.kind.value, entry.subject_id, entry.day.key)
            return self._amend(policy, existing, entry, actor=actor, now=now)

        return AttendanceRecord(
            record_id=record_id,
            subject_kind=policy.kind,
            subject_id=entry.subject_id,
            attend_date=entry.day.day,
            status=entry.status,
            reason=entry.reason,
            marked_by=actor.user_id if actor else None,
            marked_by_role=actor.role if actor else None,
            created_at=now,
            updated_at=now,
        )

    def _amend(
        self,
        policy: SubjectPolicy,
        existing: AttendanceRecord,
        entry: AttendanceEntry,
        *,
        actor: Optional[Actor],
        now: datetime,
    ) -> AttendanceRecord:
        audit = policy.amendment_audit(
            existing=existing,
            entry=entry,
            actor_id=actor.user_id if actor else None,
            now=now,
        )
        self._attendance.update_status(
            record_id=existing.record_id,
            status=entry.status,
            reason=entry.reason,
            updated_at=now,
            audit=audit,
        )
        return self._attendance.get_by_id(existing.record_id) or existing
