from __future__ import annotations

import logging
from typing import Optional

from ...core.enums import SubjectKind
from ...roster.model import Student
from ...roster.repository import ParentRepository, StudentRepository
from ..model import AttendanceEntry
from ..notifier import AbsenceNotifier
from .base import SubjectPolicy

logger = logging.getLogger(__name__)


class StudentPolicy(SubjectPolicy):
    """Students: absences are reported to the guardian when one is linked."""

    kind = SubjectKind.STUDENT

    def __init__(self, students: StudentRepository, parents: ParentRepository, notifier: AbsenceNotifier):
        self._students = students
        self._parents = parents
        self._notifier = notifier

    def resolve_subject(self, subject_id: str) -> Optional[Student]:
        return self._students.get_by_id(subject_id)

    def on_absent(self, *, subject_id: str, entry: AttendanceEntry) -> None:
        try:
            student = self._students.get_by_id(subject_id)
            if not student:
                return
            parent = self._parents.get_by_id(student.parent_id) if student.parent_id else None
            if not parent:
                logger.info("Student %s (%s) marked absent. No parent record found.", student.name, student.student_id)
                return
            self._notifier.notify(student=student, parent=parent, day=entry.day, reason=entry.reason)
        except Exception:
            # Notification never fails the submitted entry.
            logger.exception("Absence notification failed for student %s", subject_id)
