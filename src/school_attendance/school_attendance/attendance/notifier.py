from __future__ import annotations

import logging
from typing import Protocol

from ..common.datetime_utils import CalendarDay
from ..roster.model import Parent, Student

logger = logging.getLogger(__name__)


class AbsenceNotifier(Protocol):
    def notify(self, *, student: Student, parent: Parent, day: CalendarDay, reason: str) -> None:
        raise NotImplementedError


class LoggingAbsenceNotifier(AbsenceNotifier):
    """Records absence alerts in the application log."""

    def notify(self, *, student: Student, parent: Parent, day: CalendarDay, reason: str) -> None:
        logger.info(
            "Student %s (%s) marked absent on %s. Parent: %s <%s>. Reason: %s",
            student.name,
            student.admission_no or student.student_id,
            day.key,
            parent.name,
            parent.email,
            reason or "-",
        )
