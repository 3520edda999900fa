from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import SubjectKind
from ..roster.repository import ParentRepository, StudentRepository, TeacherRepository
from .notifier import AbsenceNotifier, LoggingAbsenceNotifier
from .strategies.base import SubjectPolicy
from .strategies.student_policy import StudentPolicy
from .strategies.teacher_policy import TeacherPolicy


@dataclass
class SubjectPolicyFactory:
    """Factory Pattern: choose the policy for the kind of subject being marked."""

    students: StudentRepository
    teachers: TeacherRepository
    parents: ParentRepository
    notifier: AbsenceNotifier = field(default_factory=LoggingAbsenceNotifier)

    def for_kind(self, kind: SubjectKind) -> SubjectPolicy:
        if kind == SubjectKind.STUDENT:
            return StudentPolicy(self.students, self.parents, self.notifier)
        return TeacherPolicy(self.teachers)
