from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..roster.model import Student
from ..roster.repository import ParentRepository, StudentRepository, TeacherRepository
from .model import Actor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RosterScope:
    """The students visible to one actor, resolved once per request."""

    students: tuple[Student, ...]

    @property
    def subject_ids(self) -> frozenset[str]:
        return frozenset(s.student_id for s in self.students)

    def __len__(self) -> int:
        return len(self.students)

    def filter_section(self, class_name: str, section: str) -> "RosterScope":
        return RosterScope(tuple(s for s in self.students if s.class_name == class_name and s.section == section))


class ScopeResolver:
    def __init__(self, students: StudentRepository, teachers: TeacherRepository, parents: ParentRepository):
        self._students = students
        self._teachers = teachers
        self._parents = parents

    def student_scope(self, actor: Actor) -> RosterScope:
        if actor.role == Role.ADMIN:
            return self._scope(self._students.list_all())

        if actor.role == Role.TEACHER:
            teacher = self._teachers.get_by_id(actor.teacher_id) if actor.teacher_id else None
            if not teacher:
                logger.warning("No teacher profile for user %s; empty roster", actor.user_id)
                return RosterScope(())
            return self._scope(self._students.list_by_sections(teacher.section_assignments))

        if actor.role == Role.STUDENT:
            student = self._students.get_by_id(actor.student_id) if actor.student_id else None
            return self._scope([student] if student else [])

        if actor.role == Role.PARENT:
            parent = self._parents.get_by_id(actor.parent_id) if actor.parent_id else None
            return self._scope(self._students.list_by_parent(parent.parent_id) if parent else [])

        raise AuthorizationError("Access denied")

    @staticmethod
    def _scope(students: Sequence[Student]) -> RosterScope:
        # A student in two assigned sections' result sets appears once.
        unique = {s.student_id: s for s in students}
        return RosterScope(tuple(unique.values()))
