from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Parent, SectionAssignment, Student, Teacher


class StudentRepository(Protocol):
    """Repository interface for students.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_sections(self, assignments: Iterable[SectionAssignment]) -> Sequence[Student]:
        """Students in ANY of the given class-sections."""

        raise NotImplementedError

    def list_by_parent(self, parent_id: str) -> Sequence[Student]:
        raise NotImplementedError

    def set_parent(self, student_id: str, parent_id: str) -> bool:
        raise NotImplementedError


class TeacherRepository(Protocol):
    def get_by_id(self, teacher_id: str) -> Optional[Teacher]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Teacher]:
        raise NotImplementedError


class ParentRepository(Protocol):
    def get_by_id(self, parent_id: str) -> Optional[Parent]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Parent]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def create(self, *, parent_id: str, name: str, email: str, phone: Optional[str] = None) -> str:
        raise NotImplementedError
