from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


def section_key(class_name: str, section: str) -> str:
    return f"{class_name}-{section}"


@dataclass(frozen=True)
class SectionAssignment:
    class_name: str
    section: str

    @property
    def key(self) -> str:
        return section_key(self.class_name, self.section)


@dataclass(frozen=True)
class Student:
    """Domain entity: a student enrolled in one class-section."""

    student_id: str
    name: str
    class_name: str
    section: str
    admission_no: Optional[str] = None
    parent_id: Optional[str] = None

    @property
    def section_key(self) -> str:
        return section_key(self.class_name, self.section)


@dataclass(frozen=True)
class Teacher:
    """Domain entity: a teacher and the class-sections they teach."""

    teacher_id: str
    name: str
    employee_code: Optional[str] = None
    subject: Optional[str] = None
    section_assignments: tuple[SectionAssignment, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Parent:
    """Domain entity: a guardian; children are linked through Student.parent_id."""

    parent_id: str
    name: str
    email: str
    phone: Optional[str] = None
    user_id: Optional[str] = None
