from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import Parent, Student
from .repository import ParentRepository, StudentRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParentWithChildren:
    parent: Parent
    children: Sequence[Student]

    def to_dict(self) -> dict:
        return {
            "parentId": self.parent.parent_id,
            "name": self.parent.name,
            "email": self.parent.email,
            "phone": self.parent.phone,
            "children": [
                {
                    "studentId": s.student_id,
                    "name": s.name,
                    "admissionNo": s.admission_no,
                    "class": s.class_name,
                    "section": s.section,
                }
                for s in self.children
            ],
        }


class ParentService:
    """Use case: manage guardians and their links to students (admin)."""

    def __init__(self, parents: ParentRepository, students: StudentRepository):
        self._parents = parents
        self._students = students

    def list_parents(self) -> list[ParentWithChildren]:
        return [ParentWithChildren(p, self._students.list_by_parent(p.parent_id)) for p in self._parents.list_all()]

    def count_parents(self) -> int:
        return self._parents.count()

    def get_with_children(self, parent_id: str) -> ParentWithChildren:
        parent = self._parents.get_by_id(parent_id)
        if not parent:
            raise NotFoundError("Parent not found")
        return ParentWithChildren(parent, self._students.list_by_parent(parent.parent_id))

    def create_with_children(
        self,
        *,
        name: str,
        email: str,
        phone: Optional[str] = None,
        children: Iterable[str] = (),
    ) -> ParentWithChildren:
        name = require_non_empty(name, "Name")
        email = require_non_empty(email, "Email")
        students = [self._linkable_student(sid, parent_id=None) for sid in dict.fromkeys(children)]

        parent_id = uuid.uuid4().hex
        self._parents.create(parent_id=parent_id, name=name, email=email, phone=(phone or "").strip() or None)
        for s in students:
            self._students.set_parent(s.student_id, parent_id)

        logger.info("Parent %s created with %d children", parent_id, len(students))
        return self.get_with_children(parent_id)

    def add_child(self, *, parent_id: str, student_id: str) -> ParentWithChildren:
        parent = self._parents.get_by_id(parent_id)
        if not parent:
            raise NotFoundError("Parent not found")

        student = self._linkable_student(student_id, parent_id=parent.parent_id)
        if student.parent_id != parent.parent_id:
            self._students.set_parent(student.student_id, parent.parent_id)
            logger.info("Student %s linked to parent %s", student.student_id, parent.parent_id)
        return self.get_with_children(parent.parent_id)

    def _linkable_student(self, student_id: str, *, parent_id: Optional[str]) -> Student:
        student_id = require_non_empty(student_id, "Student id")
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError(f"Student {student_id} not found")
        if student.parent_id and student.parent_id != parent_id:
            raise ValidationError(f"Student {student_id} is already linked to another parent")
        return student
