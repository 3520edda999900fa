from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import SectionAssignment, Student
from .repository import StudentRepository

_COLUMNS = "student_id, name, admission_no, class_name, section, parent_id"


def _to_student(row: dict) -> Student:
    return Student(
        student_id=str(row["student_id"]),
        name=row["name"],
        admission_no=row.get("admission_no"),
        class_name=str(row["class_name"]),
        section=str(row["section"]),
        parent_id=row.get("parent_id"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (str(student_id),))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY class_name, section, name")
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_sections(self, assignments: Iterable[SectionAssignment]) -> Sequence[Student]:
        pairs = list(dict.fromkeys((a.class_name, a.section) for a in assignments))
        if not pairs:
            return []

        clauses = " OR ".join(["(class_name=%s AND section=%s)"] * len(pairs))
        params = [v for pair in pairs for v in pair]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE {clauses} ORDER BY class_name, section, name",
                tuple(params),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_parent(self, parent_id: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE parent_id=%s ORDER BY name", (str(parent_id),))
            return [_to_student(r) for r in fetchall(cur)]

    def set_parent(self, student_id: str, parent_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET parent_id=%s WHERE student_id=%s", (str(parent_id), str(student_id)))
            return cur.rowcount > 0
