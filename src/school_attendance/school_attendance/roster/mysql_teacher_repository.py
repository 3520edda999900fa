from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import SectionAssignment, Teacher
from .repository import TeacherRepository


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, teacher_id: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT teacher_id, name, employee_code, subject FROM teachers WHERE teacher_id=%s",
                (str(teacher_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            cur.execute(
                "SELECT class_name, section FROM teacher_sections WHERE teacher_id=%s ORDER BY class_name, section",
                (str(teacher_id),),
            )
            assignments = tuple(SectionAssignment(str(r["class_name"]), str(r["section"])) for r in fetchall(cur))
            return Teacher(
                teacher_id=str(row["teacher_id"]),
                name=row["name"],
                employee_code=row.get("employee_code"),
                subject=row.get("subject"),
                section_assignments=assignments,
            )

    def list_all(self) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT teacher_id, name, employee_code, subject FROM teachers ORDER BY name")
            rows = fetchall(cur)
            cur.execute("SELECT teacher_id, class_name, section FROM teacher_sections ORDER BY class_name, section")
            by_teacher: dict[str, list[SectionAssignment]] = {}
            for r in fetchall(cur):
                by_teacher.setdefault(str(r["teacher_id"]), []).append(
                    SectionAssignment(str(r["class_name"]), str(r["section"]))
                )

            return [
                Teacher(
                    teacher_id=str(r["teacher_id"]),
                    name=r["name"],
                    employee_code=r.get("employee_code"),
                    subject=r.get("subject"),
                    section_assignments=tuple(by_teacher.get(str(r["teacher_id"]), [])),
                )
                for r in rows
            ]
