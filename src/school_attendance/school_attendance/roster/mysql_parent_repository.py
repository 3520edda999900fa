from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Parent
from .repository import ParentRepository


def _to_parent(row: dict) -> Parent:
    return Parent(
        parent_id=str(row["parent_id"]),
        name=row["name"],
        email=row["email"],
        phone=row.get("phone"),
        user_id=row.get("user_id"),
    )


class MySQLParentRepository(ParentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, parent_id: str) -> Optional[Parent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT parent_id, name, email, phone, user_id FROM parents WHERE parent_id=%s",
                (str(parent_id),),
            )
            row = fetchone(cur)
            return _to_parent(row) if row else None

    def list_all(self) -> Sequence[Parent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT parent_id, name, email, phone, user_id FROM parents ORDER BY name")
            return [_to_parent(r) for r in fetchall(cur)]

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM parents")
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def create(self, *, parent_id: str, name: str, email: str, phone: Optional[str] = None) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO parents(parent_id, name, email, phone) VALUES(%s,%s,%s,%s)",
                (parent_id, name, email, phone),
            )
            return parent_id
