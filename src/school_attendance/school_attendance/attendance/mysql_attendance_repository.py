from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus, Role, SubjectKind
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord, ModificationAudit
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, subject_kind, subject_id, attend_date, status, reason, notes,
    marked_by, marked_by_role, created_at, updated_at,
    is_modified, modified_by, modified_at, modification_reason
"""


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    # DATETIME columns hold local wall-clock time.
    return value.replace(tzinfo=None) if value is not None else None


def _to_record(r: dict) -> AttendanceRecord:
    role = r.get("marked_by_role")
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        subject_kind=SubjectKind(r["subject_kind"]),
        subject_id=str(r["subject_id"]),
        attend_date=r["attend_date"],
        status=AttendanceStatus(r["status"]),
        reason=r.get("reason") or "",
        notes=r.get("notes"),
        marked_by=r.get("marked_by"),
        marked_by_role=Role(role) if role else None,
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        is_modified=bool(r.get("is_modified")),
        modified_by=r.get("modified_by"),
        modified_at=r.get("modified_at"),
        modification_reason=r.get("modification_reason"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_subject_and_day(self, kind: SubjectKind, subject_id: str, day: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE subject_kind=%s AND subject_id=%s AND attend_date=%s
                """,
                (kind.value, str(subject_id), day),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(
        self,
        *,
        kind: SubjectKind,
        subject_id: str,
        attend_date: date,
        status: AttendanceStatus,
        reason: str,
        marked_by: Optional[str],
        marked_by_role: Optional[Role],
        created_at: datetime,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        subject_kind, subject_id, attend_date, status, reason,
                        marked_by, marked_by_role, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        kind.value,
                        str(subject_id),
                        attend_date,
                        status.value,
                        reason,
                        marked_by,
                        marked_by_role.value if marked_by_role else None,
                        _naive(created_at),
                        _naive(created_at),
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateRecordError(f"{kind.value} {subject_id} already has a record for {attend_date}") from e
            raise

    def update_status(
        self,
        *,
        record_id: int,
        status: AttendanceStatus,
        reason: str,
        updated_at: datetime,
        notes: Optional[str] = None,
        audit: Optional[ModificationAudit] = None,
    ) -> bool:
        sets = ["status=%s", "reason=%s", "updated_at=%s"]
        params: list[object] = [status.value, reason, _naive(updated_at)]

        if notes is not None:
            sets.append("notes=%s")
            params.append(notes)
        if audit is not None:
            sets.extend(["is_modified=1", "modified_by=%s", "modified_at=%s", "modification_reason=%s"])
            params.extend([audit.modified_by, _naive(audit.modified_at), audit.reason])

        params.append(int(record_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE attendance_records SET {', '.join(sets)} WHERE record_id=%s", tuple(params))
            return cur.rowcount > 0

    def list_in_window(
        self,
        *,
        kind: SubjectKind,
        start: date,
        end: date,
        subject_ids: Optional[Iterable[str]] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["subject_kind=%s", "attend_date >= %s", "attend_date < %s"]
        params: list[object] = [kind.value, start, end]

        if subject_ids is not None:
            ids = sorted({str(s) for s in subject_ids})
            if not ids:
                return []
            clauses.append(in_clause("subject_id", ids))
            params.extend(ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {' AND '.join(clauses)}
                ORDER BY attend_date ASC, subject_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def search(
        self,
        *,
        kind: SubjectKind,
        start: Optional[date] = None,
        end: Optional[date] = None,
        subject_ids: Optional[Iterable[str]] = None,
        status: Optional[AttendanceStatus] = None,
        offset: int = 0,
        limit: int = 30,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        clauses = ["subject_kind=%s"]
        params: list[object] = [kind.value]

        if start is not None:
            clauses.append("attend_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("attend_date < %s")
            params.append(end)
        if subject_ids is not None:
            ids = sorted({str(s) for s in subject_ids})
            if not ids:
                return [], 0
            clauses.append(in_clause("subject_id", ids))
            params.extend(ids)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total", 0))

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY attend_date DESC, record_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            return [_to_record(r) for r in fetchall(cur)], total

    def delete(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE record_id=%s", (int(record_id),))
            return cur.rowcount > 0
