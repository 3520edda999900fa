from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


@dataclass(frozen=True)
class Actor:
    """Who is calling, as placed in the session by the upstream auth layer."""

    user_id: str
    role: Role
    student_id: Optional[str] = None
    teacher_id: Optional[str] = None
    parent_id: Optional[str] = None

    @classmethod
    def from_session(cls, session: Mapping[str, Any]) -> "Actor":
        user_id = session.get("user_id")
        if not user_id:
            raise AuthorizationError("Not authenticated")
        try:
            role = Role(str(session.get("role") or ""))
        except ValueError:
            raise AuthorizationError("Access denied")

        def _opt(key: str) -> Optional[str]:
            value = session.get(key)
            return str(value) if value else None

        return cls(
            user_id=str(user_id),
            role=role,
            student_id=_opt("student_id"),
            teacher_id=_opt("teacher_id"),
            parent_id=_opt("parent_id"),
        )
