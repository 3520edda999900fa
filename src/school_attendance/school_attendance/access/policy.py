from __future__ import annotations

from ..core.enums import Capability, Role
from ..core.exceptions import AuthorizationError
from .model import Actor

CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(
        {
            Capability.MARK_STUDENT_ATTENDANCE,
            Capability.VIEW_ROSTER_REPORTS,
            Capability.MANAGE_TEACHER_ATTENDANCE,
            Capability.MANAGE_PARENTS,
            Capability.VIEW_CALENDAR,
            Capability.MANAGE_CALENDAR,
        }
    ),
    Role.TEACHER: frozenset(
        {
            Capability.MARK_STUDENT_ATTENDANCE,
            Capability.VIEW_ROSTER_REPORTS,
            Capability.VIEW_OWN_ATTENDANCE,
            Capability.VIEW_CALENDAR,
        }
    ),
    Role.STUDENT: frozenset({Capability.VIEW_OWN_ATTENDANCE, Capability.VIEW_CALENDAR}),
    Role.PARENT: frozenset({Capability.VIEW_CHILDREN_ATTENDANCE, Capability.VIEW_CALENDAR}),
}


def can(actor: Actor, capability: Capability) -> bool:
    return capability in CAPABILITIES.get(actor.role, frozenset())


def require(actor: Actor, capability: Capability) -> Actor:
    if not can(actor, capability):
        raise AuthorizationError("Access denied")
    return actor
