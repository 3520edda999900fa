from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import jsonify, session

from ..access.model import Actor
from ..access.policy import require
from ..core.enums import Capability
from ..core.exceptions import (
    AuthorizationError,
    CalendarSyncError,
    CalendarUnavailable,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def error_response(e: Exception):
    """Map a raised exception to the JSON error body and status code."""

    if isinstance(e, ValidationError):
        return jsonify({"success": False, "message": str(e)}), 400
    if isinstance(e, AuthorizationError):
        return jsonify({"success": False, "message": str(e)}), 403
    if isinstance(e, NotFoundError):
        return jsonify({"success": False, "message": str(e)}), 404
    if isinstance(e, CalendarUnavailable):
        return jsonify({"success": False, "message": str(e), "state": e.state.value}), 503
    if isinstance(e, CalendarSyncError):
        return jsonify({"success": False, "message": "Calendar provider error", "error": str(e)}), 502

    logger.exception("Unhandled error")
    return jsonify({"success": False, "message": "Server error", "error": str(e)}), 500


def api_endpoint(capability: Optional[Capability] = None):
    """Resolve the session actor, check the capability and map errors to JSON.

    The wrapped view receives the resolved ``actor`` as a keyword argument.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                actor = Actor.from_session(session)
                if capability is not None:
                    require(actor, capability)
                return view(*args, actor=actor, **kwargs)
            except Exception as e:
                return error_response(e)

        return wrapper

    return decorator
