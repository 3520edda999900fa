from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import LocalCalendar
from ..core.constants import CALENDAR_MAX_RESULTS
from ..core.enums import CalendarState
from ..core.exceptions import CalendarUnavailable, ValidationError
from .config import CalendarConfig
from .gateway import CalendarGateway, GoogleCalendarGateway

logger = logging.getLogger(__name__)

GatewayFactory = Callable[[CalendarConfig], CalendarGateway]

_UNAVAILABLE_MESSAGES = {
    CalendarState.UNCONFIGURED: "Calendar service is not configured. Please check SERVICE_ACCOUNT_PATH and CALENDAR_ID.",
    CalendarState.FAILED: "Calendar service failed to initialize. Please check service account credentials.",
}


class CalendarService:
    """Use case: keep school events in the external calendar.

    The client state is resolved once here; every call checks it before
    reaching the provider.
    """

    def __init__(self, config: CalendarConfig, gateway_factory: GatewayFactory = GoogleCalendarGateway):
        self._config = config
        self._calendar = LocalCalendar(config.timezone)
        self._gateway: Optional[CalendarGateway] = None

        if not config.is_configured:
            logger.warning("Calendar not configured: missing SERVICE_ACCOUNT_PATH or CALENDAR_ID")
            self._state = CalendarState.UNCONFIGURED
            return

        try:
            self._gateway = gateway_factory(config)
            self._state = CalendarState.READY
        except Exception:
            logger.exception("Failed to initialize calendar client")
            self._state = CalendarState.FAILED

    @property
    def state(self) -> CalendarState:
        return self._state

    def _ready_gateway(self) -> CalendarGateway:
        if self._state != CalendarState.READY or self._gateway is None:
            raise CalendarUnavailable(self._state, _UNAVAILABLE_MESSAGES.get(self._state, "Calendar unavailable"))
        return self._gateway

    def _rfc3339(self, value, field_name: str) -> str:
        if isinstance(value, datetime):
            dt = value
        else:
            raw = str(value or "").strip()
            if raw.endswith("Z"):
                raw = raw[:-1] + "+00:00"
            try:
                dt = datetime.fromisoformat(raw)
            except ValueError as e:
                raise ValidationError(f"Invalid {field_name}: {value}") from e
        return self._calendar.localize(dt).isoformat()

    def _event_body(
        self,
        *,
        summary: Optional[str],
        start_time,
        end_time,
        description: Optional[str],
        location: Optional[str],
        category: Optional[str],
    ) -> dict:
        if not summary or not start_time or not end_time:
            raise ValidationError("Missing required fields")

        tz = self._calendar.timezone_name
        body = {
            "summary": summary,
            "description": description,
            "location": location,
            "start": {"dateTime": self._rfc3339(start_time, "startTime"), "timeZone": tz},
            "end": {"dateTime": self._rfc3339(end_time, "endTime"), "timeZone": tz},
        }
        if category:
            body["extendedProperties"] = {"private": {"category": category}}
        return body

    def create_event(
        self,
        *,
        summary: Optional[str],
        start_time,
        end_time,
        description: Optional[str] = None,
        location: Optional[str] = None,
        category: Optional[str] = None,
    ) -> dict:
        gateway = self._ready_gateway()
        body = self._event_body(
            summary=summary,
            start_time=start_time,
            end_time=end_time,
            description=description,
            location=location,
            category=category,
        )
        event = gateway.insert(body)
        logger.info("Calendar event created: %s", event.get("id"))
        return event

    def list_events(self, *, include_past: bool = False, max_results: int = CALENDAR_MAX_RESULTS) -> list[dict]:
        gateway = self._ready_gateway()
        time_min = None if include_past else self._calendar.now().isoformat()
        return gateway.list(time_min=time_min, max_results=max_results)

    def update_event(
        self,
        event_id: Optional[str],
        *,
        summary: Optional[str],
        start_time,
        end_time,
        description: Optional[str] = None,
        location: Optional[str] = None,
        category: Optional[str] = None,
    ) -> dict:
        gateway = self._ready_gateway()
        if not event_id:
            raise ValidationError("Event ID required")
        body = self._event_body(
            summary=summary,
            start_time=start_time,
            end_time=end_time,
            description=description,
            location=location,
            category=category,
        )
        return gateway.update(event_id, body)

    def delete_event(self, event_id: Optional[str]) -> None:
        gateway = self._ready_gateway()
        if not event_id:
            raise ValidationError("Event ID required")
        gateway.delete(event_id)
        logger.info("Calendar event deleted: %s", event_id)
