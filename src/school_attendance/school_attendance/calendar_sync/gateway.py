from __future__ import annotations

from typing import Any, Optional, Protocol

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..core.constants import CALENDAR_SCOPES
from ..core.exceptions import CalendarSyncError
from .config import CalendarConfig


class CalendarGateway(Protocol):
    """Thin port over the calendar provider's events API."""

    def insert(self, body: dict) -> dict:
        raise NotImplementedError

    def list(self, *, time_min: Optional[str], max_results: int) -> list[dict]:
        raise NotImplementedError

    def update(self, event_id: str, body: dict) -> dict:
        raise NotImplementedError

    def delete(self, event_id: str) -> None:
        raise NotImplementedError


def _provider_message(e: HttpError) -> str:
    reason = getattr(e, "reason", None)
    return str(reason or e)


class GoogleCalendarGateway(CalendarGateway):
    """Google Calendar v3 with service-account credentials."""

    def __init__(self, config: CalendarConfig):
        credentials = service_account.Credentials.from_service_account_file(
            config.service_account_path, scopes=CALENDAR_SCOPES
        )
        self._events = build("calendar", "v3", credentials=credentials, cache_discovery=False).events()
        self._calendar_id = config.calendar_id

    def _run(self, request) -> Any:
        try:
            return request.execute()
        except HttpError as e:
            raise CalendarSyncError(_provider_message(e)) from e

    def insert(self, body: dict) -> dict:
        return self._run(self._events.insert(calendarId=self._calendar_id, body=body))

    def list(self, *, time_min: Optional[str], max_results: int) -> list[dict]:
        params = {
            "calendarId": self._calendar_id,
            "maxResults": max_results,
            "singleEvents": True,
            "orderBy": "startTime",
        }
        if time_min:
            params["timeMin"] = time_min
        return self._run(self._events.list(**params)).get("items", [])

    def update(self, event_id: str, body: dict) -> dict:
        return self._run(self._events.update(calendarId=self._calendar_id, eventId=event_id, body=body))

    def delete(self, event_id: str) -> None:
        self._run(self._events.delete(calendarId=self._calendar_id, eventId=event_id))
