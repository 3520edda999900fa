from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_TIMEZONE


@dataclass(frozen=True)
class CalendarConfig:
    """Settings for the external school calendar."""

    calendar_id: Optional[str] = None
    service_account_path: Optional[str] = None
    timezone: str = DEFAULT_TIMEZONE

    @property
    def is_configured(self) -> bool:
        return bool(self.calendar_id and self.service_account_path)

    @classmethod
    def from_settings(cls, settings) -> "CalendarConfig":
        return cls(
            calendar_id=getattr(settings, "CALENDAR_ID", None) or None,
            service_account_path=getattr(settings, "SERVICE_ACCOUNT_PATH", None) or None,
            timezone=getattr(settings, "TIMEZONE", None) or DEFAULT_TIMEZONE,
        )
