"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_PAGE_LIMIT = 30
DEFAULT_OVERVIEW_DAYS = 30
DEFAULT_TREND_DAYS = 7

CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]
CALENDAR_MAX_RESULTS = 20

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
