from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceRecord, StatusCounts

FIXED_LEADING_COLUMNS = ["Name", "Class", "Section"]
FIXED_TRAILING_COLUMNS = ["Presents", "Absents", "% Attendance"]

PRESENT_LABEL = "Present"
ABSENT_LABEL = "Absent"


@dataclass(frozen=True)
class AggregateRow:
    """Derived per-subject fold of one reporting window (never persisted)."""

    subject_id: str
    counts: StatusCounts
    records: tuple[AttendanceRecord, ...] = ()

    @property
    def total_days(self) -> int:
        return self.counts.total


@dataclass(frozen=True)
class SheetRow:
    name: str
    class_name: str
    section: str
    cells: dict[date, str]
    presents: int
    absents: int
    percentage: str

    def as_list(self, days: list[date]) -> list:
        return (
            [self.name, self.class_name, self.section]
            + [self.cells.get(d, "") for d in days]
            + [self.presents, self.absents, self.percentage]
        )


@dataclass
class TabularReport:
    """One sheet per class-section, one column per calendar day of the window."""

    days: list[date]
    sheets: dict[str, list[SheetRow]] = field(default_factory=dict)

    @property
    def header(self) -> list[str]:
        return FIXED_LEADING_COLUMNS + [d.isoformat() for d in self.days] + FIXED_TRAILING_COLUMNS

    @property
    def first_day_column(self) -> int:
        return len(FIXED_LEADING_COLUMNS)

    def row_count(self, sheet: Optional[str] = None) -> int:
        if sheet is not None:
            return len(self.sheets.get(sheet, []))
        return sum(len(rows) for rows in self.sheets.values())
