from __future__ import annotations

import io
import re

import pandas as pd
from openpyxl.styles import Font, PatternFill

from .model import ABSENT_LABEL, TabularReport

ABSENT_FONT = Font(color="FF0000", bold=True)
ABSENT_FILL = PatternFill(fill_type="solid", start_color="FFECEC", end_color="FFECEC")
HEADER_FONT = Font(bold=True)

_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")
_MAX_SHEET_TITLE = 31


def sheet_title(name: str, taken: set[str]) -> str:
    """Excel sheet titles: no []:*?/\\ and at most 31 characters, unique per book."""

    base = _INVALID_SHEET_CHARS.sub("_", name).strip("'") or "Sheet"
    base = base[:_MAX_SHEET_TITLE]
    title, n = base, 1
    while title.lower() in taken:
        n += 1
        suffix = f" ({n})"
        title = base[: _MAX_SHEET_TITLE - len(suffix)] + suffix
    taken.add(title.lower())
    return title


def export_filename(month: int, year: int) -> str:
    return f"Attendance-{month}-{year}.xlsx"


def build_workbook(report: TabularReport) -> bytes:
    """Render the tabular report as an .xlsx document, one sheet per class-section."""

    header = report.header
    first_day = report.first_day_column
    last_day = first_day + len(report.days)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        if not report.sheets:
            pd.DataFrame(columns=header).to_excel(writer, sheet_name="Attendance", index=False)

        taken: set[str] = set()
        for key, rows in report.sheets.items():
            title = sheet_title(key, taken)
            df = pd.DataFrame([r.as_list(report.days) for r in rows], columns=header)
            df.to_excel(writer, sheet_name=title, index=False)

            ws = writer.sheets[title]
            for cell in ws[1]:
                cell.font = HEADER_FONT
            for row in ws.iter_rows(min_row=2, min_col=first_day + 1, max_col=last_day):
                for cell in row:
                    if cell.value == ABSENT_LABEL:
                        cell.font = ABSENT_FONT
                        cell.fill = ABSENT_FILL
            ws.freeze_panes = ws.cell(row=2, column=first_day + 1)

    output.seek(0)
    return output.getvalue()
