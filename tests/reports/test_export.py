import io
from datetime import date

from openpyxl import load_workbook

from src.school_attendance.school_attendance.reports.export import build_workbook, export_filename, sheet_title
from src.school_attendance.school_attendance.reports.model import SheetRow, TabularReport


def _report():
    days = [date(2025, 3, 1), date(2025, 3, 2), date(2025, 3, 3)]
    report = TabularReport(days=days)
    report.sheets["10-A"] = [
        SheetRow(
            name="Aarav",
            class_name="10",
            section="A",
            cells={date(2025, 3, 1): "Present", date(2025, 3, 3): "Absent"},
            presents=1,
            absents=1,
            percentage="50.0%",
        )
    ]
    report.sheets["8-B"] = [
        SheetRow(name="Meera", class_name="8", section="B", cells={}, presents=0, absents=0, percentage="0%")
    ]
    return report


def test_workbook_has_one_sheet_per_section_and_one_column_per_day():
    wb = load_workbook(io.BytesIO(build_workbook(_report())))

    assert wb.sheetnames == ["10-A", "8-B"]
    ws = wb["10-A"]
    header = [c.value for c in ws[1]]
    assert header == ["Name", "Class", "Section", "2025-03-01", "2025-03-02", "2025-03-03", "Presents", "Absents", "% Attendance"]
    row = [c.value for c in ws[2]]
    assert row[:4] == ["Aarav", "10", "A", "Present"]
    assert row[4] in (None, "")
    assert row[5:] == ["Absent", 1, 1, "50.0%"]


def test_absent_cells_are_highlighted():
    ws = load_workbook(io.BytesIO(build_workbook(_report())))["10-A"]

    absent = ws.cell(row=2, column=6)
    present = ws.cell(row=2, column=4)
    assert absent.font.bold is True
    assert absent.fill.fill_type == "solid"
    assert present.fill.fill_type is None


def test_empty_report_still_yields_a_header_sheet():
    wb = load_workbook(io.BytesIO(build_workbook(TabularReport(days=[date(2025, 3, 1)]))))

    assert wb.sheetnames == ["Attendance"]
    assert [c.value for c in wb["Attendance"][1]][3] == "2025-03-01"


def test_sheet_titles_are_sanitized_and_unique():
    taken = set()

    assert sheet_title("10/A", taken) == "10_A"
    assert sheet_title("10/A", taken) == "10_A (2)"
    assert len(sheet_title("x" * 40, taken)) == 31


def test_export_filename():
    assert export_filename(3, 2025) == "Attendance-3-2025.xlsx"
