"""Export attendance reports to an Excel file."""

import logging
import pathlib
from typing import Any

import xlsxwriter

from schooldash.model import reports


logger = logging.getLogger(__name__)


def write_report(report: reports.AttendanceReport, excel_path: pathlib.Path) -> None:
    """Write an attendance report to a Microsoft Excel file.

    The workbook has an "Attendance by Class" sheet with the same columns as
    the CSV export and an "Overall" sheet with the totals for the window.
    """
    workbook = xlsxwriter.Workbook(excel_path)
    class_rows = [
        {
            "Class": class_report.class_name,
            "Students": class_report.student_count,
            "Attendance Rate": f"{class_report.attendance_rate}%",
            "Present": class_report.stats.present,
            "Absent": class_report.stats.absent,
            "Late": class_report.stats.late,
            "Excused": class_report.stats.excused,
        }
        for class_report in report.classes
    ]
    _write_sheet(workbook, "Attendance by Class", reports.CSV_HEADER, class_rows)
    overall = report.overall
    overall_rows = [
        {
            "Period": report.period.label,
            "Start": report.start.strftime("%Y-%m-%d %H:%M"),
            "End": report.end.strftime("%Y-%m-%d %H:%M"),
            "Records": overall.total,
            "Attendance Rate": f"{report.overall_rate}%",
            "Present": overall.present,
            "Absent": overall.absent,
            "Late": overall.late,
            "Excused": overall.excused,
        }
    ]
    _write_sheet(workbook, "Overall", list(overall_rows[0].keys()), overall_rows)
    workbook.close()
    logger.info("Wrote attendance workbook to %s", excel_path)


def _write_sheet(
    workbook: xlsxwriter.Workbook,
    sheet_name: str,
    header: list[str],
    data: list[dict[str, Any]],
) -> None:
    """Write a table of data to a worksheet."""
    sheet = workbook.add_worksheet(sheet_name)
    sheet.write_row(row=0, col=0, data=header)
    for row_number, row_values in enumerate(data):
        sheet.write_row(
            row=row_number + 1, col=0, data=[row_values[col] for col in header]
        )
