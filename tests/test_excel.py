"""Test Excel file functionality."""

import datetime
import pathlib
import zipfile

import rich  # noqa: F401

from schooldash.model import database, excel, reports, scope


NOW = datetime.datetime(2025, 11, 20, 10, 0, 0)


def test_write_report(
    seeded_dbase: database.DBase,
    admin_scope: scope.Scope,
    empty_output_folder: pathlib.Path,
) -> None:
    """Write an attendance report to an Excel file with two sheets."""
    # Arrange
    report = reports.build_report(
        seeded_dbase, admin_scope, reports.Period.SEVEN_DAYS, now=NOW
    )
    excel_path = empty_output_folder / "attendance-report.xlsx"
    # Act
    excel.write_report(report, excel_path)
    # Assert
    assert excel_path.exists()
    with zipfile.ZipFile(excel_path) as workbook:
        names = workbook.namelist()
    assert "xl/worksheets/sheet1.xml" in names
    assert "xl/worksheets/sheet2.xml" in names
