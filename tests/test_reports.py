"""Attendance statistics and report exports."""

import datetime
import pathlib

import pytest
import rich  # noqa: F401

from schooldash.model import (
    attendance_mod,
    database,
    reports,
    schools_mod,
    scope,
    students_mod,
    users_mod,
)
from schooldash.model.reports import Period


NOW = datetime.datetime(2025, 11, 20, 10, 0, 0)


@pytest.mark.parametrize(
    "present, total, rate",
    [(8, 10, 80), (0, 0, 0), (1, 8, 13), (2, 3, 67), (1, 3, 33), (5, 5, 100)],
)
def test_attendance_rate(present: int, total: int, rate: int) -> None:
    """Rates are rounded half up, with 0 for an empty window."""
    assert reports.attendance_rate(present, total) == rate


def test_student_rate_defaults_to_100() -> None:
    """A student with no records in the window is fully present."""
    assert reports.student_rate(0, 0) == 100
    assert reports.student_rate(3, 4) == 75


def test_stats_from_statuses() -> None:
    """Count statuses for the attendance screen totals."""
    # Act
    stats = reports.AttendanceStats.from_statuses(
        ["present"] * 8 + ["absent"] * 2
    )
    # Assert
    assert stats.total == 10
    assert stats.present == 8
    assert stats.absent == 2
    assert stats.rate == 80


def test_period_start() -> None:
    """Windows end now and start 7 days, 30 days, or the month's first day ago."""
    assert Period.SEVEN_DAYS.start(NOW) == datetime.datetime(2025, 11, 13, 10, 0)
    assert Period.THIRTY_DAYS.start(NOW) == datetime.datetime(2025, 10, 21, 10, 0)
    assert Period.MONTH.start(NOW) == datetime.datetime(2025, 11, 1)


def test_build_report(
    seeded_dbase: database.DBase, admin_scope: scope.Scope
) -> None:
    """Per-class statistics add up to the overall statistics."""
    # Act
    report = reports.build_report(
        seeded_dbase, admin_scope, Period.SEVEN_DAYS, now=NOW
    )
    # Assert
    assert report.overall.total == 35
    assert len(report.classes) == 3
    assert sum(item.stats.total for item in report.classes) == 35
    assert sum(item.stats.present for item in report.classes) == report.overall.present
    rates = [item.attendance_rate for item in report.classes]
    assert rates == sorted(rates, reverse=True)
    empty_class = next(item for item in report.classes if item.class_id == "class-3")
    assert empty_class.student_count == 0
    assert empty_class.attendance_rate == 0
    assert report.classes[-1].class_id == "class-3"


def test_report_matches_stored_attendance(
    seeded_dbase: database.DBase, ministry_scope: scope.Scope
) -> None:
    """The overall present count equals the present records in the window."""
    # Arrange
    present = sum(
        1
        for record in attendance_mod.Attendance.get_all(seeded_dbase)
        if record.status == attendance_mod.AttendanceStatus.PRESENT
    )
    # Act
    report = reports.build_report(
        seeded_dbase, ministry_scope, Period.THIRTY_DAYS, now=NOW
    )
    # Assert
    assert report.overall.present == present
    assert report.overall_rate == reports.attendance_rate(present, 35)


def test_report_window_end(
    seeded_dbase: database.DBase, admin_scope: scope.Scope
) -> None:
    """Records after the window end are left out."""
    # Act
    report = reports.build_report(
        seeded_dbase,
        admin_scope,
        Period.SEVEN_DAYS,
        now=NOW - datetime.timedelta(days=3),
    )
    # Assert
    assert report.overall.total == 20


def test_report_counts_school_attendance_for_teachers(
    seeded_dbase: database.DBase,
    admin_scope: scope.Scope,
    other_teacher_scope: scope.Scope,
) -> None:
    """Teachers see every record of their school's classes, whoever took it."""
    # Arrange
    admin_report = reports.build_report(
        seeded_dbase, admin_scope, Period.SEVEN_DAYS, now=NOW
    )
    # Act
    report = reports.build_report(
        seeded_dbase, other_teacher_scope, Period.SEVEN_DAYS, now=NOW
    )
    # Assert
    assert len(report.classes) == 3
    assert report.overall.total == 35
    assert report.overall == admin_report.overall
    assert report.classes == admin_report.classes


def test_report_ties_keep_store_order(empty_database: database.DBase) -> None:
    """Classes with equal rates stay in the order they were added."""
    # Arrange
    schools_mod.School(id="school-x", name="Riverside School").add(empty_database)
    statuses = {
        "class-c": ["present", "absent"],
        "class-b": ["present"],
        "class-a": ["absent", "present"],
        "class-d": [],
    }
    for class_id, class_statuses in statuses.items():
        schools_mod.SchoolClass(
            id=class_id, name=class_id.title(), grade="5", school_id="school-x"
        ).add(empty_database)
        for number, status in enumerate(class_statuses):
            student_id = f"{class_id}-student-{number}"
            students_mod.Student(
                id=student_id,
                name=student_id,
                student_number=student_id,
                class_id=class_id,
            ).add(empty_database)
            attendance_mod.Attendance(
                id="",
                student_id=student_id,
                class_id=class_id,
                subject_id="",
                teacher_id="",
                timestamp=NOW - datetime.timedelta(days=1),
                status=status,
            ).add(empty_database)
    ministry = scope.Scope(role=users_mod.Role.MINISTRY, user_id="ministry-x")
    # Act
    report = reports.build_report(
        empty_database, ministry, Period.SEVEN_DAYS, now=NOW
    )
    # Assert
    assert [class_report.class_id for class_report in report.classes] == [
        "class-b",
        "class-c",
        "class-a",
        "class-d",
    ]
    assert [class_report.attendance_rate for class_report in report.classes] == [
        100,
        50,
        50,
        0,
    ]


def test_to_csv(seeded_dbase: database.DBase, admin_scope: scope.Scope) -> None:
    """One header line plus one line per class, with the displayed rates."""
    # Arrange
    report = reports.build_report(
        seeded_dbase, admin_scope, Period.SEVEN_DAYS, now=NOW
    )
    # Act
    csv_text = reports.to_csv(report)
    # Assert
    lines = csv_text.split("\n")
    assert not csv_text.endswith("\n")
    assert len(lines) == len(report.classes) + 1
    assert lines[0] == "Class,Students,Attendance Rate,Present,Absent,Late,Excused"
    for line, class_report in zip(lines[1:], report.classes):
        fields = line.split(",")
        assert fields[0] == class_report.class_name
        assert fields[2] == f"{class_report.attendance_rate}%"


def test_export_csv(
    seeded_dbase: database.DBase,
    admin_scope: scope.Scope,
    empty_output_folder: pathlib.Path,
) -> None:
    """Write the report to a dated file."""
    # Arrange
    report = reports.build_report(
        seeded_dbase, admin_scope, Period.SEVEN_DAYS, now=NOW
    )
    # Act
    csv_path = reports.export_csv(report, empty_output_folder, NOW.date())
    # Assert
    assert csv_path.name == "attendance-report-2025-11-20.csv"
    assert csv_path.read_text() == reports.to_csv(report)


def test_dashboard_stats(
    seeded_dbase: database.DBase, admin_scope: scope.Scope
) -> None:
    """Totals for a school administrator's dashboard."""
    # Act
    stats = reports.dashboard_stats(seeded_dbase, admin_scope, NOW.date())
    # Assert
    assert stats.schools == 1
    assert stats.classes == 3
    assert stats.students == 5
    assert stats.teachers == 2
    assert stats.announcements == 2
    assert stats.pending_requests == 1
    assert stats.attendance_today == 5
    assert stats.present_today + stats.absent_today <= 5
    assert stats.today_rate == reports.round_half_up(stats.present_today / 5 * 100)


def test_dashboard_stats_without_attendance(
    seeded_dbase: database.DBase, other_teacher_scope: scope.Scope
) -> None:
    """A day without visible attendance has a rate of 0."""
    # Act
    stats = reports.dashboard_stats(
        seeded_dbase, other_teacher_scope, datetime.date(2025, 12, 25)
    )
    # Assert
    assert stats.attendance_today == 0
    assert stats.today_rate == 0


def test_teacher_dashboard_counts_school_attendance(
    seeded_dbase: database.DBase,
    admin_scope: scope.Scope,
    other_teacher_scope: scope.Scope,
) -> None:
    """Today's attendance on a teacher's dashboard includes other teachers' records."""
    # Arrange
    admin_stats = reports.dashboard_stats(seeded_dbase, admin_scope, NOW.date())
    # Act
    stats = reports.dashboard_stats(seeded_dbase, other_teacher_scope, NOW.date())
    # Assert
    assert stats.attendance_today == admin_stats.attendance_today == 5
    assert stats.present_today == admin_stats.present_today
    assert stats.absent_today == admin_stats.absent_today
    assert stats.today_rate == admin_stats.today_rate


def test_child_summaries(
    seeded_dbase: database.DBase, parent_scope: scope.Scope
) -> None:
    """One summary per child with the seven most recent records."""
    # Act
    summaries = reports.child_summaries(seeded_dbase, parent_scope, now=NOW)
    # Assert
    assert sorted(summary.student.id for summary in summaries) == [
        "student-1",
        "student-2",
    ]
    for summary in summaries:
        assert summary.stats.total == 7
        assert len(summary.recent) == 7
        assert summary.rate == reports.student_rate(
            summary.stats.present, summary.stats.total
        )
        dates = [record.attendance_date for record in summary.recent]
        assert dates == sorted(dates, reverse=True)
    class_names = {summary.student.id: summary.class_name for summary in summaries}
    assert class_names["student-1"] == "Grade 10 - Section A"


def test_child_summary_without_records(
    seeded_dbase: database.DBase, parent_scope: scope.Scope
) -> None:
    """Children with no attendance in the last 30 days show 100%."""
    # Act
    summaries = reports.child_summaries(
        seeded_dbase, parent_scope, now=NOW + datetime.timedelta(days=60)
    )
    # Assert
    assert all(summary.rate == 100 for summary in summaries)
    assert all(summary.recent == [] for summary in summaries)
