"""Attendance statistics for the reports, dashboard, and my-children screens.

Rates are whole percentages rounded half up. An empty window has a rate of 0
at the class and report level, but a rate of 100 for a single student's
30-day summary. The two cases use different functions.
"""

import dataclasses
import datetime
import enum
import logging
import math
import pathlib
from collections import Counter
from collections.abc import Iterable
from typing import Optional

import polars as pl

from schooldash.model import attendance_mod, database, scope, students_mod
from schooldash.model.attendance_mod import AttendanceStatus
from schooldash.model.users_mod import Role


logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Class",
    "Students",
    "Attendance Rate",
    "Present",
    "Absent",
    "Late",
    "Excused",
]
CHILD_WINDOW_DAYS = 30
RECENT_ATTENDANCE_COUNT = 7


class Period(enum.StrEnum):
    """Time windows offered on the reports screen."""

    SEVEN_DAYS = "7days"
    THIRTY_DAYS = "30days"
    MONTH = "month"

    @property
    def label(self) -> str:
        return _PERIOD_LABELS[self]

    def start(self, now: datetime.datetime) -> datetime.datetime:
        """Beginning of the window that ends at now."""
        match self:
            case Period.SEVEN_DAYS:
                return now - datetime.timedelta(days=7)
            case Period.THIRTY_DAYS:
                return now - datetime.timedelta(days=30)
            case Period.MONTH:
                return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


_PERIOD_LABELS = {
    Period.SEVEN_DAYS: "Last 7 days",
    Period.THIRTY_DAYS: "Last 30 days",
    Period.MONTH: "This month",
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up."""
    return math.floor(value + 0.5)


def attendance_rate(present: int, total: int) -> int:
    """Percent present for a class or a whole report. 0 when nothing recorded."""
    if total == 0:
        return 0
    return round_half_up(present / total * 100)


def student_rate(present: int, total: int) -> int:
    """Percent present for one student. 100 when nothing recorded."""
    if total == 0:
        return 100
    return round_half_up(present / total * 100)


@dataclasses.dataclass
class AttendanceStats:
    """Counts of attendance records by status."""

    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0

    @property
    def rate(self) -> int:
        return attendance_rate(self.present, self.total)

    @classmethod
    def from_statuses(
        cls, statuses: Iterable[AttendanceStatus | str]
    ) -> "AttendanceStats":
        """Count a sequence of statuses."""
        counts = Counter(AttendanceStatus(status) for status in statuses)
        return cls(
            total=sum(counts.values()),
            present=counts[AttendanceStatus.PRESENT],
            absent=counts[AttendanceStatus.ABSENT],
            late=counts[AttendanceStatus.LATE],
            excused=counts[AttendanceStatus.EXCUSED],
        )


def _status_counts() -> list[pl.Expr]:
    """Polars aggregations that count rows per status."""
    return [pl.len().alias("total")] + [
        (pl.col("status") == status.value).sum().alias(status.value)
        for status in AttendanceStatus
    ]


def _stats_from_row(row: dict) -> AttendanceStats:
    return AttendanceStats(
        total=int(row["total"]),
        present=int(row["present"]),
        absent=int(row["absent"]),
        late=int(row["late"]),
        excused=int(row["excused"]),
    )


@dataclasses.dataclass
class ClassReport:
    """Attendance of one class during the report window."""

    class_id: str
    class_name: str
    student_count: int
    attendance_rate: int
    stats: AttendanceStats


@dataclasses.dataclass
class AttendanceReport:
    """Attendance for every class in scope during a window."""

    period: Period
    start: datetime.datetime
    end: datetime.datetime
    overall: AttendanceStats
    classes: list[ClassReport]

    @property
    def overall_rate(self) -> int:
        return self.overall.rate


def build_report(
    dbase: database.DBase,
    user_scope: scope.Scope,
    period: Period,
    now: Optional[datetime.datetime] = None,
) -> AttendanceReport:
    """Summarize attendance for the classes a user can see.

    Args:
        dbase: Database to query.
        user_scope: Scope of the signed-in user.
        period: Reporting window.
        now: End of the window. Defaults to the current time.

    Returns:
        Overall counts and one ClassReport per class, sorted by attendance
        rate from highest to lowest. Classes with equal rates keep their
        store order.
    """
    now = now if now is not None else datetime.datetime.now()
    start = Period(period).start(now)
    classes = scope.list_for(dbase, user_scope, scope.EntityKind.CLASS)
    student_counts = Counter(
        student.class_id
        for student in scope.list_for(dbase, user_scope, scope.EntityKind.STUDENT)
    )
    frame = attendance_mod.get_window_dataframe(
        dbase, start, now, [school_class.id for school_class in classes]
    )
    overall = _stats_from_row(frame.select(_status_counts()).row(0, named=True))
    by_class = {
        row["class_id"]: _stats_from_row(row)
        for row in frame.group_by("class_id")
        .agg(_status_counts())
        .iter_rows(named=True)
    }
    class_reports = []
    for school_class in classes:
        stats = by_class.get(school_class.id, AttendanceStats())
        class_reports.append(
            ClassReport(
                class_id=school_class.id,
                class_name=school_class.name,
                student_count=student_counts[school_class.id],
                attendance_rate=stats.rate,
                stats=stats,
            )
        )
    class_reports.sort(key=lambda report: report.attendance_rate, reverse=True)
    logger.debug(
        "Built %s report with %d classes and %d records",
        period, len(class_reports), overall.total,
    )
    return AttendanceReport(
        period=Period(period),
        start=start,
        end=now,
        overall=overall,
        classes=class_reports,
    )


def to_csv(report: AttendanceReport) -> str:
    """Report as CSV text, one line per class after the header.

    Fields are joined with commas and are not quoted. There is no newline
    after the last line.
    """
    lines = [",".join(CSV_HEADER)]
    for class_report in report.classes:
        fields = [
            class_report.class_name,
            class_report.student_count,
            f"{class_report.attendance_rate}%",
            class_report.stats.present,
            class_report.stats.absent,
            class_report.stats.late,
            class_report.stats.excused,
        ]
        lines.append(",".join(str(field) for field in fields))
    return "\n".join(lines)


def csv_file_name(today: datetime.date) -> str:
    return f"attendance-report-{today.isoformat()}.csv"


def export_csv(
    report: AttendanceReport,
    folder: pathlib.Path,
    today: Optional[datetime.date] = None,
) -> pathlib.Path:
    """Write the report to attendance-report-<date>.csv in a folder."""
    today = today if today is not None else datetime.date.today()
    csv_path = folder / csv_file_name(today)
    with open(csv_path, "w", newline="") as csv_file:
        csv_file.write(to_csv(report))
    logger.info("Wrote attendance report to %s", csv_path)
    return csv_path


@dataclasses.dataclass
class DashboardStats:
    """Totals shown on the dashboard screen."""

    schools: int
    classes: int
    students: int
    teachers: int
    announcements: int
    pending_requests: int
    attendance_today: int
    present_today: int
    absent_today: int
    today_rate: int


def dashboard_stats(
    dbase: database.DBase,
    user_scope: scope.Scope,
    today: Optional[datetime.date] = None,
) -> DashboardStats:
    """Count what the user can see, plus today's attendance.

    Staff count today's attendance of every class in scope, whoever recorded
    it. Parents count their children's attendance. The rate for today is the
    number of students marked present today as a percentage of all students
    in scope, 0 when there are no students.
    """
    today = today if today is not None else datetime.date.today()
    kinds = scope.EntityKind
    students = scope.list_for(dbase, user_scope, kinds.STUDENT)
    requests = scope.list_for(dbase, user_scope, kinds.ABSENCE_REQUEST)
    classes = scope.list_for(dbase, user_scope, kinds.CLASS)
    if user_scope.role == Role.PARENT:
        today_statuses = [
            record.status
            for record in scope.list_for(dbase, user_scope, kinds.ATTENDANCE)
            if record.attendance_date == today
        ]
    else:
        frame = attendance_mod.get_window_dataframe(
            dbase,
            datetime.datetime.combine(today, datetime.time.min),
            datetime.datetime.combine(today, datetime.time.max),
            [school_class.id for school_class in classes],
        )
        today_statuses = frame["status"].to_list()
    today_stats = AttendanceStats.from_statuses(today_statuses)
    today_rate = (
        round_half_up(today_stats.present / len(students) * 100) if students else 0
    )
    return DashboardStats(
        schools=len(scope.list_for(dbase, user_scope, kinds.SCHOOL)),
        classes=len(classes),
        students=len(students),
        teachers=len(scope.list_for(dbase, user_scope, kinds.TEACHER)),
        announcements=len(scope.list_for(dbase, user_scope, kinds.ANNOUNCEMENT)),
        pending_requests=sum(1 for request in requests if request.is_pending),
        attendance_today=today_stats.total,
        present_today=today_stats.present,
        absent_today=today_stats.absent,
        today_rate=today_rate,
    )


@dataclasses.dataclass
class ChildSummary:
    """A parent's view of one child."""

    student: students_mod.Student
    class_name: str
    stats: AttendanceStats
    rate: int
    recent: list[attendance_mod.Attendance]


def child_summaries(
    dbase: database.DBase,
    user_scope: scope.Scope,
    now: Optional[datetime.datetime] = None,
) -> list[ChildSummary]:
    """Thirty-day attendance summary for each of a parent's children."""
    now = now if now is not None else datetime.datetime.now()
    start = now - datetime.timedelta(days=CHILD_WINDOW_DAYS)
    class_names = {
        school_class.id: school_class.name
        for school_class in scope.list_for(dbase, user_scope, scope.EntityKind.CLASS)
    }
    summaries = []
    for student in scope.list_for(dbase, user_scope, scope.EntityKind.STUDENT):
        records = attendance_mod.Attendance.get_for_students(dbase, [student.id], start)
        stats = AttendanceStats.from_statuses(record.status for record in records)
        summaries.append(
            ChildSummary(
                student=student,
                class_name=class_names.get(student.class_id, ""),
                stats=stats,
                rate=student_rate(stats.present, stats.total),
                recent=records[:RECENT_ATTENDANCE_COUNT],
            )
        )
    return summaries
