"""A parent's summary of each child's attendance."""

from textual import app, containers, widgets

from schooldash.model import reports
import schooldash.view
from schooldash.view import attendance_screen, base_screen


class ChildCard(containers.Vertical):
    """Thirty-day attendance and recent records for one child."""

    def __init__(self, summary: reports.ChildSummary) -> None:
        self.summary = summary
        super().__init__(classes="child-card")

    def compose(self) -> app.ComposeResult:
        student = self.summary.student
        stats = self.summary.stats
        yield widgets.Label(f"[b]{student.name}[/b]", classes="emphasis")
        yield widgets.Static(
            f"Student Number: {student.student_number}\n"
            f"Class: {self.summary.class_name or 'Unassigned'}\n"
            f"Attendance (last {reports.CHILD_WINDOW_DAYS} days): "
            f"{self.summary.rate}%  "
            f"Present: {stats.present}  Absent: {stats.absent}  "
            f"Late: {stats.late}  Excused: {stats.excused}"
        )
        table: widgets.DataTable = widgets.DataTable(classes="recent-attendance")
        table.add_columns("Date", "Status", "Notes")
        for record in self.summary.recent:
            style = attendance_screen.STATUS_STYLES[record.status]
            table.add_row(
                record.attendance_date.isoformat(),
                f"[{style}]{record.status.value.title()}[/]",
                record.notes or "",
            )
        yield table


class ChildrenScreen(base_screen.SessionScreen):
    """One card per child linked to the signed-in parent."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        summaries = reports.child_summaries(self.dbase, self.user_scope)
        yield widgets.Header()
        with containers.VerticalScroll(id="children-list"):
            yield widgets.Label("My Children", classes="emphasis")
            if not summaries:
                yield widgets.Static(
                    "No children are linked to your account.", classes="hint"
                )
            for summary in summaries:
                yield ChildCard(summary)
            yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()
