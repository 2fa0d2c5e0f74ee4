"""Take attendance for a class."""

import datetime

import rich.text
import textual
from textual import app, binding, containers, widgets

from schooldash.features import attendance_sheet, validators
from schooldash.model import policy
from schooldash.model.attendance_mod import AttendanceStatus
from schooldash.model.scope import EntityKind
import schooldash.view
from schooldash.view import base_screen


STATUS_STYLES = {
    AttendanceStatus.PRESENT: "bold green",
    AttendanceStatus.ABSENT: "bold red",
    AttendanceStatus.LATE: "bold yellow",
    AttendanceStatus.EXCUSED: "bold blue",
}


class AttendanceScreen(base_screen.SessionScreen):
    """Mark each student on a class roster and save the day's attendance."""

    sheet: attendance_sheet.AttendanceSheet
    """Statuses being edited."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "attendance_screen.tcss"
    BINDINGS = [
        binding.Binding("escape", "back", "Back to Dashboard", show=True),
        binding.Binding("p", "mark('present')", "Present"),
        binding.Binding("a", "mark('absent')", "Absent"),
        binding.Binding("l", "mark('late')", "Late"),
        binding.Binding("e", "mark('excused')", "Excused"),
        binding.Binding("ctrl+s", "save", "Save"),
    ]

    def compose(self) -> app.ComposeResult:
        yield widgets.Header()
        with containers.HorizontalGroup(id="attendance-controls"):
            yield widgets.Select(
                [
                    (school_class.name, school_class.id)
                    for school_class in self.list_for(EntityKind.CLASS)
                ],
                prompt="Select a class",
                id="attendance-class",
            )
            yield widgets.Select(
                [
                    (subject.name, subject.id)
                    for subject in self.list_for(EntityKind.SUBJECT)
                ],
                prompt="Select a subject",
                id="attendance-subject",
            )
            yield widgets.Input(
                value=datetime.date.today().isoformat(),
                placeholder="Date (YYYY-MM-DD)",
                validators=[validators.DateValidator()],
                id="attendance-date",
            )
            yield widgets.Button("Load", variant="primary", id="attendance-load")
        with containers.HorizontalGroup(id="attendance-day-buttons"):
            yield widgets.Button("< Previous Day", id="attendance-previous")
            yield widgets.Button("Next Day >", id="attendance-next")
            yield widgets.Button("Mark All Present", id="attendance-all-present")
            yield widgets.Button("Mark All Absent", id="attendance-all-absent")
            yield widgets.Button(
                "Save Attendance",
                variant="success",
                id="attendance-save",
                disabled=True,
            )
        yield widgets.Static("", id="attendance-stats")
        yield widgets.DataTable(zebra_stripes=True, id="attendance-table")
        yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        self.sheet = attendance_sheet.AttendanceSheet(self.dbase, self.user_scope)
        table = self.query_one("#attendance-table", widgets.DataTable)
        table.cursor_type = "row"
        for label, key in [
            ("Student Number", "student_number"),
            ("Name", "name"),
            ("Status", "status"),
        ]:
            table.add_column(label, key=key)
        self.update_status("Select a class, subject, and date, then press Load.")

    def _status_text(self, status: AttendanceStatus) -> rich.text.Text:
        return rich.text.Text(status.value.title(), style=STATUS_STYLES[status])

    def refresh_sheet(self) -> None:
        """Show the sheet's roster, statuses, and totals."""
        table = self.query_one("#attendance-table", widgets.DataTable)
        table.clear()
        for student in self.sheet.roster:
            table.add_row(
                student.student_number,
                student.name,
                self._status_text(self.sheet.statuses[student.id]),
                key=student.id,
            )
        if self.sheet.on_date is not None:
            self.query_one("#attendance-date", widgets.Input).value = (
                self.sheet.on_date.isoformat()
            )
        self.refresh_totals()

    def refresh_totals(self) -> None:
        stats = self.sheet.stats()
        state = {
            attendance_sheet.SheetState.SAVED: "Saved",
            attendance_sheet.SheetState.DIRTY: "Unsaved changes",
            attendance_sheet.SheetState.LOADED: "Not yet saved",
        }.get(self.sheet.state, "")
        self.query_one("#attendance-stats", widgets.Static).update(
            f"Present: {stats.present}  Absent: {stats.absent}  "
            f"Late: {stats.late}  Excused: {stats.excused}  "
            f"Rate: {stats.rate}%   [i]{state}[/i]"
        )
        self.query_one("#attendance-save", widgets.Button).disabled = (
            not self.sheet.can_save
        )

    @textual.on(widgets.Button.Pressed, "#attendance-load")
    def load_sheet(self) -> None:
        """Load the roster and saved statuses for the chosen class and day."""
        class_id = self.query_one("#attendance-class", widgets.Select).value
        subject_id = self.query_one("#attendance-subject", widgets.Select).value
        date_input = self.query_one("#attendance-date", widgets.Input)
        if not isinstance(class_id, str):
            self.report_error("Select a class.")
            return
        if not isinstance(subject_id, str):
            self.report_error("Select a subject.")
            return
        invalid = validators.first_failure([date_input])
        if invalid:
            self.report_error(invalid)
            return
        try:
            self.sheet.load(
                class_id, subject_id, validators.parse_date(date_input.value)
            )
        except policy.PermissionDeniedError as err:
            self.report_error(str(err))
            return
        self.refresh_sheet()
        self.report_success(f"Loaded {len(self.sheet.roster)} students.")

    def _shift_day(self, days: int) -> None:
        if self.sheet.state == attendance_sheet.SheetState.UNLOADED:
            self.report_error("Load a class first.")
            return
        if self.sheet.state == attendance_sheet.SheetState.DIRTY:
            textual.log("Discarding unsaved attendance changes")
        self.sheet.shift_date(days)
        self.refresh_sheet()
        self.update_status(f"Showing {self.sheet.on_date}.")

    @textual.on(widgets.Button.Pressed, "#attendance-previous")
    def previous_day(self) -> None:
        self._shift_day(-1)

    @textual.on(widgets.Button.Pressed, "#attendance-next")
    def next_day(self) -> None:
        self._shift_day(1)

    def _mark_all(self, status: AttendanceStatus) -> None:
        if self.sheet.state == attendance_sheet.SheetState.UNLOADED:
            self.report_error("Load a class first.")
            return
        self.sheet.mark_all(status)
        self.refresh_sheet()

    @textual.on(widgets.Button.Pressed, "#attendance-all-present")
    def mark_all_present(self) -> None:
        self._mark_all(AttendanceStatus.PRESENT)

    @textual.on(widgets.Button.Pressed, "#attendance-all-absent")
    def mark_all_absent(self) -> None:
        self._mark_all(AttendanceStatus.ABSENT)

    def action_mark(self, status: str) -> None:
        """Set the status of the student under the cursor."""
        if self.sheet.state == attendance_sheet.SheetState.UNLOADED:
            return
        table = self.query_one("#attendance-table", widgets.DataTable)
        if table.row_count == 0:
            return
        row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        if row_key.value is None:
            return
        new_status = AttendanceStatus(status)
        self.sheet.set_status(row_key.value, new_status)
        table.update_cell(row_key, "status", self._status_text(new_status))
        self.refresh_totals()

    @textual.on(widgets.Button.Pressed, "#attendance-save")
    def action_save(self) -> None:
        """Replace the day's saved records with the sheet."""
        if not self.sheet.can_save:
            return
        if self.sheet.save():
            self.report_success(
                f"Attendance saved for {len(self.sheet.roster)} students."
            )
        else:
            self.report_error("Failed to save attendance. Please try again.")
        self.refresh_totals()
