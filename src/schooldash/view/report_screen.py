"""Attendance reports by class, with CSV and Excel export."""

import datetime
from typing import Optional

import textual
from textual import app, containers, widgets

from schooldash.model import config, excel, reports
from schooldash.model.reports import Period
import schooldash.view
from schooldash.view import base_screen


class ReportScreen(base_screen.SessionScreen):
    """Attendance rates of the classes in scope over a chosen window."""

    report: Optional[reports.AttendanceReport]

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        yield widgets.Header()
        with containers.Horizontal():
            with containers.Vertical(classes="record-list"):
                with containers.Horizontal(classes="filter-row"):
                    yield widgets.Label("Attendance Report", classes="emphasis")
                    yield widgets.Select(
                        [(period.label, period.value) for period in Period],
                        value=Period.SEVEN_DAYS.value,
                        allow_blank=False,
                        id="report-period",
                    )
                yield widgets.Static("", id="report-overall")
                yield widgets.DataTable(zebra_stripes=True, id="report-table")
            with containers.Vertical(classes="record-actions"):
                yield widgets.Label("Export", classes="emphasis")
                yield widgets.Button("Export CSV", variant="primary", id="report-csv")
                yield widgets.Button("Export Excel", id="report-excel")
                yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        self.report = None
        table = self.query_one("#report-table", widgets.DataTable)
        table.cursor_type = "row"
        table.add_columns(*reports.CSV_HEADER)
        self.load_report()

    def load_report(self) -> None:
        period = Period(str(self.query_one("#report-period", widgets.Select).value))
        self.report = reports.build_report(self.dbase, self.user_scope, period)
        overall = self.report.overall
        self.query_one("#report-overall", widgets.Static).update(
            f"[b]{period.label}[/b] "
            f"({self.report.start:%Y-%m-%d} to {self.report.end:%Y-%m-%d})\n"
            f"Overall Rate: {self.report.overall_rate}%  Records: {overall.total}  "
            f"Present: {overall.present}  Absent: {overall.absent}  "
            f"Late: {overall.late}  Excused: {overall.excused}"
        )
        table = self.query_one("#report-table", widgets.DataTable)
        table.clear()
        for class_report in self.report.classes:
            table.add_row(
                class_report.class_name,
                class_report.student_count,
                f"{class_report.attendance_rate}%",
                class_report.stats.present,
                class_report.stats.absent,
                class_report.stats.late,
                class_report.stats.excused,
                key=class_report.class_id,
            )

    @textual.on(widgets.Select.Changed, "#report-period")
    def on_period_changed(self) -> None:
        self.load_report()

    @textual.on(widgets.Button.Pressed, "#report-csv")
    def export_csv(self) -> None:
        if self.report is None:
            return
        folder = config.settings.export_folder
        try:
            folder.mkdir(parents=True, exist_ok=True)
            csv_path = reports.export_csv(self.report, folder)
        except OSError as err:
            self.report_error("Unable to write CSV file.", err)
            return
        self.report_success(f"Report exported to {csv_path}")

    @textual.on(widgets.Button.Pressed, "#report-excel")
    def export_excel(self) -> None:
        if self.report is None:
            return
        folder = config.settings.export_folder
        excel_path = folder / (
            f"attendance-report-{datetime.date.today().isoformat()}.xlsx"
        )
        try:
            folder.mkdir(parents=True, exist_ok=True)
            excel.write_report(self.report, excel_path)
        except OSError as err:
            self.report_error("Unable to write Excel file.", err)
            return
        self.report_success(f"Report exported to {excel_path}")
