"""Weekly timetable of the classes a user can see."""

import sqlite3
from typing import Optional

import textual
from textual import app, containers, screen, widgets

from schooldash.features import validators
from schooldash.model import config, schedules_mod, schools_mod, teachers_mod
from schooldash.model.policy import Action
from schooldash.model.scope import EntityKind
import schooldash.view
from schooldash.view import base_screen, confirm_dialogs


class ScheduleDialog(screen.ModalScreen[Optional[schedules_mod.Schedule]]):
    """Add one period to a class's timetable."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    def __init__(
        self,
        classes: list[schools_mod.SchoolClass],
        subjects: list[schools_mod.Subject],
        teacher_names: dict[str, str],
    ) -> None:
        self.classes = classes
        self.subjects = subjects
        self.teacher_names = teacher_names
        super().__init__()

    def compose(self) -> app.ComposeResult:
        with containers.VerticalScroll(id="schedule-dialog", classes="modal-dialog"):
            yield widgets.Label("Add Schedule", classes="emphasis")
            yield widgets.Select(
                [(school_class.name, school_class.id) for school_class in self.classes],
                prompt="Class",
                id="schedule-class",
            )
            yield widgets.Select(
                [(subject.name, subject.id) for subject in self.subjects],
                prompt="Subject",
                id="schedule-subject",
            )
            yield widgets.Select(
                [(name, teacher_id) for teacher_id, name in self.teacher_names.items()],
                prompt="Teacher",
                id="schedule-teacher",
            )
            yield widgets.Select(
                [
                    (schedules_mod.DAY_NAMES[day], str(day))
                    for day in config.settings.schedule_days
                ],
                prompt="Day",
                id="schedule-day",
            )
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Input(
                    placeholder="Start (HH:MM)",
                    id="schedule-start",
                    validators=[validators.TimeValidator()],
                )
                yield widgets.Input(
                    placeholder="End (HH:MM)",
                    id="schedule-end",
                    validators=[validators.TimeValidator()],
                )
            yield widgets.Static("", id="dialog-error")
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Save", variant="primary", id="save-schedule")
                yield widgets.Button("Cancel", id="cancel-schedule")

    @textual.on(widgets.Button.Pressed, "#cancel-schedule")
    def cancel_dialog(self) -> None:
        self.dismiss(None)

    @textual.on(widgets.Button.Pressed, "#save-schedule")
    def save_schedule(self) -> None:
        selections = {
            name: self.query_one(f"#schedule-{name}", widgets.Select).value
            for name in ["class", "subject", "teacher", "day"]
        }
        invalid = validators.first_failure(self.query(widgets.Input))
        missing = [
            name for name, value in selections.items() if not isinstance(value, str)
        ]
        if invalid is None and missing:
            invalid = "Select a " + ", ".join(missing) + "."
        start_time = self.query_one("#schedule-start", widgets.Input).value.strip()
        end_time = self.query_one("#schedule-end", widgets.Input).value.strip()
        if invalid is None and end_time <= start_time:
            invalid = "End time must be after start time."
        if invalid:
            self.query_one("#dialog-error", widgets.Static).update(
                schooldash.view.error(invalid)
            )
            return
        self.dismiss(
            schedules_mod.Schedule(
                id="",
                class_id=str(selections["class"]),
                subject_id=str(selections["subject"]),
                teacher_id=str(selections["teacher"]),
                day_of_week=int(str(selections["day"])),
                start_time=start_time,
                end_time=end_time,
            )
        )


class ScheduleScreen(base_screen.SessionScreen):
    """Periods grouped by school day and sorted by start time."""

    _schedules: dict[str, schedules_mod.Schedule]
    _selected_schedule_id: Optional[str]

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        can_manage = self.allowed(Action.MANAGE_SCHEDULES)
        yield widgets.Header()
        with containers.Horizontal():
            with containers.Vertical(classes="record-list"):
                yield widgets.Label("Weekly Schedule", classes="emphasis")
                yield widgets.DataTable(zebra_stripes=True, id="schedule-table")
            with containers.Vertical(classes="record-actions"):
                yield widgets.Label("Actions", classes="emphasis")
                yield widgets.Button(
                    "Add Schedule",
                    variant="success",
                    id="add-schedule",
                    disabled=not can_manage,
                )
                yield widgets.Button(
                    "Delete Selected",
                    variant="error",
                    id="delete-schedule",
                    disabled=True,
                )
                yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        self._schedules = {}
        self._selected_schedule_id = None
        table = self.query_one("#schedule-table", widgets.DataTable)
        table.cursor_type = "row"
        table.add_columns("Day", "Time", "Class", "Subject", "Teacher")
        self.load_schedules()

    def load_schedules(self) -> None:
        """Show every school day, including days without periods."""
        table = self.query_one("#schedule-table", widgets.DataTable)
        table.clear()
        class_names = {
            school_class.id: school_class.name
            for school_class in self.list_for(EntityKind.CLASS)
        }
        subject_names = {
            subject.id: subject.name for subject in self.list_for(EntityKind.SUBJECT)
        }
        teacher_names = teachers_mod.Teacher.get_names(self.dbase)
        schedules = self.list_for(EntityKind.SCHEDULE)
        self._schedules = {schedule.id: schedule for schedule in schedules}
        grouped = schedules_mod.group_by_day(schedules, config.settings.schedule_days)
        for day, day_schedules in grouped.items():
            if not day_schedules:
                table.add_row(
                    schedules_mod.DAY_NAMES[day], "No classes scheduled", "", "", ""
                )
                continue
            for position, schedule in enumerate(day_schedules):
                table.add_row(
                    schedule.day_name if position == 0 else "",
                    f"{schedule.start_time} - {schedule.end_time}",
                    class_names.get(schedule.class_id, ""),
                    subject_names.get(schedule.subject_id, ""),
                    teacher_names.get(schedule.teacher_id, ""),
                    key=schedule.id,
                )

    def on_data_table_row_selected(self, event: widgets.DataTable.RowSelected) -> None:
        schedule_id = event.row_key.value
        if schedule_id not in self._schedules:
            self._selected_schedule_id = None
            self.query_one("#delete-schedule", widgets.Button).disabled = True
            return
        self._selected_schedule_id = schedule_id
        self.query_one("#delete-schedule", widgets.Button).disabled = not self.allowed(
            Action.MANAGE_SCHEDULES
        )

    @textual.on(widgets.Button.Pressed, "#add-schedule")
    def action_add_schedule(self) -> None:
        def on_dialog_closed(schedule: schedules_mod.Schedule | None) -> None:
            if schedule is None:
                return
            try:
                schedule.add(self.dbase)
            except sqlite3.Error as err:
                self.report_error("Error adding schedule.", err)
                return
            self.load_schedules()
            self.report_success(
                f"Added {schedule.day_name} "
                f"{schedule.start_time} - {schedule.end_time}."
            )

        teacher_names = teachers_mod.Teacher.get_names(self.dbase)
        self.app.push_screen(
            ScheduleDialog(
                self.list_for(EntityKind.CLASS),
                self.list_for(EntityKind.SUBJECT),
                {
                    teacher.id: teacher_names.get(teacher.id, teacher.id)
                    for teacher in self.list_for(EntityKind.TEACHER)
                },
            ),
            callback=on_dialog_closed,
        )

    @textual.on(widgets.Button.Pressed, "#delete-schedule")
    def action_delete_schedule(self) -> None:
        if self._selected_schedule_id is None:
            return
        schedule = self._schedules[self._selected_schedule_id]
        description = (
            f"{schedule.day_name} {schedule.start_time} - {schedule.end_time}"
        )

        def on_confirmed(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                schedule.delete(self.dbase)
            except sqlite3.Error as err:
                self.report_error("Unable to delete schedule.", err)
                return
            self._selected_schedule_id = None
            self.query_one("#delete-schedule", widgets.Button).disabled = True
            self.load_schedules()
            self.report_success(f"Deleted {description}.")

        self.app.push_screen(
            confirm_dialogs.DeleteConfirmDialog("schedule", description),
            callback=on_confirmed,
        )
