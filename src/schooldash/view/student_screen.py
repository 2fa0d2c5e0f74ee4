"""View the student roster and add, edit, or delete students."""

import sqlite3
from typing import Optional

import textual
from textual import app, containers, widgets

from schooldash.model import schools_mod, students_mod
from schooldash.model.policy import Action
from schooldash.model.scope import EntityKind
import schooldash.view
from schooldash.view import base_screen, confirm_dialogs, student_dialog


class StudentScreen(base_screen.SessionScreen):
    """Add and edit students."""

    _selected_student_id: Optional[str]
    """Currently selected student."""
    _students: dict[str, students_mod.Student]
    """Students visible to the user, whether or not they pass the filters."""
    _classes: dict[str, schools_mod.SchoolClass]

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        """Build the student screen's user interface."""
        yield widgets.Header()
        with containers.Horizontal():
            with containers.Vertical(classes="record-list"):
                with containers.Horizontal(classes="filter-row"):
                    yield widgets.Input(
                        placeholder="Search by name or student number",
                        id="student-search",
                    )
                    yield widgets.Select(
                        [], prompt="All Classes", id="student-class-filter"
                    )
                yield widgets.DataTable(zebra_stripes=True, id="student-table")
            with containers.Vertical(classes="record-actions"):
                yield widgets.Label("Actions", classes="emphasis")
                yield widgets.Static(
                    "No student selected",
                    id="selection-info",
                    classes="selection-info",
                )
                yield widgets.Button(
                    "Add Student",
                    variant="success",
                    id="add-student",
                    disabled=not self.allowed(Action.MANAGE_STUDENTS),
                    tooltip="Add a new student to the database.",
                )
                yield widgets.Button("Edit Selected", id="edit-student", disabled=True)
                yield widgets.Button(
                    "Delete Selected",
                    variant="error",
                    id="delete-student",
                    disabled=True,
                )
                yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        """Initialize the datatable widget."""
        self._students = {}
        self._selected_student_id = None
        self.table = self.query_one("#student-table", widgets.DataTable)
        self.table.cursor_type = "row"
        self.table.add_columns("Student Number", "Name", "Class", "Gender", "Born")
        self._classes = {
            school_class.id: school_class
            for school_class in self.list_for(EntityKind.CLASS)
        }
        self.query_one("#student-class-filter", widgets.Select).set_options(
            (school_class.name, school_class.id)
            for school_class in self._classes.values()
        )
        self.load_student_data()

    def load_student_data(self) -> None:
        """Load the students that pass the search and class filters."""
        self._students = {
            student.id: student for student in self.list_for(EntityKind.STUDENT)
        }
        self.refresh_table()

    def refresh_table(self) -> None:
        self.table.clear()
        search_text = self.query_one("#student-search", widgets.Input).value
        class_id = self.query_one("#student-class-filter", widgets.Select).value
        shown = [
            student
            for student in self._students.values()
            if student.matches(search_text)
            and (not isinstance(class_id, str) or student.class_id == class_id)
        ]
        for student in shown:
            school_class = self._classes.get(student.class_id)
            self.table.add_row(
                student.student_number,
                student.name,
                school_class.name if school_class else "",
                student.gender.value.title(),
                student.birth_iso or "",
                key=student.id,
            )
        textual.log(f"Showing {len(shown)} of {len(self._students)} students")
        self.report_success(f"Showing {len(shown)} of {len(self._students)} students.")

    @textual.on(widgets.Input.Changed, "#student-search")
    def on_search_changed(self) -> None:
        self.refresh_table()

    @textual.on(widgets.Select.Changed, "#student-class-filter")
    def on_class_filter_changed(self) -> None:
        self.refresh_table()

    def on_data_table_row_selected(self, event: widgets.DataTable.RowSelected) -> None:
        """Select a row in the datatable."""
        self._selected_student_id = event.row_key.value
        if self._selected_student_id is None:
            return
        can_manage = self.allowed(Action.MANAGE_STUDENTS)
        self.query_one("#edit-student", widgets.Button).disabled = not can_manage
        self.query_one("#delete-student", widgets.Button).disabled = not can_manage
        student = self._students[self._selected_student_id]
        self.query_one("#selection-info", widgets.Static).update(
            f"[bold]Selected:[/bold]\n{student.name}\n{student.student_number}"
        )

    @textual.on(widgets.Button.Pressed, "#add-student")
    def action_add_student(self) -> None:
        """Show the student dialog and add a new student."""

        def on_dialog_closed(student: students_mod.Student | None) -> None:
            if student is None:
                return
            try:
                student.add(self.dbase)
            except sqlite3.Error as err:
                self.report_error(f"Error adding student {student.name}.", err)
                return
            self.load_student_data()
            self.report_success(f"Student {student.name} added.")

        self.app.push_screen(
            student_dialog.StudentDialog(list(self._classes.values())),
            callback=on_dialog_closed,
        )

    @textual.on(widgets.Button.Pressed, "#edit-student")
    def action_edit_student(self) -> None:
        if self._selected_student_id is None:
            return
        student = self._students[self._selected_student_id]

        def on_dialog_closed(edited: students_mod.Student | None) -> None:
            if edited is None:
                return
            try:
                edited.update(self.dbase)
            except sqlite3.Error as err:
                self.report_error("Error updating student.", err)
                return
            self.load_student_data()
            self.report_success("Student updated successfully.")

        self.app.push_screen(
            student_dialog.StudentDialog(list(self._classes.values()), student),
            callback=on_dialog_closed,
        )

    @textual.on(widgets.Button.Pressed, "#delete-student")
    def action_delete_student(self) -> None:
        if self._selected_student_id is None:
            return
        student = self._students[self._selected_student_id]

        def on_confirmed(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                student.delete(self.dbase)
            except sqlite3.Error as err:
                self.report_error(f"Unable to delete {student.name}.", err)
                return
            self._selected_student_id = None
            self.query_one("#edit-student", widgets.Button).disabled = True
            self.query_one("#delete-student", widgets.Button).disabled = True
            self.query_one("#selection-info", widgets.Static).update(
                "No student selected"
            )
            self.load_student_data()
            self.report_success(f"Deleted {student.name}.")

        self.app.push_screen(
            confirm_dialogs.DeleteConfirmDialog("student", student.name),
            callback=on_confirmed,
        )
