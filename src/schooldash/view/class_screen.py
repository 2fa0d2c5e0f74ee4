"""View and manage the classes and subjects of a school."""

import sqlite3
from typing import Optional

import textual
from textual import app, containers, screen, widgets

from schooldash.features import validators
from schooldash.model import schools_mod
from schooldash.model.policy import Action
from schooldash.model.scope import EntityKind
import schooldash.view
from schooldash.view import base_screen, confirm_dialogs


class ClassDialog(screen.ModalScreen[Optional[schools_mod.SchoolClass]]):
    """A dialog for adding or editing a class."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    school_id: str
    school_class: Optional[schools_mod.SchoolClass]

    def __init__(
        self, school_id: str, school_class: schools_mod.SchoolClass | None = None
    ) -> None:
        self.school_id = school_id
        self.school_class = school_class
        super().__init__()

    def compose(self) -> app.ComposeResult:
        school_class = self.school_class
        title = "Edit Class" if school_class else "Add New Class"
        with containers.Vertical(id="class-dialog", classes="modal-dialog"):
            yield widgets.Label(title, classes="emphasis")
            yield widgets.Input(
                value=school_class.name if school_class else "",
                placeholder="Class Name (e.g., Grade 10 - Section A)",
                id="class-name",
                validators=[validators.NotEmpty()],
            )
            yield widgets.Input(
                value=school_class.grade if school_class else "",
                placeholder="Grade",
                id="class-grade",
                validators=[validators.NotEmpty()],
            )
            yield widgets.Label("Mobility Level:")
            yield widgets.Select(
                [
                    (level.value.title(), level.value)
                    for level in schools_mod.MobilityLevel
                ],
                value=(
                    school_class.mobility_level
                    if school_class
                    else schools_mod.MobilityLevel.LOW
                ).value,
                allow_blank=False,
                id="class-mobility",
            )
            yield widgets.Static("", id="dialog-error")
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Save", variant="primary", id="save-class")
                yield widgets.Button("Cancel", id="cancel-class")

    @textual.on(widgets.Button.Pressed, "#cancel-class")
    def cancel_dialog(self) -> None:
        self.dismiss(None)

    @textual.on(widgets.Button.Pressed, "#save-class")
    def save_class(self) -> None:
        invalid = validators.first_failure(self.query(widgets.Input))
        if invalid:
            self.query_one("#dialog-error", widgets.Static).update(
                schooldash.view.error(invalid)
            )
            return
        name = self.query_one("#class-name", widgets.Input).value.strip()
        grade = self.query_one("#class-grade", widgets.Input).value.strip()
        mobility = schools_mod.MobilityLevel(
            self.query_one("#class-mobility", widgets.Select).value
        )
        if self.school_class is None:
            school_class = schools_mod.SchoolClass(
                id="",
                name=name,
                grade=grade,
                school_id=self.school_id,
                mobility_level=mobility,
            )
        else:
            school_class = self.school_class
            school_class.name = name
            school_class.grade = grade
            school_class.mobility_level = mobility
        self.dismiss(school_class)


class SubjectDialog(screen.ModalScreen[Optional[str]]):
    """Ask for the name of a new subject."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    def compose(self) -> app.ComposeResult:
        with containers.Vertical(id="subject-dialog", classes="modal-dialog"):
            yield widgets.Label("Add Subject", classes="emphasis")
            yield widgets.Input(
                placeholder="Subject Name",
                id="subject-name",
                validators=[validators.NotEmpty()],
            )
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Save", variant="primary", id="save-subject")
                yield widgets.Button("Cancel", id="cancel-subject")

    def on_button_pressed(self, event: widgets.Button.Pressed) -> None:
        if event.button.id == "save-subject":
            name = self.query_one("#subject-name", widgets.Input).value.strip()
            self.dismiss(name if name else None)
        elif event.button.id == "cancel-subject":
            self.dismiss(None)


class ClassScreen(base_screen.SessionScreen):
    """Classes and subjects of the user's school."""

    _classes: dict[str, schools_mod.SchoolClass]
    _subjects: dict[str, schools_mod.Subject]
    _selected_class_id: Optional[str]
    _selected_subject_id: Optional[str]

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        can_manage = self.allowed(Action.MANAGE_CLASSES)
        yield widgets.Header()
        with containers.Horizontal():
            with containers.Vertical(classes="record-list"):
                yield widgets.Label("Classes", classes="emphasis")
                yield widgets.DataTable(zebra_stripes=True, id="class-table")
                yield widgets.Label("Subjects", classes="emphasis")
                yield widgets.DataTable(zebra_stripes=True, id="subject-table")
            with containers.Vertical(classes="record-actions"):
                yield widgets.Label("Actions", classes="emphasis")
                yield widgets.Static(
                    "No class selected", id="selection-info", classes="selection-info"
                )
                yield widgets.Button(
                    "Add Class",
                    variant="success",
                    id="add-class",
                    disabled=not can_manage,
                )
                yield widgets.Button("Edit Class", id="edit-class", disabled=True)
                yield widgets.Button(
                    "Delete Class", variant="error", id="delete-class", disabled=True
                )
                yield widgets.Static()
                yield widgets.Button(
                    "Add Subject", id="add-subject", disabled=not can_manage
                )
                yield widgets.Button(
                    "Delete Subject",
                    variant="error",
                    id="delete-subject",
                    disabled=True,
                )
                yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        self._classes = {}
        self._subjects = {}
        self._selected_class_id = None
        self._selected_subject_id = None
        class_table = self.query_one("#class-table", widgets.DataTable)
        class_table.cursor_type = "row"
        class_table.add_columns("Class Name", "Grade", "Mobility", "Students")
        subject_table = self.query_one("#subject-table", widgets.DataTable)
        subject_table.cursor_type = "row"
        subject_table.add_columns("Subject")
        self.load_classes()

    def load_classes(self) -> None:
        """Load classes and subjects into the datatable widgets."""
        class_table = self.query_one("#class-table", widgets.DataTable)
        class_table.clear()
        self._classes = {
            school_class.id: school_class
            for school_class in self.list_for(EntityKind.CLASS)
        }
        for school_class in self._classes.values():
            class_table.add_row(
                school_class.name,
                school_class.grade,
                school_class.mobility_level.value.title(),
                school_class.student_count(self.dbase),
                key=school_class.id,
            )
        subject_table = self.query_one("#subject-table", widgets.DataTable)
        subject_table.clear()
        self._subjects = {
            subject.id: subject for subject in self.list_for(EntityKind.SUBJECT)
        }
        for subject in self._subjects.values():
            subject_table.add_row(subject.name, key=subject.id)

    def on_data_table_row_selected(self, event: widgets.DataTable.RowSelected) -> None:
        can_manage = self.allowed(Action.MANAGE_CLASSES)
        if event.data_table.id == "subject-table":
            self._selected_subject_id = event.row_key.value
            self.query_one("#delete-subject", widgets.Button).disabled = not can_manage
            return
        self._selected_class_id = event.row_key.value
        if self._selected_class_id is None:
            return
        self.query_one("#edit-class", widgets.Button).disabled = not can_manage
        self.query_one("#delete-class", widgets.Button).disabled = not can_manage
        school_class = self._classes[self._selected_class_id]
        self.query_one("#selection-info", widgets.Static).update(
            f"[bold]Selected:[/bold]\n{school_class.name}\nGrade {school_class.grade}"
        )

    @textual.on(widgets.Button.Pressed, "#add-class")
    def action_add_class(self) -> None:
        if self.user_scope.school_id is None:
            self.report_error("Your account is not assigned to a school.")
            return

        def on_dialog_closed(school_class: schools_mod.SchoolClass | None) -> None:
            if school_class is None:
                return
            try:
                school_class.add(self.dbase)
            except sqlite3.Error as err:
                self.report_error(f"Error adding class {school_class.name}.", err)
                return
            self.load_classes()
            self.report_success(f"Class {school_class.name} added.")

        self.app.push_screen(
            ClassDialog(self.user_scope.school_id), callback=on_dialog_closed
        )

    @textual.on(widgets.Button.Pressed, "#edit-class")
    def action_edit_class(self) -> None:
        if self._selected_class_id is None:
            return
        school_class = self._classes[self._selected_class_id]

        def on_dialog_closed(edited: schools_mod.SchoolClass | None) -> None:
            if edited is None:
                return
            try:
                edited.update(self.dbase)
            except sqlite3.Error as err:
                self.report_error("Error updating class.", err)
                return
            self.load_classes()
            self.report_success("Class updated successfully.")

        self.app.push_screen(
            ClassDialog(school_class.school_id, school_class),
            callback=on_dialog_closed,
        )

    @textual.on(widgets.Button.Pressed, "#delete-class")
    def action_delete_class(self) -> None:
        if self._selected_class_id is None:
            return
        school_class = self._classes[self._selected_class_id]

        def on_confirmed(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                school_class.delete(self.dbase)
            except sqlite3.IntegrityError:
                self.report_error(
                    f"{school_class.name} still has students. "
                    "Move or delete them first."
                )
                return
            except sqlite3.Error as err:
                self.report_error(f"Unable to delete {school_class.name}.", err)
                return
            self._selected_class_id = None
            self.query_one("#edit-class", widgets.Button).disabled = True
            self.query_one("#delete-class", widgets.Button).disabled = True
            self.load_classes()
            self.report_success(f"Deleted {school_class.name}.")

        self.app.push_screen(
            confirm_dialogs.DeleteConfirmDialog("class", school_class.name),
            callback=on_confirmed,
        )

    @textual.on(widgets.Button.Pressed, "#add-subject")
    def action_add_subject(self) -> None:
        school_id = self.user_scope.school_id
        if school_id is None:
            self.report_error("Your account is not assigned to a school.")
            return

        def on_dialog_closed(name: str | None) -> None:
            if name is None:
                return
            subject = schools_mod.Subject(id="", name=name, school_id=school_id)
            try:
                subject.add(self.dbase)
            except sqlite3.Error as err:
                self.report_error(f"Error adding subject {name}.", err)
                return
            self.load_classes()
            self.report_success(f"Subject {name} added.")

        self.app.push_screen(SubjectDialog(), callback=on_dialog_closed)

    @textual.on(widgets.Button.Pressed, "#delete-subject")
    def action_delete_subject(self) -> None:
        if self._selected_subject_id is None:
            return
        subject = self._subjects[self._selected_subject_id]

        def on_confirmed(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                subject.delete(self.dbase)
            except sqlite3.Error as err:
                self.report_error(f"Unable to delete {subject.name}.", err)
                return
            self._selected_subject_id = None
            self.query_one("#delete-subject", widgets.Button).disabled = True
            self.load_classes()
            self.report_success(f"Deleted {subject.name}.")

        self.app.push_screen(
            confirm_dialogs.DeleteConfirmDialog("subject", subject.name),
            callback=on_confirmed,
        )
