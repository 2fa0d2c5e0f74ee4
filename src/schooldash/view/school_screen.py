"""Ministry screen for adding, editing, and deleting schools."""

import sqlite3
from typing import Optional

import textual
from textual import app, containers, screen, widgets

from schooldash.features import validators
from schooldash.model import config, schools_mod, users_mod
from schooldash.model.policy import Action
from schooldash.model.scope import EntityKind
import schooldash.view
from schooldash.view import base_screen, confirm_dialogs


SchoolResult = tuple[schools_mod.School, Optional[users_mod.User]]
"""A school and, for new schools, its administrator."""


class SchoolDialog(screen.ModalScreen[Optional[SchoolResult]]):
    """Add a school with its administrator, or edit a school's details.

    Dismissed with the school and, for new schools, the administrator's user
    account. Dismissed with None when cancelled.
    """

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    def __init__(self, school: schools_mod.School | None = None) -> None:
        self.school = school
        super().__init__()

    def compose(self) -> app.ComposeResult:
        title = "Edit School" if self.school else "Add New School"
        school = self.school
        with containers.VerticalScroll(id="school-dialog", classes="modal-dialog"):
            yield widgets.Label(title, classes="emphasis")
            yield widgets.Input(
                value=school.name if school else "",
                placeholder="School Name",
                id="school-name",
                validators=[validators.NotEmpty()],
            )
            yield widgets.Input(
                value=school.address if school else "",
                placeholder="Address",
                id="school-address",
            )
            yield widgets.Input(
                value=school.phone if school else "",
                placeholder="Phone",
                id="school-phone",
            )
            yield widgets.Input(
                value=school.email if school else "",
                placeholder="School Email",
                id="school-email",
            )
            if school is None:
                yield widgets.Label("School Administrator", classes="emphasis")
                yield widgets.Input(
                    placeholder="Administrator Name",
                    id="school-admin-name",
                    validators=[validators.NotEmpty()],
                )
                yield widgets.Input(
                    placeholder="Administrator Email",
                    id="school-admin-email",
                    validators=[validators.EmailValidator()],
                )
                yield widgets.Input(
                    placeholder=(
                        f"Password (default {config.settings.default_password})"
                    ),
                    password=True,
                    id="school-admin-password",
                )
            yield widgets.Static("", id="dialog-error")
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Save", variant="primary", id="save-school")
                yield widgets.Button("Cancel", id="cancel-school")

    def on_mount(self) -> None:
        self.query_one("#school-name", widgets.Input).focus()

    @textual.on(widgets.Button.Pressed, "#cancel-school")
    def cancel_dialog(self) -> None:
        self.dismiss(None)

    @textual.on(widgets.Button.Pressed, "#save-school")
    def save_school(self) -> None:
        """Build the school and administrator from the form values."""
        invalid = validators.first_failure(self.query(widgets.Input))
        if invalid:
            self.query_one("#dialog-error", widgets.Static).update(
                schooldash.view.error(invalid)
            )
            return
        values = {
            "name": self.query_one("#school-name", widgets.Input).value.strip(),
            "address": self.query_one("#school-address", widgets.Input).value.strip(),
            "phone": self.query_one("#school-phone", widgets.Input).value.strip(),
            "email": self.query_one("#school-email", widgets.Input).value.strip(),
        }
        if self.school is not None:
            for name, value in values.items():
                setattr(self.school, name, value)
            self.dismiss((self.school, None))
            return
        password = self.query_one("#school-admin-password", widgets.Input).value
        admin = users_mod.User(
            id="",
            email=self.query_one("#school-admin-email", widgets.Input).value.strip(),
            password=password if password else config.settings.default_password,
            name=self.query_one("#school-admin-name", widgets.Input).value.strip(),
            role=users_mod.Role.SCHOOL_ADMIN,
        )
        self.dismiss((schools_mod.School(id="", **values), admin))


class SchoolScreen(base_screen.SessionScreen):
    """List schools and their administrators."""

    _schools: dict[str, schools_mod.School]
    _selected_school_id: Optional[str]

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        yield widgets.Header()
        with containers.Horizontal():
            with containers.Vertical(classes="record-list"):
                yield widgets.Label("Schools", classes="emphasis")
                yield widgets.DataTable(zebra_stripes=True, id="school-table")
            with containers.Vertical(classes="record-actions"):
                yield widgets.Label("Actions", classes="emphasis")
                yield widgets.Static(
                    "No school selected",
                    id="selection-info",
                    classes="selection-info",
                )
                yield widgets.Button(
                    "Add School",
                    variant="success",
                    id="add-school",
                    disabled=not self.allowed(Action.MANAGE_SCHOOLS),
                )
                yield widgets.Button("Edit Selected", id="edit-school", disabled=True)
                yield widgets.Button(
                    "Delete Selected",
                    variant="error",
                    id="delete-school",
                    disabled=True,
                )
                yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        self._schools = {}
        self._selected_school_id = None
        table = self.query_one("#school-table", widgets.DataTable)
        table.cursor_type = "row"
        table.add_columns(
            "Name", "Administrator", "Address", "Phone", "Email", "Classes"
        )
        self.load_schools()

    def load_schools(self) -> None:
        """Load the schools into the datatable widget."""
        table = self.query_one("#school-table", widgets.DataTable)
        table.clear()
        user_names = users_mod.User.get_names(self.dbase)
        class_counts: dict[str, int] = {}
        for school_class in self.list_for(EntityKind.CLASS):
            class_counts[school_class.school_id] = (
                class_counts.get(school_class.school_id, 0) + 1
            )
        self._schools = {
            school.id: school for school in self.list_for(EntityKind.SCHOOL)
        }
        for school in self._schools.values():
            table.add_row(
                school.name,
                user_names.get(school.admin_id or "", ""),
                school.address,
                school.phone,
                school.email,
                class_counts.get(school.id, 0),
                key=school.id,
            )

    def on_data_table_row_selected(self, event: widgets.DataTable.RowSelected) -> None:
        self._selected_school_id = event.row_key.value
        if self._selected_school_id is None:
            return
        can_manage = self.allowed(Action.MANAGE_SCHOOLS)
        self.query_one("#edit-school", widgets.Button).disabled = not can_manage
        self.query_one("#delete-school", widgets.Button).disabled = not can_manage
        school = self._schools[self._selected_school_id]
        self.query_one("#selection-info", widgets.Static).update(
            f"[bold]Selected:[/bold]\n{school.name}"
        )

    @textual.on(widgets.Button.Pressed, "#add-school")
    def action_add_school(self) -> None:
        """Show the school dialog and add a new school."""

        def on_dialog_closed(
            result: SchoolResult | None,
        ) -> None:
            if result is None or result[1] is None:
                return
            school, admin = result
            try:
                school.add_with_admin(self.dbase, admin)
            except sqlite3.Error as err:
                self.report_error(f"Error adding school {school.name}.", err)
                return
            self.load_schools()
            self.report_success(f"School {school.name} added.")

        self.app.push_screen(SchoolDialog(), callback=on_dialog_closed)

    @textual.on(widgets.Button.Pressed, "#edit-school")
    def action_edit_school(self) -> None:
        if self._selected_school_id is None:
            return

        def on_dialog_closed(
            result: SchoolResult | None,
        ) -> None:
            if result is None:
                return
            try:
                result[0].update(self.dbase)
            except sqlite3.Error as err:
                self.report_error("Error updating school.", err)
                return
            self.load_schools()
            self.report_success("School updated successfully.")

        self.app.push_screen(
            SchoolDialog(self._schools[self._selected_school_id]),
            callback=on_dialog_closed,
        )

    @textual.on(widgets.Button.Pressed, "#delete-school")
    def action_delete_school(self) -> None:
        if self._selected_school_id is None:
            return
        school = self._schools[self._selected_school_id]

        def on_confirmed(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                school.delete(self.dbase)
            except sqlite3.Error as err:
                self.report_error(f"Unable to delete {school.name}.", err)
                return
            self._selected_school_id = None
            self.query_one("#edit-school", widgets.Button).disabled = True
            self.query_one("#delete-school", widgets.Button).disabled = True
            self.load_schools()
            self.report_success(f"Deleted {school.name}.")

        self.app.push_screen(
            confirm_dialogs.DeleteConfirmDialog("school", school.name),
            callback=on_confirmed,
        )
