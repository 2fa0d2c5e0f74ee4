"""Manage parent accounts and link parents to their children."""

import sqlite3
from typing import Optional

import textual
from textual import app, containers, screen, widgets

from schooldash.features import validators
from schooldash.model import config, parents_mod, students_mod, users_mod
from schooldash.model.scope import EntityKind
import schooldash.view
from schooldash.view import base_screen, confirm_dialogs


ParentResult = tuple[parents_mod.Parent, users_mod.User, list[str]]
"""A parent, the parent's user account, and the ids of the parent's children."""


class ParentDialog(screen.ModalScreen[Optional[ParentResult]]):
    """Add or edit a parent and choose the parent's children."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    students: list[students_mod.Student]
    parent: Optional[parents_mod.Parent]
    user: Optional[users_mod.User]
    child_ids: list[str]

    def __init__(
        self,
        students: list[students_mod.Student],
        parent: parents_mod.Parent | None = None,
        user: users_mod.User | None = None,
        child_ids: list[str] | None = None,
    ) -> None:
        self.students = students
        self.parent = parent
        self.user = user
        self.child_ids = child_ids if child_ids else []
        super().__init__()

    def compose(self) -> app.ComposeResult:
        user = self.user
        title = "Edit Parent" if self.parent else "Add New Parent"
        with containers.VerticalScroll(id="parent-dialog", classes="modal-dialog"):
            yield widgets.Label(title, classes="emphasis")
            yield widgets.Input(
                value=user.name if user else "",
                placeholder="Full Name",
                id="parent-name",
                validators=[validators.NotEmpty()],
            )
            yield widgets.Input(
                value=user.email if user else "",
                placeholder="Email",
                id="parent-email",
                validators=[validators.EmailValidator()],
            )
            if self.parent is None:
                yield widgets.Input(
                    placeholder=(
                        f"Password (default {config.settings.default_password})"
                    ),
                    password=True,
                    id="parent-password",
                )
            yield widgets.Label("Children:")
            yield widgets.SelectionList[str](
                *[
                    (
                        f"{student.name} ({student.student_number})",
                        student.id,
                        student.id in self.child_ids,
                    )
                    for student in self.students
                ],
                id="parent-children",
            )
            yield widgets.Static("", id="dialog-error")
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Save", variant="primary", id="save-parent")
                yield widgets.Button("Cancel", id="cancel-parent")

    @textual.on(widgets.Button.Pressed, "#cancel-parent")
    def cancel_dialog(self) -> None:
        self.dismiss(None)

    @textual.on(widgets.Button.Pressed, "#save-parent")
    def save_parent(self) -> None:
        invalid = validators.first_failure(self.query(widgets.Input))
        if invalid:
            self.query_one("#dialog-error", widgets.Static).update(
                schooldash.view.error(invalid)
            )
            return
        name = self.query_one("#parent-name", widgets.Input).value.strip()
        email = self.query_one("#parent-email", widgets.Input).value.strip()
        child_ids = list(
            self.query_one("#parent-children", widgets.SelectionList).selected
        )
        if self.parent is None or self.user is None:
            password = self.query_one("#parent-password", widgets.Input).value
            user = users_mod.User(
                id="",
                email=email,
                password=password if password else config.settings.default_password,
                name=name,
                role=users_mod.Role.PARENT,
            )
            parent = parents_mod.Parent(id="", user_id=user.id, is_approved=True)
            self.dismiss((parent, user, child_ids))
            return
        self.user.name = name
        self.user.email = email
        self.dismiss((self.parent, self.user, child_ids))


class ParentScreen(base_screen.SessionScreen):
    """Parents connected to the user's school."""

    _parents: dict[str, parents_mod.Parent]
    _users: dict[str, users_mod.User]
    _students: list[students_mod.Student]
    _selected_parent_id: Optional[str]

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        yield widgets.Header()
        with containers.Horizontal():
            with containers.Vertical(classes="record-list"):
                yield widgets.Label("Parents", classes="emphasis")
                yield widgets.DataTable(zebra_stripes=True, id="parent-table")
            with containers.Vertical(classes="record-actions"):
                yield widgets.Label("Actions", classes="emphasis")
                yield widgets.Static(
                    "No parent selected",
                    id="selection-info",
                    classes="selection-info",
                )
                yield widgets.Button("Add Parent", variant="success", id="add-parent")
                yield widgets.Button("Edit Selected", id="edit-parent", disabled=True)
                yield widgets.Button("Approve", id="approve-parent", disabled=True)
                yield widgets.Button(
                    "Delete Selected",
                    variant="error",
                    id="delete-parent",
                    disabled=True,
                )
                yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        self._parents = {}
        self._users = {}
        self._students = []
        self._selected_parent_id = None
        table = self.query_one("#parent-table", widgets.DataTable)
        table.cursor_type = "row"
        table.add_columns("Name", "Email", "Children", "Approved")
        self.load_parents()

    def load_parents(self) -> None:
        table = self.query_one("#parent-table", widgets.DataTable)
        table.clear()
        self._students = self.list_for(EntityKind.STUDENT)
        self._users = {user.id: user for user in users_mod.User.get_all(self.dbase)}
        self._parents = {
            parent.id: parent for parent in self.list_for(EntityKind.PARENT)
        }
        for parent in self._parents.values():
            user = self._users.get(parent.user_id)
            children = ", ".join(
                student.name
                for student in self._students
                if student.parent_id == parent.id
            )
            table.add_row(
                user.name if user else "",
                user.email if user else "",
                children,
                "Yes" if parent.is_approved else "Pending",
                key=parent.id,
            )

    def on_data_table_row_selected(self, event: widgets.DataTable.RowSelected) -> None:
        self._selected_parent_id = event.row_key.value
        if self._selected_parent_id is None:
            return
        parent = self._parents[self._selected_parent_id]
        self.query_one("#edit-parent", widgets.Button).disabled = False
        self.query_one("#delete-parent", widgets.Button).disabled = False
        self.query_one("#approve-parent", widgets.Button).disabled = parent.is_approved
        user = self._users.get(parent.user_id)
        self.query_one("#selection-info", widgets.Static).update(
            f"[bold]Selected:[/bold]\n{user.name if user else 'Unknown user'}"
        )

    @textual.on(widgets.Button.Pressed, "#add-parent")
    def action_add_parent(self) -> None:
        def on_dialog_closed(result: ParentResult | None) -> None:
            if result is None:
                return
            parent, user, child_ids = result
            try:
                parent.add_with_user(self.dbase, user, child_ids)
            except sqlite3.Error as err:
                self.report_error(f"Error adding parent {user.name}.", err)
                return
            self.load_parents()
            self.report_success(f"Parent {user.name} added.")

        self.app.push_screen(ParentDialog(self._students), callback=on_dialog_closed)

    @textual.on(widgets.Button.Pressed, "#edit-parent")
    def action_edit_parent(self) -> None:
        if self._selected_parent_id is None:
            return
        parent = self._parents[self._selected_parent_id]
        user = self._users.get(parent.user_id)
        if user is None:
            self.report_error("The parent's user account is missing.")
            return

        def on_dialog_closed(result: ParentResult | None) -> None:
            if result is None:
                return
            edited_parent, edited_user, child_ids = result
            try:
                edited_user.update(self.dbase)
                edited_parent.link_students(self.dbase, child_ids)
            except sqlite3.Error as err:
                self.report_error("Error updating parent.", err)
                return
            self.load_parents()
            self.report_success("Parent updated successfully.")

        self.app.push_screen(
            ParentDialog(
                self._students, parent, user, parent.student_ids(self.dbase)
            ),
            callback=on_dialog_closed,
        )

    @textual.on(widgets.Button.Pressed, "#approve-parent")
    def action_approve_parent(self) -> None:
        if self._selected_parent_id is None:
            return
        parent = self._parents[self._selected_parent_id]
        try:
            parent.approve(self.dbase)
        except sqlite3.Error as err:
            self.report_error("Error approving parent.", err)
            return
        self.query_one("#approve-parent", widgets.Button).disabled = True
        self.load_parents()
        self.report_success("Parent approved.")

    @textual.on(widgets.Button.Pressed, "#delete-parent")
    def action_delete_parent(self) -> None:
        if self._selected_parent_id is None:
            return
        parent = self._parents[self._selected_parent_id]
        user = self._users.get(parent.user_id)
        name = user.name if user else parent.id

        def on_confirmed(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                parent.delete(self.dbase)
            except sqlite3.Error as err:
                self.report_error(f"Unable to delete {name}.", err)
                return
            self._selected_parent_id = None
            for button_id in ["#edit-parent", "#approve-parent", "#delete-parent"]:
                self.query_one(button_id, widgets.Button).disabled = True
            self.load_parents()
            self.report_success(f"Deleted {name}.")

        self.app.push_screen(
            confirm_dialogs.DeleteConfirmDialog("parent", name),
            callback=on_confirmed,
        )
