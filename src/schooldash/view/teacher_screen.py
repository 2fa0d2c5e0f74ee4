"""View teachers and manage their accounts."""

import sqlite3
from typing import Optional

import textual
from textual import app, containers, screen, widgets

from schooldash.features import validators
from schooldash.model import config, teachers_mod, users_mod
from schooldash.model.policy import Action
from schooldash.model.scope import EntityKind
import schooldash.view
from schooldash.view import base_screen, confirm_dialogs


TeacherResult = tuple[teachers_mod.Teacher, users_mod.User]
"""A teacher and the teacher's user account."""


class TeacherDialog(screen.ModalScreen[Optional[TeacherResult]]):
    """Add a teacher together with a user account, or edit both."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    school_id: str
    teacher: Optional[teachers_mod.Teacher]
    user: Optional[users_mod.User]

    def __init__(
        self,
        school_id: str,
        teacher: teachers_mod.Teacher | None = None,
        user: users_mod.User | None = None,
    ) -> None:
        self.school_id = school_id
        self.teacher = teacher
        self.user = user
        super().__init__()

    def compose(self) -> app.ComposeResult:
        teacher, user = self.teacher, self.user
        title = "Edit Teacher" if teacher else "Add New Teacher"
        with containers.VerticalScroll(id="teacher-dialog", classes="modal-dialog"):
            yield widgets.Label(title, classes="emphasis")
            yield widgets.Input(
                value=user.name if user else "",
                placeholder="Full Name",
                id="teacher-name",
                validators=[validators.NotEmpty()],
            )
            yield widgets.Input(
                value=user.email if user else "",
                placeholder="Email",
                id="teacher-email",
                validators=[validators.EmailValidator()],
            )
            if teacher is None:
                yield widgets.Input(
                    placeholder=(
                        f"Password (default {config.settings.default_password})"
                    ),
                    password=True,
                    id="teacher-password",
                )
            yield widgets.Input(
                value=teacher.subjects_text if teacher else "",
                placeholder="Subjects, separated by commas",
                id="teacher-subjects",
            )
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Label("Supervisor:")
                yield widgets.Switch(
                    teacher.is_supervisor if teacher else False,
                    id="teacher-supervisor",
                )
            yield widgets.Static("", id="dialog-error")
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Save", variant="primary", id="save-teacher")
                yield widgets.Button("Cancel", id="cancel-teacher")

    @textual.on(widgets.Button.Pressed, "#cancel-teacher")
    def cancel_dialog(self) -> None:
        self.dismiss(None)

    @textual.on(widgets.Button.Pressed, "#save-teacher")
    def save_teacher(self) -> None:
        invalid = validators.first_failure(self.query(widgets.Input))
        if invalid:
            self.query_one("#dialog-error", widgets.Static).update(
                schooldash.view.error(invalid)
            )
            return
        name = self.query_one("#teacher-name", widgets.Input).value.strip()
        email = self.query_one("#teacher-email", widgets.Input).value.strip()
        subjects = teachers_mod.parse_subjects(
            self.query_one("#teacher-subjects", widgets.Input).value
        )
        is_supervisor = self.query_one("#teacher-supervisor", widgets.Switch).value
        if self.teacher is None or self.user is None:
            password = self.query_one("#teacher-password", widgets.Input).value
            user = users_mod.User(
                id="",
                email=email,
                password=password if password else config.settings.default_password,
                name=name,
                role=users_mod.Role.TEACHER,
                school_id=self.school_id,
            )
            teacher = teachers_mod.Teacher(
                id="",
                user_id=user.id,
                school_id=self.school_id,
                subjects=subjects,
                is_supervisor=is_supervisor,
            )
            self.dismiss((teacher, user))
            return
        self.user.name = name
        self.user.email = email
        self.teacher.subjects = subjects
        self.teacher.is_supervisor = is_supervisor
        self.dismiss((self.teacher, self.user))


class TeacherScreen(base_screen.SessionScreen):
    """Teachers in the user's school, or in every school for the ministry."""

    _teachers: dict[str, teachers_mod.Teacher]
    _users: dict[str, users_mod.User]
    _selected_teacher_id: Optional[str]

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        yield widgets.Header()
        with containers.Horizontal():
            with containers.Vertical(classes="record-list"):
                yield widgets.Label("Teachers", classes="emphasis")
                yield widgets.DataTable(zebra_stripes=True, id="teacher-table")
            with containers.Vertical(classes="record-actions"):
                yield widgets.Label("Actions", classes="emphasis")
                yield widgets.Static(
                    "No teacher selected",
                    id="selection-info",
                    classes="selection-info",
                )
                yield widgets.Button(
                    "Add Teacher",
                    variant="success",
                    id="add-teacher",
                    disabled=not self.allowed(Action.MANAGE_TEACHERS),
                )
                yield widgets.Button("Edit Selected", id="edit-teacher", disabled=True)
                yield widgets.Button(
                    "Delete Selected",
                    variant="error",
                    id="delete-teacher",
                    disabled=True,
                )
                yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        self._teachers = {}
        self._users = {}
        self._selected_teacher_id = None
        table = self.query_one("#teacher-table", widgets.DataTable)
        table.cursor_type = "row"
        table.add_columns("Name", "Email", "Subjects", "Supervisor", "School")
        self.load_teachers()

    def load_teachers(self) -> None:
        table = self.query_one("#teacher-table", widgets.DataTable)
        table.clear()
        school_names = {
            school.id: school.name for school in self.list_for(EntityKind.SCHOOL)
        }
        self._users = {user.id: user for user in users_mod.User.get_all(self.dbase)}
        self._teachers = {
            teacher.id: teacher for teacher in self.list_for(EntityKind.TEACHER)
        }
        for teacher in self._teachers.values():
            user = self._users.get(teacher.user_id)
            table.add_row(
                user.name if user else "",
                user.email if user else "",
                teacher.subjects_text,
                "Yes" if teacher.is_supervisor else "",
                school_names.get(teacher.school_id, ""),
                key=teacher.id,
            )

    def on_data_table_row_selected(self, event: widgets.DataTable.RowSelected) -> None:
        self._selected_teacher_id = event.row_key.value
        if self._selected_teacher_id is None:
            return
        can_manage = self.allowed(Action.MANAGE_TEACHERS)
        self.query_one("#edit-teacher", widgets.Button).disabled = not can_manage
        self.query_one("#delete-teacher", widgets.Button).disabled = not can_manage
        user = self._users.get(self._teachers[self._selected_teacher_id].user_id)
        self.query_one("#selection-info", widgets.Static).update(
            f"[bold]Selected:[/bold]\n{user.name if user else 'Unknown user'}"
        )

    @textual.on(widgets.Button.Pressed, "#add-teacher")
    def action_add_teacher(self) -> None:
        if self.user_scope.school_id is None:
            self.report_error("Your account is not assigned to a school.")
            return

        def on_dialog_closed(result: TeacherResult | None) -> None:
            if result is None:
                return
            teacher, user = result
            try:
                teacher.add_with_user(self.dbase, user)
            except sqlite3.Error as err:
                self.report_error(f"Error adding teacher {user.name}.", err)
                return
            self.load_teachers()
            self.report_success(f"Teacher {user.name} added.")

        self.app.push_screen(
            TeacherDialog(self.user_scope.school_id), callback=on_dialog_closed
        )

    @textual.on(widgets.Button.Pressed, "#edit-teacher")
    def action_edit_teacher(self) -> None:
        if self._selected_teacher_id is None:
            return
        teacher = self._teachers[self._selected_teacher_id]
        user = self._users.get(teacher.user_id)
        if user is None:
            self.report_error("The teacher's user account is missing.")
            return

        def on_dialog_closed(result: TeacherResult | None) -> None:
            if result is None:
                return
            try:
                result[1].update(self.dbase)
                result[0].update(self.dbase)
            except sqlite3.Error as err:
                self.report_error("Error updating teacher.", err)
                return
            self.load_teachers()
            self.report_success("Teacher updated successfully.")

        self.app.push_screen(
            TeacherDialog(teacher.school_id, teacher, user), callback=on_dialog_closed
        )

    @textual.on(widgets.Button.Pressed, "#delete-teacher")
    def action_delete_teacher(self) -> None:
        if self._selected_teacher_id is None:
            return
        teacher = self._teachers[self._selected_teacher_id]
        user = self._users.get(teacher.user_id)
        name = user.name if user else teacher.id

        def on_confirmed(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                teacher.delete(self.dbase)
            except sqlite3.Error as err:
                self.report_error(f"Unable to delete {name}.", err)
                return
            self._selected_teacher_id = None
            self.query_one("#edit-teacher", widgets.Button).disabled = True
            self.query_one("#delete-teacher", widgets.Button).disabled = True
            self.load_teachers()
            self.report_success(f"Deleted {name}.")

        self.app.push_screen(
            confirm_dialogs.DeleteConfirmDialog("teacher", name),
            callback=on_confirmed,
        )
