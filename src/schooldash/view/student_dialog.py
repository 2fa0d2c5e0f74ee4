"""Modal dialog for adding and editing students."""

from typing import Optional

from textual import app, containers, screen, widgets

import schooldash.view
from schooldash.features import validators
from schooldash.model import schools_mod, students_mod


class StudentDialog(screen.ModalScreen[Optional[students_mod.Student]]):
    """A dialog for adding or editing student details."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    def __init__(
        self,
        classes: list[schools_mod.SchoolClass],
        student: students_mod.Student | None = None,
    ) -> None:
        self.classes = classes
        self.student = student
        super().__init__()

    def compose(self) -> app.ComposeResult:
        title = "Edit Student" if self.student else "Add New Student"
        student = self.student
        with containers.VerticalScroll(id="student-dialog", classes="modal-dialog"):
            yield widgets.Label(title, classes="emphasis")
            yield widgets.Input(
                value=student.name if student else "",
                placeholder="Full Name",
                id="s-name",
                validators=[validators.NotEmpty()],
            )
            yield widgets.Input(
                value=student.student_number if student else "",
                placeholder="Student Number (e.g., STU-2024-001)",
                id="s-number",
                validators=[validators.NotEmpty()],
            )
            yield widgets.Label("Class:")
            yield widgets.Select(
                [(school_class.name, school_class.id) for school_class in self.classes],
                value=student.class_id if student else widgets.Select.BLANK,
                prompt="Select a class",
                id="s-class",
            )
            yield widgets.Input(
                value=(student.birth_iso or "") if student else "",
                placeholder="Date of Birth (YYYY-MM-DD)",
                id="s-birth",
                validators=[validators.DateValidator(allow_blank=True)],
            )
            yield widgets.Label("Gender:")
            yield widgets.Select(
                [
                    (gender.value.title(), gender.value)
                    for gender in students_mod.Gender
                ],
                value=(student.gender if student else students_mod.Gender.MALE).value,
                allow_blank=False,
                id="s-gender",
            )
            yield widgets.Static("", id="dialog-error")
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Save", variant="primary", id="save-student")
                yield widgets.Button("Cancel", id="cancel-student")

    def on_mount(self) -> None:
        self.query_one("#s-name", widgets.Input).focus()

    def on_button_pressed(self, event: widgets.Button.Pressed) -> None:
        if event.button.id == "save-student":
            self.save_student()
        elif event.button.id == "cancel-student":
            self.dismiss(None)

    def save_student(self) -> None:
        error_widget = self.query_one("#dialog-error", widgets.Static)
        invalid = validators.first_failure(self.query(widgets.Input))
        class_id = self.query_one("#s-class", widgets.Select).value
        if invalid is None and not isinstance(class_id, str):
            invalid = "Select a class for the student."
        if invalid:
            error_widget.update(schooldash.view.error(invalid))
            return
        birth_text = self.query_one("#s-birth", widgets.Input).value.strip()
        data = {
            "name": self.query_one("#s-name", widgets.Input).value.strip(),
            "student_number": self.query_one("#s-number", widgets.Input).value.strip(),
            "class_id": class_id,
            "date_of_birth": validators.parse_date(birth_text) if birth_text else None,
            "gender": self.query_one("#s-gender", widgets.Select).value,
        }
        if self.student is None:
            data["id"] = ""
        else:
            data["id"] = self.student.id
            data["parent_id"] = self.student.parent_id
            data["is_active"] = self.student.is_active
            data["created_at"] = self.student.created_at
        self.dismiss(students_mod.Student(**data))
