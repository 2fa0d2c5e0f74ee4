"""Profile and password settings for the signed-in user."""

import textual
from textual import app, containers, widgets

from schooldash.features import validators
from schooldash.model import config, session
import schooldash.view
from schooldash.view import base_screen


class SettingsScreen(base_screen.SessionScreen):
    """Change the signed-in user's name, e-mail address, or password."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    def compose(self) -> app.ComposeResult:
        user = self.user_session.user
        yield widgets.Header()
        with containers.VerticalScroll(id="settings-form"):
            yield widgets.Label("Profile", classes="emphasis")
            yield widgets.Static(
                f"Role: {user.role.label}" if user is not None else "", classes="hint"
            )
            yield widgets.Input(
                value=user.name if user is not None else "",
                placeholder="Name",
                id="settings-name",
                validators=[validators.NotEmpty()],
            )
            yield widgets.Input(
                value=user.email if user is not None else "",
                placeholder="Email",
                id="settings-email",
                validators=[validators.EmailValidator()],
            )
            yield widgets.Button("Save Profile", variant="primary", id="save-profile")
            yield widgets.Rule(classes="separator")
            yield widgets.Label("Change Password", classes="emphasis")
            yield widgets.Static(
                "Passwords must be at least "
                f"{config.settings.min_password_length} characters.",
                classes="hint",
            )
            yield widgets.Input(
                placeholder="Current Password", password=True, id="settings-current"
            )
            yield widgets.Input(
                placeholder="New Password", password=True, id="settings-new"
            )
            yield widgets.Input(
                placeholder="Confirm New Password",
                password=True,
                id="settings-confirm",
            )
            yield widgets.Button(
                "Change Password", variant="warning", id="change-password"
            )
            yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    @textual.on(widgets.Button.Pressed, "#save-profile")
    def save_profile(self) -> None:
        name_input = self.query_one("#settings-name", widgets.Input)
        email_input = self.query_one("#settings-email", widgets.Input)
        invalid = validators.first_failure([name_input, email_input])
        if invalid:
            self.report_error(invalid)
            return
        try:
            self.user_session.update_profile(name_input.value, email_input.value)
        except session.ValidationError as err:
            self.report_error(str(err))
            return
        self.report_success("Profile updated.")

    @textual.on(widgets.Button.Pressed, "#change-password")
    def change_password(self) -> None:
        password_inputs = [
            self.query_one(f"#settings-{name}", widgets.Input)
            for name in ["current", "new", "confirm"]
        ]
        try:
            self.user_session.change_password(
                *[password_input.value for password_input in password_inputs]
            )
        except session.ValidationError as err:
            self.report_error(str(err))
            return
        for password_input in password_inputs:
            password_input.value = ""
        self.report_success("Password changed.")
