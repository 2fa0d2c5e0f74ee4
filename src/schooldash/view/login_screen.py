"""Sign in to the dashboard."""

from textual import app, containers, screen, widgets

import schooldash.view
from schooldash.model import session


class LoginScreen(screen.ModalScreen[bool]):
    """Ask for an e-mail address and password.

    Dismissed with True once the session has a signed-in user. Cancelling
    exits the application.
    """

    CSS_PATH = schooldash.view.CSS_FOLDER / "login_screen.tcss"

    user_session: session.Session

    def __init__(self, user_session: session.Session) -> None:
        super().__init__()
        self.user_session = user_session

    def compose(self) -> app.ComposeResult:
        """Build the sign-in dialog."""
        with containers.Vertical(id="login-dialog", classes="modal-dialog"):
            yield widgets.Label("SchoolDash", classes="emphasis")
            yield widgets.Label("Sign in to your account")
            yield widgets.Input(placeholder="Email", id="login-email")
            yield widgets.Input(
                placeholder="Password", password=True, id="login-password"
            )
            yield widgets.Static("", id="login-error")
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Sign In", variant="primary", id="login-submit")
                yield widgets.Button("Quit", id="login-cancel")
            yield widgets.Static(
                "Demo accounts use the password password123:\n"
                "  moe@edutech.gov  admin@school1.edu\n"
                "  teacher1@school1.edu  parent@example.com",
                classes="hint",
            )

    def on_mount(self) -> None:
        """Put focus on the e-mail box."""
        self.query_one("#login-email", widgets.Input).focus()

    def on_button_pressed(self, event: widgets.Button.Pressed) -> None:
        if event.button.id == "login-submit":
            self.check_credentials()
        elif event.button.id == "login-cancel":
            self.app.exit(message="Not signed in.")

    def on_input_submitted(self, event: widgets.Input.Submitted) -> None:
        if event.input.id == "login-email":
            self.query_one("#login-password", widgets.Input).focus()
        else:
            self.check_credentials()

    def check_credentials(self) -> None:
        email = self.query_one("#login-email", widgets.Input).value
        password_input = self.query_one("#login-password", widgets.Input)
        try:
            self.user_session.login(email, password_input.value)
        except session.AuthenticationError as err:
            self.query_one("#login-error", widgets.Static).update(
                schooldash.view.error(str(err))
            )
            password_input.value = ""
            return
        self.dismiss(True)
