"""Common behavior for screens that work on behalf of the signed-in user."""

import textual
from textual import binding, screen, widgets

import schooldash.view
from schooldash.model import database, policy, scope, session


class SessionScreen(screen.Screen):
    """A screen opened from the main menu.

    Subclasses yield a Static widget with id "status-message" to receive
    messages from update_status().
    """

    user_session: session.Session
    """The signed-in user."""
    dbase: database.DBase
    """Connection to Sqlite Database."""
    user_scope: scope.Scope
    """Scope used to filter every query made by the screen."""

    BINDINGS = [
        binding.Binding("escape", "back", "Back to Dashboard", show=True),
    ]

    def __init__(self, user_session: session.Session) -> None:
        super().__init__()
        self.user_session = user_session
        self.dbase = user_session.dbase
        self.user_scope = user_session.scope

    def action_back(self) -> None:
        """Close the screen and return to the dashboard."""
        self.dismiss()

    def allowed(self, action: policy.Action) -> bool:
        """True if the signed-in user may perform the action."""
        return policy.is_allowed(self.user_scope.role, action)

    def list_for(self, kind: scope.EntityKind) -> list:
        """Records of one kind visible to the signed-in user."""
        return scope.list_for(self.dbase, self.user_scope, kind)

    def update_status(self, message: str) -> None:
        """Update the text in the status widget."""
        self.query_one("#status-message", widgets.Static).update(message)

    def report_success(self, message: str) -> None:
        self.update_status(schooldash.view.success(message))

    def report_error(self, message: str, err: Exception | None = None) -> None:
        """Show an error in red, including the exception text if given."""
        if err is not None:
            textual.log(f"{message}: {err}")
            message = f"{message}\nError Description:\n{err}"
        self.update_status(schooldash.view.error(message))
