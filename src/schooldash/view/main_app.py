"""Main entry point for the SchoolDash application."""

import logging

import textual
from textual import app, binding, containers, reactive, widgets

from schooldash.model import announcements_mod, config, database, policy, reports
from schooldash.model import scope, seed, session
from schooldash.model.users_mod import Role
import schooldash.view
from schooldash.view import (
    absence_request_screen,
    announcement_screen,
    attendance_screen,
    base_screen,
    children_screen,
    class_screen,
    confirm_dialogs,
    issue_screen,
    login_screen,
    parent_screen,
    report_screen,
    schedule_screen,
    school_screen,
    settings_screen,
    student_screen,
    teacher_screen,
)


logger = logging.getLogger(__name__)

Action = policy.Action

MENU: list[tuple[str, str, Action, type[base_screen.SessionScreen]]] = [
    ("schools", "Schools", Action.MANAGE_SCHOOLS, school_screen.SchoolScreen),
    ("classes", "Classes", Action.VIEW_CLASSES, class_screen.ClassScreen),
    ("students", "Students", Action.VIEW_STUDENTS, student_screen.StudentScreen),
    ("teachers", "Teachers", Action.VIEW_TEACHERS, teacher_screen.TeacherScreen),
    ("parents", "Parents", Action.MANAGE_PARENTS, parent_screen.ParentScreen),
    (
        "attendance",
        "Take Attendance",
        Action.TAKE_ATTENDANCE,
        attendance_screen.AttendanceScreen,
    ),
    (
        "schedules",
        "Schedules",
        Action.VIEW_SCHEDULES,
        schedule_screen.ScheduleScreen,
    ),
    (
        "children",
        "My Children",
        Action.VIEW_CHILDREN,
        children_screen.ChildrenScreen,
    ),
    (
        "absence-requests",
        "Absence Requests",
        Action.VIEW_ABSENCE_REQUESTS,
        absence_request_screen.AbsenceRequestScreen,
    ),
    (
        "announcements",
        "Announcements",
        Action.VIEW_ANNOUNCEMENTS,
        announcement_screen.AnnouncementScreen,
    ),
    ("reports", "Reports", Action.VIEW_REPORTS, report_screen.ReportScreen),
    ("issues", "Issues", Action.VIEW_ISSUES, issue_screen.IssueScreen),
    (
        "settings",
        "Settings",
        Action.EDIT_SETTINGS,
        settings_screen.SettingsScreen,
    ),
]
"""Menu id, button label, required action, and screen class."""

LATEST_ANNOUNCEMENT_COUNT = 3


class SchoolDash(app.App):
    """Main application and dashboard screen."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "main.tcss"
    TITLE = "SchoolDash"
    BINDINGS = [
        binding.Binding("l", "logout", "Sign Out"),
        binding.Binding("r", "refresh_dashboard", "Refresh"),
    ]
    dbase: database.DBase
    """Connection to Sqlite Database."""
    user_session: session.Session
    """The signed-in user, if any."""
    message = reactive.reactive("")

    def __init__(self) -> None:
        """Open the database, loading demonstration data on first run."""
        super().__init__()
        if config.settings.db_path is None:
            raise database.DBaseError("No database file selected.")
        self.dbase = database.DBase.open_or_create(config.settings.db_path)
        self._seeded = seed.seed_database(self.dbase)
        self.user_session = session.Session(self.dbase, config.settings.session_file)

    def compose(self) -> app.ComposeResult:
        """Add widgets to screen."""
        yield widgets.Header()
        with containers.Horizontal():
            with containers.VerticalScroll(id="main-menu"):
                yield widgets.Label("Menu", classes="emphasis")
                for menu_id, label, _, _ in MENU:
                    yield widgets.Button(
                        label, id=f"main-{menu_id}", classes="main-menu-button"
                    )
                yield widgets.Button("Sign Out", variant="error", id="main-logout")
            with containers.VerticalScroll(id="main-dashboard"):
                yield widgets.Label("", id="main-greeting", classes="emphasis")
                yield widgets.Static("", id="main-user-info")
                with containers.HorizontalGroup(id="main-stat-cards"):
                    for card_id in ["first", "second", "third", "fourth"]:
                        yield widgets.Static(
                            "", id=f"main-card-{card_id}", classes="stat-card"
                        )
                yield widgets.Label("Latest Announcements", classes="emphasis")
                yield widgets.Static("", id="main-announcements")
        yield widgets.Label("", id="main-status-message", classes="app-alert")
        yield widgets.Footer()

    def on_mount(self) -> None:
        """Resume the saved session or ask the user to sign in."""
        if self._seeded:
            self.message = schooldash.view.success("Loaded demonstration data.")
        if self.user_session.restore():
            self.refresh_dashboard()
        else:
            self.show_login()

    def show_login(self) -> None:
        """Push the sign-in dialog and rebuild the dashboard afterwards."""

        def _on_login(signed_in: bool | None) -> None:
            if signed_in:
                self.refresh_dashboard()

        self.push_screen(
            login_screen.LoginScreen(self.user_session), callback=_on_login
        )

    def action_refresh_dashboard(self) -> None:
        if self.user_session.is_authenticated:
            self.refresh_dashboard()

    def refresh_dashboard(self) -> None:
        """Show the menu entries and statistics for the signed-in role."""
        user = self.user_session.user
        if user is None:
            return
        user_scope = self.user_session.scope
        allowed = policy.allowed_actions(user.role)
        for menu_id, _, action, _ in MENU:
            button = self.query_one(f"#main-{menu_id}", widgets.Button)
            button.display = action in allowed
        self.sub_title = user.role.label
        self.query_one("#main-greeting", widgets.Label).update(
            f"Welcome back, {user.first_name}!"
        )
        self.query_one("#main-user-info", widgets.Static).update(
            f"{user.name} ({user.email})\n{user.role.label}"
        )
        self._update_stat_cards(user_scope)
        self._update_announcements(user_scope)
        textual.log(f"Dashboard refreshed for {user.email}")

    def _update_stat_cards(self, user_scope: scope.Scope) -> None:
        stats = reports.dashboard_stats(self.dbase, user_scope)
        match user_scope.role:
            case Role.MINISTRY:
                cards = [
                    ("Total Schools", stats.schools),
                    ("Classes", stats.classes),
                    ("Teachers", stats.teachers),
                    ("Announcements", stats.announcements),
                ]
            case Role.PARENT:
                cards = [
                    ("My Children", stats.students),
                    ("Present Today", stats.present_today),
                    ("Pending Requests", stats.pending_requests),
                    ("Announcements", stats.announcements),
                ]
            case _:
                cards = [
                    ("Students", stats.students),
                    ("Classes", stats.classes),
                    ("Attendance Today", f"{stats.today_rate}%"),
                    ("Pending Requests", stats.pending_requests),
                ]
        for card_id, (label, value) in zip(
            ["first", "second", "third", "fourth"], cards
        ):
            self.query_one(f"#main-card-{card_id}", widgets.Static).update(
                f"[b]{value}[/b]\n{label}"
            )

    def _update_announcements(self, user_scope: scope.Scope) -> None:
        latest: list[announcements_mod.Announcement] = scope.list_for(
            self.dbase, user_scope, scope.EntityKind.ANNOUNCEMENT
        )[:LATEST_ANNOUNCEMENT_COUNT]
        if latest:
            text = "\n\n".join(
                f"[b]{item.title}[/b] ({item.priority.value})\n{item.content}"
                for item in latest
            )
        else:
            text = "No announcements."
        self.query_one("#main-announcements", widgets.Static).update(text)

    def on_button_pressed(self, event: widgets.Button.Pressed) -> None:
        """Open the screen for a menu button."""
        button_id = event.button.id or ""
        for menu_id, _, action, screen_class in MENU:
            if button_id == f"main-{menu_id}":
                self.open_screen(action, screen_class)
                return

    def open_screen(
        self, action: Action, screen_class: type[base_screen.SessionScreen]
    ) -> None:
        """Push a menu screen if the signed-in role may use it."""
        role = self.user_session.role
        if role is None or not policy.is_allowed(role, action):
            self.message = schooldash.view.error("Not available for your role.")
            return
        self.push_screen(
            screen_class(self.user_session),
            callback=lambda _: self.action_refresh_dashboard(),
        )

    @textual.on(widgets.Button.Pressed, "#main-logout")
    def action_logout(self) -> None:
        """Sign out after confirmation."""

        def _logout(confirmed: bool | None) -> None:
            if confirmed:
                logger.info("Signing out %s", self.user_session.user)
                self.user_session.logout()
                self.message = ""
                self.show_login()

        if self.user_session.is_authenticated:
            self.push_screen(
                confirm_dialogs.GeneralConfirmDialog("sign out", "Sign Out"),
                callback=_logout,
            )

    def watch_message(self) -> None:
        """Update the status message on changes."""
        status_label = self.query_one("#main-status-message", widgets.Label)
        status_label.update(self.message)

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Disable dashboard shortcuts while another screen is active."""
        if action in ("logout", "refresh_dashboard"):
            return len(self.screen_stack) == 1
        return True
