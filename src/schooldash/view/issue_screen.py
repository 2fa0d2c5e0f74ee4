"""Report issues and follow them to resolution."""

import sqlite3
from typing import Optional

import textual
from textual import app, containers, screen, widgets

from schooldash.features import validators
from schooldash.model import issues_mod, users_mod
from schooldash.model.issues_mod import IssueStatus
from schooldash.model.policy import Action
from schooldash.model.scope import EntityKind
import schooldash.view
from schooldash.view import base_screen


class IssueDialog(screen.ModalScreen[Optional[tuple[str, str]]]):
    """Ask for an issue's subject and description."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    def compose(self) -> app.ComposeResult:
        with containers.Vertical(id="issue-dialog", classes="modal-dialog"):
            yield widgets.Label("Report an Issue", classes="emphasis")
            yield widgets.Input(
                placeholder="Subject",
                id="issue-subject",
                validators=[validators.NotEmpty()],
            )
            yield widgets.TextArea("", id="issue-description")
            yield widgets.Static("", id="dialog-error")
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Submit", variant="primary", id="submit-issue")
                yield widgets.Button("Cancel", id="cancel-issue")

    def on_button_pressed(self, event: widgets.Button.Pressed) -> None:
        if event.button.id == "cancel-issue":
            self.dismiss(None)
            return
        if event.button.id != "submit-issue":
            return
        subject = self.query_one("#issue-subject", widgets.Input).value.strip()
        description = self.query_one("#issue-description", widgets.TextArea).text
        if not subject or not description.strip():
            self.query_one("#dialog-error", widgets.Static).update(
                schooldash.view.error("Subject and description are required.")
            )
            return
        self.dismiss((subject, description))


class IssueScreen(base_screen.SessionScreen):
    """Issues visible to the user, newest first."""

    _issues: dict[str, issues_mod.Issue]
    _selected_issue_id: Optional[str]

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        yield widgets.Header()
        with containers.Horizontal():
            with containers.Vertical(classes="record-list"):
                yield widgets.Label("Issues", classes="emphasis")
                yield widgets.DataTable(zebra_stripes=True, id="issue-table")
                yield widgets.Static("", id="issue-description", classes="detail")
            with containers.Vertical(classes="record-actions"):
                yield widgets.Label("Actions", classes="emphasis")
                if self.allowed(Action.REPORT_ISSUES):
                    yield widgets.Button(
                        "Report Issue", variant="success", id="add-issue"
                    )
                if self.allowed(Action.UPDATE_ISSUE_STATUS):
                    yield widgets.Label("Change Status:")
                    yield widgets.Select(
                        [(status.label, status.value) for status in IssueStatus],
                        prompt="Status",
                        id="issue-status",
                        disabled=True,
                    )
                yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        self._issues = {}
        self._selected_issue_id = None
        table = self.query_one("#issue-table", widgets.DataTable)
        table.cursor_type = "row"
        table.add_columns("Subject", "Reported By", "Role", "Status", "Reported")
        self.load_issues()

    def load_issues(self) -> None:
        table = self.query_one("#issue-table", widgets.DataTable)
        table.clear()
        user_names = users_mod.User.get_names(self.dbase)
        self._issues = {issue.id: issue for issue in self.list_for(EntityKind.ISSUE)}
        for issue in self._issues.values():
            table.add_row(
                issue.subject,
                user_names.get(issue.reported_by, ""),
                issue.reporter_role.label,
                issue.status.label,
                issue.created_at.strftime("%Y-%m-%d"),
                key=issue.id,
            )

    def on_data_table_row_selected(self, event: widgets.DataTable.RowSelected) -> None:
        self._selected_issue_id = event.row_key.value
        if self._selected_issue_id is None:
            return
        issue = self._issues[self._selected_issue_id]
        self.query_one("#issue-description", widgets.Static).update(
            f"[b]{issue.subject}[/b]\n{issue.description}"
        )
        for select in self.query("#issue-status").results(widgets.Select):
            select.disabled = False
            with select.prevent(widgets.Select.Changed):
                select.value = issue.status.value

    @textual.on(widgets.Select.Changed, "#issue-status")
    def on_status_changed(self, event: widgets.Select.Changed) -> None:
        if self._selected_issue_id is None or not isinstance(event.value, str):
            return
        issue = self._issues[self._selected_issue_id]
        new_status = IssueStatus(event.value)
        if new_status == issue.status:
            return
        try:
            issue.set_status(self.dbase, new_status)
        except sqlite3.Error as err:
            self.report_error("Unable to update issue.", err)
            return
        self.load_issues()
        self.report_success(f"{issue.subject} is now {new_status.label.lower()}.")

    @textual.on(widgets.Button.Pressed, "#add-issue")
    def action_add_issue(self) -> None:
        reporter = self.user_session.user
        if reporter is None:
            return

        def on_dialog_closed(values: tuple[str, str] | None) -> None:
            if values is None:
                return
            subject, description = values
            try:
                issues_mod.Issue.report(self.dbase, reporter, subject, description)
            except sqlite3.Error as err:
                self.report_error("Error reporting issue.", err)
                return
            self.load_issues()
            self.report_success("Issue reported.")

        self.app.push_screen(IssueDialog(), callback=on_dialog_closed)
