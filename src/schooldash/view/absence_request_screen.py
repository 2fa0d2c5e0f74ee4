"""Submit and review requests to excuse a student's absence."""

import sqlite3
from typing import Optional

import textual
from textual import app, containers, screen, widgets

from schooldash.features import validators
from schooldash.model import requests_mod, students_mod
from schooldash.model.policy import Action
from schooldash.model.requests_mod import RequestStatus
from schooldash.model.scope import EntityKind
import schooldash.view
from schooldash.view import base_screen, confirm_dialogs


class AbsenceRequestDialog(screen.ModalScreen[Optional[dict]]):
    """Collect the child, dates, and reason for a new request.

    Dismissed with a dict of AbsenceRequest.submit() keyword arguments,
    or None when cancelled.
    """

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    children: list[students_mod.Student]

    def __init__(self, children: list[students_mod.Student]) -> None:
        self.children = children
        super().__init__()

    def compose(self) -> app.ComposeResult:
        with containers.VerticalScroll(id="request-dialog", classes="modal-dialog"):
            yield widgets.Label("New Absence Request", classes="emphasis")
            yield widgets.Select(
                [(student.name, student.id) for student in self.children],
                prompt="Select a child",
                id="request-student",
            )
            yield widgets.Input(
                placeholder="Start Date (YYYY-MM-DD)",
                id="request-start",
                validators=[validators.DateValidator()],
            )
            yield widgets.Input(
                placeholder="End Date (YYYY-MM-DD)",
                id="request-end",
                validators=[validators.DateValidator()],
            )
            yield widgets.Input(
                placeholder="Reason",
                id="request-reason",
                validators=[validators.NotEmpty()],
            )
            yield widgets.Static("", id="dialog-error")
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Submit", variant="primary", id="submit-request")
                yield widgets.Button("Cancel", id="cancel-request")

    @textual.on(widgets.Button.Pressed, "#cancel-request")
    def cancel_dialog(self) -> None:
        self.dismiss(None)

    @textual.on(widgets.Button.Pressed, "#submit-request")
    def submit_request(self) -> None:
        student_id = self.query_one("#request-student", widgets.Select).value
        invalid = validators.first_failure(self.query(widgets.Input))
        if invalid is None and not isinstance(student_id, str):
            invalid = "Select a child."
        if invalid is None:
            start_date = validators.parse_date(
                self.query_one("#request-start", widgets.Input).value
            )
            end_date = validators.parse_date(
                self.query_one("#request-end", widgets.Input).value
            )
            if end_date < start_date:
                invalid = "End date cannot be before start date."
        if invalid:
            self.query_one("#dialog-error", widgets.Static).update(
                schooldash.view.error(invalid)
            )
            return
        self.dismiss(
            {
                "student_id": student_id,
                "start_date": start_date,
                "end_date": end_date,
                "reason": self.query_one("#request-reason", widgets.Input).value,
            }
        )


class AbsenceRequestScreen(base_screen.SessionScreen):
    """Parents see their own requests. School administrators review requests."""

    _requests: list[requests_mod.AbsenceRequest]
    _selected_request_id: Optional[str]

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        can_review = self.allowed(Action.REVIEW_ABSENCE_REQUESTS)
        yield widgets.Header()
        with containers.Horizontal():
            with containers.Vertical(classes="record-list"):
                with containers.Horizontal(classes="filter-row"):
                    yield widgets.Label("Absence Requests", classes="emphasis")
                    yield widgets.Select(
                        [
                            (status.value.title(), status.value)
                            for status in RequestStatus
                        ],
                        prompt="All Statuses",
                        id="request-status-filter",
                    )
                yield widgets.DataTable(zebra_stripes=True, id="request-table")
            with containers.Vertical(classes="record-actions"):
                yield widgets.Label("Actions", classes="emphasis")
                yield widgets.Static(
                    "No request selected",
                    id="selection-info",
                    classes="selection-info",
                )
                if self.allowed(Action.SUBMIT_ABSENCE_REQUESTS):
                    yield widgets.Button(
                        "New Request", variant="success", id="add-request"
                    )
                if can_review:
                    yield widgets.Button(
                        "Approve",
                        variant="success",
                        id="approve-request",
                        disabled=True,
                    )
                    yield widgets.Button(
                        "Reject", variant="error", id="reject-request", disabled=True
                    )
                yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        self._requests = []
        self._selected_request_id = None
        table = self.query_one("#request-table", widgets.DataTable)
        table.cursor_type = "row"
        table.add_columns("Student", "From", "To", "Reason", "Status", "Submitted")
        self.load_requests()

    def _status_filter(self) -> Optional[RequestStatus]:
        value = self.query_one("#request-status-filter", widgets.Select).value
        return RequestStatus(value) if isinstance(value, str) else None

    def load_requests(self) -> None:
        """Show the requests that pass the status filter, newest first."""
        table = self.query_one("#request-table", widgets.DataTable)
        table.clear()
        student_names = {
            student.id: student.name for student in self.list_for(EntityKind.STUDENT)
        }
        self._requests = requests_mod.filter_by_status(
            self.list_for(EntityKind.ABSENCE_REQUEST), self._status_filter()
        )
        for request in self._requests:
            table.add_row(
                student_names.get(request.student_id, ""),
                request.start_date.isoformat(),
                request.end_date.isoformat(),
                request.reason,
                request.status.value.title(),
                request.created_at.strftime("%Y-%m-%d"),
                key=request.id,
            )

    @textual.on(widgets.Select.Changed, "#request-status-filter")
    def on_status_filter_changed(self) -> None:
        self.load_requests()

    def _selected_request(self) -> Optional[requests_mod.AbsenceRequest]:
        for request in self._requests:
            if request.id == self._selected_request_id:
                return request
        return None

    def _set_review_buttons(self, enabled: bool) -> None:
        for button_id in ["#approve-request", "#reject-request"]:
            for button in self.query(button_id).results(widgets.Button):
                button.disabled = not enabled

    def on_data_table_row_selected(self, event: widgets.DataTable.RowSelected) -> None:
        self._selected_request_id = event.row_key.value
        request = self._selected_request()
        if request is None:
            return
        self._set_review_buttons(request.is_pending)
        self.query_one("#selection-info", widgets.Static).update(
            f"[bold]Selected:[/bold]\n{request.reason}\n"
            f"{request.start_date} to {request.end_date}\n"
            f"Status: {request.status.value.title()}"
        )

    @textual.on(widgets.Button.Pressed, "#add-request")
    def action_add_request(self) -> None:
        parent_id = self.user_scope.parent_id
        if parent_id is None:
            self.report_error("Your account is not linked to a parent record.")
            return

        def on_dialog_closed(values: dict | None) -> None:
            if values is None:
                return
            try:
                requests_mod.AbsenceRequest.submit(
                    self.dbase, parent_id=parent_id, **values
                )
            except ValueError as err:
                self.report_error(str(err))
                return
            except sqlite3.Error as err:
                self.report_error("Error submitting request.", err)
                return
            self.load_requests()
            self.report_success("Absence request submitted.")

        self.app.push_screen(
            AbsenceRequestDialog(self.list_for(EntityKind.STUDENT)),
            callback=on_dialog_closed,
        )

    def _review(self, approve: bool) -> None:
        request = self._selected_request()
        if request is None:
            return
        verb = "approve" if approve else "reject"

        def on_confirmed(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                if approve:
                    request.approve(self.dbase, self.user_scope.user_id)
                else:
                    request.reject(self.dbase, self.user_scope.user_id)
            except requests_mod.RequestReviewError as err:
                self.report_error(str(err))
            except sqlite3.Error as err:
                self.report_error(f"Unable to {verb} request.", err)
            else:
                self.report_success(f"Request {request.status.value}.")
            self._set_review_buttons(False)
            self.load_requests()

        self.app.push_screen(
            confirm_dialogs.GeneralConfirmDialog(
                f"{verb} this absence request", verb.title()
            ),
            callback=on_confirmed,
        )

    @textual.on(widgets.Button.Pressed, "#approve-request")
    def action_approve_request(self) -> None:
        self._review(approve=True)

    @textual.on(widgets.Button.Pressed, "#reject-request")
    def action_reject_request(self) -> None:
        self._review(approve=False)
