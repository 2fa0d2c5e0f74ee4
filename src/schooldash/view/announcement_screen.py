"""Read, post, and edit announcements."""

import sqlite3
from typing import Optional

import textual
from textual import app, containers, screen, widgets

from schooldash.features import validators
from schooldash.model import announcements_mod, users_mod
from schooldash.model.announcements_mod import AnnouncementType, Priority
from schooldash.model.policy import Action
from schooldash.model.scope import EntityKind
import schooldash.view
from schooldash.view import base_screen, confirm_dialogs


class AnnouncementDialog(screen.ModalScreen[Optional[announcements_mod.Announcement]]):
    """Write a new announcement or edit an existing one."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "dialogs.tcss"

    author: users_mod.User
    announcement: Optional[announcements_mod.Announcement]

    def __init__(
        self,
        author: users_mod.User,
        announcement: announcements_mod.Announcement | None = None,
    ) -> None:
        self.author = author
        self.announcement = announcement
        super().__init__()

    def compose(self) -> app.ComposeResult:
        item = self.announcement
        title = "Edit Announcement" if item else "New Announcement"
        with containers.VerticalScroll(
            id="announcement-dialog", classes="modal-dialog"
        ):
            yield widgets.Label(title, classes="emphasis")
            yield widgets.Input(
                value=item.title if item else "",
                placeholder="Title",
                id="announcement-title",
                validators=[validators.NotEmpty()],
            )
            yield widgets.TextArea(
                item.content if item else "", id="announcement-content"
            )
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Select(
                    [(kind.value.title(), kind.value) for kind in AnnouncementType],
                    value=(item.type if item else AnnouncementType.ANNOUNCEMENT).value,
                    allow_blank=False,
                    id="announcement-type",
                )
                yield widgets.Select(
                    [(level.value.title(), level.value) for level in Priority],
                    value=(item.priority if item else Priority.MEDIUM).value,
                    allow_blank=False,
                    id="announcement-priority",
                )
            yield widgets.Static("", id="dialog-error")
            with containers.Horizontal(classes="dialog-row"):
                yield widgets.Button("Save", variant="primary", id="save-announcement")
                yield widgets.Button("Cancel", id="cancel-announcement")

    @textual.on(widgets.Button.Pressed, "#cancel-announcement")
    def cancel_dialog(self) -> None:
        self.dismiss(None)

    @textual.on(widgets.Button.Pressed, "#save-announcement")
    def save_announcement(self) -> None:
        title = self.query_one("#announcement-title", widgets.Input).value.strip()
        content = self.query_one("#announcement-content", widgets.TextArea).text.strip()
        if not title or not content:
            self.query_one("#dialog-error", widgets.Static).update(
                schooldash.view.error("Title and content are required.")
            )
            return
        announcement_type = AnnouncementType(
            self.query_one("#announcement-type", widgets.Select).value
        )
        priority = Priority(
            self.query_one("#announcement-priority", widgets.Select).value
        )
        if self.announcement is not None:
            self.announcement.title = title
            self.announcement.content = content
            self.announcement.type = announcement_type
            self.announcement.priority = priority
            self.dismiss(self.announcement)
            return
        self.dismiss(
            announcements_mod.Announcement(
                id="",
                title=title,
                content=content,
                author_id=self.author.id,
                author_role=self.author.role,
                target_school_id=(
                    None
                    if self.author.role == users_mod.Role.MINISTRY
                    else self.author.school_id
                ),
                type=announcement_type,
                priority=priority,
            )
        )


class AnnouncementScreen(base_screen.SessionScreen):
    """Announcements for the user's schools, newest first."""

    _announcements: dict[str, announcements_mod.Announcement]
    _selected_id: Optional[str]

    CSS_PATH = schooldash.view.CSS_FOLDER / "record_screen.tcss"

    def compose(self) -> app.ComposeResult:
        yield widgets.Header()
        with containers.Horizontal():
            with containers.Vertical(classes="record-list"):
                with containers.Horizontal(classes="filter-row"):
                    yield widgets.Select(
                        [(kind.value.title(), kind.value) for kind in AnnouncementType],
                        prompt="All Types",
                        id="announcement-type-filter",
                    )
                    yield widgets.Select(
                        [(level.value.title(), level.value) for level in Priority],
                        prompt="All Priorities",
                        id="announcement-priority-filter",
                    )
                yield widgets.DataTable(zebra_stripes=True, id="announcement-table")
                yield widgets.Static("", id="announcement-content", classes="detail")
            with containers.Vertical(classes="record-actions"):
                yield widgets.Label("Actions", classes="emphasis")
                if self.allowed(Action.POST_ANNOUNCEMENTS):
                    yield widgets.Button(
                        "New Announcement", variant="success", id="add-announcement"
                    )
                    yield widgets.Button(
                        "Edit Selected", id="edit-announcement", disabled=True
                    )
                    yield widgets.Button(
                        "Delete Selected",
                        variant="error",
                        id="delete-announcement",
                        disabled=True,
                    )
                yield widgets.Static(id="status-message", classes="status")
        yield widgets.Footer()

    def on_mount(self) -> None:
        self._announcements = {}
        self._selected_id = None
        table = self.query_one("#announcement-table", widgets.DataTable)
        table.cursor_type = "row"
        table.add_columns("Title", "Type", "Priority", "Audience", "Posted")
        self.load_announcements()

    def _filter_value(self, select_id: str) -> Optional[str]:
        value = self.query_one(select_id, widgets.Select).value
        return value if isinstance(value, str) else None

    def load_announcements(self) -> None:
        table = self.query_one("#announcement-table", widgets.DataTable)
        table.clear()
        type_value = self._filter_value("#announcement-type-filter")
        priority_value = self._filter_value("#announcement-priority-filter")
        shown = announcements_mod.filter_announcements(
            self.list_for(EntityKind.ANNOUNCEMENT),
            AnnouncementType(type_value) if type_value else None,
            Priority(priority_value) if priority_value else None,
        )
        self._announcements = {item.id: item for item in shown}
        for item in shown:
            table.add_row(
                item.title,
                item.type.value.title(),
                item.priority.value.title(),
                "All Schools" if item.is_broadcast else "School",
                item.created_at.strftime("%Y-%m-%d %H:%M"),
                key=item.id,
            )

    @textual.on(widgets.Select.Changed, ".filter-row Select")
    def on_filter_changed(self) -> None:
        self.load_announcements()

    def _can_change(self, item: announcements_mod.Announcement) -> bool:
        """Authors may change their own posts. The ministry may change any."""
        if not self.allowed(Action.POST_ANNOUNCEMENTS):
            return False
        return (
            item.author_id == self.user_scope.user_id
            or self.user_scope.role == users_mod.Role.MINISTRY
        )

    def on_data_table_row_selected(self, event: widgets.DataTable.RowSelected) -> None:
        self._selected_id = event.row_key.value
        if self._selected_id is None:
            return
        item = self._announcements[self._selected_id]
        self.query_one("#announcement-content", widgets.Static).update(
            f"[b]{item.title}[/b]\n{item.content}"
        )
        for button_id in ["#edit-announcement", "#delete-announcement"]:
            for button in self.query(button_id).results(widgets.Button):
                button.disabled = not self._can_change(item)

    @textual.on(widgets.Button.Pressed, "#add-announcement")
    def action_add_announcement(self) -> None:
        author = self.user_session.user
        if author is None:
            return

        def on_dialog_closed(item: announcements_mod.Announcement | None) -> None:
            if item is None:
                return
            try:
                item.add(self.dbase)
            except sqlite3.Error as err:
                self.report_error("Error posting announcement.", err)
                return
            self.load_announcements()
            self.report_success(f"Posted {item.title}.")

        self.app.push_screen(AnnouncementDialog(author), callback=on_dialog_closed)

    @textual.on(widgets.Button.Pressed, "#edit-announcement")
    def action_edit_announcement(self) -> None:
        author = self.user_session.user
        if self._selected_id is None or author is None:
            return

        def on_dialog_closed(item: announcements_mod.Announcement | None) -> None:
            if item is None:
                return
            try:
                item.update(self.dbase)
            except sqlite3.Error as err:
                self.report_error("Error updating announcement.", err)
                return
            self.load_announcements()
            self.report_success("Announcement updated.")

        self.app.push_screen(
            AnnouncementDialog(author, self._announcements[self._selected_id]),
            callback=on_dialog_closed,
        )

    @textual.on(widgets.Button.Pressed, "#delete-announcement")
    def action_delete_announcement(self) -> None:
        if self._selected_id is None:
            return
        item = self._announcements[self._selected_id]

        def on_confirmed(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                item.delete(self.dbase)
            except sqlite3.Error as err:
                self.report_error("Unable to delete announcement.", err)
                return
            self._selected_id = None
            self.query_one("#announcement-content", widgets.Static).update("")
            self.load_announcements()
            self.report_success(f"Deleted {item.title}.")

        self.app.push_screen(
            confirm_dialogs.DeleteConfirmDialog("announcement", item.title),
            callback=on_confirmed,
        )
