"""Confirmation Dialogs."""

from textual import app, containers, screen, widgets

import schooldash.view


class DeleteConfirmDialog(screen.ModalScreen[bool]):
    """Ask before deleting a school, class, student, or other record."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "confirm_dialogs.tcss"

    record_kind: str
    record_name: str

    def __init__(self, record_kind: str, record_name: str) -> None:
        """Include the kind and name of the record in the dialog."""
        self.record_kind = record_kind
        self.record_name = record_name
        super().__init__()

    def compose(self) -> app.ComposeResult:
        """Layout the dialog screen."""
        with containers.Vertical(id="delete-dialog", classes="modal-dialog"):
            yield widgets.Label("[bold red]Confirm Deletion[/bold red]")
            yield widgets.Static()
            yield widgets.Label(
                f"Are you sure you want to delete this {self.record_kind}:"
            )
            yield widgets.Label(f"[bold]{self.record_name}[/bold]")
            yield widgets.Static()
            yield widgets.Label("[yellow]This action cannot be undone![/yellow]")
            yield widgets.Static()
            with containers.Horizontal():
                yield widgets.Button("Delete", variant="error", id="confirm-delete")
                yield widgets.Button("Cancel", variant="primary", id="cancel-delete")

    def on_button_pressed(self, event: widgets.Button.Pressed) -> None:
        if event.button.id == "confirm-delete":
            self.dismiss(True)
        elif event.button.id == "cancel-delete":
            self.dismiss(False)


class GeneralConfirmDialog(screen.ModalScreen[bool]):
    """General confirmation dialog."""

    CSS_PATH = schooldash.view.CSS_FOLDER / "confirm_dialogs.tcss"

    message: str
    """Message displayed to user in confirmation dialog."""
    confirm_label: str

    def __init__(self, message: str, confirm_label: str = "Yes") -> None:
        """Include task message in confirmation dialog."""
        super().__init__()
        self.message = message
        self.confirm_label = confirm_label

    def compose(self) -> app.ComposeResult:
        """Layout the dialog box."""
        with containers.Vertical(id="confirm-dialog", classes="modal-dialog"):
            yield widgets.Label("[bold]Confirm Action[/bold]")
            yield widgets.Static()
            yield widgets.Label(f"Are you sure you want to {self.message}?")
            with containers.Horizontal():
                yield widgets.Button(
                    self.confirm_label, variant="warning", id="confirm-action"
                )
                yield widgets.Button("Cancel", variant="primary", id="cancel-action")

    def on_button_pressed(self, event: widgets.Button.Pressed) -> None:
        """Take action if confirmed."""
        if event.button.id == "confirm-action":
            self.dismiss(True)
        elif event.button.id == "cancel-action":
            self.dismiss(False)
