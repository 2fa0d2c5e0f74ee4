"""Textual screens and dialogs for the SchoolDash application."""

import pathlib


CSS_FOLDER = pathlib.Path(__file__).parent.parent / "styles"


def success(message: str) -> str:
    """Format a success message for display in the status widget."""
    return f"[ansi_bright_green]{message}[/]"


def error(message: str) -> str:
    """Format an error message for display in the status widget."""
    return f"[ansi_bright_red]{message}[/]"
