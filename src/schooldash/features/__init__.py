"""Workflows and input validation shared by the screens."""
