"""Command line arguments."""

import pathlib

import pytest

from schooldash import __main__ as cli


def test_report_arguments() -> None:
    """The report command defaults to a seven-day window."""
    # Act
    args = cli.build_parser().parse_args(
        ["report", "school.db", "-e", "admin@school1.edu", "-p", "password123"]
    )
    # Assert
    assert args.func is cli.print_report
    assert args.db_path == pathlib.Path("school.db")
    assert args.period == "7days"
    assert not args.xlsx
    assert args.output is None


def test_unknown_period_is_rejected() -> None:
    """Only the report periods are accepted."""
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(
            ["report", "school.db", "-e", "a@b.edu", "-p", "x", "--period", "year"]
        )


def test_no_command() -> None:
    """Without a command there is nothing to run."""
    assert cli.build_parser().parse_args([]).func is None


def test_to_absolute_path() -> None:
    assert cli.to_absolute_path(pathlib.Path("a.db")) == pathlib.Path.cwd() / "a.db"
