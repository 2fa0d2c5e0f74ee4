"""Test Sqlite database functionality."""

import datetime
import pathlib
import sqlite3

import pytest
import rich  # noqa: F401

from schooldash.model import attendance_mod, database, schools_mod, students_mod


SEED_DAY = datetime.date(2025, 11, 20)


def test_empty_database(empty_database: database.DBase) -> None:
    """Create an empty SchoolDash database."""
    # Assert
    query = "SELECT name FROM sqlite_schema WHERE type = 'table';"
    with empty_database.get_db_connection() as conn:
        tables = set(row["name"] for row in conn.execute(query))
    conn.close()
    assert tables == set(database.TABLE_SCHEMAS)
    assert empty_database.is_empty()
    # Must close connection or fixtures won't be able to delete Sqlite3 file when
    #   setting up for other tests.


def test_nonexistant_database_raises_error(empty_output_folder: pathlib.Path) -> None:
    """Raise an error if a database doesn't exist."""
    # Act, Assert
    with pytest.raises(database.DBaseError):
        database.DBase(empty_output_folder / "schooldash.db")


def test_existing_database_raises_error_on_create_new(empty_database) -> None:
    """Raise an error if create_new = True and database file already exists."""
    # Act, Assert
    with pytest.raises(database.DBaseError):
        database.DBase(empty_database.db_path, create_new=True)


def test_open_or_create(empty_output_folder: pathlib.Path) -> None:
    """Create a database on first open and reuse it afterwards."""
    # Arrange
    db_path = empty_output_folder / "opened.db"
    # Act
    first = database.DBase.open_or_create(db_path)
    second = database.DBase.open_or_create(db_path)
    # Assert
    assert db_path.exists()
    assert first.db_path == second.db_path
    assert second.is_empty()


def test_count_unknown_table(empty_database: database.DBase) -> None:
    """Only tables in the schema can be counted."""
    with pytest.raises(database.DBaseError):
        empty_database.count("students; DROP TABLE users")


def test_student_requires_existing_class(empty_database: database.DBase) -> None:
    """Foreign keys are enforced."""
    # Arrange
    student = students_mod.Student(
        id="", name="Nobody", student_number="X-1", class_id="missing-class"
    )
    # Act, Assert
    with pytest.raises(sqlite3.IntegrityError):
        student.add(empty_database)


def test_one_attendance_row_per_student_and_day(
    seeded_dbase: database.DBase,
) -> None:
    """A second record for the same student, class, and day is rejected."""
    # Arrange
    existing = attendance_mod.Attendance.get_for_class_date(
        seeded_dbase, "class-1", SEED_DAY
    )[0]
    duplicate = attendance_mod.Attendance(
        id="",
        student_id=existing.student_id,
        class_id=existing.class_id,
        subject_id="subject-2",
        teacher_id="teacher-2",
        timestamp=existing.timestamp.replace(hour=14),
        status="late",
    )
    # Act, Assert
    with pytest.raises(sqlite3.IntegrityError):
        duplicate.add(seeded_dbase)


def test_export_and_import(
    seeded_dbase: database.DBase, empty_output_folder: pathlib.Path
) -> None:
    """Copy a database through its dictionary export."""
    # Arrange
    db_data = seeded_dbase.to_dict()
    copy = database.DBase(empty_output_folder / "copy.db", create_new=True)
    # Act
    copy.load_from_dict(db_data)
    # Assert
    for table_name in database.TABLE_SCHEMAS:
        assert copy.count(table_name) == seeded_dbase.count(table_name)
    assert "attendance_date" not in db_data["attendance"][0]
    original = schools_mod.School.get_by_id(seeded_dbase, "school-1")
    copied = schools_mod.School.get_by_id(copy, "school-1")
    assert original == copied
