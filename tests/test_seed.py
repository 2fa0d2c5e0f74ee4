"""Load the demonstration dataset."""

import datetime
import random

import rich  # noqa: F401

from schooldash.model import database, requests_mod, seed, students_mod, users_mod


def test_seed_empty_database(empty_database: database.DBase) -> None:
    """Seeding an empty store creates the demonstration records."""
    # Act
    loaded = seed.seed_database(
        empty_database,
        now=datetime.datetime(2025, 11, 20, 10, 0),
        rng=random.Random(0),
    )
    # Assert
    assert loaded
    assert empty_database.count("users") == 5
    assert empty_database.count("schools") == 1
    assert empty_database.count("classes") == 3
    assert empty_database.count("subjects") == 6
    assert empty_database.count("teachers") == 2
    assert empty_database.count("parents") == 1
    assert empty_database.count("students") == 5
    assert empty_database.count("attendance") == 35
    assert empty_database.count("announcements") == 2
    assert empty_database.count("absence_requests") == 1


def test_seed_is_skipped_when_users_exist(seeded_dbase: database.DBase) -> None:
    """A database with users is left alone."""
    # Act
    loaded = seed.seed_database(seeded_dbase)
    # Assert
    assert not loaded
    assert seeded_dbase.count("users") == 5
    assert seeded_dbase.count("attendance") == 35


def test_seed_accounts(seeded_dbase: database.DBase) -> None:
    """One account per role, all sharing the demonstration password."""
    # Act
    users = users_mod.User.get_all(seeded_dbase)
    # Assert
    roles = sorted(user.role for user in users)
    assert roles == sorted(
        [
            users_mod.Role.MINISTRY,
            users_mod.Role.SCHOOL_ADMIN,
            users_mod.Role.TEACHER,
            users_mod.Role.TEACHER,
            users_mod.Role.PARENT,
        ]
    )
    assert all(user.password == seed.SEED_PASSWORD for user in users)
    assert all(user.is_active for user in users)


def test_seed_parent_links_and_request(seeded_dbase: database.DBase) -> None:
    """Two students belong to the parent, who has one pending request."""
    # Act
    children = students_mod.Student.get_for_parent(seeded_dbase, "parent-1")
    requests = requests_mod.AbsenceRequest.get_all(seeded_dbase)
    # Assert
    assert sorted(child.id for child in children) == ["student-1", "student-2"]
    assert len(requests) == 1
    assert requests[0].is_pending
    assert requests[0].start_date == datetime.date(2025, 11, 22)


def test_seed_is_repeatable(empty_output_folder) -> None:
    """The same time and random generator give the same attendance."""
    # Arrange
    now = datetime.datetime(2025, 11, 20, 10, 0)
    first = database.DBase(empty_output_folder / "first.db", create_new=True)
    second = database.DBase(empty_output_folder / "second.db", create_new=True)
    # Act
    seed.seed_database(first, now=now, rng=random.Random(7))
    seed.seed_database(second, now=now, rng=random.Random(7))
    # Assert
    assert first.to_dict()["attendance"] == second.to_dict()["attendance"]
