"""Pytest fixtures."""

import datetime
import pathlib
import random
import shutil

import pytest

from schooldash.model import database, scope, seed, session, users_mod


TEST_FOLDER = pathlib.Path(__file__).parent
DATA_FOLDER = TEST_FOLDER / "data"
OUTPUT_FOLDER = TEST_FOLDER / "output"

NOW = datetime.datetime(2025, 11, 20, 10, 0, 0)
"""Reference time used to seed test databases."""


@pytest.fixture()
def empty_output_folder() -> pathlib.Path:
    """Create an empty output folder prior to each test."""
    if OUTPUT_FOLDER.exists():
        for item in OUTPUT_FOLDER.iterdir():
            if item.is_dir():
                shutil.rmtree(item, ignore_errors=True)
            else:
                item.unlink()
    else:
        OUTPUT_FOLDER.mkdir(parents=True)
    return OUTPUT_FOLDER


@pytest.fixture
def empty_database(empty_output_folder: pathlib.Path) -> database.DBase:
    """An empty SchoolDash database, with tables created."""
    return database.DBase(OUTPUT_FOLDER / "testdatabase.db", create_new=True)


@pytest.fixture
def seeded_dbase(empty_database: database.DBase) -> database.DBase:
    """Database loaded with the demonstration data.

    Uses a fixed reference time and random number generator, so the
    attendance statuses are the same in every test run.
    """
    seed.seed_database(empty_database, now=NOW, rng=random.Random(0))
    return empty_database


def _scope_for(dbase: database.DBase, user_id: str) -> scope.Scope:
    user = users_mod.User.get_by_id(dbase, user_id)
    assert user is not None
    return scope.Scope.for_user(dbase, user)


@pytest.fixture
def ministry_scope(seeded_dbase: database.DBase) -> scope.Scope:
    return _scope_for(seeded_dbase, "ministry-admin-1")


@pytest.fixture
def admin_scope(seeded_dbase: database.DBase) -> scope.Scope:
    return _scope_for(seeded_dbase, "school-admin-1")


@pytest.fixture
def teacher_scope(seeded_dbase: database.DBase) -> scope.Scope:
    """Scope of the teacher who recorded the seeded attendance."""
    return _scope_for(seeded_dbase, "teacher-user-1")


@pytest.fixture
def other_teacher_scope(seeded_dbase: database.DBase) -> scope.Scope:
    return _scope_for(seeded_dbase, "teacher-user-2")


@pytest.fixture
def parent_scope(seeded_dbase: database.DBase) -> scope.Scope:
    return _scope_for(seeded_dbase, "parent-user-1")


@pytest.fixture
def user_session(seeded_dbase: database.DBase) -> session.Session:
    """A signed-out session that stores its file in the output folder."""
    return session.Session(seeded_dbase, OUTPUT_FOLDER / "session.json")
