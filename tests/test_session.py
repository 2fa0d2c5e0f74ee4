"""Sign in, sign out, and profile changes."""

import json
import sqlite3

import pytest
import rich  # noqa: F401

from schooldash.model import database, session, users_mod


def test_login_writes_session_file(user_session: session.Session) -> None:
    """A successful sign-in remembers the user id."""
    # Act
    user = user_session.login("admin@school1.edu", "password123")
    # Assert
    assert user_session.is_authenticated
    assert user.id == "school-admin-1"
    assert user_session.role == users_mod.Role.SCHOOL_ADMIN
    with open(user_session.session_path) as jfile:
        assert json.load(jfile) == {session.SESSION_KEY: "school-admin-1"}


@pytest.mark.parametrize(
    "email, password",
    [
        ("admin@school1.edu", "wrong-password"),
        ("nobody@school1.edu", "password123"),
    ],
)
def test_login_failures_share_message(
    user_session: session.Session, email: str, password: str
) -> None:
    """Unknown e-mail and wrong password give the same error."""
    # Act, Assert
    with pytest.raises(session.AuthenticationError, match="Invalid email or password"):
        user_session.login(email, password)
    assert not user_session.is_authenticated
    assert not user_session.session_path.exists()


def test_inactive_user_cannot_login(
    seeded_dbase: database.DBase, user_session: session.Session
) -> None:
    """Deactivated accounts are rejected."""
    # Arrange
    user = users_mod.User.get_by_id(seeded_dbase, "teacher-user-2")
    assert user is not None
    user.is_active = False
    user.update(seeded_dbase)
    # Act, Assert
    with pytest.raises(session.AuthenticationError, match="Invalid email or password"):
        user_session.login("teacher2@school1.edu", "password123")


def test_restore_session(
    seeded_dbase: database.DBase, user_session: session.Session
) -> None:
    """A new session picks up the user from the session file."""
    # Arrange
    user_session.login("parent@example.com", "password123")
    restored = session.Session(seeded_dbase, user_session.session_path)
    # Act
    result = restored.restore()
    # Assert
    assert result
    assert restored.user is not None
    assert restored.user.id == "parent-user-1"
    assert restored.scope.parent_id == "parent-1"


def test_restore_ignores_bad_session_file(user_session: session.Session) -> None:
    """Unreadable or stale session files leave the user signed out."""
    # Arrange
    user_session.session_path.write_text("not json")
    # Act, Assert
    assert not user_session.restore()
    user_session.session_path.write_text(
        json.dumps({session.SESSION_KEY: "deleted-user"})
    )
    assert not user_session.restore()
    assert not user_session.is_authenticated


def test_logout(user_session: session.Session) -> None:
    """Signing out forgets the user and deletes the session file."""
    # Arrange
    user_session.login("moe@edutech.gov", "password123")
    # Act
    user_session.logout()
    # Assert
    assert user_session.user is None
    assert not user_session.session_path.exists()
    with pytest.raises(session.AuthenticationError):
        user_session.scope


def test_update_profile(
    seeded_dbase: database.DBase, user_session: session.Session
) -> None:
    """Change the signed-in user's name and e-mail address."""
    # Arrange
    user_session.login("teacher1@school1.edu", "password123")
    # Act
    user_session.update_profile("Sarah M.", "sarah@school1.edu")
    # Assert
    stored = users_mod.User.get_by_id(seeded_dbase, "teacher-user-1")
    assert stored is not None
    assert stored.name == "Sarah M."
    assert stored.email == "sarah@school1.edu"


def test_update_profile_rejects_taken_email(user_session: session.Session) -> None:
    """Two accounts cannot share an e-mail address."""
    # Arrange
    user_session.login("teacher1@school1.edu", "password123")
    # Act, Assert
    with pytest.raises(session.ValidationError, match="already in use"):
        user_session.update_profile("Sarah", "teacher2@school1.edu")
    with pytest.raises(session.ValidationError):
        user_session.update_profile(" ", "sarah@school1.edu")


@pytest.mark.parametrize(
    "current, new, confirm, message",
    [
        ("password123", "newpass1", "newpass2", "Passwords do not match"),
        ("password123", "abc", "abc", "at least 6 characters"),
        ("wrong", "newpass1", "newpass1", "Current password is incorrect"),
    ],
)
def test_change_password_errors(
    user_session: session.Session,
    current: str,
    new: str,
    confirm: str,
    message: str,
) -> None:
    """Password changes are validated in order."""
    # Arrange
    user_session.login("admin@school1.edu", "password123")
    # Act, Assert
    with pytest.raises(session.ValidationError, match=message):
        user_session.change_password(current, new, confirm)


def test_change_password(user_session: session.Session) -> None:
    """The new password works for the next sign-in."""
    # Arrange
    user_session.login("admin@school1.edu", "password123")
    # Act
    user_session.change_password("password123", "newpass1", "newpass1")
    user_session.logout()
    # Assert
    user_session.login("admin@school1.edu", "newpass1")
    with pytest.raises(session.AuthenticationError):
        user_session.login("admin@school1.edu", "password123")


def test_failed_profile_update_keeps_session_user(
    seeded_dbase: database.DBase,
    user_session: session.Session,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A rejected write leaves the signed-in user as it was."""
    # Arrange
    def fail_to_update(*args, **kwargs) -> None:
        raise sqlite3.OperationalError("database is locked")

    user_session.login("teacher1@school1.edu", "password123")
    monkeypatch.setattr(users_mod.User, "update", fail_to_update)
    # Act, Assert
    with pytest.raises(sqlite3.OperationalError):
        user_session.update_profile("Sarah M.", "sarah@school1.edu")
    with pytest.raises(sqlite3.OperationalError):
        user_session.change_password("password123", "newpass1", "newpass1")
    assert user_session.user is not None
    assert user_session.user.name != "Sarah M."
    assert user_session.user.email == "teacher1@school1.edu"
    assert user_session.user.password == "password123"
    stored = users_mod.User.get_by_id(seeded_dbase, "teacher-user-1")
    assert stored == user_session.user
