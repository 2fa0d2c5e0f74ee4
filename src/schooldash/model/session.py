"""Sign in, sign out, and remember the signed-in user between runs.

The id of the signed-in user is stored in a small JSON file. Passwords are
compared in plain text; the dashboard runs on a single device and sign-in is
not a security boundary.
"""

import dataclasses
import json
import logging
import pathlib
from typing import Optional

from schooldash.model import config, database, scope, users_mod


logger = logging.getLogger(__name__)

SESSION_KEY = "schooldash_user_id"


class AuthenticationError(Exception):
    """Raised when sign-in fails or a signed-in user is required."""


class ValidationError(Exception):
    """Raised when profile or password form values are not acceptable."""


class Session:
    """The signed-in user, if any."""

    dbase: database.DBase
    session_path: pathlib.Path
    user: Optional[users_mod.User]

    def __init__(self, dbase: database.DBase, session_path: pathlib.Path) -> None:
        self.dbase = dbase
        self.session_path = session_path
        self.user = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def role(self) -> Optional[users_mod.Role]:
        return None if self.user is None else self.user.role

    @property
    def scope(self) -> scope.Scope:
        """Query scope of the signed-in user."""
        if self.user is None:
            raise AuthenticationError("Not signed in.")
        return scope.Scope.for_user(self.dbase, self.user)

    def restore(self) -> bool:
        """Sign in the user recorded in the session file.

        A missing, unreadable, or stale session file leaves the session
        signed out.

        Returns:
            True if a user was signed in.
        """
        self.user = None
        if not self.session_path.is_file():
            return False
        try:
            with open(self.session_path) as jfile:
                user_id = json.load(jfile).get(SESSION_KEY)
        except (OSError, json.JSONDecodeError, AttributeError) as err:
            logger.warning(
                "Ignoring unreadable session file %s: %s", self.session_path, err
            )
            return False
        if not isinstance(user_id, str):
            return False
        user = users_mod.User.get_by_id(self.dbase, user_id)
        if user is None or not user.is_active:
            logger.info("Session file refers to unknown or inactive user %s", user_id)
            return False
        self.user = user
        return True

    def login(self, email: str, password: str) -> users_mod.User:
        """Sign in with an e-mail address and password.

        Raises:
            AuthenticationError: The e-mail address is unknown, the password
                is wrong, or the account is inactive. The message is the same
                in all three cases.
        """
        user = users_mod.User.get_by_email(self.dbase, email)
        if user is None or user.password != password or not user.is_active:
            logger.info("Failed sign-in for %s", email)
            raise AuthenticationError("Invalid email or password")
        self.user = user
        with open(self.session_path, "w") as jfile:
            json.dump({SESSION_KEY: user.id}, jfile)
        logger.info("Signed in %s as %s", user.email, user.role)
        return user

    def logout(self) -> None:
        """Forget the signed-in user and delete the session file."""
        self.user = None
        self.session_path.unlink(missing_ok=True)

    def _require_user(self) -> users_mod.User:
        if self.user is None:
            raise AuthenticationError("Not signed in.")
        return self.user

    def update_profile(self, name: str, email: str) -> None:
        """Change the signed-in user's name and e-mail address."""
        user = self._require_user()
        name = name.strip()
        email = email.strip()
        if not name or not email:
            raise ValidationError("Name and email are required")
        other = users_mod.User.get_by_email(self.dbase, email)
        if other is not None and other.id != user.id:
            raise ValidationError("Email is already in use")
        updated = dataclasses.replace(user, name=name, email=email)
        updated.update(self.dbase)
        self.user = updated

    def change_password(self, current: str, new: str, confirm: str) -> None:
        """Change the signed-in user's password.

        Raises:
            ValidationError: The new password and its confirmation differ,
                the new password is too short, or the current password is
                wrong. Checked in that order.
        """
        user = self._require_user()
        if new != confirm:
            raise ValidationError("Passwords do not match")
        min_length = config.settings.min_password_length
        if len(new) < min_length:
            raise ValidationError(
                f"Password must be at least {min_length} characters"
            )
        stored = users_mod.User.get_by_id(self.dbase, user.id)
        if stored is None or stored.password != current:
            raise ValidationError("Current password is incorrect")
        updated = dataclasses.replace(user, password=new)
        updated.update(self.dbase)
        self.user = updated
