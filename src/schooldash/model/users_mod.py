"""User accounts and roles.

Every person who signs in has a row in the users table. Teachers and parents
have an additional record in the teachers or parents table that points back
to their user account.
"""

import dataclasses
import datetime
import enum
import uuid
from typing import Optional, TYPE_CHECKING


if TYPE_CHECKING:
    from schooldash.model import database


class Role(enum.StrEnum):
    """Roles that determine what a user can see and do."""

    MINISTRY = "ministry"
    SCHOOL_ADMIN = "school_admin"
    TEACHER = "teacher"
    PARENT = "parent"

    @property
    def label(self) -> str:
        """Display name of the role."""
        return _ROLE_TITLES[self]


_ROLE_TITLES = {
    Role.MINISTRY: "Ministry of Education",
    Role.SCHOOL_ADMIN: "School Administrator",
    Role.TEACHER: "Teacher",
    Role.PARENT: "Parent",
}


USER_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
           id TEXT PRIMARY KEY,
        email TEXT UNIQUE NOT NULL,
     password TEXT NOT NULL,
         name TEXT NOT NULL,
         role TEXT NOT NULL,
    school_id TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
   created_at TEXT NOT NULL
);
"""


INSERT_USER_QUERY = """
        INSERT INTO users
                    (id, email, password, name, role, school_id,
                    is_active, created_at)
             VALUES (:id, :email, :password, :name, :role, :school_id,
                    :is_active, :created_at);
"""


@dataclasses.dataclass
class User:
    """A person who can sign in to the dashboard."""

    id: str
    email: str
    password: str
    name: str
    role: Role
    school_id: Optional[str]
    is_active: bool
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        email: str,
        password: str,
        name: str,
        role: str | Role,
        school_id: Optional[str] = None,
        is_active: bool | int = True,
        created_at: Optional[datetime.datetime | str] = None,
    ) -> None:
        """Convert Sqlite values. Pass an empty id to generate a new one."""
        if isinstance(created_at, str):
            created_at = datetime.datetime.fromisoformat(created_at)
        self.id = id if id else str(uuid.uuid4())
        self.email = email
        self.password = password
        self.name = name
        self.role = Role(role)
        self.school_id = school_id if school_id else None
        self.is_active = bool(is_active)
        self.created_at = created_at if created_at else datetime.datetime.now()

    @property
    def first_name(self) -> str:
        """First word of the user's name, used in greetings."""
        return self.name.split(" ")[0] if self.name else ""

    def params(self) -> dict:
        """Column values for INSERT and UPDATE queries."""
        return {
            "id": self.id,
            "email": self.email,
            "password": self.password,
            "name": self.name,
            "role": self.role.value,
            "school_id": self.school_id,
            "is_active": int(self.is_active),
            "created_at": self.created_at,
        }

    def add(self, dbase: "database.DBase") -> None:
        """Add the user to the database."""
        with dbase.get_db_connection() as conn:
            conn.execute(INSERT_USER_QUERY, self.params())
        conn.close()

    def update(self, dbase: "database.DBase") -> None:
        """Update the user in the database."""
        query = """
                UPDATE users
                   SET email = :email,
                       password = :password,
                       name = :name,
                       role = :role,
                       school_id = :school_id,
                       is_active = :is_active
                 WHERE id = :id;
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, self.params())
        conn.close()

    def delete(self, dbase: "database.DBase") -> bool:
        """Delete the user. Return True if a row was removed."""
        with dbase.get_db_connection() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?;", (self.id,))
        row_count = cursor.rowcount
        conn.close()
        return row_count == 1

    @staticmethod
    def get_by_id(dbase: "database.DBase", user_id: str) -> "User | None":
        """Retrieve a user by id."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM users WHERE id = ?;", (user_id,)
        ).fetchone()
        conn.close()
        return None if result is None else User(**result)

    @staticmethod
    def get_by_email(dbase: "database.DBase", email: str) -> "User | None":
        """Retrieve a user by e-mail address."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM users WHERE email = ?;", (email.strip(),)
        ).fetchone()
        conn.close()
        return None if result is None else User(**result)

    @staticmethod
    def get_all(dbase: "database.DBase") -> list["User"]:
        """Retrieve all users."""
        conn = dbase.get_db_connection(as_dict=True)
        users = [User(**row) for row in conn.execute("SELECT * FROM users;")]
        conn.close()
        return users

    @staticmethod
    def get_names(dbase: "database.DBase") -> dict[str, str]:
        """Map of user ids to names, for labeling authors and reviewers."""
        conn = dbase.get_db_connection()
        names = {row["id"]: row["name"] for row in conn.execute(
            "SELECT id, name FROM users;"
        )}
        conn.close()
        return names
