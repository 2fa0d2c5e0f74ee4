"""Teacher table definition.

Each teacher record points to the user account the teacher signs in with.
The subjects column holds a JSON list of subject names.
"""

import dataclasses
import datetime
import json
import uuid
from typing import Optional, TYPE_CHECKING

from schooldash.model import users_mod


if TYPE_CHECKING:
    from schooldash.model import database


TEACHER_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS teachers (
               id TEXT PRIMARY KEY,
          user_id TEXT NOT NULL REFERENCES users (id) ON DELETE CASCADE,
        school_id TEXT NOT NULL,
         subjects TEXT NOT NULL DEFAULT '[]',
    is_supervisor INTEGER NOT NULL DEFAULT 0,
        is_active INTEGER NOT NULL DEFAULT 1,
       created_at TEXT NOT NULL
);
"""


INSERT_TEACHER_QUERY = """
            INSERT INTO teachers
                        (id, user_id, school_id, subjects, is_supervisor,
                        is_active, created_at)
                 VALUES (:id, :user_id, :school_id, :subjects, :is_supervisor,
                        :is_active, :created_at);
"""


def parse_subjects(text: str) -> list[str]:
    """Split a comma-separated list of subjects entered in a form."""
    return [subject.strip() for subject in text.split(",") if subject.strip()]


@dataclasses.dataclass
class Teacher:
    """A teacher at a school."""

    id: str
    user_id: str
    school_id: str
    subjects: list[str]
    is_supervisor: bool
    is_active: bool
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        user_id: str,
        school_id: str,
        subjects: Optional[list[str] | str] = None,
        is_supervisor: bool | int = False,
        is_active: bool | int = True,
        created_at: Optional[datetime.datetime | str] = None,
    ) -> None:
        """Convert Sqlite values. Pass an empty id to generate a new one."""
        if isinstance(subjects, str):
            subjects = json.loads(subjects) if subjects else []
        if isinstance(created_at, str):
            created_at = datetime.datetime.fromisoformat(created_at)
        self.id = id if id else str(uuid.uuid4())
        self.user_id = user_id
        self.school_id = school_id
        self.subjects = list(subjects) if subjects else []
        self.is_supervisor = bool(is_supervisor)
        self.is_active = bool(is_active)
        self.created_at = created_at if created_at else datetime.datetime.now()

    @property
    def subjects_text(self) -> str:
        """Subjects as a comma-separated string."""
        return ", ".join(self.subjects)

    def _params(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "school_id": self.school_id,
            "subjects": json.dumps(self.subjects),
            "is_supervisor": int(self.is_supervisor),
            "is_active": int(self.is_active),
            "created_at": self.created_at,
        }

    def add(self, dbase: "database.DBase") -> None:
        """Add the teacher to the database."""
        with dbase.get_db_connection() as conn:
            conn.execute(INSERT_TEACHER_QUERY, self._params())
        conn.close()

    def add_with_user(self, dbase: "database.DBase", user: users_mod.User) -> None:
        """Add the teacher and the teacher's user account in one transaction."""
        self.user_id = user.id
        with dbase.get_db_connection() as conn:
            conn.execute(users_mod.INSERT_USER_QUERY, user.params())
            conn.execute(INSERT_TEACHER_QUERY, self._params())
        conn.close()

    def update(self, dbase: "database.DBase") -> None:
        """Update the teacher in the database."""
        query = """
                UPDATE teachers
                   SET school_id = :school_id,
                       subjects = :subjects,
                       is_supervisor = :is_supervisor,
                       is_active = :is_active
                 WHERE id = :id;
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, self._params())
        conn.close()

    def delete(self, dbase: "database.DBase") -> bool:
        """Delete the teacher record and the teacher's user account."""
        with dbase.get_db_connection() as conn:
            cursor = conn.execute("DELETE FROM teachers WHERE id = ?;", (self.id,))
            conn.execute("DELETE FROM users WHERE id = ?;", (self.user_id,))
        row_count = cursor.rowcount
        conn.close()
        return row_count == 1

    @staticmethod
    def get_by_id(dbase: "database.DBase", teacher_id: str) -> "Teacher | None":
        """Retrieve a teacher by id."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM teachers WHERE id = ?;", (teacher_id,)
        ).fetchone()
        conn.close()
        return None if result is None else Teacher(**result)

    @staticmethod
    def get_by_user_id(dbase: "database.DBase", user_id: str) -> "Teacher | None":
        """Retrieve the teacher record belonging to a user account."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM teachers WHERE user_id = ?;", (user_id,)
        ).fetchone()
        conn.close()
        return None if result is None else Teacher(**result)

    @staticmethod
    def get_all(
        dbase: "database.DBase", school_id: Optional[str] = None
    ) -> list["Teacher"]:
        """Retrieve teachers in store order, optionally for one school."""
        conn = dbase.get_db_connection(as_dict=True)
        if school_id is None:
            cursor = conn.execute("SELECT * FROM teachers;")
        else:
            cursor = conn.execute(
                "SELECT * FROM teachers WHERE school_id = ?;", (school_id,)
            )
        teachers = [Teacher(**row) for row in cursor]
        conn.close()
        return teachers

    @staticmethod
    def get_names(dbase: "database.DBase") -> dict[str, str]:
        """Map of teacher ids to the names on their user accounts."""
        query = """
                SELECT teachers.id, users.name
                  FROM teachers
                  JOIN users
                    ON users.id = teachers.user_id;
        """
        conn = dbase.get_db_connection()
        names = {row["id"]: row["name"] for row in conn.execute(query)}
        conn.close()
        return names
