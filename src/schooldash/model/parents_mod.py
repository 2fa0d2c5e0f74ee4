"""Parent table definition.

Parents are linked to their children through students.parent_id. The list of
a parent's children is always read from the students table, so it cannot
drift out of step with the students themselves.
"""

import dataclasses
import datetime
import uuid
from collections.abc import Iterable
from typing import Optional, TYPE_CHECKING

from schooldash.model import users_mod


if TYPE_CHECKING:
    import sqlite3

    from schooldash.model import database


PARENT_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS parents (
             id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    is_approved INTEGER NOT NULL DEFAULT 0,
     created_at TEXT NOT NULL
);
"""

INSERT_PARENT_QUERY = """
        INSERT INTO parents (id, user_id, is_approved, created_at)
             VALUES (:id, :user_id, :is_approved, :created_at);
"""


def _link(conn: "sqlite3.Connection", parent_id: str, student_ids: list[str]) -> None:
    """Point the listed students at the parent and unlink everyone else."""
    placeholders = ", ".join("?" for _ in student_ids)
    conn.execute(
        f"""
        UPDATE students
           SET parent_id = NULL
         WHERE parent_id = ?
           AND id NOT IN ({placeholders});
        """,
        [parent_id, *student_ids],
    )
    if student_ids:
        conn.execute(
            f"UPDATE students SET parent_id = ? WHERE id IN ({placeholders});",
            [parent_id, *student_ids],
        )


@dataclasses.dataclass
class Parent:
    """A parent or guardian of one or more students."""

    id: str
    user_id: str
    is_approved: bool
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        user_id: str,
        is_approved: bool | int = False,
        created_at: Optional[datetime.datetime | str] = None,
    ) -> None:
        """Convert Sqlite values. Pass an empty id to generate a new one."""
        if isinstance(created_at, str):
            created_at = datetime.datetime.fromisoformat(created_at)
        self.id = id if id else str(uuid.uuid4())
        self.user_id = user_id
        self.is_approved = bool(is_approved)
        self.created_at = created_at if created_at else datetime.datetime.now()

    def _params(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "is_approved": int(self.is_approved),
            "created_at": self.created_at,
        }

    def add(self, dbase: "database.DBase") -> None:
        """Add the parent to the database."""
        with dbase.get_db_connection() as conn:
            conn.execute(INSERT_PARENT_QUERY, self._params())
        conn.close()

    def add_with_user(
        self,
        dbase: "database.DBase",
        user: users_mod.User,
        student_ids: Iterable[str] = (),
    ) -> None:
        """Add the parent, the parent's user account, and links to children.

        All three writes happen in a single transaction.
        """
        self.user_id = user.id
        with dbase.get_db_connection() as conn:
            conn.execute(users_mod.INSERT_USER_QUERY, user.params())
            conn.execute(INSERT_PARENT_QUERY, self._params())
            _link(conn, self.id, list(student_ids))
        conn.close()

    def approve(self, dbase: "database.DBase") -> None:
        """Mark the parent as approved by the school."""
        self.is_approved = True
        with dbase.get_db_connection() as conn:
            conn.execute(
                "UPDATE parents SET is_approved = 1 WHERE id = ?;", (self.id,)
            )
        conn.close()

    def delete(self, dbase: "database.DBase") -> bool:
        """Delete the parent and the parent's user account.

        Children of the parent are kept; their parent_id is cleared.
        """
        with dbase.get_db_connection() as conn:
            cursor = conn.execute("DELETE FROM parents WHERE id = ?;", (self.id,))
            conn.execute("DELETE FROM users WHERE id = ?;", (self.user_id,))
        row_count = cursor.rowcount
        conn.close()
        return row_count == 1

    def student_ids(self, dbase: "database.DBase") -> list[str]:
        """Ids of the parent's children."""
        conn = dbase.get_db_connection()
        ids = [
            row["id"]
            for row in conn.execute(
                "SELECT id FROM students WHERE parent_id = ?;", (self.id,)
            )
        ]
        conn.close()
        return ids

    def link_students(
        self, dbase: "database.DBase", student_ids: Iterable[str]
    ) -> None:
        """Replace the parent's set of children.

        Students in student_ids get this parent. Students that were linked to
        this parent but are not in student_ids are unlinked.
        """
        with dbase.get_db_connection() as conn:
            _link(conn, self.id, list(student_ids))
        conn.close()

    @staticmethod
    def get_by_id(dbase: "database.DBase", parent_id: str) -> "Parent | None":
        """Retrieve a parent by id."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM parents WHERE id = ?;", (parent_id,)
        ).fetchone()
        conn.close()
        return None if result is None else Parent(**result)

    @staticmethod
    def get_by_user_id(dbase: "database.DBase", user_id: str) -> "Parent | None":
        """Retrieve the parent record belonging to a user account."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM parents WHERE user_id = ?;", (user_id,)
        ).fetchone()
        conn.close()
        return None if result is None else Parent(**result)

    @staticmethod
    def get_all(dbase: "database.DBase") -> list["Parent"]:
        """Retrieve all parents in store order."""
        conn = dbase.get_db_connection(as_dict=True)
        parents = [Parent(**row) for row in conn.execute("SELECT * FROM parents;")]
        conn.close()
        return parents

    @staticmethod
    def get_for_school(dbase: "database.DBase", school_id: str) -> list["Parent"]:
        """Parents with a child in the school or an account at the school."""
        query = """
                SELECT parents.*
                  FROM parents
                  JOIN users
                    ON users.id = parents.user_id
                 WHERE users.school_id = :school_id
                    OR EXISTS (
                       SELECT 1
                         FROM students
                         JOIN classes
                           ON classes.id = students.class_id
                        WHERE students.parent_id = parents.id
                          AND classes.school_id = :school_id)
              ORDER BY parents.rowid;
        """
        conn = dbase.get_db_connection(as_dict=True)
        parents = [
            Parent(**row) for row in conn.execute(query, {"school_id": school_id})
        ]
        conn.close()
        return parents
