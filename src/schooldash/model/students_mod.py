"""Student table definition.

A student belongs to exactly one class. The parent_id column is the only
place where the link between a student and a parent is stored.
"""

import dataclasses
import datetime
import enum
import uuid
from typing import Optional, TYPE_CHECKING


if TYPE_CHECKING:
    from schooldash.model import database


class Gender(enum.StrEnum):
    MALE = "male"
    FEMALE = "female"


STUDENT_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS students (
                id TEXT PRIMARY KEY,
              name TEXT NOT NULL,
    student_number TEXT NOT NULL,
          class_id TEXT NOT NULL REFERENCES classes (id),
         parent_id TEXT REFERENCES parents (id)
                   ON DELETE SET NULL DEFERRABLE INITIALLY DEFERRED,
     date_of_birth TEXT,
            gender TEXT NOT NULL DEFAULT 'male',
         is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL
);
"""


@dataclasses.dataclass
class Student:
    """A student enrolled in a class."""

    id: str
    name: str
    student_number: str
    class_id: str
    parent_id: Optional[str]
    date_of_birth: Optional[datetime.date]
    gender: Gender
    is_active: bool
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        name: str,
        student_number: str,
        class_id: str,
        parent_id: Optional[str] = None,
        date_of_birth: Optional[datetime.date | str] = None,
        gender: str | Gender = Gender.MALE,
        is_active: bool | int = True,
        created_at: Optional[datetime.datetime | str] = None,
    ) -> None:
        """Convert Sqlite values.

        Pass an empty string to id to auto-generate a unique ID.
        """
        if isinstance(date_of_birth, str):
            date_of_birth = (
                datetime.date.fromisoformat(date_of_birth) if date_of_birth else None
            )
        if isinstance(created_at, str):
            created_at = datetime.datetime.fromisoformat(created_at)
        self.id = id if id else str(uuid.uuid4())
        self.name = name
        self.student_number = student_number
        self.class_id = class_id
        self.parent_id = parent_id if parent_id else None
        self.date_of_birth = date_of_birth
        self.gender = Gender(gender)
        self.is_active = bool(is_active)
        self.created_at = created_at if created_at else datetime.datetime.now()

    @property
    def birth_iso(self) -> Optional[str]:
        """Date of birth as an iso-formatted string, or None."""
        if self.date_of_birth is None:
            return None
        return self.date_of_birth.isoformat()

    def matches(self, search_text: str) -> bool:
        """True if the name or student number contains the search text."""
        search_text = search_text.strip().lower()
        return (
            search_text in self.name.lower()
            or search_text in self.student_number.lower()
        )

    def _params(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "student_number": self.student_number,
            "class_id": self.class_id,
            "parent_id": self.parent_id,
            "date_of_birth": self.birth_iso,
            "gender": self.gender.value,
            "is_active": int(self.is_active),
            "created_at": self.created_at,
        }

    def add(self, dbase: "database.DBase") -> None:
        """Add the Student to the database."""
        query = """
                INSERT INTO students
                            (id, name, student_number, class_id, parent_id,
                            date_of_birth, gender, is_active, created_at)
                     VALUES (:id, :name, :student_number, :class_id, :parent_id,
                            :date_of_birth, :gender, :is_active, :created_at);
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, self._params())
        conn.close()

    def update(self, dbase: "database.DBase") -> None:
        """Update the Student in the database."""
        query = """
                UPDATE students
                   SET name = :name,
                       student_number = :student_number,
                       class_id = :class_id,
                       parent_id = :parent_id,
                       date_of_birth = :date_of_birth,
                       gender = :gender,
                       is_active = :is_active
                 WHERE id = :id;
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, self._params())
        conn.close()

    def delete(self, dbase: "database.DBase") -> bool:
        """Delete the student along with their attendance and absence requests."""
        with dbase.get_db_connection() as conn:
            cursor = conn.execute("DELETE FROM students WHERE id = ?;", (self.id,))
        row_count = cursor.rowcount
        conn.close()
        return row_count == 1

    @staticmethod
    def get_by_id(dbase: "database.DBase", student_id: str) -> "Student | None":
        """Retrieve a Student object by id."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM students WHERE id = ?;", (student_id,)
        ).fetchone()
        conn.close()
        if result is None:
            return None
        return Student(**result)

    @staticmethod
    def get_all(dbase: "database.DBase") -> list["Student"]:
        """Retrieve every student in store order."""
        conn = dbase.get_db_connection(as_dict=True)
        students = [Student(**row) for row in conn.execute("SELECT * FROM students;")]
        conn.close()
        return students

    @staticmethod
    def get_roster(dbase: "database.DBase", class_id: str) -> list["Student"]:
        """Active students of a class, in store order."""
        query = """
                SELECT *
                  FROM students
                 WHERE class_id = ?
                   AND is_active = 1;
        """
        conn = dbase.get_db_connection(as_dict=True)
        students = [Student(**row) for row in conn.execute(query, (class_id,))]
        conn.close()
        return students

    @staticmethod
    def get_for_school(dbase: "database.DBase", school_id: str) -> list["Student"]:
        """Students whose class belongs to the school."""
        query = """
                SELECT students.*
                  FROM students
                  JOIN classes
                    ON classes.id = students.class_id
                 WHERE classes.school_id = ?
              ORDER BY students.rowid;
        """
        conn = dbase.get_db_connection(as_dict=True)
        students = [Student(**row) for row in conn.execute(query, (school_id,))]
        conn.close()
        return students

    @staticmethod
    def get_for_parent(dbase: "database.DBase", parent_id: str) -> list["Student"]:
        """Children linked to a parent record."""
        conn = dbase.get_db_connection(as_dict=True)
        students = [
            Student(**row)
            for row in conn.execute(
                "SELECT * FROM students WHERE parent_id = ?;", (parent_id,)
            )
        ]
        conn.close()
        return students
