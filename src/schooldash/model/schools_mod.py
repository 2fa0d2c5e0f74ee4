"""Schools, classes, and subjects.

## Schools
Created by the ministry together with the school's administrator account.

## Classes
A class belongs to one school. The mobility level records how much students
move between classrooms during the day.

## Subjects
Subjects taught at a school. Attendance and schedules refer to subjects.
"""

import dataclasses
import datetime
import enum
import uuid
from typing import Optional, TYPE_CHECKING

from schooldash.model import users_mod


if TYPE_CHECKING:
    from schooldash.model import database


class MobilityLevel(enum.StrEnum):
    """How often students change rooms."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


SCHOOL_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS schools (
            id TEXT PRIMARY KEY,
          name TEXT NOT NULL,
       address TEXT NOT NULL DEFAULT '',
         phone TEXT NOT NULL DEFAULT '',
         email TEXT NOT NULL DEFAULT '',
      admin_id TEXT,
     is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL
);
"""

CLASS_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS classes (
                id TEXT PRIMARY KEY,
              name TEXT NOT NULL,
             grade TEXT NOT NULL,
         school_id TEXT NOT NULL,
    mobility_level TEXT NOT NULL DEFAULT 'low',
         is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL
);
"""

SUBJECT_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS subjects (
            id TEXT PRIMARY KEY,
          name TEXT NOT NULL,
     school_id TEXT NOT NULL,
    created_at TEXT NOT NULL
);
"""

INSERT_SCHOOL_QUERY = """
        INSERT INTO schools
                    (id, name, address, phone, email, admin_id, is_active,
                    created_at)
             VALUES (:id, :name, :address, :phone, :email, :admin_id, :is_active,
                    :created_at);
"""


def _to_datetime(val: Optional[datetime.datetime | str]) -> datetime.datetime:
    """Convert an ISO string from Sqlite, or default to now."""
    if isinstance(val, str):
        return datetime.datetime.fromisoformat(val)
    return val if val else datetime.datetime.now()


@dataclasses.dataclass
class School:
    """A school supervised by the ministry."""

    id: str
    name: str
    address: str
    phone: str
    email: str
    admin_id: Optional[str]
    is_active: bool
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        name: str,
        address: str = "",
        phone: str = "",
        email: str = "",
        admin_id: Optional[str] = None,
        is_active: bool | int = True,
        created_at: Optional[datetime.datetime | str] = None,
    ) -> None:
        """Convert Sqlite values. Pass an empty id to generate a new one."""
        self.id = id if id else str(uuid.uuid4())
        self.name = name
        self.address = address
        self.phone = phone
        self.email = email
        self.admin_id = admin_id if admin_id else None
        self.is_active = bool(is_active)
        self.created_at = _to_datetime(created_at)

    def _params(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "admin_id": self.admin_id,
            "is_active": int(self.is_active),
            "created_at": self.created_at,
        }

    def add(self, dbase: "database.DBase") -> None:
        """Add the school to the database."""
        with dbase.get_db_connection() as conn:
            conn.execute(INSERT_SCHOOL_QUERY, self._params())
        conn.close()

    def add_with_admin(self, dbase: "database.DBase", admin: users_mod.User) -> None:
        """Add the school and its administrator account in one transaction."""
        admin.school_id = self.id
        self.admin_id = admin.id
        with dbase.get_db_connection() as conn:
            conn.execute(users_mod.INSERT_USER_QUERY, admin.params())
            conn.execute(INSERT_SCHOOL_QUERY, self._params())
        conn.close()

    def update(self, dbase: "database.DBase") -> None:
        """Update the school in the database."""
        query = """
                UPDATE schools
                   SET name = :name,
                       address = :address,
                       phone = :phone,
                       email = :email,
                       admin_id = :admin_id,
                       is_active = :is_active
                 WHERE id = :id;
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, self._params())
        conn.close()

    def delete(self, dbase: "database.DBase") -> bool:
        """Delete the school. Return True if a row was removed."""
        with dbase.get_db_connection() as conn:
            cursor = conn.execute("DELETE FROM schools WHERE id = ?;", (self.id,))
        row_count = cursor.rowcount
        conn.close()
        return row_count == 1

    @staticmethod
    def get_by_id(dbase: "database.DBase", school_id: str) -> "School | None":
        """Retrieve a school by id."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM schools WHERE id = ?;", (school_id,)
        ).fetchone()
        conn.close()
        return None if result is None else School(**result)

    @staticmethod
    def get_all(dbase: "database.DBase") -> list["School"]:
        """Retrieve all schools in store order."""
        conn = dbase.get_db_connection(as_dict=True)
        schools = [School(**row) for row in conn.execute("SELECT * FROM schools;")]
        conn.close()
        return schools


@dataclasses.dataclass
class SchoolClass:
    """A class of students at one school."""

    id: str
    name: str
    grade: str
    school_id: str
    mobility_level: MobilityLevel
    is_active: bool
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        name: str,
        grade: str,
        school_id: str,
        mobility_level: str | MobilityLevel = MobilityLevel.LOW,
        is_active: bool | int = True,
        created_at: Optional[datetime.datetime | str] = None,
    ) -> None:
        """Convert Sqlite values. Pass an empty id to generate a new one."""
        self.id = id if id else str(uuid.uuid4())
        self.name = name
        self.grade = str(grade)
        self.school_id = school_id
        self.mobility_level = MobilityLevel(mobility_level)
        self.is_active = bool(is_active)
        self.created_at = _to_datetime(created_at)

    def _params(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "grade": self.grade,
            "school_id": self.school_id,
            "mobility_level": self.mobility_level.value,
            "is_active": int(self.is_active),
            "created_at": self.created_at,
        }

    def add(self, dbase: "database.DBase") -> None:
        """Add the class to the database."""
        query = """
                INSERT INTO classes
                            (id, name, grade, school_id, mobility_level,
                            is_active, created_at)
                     VALUES (:id, :name, :grade, :school_id, :mobility_level,
                            :is_active, :created_at);
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, self._params())
        conn.close()

    def update(self, dbase: "database.DBase") -> None:
        """Update the class in the database."""
        query = """
                UPDATE classes
                   SET name = :name,
                       grade = :grade,
                       school_id = :school_id,
                       mobility_level = :mobility_level,
                       is_active = :is_active
                 WHERE id = :id;
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, self._params())
        conn.close()

    def delete(self, dbase: "database.DBase") -> bool:
        """Delete the class.

        Raises sqlite3.IntegrityError if students are still assigned to the
        class.
        """
        with dbase.get_db_connection() as conn:
            cursor = conn.execute("DELETE FROM classes WHERE id = ?;", (self.id,))
        row_count = cursor.rowcount
        conn.close()
        return row_count == 1

    def student_count(self, dbase: "database.DBase") -> int:
        """Number of students assigned to the class."""
        conn = dbase.get_db_connection()
        row = conn.execute(
            "SELECT COUNT(*) AS total FROM students WHERE class_id = ?;", (self.id,)
        ).fetchone()
        conn.close()
        return row["total"]

    @staticmethod
    def get_by_id(dbase: "database.DBase", class_id: str) -> "SchoolClass | None":
        """Retrieve a class by id."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM classes WHERE id = ?;", (class_id,)
        ).fetchone()
        conn.close()
        return None if result is None else SchoolClass(**result)

    @staticmethod
    def get_all(
        dbase: "database.DBase", school_id: Optional[str] = None
    ) -> list["SchoolClass"]:
        """Retrieve classes in store order, optionally for one school."""
        conn = dbase.get_db_connection(as_dict=True)
        if school_id is None:
            cursor = conn.execute("SELECT * FROM classes;")
        else:
            cursor = conn.execute(
                "SELECT * FROM classes WHERE school_id = ?;", (school_id,)
            )
        classes = [SchoolClass(**row) for row in cursor]
        conn.close()
        return classes


@dataclasses.dataclass
class Subject:
    """A subject taught at a school."""

    id: str
    name: str
    school_id: str
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        name: str,
        school_id: str,
        created_at: Optional[datetime.datetime | str] = None,
    ) -> None:
        self.id = id if id else str(uuid.uuid4())
        self.name = name
        self.school_id = school_id
        self.created_at = _to_datetime(created_at)

    def add(self, dbase: "database.DBase") -> None:
        """Add the subject to the database."""
        query = """
                INSERT INTO subjects (id, name, school_id, created_at)
                     VALUES (:id, :name, :school_id, :created_at);
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, dataclasses.asdict(self))
        conn.close()

    def delete(self, dbase: "database.DBase") -> bool:
        """Delete the subject."""
        with dbase.get_db_connection() as conn:
            cursor = conn.execute("DELETE FROM subjects WHERE id = ?;", (self.id,))
        row_count = cursor.rowcount
        conn.close()
        return row_count == 1

    @staticmethod
    def get_by_id(dbase: "database.DBase", subject_id: str) -> "Subject | None":
        """Retrieve a subject by id."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM subjects WHERE id = ?;", (subject_id,)
        ).fetchone()
        conn.close()
        return None if result is None else Subject(**result)

    @staticmethod
    def get_all(
        dbase: "database.DBase", school_id: Optional[str] = None
    ) -> list["Subject"]:
        """Retrieve subjects, optionally for one school."""
        conn = dbase.get_db_connection(as_dict=True)
        if school_id is None:
            cursor = conn.execute("SELECT * FROM subjects;")
        else:
            cursor = conn.execute(
                "SELECT * FROM subjects WHERE school_id = ?;", (school_id,)
            )
        subjects = [Subject(**row) for row in cursor]
        conn.close()
        return subjects
