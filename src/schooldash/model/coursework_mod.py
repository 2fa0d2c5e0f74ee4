"""Notes, grades, and class activities.

These tables are stored and exported with the rest of the database. No
screen edits them yet.
"""

import dataclasses
import datetime
import enum
import uuid
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from schooldash.model import database


class NoteType(enum.StrEnum):
    SCHOOL = "school"
    PARENT = "parent"


class GradeType(enum.StrEnum):
    QUIZ = "quiz"
    MIDTERM = "midterm"
    FINAL = "final"
    ASSIGNMENT = "assignment"
    PARTICIPATION = "participation"


NOTE_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS notes (
            id TEXT PRIMARY KEY,
    student_id TEXT NOT NULL REFERENCES students (id) ON DELETE CASCADE,
    teacher_id TEXT NOT NULL,
       content TEXT NOT NULL,
          type TEXT NOT NULL,
    created_at TEXT NOT NULL
);
"""

GRADE_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS grades (
            id TEXT PRIMARY KEY,
    student_id TEXT NOT NULL REFERENCES students (id) ON DELETE CASCADE,
    subject_id TEXT NOT NULL,
    teacher_id TEXT NOT NULL,
          type TEXT NOT NULL,
         score REAL NOT NULL,
     max_score REAL NOT NULL,
          term TEXT NOT NULL,
    created_at TEXT NOT NULL
);
"""

ACTIVITY_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS activities (
               id TEXT PRIMARY KEY,
         class_id TEXT NOT NULL REFERENCES classes (id) ON DELETE CASCADE,
            title TEXT NOT NULL,
      description TEXT NOT NULL DEFAULT '',
    activity_date TEXT NOT NULL,
       created_at TEXT NOT NULL
);
"""


def _insert(dbase: "database.DBase", table_name: str, record) -> None:
    """Insert a dataclass record into a table with matching column names."""
    values = dataclasses.asdict(record)
    columns = list(values.keys())
    query = f"""
            INSERT INTO {table_name}
                        ({", ".join(columns)})
                 VALUES ({", ".join(":" + col for col in columns)});
    """
    with dbase.get_db_connection() as conn:
        conn.execute(query, values)
    conn.close()


def _select(dbase: "database.DBase", query: str, key: str) -> list[dict]:
    conn = dbase.get_db_connection(as_dict=True)
    rows = conn.execute(query, (key,)).fetchall()
    conn.close()
    return rows


def _to_datetime(val: datetime.datetime | str | None) -> datetime.datetime:
    if isinstance(val, str):
        return datetime.datetime.fromisoformat(val)
    return val if val else datetime.datetime.now()


@dataclasses.dataclass
class Note:
    """A remark about a student, written for the school or for the parent."""

    id: str
    student_id: str
    teacher_id: str
    content: str
    type: NoteType
    created_at: datetime.datetime | str | None = None

    def __post_init__(self) -> None:
        self.id = self.id if self.id else str(uuid.uuid4())
        self.type = NoteType(self.type)
        self.created_at = _to_datetime(self.created_at)

    def add(self, dbase: "database.DBase") -> None:
        """Add the note to the database."""
        _insert(dbase, "notes", self)

    @staticmethod
    def get_for_student(dbase: "database.DBase", student_id: str) -> list["Note"]:
        """Notes about a student, newest first."""
        query = """
                SELECT *
                  FROM notes
                 WHERE student_id = ?
              ORDER BY created_at DESC;
        """
        return [Note(**row) for row in _select(dbase, query, student_id)]


@dataclasses.dataclass
class Grade:
    """A score on one assessment."""

    id: str
    student_id: str
    subject_id: str
    teacher_id: str
    type: GradeType
    score: float
    max_score: float
    term: str
    created_at: datetime.datetime | str | None = None

    def __post_init__(self) -> None:
        self.id = self.id if self.id else str(uuid.uuid4())
        self.type = GradeType(self.type)
        self.created_at = _to_datetime(self.created_at)

    @property
    def percent(self) -> float:
        """Score as a percentage of the maximum score."""
        if not self.max_score:
            return 0.0
        return self.score / self.max_score * 100

    def add(self, dbase: "database.DBase") -> None:
        """Add the grade to the database."""
        _insert(dbase, "grades", self)

    @staticmethod
    def get_for_student(dbase: "database.DBase", student_id: str) -> list["Grade"]:
        """Grades of a student in store order."""
        query = "SELECT * FROM grades WHERE student_id = ?;"
        return [Grade(**row) for row in _select(dbase, query, student_id)]


@dataclasses.dataclass
class Activity:
    """An event or trip planned for a class."""

    id: str
    class_id: str
    title: str
    description: str
    activity_date: datetime.date | str
    created_at: datetime.datetime | str | None = None

    def __post_init__(self) -> None:
        self.id = self.id if self.id else str(uuid.uuid4())
        if isinstance(self.activity_date, str):
            self.activity_date = datetime.date.fromisoformat(self.activity_date)
        self.created_at = _to_datetime(self.created_at)

    def add(self, dbase: "database.DBase") -> None:
        """Add the activity to the database."""
        _insert(dbase, "activities", self)

    @staticmethod
    def get_for_class(dbase: "database.DBase", class_id: str) -> list["Activity"]:
        """Activities of a class ordered by date."""
        query = """
                SELECT *
                  FROM activities
                 WHERE class_id = ?
              ORDER BY activity_date;
        """
        return [Activity(**row) for row in _select(dbase, query, class_id)]
