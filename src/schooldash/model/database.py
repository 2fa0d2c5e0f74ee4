"""Connect to the Sqlite database and run queries."""

from collections.abc import Sequence
import datetime
import logging
import pathlib
import sqlite3
from typing import Any

from schooldash.model import (
    announcements_mod,
    attendance_mod,
    coursework_mod,
    issues_mod,
    parents_mod,
    requests_mod,
    schedules_mod,
    schools_mod,
    students_mod,
    teachers_mod,
    users_mod,
)


logger = logging.getLogger(__name__)


class DBaseError(Exception):
    """Error occurred when working with database."""


def dict_factory(cursor: sqlite3.Cursor, row: Sequence) -> dict[str, Any]:
    """Return Sqlite data as a dictionary."""
    fields = [column[0] for column in cursor.description]
    return {key: value for key, value in zip(fields, row)}


def adapt_date_iso(val: datetime.date | str) -> str:
    """Adapt datetime.date to ISO 8601 date."""
    if isinstance(val, datetime.date):
        return val.isoformat()
    return val


def adapt_datetime_iso(val: datetime.datetime | str) -> str:
    """Adapt datetime.datetime to timezone-naive ISO 8601 date."""
    if isinstance(val, datetime.datetime):
        return val.replace(tzinfo=None).isoformat()
    return val


# As of Python 3.12 the default date and datetime adapters are deprecated.
# Register explicit adapters so dates are stored as ISO-8601 text.
sqlite3.register_adapter(datetime.date, adapt_date_iso)
sqlite3.register_adapter(datetime.datetime, adapt_datetime_iso)


# Tables in dependency order. Records are exported and imported in this order.
TABLE_SCHEMAS: dict[str, str] = {
    "users": users_mod.USER_TABLE_SCHEMA,
    "schools": schools_mod.SCHOOL_TABLE_SCHEMA,
    "classes": schools_mod.CLASS_TABLE_SCHEMA,
    "subjects": schools_mod.SUBJECT_TABLE_SCHEMA,
    "teachers": teachers_mod.TEACHER_TABLE_SCHEMA,
    "parents": parents_mod.PARENT_TABLE_SCHEMA,
    "students": students_mod.STUDENT_TABLE_SCHEMA,
    "schedules": schedules_mod.SCHEDULE_TABLE_SCHEMA,
    "attendance": attendance_mod.ATTENDANCE_TABLE_SCHEMA,
    "absence_requests": requests_mod.ABSENCE_REQUEST_TABLE_SCHEMA,
    "announcements": announcements_mod.ANNOUNCEMENT_TABLE_SCHEMA,
    "issues": issues_mod.ISSUE_TABLE_SCHEMA,
    "notes": coursework_mod.NOTE_TABLE_SCHEMA,
    "grades": coursework_mod.GRADE_TABLE_SCHEMA,
    "activities": coursework_mod.ACTIVITY_TABLE_SCHEMA,
}

INDEX_SCHEMAS = [
    "CREATE INDEX IF NOT EXISTS users_role_idx ON users (role);",
    "CREATE INDEX IF NOT EXISTS users_school_idx ON users (school_id);",
    "CREATE INDEX IF NOT EXISTS classes_school_idx ON classes (school_id);",
    "CREATE INDEX IF NOT EXISTS students_class_idx ON students (class_id);",
    "CREATE INDEX IF NOT EXISTS students_parent_idx ON students (parent_id);",
    "CREATE INDEX IF NOT EXISTS teachers_school_idx ON teachers (school_id);",
    "CREATE INDEX IF NOT EXISTS attendance_class_date_idx"
    " ON attendance (class_id, attendance_date);",
    "CREATE INDEX IF NOT EXISTS attendance_student_idx ON attendance (student_id);",
    "CREATE INDEX IF NOT EXISTS absence_requests_status_idx"
    " ON absence_requests (status);",
    "CREATE INDEX IF NOT EXISTS announcements_school_idx"
    " ON announcements (target_school_id);",
    "CREATE INDEX IF NOT EXISTS issues_status_idx ON issues (status);",
]

# Generated columns cannot be written, so they are left out of exports.
_EXCLUDED_COLUMNS: dict[str, list[str]] = {
    "attendance": ["attendance_date"],
}


class DBase:
    """Read and write to database."""

    db_path: pathlib.Path
    """Path to Sqlite database."""

    def __init__(self, db_path: pathlib.Path, create_new: bool = False) -> None:
        """Set database path."""
        self.db_path = db_path
        if create_new:
            if self.db_path.exists():
                raise DBaseError(
                    f"Cannot create new database at {db_path}, file already exists."
                )
            else:
                self.create_tables()
        else:
            if not db_path.exists():
                raise DBaseError(f"Database file at {db_path} does not exist.")

    @classmethod
    def open_or_create(cls, db_path: pathlib.Path) -> "DBase":
        """Open an existing database or create a new, empty one."""
        return cls(db_path, create_new=not db_path.exists())

    def get_db_connection(self, as_dict=False) -> sqlite3.Connection:
        """Get connection to the SQLite database."""
        conn = sqlite3.connect(self.db_path)
        if as_dict:
            conn.row_factory = dict_factory
        else:
            conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def create_tables(self) -> None:
        """Creates the database tables if they don't already exist."""
        logger.info("Creating tables in %s", self.db_path)
        with self.get_db_connection() as conn:
            for schema in TABLE_SCHEMAS.values():
                conn.execute(schema)
            for schema in INDEX_SCHEMAS:
                conn.execute(schema)
        conn.close()

    def count(self, table_name: str) -> int:
        """Number of records in a table."""
        if table_name not in TABLE_SCHEMAS:
            raise DBaseError(f"Unknown table {table_name}.")
        conn = self.get_db_connection()
        row = conn.execute(f"SELECT COUNT(*) AS total FROM {table_name};").fetchone()
        conn.close()
        return row["total"]

    def is_empty(self) -> bool:
        """True if no user accounts exist yet."""
        return self.count("users") == 0

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Export database contents.

        Returns:
            Contents of the database as a Python dictionary. Format:
            {<table_name>: [{<col_name>: <col_value>}]}
        """
        db_data = {}
        conn = self.get_db_connection(as_dict=True)
        for table_name in TABLE_SCHEMAS:
            excluded_columns = _EXCLUDED_COLUMNS.get(table_name, [])
            db_data[table_name] = [
                {col: val for col, val in row.items() if col not in excluded_columns}
                for row in conn.execute(f"SELECT * FROM {table_name};")
            ]
        conn.close()
        return db_data

    def load_from_dict(self, db_data_dict: dict[str, list[dict[str, Any]]]) -> None:
        """Import data into the Sqlite database.

        Tables missing from the dictionary are skipped. All rows are written
        in a single transaction.
        """
        with self.get_db_connection() as conn:
            for table_name in TABLE_SCHEMAS:
                rows = db_data_dict.get(table_name, [])
                if not rows:
                    continue
                columns = list(rows[0].keys())
                query = f"""
                    INSERT INTO {table_name}
                                ({", ".join(columns)})
                         VALUES ({", ".join(":" + col for col in columns)});
                """
                conn.executemany(query, rows)
                logger.debug("Loaded %d rows into %s", len(rows), table_name)
        conn.close()
