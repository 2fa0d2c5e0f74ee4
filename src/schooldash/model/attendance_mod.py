"""Attendance table definition.

One row records the status of one student in one class on one day. The
attendance_date column is generated from the timestamp, and the UNIQUE
constraint on (student_id, class_id, attendance_date) keeps a single row per
student per class per day.
"""

import dataclasses
import datetime
import enum
import uuid
from collections.abc import Iterable, Sequence
from typing import Optional, TYPE_CHECKING

import polars as pl


if TYPE_CHECKING:
    from schooldash.model import database


class AttendanceStatus(enum.StrEnum):
    """Attendance states a teacher can record."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


ATTENDANCE_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS attendance (
                 id TEXT PRIMARY KEY,
         student_id TEXT NOT NULL REFERENCES students (id) ON DELETE CASCADE,
           class_id TEXT NOT NULL,
         subject_id TEXT NOT NULL DEFAULT '',
         teacher_id TEXT NOT NULL DEFAULT '',
          timestamp TEXT NOT NULL,
    attendance_date TEXT GENERATED ALWAYS AS (date(timestamp)) VIRTUAL,
             status TEXT NOT NULL,
              notes TEXT,
         created_at TEXT NOT NULL,
    UNIQUE (student_id, class_id, attendance_date)
);
"""

INSERT_ATTENDANCE_QUERY = """
        INSERT INTO attendance
                    (id, student_id, class_id, subject_id, teacher_id, timestamp,
                    status, notes, created_at)
             VALUES (:id, :student_id, :class_id, :subject_id, :teacher_id,
                    :timestamp, :status, :notes, :created_at);
"""

FRAME_SCHEMA = {
    "student_id": pl.String,
    "class_id": pl.String,
    "teacher_id": pl.String,
    "attendance_date": pl.String,
    "status": pl.String,
}
"""Columns of the dataframes returned by get_window_dataframe."""


@dataclasses.dataclass
class Attendance:
    """Status of one student in one class on one day."""

    id: str
    student_id: str
    class_id: str
    subject_id: str
    teacher_id: str
    timestamp: datetime.datetime
    status: AttendanceStatus
    notes: Optional[str]
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        student_id: str,
        class_id: str,
        subject_id: str,
        teacher_id: str,
        timestamp: datetime.datetime | str,
        status: str | AttendanceStatus,
        notes: Optional[str] = None,
        created_at: Optional[datetime.datetime | str] = None,
        attendance_date: Optional[str] = None,
    ) -> None:
        """Convert Sqlite values.

        The attendance_date argument is accepted so rows can be unpacked
        directly from queries. It is always recomputed from the timestamp.
        Pass an empty string to id to auto-generate a unique ID.
        """
        if isinstance(timestamp, str):
            timestamp = datetime.datetime.fromisoformat(timestamp)
        if isinstance(created_at, str):
            created_at = datetime.datetime.fromisoformat(created_at)
        self.id = id if id else str(uuid.uuid4())
        self.student_id = student_id
        self.class_id = class_id
        self.subject_id = subject_id if subject_id else ""
        self.teacher_id = teacher_id if teacher_id else ""
        self.timestamp = timestamp
        self.status = AttendanceStatus(status)
        self.notes = notes
        self.created_at = created_at if created_at else datetime.datetime.now()

    @property
    def attendance_date(self) -> datetime.date:
        """Day the attendance was taken."""
        return self.timestamp.date()

    def params(self) -> dict:
        """Column values for INSERT queries."""
        return {
            "id": self.id,
            "student_id": self.student_id,
            "class_id": self.class_id,
            "subject_id": self.subject_id,
            "teacher_id": self.teacher_id,
            "timestamp": self.timestamp,
            "status": self.status.value,
            "notes": self.notes,
            "created_at": self.created_at,
        }

    def add(self, dbase: "database.DBase") -> None:
        """Add the attendance record to the database.

        Raises sqlite3.IntegrityError if the student already has a record for
        the class on the same day.
        """
        with dbase.get_db_connection() as conn:
            conn.execute(INSERT_ATTENDANCE_QUERY, self.params())
        conn.close()

    @staticmethod
    def get_for_class_date(
        dbase: "database.DBase", class_id: str, on_date: datetime.date
    ) -> list["Attendance"]:
        """Attendance recorded for a class on one day."""
        query = """
                SELECT *
                  FROM attendance
                 WHERE class_id = ?
                   AND attendance_date = ?;
        """
        conn = dbase.get_db_connection(as_dict=True)
        records = [
            Attendance(**row)
            for row in conn.execute(query, (class_id, on_date.isoformat()))
        ]
        conn.close()
        return records

    @staticmethod
    def replace_for_class_date(
        dbase: "database.DBase",
        class_id: str,
        on_date: datetime.date,
        records: Sequence["Attendance"],
    ) -> None:
        """Replace the records of a class and day with new records.

        Only records of the students in the new records are deleted, so
        records of students missing from the list survive the save. The
        delete and the inserts run in one transaction. If any statement
        fails the transaction is rolled back and the sqlite3.Error
        propagates, leaving the previous records in place.
        """
        student_ids = [record.student_id for record in records]
        placeholders = ", ".join("?" for _ in student_ids)
        delete_query = f"""
                DELETE FROM attendance
                      WHERE class_id = ?
                        AND attendance_date = ?
                        AND student_id IN ({placeholders});
        """
        conn = dbase.get_db_connection()
        try:
            with conn:
                conn.execute(
                    delete_query, [class_id, on_date.isoformat(), *student_ids]
                )
                conn.executemany(
                    INSERT_ATTENDANCE_QUERY, [record.params() for record in records]
                )
        finally:
            conn.close()

    @staticmethod
    def get_all(dbase: "database.DBase") -> list["Attendance"]:
        """Retrieve all attendance records in store order."""
        conn = dbase.get_db_connection(as_dict=True)
        records = [
            Attendance(**row) for row in conn.execute("SELECT * FROM attendance;")
        ]
        conn.close()
        return records

    @staticmethod
    def get_for_students(
        dbase: "database.DBase",
        student_ids: Iterable[str],
        start: Optional[datetime.datetime] = None,
    ) -> list["Attendance"]:
        """Attendance of the listed students, newest first."""
        student_ids = list(student_ids)
        placeholders = ", ".join("?" for _ in student_ids)
        query = f"""
                SELECT *
                  FROM attendance
                 WHERE student_id IN ({placeholders})
                   AND timestamp >= ?
              ORDER BY timestamp DESC;
        """
        start_text = "" if start is None else start.isoformat()
        conn = dbase.get_db_connection(as_dict=True)
        records = [
            Attendance(**row) for row in conn.execute(query, [*student_ids, start_text])
        ]
        conn.close()
        return records


def get_window_dataframe(
    dbase: "database.DBase",
    start: datetime.datetime,
    end: datetime.datetime,
    class_ids: Optional[Iterable[str]] = None,
) -> pl.DataFrame:
    """Attendance with a timestamp between start and end, inclusive.

    Args:
        start: Beginning of the window.
        end: End of the window.
        class_ids: Only include these classes. Pass None for every class.

    Returns:
        A polars dataframe with the columns listed in FRAME_SCHEMA.
    """
    query = """
            SELECT student_id, class_id, teacher_id, attendance_date, status
              FROM attendance
             WHERE timestamp >= ?
               AND timestamp <= ?
    """
    params: list = [
        start.replace(tzinfo=None).isoformat(),
        end.replace(tzinfo=None).isoformat(),
    ]
    if class_ids is not None:
        class_ids = list(class_ids)
        query += f" AND class_id IN ({', '.join('?' for _ in class_ids)})"
        params.extend(class_ids)
    conn = dbase.get_db_connection()
    rows = [tuple(row) for row in conn.execute(query + ";", params)]
    conn.close()
    return pl.DataFrame(rows, schema=FRAME_SCHEMA, orient="row")
