"""Weekly class schedules.

The day_of_week field is an integer ranging from 0 (Sunday) to 6 (Saturday).
Start and end times are "HH:MM" strings, so they sort correctly as text.
Overlapping periods are not checked.
"""

import dataclasses
import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from schooldash.model import database


DAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


SCHEDULE_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS schedules (
             id TEXT PRIMARY KEY,
       class_id TEXT NOT NULL REFERENCES classes (id) ON DELETE CASCADE,
     subject_id TEXT NOT NULL,
     teacher_id TEXT NOT NULL,
    day_of_week INTEGER NOT NULL CHECK (day_of_week BETWEEN 0 AND 6),
     start_time TEXT NOT NULL,
       end_time TEXT NOT NULL
);
"""


@dataclasses.dataclass
class Schedule:
    """One period in a class's weekly timetable."""

    id: str
    class_id: str
    subject_id: str
    teacher_id: str
    day_of_week: int
    start_time: str
    end_time: str

    def __post_init__(self) -> None:
        if not self.id:
            self.id = str(uuid.uuid4())
        self.day_of_week = int(self.day_of_week)

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]

    def add(self, dbase: "database.DBase") -> None:
        """Add the schedule to the database."""
        query = """
                INSERT INTO schedules
                            (id, class_id, subject_id, teacher_id, day_of_week,
                            start_time, end_time)
                     VALUES (:id, :class_id, :subject_id, :teacher_id,
                            :day_of_week, :start_time, :end_time);
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, dataclasses.asdict(self))
        conn.close()

    def delete(self, dbase: "database.DBase") -> bool:
        """Delete the schedule."""
        with dbase.get_db_connection() as conn:
            cursor = conn.execute("DELETE FROM schedules WHERE id = ?;", (self.id,))
        row_count = cursor.rowcount
        conn.close()
        return row_count == 1

    @staticmethod
    def get_all(dbase: "database.DBase") -> list["Schedule"]:
        """Retrieve all schedules in store order."""
        conn = dbase.get_db_connection(as_dict=True)
        schedules = [
            Schedule(**row) for row in conn.execute("SELECT * FROM schedules;")
        ]
        conn.close()
        return schedules

    @staticmethod
    def get_for_classes(
        dbase: "database.DBase", class_ids: Iterable[str]
    ) -> list["Schedule"]:
        """Schedules of the listed classes, in store order."""
        class_ids = list(class_ids)
        placeholders = ", ".join("?" for _ in class_ids)
        query = f"SELECT * FROM schedules WHERE class_id IN ({placeholders});"
        conn = dbase.get_db_connection(as_dict=True)
        schedules = [Schedule(**row) for row in conn.execute(query, class_ids)]
        conn.close()
        return schedules


def group_by_day(
    schedules: Iterable[Schedule], days: Iterable[int] = range(7)
) -> dict[int, list[Schedule]]:
    """Group schedules by weekday, each day sorted by start time.

    Every requested day appears in the result, even when it has no periods.
    Schedules on days that were not requested are left out.
    """
    grouped: dict[int, list[Schedule]] = {day: [] for day in days}
    for schedule in schedules:
        if schedule.day_of_week in grouped:
            grouped[schedule.day_of_week].append(schedule)
    for day_schedules in grouped.values():
        day_schedules.sort(key=lambda sched: sched.start_time)
    return grouped
