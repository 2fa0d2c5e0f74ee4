"""Mark and save a class's attendance for one day.

The sheet holds one status per student on the class roster. Students start
out present. Saving replaces the day's records of the roster students with
one fresh record per student, inside a single transaction. Records of
students who have since left the roster are kept.
"""

import datetime
import enum
import logging
import sqlite3
from typing import Optional

from schooldash.model import attendance_mod, database, policy, reports, scope
from schooldash.model.attendance_mod import AttendanceStatus
from schooldash.model.students_mod import Student


logger = logging.getLogger(__name__)


class SheetState(enum.Enum):
    UNLOADED = 0
    LOADED = 1
    DIRTY = 2
    SAVED = 3


class AttendanceSheet:
    """Attendance being taken for one class, subject, and day."""

    dbase: database.DBase
    user_scope: scope.Scope
    state: SheetState
    class_id: Optional[str]
    subject_id: str
    on_date: Optional[datetime.date]
    roster: list[Student]
    statuses: dict[str, AttendanceStatus]

    def __init__(self, dbase: database.DBase, user_scope: scope.Scope) -> None:
        self.dbase = dbase
        self.user_scope = user_scope
        self.state = SheetState.UNLOADED
        self.class_id = None
        self.subject_id = ""
        self.on_date = None
        self.roster = []
        self.statuses = {}

    def load(self, class_id: str, subject_id: str, on_date: datetime.date) -> None:
        """Read the roster and any attendance already saved for the day.

        Students without a saved record default to present. The sheet is
        SAVED if records already existed and LOADED otherwise.

        Raises:
            PermissionDeniedError: The user may not take attendance, or the
                class is outside the user's scope.
        """
        policy.require(self.user_scope.role, policy.Action.TAKE_ATTENDANCE)
        class_ids = {
            school_class.id
            for school_class in scope.list_for(
                self.dbase, self.user_scope, scope.EntityKind.CLASS
            )
        }
        if class_id not in class_ids:
            raise policy.PermissionDeniedError(
                f"Class {class_id} is not available to this user."
            )
        self.class_id = class_id
        self.subject_id = subject_id
        self.on_date = on_date
        self.roster = Student.get_roster(self.dbase, class_id)
        existing = {
            record.student_id: record.status
            for record in attendance_mod.Attendance.get_for_class_date(
                self.dbase, class_id, on_date
            )
        }
        self.statuses = {
            student.id: existing.get(student.id, AttendanceStatus.PRESENT)
            for student in self.roster
        }
        self.state = SheetState.SAVED if existing else SheetState.LOADED
        logger.debug(
            "Loaded attendance for %s on %s: %d students, %d saved records",
            class_id, on_date, len(self.roster), len(existing),
        )

    def _require_loaded(self) -> tuple[str, datetime.date]:
        """Class id and date of a loaded sheet."""
        if (
            self.state == SheetState.UNLOADED
            or self.class_id is None
            or self.on_date is None
        ):
            raise RuntimeError("Attendance sheet has not been loaded.")
        return self.class_id, self.on_date

    def set_status(self, student_id: str, status: AttendanceStatus) -> None:
        """Change one student's status."""
        self._require_loaded()
        if student_id not in self.statuses:
            raise KeyError(f"Student {student_id} is not on the class roster.")
        self.statuses[student_id] = AttendanceStatus(status)
        self.state = SheetState.DIRTY

    def mark_all(self, status: AttendanceStatus) -> None:
        """Give every student on the roster the same status."""
        self._require_loaded()
        for student_id in self.statuses:
            self.statuses[student_id] = AttendanceStatus(status)
        self.state = SheetState.DIRTY

    @property
    def can_save(self) -> bool:
        return self.state in (SheetState.LOADED, SheetState.DIRTY)

    def save(self, now: Optional[datetime.datetime] = None) -> bool:
        """Replace the day's records with the statuses on the sheet.

        Returns:
            True if the records were written. False if the database rejected
            the write, in which case the sheet stays DIRTY so it can be saved
            again.
        """
        class_id, on_date = self._require_loaded()
        now = now if now is not None else datetime.datetime.now()
        timestamp = datetime.datetime.combine(on_date, datetime.time())
        teacher_id = self.user_scope.teacher_id if self.user_scope.teacher_id else ""
        records = [
            attendance_mod.Attendance(
                id="",
                student_id=student.id,
                class_id=class_id,
                subject_id=self.subject_id,
                teacher_id=teacher_id,
                timestamp=timestamp,
                status=self.statuses[student.id],
                created_at=now,
            )
            for student in self.roster
        ]
        try:
            attendance_mod.Attendance.replace_for_class_date(
                self.dbase, class_id, on_date, records
            )
        except sqlite3.Error as err:
            logger.error(
                "Failed to save attendance for %s on %s: %s",
                class_id, on_date, err,
            )
            self.state = SheetState.DIRTY
            return False
        self.state = SheetState.SAVED
        logger.info(
            "Saved attendance for %s on %s: %d records",
            class_id, on_date, len(records),
        )
        return True

    def stats(self) -> reports.AttendanceStats:
        """Counts per status of the statuses on the sheet."""
        return reports.AttendanceStats.from_statuses(self.statuses.values())

    def shift_date(self, days: int) -> None:
        """Reload the sheet for a day before or after the current one."""
        class_id, on_date = self._require_loaded()
        self.load(
            class_id, self.subject_id, on_date + datetime.timedelta(days=days)
        )
