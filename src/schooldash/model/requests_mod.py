"""Absence requests submitted by parents and reviewed by school admins."""

import dataclasses
import datetime
import enum
import uuid
from typing import Optional, TYPE_CHECKING


if TYPE_CHECKING:
    from schooldash.model import database


class RequestStatus(enum.StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


ABSENCE_REQUEST_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS absence_requests (
             id TEXT PRIMARY KEY,
     student_id TEXT NOT NULL REFERENCES students (id) ON DELETE CASCADE,
      parent_id TEXT NOT NULL REFERENCES parents (id) ON DELETE CASCADE,
     start_date TEXT NOT NULL,
       end_date TEXT NOT NULL,
         reason TEXT NOT NULL,
         status TEXT NOT NULL DEFAULT 'pending',
    reviewed_by TEXT,
    reviewed_at TEXT,
     created_at TEXT NOT NULL
);
"""


class RequestReviewError(Exception):
    """Raised when approving or rejecting a request that is not pending."""


@dataclasses.dataclass
class AbsenceRequest:
    """A parent's request to excuse a child for one or more days."""

    id: str
    student_id: str
    parent_id: str
    start_date: datetime.date
    end_date: datetime.date
    reason: str
    status: RequestStatus
    reviewed_by: Optional[str]
    reviewed_at: Optional[datetime.datetime]
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        student_id: str,
        parent_id: str,
        start_date: datetime.date | str,
        end_date: datetime.date | str,
        reason: str,
        status: str | RequestStatus = RequestStatus.PENDING,
        reviewed_by: Optional[str] = None,
        reviewed_at: Optional[datetime.datetime | str] = None,
        created_at: Optional[datetime.datetime | str] = None,
    ) -> None:
        """Convert Sqlite values. Pass an empty id to generate a new one."""
        if isinstance(start_date, str):
            start_date = datetime.date.fromisoformat(start_date)
        if isinstance(end_date, str):
            end_date = datetime.date.fromisoformat(end_date)
        if isinstance(reviewed_at, str):
            reviewed_at = datetime.datetime.fromisoformat(reviewed_at)
        if isinstance(created_at, str):
            created_at = datetime.datetime.fromisoformat(created_at)
        self.id = id if id else str(uuid.uuid4())
        self.student_id = student_id
        self.parent_id = parent_id
        self.start_date = start_date
        self.end_date = end_date
        self.reason = reason
        self.status = RequestStatus(status)
        self.reviewed_by = reviewed_by
        self.reviewed_at = reviewed_at
        self.created_at = created_at if created_at else datetime.datetime.now()

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def _params(self) -> dict:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "parent_id": self.parent_id,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "reason": self.reason,
            "status": self.status.value,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at,
            "created_at": self.created_at,
        }

    def add(self, dbase: "database.DBase") -> None:
        """Add the request to the database.

        Raises:
            ValueError: The end date is before the start date.
        """
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date.")
        query = """
                INSERT INTO absence_requests
                            (id, student_id, parent_id, start_date, end_date,
                            reason, status, reviewed_by, reviewed_at, created_at)
                     VALUES (:id, :student_id, :parent_id, :start_date, :end_date,
                            :reason, :status, :reviewed_by, :reviewed_at,
                            :created_at);
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, self._params())
        conn.close()

    @classmethod
    def submit(
        cls,
        dbase: "database.DBase",
        student_id: str,
        parent_id: str,
        start_date: datetime.date,
        end_date: datetime.date,
        reason: str,
    ) -> "AbsenceRequest":
        """Create a new pending request for a parent's child."""
        request = cls(
            id="",
            student_id=student_id,
            parent_id=parent_id,
            start_date=start_date,
            end_date=end_date,
            reason=reason.strip(),
        )
        request.add(dbase)
        return request

    def approve(
        self,
        dbase: "database.DBase",
        reviewer_id: str,
        now: Optional[datetime.datetime] = None,
    ) -> None:
        """Approve a pending request."""
        self._review(dbase, RequestStatus.APPROVED, reviewer_id, now)

    def reject(
        self,
        dbase: "database.DBase",
        reviewer_id: str,
        now: Optional[datetime.datetime] = None,
    ) -> None:
        """Reject a pending request."""
        self._review(dbase, RequestStatus.REJECTED, reviewer_id, now)

    def _review(
        self,
        dbase: "database.DBase",
        status: RequestStatus,
        reviewer_id: str,
        now: Optional[datetime.datetime],
    ) -> None:
        """Record the decision, reviewer, and review time.

        Raises:
            RequestReviewError: The request was already approved or rejected,
                either in this object or in the database.
        """
        if not self.is_pending:
            raise RequestReviewError(
                f"Absence request {self.id} has already been {self.status}."
            )
        reviewed_at = now if now is not None else datetime.datetime.now()
        query = """
                UPDATE absence_requests
                   SET status = :status,
                       reviewed_by = :reviewed_by,
                       reviewed_at = :reviewed_at
                 WHERE id = :id
                   AND status = 'pending';
        """
        with dbase.get_db_connection() as conn:
            cursor = conn.execute(
                query,
                {
                    "id": self.id,
                    "status": status.value,
                    "reviewed_by": reviewer_id,
                    "reviewed_at": reviewed_at,
                },
            )
        row_count = cursor.rowcount
        conn.close()
        if row_count != 1:
            raise RequestReviewError(
                f"Absence request {self.id} is no longer pending."
            )
        self.status = status
        self.reviewed_by = reviewer_id
        self.reviewed_at = reviewed_at

    @staticmethod
    def get_by_id(
        dbase: "database.DBase", request_id: str
    ) -> "AbsenceRequest | None":
        """Retrieve a request by id."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM absence_requests WHERE id = ?;", (request_id,)
        ).fetchone()
        conn.close()
        return None if result is None else AbsenceRequest(**result)

    @staticmethod
    def get_all(dbase: "database.DBase") -> list["AbsenceRequest"]:
        """Retrieve all requests, newest first."""
        conn = dbase.get_db_connection(as_dict=True)
        requests = [
            AbsenceRequest(**row)
            for row in conn.execute(
                "SELECT * FROM absence_requests ORDER BY created_at DESC;"
            )
        ]
        conn.close()
        return requests

    @staticmethod
    def get_for_parent(
        dbase: "database.DBase", parent_id: str
    ) -> list["AbsenceRequest"]:
        """Requests submitted by a parent, newest first."""
        query = """
                SELECT *
                  FROM absence_requests
                 WHERE parent_id = ?
              ORDER BY created_at DESC;
        """
        conn = dbase.get_db_connection(as_dict=True)
        requests = [AbsenceRequest(**row) for row in conn.execute(query, (parent_id,))]
        conn.close()
        return requests

    @staticmethod
    def get_for_school(
        dbase: "database.DBase", school_id: str
    ) -> list["AbsenceRequest"]:
        """Requests for students enrolled at a school, newest first."""
        query = """
                SELECT absence_requests.*
                  FROM absence_requests
                  JOIN students
                    ON students.id = absence_requests.student_id
                  JOIN classes
                    ON classes.id = students.class_id
                 WHERE classes.school_id = ?
              ORDER BY absence_requests.created_at DESC;
        """
        conn = dbase.get_db_connection(as_dict=True)
        requests = [AbsenceRequest(**row) for row in conn.execute(query, (school_id,))]
        conn.close()
        return requests


def filter_by_status(
    requests: list[AbsenceRequest], status: Optional[RequestStatus]
) -> list[AbsenceRequest]:
    """Requests with the given status. Pass None to keep all of them."""
    if status is None:
        return list(requests)
    return [request for request in requests if request.status == status]
