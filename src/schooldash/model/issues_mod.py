"""Issues reported by staff and parents."""

import dataclasses
import datetime
import enum
import uuid
from typing import Optional, TYPE_CHECKING

from schooldash.model import users_mod


if TYPE_CHECKING:
    from schooldash.model import database


class IssueStatus(enum.StrEnum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


ISSUE_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS issues (
               id TEXT PRIMARY KEY,
      reported_by TEXT NOT NULL,
    reporter_role TEXT NOT NULL,
        school_id TEXT,
          subject TEXT NOT NULL,
      description TEXT NOT NULL,
           status TEXT NOT NULL DEFAULT 'open',
       created_at TEXT NOT NULL
);
"""


@dataclasses.dataclass
class Issue:
    """A problem reported to the school administration."""

    id: str
    reported_by: str
    reporter_role: users_mod.Role
    school_id: Optional[str]
    subject: str
    description: str
    status: IssueStatus
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        reported_by: str,
        reporter_role: str | users_mod.Role,
        subject: str,
        description: str,
        school_id: Optional[str] = None,
        status: str | IssueStatus = IssueStatus.OPEN,
        created_at: Optional[datetime.datetime | str] = None,
    ) -> None:
        """Convert Sqlite values. Pass an empty id to generate a new one."""
        if isinstance(created_at, str):
            created_at = datetime.datetime.fromisoformat(created_at)
        self.id = id if id else str(uuid.uuid4())
        self.reported_by = reported_by
        self.reporter_role = users_mod.Role(reporter_role)
        self.school_id = school_id if school_id else None
        self.subject = subject
        self.description = description
        self.status = IssueStatus(status)
        self.created_at = created_at if created_at else datetime.datetime.now()

    @classmethod
    def report(
        cls,
        dbase: "database.DBase",
        reporter: users_mod.User,
        subject: str,
        description: str,
    ) -> "Issue":
        """Create an open issue on behalf of a user."""
        issue = cls(
            id="",
            reported_by=reporter.id,
            reporter_role=reporter.role,
            school_id=reporter.school_id,
            subject=subject.strip(),
            description=description.strip(),
        )
        issue.add(dbase)
        return issue

    def add(self, dbase: "database.DBase") -> None:
        """Add the issue to the database."""
        query = """
                INSERT INTO issues
                            (id, reported_by, reporter_role, school_id, subject,
                            description, status, created_at)
                     VALUES (:id, :reported_by, :reporter_role, :school_id,
                            :subject, :description, :status, :created_at);
        """
        with dbase.get_db_connection() as conn:
            conn.execute(
                query,
                {
                    "id": self.id,
                    "reported_by": self.reported_by,
                    "reporter_role": self.reporter_role.value,
                    "school_id": self.school_id,
                    "subject": self.subject,
                    "description": self.description,
                    "status": self.status.value,
                    "created_at": self.created_at,
                },
            )
        conn.close()

    def set_status(self, dbase: "database.DBase", status: IssueStatus) -> None:
        """Move the issue to a new status."""
        with dbase.get_db_connection() as conn:
            conn.execute(
                "UPDATE issues SET status = ? WHERE id = ?;", (status.value, self.id)
            )
        conn.close()
        self.status = status

    @staticmethod
    def get_by_id(dbase: "database.DBase", issue_id: str) -> "Issue | None":
        """Retrieve an issue by id."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM issues WHERE id = ?;", (issue_id,)
        ).fetchone()
        conn.close()
        return None if result is None else Issue(**result)

    @staticmethod
    def get_all(dbase: "database.DBase") -> list["Issue"]:
        """Retrieve all issues, newest first."""
        conn = dbase.get_db_connection(as_dict=True)
        issues = [
            Issue(**row)
            for row in conn.execute("SELECT * FROM issues ORDER BY created_at DESC;")
        ]
        conn.close()
        return issues

    @staticmethod
    def get_reported_by(dbase: "database.DBase", user_id: str) -> list["Issue"]:
        """Issues reported by one user, newest first."""
        query = """
                SELECT *
                  FROM issues
                 WHERE reported_by = ?
              ORDER BY created_at DESC;
        """
        conn = dbase.get_db_connection(as_dict=True)
        issues = [Issue(**row) for row in conn.execute(query, (user_id,))]
        conn.close()
        return issues

    @staticmethod
    def get_for_school(dbase: "database.DBase", school_id: str) -> list["Issue"]:
        """Issues raised at a school, newest first.

        Includes issues filed with the school's id and issues reported by
        parents of students enrolled at the school.
        """
        query = """
                SELECT *
                  FROM issues
                 WHERE school_id = :school_id
                    OR reported_by IN (
                       SELECT parents.user_id
                         FROM parents
                         JOIN students
                           ON students.parent_id = parents.id
                         JOIN classes
                           ON classes.id = students.class_id
                        WHERE classes.school_id = :school_id)
              ORDER BY created_at DESC;
        """
        conn = dbase.get_db_connection(as_dict=True)
        issues = [Issue(**row) for row in conn.execute(query, {"school_id": school_id})]
        conn.close()
        return issues
