"""Announcements posted by the ministry and school staff.

An announcement with a NULL target_school_id is a broadcast that every school
sees.
"""

import dataclasses
import datetime
import enum
import uuid
from collections.abc import Iterable
from typing import Optional, TYPE_CHECKING

from schooldash.model import users_mod


if TYPE_CHECKING:
    from schooldash.model import database


class AnnouncementType(enum.StrEnum):
    ANNOUNCEMENT = "announcement"
    ALERT = "alert"
    INSTRUCTION = "instruction"
    EVACUATION = "evacuation"


class Priority(enum.StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


ANNOUNCEMENT_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS announcements (
                  id TEXT PRIMARY KEY,
               title TEXT NOT NULL,
             content TEXT NOT NULL,
           author_id TEXT NOT NULL,
         author_role TEXT NOT NULL,
    target_school_id TEXT,
                type TEXT NOT NULL DEFAULT 'announcement',
            priority TEXT NOT NULL DEFAULT 'medium',
          created_at TEXT NOT NULL
);
"""


@dataclasses.dataclass
class Announcement:
    """A message shown on the announcements screen."""

    id: str
    title: str
    content: str
    author_id: str
    author_role: users_mod.Role
    target_school_id: Optional[str]
    type: AnnouncementType
    priority: Priority
    created_at: datetime.datetime

    def __init__(
        self,
        id: str,
        title: str,
        content: str,
        author_id: str,
        author_role: str | users_mod.Role,
        target_school_id: Optional[str] = None,
        type: str | AnnouncementType = AnnouncementType.ANNOUNCEMENT,
        priority: str | Priority = Priority.MEDIUM,
        created_at: Optional[datetime.datetime | str] = None,
    ) -> None:
        """Convert Sqlite values. Pass an empty id to generate a new one."""
        if isinstance(created_at, str):
            created_at = datetime.datetime.fromisoformat(created_at)
        self.id = id if id else str(uuid.uuid4())
        self.title = title
        self.content = content
        self.author_id = author_id
        self.author_role = users_mod.Role(author_role)
        self.target_school_id = target_school_id if target_school_id else None
        self.type = AnnouncementType(type)
        self.priority = Priority(priority)
        self.created_at = created_at if created_at else datetime.datetime.now()

    @property
    def is_broadcast(self) -> bool:
        return self.target_school_id is None

    def _params(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "author_id": self.author_id,
            "author_role": self.author_role.value,
            "target_school_id": self.target_school_id,
            "type": self.type.value,
            "priority": self.priority.value,
            "created_at": self.created_at,
        }

    def add(self, dbase: "database.DBase") -> None:
        """Add the announcement to the database."""
        query = """
                INSERT INTO announcements
                            (id, title, content, author_id, author_role,
                            target_school_id, type, priority, created_at)
                     VALUES (:id, :title, :content, :author_id, :author_role,
                            :target_school_id, :type, :priority, :created_at);
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, self._params())
        conn.close()

    def update(self, dbase: "database.DBase") -> None:
        """Update the title, content, type, and priority."""
        query = """
                UPDATE announcements
                   SET title = :title,
                       content = :content,
                       type = :type,
                       priority = :priority
                 WHERE id = :id;
        """
        with dbase.get_db_connection() as conn:
            conn.execute(query, self._params())
        conn.close()

    def delete(self, dbase: "database.DBase") -> bool:
        """Delete the announcement."""
        with dbase.get_db_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM announcements WHERE id = ?;", (self.id,)
            )
        row_count = cursor.rowcount
        conn.close()
        return row_count == 1

    @staticmethod
    def get_by_id(
        dbase: "database.DBase", announcement_id: str
    ) -> "Announcement | None":
        """Retrieve an announcement by id."""
        conn = dbase.get_db_connection(as_dict=True)
        result = conn.execute(
            "SELECT * FROM announcements WHERE id = ?;", (announcement_id,)
        ).fetchone()
        conn.close()
        return None if result is None else Announcement(**result)

    @staticmethod
    def get_all(dbase: "database.DBase") -> list["Announcement"]:
        """Retrieve all announcements, newest first."""
        conn = dbase.get_db_connection(as_dict=True)
        announcements = [
            Announcement(**row)
            for row in conn.execute(
                "SELECT * FROM announcements ORDER BY created_at DESC;"
            )
        ]
        conn.close()
        return announcements

    @staticmethod
    def get_for_schools(
        dbase: "database.DBase", school_ids: Iterable[str]
    ) -> list["Announcement"]:
        """Broadcasts plus announcements for the listed schools, newest first."""
        school_ids = list(school_ids)
        placeholders = ", ".join("?" for _ in school_ids)
        query = f"""
                SELECT *
                  FROM announcements
                 WHERE target_school_id IS NULL
                    OR target_school_id IN ({placeholders})
              ORDER BY created_at DESC;
        """
        conn = dbase.get_db_connection(as_dict=True)
        announcements = [Announcement(**row) for row in conn.execute(query, school_ids)]
        conn.close()
        return announcements


def filter_announcements(
    announcements: list[Announcement],
    announcement_type: Optional[AnnouncementType] = None,
    priority: Optional[Priority] = None,
) -> list[Announcement]:
    """Keep announcements matching the type and priority. None matches all."""
    return [
        announcement
        for announcement in announcements
        if (announcement_type is None or announcement.type == announcement_type)
        and (priority is None or announcement.priority == priority)
    ]
