"""Load the demonstration dataset into an empty database.

The dataset has one school with a ministry administrator, a school
administrator, two teachers, and one parent. Every account uses the password
password123.
"""

import datetime
import json
import logging
import random
from typing import Any, Optional

from schooldash.model import attendance_mod, database


logger = logging.getLogger(__name__)

SEED_PASSWORD = "password123"
SCHOOL_ID = "school-1"
ATTENDANCE_DAYS = 7
RANDOM_STATUS_THRESHOLD = 0.85


def _users(now: datetime.datetime) -> list[dict[str, Any]]:
    users = [
        ("ministry-admin-1", "moe@edutech.gov", "Ministry Administrator",
         "ministry", None),
        ("school-admin-1", "admin@school1.edu", "Ahmad Al-Rahman",
         "school_admin", SCHOOL_ID),
        ("teacher-user-1", "teacher1@school1.edu", "Sarah Al-Maktoum",
         "teacher", SCHOOL_ID),
        ("teacher-user-2", "teacher2@school1.edu", "Mohammed Hassan",
         "teacher", SCHOOL_ID),
        ("parent-user-1", "parent@example.com", "Fatima Al-Rashid",
         "parent", None),
    ]
    return [
        {
            "id": user_id,
            "email": email,
            "password": SEED_PASSWORD,
            "name": name,
            "role": role,
            "school_id": school_id,
            "is_active": 1,
            "created_at": now,
        }
        for user_id, email, name, role, school_id in users
    ]


def _classes(now: datetime.datetime) -> list[dict[str, Any]]:
    classes = [
        ("class-1", "Grade 10 - Section A", "10", "medium"),
        ("class-2", "Grade 10 - Section B", "10", "high"),
        ("class-3", "Grade 11 - Section A", "11", "low"),
    ]
    return [
        {
            "id": class_id,
            "name": name,
            "grade": grade,
            "school_id": SCHOOL_ID,
            "mobility_level": mobility,
            "is_active": 1,
            "created_at": now,
        }
        for class_id, name, grade, mobility in classes
    ]


def _students(now: datetime.datetime) -> list[dict[str, Any]]:
    students = [
        ("student-1", "Omar Al-Rashid", "STU-2024-001", "class-1", "parent-1",
         "2009-05-15", "male"),
        ("student-2", "Layla Al-Rashid", "STU-2024-002", "class-2", "parent-1",
         "2010-08-22", "female"),
        ("student-3", "Khalid Abdullah", "STU-2024-003", "class-1", None,
         "2009-02-10", "male"),
        ("student-4", "Mariam Hassan", "STU-2024-004", "class-1", None,
         "2009-11-30", "female"),
        ("student-5", "Yousef Al-Qasimi", "STU-2024-005", "class-2", None,
         "2009-07-18", "male"),
    ]
    return [
        {
            "id": student_id,
            "name": name,
            "student_number": number,
            "class_id": class_id,
            "parent_id": parent_id,
            "date_of_birth": birth_date,
            "gender": gender,
            "is_active": 1,
            "created_at": now,
        }
        for (
            student_id, name, number, class_id, parent_id, birth_date, gender
        ) in students
    ]


def _attendance(
    now: datetime.datetime, students: list[dict[str, Any]], rng: random.Random
) -> list[dict[str, Any]]:
    """Seven days of attendance for every student, mostly present."""
    statuses = list(attendance_mod.AttendanceStatus)
    records = []
    for days_ago in range(ATTENDANCE_DAYS):
        timestamp = now - datetime.timedelta(days=days_ago)
        for student in students:
            status = attendance_mod.AttendanceStatus.PRESENT
            if rng.random() > RANDOM_STATUS_THRESHOLD:
                status = rng.choice(statuses)
            records.append(
                {
                    "id": f"attendance-{student['id']}-{days_ago}",
                    "student_id": student["id"],
                    "class_id": student["class_id"],
                    "subject_id": "subject-1",
                    "teacher_id": "teacher-1",
                    "timestamp": timestamp,
                    "status": status.value,
                    "notes": None,
                    "created_at": timestamp,
                }
            )
    return records


def build_seed_data(
    now: datetime.datetime, rng: random.Random
) -> dict[str, list[dict[str, Any]]]:
    """Demonstration records keyed by table name."""
    students = _students(now)
    subjects = ["Mathematics", "Physics", "Arabic", "Islamic Studies", "English",
                "Science"]
    return {
        "users": _users(now),
        "schools": [
            {
                "id": SCHOOL_ID,
                "name": "Al-Faisal International School",
                "address": "123 Education Street, Dubai",
                "phone": "+971-4-123-4567",
                "email": "info@school1.edu",
                "admin_id": "school-admin-1",
                "is_active": 1,
                "created_at": now,
            }
        ],
        "classes": _classes(now),
        "subjects": [
            {
                "id": f"subject-{number}",
                "name": name,
                "school_id": SCHOOL_ID,
                "created_at": now,
            }
            for number, name in enumerate(subjects, start=1)
        ],
        "teachers": [
            {
                "id": "teacher-1",
                "user_id": "teacher-user-1",
                "school_id": SCHOOL_ID,
                "subjects": json.dumps(["Mathematics", "Physics"]),
                "is_supervisor": 1,
                "is_active": 1,
                "created_at": now,
            },
            {
                "id": "teacher-2",
                "user_id": "teacher-user-2",
                "school_id": SCHOOL_ID,
                "subjects": json.dumps(["Arabic", "Islamic Studies"]),
                "is_supervisor": 0,
                "is_active": 1,
                "created_at": now,
            },
        ],
        "parents": [
            {
                "id": "parent-1",
                "user_id": "parent-user-1",
                "is_approved": 1,
                "created_at": now,
            }
        ],
        "students": students,
        "attendance": _attendance(now, students, rng),
        "absence_requests": [
            {
                "id": "absence-1",
                "student_id": "student-1",
                "parent_id": "parent-1",
                "start_date": (now + datetime.timedelta(days=2)).date(),
                "end_date": (now + datetime.timedelta(days=3)).date(),
                "reason": "Medical appointment",
                "status": "pending",
                "reviewed_by": None,
                "reviewed_at": None,
                "created_at": now,
            }
        ],
        "announcements": [
            {
                "id": "announcement-1",
                "title": "School Holiday Notice",
                "content": "The school will be closed for National Day "
                "celebrations from December 2-3.",
                "author_id": "school-admin-1",
                "author_role": "school_admin",
                "target_school_id": SCHOOL_ID,
                "type": "announcement",
                "priority": "medium",
                "created_at": now,
            },
            {
                "id": "announcement-2",
                "title": "Parent-Teacher Meeting",
                "content": "Parent-teacher conferences will be held next week. "
                "Please check your schedule.",
                "author_id": "school-admin-1",
                "author_role": "school_admin",
                "target_school_id": SCHOOL_ID,
                "type": "announcement",
                "priority": "high",
                "created_at": now,
            },
        ],
    }


def seed_database(
    dbase: database.DBase,
    now: Optional[datetime.datetime] = None,
    rng: Optional[random.Random] = None,
) -> bool:
    """Load demonstration data if the database has no users.

    Args:
        dbase: Database to load.
        now: Reference time for timestamps. Defaults to the current time.
        rng: Random number generator that picks the occasional non-present
            attendance status. Pass a seeded generator for repeatable data.

    Returns:
        True if data was loaded, False if the database already had users.
    """
    if not dbase.is_empty():
        logger.debug("Database %s already has users, skipping seed.", dbase.db_path)
        return False
    now = now if now is not None else datetime.datetime.now()
    rng = rng if rng is not None else random.Random()
    dbase.load_from_dict(build_seed_data(now, rng))
    logger.info("Loaded demonstration data into %s", dbase.db_path)
    return True
