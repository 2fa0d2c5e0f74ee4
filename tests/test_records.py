"""Schools, classes, teachers, parents, schedules, and other records."""

import datetime
import sqlite3

import pytest
import rich  # noqa: F401

from schooldash.model import (
    announcements_mod,
    coursework_mod,
    database,
    issues_mod,
    parents_mod,
    requests_mod,
    schedules_mod,
    schools_mod,
    students_mod,
    teachers_mod,
    users_mod,
)
from schooldash.model.announcements_mod import AnnouncementType, Priority


def test_add_school_with_admin(empty_database: database.DBase) -> None:
    """The school and its administrator point at each other."""
    # Arrange
    school = schools_mod.School(id="", name="Hill School", email="info@hill.edu")
    admin = users_mod.User(
        id="",
        email="admin@hill.edu",
        password="password123",
        name="Sami Nasser",
        role=users_mod.Role.SCHOOL_ADMIN,
    )
    # Act
    school.add_with_admin(empty_database, admin)
    # Assert
    stored_school = schools_mod.School.get_by_id(empty_database, school.id)
    stored_admin = users_mod.User.get_by_id(empty_database, admin.id)
    assert stored_school is not None and stored_admin is not None
    assert stored_school.admin_id == admin.id
    assert stored_admin.school_id == school.id
    assert stored_school.is_active


def test_duplicate_admin_email_adds_nothing(seeded_dbase: database.DBase) -> None:
    """A failed administrator insert rolls back the school as well."""
    # Arrange
    school = schools_mod.School(id="school-2", name="Hill School")
    admin = users_mod.User(
        id="",
        email="admin@school1.edu",
        password="password123",
        name="Sami Nasser",
        role=users_mod.Role.SCHOOL_ADMIN,
    )
    # Act, Assert
    with pytest.raises(sqlite3.IntegrityError):
        school.add_with_admin(seeded_dbase, admin)
    assert schools_mod.School.get_by_id(seeded_dbase, "school-2") is None


def test_class_with_students_cannot_be_deleted(seeded_dbase: database.DBase) -> None:
    """Classes must be emptied before they are deleted."""
    # Arrange
    full_class = schools_mod.SchoolClass.get_by_id(seeded_dbase, "class-1")
    empty_class = schools_mod.SchoolClass.get_by_id(seeded_dbase, "class-3")
    assert full_class is not None and empty_class is not None
    # Act, Assert
    assert full_class.student_count(seeded_dbase) == 3
    with pytest.raises(sqlite3.IntegrityError):
        full_class.delete(seeded_dbase)
    assert empty_class.delete(seeded_dbase)
    assert seeded_dbase.count("classes") == 2


def test_update_class(seeded_dbase: database.DBase) -> None:
    """Change a class's name and mobility level."""
    # Arrange
    school_class = schools_mod.SchoolClass.get_by_id(seeded_dbase, "class-3")
    assert school_class is not None
    school_class.name = "Grade 12 - Section A"
    school_class.mobility_level = schools_mod.MobilityLevel.HIGH
    # Act
    school_class.update(seeded_dbase)
    # Assert
    stored = schools_mod.SchoolClass.get_by_id(seeded_dbase, "class-3")
    assert stored is not None
    assert stored.name == "Grade 12 - Section A"
    assert stored.mobility_level == schools_mod.MobilityLevel.HIGH


def test_parse_subjects() -> None:
    """Blank entries and extra spaces are dropped."""
    assert teachers_mod.parse_subjects(" Math, Physics ,, ") == ["Math", "Physics"]
    assert teachers_mod.parse_subjects("") == []


def test_add_and_delete_teacher(seeded_dbase: database.DBase) -> None:
    """Teachers are stored with their user account and deleted with it."""
    # Arrange
    user = users_mod.User(
        id="",
        email="teacher3@school1.edu",
        password="password123",
        name="Huda Karim",
        role=users_mod.Role.TEACHER,
        school_id="school-1",
    )
    teacher = teachers_mod.Teacher(
        id="",
        user_id="",
        school_id="school-1",
        subjects=teachers_mod.parse_subjects("English, Science"),
    )
    # Act
    teacher.add_with_user(seeded_dbase, user)
    # Assert
    stored = teachers_mod.Teacher.get_by_user_id(seeded_dbase, user.id)
    assert stored is not None
    assert stored.subjects == ["English", "Science"]
    assert stored.subjects_text == "English, Science"
    assert teachers_mod.Teacher.get_names(seeded_dbase)[teacher.id] == "Huda Karim"
    assert stored.delete(seeded_dbase)
    assert users_mod.User.get_by_id(seeded_dbase, user.id) is None
    assert len(teachers_mod.Teacher.get_all(seeded_dbase, "school-1")) == 2


def test_add_parent_links_children(seeded_dbase: database.DBase) -> None:
    """New parents are linked to their children in the same transaction."""
    # Arrange
    user = users_mod.User(
        id="",
        email="parent3@example.com",
        password="password123",
        name="Salma Hassan",
        role=users_mod.Role.PARENT,
    )
    parent = parents_mod.Parent(id="", user_id="")
    # Act
    parent.add_with_user(seeded_dbase, user, ["student-4"])
    # Assert
    assert parent.student_ids(seeded_dbase) == ["student-4"]
    assert not parent.is_approved
    parent.approve(seeded_dbase)
    stored = parents_mod.Parent.get_by_user_id(seeded_dbase, user.id)
    assert stored is not None
    assert stored.is_approved
    school_parents = parents_mod.Parent.get_for_school(seeded_dbase, "school-1")
    assert {item.id for item in school_parents} == {"parent-1", parent.id}


def test_link_students_replaces_children(seeded_dbase: database.DBase) -> None:
    """Children left out of the new list are unlinked."""
    # Arrange
    parent = parents_mod.Parent.get_by_id(seeded_dbase, "parent-1")
    assert parent is not None
    # Act
    parent.link_students(seeded_dbase, ["student-2", "student-5"])
    # Assert
    assert sorted(parent.student_ids(seeded_dbase)) == ["student-2", "student-5"]
    student = students_mod.Student.get_by_id(seeded_dbase, "student-1")
    assert student is not None
    assert student.parent_id is None


def test_delete_parent_keeps_children(seeded_dbase: database.DBase) -> None:
    """Deleting a parent removes the account but not the students."""
    # Arrange
    parent = parents_mod.Parent.get_by_id(seeded_dbase, "parent-1")
    assert parent is not None
    # Act
    deleted = parent.delete(seeded_dbase)
    # Assert
    assert deleted
    assert users_mod.User.get_by_id(seeded_dbase, "parent-user-1") is None
    assert seeded_dbase.count("students") == 5
    children = students_mod.Student.get_for_parent(seeded_dbase, "parent-1")
    assert children == []
    student = students_mod.Student.get_by_id(seeded_dbase, "student-1")
    assert student is not None
    assert student.parent_id is None
    assert requests_mod.AbsenceRequest.get_all(seeded_dbase) == []


def test_student_matches() -> None:
    """Search by part of the name or the student number."""
    student = students_mod.Student(
        id="", name="Mariam Hassan", student_number="STU-2024-004", class_id="c"
    )
    assert student.matches("hassan")
    assert student.matches(" 2024-004 ")
    assert not student.matches("omar")


def test_group_schedules_by_day(seeded_dbase: database.DBase) -> None:
    """Each requested day lists its periods by start time."""
    # Arrange
    for day, start, end in [(1, "10:00", "10:45"), (1, "08:00", "08:45"),
                            (3, "09:00", "09:45"), (6, "09:00", "09:45")]:
        schedules_mod.Schedule(
            id="",
            class_id="class-1",
            subject_id="subject-1",
            teacher_id="teacher-1",
            day_of_week=day,
            start_time=start,
            end_time=end,
        ).add(seeded_dbase)
    schedules = schedules_mod.Schedule.get_for_classes(seeded_dbase, ["class-1"])
    # Act
    grouped = schedules_mod.group_by_day(schedules, days=(0, 1, 2, 3, 4))
    # Assert
    assert list(grouped.keys()) == [0, 1, 2, 3, 4]
    assert grouped[0] == []
    assert [item.start_time for item in grouped[1]] == ["08:00", "10:00"]
    assert grouped[1][0].day_name == "Monday"
    assert len(grouped[3]) == 1
    assert schedules_mod.Schedule.get_for_classes(seeded_dbase, ["class-2"]) == []


def test_invalid_weekday_is_rejected(seeded_dbase: database.DBase) -> None:
    """Days of the week range from 0 to 6."""
    schedule = schedules_mod.Schedule(
        id="",
        class_id="class-1",
        subject_id="subject-1",
        teacher_id="teacher-1",
        day_of_week=7,
        start_time="08:00",
        end_time="08:45",
    )
    with pytest.raises(sqlite3.IntegrityError):
        schedule.add(seeded_dbase)


def test_broadcast_announcements(seeded_dbase: database.DBase) -> None:
    """Broadcasts reach every school, targeted announcements only one."""
    # Arrange
    announcements_mod.Announcement(
        id="",
        title="Exam Week",
        content="Exams start on Sunday.",
        author_id="ministry-admin-1",
        author_role=users_mod.Role.MINISTRY,
        type=AnnouncementType.INSTRUCTION,
        priority=Priority.URGENT,
    ).add(seeded_dbase)
    # Act
    school_1 = announcements_mod.Announcement.get_for_schools(
        seeded_dbase, ["school-1"]
    )
    school_2 = announcements_mod.Announcement.get_for_schools(
        seeded_dbase, ["school-2"]
    )
    # Assert
    assert len(school_1) == 3
    assert [item.title for item in school_2] == ["Exam Week"]
    assert school_2[0].is_broadcast


def test_filter_announcements(seeded_dbase: database.DBase) -> None:
    """Filter by type and priority, with None matching everything."""
    # Arrange
    announcements = announcements_mod.Announcement.get_all(seeded_dbase)
    # Act, Assert
    high = announcements_mod.filter_announcements(
        announcements, priority=Priority.HIGH
    )
    assert [item.id for item in high] == ["announcement-2"]
    assert len(announcements_mod.filter_announcements(announcements)) == 2
    assert (
        announcements_mod.filter_announcements(
            announcements, AnnouncementType.EVACUATION
        )
        == []
    )


def test_update_and_delete_announcement(seeded_dbase: database.DBase) -> None:
    """Edit the title and priority, then delete."""
    # Arrange
    announcement = announcements_mod.Announcement.get_by_id(
        seeded_dbase, "announcement-1"
    )
    assert announcement is not None
    announcement.title = "Holiday Notice"
    announcement.priority = Priority.LOW
    # Act
    announcement.update(seeded_dbase)
    # Assert
    stored = announcements_mod.Announcement.get_by_id(seeded_dbase, "announcement-1")
    assert stored is not None
    assert stored.title == "Holiday Notice"
    assert stored.priority == Priority.LOW
    assert stored.delete(seeded_dbase)
    assert seeded_dbase.count("announcements") == 1


def test_issue_status(seeded_dbase: database.DBase) -> None:
    """Issues open with the reporter's school and move through statuses."""
    # Arrange
    teacher = users_mod.User.get_by_id(seeded_dbase, "teacher-user-2")
    assert teacher is not None
    issue = issues_mod.Issue.report(seeded_dbase, teacher, " Heating ", "Too cold.")
    # Act
    issue.set_status(seeded_dbase, issues_mod.IssueStatus.IN_PROGRESS)
    # Assert
    stored = issues_mod.Issue.get_by_id(seeded_dbase, issue.id)
    assert stored is not None
    assert stored.subject == "Heating"
    assert stored.school_id == "school-1"
    assert stored.reporter_role == users_mod.Role.TEACHER
    assert stored.status == issues_mod.IssueStatus.IN_PROGRESS
    assert stored.status.label == "In progress"
    reported = issues_mod.Issue.get_reported_by(seeded_dbase, "teacher-user-2")
    assert [item.id for item in reported] == [issue.id]


def test_coursework_records(seeded_dbase: database.DBase) -> None:
    """Notes, grades, and activities are stored per student or class."""
    # Arrange
    coursework_mod.Note(
        id="",
        student_id="student-1",
        teacher_id="teacher-1",
        content="Excellent project work.",
        type=coursework_mod.NoteType.PARENT,
    ).add(seeded_dbase)
    coursework_mod.Grade(
        id="",
        student_id="student-1",
        subject_id="subject-1",
        teacher_id="teacher-1",
        type=coursework_mod.GradeType.QUIZ,
        score=18,
        max_score=20,
        term="Term 1",
    ).add(seeded_dbase)
    coursework_mod.Activity(
        id="",
        class_id="class-1",
        title="Museum Trip",
        description="Visit to the science museum.",
        activity_date=datetime.date(2025, 12, 10),
    ).add(seeded_dbase)
    # Act
    notes = coursework_mod.Note.get_for_student(seeded_dbase, "student-1")
    grades = coursework_mod.Grade.get_for_student(seeded_dbase, "student-1")
    activities = coursework_mod.Activity.get_for_class(seeded_dbase, "class-1")
    # Assert
    assert notes[0].type == coursework_mod.NoteType.PARENT
    assert grades[0].percent == pytest.approx(90.0)
    assert activities[0].activity_date == datetime.date(2025, 12, 10)
    assert coursework_mod.Grade.get_for_student(seeded_dbase, "student-2") == []
