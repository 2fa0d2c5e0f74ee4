"""Role-scoped queries."""

import datetime

import pytest
import rich  # noqa: F401

from schooldash.model import (
    database,
    issues_mod,
    parents_mod,
    requests_mod,
    schools_mod,
    scope,
    students_mod,
    users_mod,
)
from schooldash.model.scope import EntityKind


@pytest.fixture
def two_school_dbase(seeded_dbase: database.DBase) -> database.DBase:
    """Seeded database plus a second school with one student and parent."""
    school = schools_mod.School(id="school-2", name="Riverside School")
    admin = users_mod.User(
        id="school-admin-2",
        email="admin@school2.edu",
        password="password123",
        name="Noura Saleh",
        role="school_admin",
    )
    school.add_with_admin(seeded_dbase, admin)
    schools_mod.SchoolClass(
        id="class-9", name="Grade 9", grade="9", school_id="school-2"
    ).add(seeded_dbase)
    students_mod.Student(
        id="student-9",
        name="Hamad Saleh",
        student_number="RS-001",
        class_id="class-9",
    ).add(seeded_dbase)
    parent_user = users_mod.User(
        id="parent-user-2",
        email="parent2@example.com",
        password="password123",
        name="Aisha Saleh",
        role="parent",
    )
    parents_mod.Parent(id="parent-2", user_id="", is_approved=True).add_with_user(
        seeded_dbase, parent_user, ["student-9"]
    )
    requests_mod.AbsenceRequest.submit(
        seeded_dbase,
        student_id="student-9",
        parent_id="parent-2",
        start_date=datetime.date(2025, 11, 24),
        end_date=datetime.date(2025, 11, 24),
        reason="Family travel",
    )
    return seeded_dbase


def test_ministry_sees_everything(
    two_school_dbase: database.DBase, ministry_scope: scope.Scope
) -> None:
    """The ministry scope is not filtered."""
    # Act
    schools = scope.list_for(two_school_dbase, ministry_scope, EntityKind.SCHOOL)
    students = scope.list_for(two_school_dbase, ministry_scope, EntityKind.STUDENT)
    requests = scope.list_for(
        two_school_dbase, ministry_scope, EntityKind.ABSENCE_REQUEST
    )
    # Assert
    assert len(schools) == 2
    assert len(students) == 6
    assert len(requests) == 2


def test_admin_sees_students_of_own_school(
    two_school_dbase: database.DBase, admin_scope: scope.Scope
) -> None:
    """School administrators only see students whose class is in their school."""
    # Act
    students = scope.list_for(two_school_dbase, admin_scope, EntityKind.STUDENT)
    # Assert
    class_ids = {
        school_class.id
        for school_class in schools_mod.SchoolClass.get_all(
            two_school_dbase, "school-1"
        )
    }
    assert len(students) == 5
    assert all(student.class_id in class_ids for student in students)
    assert "student-9" not in {student.id for student in students}


def test_admin_of_second_school(two_school_dbase: database.DBase) -> None:
    """The second school's administrator sees only the second school."""
    # Arrange
    admin = users_mod.User.get_by_id(two_school_dbase, "school-admin-2")
    assert admin is not None
    admin_scope = scope.Scope.for_user(two_school_dbase, admin)
    # Act
    schools = scope.list_for(two_school_dbase, admin_scope, EntityKind.SCHOOL)
    parents = scope.list_for(two_school_dbase, admin_scope, EntityKind.PARENT)
    requests = scope.list_for(two_school_dbase, admin_scope, EntityKind.ABSENCE_REQUEST)
    # Assert
    assert admin_scope.school_id == "school-2"
    assert [school.id for school in schools] == ["school-2"]
    assert [parent.id for parent in parents] == ["parent-2"]
    assert [request.student_id for request in requests] == ["student-9"]


def test_parent_sees_own_requests(
    two_school_dbase: database.DBase, parent_scope: scope.Scope
) -> None:
    """A parent's absence requests all carry the parent's id."""
    # Act
    requests = scope.list_for(
        two_school_dbase, parent_scope, EntityKind.ABSENCE_REQUEST
    )
    # Assert
    assert len(requests) == 1
    assert all(request.parent_id == parent_scope.parent_id for request in requests)


def test_parent_sees_children_and_their_classes(
    seeded_dbase: database.DBase, parent_scope: scope.Scope
) -> None:
    """Students, classes, and attendance are limited to the parent's children."""
    # Act
    students = scope.list_for(seeded_dbase, parent_scope, EntityKind.STUDENT)
    classes = scope.list_for(seeded_dbase, parent_scope, EntityKind.CLASS)
    attendance = scope.list_for(seeded_dbase, parent_scope, EntityKind.ATTENDANCE)
    # Assert
    assert sorted(student.id for student in students) == ["student-1", "student-2"]
    assert sorted(school_class.id for school_class in classes) == [
        "class-1",
        "class-2",
    ]
    assert len(attendance) == 14
    assert {record.student_id for record in attendance} == {
        "student-1",
        "student-2",
    }


def test_parent_sees_announcements_of_childrens_school(
    seeded_dbase: database.DBase, parent_scope: scope.Scope
) -> None:
    """Parents see the announcements targeted at their children's school."""
    # Act
    announcements = scope.list_for(
        seeded_dbase, parent_scope, EntityKind.ANNOUNCEMENT
    )
    # Assert
    assert len(announcements) == 2


def test_teacher_sees_own_attendance(
    seeded_dbase: database.DBase,
    teacher_scope: scope.Scope,
    other_teacher_scope: scope.Scope,
) -> None:
    """Teachers only see attendance they recorded."""
    # Act
    own = scope.list_for(seeded_dbase, teacher_scope, EntityKind.ATTENDANCE)
    other = scope.list_for(seeded_dbase, other_teacher_scope, EntityKind.ATTENDANCE)
    # Assert
    assert teacher_scope.teacher_id == "teacher-1"
    assert teacher_scope.school_id == "school-1"
    assert len(own) == 35
    assert other == []


def test_issue_visibility(
    seeded_dbase: database.DBase,
    admin_scope: scope.Scope,
    teacher_scope: scope.Scope,
    parent_scope: scope.Scope,
) -> None:
    """Administrators see issues from parents of their students."""
    # Arrange
    parent_user = users_mod.User.get_by_id(seeded_dbase, "parent-user-1")
    teacher_user = users_mod.User.get_by_id(seeded_dbase, "teacher-user-1")
    assert parent_user is not None and teacher_user is not None
    issues_mod.Issue.report(seeded_dbase, parent_user, "Bus", "The bus was late.")
    issues_mod.Issue.report(seeded_dbase, teacher_user, "Projector", "Broken.")
    # Act
    admin_issues = scope.list_for(seeded_dbase, admin_scope, EntityKind.ISSUE)
    teacher_issues = scope.list_for(seeded_dbase, teacher_scope, EntityKind.ISSUE)
    parent_issues = scope.list_for(seeded_dbase, parent_scope, EntityKind.ISSUE)
    # Assert
    assert sorted(issue.subject for issue in admin_issues) == ["Bus", "Projector"]
    assert [issue.subject for issue in teacher_issues] == ["Projector"]
    assert [issue.subject for issue in parent_issues] == ["Bus"]


def test_empty_scope_returns_empty_lists(seeded_dbase: database.DBase) -> None:
    """A scope without a school or parent record sees nothing."""
    # Arrange
    admin_without_school = scope.Scope(
        role=users_mod.Role.SCHOOL_ADMIN, user_id="nobody"
    )
    parent_without_record = scope.Scope(role=users_mod.Role.PARENT, user_id="nobody")
    # Act, Assert
    for kind in EntityKind:
        assert scope.list_for(seeded_dbase, admin_without_school, kind) == []
        assert scope.list_for(seeded_dbase, parent_without_record, kind) == []


def test_scope_for_user_roles(
    ministry_scope: scope.Scope, parent_scope: scope.Scope
) -> None:
    """Scopes carry the ids of the user's teacher or parent records."""
    assert ministry_scope.school_id is None
    assert not ministry_scope.is_staff
    assert parent_scope.parent_id == "parent-1"
    assert parent_scope.teacher_id is None
