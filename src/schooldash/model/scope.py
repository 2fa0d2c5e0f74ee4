"""Role-scoped queries.

A Scope describes what the signed-in user is attached to: a school for staff,
a parent record for parents, nothing for the ministry (which sees everything).
list_for() returns the rows of one kind that the scope is allowed to see.
A scope that is missing the record it needs gets an empty list.
"""

import dataclasses
import enum
from collections.abc import Callable
from typing import Any, Optional

from schooldash.model import (
    announcements_mod,
    attendance_mod,
    database,
    issues_mod,
    parents_mod,
    requests_mod,
    schedules_mod,
    schools_mod,
    students_mod,
    teachers_mod,
)
from schooldash.model.users_mod import Role, User


class EntityKind(enum.StrEnum):
    SCHOOL = "school"
    CLASS = "class"
    SUBJECT = "subject"
    STUDENT = "student"
    TEACHER = "teacher"
    PARENT = "parent"
    SCHEDULE = "schedule"
    ATTENDANCE = "attendance"
    ABSENCE_REQUEST = "absence_request"
    ANNOUNCEMENT = "announcement"
    ISSUE = "issue"


@dataclasses.dataclass(frozen=True)
class Scope:
    """Identity of the signed-in user, as used to filter queries."""

    role: Role
    user_id: str
    school_id: Optional[str] = None
    teacher_id: Optional[str] = None
    parent_id: Optional[str] = None

    @classmethod
    def for_user(cls, dbase: database.DBase, user: User) -> "Scope":
        """Build the scope of a user, looking up teacher and parent records."""
        school_id = user.school_id
        teacher_id = None
        parent_id = None
        if user.role == Role.TEACHER:
            teacher = teachers_mod.Teacher.get_by_user_id(dbase, user.id)
            if teacher is not None:
                teacher_id = teacher.id
                school_id = school_id or teacher.school_id
        elif user.role == Role.PARENT:
            parent = parents_mod.Parent.get_by_user_id(dbase, user.id)
            parent_id = None if parent is None else parent.id
        return cls(
            role=user.role,
            user_id=user.id,
            school_id=school_id,
            teacher_id=teacher_id,
            parent_id=parent_id,
        )

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.SCHOOL_ADMIN, Role.TEACHER)


def school_ids_for(dbase: database.DBase, scope: Scope) -> list[str]:
    """Ids of the schools a scope can see."""
    return [school.id for school in list_for(dbase, scope, EntityKind.SCHOOL)]


def _children(dbase: database.DBase, scope: Scope) -> list[students_mod.Student]:
    if scope.parent_id is None:
        return []
    return students_mod.Student.get_for_parent(dbase, scope.parent_id)


def _child_class_ids(dbase: database.DBase, scope: Scope) -> list[str]:
    class_ids = []
    for student in _children(dbase, scope):
        if student.class_id not in class_ids:
            class_ids.append(student.class_id)
    return class_ids


def _child_school_ids(dbase: database.DBase, scope: Scope) -> list[str]:
    class_ids = set(_child_class_ids(dbase, scope))
    return list(
        dict.fromkeys(
            school_class.school_id
            for school_class in schools_mod.SchoolClass.get_all(dbase)
            if school_class.id in class_ids
        )
    )


def _ministry(dbase: database.DBase, scope: Scope, kind: EntityKind) -> list[Any]:
    getters: dict[EntityKind, Callable[[database.DBase], list[Any]]] = {
        EntityKind.SCHOOL: schools_mod.School.get_all,
        EntityKind.CLASS: schools_mod.SchoolClass.get_all,
        EntityKind.SUBJECT: schools_mod.Subject.get_all,
        EntityKind.STUDENT: students_mod.Student.get_all,
        EntityKind.TEACHER: teachers_mod.Teacher.get_all,
        EntityKind.PARENT: parents_mod.Parent.get_all,
        EntityKind.SCHEDULE: schedules_mod.Schedule.get_all,
        EntityKind.ATTENDANCE: attendance_mod.Attendance.get_all,
        EntityKind.ABSENCE_REQUEST: requests_mod.AbsenceRequest.get_all,
        EntityKind.ANNOUNCEMENT: announcements_mod.Announcement.get_all,
        EntityKind.ISSUE: issues_mod.Issue.get_all,
    }
    return getters[kind](dbase)


def _staff(dbase: database.DBase, scope: Scope, kind: EntityKind) -> list[Any]:
    if kind == EntityKind.ISSUE:
        if scope.role == Role.TEACHER:
            return issues_mod.Issue.get_reported_by(dbase, scope.user_id)
        if scope.school_id is None:
            return []
        return issues_mod.Issue.get_for_school(dbase, scope.school_id)
    school_id = scope.school_id
    if school_id is None:
        return []
    match kind:
        case EntityKind.SCHOOL:
            school = schools_mod.School.get_by_id(dbase, school_id)
            return [] if school is None else [school]
        case EntityKind.CLASS:
            return schools_mod.SchoolClass.get_all(dbase, school_id)
        case EntityKind.SUBJECT:
            return schools_mod.Subject.get_all(dbase, school_id)
        case EntityKind.STUDENT:
            return students_mod.Student.get_for_school(dbase, school_id)
        case EntityKind.TEACHER:
            return teachers_mod.Teacher.get_all(dbase, school_id)
        case EntityKind.PARENT:
            return parents_mod.Parent.get_for_school(dbase, school_id)
        case EntityKind.SCHEDULE:
            class_ids = [
                school_class.id
                for school_class in schools_mod.SchoolClass.get_all(dbase, school_id)
            ]
            return schedules_mod.Schedule.get_for_classes(dbase, class_ids)
        case EntityKind.ATTENDANCE:
            if scope.role == Role.TEACHER and scope.teacher_id is None:
                return []
            class_ids = {
                school_class.id
                for school_class in schools_mod.SchoolClass.get_all(dbase, school_id)
            }
            return [
                record
                for record in attendance_mod.Attendance.get_all(dbase)
                if record.class_id in class_ids
                and (
                    scope.role != Role.TEACHER
                    or record.teacher_id == scope.teacher_id
                )
            ]
        case EntityKind.ABSENCE_REQUEST:
            return requests_mod.AbsenceRequest.get_for_school(dbase, school_id)
        case EntityKind.ANNOUNCEMENT:
            return announcements_mod.Announcement.get_for_schools(dbase, [school_id])
    return []


def _parent(dbase: database.DBase, scope: Scope, kind: EntityKind) -> list[Any]:
    if kind == EntityKind.ISSUE:
        return issues_mod.Issue.get_reported_by(dbase, scope.user_id)
    if scope.parent_id is None:
        return []
    match kind:
        case EntityKind.STUDENT:
            return _children(dbase, scope)
        case EntityKind.CLASS:
            class_ids = _child_class_ids(dbase, scope)
            return [
                school_class
                for school_class in schools_mod.SchoolClass.get_all(dbase)
                if school_class.id in class_ids
            ]
        case EntityKind.SCHOOL:
            school_ids = _child_school_ids(dbase, scope)
            return [
                school
                for school in schools_mod.School.get_all(dbase)
                if school.id in school_ids
            ]
        case EntityKind.SUBJECT:
            school_ids = _child_school_ids(dbase, scope)
            return [
                subject
                for subject in schools_mod.Subject.get_all(dbase)
                if subject.school_id in school_ids
            ]
        case EntityKind.PARENT:
            parent = parents_mod.Parent.get_by_id(dbase, scope.parent_id)
            return [] if parent is None else [parent]
        case EntityKind.SCHEDULE:
            return schedules_mod.Schedule.get_for_classes(
                dbase, _child_class_ids(dbase, scope)
            )
        case EntityKind.ATTENDANCE:
            child_ids = {student.id for student in _children(dbase, scope)}
            return [
                record
                for record in attendance_mod.Attendance.get_all(dbase)
                if record.student_id in child_ids
            ]
        case EntityKind.ABSENCE_REQUEST:
            return requests_mod.AbsenceRequest.get_for_parent(dbase, scope.parent_id)
        case EntityKind.ANNOUNCEMENT:
            return announcements_mod.Announcement.get_for_schools(
                dbase, _child_school_ids(dbase, scope)
            )
    return []


def list_for(dbase: database.DBase, scope: Scope, kind: EntityKind) -> list[Any]:
    """Rows of one kind that the scope may see.

    Absence requests, announcements, and issues are returned newest first.
    Everything else is returned in store order.
    """
    if scope.role == Role.MINISTRY:
        return _ministry(dbase, scope, kind)
    if scope.is_staff:
        return _staff(dbase, scope, kind)
    if scope.role == Role.PARENT:
        return _parent(dbase, scope, kind)
    return []
