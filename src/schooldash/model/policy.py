"""Which roles may perform which actions.

Screens ask this module whether the signed-in role may see a menu entry or
press a button. The CAPABILITIES table is the single place where those rules
are written down.
"""

import enum

from schooldash.model.users_mod import Role


class PermissionDeniedError(Exception):
    """Raised when a role attempts an action it is not allowed to perform."""


class Action(enum.StrEnum):
    """Things a user can do in the dashboard."""

    VIEW_DASHBOARD = "view_dashboard"
    VIEW_ANNOUNCEMENTS = "view_announcements"
    EDIT_SETTINGS = "edit_settings"
    MANAGE_SCHOOLS = "manage_schools"
    VIEW_CLASSES = "view_classes"
    MANAGE_CLASSES = "manage_classes"
    VIEW_STUDENTS = "view_students"
    MANAGE_STUDENTS = "manage_students"
    VIEW_TEACHERS = "view_teachers"
    MANAGE_TEACHERS = "manage_teachers"
    MANAGE_PARENTS = "manage_parents"
    TAKE_ATTENDANCE = "take_attendance"
    VIEW_SCHEDULES = "view_schedules"
    MANAGE_SCHEDULES = "manage_schedules"
    VIEW_ABSENCE_REQUESTS = "view_absence_requests"
    SUBMIT_ABSENCE_REQUESTS = "submit_absence_requests"
    REVIEW_ABSENCE_REQUESTS = "review_absence_requests"
    POST_ANNOUNCEMENTS = "post_announcements"
    VIEW_REPORTS = "view_reports"
    VIEW_ISSUES = "view_issues"
    REPORT_ISSUES = "report_issues"
    UPDATE_ISSUE_STATUS = "update_issue_status"
    VIEW_CHILDREN = "view_children"


_EVERYONE = frozenset(
    [Action.VIEW_DASHBOARD, Action.VIEW_ANNOUNCEMENTS, Action.EDIT_SETTINGS]
)

CAPABILITIES: dict[Role, frozenset[Action]] = {
    Role.MINISTRY: _EVERYONE
    | {
        Action.MANAGE_SCHOOLS,
        Action.VIEW_TEACHERS,
        Action.POST_ANNOUNCEMENTS,
        Action.VIEW_REPORTS,
    },
    Role.SCHOOL_ADMIN: _EVERYONE
    | {
        Action.VIEW_CLASSES,
        Action.MANAGE_CLASSES,
        Action.VIEW_STUDENTS,
        Action.MANAGE_STUDENTS,
        Action.VIEW_TEACHERS,
        Action.MANAGE_TEACHERS,
        Action.MANAGE_PARENTS,
        Action.TAKE_ATTENDANCE,
        Action.VIEW_SCHEDULES,
        Action.MANAGE_SCHEDULES,
        Action.VIEW_ABSENCE_REQUESTS,
        Action.REVIEW_ABSENCE_REQUESTS,
        Action.POST_ANNOUNCEMENTS,
        Action.VIEW_REPORTS,
        Action.VIEW_ISSUES,
        Action.REPORT_ISSUES,
        Action.UPDATE_ISSUE_STATUS,
    },
    Role.TEACHER: _EVERYONE
    | {
        Action.VIEW_CLASSES,
        Action.VIEW_STUDENTS,
        Action.MANAGE_STUDENTS,
        Action.TAKE_ATTENDANCE,
        Action.VIEW_SCHEDULES,
        Action.POST_ANNOUNCEMENTS,
        Action.VIEW_REPORTS,
        Action.VIEW_ISSUES,
        Action.REPORT_ISSUES,
    },
    Role.PARENT: _EVERYONE
    | {
        Action.VIEW_ABSENCE_REQUESTS,
        Action.SUBMIT_ABSENCE_REQUESTS,
        Action.VIEW_CHILDREN,
        Action.VIEW_ISSUES,
        Action.REPORT_ISSUES,
    },
}


def is_allowed(role: Role, action: Action) -> bool:
    """True if the role may perform the action."""
    return action in CAPABILITIES.get(role, frozenset())


def require(role: Role, action: Action) -> None:
    """Raise PermissionDeniedError unless the role may perform the action."""
    if not is_allowed(role, action):
        raise PermissionDeniedError(
            f"{Role(role).label} users are not allowed to {action.replace('_', ' ')}."
        )


def allowed_actions(role: Role) -> frozenset[Action]:
    """All actions the role may perform."""
    return CAPABILITIES.get(role, frozenset())
