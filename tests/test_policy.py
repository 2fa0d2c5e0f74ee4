"""Role capabilities."""

import pytest

from schooldash.model import policy
from schooldash.model.policy import Action
from schooldash.model.users_mod import Role


@pytest.mark.parametrize("role", list(Role))
def test_everyone_can_view_dashboard(role: Role) -> None:
    """Every role sees the dashboard and announcements and edits settings."""
    for action in [
        Action.VIEW_DASHBOARD,
        Action.VIEW_ANNOUNCEMENTS,
        Action.EDIT_SETTINGS,
    ]:
        assert policy.is_allowed(role, action)


@pytest.mark.parametrize(
    "action, roles",
    [
        (Action.MANAGE_SCHOOLS, {Role.MINISTRY}),
        (Action.MANAGE_CLASSES, {Role.SCHOOL_ADMIN}),
        (Action.MANAGE_STUDENTS, {Role.SCHOOL_ADMIN, Role.TEACHER}),
        (Action.VIEW_TEACHERS, {Role.MINISTRY, Role.SCHOOL_ADMIN}),
        (Action.TAKE_ATTENDANCE, {Role.SCHOOL_ADMIN, Role.TEACHER}),
        (Action.REVIEW_ABSENCE_REQUESTS, {Role.SCHOOL_ADMIN}),
        (Action.SUBMIT_ABSENCE_REQUESTS, {Role.PARENT}),
        (Action.VIEW_CHILDREN, {Role.PARENT}),
        (
            Action.POST_ANNOUNCEMENTS,
            {Role.MINISTRY, Role.SCHOOL_ADMIN, Role.TEACHER},
        ),
        (Action.VIEW_REPORTS, {Role.MINISTRY, Role.SCHOOL_ADMIN, Role.TEACHER}),
        (Action.REPORT_ISSUES, {Role.SCHOOL_ADMIN, Role.TEACHER, Role.PARENT}),
        (Action.UPDATE_ISSUE_STATUS, {Role.SCHOOL_ADMIN}),
    ],
)
def test_capabilities(action: Action, roles: set[Role]) -> None:
    """Only the listed roles may perform the action."""
    allowed = {role for role in Role if policy.is_allowed(role, action)}
    assert allowed == roles


def test_require_raises_for_missing_capability() -> None:
    """Parents cannot take attendance."""
    # Act, Assert
    with pytest.raises(policy.PermissionDeniedError, match="take attendance"):
        policy.require(Role.PARENT, Action.TAKE_ATTENDANCE)
    policy.require(Role.TEACHER, Action.TAKE_ATTENDANCE)


def test_allowed_actions() -> None:
    """The ministry manages schools but does not take attendance."""
    actions = policy.allowed_actions(Role.MINISTRY)
    assert Action.MANAGE_SCHOOLS in actions
    assert Action.TAKE_ATTENDANCE not in actions
