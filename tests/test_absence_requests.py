"""Submit and review absence requests."""

import datetime

import pytest
import rich  # noqa: F401

from schooldash.model import database, requests_mod
from schooldash.model.requests_mod import AbsenceRequest, RequestStatus


REVIEW_TIME = datetime.datetime(2025, 11, 21, 8, 30)


def test_submit_creates_pending_request(seeded_dbase: database.DBase) -> None:
    """New requests start out pending and unreviewed."""
    # Act
    request = AbsenceRequest.submit(
        seeded_dbase,
        student_id="student-2",
        parent_id="parent-1",
        start_date=datetime.date(2025, 12, 1),
        end_date=datetime.date(2025, 12, 3),
        reason="  Family wedding ",
    )
    # Assert
    stored = AbsenceRequest.get_by_id(seeded_dbase, request.id)
    assert stored is not None
    assert stored.status == RequestStatus.PENDING
    assert stored.reason == "Family wedding"
    assert stored.end_date == datetime.date(2025, 12, 3)
    assert stored.reviewed_by is None
    assert stored.reviewed_at is None


def test_end_date_before_start_date(seeded_dbase: database.DBase) -> None:
    """Requests cannot end before they start."""
    # Act, Assert
    with pytest.raises(ValueError):
        AbsenceRequest.submit(
            seeded_dbase,
            student_id="student-2",
            parent_id="parent-1",
            start_date=datetime.date(2025, 12, 3),
            end_date=datetime.date(2025, 12, 1),
            reason="Trip",
        )
    assert seeded_dbase.count("absence_requests") == 1


def test_approve_records_reviewer(seeded_dbase: database.DBase) -> None:
    """Approval stores the decision, reviewer, and review time."""
    # Arrange
    request = AbsenceRequest.get_by_id(seeded_dbase, "absence-1")
    assert request is not None
    # Act
    request.approve(seeded_dbase, "school-admin-1", now=REVIEW_TIME)
    # Assert
    stored = AbsenceRequest.get_by_id(seeded_dbase, "absence-1")
    assert stored is not None
    assert stored.status == RequestStatus.APPROVED
    assert stored.reviewed_by == "school-admin-1"
    assert stored.reviewed_at == REVIEW_TIME
    assert not stored.is_pending


def test_second_review_is_rejected(seeded_dbase: database.DBase) -> None:
    """Requests can be reviewed only once."""
    # Arrange
    request = AbsenceRequest.get_by_id(seeded_dbase, "absence-1")
    assert request is not None
    request.reject(seeded_dbase, "school-admin-1", now=REVIEW_TIME)
    # Act, Assert
    with pytest.raises(requests_mod.RequestReviewError):
        request.approve(seeded_dbase, "school-admin-1")
    stored = AbsenceRequest.get_by_id(seeded_dbase, "absence-1")
    assert stored is not None
    assert stored.status == RequestStatus.REJECTED


def test_stale_copy_cannot_be_reviewed(seeded_dbase: database.DBase) -> None:
    """A copy loaded before someone else's review fails to save a decision."""
    # Arrange
    first = AbsenceRequest.get_by_id(seeded_dbase, "absence-1")
    stale = AbsenceRequest.get_by_id(seeded_dbase, "absence-1")
    assert first is not None and stale is not None
    first.approve(seeded_dbase, "school-admin-1", now=REVIEW_TIME)
    # Act, Assert
    with pytest.raises(requests_mod.RequestReviewError, match="no longer pending"):
        stale.reject(seeded_dbase, "school-admin-1")
    assert stale.is_pending
    stored = AbsenceRequest.get_by_id(seeded_dbase, "absence-1")
    assert stored is not None
    assert stored.status == RequestStatus.APPROVED


def test_requests_for_parent_and_school(seeded_dbase: database.DBase) -> None:
    """Parents and schools see the seeded request."""
    # Act
    for_parent = AbsenceRequest.get_for_parent(seeded_dbase, "parent-1")
    for_school = AbsenceRequest.get_for_school(seeded_dbase, "school-1")
    for_other_school = AbsenceRequest.get_for_school(seeded_dbase, "school-9")
    # Assert
    assert [request.id for request in for_parent] == ["absence-1"]
    assert [request.id for request in for_school] == ["absence-1"]
    assert for_other_school == []


def test_filter_by_status(seeded_dbase: database.DBase) -> None:
    """Filter a list of requests for the status tabs."""
    # Arrange
    AbsenceRequest.submit(
        seeded_dbase,
        student_id="student-2",
        parent_id="parent-1",
        start_date=datetime.date(2025, 12, 1),
        end_date=datetime.date(2025, 12, 1),
        reason="Dentist",
    ).approve(seeded_dbase, "school-admin-1")
    requests = AbsenceRequest.get_all(seeded_dbase)
    # Act
    pending = requests_mod.filter_by_status(requests, RequestStatus.PENDING)
    approved = requests_mod.filter_by_status(requests, RequestStatus.APPROVED)
    rejected = requests_mod.filter_by_status(requests, RequestStatus.REJECTED)
    everything = requests_mod.filter_by_status(requests, None)
    # Assert
    assert [request.id for request in pending] == ["absence-1"]
    assert [request.reason for request in approved] == ["Dentist"]
    assert rejected == []
    assert len(everything) == 2
