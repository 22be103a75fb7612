"""
Unit Tests for ComplaintService with mocked repository and notifier
"""
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from grievance_cell.complaints.application import (
    ComplaintCreateDTO,
    ComplaintService,
    DASHBOARD_RESOLUTION_NOTE,
    IComplaintNotifier,
    IComplaintRepository,
    ONE_CLICK_RESOLUTION_NOTE,
)
from grievance_cell.complaints.domain import Complaint, ComplaintScope
from grievance_cell.core import (
    ComplaintStateException,
    RepositoryException,
    ResourceNotFoundException,
    ValidationException,
)
from grievance_cell.sla.domain import SLAConfig
from grievance_cell.sla.infrastructure import SLAConfigManager


def make_complaint(**fields) -> Complaint:
    data = dict(
        id="abc123",
        student_id="s-1",
        student_name="Ravi",
        student_email="ravi@example.edu",
        register_number="21ME010",
        category="Hostel",
        description="Fan not working",
        hostel_type="Boys Hostel",
        resolution_time_days=2,
        created_at=datetime.now(timezone.utc),
    )
    data.update(fields)
    return Complaint(**data)


@pytest.fixture
def repository():
    repo = AsyncMock(spec=IComplaintRepository)
    repo.save_resolution.return_value = True
    repo.save_escalation.return_value = True
    return repo


@pytest.fixture
def notifier():
    mock = AsyncMock(spec=IComplaintNotifier)
    mock.notify_warden.return_value = True
    mock.confirm_to_student.return_value = True
    mock.notify_resolution.return_value = True
    mock.notify_escalation.return_value = True
    return mock


@pytest.fixture
def service(repository, notifier):
    return ComplaintService(repository, notifier, SLAConfigManager(SLAConfig()))


def create_dto(**overrides) -> ComplaintCreateDTO:
    data = {
        "studentId": "s-1",
        "studentName": "Ravi",
        "studentEmail": "ravi@example.edu",
        "registerNumber": "21ME010",
        "category": "Medical emergency",
        "description": "Fever, need transport",
        "hostelType": "Boys Hostel",
        "resolutionTime": 1,
    }
    data.update(overrides)
    return ComplaintCreateDTO(**data)


class TestCreate:
    """Submission"""

    async def test_stores_and_notifies(self, service, repository, notifier):
        async def store(complaint):
            complaint.id = "new1"
            return complaint

        repository.create.side_effect = store

        created = await service.create(create_dto())

        assert created.complaint.id == "new1"
        assert created.priority == "High"
        assert created.warden_notified and created.student_notified
        notifier.notify_warden.assert_awaited_once()
        notifier.confirm_to_student.assert_awaited_once()

    async def test_commit_failure_sends_nothing(self, service, repository, notifier):
        repository.create.side_effect = lambda c: c
        repository.commit.side_effect = RepositoryException("database unavailable")

        with pytest.raises(RepositoryException):
            await service.create(create_dto())

        notifier.notify_warden.assert_not_awaited()
        notifier.confirm_to_student.assert_not_awaited()

    async def test_classified_priority_is_not_persisted(self, service, repository):
        repository.create.side_effect = lambda c: c

        await service.create(create_dto())

        stored = repository.create.await_args.args[0]
        assert stored.priority is None

    async def test_explicit_priority_persisted(self, service, repository):
        repository.create.side_effect = lambda c: c

        created = await service.create(create_dto(priority="Low"))

        assert repository.create.await_args.args[0].priority == "Low"
        assert created.priority == "Low"

    async def test_email_failures_reported(self, service, repository, notifier):
        repository.create.side_effect = lambda c: c
        notifier.notify_warden.return_value = False

        created = await service.create(create_dto())

        assert created.warden_notified is False
        assert created.student_notified is True


class TestQueries:
    """Reads"""

    async def test_get_unknown(self, service, repository):
        repository.get_by_id.return_value = None

        with pytest.raises(ResourceNotFoundException):
            await service.get("missing")

    @pytest.mark.parametrize("hostel,keyword", [
        ("boys", "boys"),
        ("Girls Hostel", "girls"),
        ("Annex", "annex"),
    ])
    async def test_hostel_listing(self, service, repository, hostel, keyword):
        repository.list_in_scope.return_value = []

        await service.list_for_hostel(hostel)

        repository.list_in_scope.assert_awaited_once_with(ComplaintScope(hostel_keyword=keyword))

    async def test_escalated_listing(self, service, repository):
        repository.list_in_scope.return_value = []

        await service.list_escalated()

        repository.list_in_scope.assert_awaited_once_with(ComplaintScope(escalated_only=True))

    async def test_dashboard_rows_carry_snapshots(self, service, repository):
        repository.list_in_scope.return_value = [make_complaint(category="Medical")]

        rows = await service.dashboard("warden_boys")

        complaint, snapshot = rows[0]
        assert snapshot.complaint_id == complaint.id
        assert snapshot.priority == "High"

    async def test_dashboard_rejects_unknown_role(self, service):
        with pytest.raises(ValidationException):
            await service.dashboard("principal")

    async def test_student_dashboard_requires_id(self, service):
        with pytest.raises(ValidationException):
            await service.dashboard("student")


class TestResolve:
    """Resolution paths"""

    async def test_dashboard_resolution(self, service, repository, notifier):
        repository.get_by_id.return_value = make_complaint()

        complaint = await service.resolve("abc123")

        assert complaint.resolved is True

    async def test_commits_before_notifying(self, service, repository, notifier):
        calls = []
        repository.get_by_id.return_value = make_complaint()
        repository.commit.side_effect = lambda: calls.append("commit")
        notifier.notify_resolution.side_effect = lambda c: calls.append("email") or True

        await service.resolve("abc123")

        assert calls == ["commit", "email"]

    async def test_commit_failure_sends_nothing(self, service, repository, notifier):
        repository.get_by_id.return_value = make_complaint()
        repository.commit.side_effect = RepositoryException("database unavailable")

        with pytest.raises(RepositoryException):
            await service.resolve("abc123")

        notifier.notify_resolution.assert_not_awaited()
        assert complaint.warden_response == DASHBOARD_RESOLUTION_NOTE
        repository.save_resolution.assert_awaited_once()
        notifier.notify_resolution.assert_awaited_once()

    async def test_one_click_note(self, service, repository):
        repository.get_by_id.return_value = make_complaint()

        complaint = await service.auto_resolve("abc123")

        assert complaint.warden_response == ONE_CLICK_RESOLUTION_NOTE

    async def test_already_resolved(self, service, repository, notifier):
        repository.get_by_id.return_value = make_complaint(resolved=True)

        with pytest.raises(ComplaintStateException):
            await service.resolve("abc123")

        repository.save_resolution.assert_not_awaited()
        notifier.notify_resolution.assert_not_awaited()

    async def test_lost_race_reports_conflict(self, service, repository):
        repository.get_by_id.return_value = make_complaint()
        repository.save_resolution.return_value = False

        with pytest.raises(ComplaintStateException):
            await service.resolve("abc123")

    async def test_notification_failure_does_not_fail(self, service, repository, notifier):
        repository.get_by_id.return_value = make_complaint()
        notifier.notify_resolution.return_value = False

        complaint = await service.resolve("abc123")

        assert complaint.resolved is True

    async def test_email_reply(self, service, repository):
        repository.get_by_id.return_value = make_complaint()

        complaint_id = await service.resolve_from_email(
            "Re: Action Required: Complaint #abc123", "Replaced the fan", "warden@college.edu"
        )

        assert complaint_id == "abc123"
        saved = repository.save_resolution.await_args.args[0]
        assert saved.warden_response == "Replaced the fan"
        assert saved.warden_email == "warden@college.edu"

    async def test_empty_email_reply(self, service, repository):
        repository.get_by_id.return_value = make_complaint()

        await service.resolve_from_email("Re: Complaint #abc123", "", None)

        assert repository.save_resolution.await_args.args[0].warden_response == "No content"

    async def test_email_without_id(self, service, repository):
        result = await service.resolve_from_email("Hello", "text", "someone@college.edu")

        assert result is None
        repository.get_by_id.assert_not_awaited()


class TestEscalate:
    """Manual escalation"""

    async def test_escalate(self, service, repository, notifier):
        repository.get_by_id.return_value = make_complaint()

        complaint = await service.escalate("abc123", "Safety risk", "hod@college.edu")

        assert complaint.escalated is True
        record = repository.save_escalation.await_args.args[1]
        assert record.kind == "manual"
        notifier.notify_escalation.assert_awaited_once_with(complaint, "Safety risk")

    async def test_commit_failure_sends_nothing(self, service, repository, notifier):
        repository.get_by_id.return_value = make_complaint()
        repository.commit.side_effect = RepositoryException("database unavailable")

        with pytest.raises(RepositoryException):
            await service.escalate("abc123", "Safety risk", "hod@college.edu")

        notifier.notify_escalation.assert_not_awaited()

    async def test_escalate_twice(self, service, repository):
        repository.get_by_id.return_value = make_complaint(escalated=True)

        with pytest.raises(ComplaintStateException):
            await service.escalate("abc123", "again", "hod@college.edu")

    async def test_history_for_unknown(self, service, repository):
        repository.get_by_id.return_value = None

        with pytest.raises(ResourceNotFoundException):
            await service.escalation_history("missing")
