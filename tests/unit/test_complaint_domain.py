"""
Unit Tests for the complaint domain and request schemas
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from grievance_cell.complaints.application import ComplaintCreateDTO, InboundEmailWebhook
from grievance_cell.complaints.domain import (
    ACADEMIC_KEYWORDS,
    Complaint,
    ComplaintScope,
    ROLE_SCOPES,
    extract_complaint_id,
    scope_for_role,
    warden_role_for_hostel,
)
from grievance_cell.config import EscalationKind, Role, VALID_ROLES
from grievance_cell.core import ComplaintStateException


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
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    data.update(fields)
    return Complaint(**data)


# =============================================================================
# ENTITY TRANSITIONS
# =============================================================================
class TestComplaintTransitions:
    """One-way flags"""

    def test_resolve_sets_fields(self):
        complaint = make_complaint()
        when = datetime(2024, 1, 2, tzinfo=timezone.utc)

        complaint.mark_resolved("Fan replaced", "warden@college.edu", when)

        assert complaint.resolved is True
        assert complaint.resolved_at == when
        assert complaint.warden_response == "Fan replaced"
        assert complaint.warden_email == "warden@college.edu"

    def test_resolve_twice_raises(self):
        complaint = make_complaint()
        complaint.mark_resolved("done")

        with pytest.raises(ComplaintStateException) as exc:
            complaint.mark_resolved("again")

        assert exc.value.transition == "resolved"
        assert complaint.warden_response == "done"

    def test_escalate_returns_log_entry(self):
        complaint = make_complaint()

        record = complaint.mark_escalated("Overdue")

        assert complaint.escalated is True
        assert record.complaint_id == "abc123"
        assert record.reason == "Overdue"
        assert record.kind == EscalationKind.AUTO
        assert record.escalated_at == complaint.escalated_at

    def test_manual_escalation_kind(self):
        record = make_complaint().mark_escalated("Student safety", escalated_by="hod@college.edu")

        assert record.kind == EscalationKind.MANUAL
        assert record.escalated_by == "hod@college.edu"

    def test_escalate_twice_raises(self):
        complaint = make_complaint()
        complaint.mark_escalated("Overdue")

        with pytest.raises(ComplaintStateException):
            complaint.mark_escalated("Overdue again")

    def test_flags_are_independent(self):
        complaint = make_complaint()

        complaint.mark_escalated("Overdue")
        complaint.mark_resolved("Fixed after escalation")

        assert complaint.escalated is True
        assert complaint.resolved is True


# =============================================================================
# ROLE SCOPES
# =============================================================================
class TestRoleScopes:
    """Role -> visible complaints"""

    def test_every_role_has_a_scope(self):
        assert set(ROLE_SCOPES) == set(VALID_ROLES)

    def test_unknown_role(self):
        with pytest.raises(KeyError):
            scope_for_role("principal")

    def test_student_sees_own(self):
        scope = scope_for_role(Role.STUDENT, "s-1")

        assert scope.matches(make_complaint())
        assert not scope.matches(make_complaint(student_id="s-2"))

    def test_student_without_id_sees_nothing(self):
        assert not scope_for_role(Role.STUDENT).matches(make_complaint())

    def test_wardens_by_hostel(self):
        boys = make_complaint(hostel_type="Boys Hostel")
        girls = make_complaint(hostel_type="girls hostel block B")

        assert scope_for_role(Role.WARDEN_BOYS).matches(boys)
        assert not scope_for_role(Role.WARDEN_BOYS).matches(girls)
        assert scope_for_role(Role.WARDEN_GIRLS).matches(girls)

    @pytest.mark.parametrize("role", [Role.HOD, Role.FACULTY])
    def test_academic_roles(self, role):
        scope = scope_for_role(role)

        assert scope.category_keywords == ACADEMIC_KEYWORDS
        assert scope.matches(make_complaint(category="Lab equipment"))
        assert not scope.matches(make_complaint(category="Mess food"))

    def test_vp_sees_escalated_only(self):
        scope = scope_for_role(Role.VP)

        assert not scope.matches(make_complaint())
        assert scope.matches(make_complaint(escalated=True))

    def test_admin_sees_all(self):
        assert scope_for_role(Role.ADMIN) == ComplaintScope()
        assert scope_for_role(Role.ADMIN).matches(make_complaint(hostel_type="Day scholar"))

    @pytest.mark.parametrize("hostel,role", [
        ("Boys Hostel", Role.WARDEN_BOYS),
        ("GIRLS", Role.WARDEN_GIRLS),
        ("Day scholar", Role.ADMIN),
        (None, Role.ADMIN),
    ])
    def test_warden_routing(self, hostel, role):
        assert warden_role_for_hostel(hostel) == role


class TestComplaintIdExtraction:
    """Reply subjects"""

    @pytest.mark.parametrize("subject,expected", [
        ("Re: Action Required: Complaint #3f2b9c7e", "3f2b9c7e"),
        ("Fwd: Re: Complaint #ABC123 follow-up", "ABC123"),
        ("Complaint Received", None),
        ("", None),
        (None, None),
    ])
    def test_extract(self, subject, expected):
        assert extract_complaint_id(subject) == expected


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================
class TestComplaintCreateDTO:
    """Submission validation"""

    @pytest.fixture
    def payload(self):
        return {
            "studentId": "s-1",
            "studentName": "Meena",
            "studentEmail": "meena@example.edu",
            "registerNumber": "21EC011",
            "category": "Hostel",
            "description": "Broken window",
            "hostelType": "Girls Hostel",
            "resolutionTime": 3,
        }

    def test_camel_case_payload(self, payload):
        dto = ComplaintCreateDTO(**payload)

        assert dto.student_id == "s-1"
        assert dto.hostel_type == "Girls Hostel"
        assert dto.resolution_time_days == 3
        assert dto.priority is None

    def test_snake_case_payload(self):
        dto = ComplaintCreateDTO(
            student_id="s-1",
            student_name="Meena",
            student_email="meena@example.edu",
            register_number="21EC011",
            category="Academic",
            description="Marks not updated",
            hostel_type="Day scholar",
            resolution_time_days=5,
            priority="High",
        )

        assert dto.priority == "High"

    def test_whitespace_stripped(self, payload):
        payload["studentName"] = "  Meena  "

        assert ComplaintCreateDTO(**payload).student_name == "Meena"

    def test_missing_field(self, payload):
        del payload["registerNumber"]

        with pytest.raises(ValidationError):
            ComplaintCreateDTO(**payload)

    @pytest.mark.parametrize("days", [0, 31])
    def test_resolution_time_range(self, payload, days):
        payload["resolutionTime"] = days

        with pytest.raises(ValidationError):
            ComplaintCreateDTO(**payload)

    @pytest.mark.parametrize("email", ["meena", "@example.edu", "meena@"])
    def test_invalid_email(self, payload, email):
        payload["studentEmail"] = email

        with pytest.raises(ValidationError):
            ComplaintCreateDTO(**payload)

    def test_hostel_category_needs_block(self, payload):
        payload["hostelType"] = "Main Block"

        with pytest.raises(ValidationError) as exc:
            ComplaintCreateDTO(**payload)

        assert 'hostelType must be "boys" or "girls"' in str(exc.value)

    def test_other_categories_accept_any_hostel(self, payload):
        payload["category"] = "Academic"
        payload["hostelType"] = "Main Block"

        assert ComplaintCreateDTO(**payload).hostel_type == "Main Block"

    def test_unknown_priority_rejected(self, payload):
        payload["priority"] = "Urgent"

        with pytest.raises(ValidationError):
            ComplaintCreateDTO(**payload)


class TestInboundEmailWebhook:
    """Provider payload"""

    def test_from_alias(self):
        webhook = InboundEmailWebhook(**{"subject": "Re: Complaint #abc", "text": "done", "from": "w@college.edu"})

        assert webhook.sender == "w@college.edu"

    def test_defaults(self):
        webhook = InboundEmailWebhook()

        assert webhook.subject == ""
        assert webhook.text is None
