"""
Complaint Application Services
===============================

Orchestrates the complaint lifecycle between the domain entities, the
repository and the email notifier.

Email delivery is best-effort everywhere in this module: a failed send is
reported back to the caller but never fails the request. Emails go out only
after the change is committed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from grievance_cell.complaints.domain import (
    Complaint,
    ComplaintScope,
    EscalationRecord,
    ROLE_SCOPES,
    extract_complaint_id,
    scope_for_role,
)
from grievance_cell.config import Role, VALID_ROLES
from grievance_cell.core import (
    ComplaintStateException,
    ResourceNotFoundException,
    ValidationException,
)
from grievance_cell.shared.infrastructure.logging import get_logger
from grievance_cell.sla.application.services import ISLAConfigProvider, SLAService
from grievance_cell.sla.domain import SLACalculator, SLASnapshot

logger = get_logger(__name__)

ONE_CLICK_RESOLUTION_NOTE = "Resolved via one-click button"
DASHBOARD_RESOLUTION_NOTE = "Resolved via Dashboard"
EMPTY_REPLY_NOTE = "No content"


# ========== Repository Interfaces ==========

class IComplaintRepository(ABC):
    """Interface for complaint data access."""

    @abstractmethod
    async def create(self, complaint: Complaint) -> Complaint:
        """Persist a new complaint and return it with its id."""

    @abstractmethod
    async def get_by_id(self, complaint_id: str) -> Optional[Complaint]:
        """Get complaint by id."""

    @abstractmethod
    async def list_in_scope(self, scope: ComplaintScope) -> List[Complaint]:
        """Complaints visible under a scope, newest first."""

    @abstractmethod
    async def save_resolution(self, complaint: Complaint) -> bool:
        """
        Persist the resolution fields.

        Returns False when the stored complaint was already resolved.
        """

    @abstractmethod
    async def save_escalation(self, complaint: Complaint, record: EscalationRecord) -> bool:
        """
        Persist the escalation fields and the log entry together.

        Returns False when the stored complaint was already escalated.
        """

    @abstractmethod
    async def list_escalations(self, complaint_id: str) -> List[EscalationRecord]:
        """Escalation history, oldest first."""

    @abstractmethod
    async def commit(self) -> None:
        """Make pending changes durable before anything is announced."""


class IComplaintNotifier(ABC):
    """Outbound complaint emails. Every method returns True when delivered."""

    @abstractmethod
    async def notify_warden(self, complaint: Complaint) -> bool:
        """Action email with the one-click resolve link."""

    @abstractmethod
    async def confirm_to_student(self, complaint: Complaint) -> bool:
        """Receipt sent to the submitter."""

    @abstractmethod
    async def notify_resolution(self, complaint: Complaint) -> bool:
        """Tell the submitter the complaint was resolved."""

    @abstractmethod
    async def notify_escalation(self, complaint: Complaint, reason: str) -> bool:
        """Alert the escalation stakeholder."""


@dataclass
class CreatedComplaint:
    """A stored complaint and the outcome of its two notification emails."""
    complaint: Complaint
    priority: str
    warden_notified: bool
    student_notified: bool


# ========== Application Services ==========

class ComplaintService:
    """Complaint lifecycle use cases."""

    def __init__(
        self,
        repository: IComplaintRepository,
        notifier: IComplaintNotifier,
        config_provider: ISLAConfigProvider
    ):
        self._repository = repository
        self._notifier = notifier
        self._config_provider = config_provider
        self._sla = SLAService(config_provider)

    async def create(self, dto) -> CreatedComplaint:
        """
        Store a validated submission, then notify warden and student.

        Args:
            dto: ComplaintCreateDTO

        Returns:
            CreatedComplaint with per-email delivery flags
        """
        complaint = Complaint(
            id="",
            student_id=dto.student_id,
            student_name=dto.student_name,
            student_email=dto.student_email,
            register_number=dto.register_number,
            category=dto.category,
            description=dto.description,
            hostel_type=dto.hostel_type,
            resolution_time_days=dto.resolution_time_days,
            priority=dto.priority,
            created_at=datetime.now(timezone.utc),
        )
        complaint = await self._repository.create(complaint)
        priority = SLACalculator.resolve_priority(complaint, self._config_provider.get_config())

        logger.info(
            "Complaint created",
            extra={
                "complaint_id": complaint.id,
                "category": complaint.category,
                "hostel_type": complaint.hostel_type,
                "priority": priority
            }
        )

        await self._repository.commit()

        warden_notified = await self._notifier.notify_warden(complaint)
        student_notified = await self._notifier.confirm_to_student(complaint)

        return CreatedComplaint(
            complaint=complaint,
            priority=priority,
            warden_notified=warden_notified,
            student_notified=student_notified,
        )

    async def get(self, complaint_id: str) -> Complaint:
        complaint = await self._repository.get_by_id(complaint_id)
        if complaint is None:
            raise ResourceNotFoundException("Complaint", complaint_id)
        return complaint

    async def list_for_hostel(self, hostel_type: str) -> List[Complaint]:
        hostel = hostel_type.lower()
        keyword = "boys" if "boys" in hostel else "girls" if "girls" in hostel else hostel
        return await self._repository.list_in_scope(ComplaintScope(hostel_keyword=keyword))

    async def list_for_student(self, student_id: str) -> List[Complaint]:
        return await self._repository.list_in_scope(ComplaintScope(student_id=student_id))

    async def list_all(self) -> List[Complaint]:
        return await self._repository.list_in_scope(ROLE_SCOPES[Role.ADMIN](None))

    async def list_escalated(self) -> List[Complaint]:
        return await self._repository.list_in_scope(ROLE_SCOPES[Role.VP](None))

    async def dashboard(
        self,
        role: str,
        student_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> List[Tuple[Complaint, SLASnapshot]]:
        """
        Complaints visible to a role, each with its SLA snapshot.

        Raises:
            ValidationException: unknown role, or student role without student_id
        """
        if role not in VALID_ROLES:
            raise ValidationException(f"Invalid role: {role}", {"allowed": VALID_ROLES})
        if role == Role.STUDENT and not student_id:
            raise ValidationException("student_id is required for the student dashboard")

        complaints = await self._repository.list_in_scope(scope_for_role(role, student_id))
        now = now or datetime.now(timezone.utc)
        return [(c, self._sla.snapshot(c, now)) for c in complaints]

    async def resolve(
        self,
        complaint_id: str,
        note: Optional[str] = None,
        responder_email: Optional[str] = None
    ) -> Complaint:
        """
        Resolve a complaint and notify the student.

        Raises:
            ResourceNotFoundException: unknown id
            ComplaintStateException: already resolved
        """
        complaint = await self.get(complaint_id)
        complaint.mark_resolved(note or DASHBOARD_RESOLUTION_NOTE, responder_email)

        if not await self._repository.save_resolution(complaint):
            raise ComplaintStateException(complaint_id, "resolved")
        await self._repository.commit()

        logger.info(
            "Complaint resolved",
            extra={"complaint_id": complaint_id, "resolved_by": responder_email}
        )

        if not await self._notifier.notify_resolution(complaint):
            logger.warning("Resolution email not delivered", extra={"complaint_id": complaint_id})
        return complaint

    async def auto_resolve(self, complaint_id: str) -> Complaint:
        """Resolution triggered from the link in the warden's email."""
        return await self.resolve(complaint_id, ONE_CLICK_RESOLUTION_NOTE)

    async def resolve_from_email(
        self,
        subject: str,
        text: Optional[str],
        sender: Optional[str]
    ) -> Optional[str]:
        """
        Resolve the complaint referenced by a warden's email reply.

        Returns:
            The complaint id, or None when the subject carries no id
        """
        complaint_id = extract_complaint_id(subject)
        if complaint_id is None:
            logger.warning("Inbound email without complaint id", extra={"subject": subject})
            return None

        await self.resolve(complaint_id, text or EMPTY_REPLY_NOTE, sender)
        return complaint_id

    async def escalate(self, complaint_id: str, reason: str, escalated_by: str) -> Complaint:
        """
        Manually escalate a complaint and alert the escalation stakeholder.

        Raises:
            ResourceNotFoundException: unknown id
            ComplaintStateException: already escalated
        """
        complaint = await self.get(complaint_id)
        record = complaint.mark_escalated(reason, escalated_by)

        if not await self._repository.save_escalation(complaint, record):
            raise ComplaintStateException(complaint_id, "escalated")
        await self._repository.commit()

        logger.warning(
            "Complaint escalated manually",
            extra={"complaint_id": complaint_id, "escalated_by": escalated_by, "reason": reason}
        )

        if not await self._notifier.notify_escalation(complaint, reason):
            logger.warning("Escalation email not delivered", extra={"complaint_id": complaint_id})
        return complaint

    async def escalation_history(self, complaint_id: str) -> List[EscalationRecord]:
        await self.get(complaint_id)
        return await self._repository.list_escalations(complaint_id)
