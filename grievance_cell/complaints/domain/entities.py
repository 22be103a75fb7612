"""
Complaint Domain Entities
==========================

Pure Python domain entities for the complaint lifecycle.

`resolved` and `escalated` are one-way flags, each set at most once and
independent of one another.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from grievance_cell.config import EscalationKind
from grievance_cell.core import ComplaintStateException


@dataclass
class Complaint:
    """A grievance submitted by a student."""

    id: str
    student_id: str
    student_name: str
    student_email: str
    register_number: str
    category: str
    description: str
    hostel_type: str
    resolution_time_days: int
    created_at: datetime

    priority: Optional[str] = None

    resolved: bool = False
    resolved_at: Optional[datetime] = None
    warden_response: Optional[str] = None
    warden_email: Optional[str] = None

    escalated: bool = False
    escalated_at: Optional[datetime] = None
    escalation_reason: Optional[str] = None
    escalated_by: Optional[str] = None

    def mark_resolved(
        self,
        response: str,
        responder_email: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ) -> None:
        """Resolve the complaint; a second call raises."""
        if self.resolved:
            raise ComplaintStateException(self.id, "resolved")
        self.resolved = True
        self.resolved_at = timestamp or datetime.now(timezone.utc)
        self.warden_response = response
        if responder_email:
            self.warden_email = responder_email

    def mark_escalated(
        self,
        reason: str,
        escalated_by: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ) -> "EscalationRecord":
        """Escalate the complaint and return the log entry to persist."""
        if self.escalated:
            raise ComplaintStateException(self.id, "escalated")
        self.escalated = True
        self.escalated_at = timestamp or datetime.now(timezone.utc)
        self.escalation_reason = reason
        self.escalated_by = escalated_by

        return EscalationRecord(
            id=None,
            complaint_id=self.id,
            escalated_at=self.escalated_at,
            reason=reason,
            escalated_by=escalated_by,
            kind=EscalationKind.MANUAL if escalated_by else EscalationKind.AUTO,
        )


@dataclass
class EscalationRecord:
    """Audit entry written whenever a complaint is escalated."""

    id: Optional[str]
    complaint_id: str
    escalated_at: datetime
    reason: str
    kind: str = EscalationKind.AUTO
    escalated_by: Optional[str] = None
