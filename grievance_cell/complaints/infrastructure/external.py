"""
Complaint Email Notifications
==============================

Renders the complaint emails and hands them to the SMTP client:
- warden action email with the one-click resolve link
- student confirmation and resolution emails
- escalation alert for the escalation stakeholder (VP by default)
"""

from html import escape
from typing import Optional

from grievance_cell.complaints.application.services import IComplaintNotifier
from grievance_cell.complaints.domain import Complaint, warden_role_for_hostel
from grievance_cell.config import Settings, settings as default_settings
from grievance_cell.infrastructure.email import EmailMessage, SMTPEmailClient
from grievance_cell.shared.infrastructure.logging import get_logger
from grievance_cell.sla.application.services import IEscalationNotifier

logger = get_logger(__name__)


WARDEN_TEMPLATE = """
<div style="font-family: sans-serif;">
  <h2>New Complaint Received</h2>
  <p><b>ID:</b> {id}</p>
  <p><b>Student:</b> {student_name} ({register_number})</p>
  <p><b>Category:</b> {category}</p>
  <p><b>Hostel:</b> {hostel_type}</p>
  <p><b>Expected resolution:</b> {resolution_time_days} day(s)</p>
  <p><b>Description:</b> {description}</p>
  <p>
    <a href="{resolve_link}" style="background: #10b981; color: #fff; padding: 10px 20px; text-decoration: none;">
      Complaint Rectified
    </a>
  </p>
  <p>You can also reply to this email; your reply is recorded as the resolution.</p>
</div>
"""

STUDENT_CONFIRMATION_TEMPLATE = """
<div style="font-family: sans-serif;">
  <h2>We received your complaint</h2>
  <p>Dear {student_name},</p>
  <p>Your complaint <b>#{id}</b> ({category}) has been registered and forwarded to the responsible staff.</p>
  <p>Expected resolution: {resolution_time_days} day(s).</p>
</div>
"""

STUDENT_RESOLVED_TEMPLATE = """
<div style="font-family: sans-serif;">
  <h2 style="color: #10b981;">Your complaint has been resolved</h2>
  <p>Dear {student_name},</p>
  <p>Complaint <b>#{id}</b> ({category}) was marked as resolved.</p>
  <p><b>Response:</b> {warden_response}</p>
</div>
"""

ESCALATION_TEMPLATE = """
<h2 style="color: #dc2626;">Complaint Escalation Alert</h2>
<p>The following complaint is now <b>ESCALATED</b> to you.</p>
<p><b>Reason:</b> {reason}</p>
<hr>
<p><b>ID:</b> {id}</p>
<p><b>Student:</b> {student_name} ({register_number})</p>
<p><b>Category:</b> {category}</p>
<p><b>Hostel:</b> {hostel_type}</p>
<p><b>Description:</b> {description}</p>
<hr>
<p>Please take necessary action.</p>
"""


def _render(template: str, complaint: Complaint, **extra) -> str:
    values = {
        "id": complaint.id,
        "student_name": complaint.student_name,
        "register_number": complaint.register_number,
        "category": complaint.category,
        "hostel_type": complaint.hostel_type,
        "resolution_time_days": complaint.resolution_time_days,
        "description": complaint.description,
        "warden_response": complaint.warden_response or "",
    }
    values.update(extra)
    return template.format(**{k: escape(str(v)) for k, v in values.items()})


class ComplaintEmailNotifier(IComplaintNotifier, IEscalationNotifier):
    """
    Email notifications for complaints.

    Also serves as the escalation notifier of the SLA sweep.
    """

    def __init__(self, email_client: SMTPEmailClient, config: Optional[Settings] = None):
        self._client = email_client
        self._settings = config or default_settings

    def resolve_link(self, complaint_id: str) -> str:
        return f"{self._settings.api_base_url.rstrip('/')}/api/complaints/auto-resolve/{complaint_id}"

    def warden_recipient(self, complaint: Complaint) -> Optional[str]:
        return self._settings.email_for_role(warden_role_for_hostel(complaint.hostel_type))

    def escalation_recipient(self) -> Optional[str]:
        return self._settings.email_for_role(self._settings.escalation_recipient_role)

    async def notify_warden(self, complaint: Complaint) -> bool:
        return await self._client.send(EmailMessage(
            to=self.warden_recipient(complaint),
            subject=f"Action Required: Complaint #{complaint.id}",
            html=_render(WARDEN_TEMPLATE, complaint, resolve_link=self.resolve_link(complaint.id)),
        ))

    async def confirm_to_student(self, complaint: Complaint) -> bool:
        return await self._client.send(EmailMessage(
            to=complaint.student_email,
            subject=f"Complaint Received: #{complaint.id}",
            html=_render(STUDENT_CONFIRMATION_TEMPLATE, complaint),
        ))

    async def notify_resolution(self, complaint: Complaint) -> bool:
        return await self._client.send(EmailMessage(
            to=complaint.student_email,
            subject=f"Complaint Resolved: #{complaint.id}",
            html=_render(STUDENT_RESOLVED_TEMPLATE, complaint),
        ))

    async def notify_escalation(self, complaint: Complaint, reason: str) -> bool:
        recipient = self.escalation_recipient()
        if not recipient:
            logger.warning(
                "No escalation recipient configured",
                extra={"complaint_id": complaint.id, "role": self._settings.escalation_recipient_role}
            )
            return False

        return await self._client.send(EmailMessage(
            to=recipient,
            subject=f"[ESCALATED] Complaint #{complaint.id} Overdue",
            html=_render(ESCALATION_TEMPLATE, complaint, reason=reason),
        ))
