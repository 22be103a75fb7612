"""
Complaint Application Layer
============================

Contains:
- Services: complaint lifecycle orchestration
- DTOs: request/response models
- Interfaces: repository and notifier abstractions
"""

from grievance_cell.complaints.application.dto import (
    ComplaintCreateDTO,
    ResolveRequest,
    ManualEscalationRequest,
    InboundEmailWebhook,
    ComplaintResponse,
    SLAInfo,
    DashboardRow,
    DashboardResponse,
    EmailStatus,
    ComplaintCreatedResponse,
    ComplaintActionResponse,
    EscalationRecordResponse,
    WebhookResponse,
)
from grievance_cell.complaints.application.services import (
    ComplaintService,
    CreatedComplaint,
    IComplaintRepository,
    IComplaintNotifier,
    ONE_CLICK_RESOLUTION_NOTE,
    DASHBOARD_RESOLUTION_NOTE,
)

__all__ = [
    # DTOs
    "ComplaintCreateDTO",
    "ResolveRequest",
    "ManualEscalationRequest",
    "InboundEmailWebhook",
    "ComplaintResponse",
    "SLAInfo",
    "DashboardRow",
    "DashboardResponse",
    "EmailStatus",
    "ComplaintCreatedResponse",
    "ComplaintActionResponse",
    "EscalationRecordResponse",
    "WebhookResponse",
    # Services
    "ComplaintService",
    "CreatedComplaint",
    "ONE_CLICK_RESOLUTION_NOTE",
    "DASHBOARD_RESOLUTION_NOTE",
    # Interfaces
    "IComplaintRepository",
    "IComplaintNotifier",
]
