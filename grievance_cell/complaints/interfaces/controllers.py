"""
Complaint Controllers (API Routes)
===================================

FastAPI routes for the complaint lifecycle.

Controllers delegate to ComplaintService; domain errors are turned into
responses by the application exception handler (404 / 409 / 400).
"""

from html import escape
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from grievance_cell.complaints.application import (
    ComplaintActionResponse,
    ComplaintCreateDTO,
    ComplaintCreatedResponse,
    ComplaintResponse,
    ComplaintService,
    DashboardResponse,
    DashboardRow,
    EmailStatus,
    EscalationRecordResponse,
    IComplaintNotifier,
    InboundEmailWebhook,
    ManualEscalationRequest,
    ResolveRequest,
    SLAInfo,
    WebhookResponse,
)
from grievance_cell.complaints.infrastructure import (
    ComplaintEmailNotifier,
    SQLAlchemyComplaintRepository,
)
from grievance_cell.core import ComplaintStateException, ResourceNotFoundException
from grievance_cell.infrastructure.database import get_session
from grievance_cell.shared.api.dependencies import get_config_provider, get_email_client
from grievance_cell.shared.infrastructure.logging import get_logger
from grievance_cell.sla.application.services import ISLAConfigProvider

logger = get_logger(__name__)

router = APIRouter(prefix="/api/complaints", tags=["Complaints"])
admin_router = APIRouter(prefix="/api/admin", tags=["Admin"])
vp_router = APIRouter(prefix="/api/vp", tags=["Vice Principal"])
inbound_router = APIRouter(prefix="/api/inbound", tags=["Inbound Email"])


# ========== Example payloads for Swagger ==========

COMPLAINT_CREATE_EXAMPLE = {
    "studentId": "uid-123",
    "studentName": "Priya K",
    "studentEmail": "priya@example.edu",
    "registerNumber": "21CS045",
    "category": "Hostel",
    "description": "No water supply on the second floor since morning.",
    "hostelType": "Girls Hostel",
    "resolutionTime": 2
}

HTML_PAGE = """
<div style="font-family: sans-serif; text-align: center; padding: 50px;">
  <h1 style="color: {color};">{title}</h1>
  <p>{body}</p>
</div>
"""


def _html_page(title: str, body: str = "", color: str = "#111827", status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(
        HTML_PAGE.format(title=escape(title), body=escape(body), color=color),
        status_code=status_code
    )


# ========== Dependencies ==========

def get_complaint_notifier(request: Request) -> IComplaintNotifier:
    """Email notifier bound to the application's SMTP client."""
    return ComplaintEmailNotifier(get_email_client(request))


async def get_complaint_service(
    session: AsyncSession = Depends(get_session),
    notifier: IComplaintNotifier = Depends(get_complaint_notifier),
    config_provider: ISLAConfigProvider = Depends(get_config_provider)
) -> ComplaintService:
    return ComplaintService(SQLAlchemyComplaintRepository(session), notifier, config_provider)


def _to_responses(complaints) -> List[ComplaintResponse]:
    return [ComplaintResponse.model_validate(c) for c in complaints]


# ========== Route Handlers ==========

@router.post(
    "/create",
    response_model=ComplaintCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a complaint",
    description="""
    Validate and store a complaint, then email the responsible warden
    (with a one-click resolve link) and send the student a confirmation.

    Email failures do not fail the request; they show up as `failed` in
    `emailStatus`.
    """,
    responses={400: {"description": "Validation failed"}}
)
async def create_complaint(
    payload: ComplaintCreateDTO = Body(..., examples=[COMPLAINT_CREATE_EXAMPLE]),
    service: ComplaintService = Depends(get_complaint_service)
):
    created = await service.create(payload)

    return ComplaintCreatedResponse(
        complaint_id=created.complaint.id,
        priority=created.priority,
        email_status=EmailStatus(
            warden="sent" if created.warden_notified else "failed",
            student="sent" if created.student_notified else "failed",
        ),
    )


@router.get(
    "/auto-resolve/{complaint_id}",
    response_class=HTMLResponse,
    summary="One-click resolve (email link)"
)
async def auto_resolve_complaint(
    complaint_id: str,
    service: ComplaintService = Depends(get_complaint_service)
):
    try:
        await service.auto_resolve(complaint_id)
    except ResourceNotFoundException:
        return _html_page("Complaint Not Found", status_code=404)
    except ComplaintStateException:
        return _html_page("Complaint is already resolved.")

    return _html_page(
        "Complaint Resolved Successfully",
        "The student has been notified via email. You can close this window.",
        color="green"
    )


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Role dashboard",
    description="""
    Complaints visible to a role, each with its SLA evaluation.

    Roles: `student` (requires `student_id`), `warden_boys`, `warden_girls`,
    `hod`, `faculty`, `vp`, `admin`.
    """
)
async def get_dashboard(
    role: str = Query(..., description="Viewer role"),
    student_id: Optional[str] = Query(None, description="Required for the student role"),
    service: ComplaintService = Depends(get_complaint_service)
):
    rows = await service.dashboard(role, student_id)

    complaints = [
        DashboardRow(
            **ComplaintResponse.model_validate(complaint).model_dump(),
            sla=SLAInfo(
                status=snapshot.evaluation.status,
                percentage=snapshot.evaluation.percentage,
                color=snapshot.evaluation.color,
                time_remaining=snapshot.time_remaining,
                priority=snapshot.priority,
            ),
        )
        for complaint, snapshot in rows
    ]
    return DashboardResponse(role=role, total=len(complaints), complaints=complaints)


@router.get("/warden/{hostel_type}", response_model=List[ComplaintResponse], summary="Complaints for a hostel")
async def get_warden_complaints(
    hostel_type: str,
    service: ComplaintService = Depends(get_complaint_service)
):
    return _to_responses(await service.list_for_hostel(hostel_type))


@router.get("/student/{student_id}", response_model=List[ComplaintResponse], summary="Complaints for a student")
async def get_student_complaints(
    student_id: str,
    service: ComplaintService = Depends(get_complaint_service)
):
    return _to_responses(await service.list_for_student(student_id))


@router.post(
    "/resolve/{complaint_id}",
    response_model=ComplaintActionResponse,
    summary="Resolve a complaint from a dashboard",
    responses={404: {"description": "Unknown complaint"}, 409: {"description": "Already resolved"}}
)
async def resolve_complaint(
    complaint_id: str,
    payload: Optional[ResolveRequest] = Body(None),
    service: ComplaintService = Depends(get_complaint_service)
):
    payload = payload or ResolveRequest()
    complaint = await service.resolve(complaint_id, payload.note, payload.resolved_by)
    return ComplaintActionResponse(
        message="Complaint resolved",
        complaint=ComplaintResponse.model_validate(complaint)
    )


@router.post(
    "/escalate/{complaint_id}",
    response_model=ComplaintActionResponse,
    summary="Escalate a complaint manually",
    responses={404: {"description": "Unknown complaint"}, 409: {"description": "Already escalated"}}
)
async def escalate_complaint(
    complaint_id: str,
    payload: ManualEscalationRequest,
    service: ComplaintService = Depends(get_complaint_service)
):
    complaint = await service.escalate(complaint_id, payload.reason, payload.escalated_by)
    return ComplaintActionResponse(
        message="Complaint escalated",
        complaint=ComplaintResponse.model_validate(complaint)
    )


@router.get(
    "/{complaint_id}/escalations",
    response_model=List[EscalationRecordResponse],
    summary="Escalation history"
)
async def get_escalations(
    complaint_id: str,
    service: ComplaintService = Depends(get_complaint_service)
):
    records = await service.escalation_history(complaint_id)
    return [EscalationRecordResponse.model_validate(r) for r in records]


@router.get("/{complaint_id}", response_model=ComplaintResponse, summary="Get a complaint")
async def get_complaint(
    complaint_id: str,
    service: ComplaintService = Depends(get_complaint_service)
):
    return ComplaintResponse.model_validate(await service.get(complaint_id))


@admin_router.get("/all-complaints", response_model=List[ComplaintResponse], summary="All complaints")
async def get_all_complaints(service: ComplaintService = Depends(get_complaint_service)):
    return _to_responses(await service.list_all())


@vp_router.get("/escalated", response_model=List[ComplaintResponse], summary="Escalated complaints")
async def get_escalated_complaints(service: ComplaintService = Depends(get_complaint_service)):
    return _to_responses(await service.list_escalated())


@inbound_router.post(
    "/resend-webhook",
    response_model=WebhookResponse,
    summary="Warden email reply",
    description="""
    Called by the inbound email provider. The complaint id is read from a
    subject like `Re: Action Required: Complaint #<id>`; the reply text and
    sender are stored as the resolution. Replies that cannot be matched are
    acknowledged and ignored so the provider does not retry them.
    """
)
async def inbound_email(
    payload: InboundEmailWebhook,
    service: ComplaintService = Depends(get_complaint_service)
):
    try:
        complaint_id = await service.resolve_from_email(payload.subject, payload.text, payload.sender)
    except ResourceNotFoundException as e:
        logger.warning("Inbound reply for unknown complaint", extra={"error": e.message})
        return WebhookResponse(message="Ignored: complaint not found")
    except ComplaintStateException as e:
        logger.info("Inbound reply for resolved complaint", extra={"complaint_id": e.complaint_id})
        return WebhookResponse(message="Ignored: already resolved", complaint_id=e.complaint_id)

    if complaint_id is None:
        return WebhookResponse(message="Ignored: No ID found")
    return WebhookResponse(message="Processed successfully", complaint_id=complaint_id)


# Export routers for inclusion in main app
complaints_router = router
