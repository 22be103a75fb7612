"""
SLA Controllers (API Routes)
=============================

FastAPI routes for SLA views and the on-demand escalation sweep.

Controllers are thin - they delegate to application services.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from grievance_cell.complaints.domain import ComplaintScope, scope_for_role
from grievance_cell.complaints.infrastructure import SQLAlchemyComplaintRepository
from grievance_cell.config import VALID_ROLES
from grievance_cell.core import ResourceNotFoundException, ValidationException
from grievance_cell.infrastructure.database import get_session
from grievance_cell.shared.api.dependencies import get_config_provider, get_escalation_service
from grievance_cell.shared.infrastructure.logging import get_logger
from grievance_cell.sla.application import (
    EscalationService,
    ISLAConfigProvider,
    SLADashboardResponse,
    SLAPolicyResponse,
    SLAService,
    SLASnapshotResponse,
    SweepResponse,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/sla", tags=["SLA Monitoring"])


# ========== Example payloads for Swagger ==========

SNAPSHOT_RESPONSE_EXAMPLE = {
    "complaint_id": "3f2b9c7e1a4d4e6f8b0c2d4e6f8a0b1c",
    "priority": "High",
    "budget_hours": 24,
    "hours_elapsed": 20,
    "deadline": "2024-01-16T10:00:00Z",
    "time_remaining": "4h left",
    "escalated": False,
    "sla": {"status": "Critical", "percentage": 83, "color": "#f59e0b"}
}

SWEEP_RESPONSE_EXAMPLE = {
    "candidates": 12,
    "escalated": 2,
    "notified": 2,
    "failed": 0,
    "aborted": False,
    "skipped": False,
    "escalated_ids": ["3f2b9c7e1a4d4e6f8b0c2d4e6f8a0b1c", "9a8b7c6d5e4f30211f2e3d4c5b6a7988"]
}


# ========== Dependencies ==========

def get_sla_service(config_provider: ISLAConfigProvider = Depends(get_config_provider)) -> SLAService:
    """Get SLA service instance."""
    return SLAService(config_provider)


# ========== Route Handlers ==========

@router.get(
    "/complaints/{complaint_id}",
    response_model=SLASnapshotResponse,
    summary="SLA state of one complaint",
    responses={200: {"content": {"application/json": {"example": SNAPSHOT_RESPONSE_EXAMPLE}}}}
)
async def get_complaint_sla(
    complaint_id: str,
    session: AsyncSession = Depends(get_session),
    sla_service: SLAService = Depends(get_sla_service)
):
    complaint = await SQLAlchemyComplaintRepository(session).get_by_id(complaint_id)
    if complaint is None:
        raise ResourceNotFoundException("Complaint", complaint_id)
    return SLASnapshotResponse.from_domain(sla_service.snapshot(complaint))


@router.get(
    "/dashboard",
    response_model=SLADashboardResponse,
    summary="SLA dashboard",
    description="""
    Status bucket counts, compliance percentage and the open complaints
    ordered by consumed budget. Optionally narrowed to what a role sees.
    """
)
async def get_sla_dashboard(
    role: Optional[str] = Query(None, description="Restrict to a role's complaints"),
    student_id: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_session),
    sla_service: SLAService = Depends(get_sla_service)
):
    if role is not None and role not in VALID_ROLES:
        raise ValidationException(f"Invalid role: {role}", {"allowed": VALID_ROLES})

    scope = scope_for_role(role, student_id) if role else ComplaintScope()
    complaints = await SQLAlchemyComplaintRepository(session).list_in_scope(scope)
    return SLADashboardResponse.from_domain(sla_service.dashboard(complaints))


@router.get("/policy", response_model=SLAPolicyResponse, summary="Current SLA policy")
async def get_policy(config_provider: ISLAConfigProvider = Depends(get_config_provider)):
    return SLAPolicyResponse.from_config(config_provider.get_config())


@router.post(
    "/sweep",
    response_model=SweepResponse,
    summary="Run the escalation sweep now",
    responses={200: {"content": {"application/json": {"example": SWEEP_RESPONSE_EXAMPLE}}}}
)
async def run_sweep(service: EscalationService = Depends(get_escalation_service)):
    result = await service.sweep()
    logger.info("On-demand sweep finished", extra=result.to_dict())
    return SweepResponse.from_domain(result)


# Export router for inclusion in main app
sla_router = router
