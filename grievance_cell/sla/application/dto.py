"""
SLA Application DTOs
=====================

Pydantic response models for the SLA API.
"""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from grievance_cell.sla.domain import SLASnapshot, SLADashboard, SLAConfig, SweepResult

PriorityStr = Literal["High", "Medium", "Low"]
SLAStatusStr = Literal["Resolved", "Overdue", "Critical", "Warning", "On Track"]


class SLAEvaluationResponse(BaseModel):
    """Display state of one complaint."""
    status: SLAStatusStr
    percentage: int = Field(..., ge=0, le=100, description="Share of the budget consumed")
    color: str


class SLASnapshotResponse(BaseModel):
    """Full SLA view of one complaint."""
    complaint_id: str
    priority: PriorityStr
    budget_hours: int
    hours_elapsed: int
    deadline: Optional[datetime] = Field(None, description="created_at + budget")
    time_remaining: str = Field(..., description="e.g. '5h left', '2d overdue'")
    escalated: bool
    sla: SLAEvaluationResponse

    @classmethod
    def from_domain(cls, snapshot: SLASnapshot) -> "SLASnapshotResponse":
        return cls(
            complaint_id=snapshot.complaint_id,
            priority=snapshot.priority,
            budget_hours=snapshot.budget_hours,
            hours_elapsed=snapshot.hours_elapsed,
            deadline=snapshot.deadline,
            time_remaining=snapshot.time_remaining,
            escalated=snapshot.escalated,
            sla=SLAEvaluationResponse(**snapshot.evaluation.to_dict()),
        )


class SLADashboardResponse(BaseModel):
    """Aggregate SLA view."""
    total: int
    status_counts: Dict[str, int]
    compliance_percentage: int = Field(..., description="Resolved within budget, in percent")
    open_complaints: List[SLASnapshotResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, dashboard: SLADashboard) -> "SLADashboardResponse":
        return cls(
            total=dashboard.total,
            status_counts=dashboard.status_counts,
            compliance_percentage=dashboard.compliance_percentage,
            open_complaints=[SLASnapshotResponse.from_domain(s) for s in dashboard.open_complaints],
        )


class SLAPolicyResponse(BaseModel):
    """Current SLA policy."""
    budget_hours: Dict[str, int]
    priority_keywords: Dict[str, List[str]]
    budget_source: Literal["priority", "requested"]

    @classmethod
    def from_config(cls, config: SLAConfig) -> "SLAPolicyResponse":
        return cls(**config.model_dump())


class SweepResponse(BaseModel):
    """Outcome of an on-demand sweep."""
    candidates: int
    escalated: int
    notified: int
    failed: int
    aborted: bool
    skipped: bool
    escalated_ids: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, result: SweepResult) -> "SweepResponse":
        return cls(**result.to_dict())
