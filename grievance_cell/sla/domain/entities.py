"""
SLA Domain Entities
====================

Results produced by the SLA calculations and the escalation sweep.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Optional


@dataclass(frozen=True)
class SLAEvaluation:
    """Display SLA state of one complaint."""

    status: str
    percentage: int
    color: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SweepResult:
    """
    Outcome of one escalation sweep.

    `aborted` is set when the candidate batch could not be fetched;
    `skipped` when another sweep was still running.
    """

    candidates: int = 0
    escalated: int = 0
    notified: int = 0
    failed: int = 0
    aborted: bool = False
    skipped: bool = False
    escalated_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SLASnapshot:
    """Evaluation of one complaint together with the inputs that produced it."""

    complaint_id: str
    priority: str
    budget_hours: int
    hours_elapsed: int
    deadline: Optional[datetime]
    evaluation: SLAEvaluation
    time_remaining: str
    escalated: bool = False


@dataclass
class SLADashboard:
    """Aggregate SLA view across a set of complaints."""

    status_counts: Dict[str, int]
    compliance_percentage: int
    total: int
    open_complaints: List[SLASnapshot] = field(default_factory=list)
