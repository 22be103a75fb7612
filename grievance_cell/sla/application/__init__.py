"""
SLA Application Layer
======================

Contains:
- Services: SLA views and the escalation sweep
- DTOs: Response models for the SLA API

This layer depends on the domain layer and on collaborator interfaces,
not on concrete infrastructure implementations.
"""

from grievance_cell.sla.application.dto import (
    SLAEvaluationResponse,
    SLASnapshotResponse,
    SLADashboardResponse,
    SLAPolicyResponse,
    SweepResponse,
)
from grievance_cell.sla.application.services import (
    SLAService,
    EscalationService,
    ISLAConfigProvider,
    IEscalationStore,
    IEscalationNotifier,
)

__all__ = [
    # DTOs
    "SLAEvaluationResponse",
    "SLASnapshotResponse",
    "SLADashboardResponse",
    "SLAPolicyResponse",
    "SweepResponse",
    # Services
    "SLAService",
    "EscalationService",
    # Interfaces
    "ISLAConfigProvider",
    "IEscalationStore",
    "IEscalationNotifier",
]
