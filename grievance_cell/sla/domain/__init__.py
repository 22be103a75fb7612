"""
SLA Domain Layer
================

Contains:
- Entities: SLAEvaluation, SLASnapshot, SLADashboard, SweepResult
- Value Objects: SLAConfig (policy table + classifier keywords)
- Domain Services: SLACalculator (evaluator)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from grievance_cell.sla.domain.entities import (
    SLAEvaluation,
    SLASnapshot,
    SLADashboard,
    SweepResult,
)
from grievance_cell.sla.domain.value_objects import (
    SLACalculator,
    SLAConfig,
    DEFAULT_SLA_CONFIG,
    DEFAULT_BUDGET_HOURS,
    DEFAULT_PRIORITY_KEYWORDS,
)

__all__ = [
    # Entities
    "SLAEvaluation",
    "SLASnapshot",
    "SLADashboard",
    "SweepResult",
    # Value Objects & Services
    "SLACalculator",
    "SLAConfig",
    "DEFAULT_SLA_CONFIG",
    "DEFAULT_BUDGET_HOURS",
    "DEFAULT_PRIORITY_KEYWORDS",
]
