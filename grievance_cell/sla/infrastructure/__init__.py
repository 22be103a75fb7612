"""
SLA Infrastructure Layer
=========================

Contains:
- SLAConfigManager: YAML policy with hot-reload
- EscalationScheduler: APScheduler interval job
- SQLAlchemyEscalationStore: sweep persistence
"""

from grievance_cell.sla.infrastructure.external import (
    ConfigFileHandler,
    SLAConfigManager,
    EscalationScheduler,
)
from grievance_cell.sla.infrastructure.repositories import SQLAlchemyEscalationStore

__all__ = [
    "ConfigFileHandler",
    "SLAConfigManager",
    "EscalationScheduler",
    "SQLAlchemyEscalationStore",
]
