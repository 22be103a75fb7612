"""
Complaint Infrastructure Layer
===============================

Contains:
- ORM models for complaints and the escalation log
- SQLAlchemy repository implementation
- Email notifier
"""

from grievance_cell.complaints.infrastructure.repositories import (
    SQLAlchemyComplaintRepository,
    mark_escalated,
    to_entity,
)
from grievance_cell.complaints.infrastructure.external import ComplaintEmailNotifier

__all__ = [
    "SQLAlchemyComplaintRepository",
    "ComplaintEmailNotifier",
    "mark_escalated",
    "to_entity",
]
