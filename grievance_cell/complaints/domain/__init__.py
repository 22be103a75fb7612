"""
Complaint Domain Layer
======================

Contains:
- Entities: Complaint, EscalationRecord
- Value Objects: ComplaintScope and the role -> scope table

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from grievance_cell.complaints.domain.entities import Complaint, EscalationRecord
from grievance_cell.complaints.domain.value_objects import (
    ComplaintScope,
    ROLE_SCOPES,
    ACADEMIC_KEYWORDS,
    scope_for_role,
    warden_role_for_hostel,
    extract_complaint_id,
)

__all__ = [
    "Complaint",
    "EscalationRecord",
    "ComplaintScope",
    "ROLE_SCOPES",
    "ACADEMIC_KEYWORDS",
    "scope_for_role",
    "warden_role_for_hostel",
    "extract_complaint_id",
]
