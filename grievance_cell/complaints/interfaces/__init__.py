"""
Complaint Interfaces Layer
===========================

API controllers for the complaints module.
"""

from grievance_cell.complaints.interfaces.controllers import (
    complaints_router,
    admin_router,
    vp_router,
    inbound_router,
)

__all__ = ["complaints_router", "admin_router", "vp_router", "inbound_router"]
