"""
SLA Interfaces Layer
=====================

API controllers for the SLA module.
"""

from grievance_cell.sla.interfaces.controllers import sla_router

__all__ = ["sla_router"]
