"""
User Interfaces Layer
======================
"""

from grievance_cell.users.interfaces.controllers import users_router

__all__ = ["users_router"]
