"""
User Domain Layer
=================

Contains:
- Entities: User
"""

from grievance_cell.users.domain.entities import User

__all__ = ["User"]
