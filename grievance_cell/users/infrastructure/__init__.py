"""
User Infrastructure Layer
==========================
"""

from grievance_cell.users.infrastructure.repositories import SQLAlchemyUserRepository

__all__ = ["SQLAlchemyUserRepository"]
