"""
Translation Interfaces Layer
=============================
"""

from grievance_cell.translation.interfaces.controllers import translation_router

__all__ = ["translation_router"]
