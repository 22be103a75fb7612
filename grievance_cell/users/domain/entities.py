"""
User Domain Entities
=====================
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class User:
    """A person known to the grievance cell."""

    id: str
    email: str
    role: str
    name: Optional[str] = None
    hostel_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_protected(self, main_admin_email: Optional[str]) -> bool:
        """The main admin account can be neither re-roled nor deleted."""
        return bool(main_admin_email) and self.email.lower() == main_admin_email.lower()
