"""
Complaint Value Objects
========================

Role-based complaint scopes.

Every role maps to exactly one scope through ROLE_SCOPES; dashboards look
their role up there instead of branching on role strings.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from grievance_cell.config import Role

ACADEMIC_KEYWORDS: Tuple[str, ...] = ("academic", "course", "exam", "faculty", "library", "lab")

COMPLAINT_ID_PATTERN = re.compile(r"Complaint #([a-zA-Z0-9]+)")


@dataclass(frozen=True)
class ComplaintScope:
    """
    Filter describing which complaints a viewer may see.

    Empty scope means every complaint.
    """
    student_id: Optional[str] = None
    hostel_keyword: Optional[str] = None
    category_keywords: Tuple[str, ...] = ()
    escalated_only: bool = False

    def matches(self, complaint) -> bool:
        if self.student_id is not None and complaint.student_id != self.student_id:
            return False
        if self.hostel_keyword and self.hostel_keyword not in (complaint.hostel_type or "").lower():
            return False
        if self.category_keywords:
            category = (complaint.category or "").lower()
            if not any(k in category for k in self.category_keywords):
                return False
        if self.escalated_only and not complaint.escalated:
            return False
        return True


ROLE_SCOPES: Dict[str, Callable[[Optional[str]], ComplaintScope]] = {
    Role.STUDENT: lambda student_id: ComplaintScope(student_id=student_id or ""),
    Role.WARDEN_BOYS: lambda _: ComplaintScope(hostel_keyword="boys"),
    Role.WARDEN_GIRLS: lambda _: ComplaintScope(hostel_keyword="girls"),
    Role.HOD: lambda _: ComplaintScope(category_keywords=ACADEMIC_KEYWORDS),
    Role.FACULTY: lambda _: ComplaintScope(category_keywords=ACADEMIC_KEYWORDS),
    Role.VP: lambda _: ComplaintScope(escalated_only=True),
    Role.ADMIN: lambda _: ComplaintScope(),
}


def scope_for_role(role: str, student_id: Optional[str] = None) -> ComplaintScope:
    """
    Look up the complaint scope for a role.

    Raises:
        KeyError: role is not one of the known roles
    """
    return ROLE_SCOPES[role](student_id)


def warden_role_for_hostel(hostel_type: Optional[str]) -> str:
    """Warden responsible for a hostel; admin when it is neither block."""
    hostel = (hostel_type or "").lower()
    if "boys" in hostel:
        return Role.WARDEN_BOYS
    if "girls" in hostel:
        return Role.WARDEN_GIRLS
    return Role.ADMIN


def extract_complaint_id(subject: Optional[str]) -> Optional[str]:
    """Pull the complaint id out of an email subject like 'Re: Complaint #abc123'."""
    match = COMPLAINT_ID_PATTERN.search(subject or "")
    return match.group(1) if match else None
