"""
Complaints Module
=================

Bounded context for the complaint lifecycle.

Responsibilities:
- Accept and validate student submissions
- Route notifications to the responsible warden and confirm to the student
- Resolve complaints (dashboard, one-click email link, inbound email reply)
- Manual escalation and escalation history
- Role-scoped complaint listings
"""
