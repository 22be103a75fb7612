"""
Grievance Cell
==============

Complaint management backend with SLA tracking and automatic escalation.
"""

__version__ = "1.0.0"
