"""
Infrastructure Package
======================

Clients for the external collaborators the application relies on:
- database: SQLAlchemy async engine and sessions
- email: SMTP delivery
- translation: text translation API
"""
