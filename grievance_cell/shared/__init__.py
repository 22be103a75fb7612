"""
Shared Kernel Module
====================

Shared infrastructure used across all bounded contexts
(SLA, Complaints, Users, Translation).

Architecture Pattern: Modular Monolith
- Each module is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add complaint or SLA business logic to the shared kernel.
"""
