"""
SLA Infrastructure Repositories
================================

Escalation store used by the sweep.

Runs outside any request, so it opens its own session per operation:
each escalation commits on its own and one failing complaint cannot roll
back the others.
"""

from datetime import datetime
from typing import Callable, List

from sqlalchemy import select

from grievance_cell.complaints.domain import Complaint
from grievance_cell.complaints.infrastructure.models import ComplaintModel
from grievance_cell.complaints.infrastructure.repositories import mark_escalated, to_entity
from grievance_cell.config import EscalationKind
from grievance_cell.infrastructure.database import get_session_context
from grievance_cell.sla.application.services import IEscalationStore


class SQLAlchemyEscalationStore(IEscalationStore):
    """SQLAlchemy implementation of the sweep's store."""

    def __init__(self, session_factory: Callable = get_session_context):
        self._session_factory = session_factory

    async def list_candidates(self) -> List[Complaint]:
        async with self._session_factory() as session:
            stmt = (
                select(ComplaintModel)
                .where(ComplaintModel.resolved.is_(False), ComplaintModel.escalated.is_(False))
                .order_by(ComplaintModel.created_at.asc())
            )
            result = await session.execute(stmt)
            return [to_entity(m) for m in result.scalars().all()]

    async def mark_escalated(self, complaint_id: str, reason: str, escalated_at: datetime) -> bool:
        async with self._session_factory() as session:
            return await mark_escalated(
                session,
                complaint_id,
                reason,
                escalated_at,
                kind=EscalationKind.AUTO,
            )
