"""
Complaint Infrastructure Repositories
======================================

SQLAlchemy implementation of the complaint repository.

State transitions lock the row only while its flag is still false
(`SELECT ... WHERE resolved IS false FOR UPDATE`), so concurrent writers
cannot flip a flag twice.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grievance_cell.complaints.application.services import IComplaintRepository
from grievance_cell.complaints.domain import Complaint, ComplaintScope, EscalationRecord
from grievance_cell.complaints.infrastructure.models import ComplaintModel, EscalationModel
from grievance_cell.core import RepositoryException


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_entity(model: ComplaintModel) -> Complaint:
    """Map an ORM row to the domain entity."""
    return Complaint(
        id=model.id,
        student_id=model.student_id,
        student_name=model.student_name,
        student_email=model.student_email,
        register_number=model.register_number,
        category=model.category,
        description=model.description,
        hostel_type=model.hostel_type,
        resolution_time_days=model.resolution_time_days,
        priority=model.priority,
        created_at=_aware(model.created_at),
        resolved=model.resolved,
        resolved_at=_aware(model.resolved_at),
        warden_response=model.warden_response,
        warden_email=model.warden_email,
        escalated=model.escalated,
        escalated_at=_aware(model.escalated_at),
        escalation_reason=model.escalation_reason,
        escalated_by=model.escalated_by,
    )


def escalation_to_entity(model: EscalationModel) -> EscalationRecord:
    return EscalationRecord(
        id=model.id,
        complaint_id=model.complaint_id,
        escalated_at=_aware(model.escalated_at),
        reason=model.reason,
        kind=model.kind,
        escalated_by=model.escalated_by,
    )


async def _lock_open(session: AsyncSession, complaint_id: str, flag) -> Optional[ComplaintModel]:
    """Row lock on a complaint whose `flag` column is still false; None otherwise."""
    stmt = (
        select(ComplaintModel)
        .where(ComplaintModel.id == complaint_id, flag.is_(False))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


def scope_conditions(scope: ComplaintScope) -> list:
    """Translate a scope into WHERE clauses."""
    conditions = []
    if scope.student_id is not None:
        conditions.append(ComplaintModel.student_id == scope.student_id)
    if scope.hostel_keyword:
        conditions.append(
            func.lower(ComplaintModel.hostel_type).contains(scope.hostel_keyword.lower(), autoescape=True)
        )
    if scope.category_keywords:
        conditions.append(or_(*[
            func.lower(ComplaintModel.category).contains(keyword, autoescape=True)
            for keyword in scope.category_keywords
        ]))
    if scope.escalated_only:
        conditions.append(ComplaintModel.escalated.is_(True))
    return conditions


class SQLAlchemyComplaintRepository(IComplaintRepository):
    """SQLAlchemy implementation for complaints."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, complaint: Complaint) -> Complaint:
        """Insert a complaint; a fresh hex id is assigned."""
        model = ComplaintModel(
            id=uuid4().hex,
            student_id=complaint.student_id,
            student_name=complaint.student_name,
            student_email=complaint.student_email,
            register_number=complaint.register_number,
            category=complaint.category,
            description=complaint.description,
            hostel_type=complaint.hostel_type,
            resolution_time_days=complaint.resolution_time_days,
            priority=complaint.priority,
            created_at=complaint.created_at,
            resolved=False,
            escalated=False,
        )

        try:
            self._session.add(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to store complaint: {e}")

        return to_entity(model)

    async def get_by_id(self, complaint_id: str) -> Optional[Complaint]:
        stmt = select(ComplaintModel).where(ComplaintModel.id == complaint_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return to_entity(model) if model else None

    async def list_in_scope(self, scope: ComplaintScope) -> List[Complaint]:
        stmt = (
            select(ComplaintModel)
            .where(*scope_conditions(scope))
            .order_by(ComplaintModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [to_entity(m) for m in result.scalars().all()]

    async def save_resolution(self, complaint: Complaint) -> bool:
        model = await _lock_open(self._session, complaint.id, ComplaintModel.resolved)
        if model is None:
            return False

        model.resolved = True
        model.resolved_at = complaint.resolved_at
        model.warden_response = complaint.warden_response
        model.warden_email = complaint.warden_email
        await self._session.flush()
        return True

    async def save_escalation(self, complaint: Complaint, record: EscalationRecord) -> bool:
        return await mark_escalated(
            self._session,
            complaint.id,
            record.reason,
            record.escalated_at,
            escalated_by=record.escalated_by,
            kind=record.kind,
        )

    async def list_escalations(self, complaint_id: str) -> List[EscalationRecord]:
        stmt = (
            select(EscalationModel)
            .where(EscalationModel.complaint_id == complaint_id)
            .order_by(EscalationModel.escalated_at.asc())
        )
        result = await self._session.execute(stmt)
        return [escalation_to_entity(m) for m in result.scalars().all()]

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise RepositoryException(f"Failed to commit complaint changes: {e}")


async def mark_escalated(
    session: AsyncSession,
    complaint_id: str,
    reason: str,
    escalated_at: datetime,
    escalated_by: Optional[str] = None,
    kind: str = "auto"
) -> bool:
    """
    Flip `escalated` and append the log entry in the caller's transaction.

    Returns:
        False when the complaint is unknown or already escalated
    """
    model = await _lock_open(session, complaint_id, ComplaintModel.escalated)
    if model is None:
        return False

    model.escalated = True
    model.escalated_at = escalated_at
    model.escalation_reason = reason
    model.escalated_by = escalated_by

    session.add(EscalationModel(
        id=uuid4().hex,
        complaint_id=complaint_id,
        escalated_at=escalated_at,
        reason=reason,
        escalated_by=escalated_by,
        kind=kind,
    ))
    await session.flush()
    return True
