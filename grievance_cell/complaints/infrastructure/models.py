"""
Complaint Infrastructure Models
================================

SQLAlchemy ORM models for the complaints module.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from grievance_cell.infrastructure.database import Base
from grievance_cell.config import EscalationKind


def _new_id() -> str:
    return uuid4().hex


class ComplaintModel(Base):
    """
    Database model for the Complaint entity.

    The id is a 32-char hex string so it survives round trips through
    email subjects ("Complaint #<id>").
    """
    __tablename__ = "complaints"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)

    # Submitter
    student_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    student_email: Mapped[str] = mapped_column(String(255), nullable=False)
    register_number: Mapped[str] = mapped_column(String(64), nullable=False)

    # Content
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    hostel_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    resolution_time_days: Mapped[int] = mapped_column(Integer, nullable=False)
    priority: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    # Resolution
    resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    warden_response: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    warden_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Escalation
    escalated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    escalated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    escalation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    escalated_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class EscalationModel(Base):
    """
    Escalation log.

    One row per escalation, automatic or manual.
    """
    __tablename__ = "escalations"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)

    complaint_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    escalated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    escalated_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False, default=EscalationKind.AUTO)
