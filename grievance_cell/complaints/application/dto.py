"""
Complaint Application DTOs
===========================

Pydantic models for request/response validation.

Request bodies accept both snake_case and the camelCase keys sent by the
web client (studentId, hostelType, resolutionTime, ...).
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

PriorityStr = Literal["High", "Medium", "Low"]
EmailStatusStr = Literal["sent", "failed"]


# ========== Request DTOs ==========

class ComplaintCreateDTO(BaseModel):
    """Request model for complaint submission."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    student_id: str = Field(..., min_length=1, max_length=128)
    student_name: str = Field(..., min_length=1, max_length=255)
    student_email: str = Field(..., min_length=3, max_length=255)
    register_number: str = Field(..., min_length=1, max_length=64)
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=5000)
    hostel_type: str = Field(..., min_length=1, max_length=64)
    resolution_time_days: int = Field(
        ...,
        alias="resolutionTime",
        ge=1,
        le=30,
        description="Requested turnaround in days"
    )
    priority: Optional[PriorityStr] = Field(None, description="Explicit tier; classified from category when omitted")

    @field_validator("student_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("studentEmail must be a valid email address")
        return v

    @model_validator(mode="after")
    def validate_hostel_category(self) -> "ComplaintCreateDTO":
        """Hostel complaints must name the boys or girls block."""
        if self.category.lower() == "hostel":
            hostel = self.hostel_type.lower()
            if "boys" not in hostel and "girls" not in hostel:
                raise ValueError('For Hostel category, hostelType must be "boys" or "girls".')
        return self


class ResolveRequest(BaseModel):
    """Manual resolution from a dashboard."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    note: Optional[str] = Field(None, max_length=5000)
    resolved_by: Optional[str] = Field(None, max_length=255, description="Email of the resolver")


class ManualEscalationRequest(BaseModel):
    """Manual escalation by a staff member."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    reason: str = Field(..., min_length=1, max_length=2000)
    escalated_by: str = Field(..., min_length=1, max_length=255)


class InboundEmailWebhook(BaseModel):
    """Payload posted by the inbound email provider for warden replies."""
    model_config = ConfigDict(populate_by_name=True)

    subject: str = ""
    text: Optional[str] = None
    sender: Optional[str] = Field(None, alias="from")


# ========== Response DTOs ==========

class ComplaintResponse(BaseModel):
    """Complaint as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    student_name: str
    student_email: str
    register_number: str
    category: str
    description: str
    hostel_type: str
    resolution_time_days: int
    priority: Optional[str] = None
    created_at: datetime
    resolved: bool
    resolved_at: Optional[datetime] = None
    warden_response: Optional[str] = None
    warden_email: Optional[str] = None
    escalated: bool
    escalated_at: Optional[datetime] = None
    escalation_reason: Optional[str] = None
    escalated_by: Optional[str] = None


class SLAInfo(BaseModel):
    """SLA columns attached to dashboard rows."""
    status: str
    percentage: int
    color: str
    time_remaining: str
    priority: PriorityStr


class DashboardRow(ComplaintResponse):
    """Complaint plus its SLA evaluation."""
    sla: SLAInfo


class DashboardResponse(BaseModel):
    """Role dashboard."""
    role: str
    total: int
    complaints: List[DashboardRow]


class EmailStatus(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    warden: EmailStatusStr
    student: EmailStatusStr


class ComplaintCreatedResponse(BaseModel):
    """Response after a complaint was submitted; keys are camelCase for the web client."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = "Complaint created successfully"
    complaint_id: str
    priority: PriorityStr
    email_status: EmailStatus


class ComplaintActionResponse(BaseModel):
    """Response for resolve/escalate actions."""
    message: str
    complaint: ComplaintResponse


class EscalationRecordResponse(BaseModel):
    """One escalation log entry."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    complaint_id: str
    escalated_at: datetime
    reason: str
    escalated_by: Optional[str] = None
    kind: Literal["auto", "manual"]


class WebhookResponse(BaseModel):
    message: str
    complaint_id: Optional[str] = None
