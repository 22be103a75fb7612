"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="grievance-cell", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=5000, description="Server port", ge=1, le=65535)
    api_base_url: str = Field(
        default="http://localhost:5000",
        description="Public base URL used in one-click email links"
    )

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/grievances",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== SLA & Escalation ==========
    sla_config_path: Path = Field(
        default=Path("sla_config.yaml"),
        description="Path to SLA policy YAML file"
    )
    escalation_enabled: bool = Field(
        default=True,
        description="Run the escalation sweep on a schedule"
    )
    escalation_interval_minutes: int = Field(
        default=30,
        description="Minutes between escalation sweeps",
        ge=1
    )
    escalation_recipient_role: str = Field(
        default="vp",
        description="Role notified when a complaint is escalated"
    )
    notification_timeout_seconds: float = Field(
        default=10.0,
        description="Upper bound for a single notification during a sweep",
        gt=0,
        le=120
    )

    # ========== SMTP ==========
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP relay host")
    smtp_port: int = Field(default=587, description="SMTP relay port (STARTTLS)")
    smtp_email: Optional[str] = Field(default=None, description="SMTP login / sender address")
    smtp_pass: Optional[str] = Field(default=None, description="SMTP password")
    smtp_from_name: str = Field(default="Grievance Cell", description="Sender display name")
    smtp_timeout_seconds: float = Field(default=10.0, description="SMTP operation timeout", gt=0)

    # ========== Role mailboxes ==========
    admin_email: Optional[str] = Field(default=None, description="Admin mailbox, fallback recipient")
    vp_email: Optional[str] = Field(default=None, description="Vice principal mailbox")
    warden_boys_email: Optional[str] = Field(default=None, description="Boys hostel warden mailbox")
    warden_girls_email: Optional[str] = Field(default=None, description="Girls hostel warden mailbox")
    hod_email: Optional[str] = Field(default=None, description="Head of department mailbox")
    faculty_email: Optional[str] = Field(default=None, description="Faculty mailbox")
    main_admin_email: Optional[str] = Field(
        default=None,
        description="Account that cannot be demoted or deleted"
    )

    # ========== Translation ==========
    translation_api_key: Optional[str] = Field(default=None, description="Translation API key")
    translation_api_url: str = Field(
        default="https://translation.googleapis.com/language/translate/v2",
        description="Translation API endpoint"
    )
    translation_timeout_seconds: float = Field(default=5.0, ge=0.1, le=30)

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    def role_emails(self) -> Dict[str, Optional[str]]:
        """Mailbox per organizational role."""
        return {
            Role.ADMIN: self.admin_email,
            Role.VP: self.vp_email,
            Role.WARDEN_BOYS: self.warden_boys_email,
            Role.WARDEN_GIRLS: self.warden_girls_email,
            Role.HOD: self.hod_email,
            Role.FACULTY: self.faculty_email,
        }

    def email_for_role(self, role: str) -> Optional[str]:
        """Resolve a role to a mailbox, falling back to the admin address."""
        return self.role_emails().get(role) or self.admin_email


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class Priority(str):
    """Complaint priority tiers."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class SLAStatus(str):
    """SLA display buckets."""
    RESOLVED = "Resolved"
    OVERDUE = "Overdue"
    CRITICAL = "Critical"
    WARNING = "Warning"
    ON_TRACK = "On Track"


class SLAColor(str):
    """Display color per SLA bucket."""
    RESOLVED = "#10b981"
    OVERDUE = "#ef4444"
    CRITICAL = "#f59e0b"
    WARNING = "#fbbf24"
    ON_TRACK = "#10b981"


class Role(str):
    """Organizational roles."""
    STUDENT = "student"
    WARDEN_BOYS = "warden_boys"
    WARDEN_GIRLS = "warden_girls"
    HOD = "hod"
    FACULTY = "faculty"
    VP = "vp"
    ADMIN = "admin"


class HostelType(str):
    """Hostel blocks used for warden routing."""
    BOYS = "Boys Hostel"
    GIRLS = "Girls Hostel"


class EscalationKind(str):
    """How an escalation was triggered."""
    AUTO = "auto"
    MANUAL = "manual"


# ========== Lists for validation ==========

VALID_PRIORITIES = [Priority.HIGH, Priority.MEDIUM, Priority.LOW]
VALID_SLA_STATUSES = [
    SLAStatus.RESOLVED, SLAStatus.OVERDUE, SLAStatus.CRITICAL,
    SLAStatus.WARNING, SLAStatus.ON_TRACK
]
VALID_ROLES = [
    Role.STUDENT, Role.WARDEN_BOYS, Role.WARDEN_GIRLS,
    Role.HOD, Role.FACULTY, Role.VP, Role.ADMIN
]
SUPPORTED_LANGUAGES = ["en", "ta", "hi", "ml"]
