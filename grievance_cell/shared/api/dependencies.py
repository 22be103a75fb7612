"""
Shared API Dependencies
========================

FastAPI dependencies for the long-lived objects created in the
application lifespan and kept on `app.state`.
"""

from fastapi import HTTPException, Request

from grievance_cell.infrastructure.email import SMTPEmailClient
from grievance_cell.sla.application.services import EscalationService, ISLAConfigProvider


def get_config_provider(request: Request) -> ISLAConfigProvider:
    """Hot-reloaded SLA policy."""
    manager = getattr(request.app.state, "sla_config_manager", None)
    if manager is None:
        raise HTTPException(status_code=503, detail="SLA configuration not loaded")
    return manager


def get_email_client(request: Request) -> SMTPEmailClient:
    client = getattr(request.app.state, "email_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Email client not initialized")
    return client


def get_escalation_service(request: Request) -> EscalationService:
    service = getattr(request.app.state, "escalation_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Escalation service not initialized")
    return service
