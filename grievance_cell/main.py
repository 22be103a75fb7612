"""
Grievance Cell - Main Application
==================================

Complaint management backend for a college grievance cell.

Modules:
- Complaints: submission, warden routing, resolution, manual escalation
- SLA: priority budgets, evaluation and the automatic escalation sweep
- Users: role administration
- Translation: regional-language text for the dashboards

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: Database, SMTP, translation API
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

# Configuration and Core
from grievance_cell.config import settings
from grievance_cell.core import ApplicationException

# Infrastructure
from grievance_cell.infrastructure.database import init_database, close_database, create_tables
from grievance_cell.infrastructure.email import SMTPEmailClient
from grievance_cell.infrastructure.translation import GoogleTranslateClient

# SLA Module
from grievance_cell.sla.application import EscalationService
from grievance_cell.sla.infrastructure import (
    SLAConfigManager,
    EscalationScheduler,
    SQLAlchemyEscalationStore,
)
from grievance_cell.complaints.infrastructure import ComplaintEmailNotifier

# Module Routers
from grievance_cell.complaints.interfaces import (
    complaints_router,
    admin_router,
    vp_router,
    inbound_router,
)
from grievance_cell.sla.interfaces import sla_router
from grievance_cell.users.interfaces import users_router
from grievance_cell.translation.interfaces import translation_router

# Shared
from grievance_cell.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from grievance_cell.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database and create tables (degraded mode if unavailable)
    3. Load SLA configuration and watch it for changes
    4. Create SMTP client and verify the relay
    5. Start the escalation scheduler

    SHUTDOWN (reverse order):
    1. Stop the escalation scheduler
    2. Stop the config watcher
    3. Close the translation client
    4. Close database connections
    """
    # === STARTUP ===
    setup_logging("DEBUG" if settings.debug else "INFO", settings.environment)
    logger.info("Starting Grievance Cell", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Initializing database")
    init_database()
    try:
        await create_tables()
    except Exception as e:
        logger.warning("Database not available - running in degraded mode", extra={"error": str(e)})

    logger.info("Loading SLA configuration")
    sla_config_manager = SLAConfigManager()
    sla_config_manager.load(settings.sla_config_path)
    sla_config_manager.start_watching()

    email_client = SMTPEmailClient()
    await email_client.verify_connection()

    translation_client = GoogleTranslateClient()
    if not translation_client.is_configured:
        logger.warning("Translation API key not set; translations fall back to original text")

    escalation_service = EscalationService(
        store=SQLAlchemyEscalationStore(),
        notifier=ComplaintEmailNotifier(email_client),
        config_provider=sla_config_manager,
        notification_timeout=settings.notification_timeout_seconds,
    )

    escalation_scheduler = None
    if settings.escalation_enabled:
        escalation_scheduler = EscalationScheduler(settings.escalation_interval_minutes)
        await escalation_scheduler.start(escalation_service.sweep)
    else:
        logger.info("Escalation scheduler disabled")

    # Store services in app state for dependency injection
    app.state.sla_config_manager = sla_config_manager
    app.state.email_client = email_client
    app.state.translation_client = translation_client
    app.state.escalation_service = escalation_service
    app.state.escalation_scheduler = escalation_scheduler

    logger.info("Grievance Cell started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Grievance Cell")

    if escalation_scheduler:
        await escalation_scheduler.stop()

    sla_config_manager.stop_watching()
    await translation_client.close()
    await close_database()

    logger.info("Grievance Cell shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Grievance Cell API",
    description="""
    ## College Grievance Cell

    Students submit complaints; wardens, HOD/faculty, the vice principal
    and admins resolve them.

    ---

    ### Complaints
    - `POST /api/complaints/create` - Submit a complaint (warden + student emails)
    - `GET /api/complaints/dashboard?role=` - Role dashboard with SLA state
    - `POST /api/complaints/resolve/{id}` - Resolve from a dashboard
    - `GET /api/complaints/auto-resolve/{id}` - One-click resolve from email
    - `POST /api/inbound/resend-webhook` - Resolve from a warden's email reply

    ### SLA
    - `GET /sla/dashboard` - Status counts and compliance
    - `POST /sla/sweep` - Run the escalation sweep now

    **Resolution budgets:**

    | Priority | Budget |
    |----------|--------|
    | High     | 24h    |
    | Medium   | 72h    |
    | Low      | 168h   |

    Overdue complaints are escalated to the vice principal every 30 minutes.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)

app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(complaints_router)
app.include_router(admin_router)
app.include_router(vp_router)
app.include_router(inbound_router)
app.include_router(sla_router)
app.include_router(users_router)
app.include_router(translation_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {
                        "sla_config": "loaded",
                        "escalation_scheduler": "running",
                        "smtp": "configured",
                        "translation": "configured"
                    }
                }
            }
        }
    }
})
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.
    """
    state = request.app.state
    scheduler = getattr(state, "escalation_scheduler", None)
    email_client = getattr(state, "email_client", None)
    translation_client = getattr(state, "translation_client", None)

    checks = {
        "sla_config": "loaded" if getattr(state, "sla_config_manager", None) else "not_loaded",
        "escalation_scheduler": "running" if scheduler and scheduler.is_running else "stopped",
        "smtp": "configured" if email_client and email_client.is_configured else "not_configured",
        "translation": "configured" if translation_client and translation_client.is_configured else "not_configured",
    }

    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Grievance Cell",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "complaints": {"prefix": "/api/complaints"},
            "sla": {"prefix": "/sla"},
            "users": {"prefix": "/api/users"},
            "translation": {"prefix": "/api/translate"}
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "grievance_cell.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
