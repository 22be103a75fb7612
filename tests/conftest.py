"""
Grievance Cell - Test Configuration and Fixtures
"""
import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set testing environment before the settings object is created
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ESCALATION_ENABLED"] = "false"
os.environ["API_BASE_URL"] = "http://test"
os.environ["MAIN_ADMIN_EMAIL"] = "principal@college.edu"
os.environ["ADMIN_EMAIL"] = "admin@college.edu"
os.environ["VP_EMAIL"] = "vp@college.edu"
os.environ["WARDEN_BOYS_EMAIL"] = "warden.boys@college.edu"
os.environ["WARDEN_GIRLS_EMAIL"] = "warden.girls@college.edu"
for key in ("SMTP_EMAIL", "SMTP_PASS", "TRANSLATION_API_KEY"):
    os.environ.pop(key, None)

from grievance_cell.main import app
from grievance_cell.infrastructure.database import Base, get_session
from grievance_cell.complaints.application import IComplaintNotifier
from grievance_cell.complaints.infrastructure.models import ComplaintModel
from grievance_cell.complaints.interfaces.controllers import get_complaint_notifier
from grievance_cell.shared.api.dependencies import get_config_provider, get_escalation_service
from grievance_cell.sla.application import EscalationService
from grievance_cell.sla.domain import SLAConfig
from grievance_cell.sla.infrastructure import SLAConfigManager, SQLAlchemyEscalationStore
from grievance_cell.translation.application import ITranslationClient
from grievance_cell.translation.interfaces.controllers import get_translation_client
import grievance_cell.users.infrastructure.models  # noqa: F401

fake = Faker()

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database and session for each test"""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_session: AsyncSession):
    """Stand-in for get_session_context bound to the test session"""
    @asynccontextmanager
    async def _factory():
        yield db_session
        await db_session.flush()
    return _factory


@pytest.fixture
def sla_config_manager() -> SLAConfigManager:
    return SLAConfigManager(SLAConfig())


@pytest.fixture
def notifier() -> AsyncMock:
    """Complaint notifier that reports every email as delivered"""
    mock = AsyncMock(spec=IComplaintNotifier)
    mock.notify_warden.return_value = True
    mock.confirm_to_student.return_value = True
    mock.notify_resolution.return_value = True
    mock.notify_escalation.return_value = True
    return mock


@pytest.fixture
def translation_client() -> AsyncMock:
    return AsyncMock(spec=ITranslationClient)


@pytest.fixture
def escalation_service(session_factory, notifier, sla_config_manager) -> EscalationService:
    return EscalationService(
        store=SQLAlchemyEscalationStore(session_factory),
        notifier=notifier,
        config_provider=sla_config_manager,
        notification_timeout=1.0,
    )


@pytest.fixture
async def client(
    db_session: AsyncSession,
    notifier: AsyncMock,
    sla_config_manager: SLAConfigManager,
    escalation_service: EscalationService,
    translation_client: AsyncMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Test client with database and collaborator overrides"""
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_config_provider] = lambda: sla_config_manager
    app.dependency_overrides[get_complaint_notifier] = lambda: notifier
    app.dependency_overrides[get_escalation_service] = lambda: escalation_service
    app.dependency_overrides[get_translation_client] = lambda: translation_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def complaint_payload() -> dict:
    """Valid submission in the web client's camelCase shape"""
    return {
        "studentId": fake.uuid4(),
        "studentName": fake.name(),
        "studentEmail": fake.email(),
        "registerNumber": fake.bothify(text="21CS###"),
        "category": "Hostel",
        "description": fake.sentence(),
        "hostelType": "Boys Hostel",
        "resolutionTime": 2,
    }


@pytest.fixture
def complaint_factory(db_session: AsyncSession):
    """Insert complaint rows directly, e.g. with a creation time in the past"""
    async def _create(age_hours: float = 0, **overrides) -> ComplaintModel:
        data = {
            "id": uuid4().hex,
            "student_id": fake.uuid4(),
            "student_name": fake.name(),
            "student_email": fake.email(),
            "register_number": fake.bothify(text="21CS###"),
            "category": "General",
            "description": fake.sentence(),
            "hostel_type": "Boys Hostel",
            "resolution_time_days": 7,
            "created_at": datetime.now(timezone.utc) - timedelta(hours=age_hours),
            "resolved": False,
            "escalated": False,
        }
        data.update(overrides)
        model = ComplaintModel(**data)
        db_session.add(model)
        await db_session.flush()
        return model
    return _create
