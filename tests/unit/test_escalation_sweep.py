"""
Unit Tests for EscalationService

Covers:
1. Overdue / not-yet-overdue selection
2. Idempotence across runs
3. Per-complaint failure isolation
4. Batch fetch failure aborting the tick
5. Best-effort, time-bounded notification
6. Overlapping ticks
"""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List
from unittest.mock import AsyncMock

import pytest

from grievance_cell.complaints.domain import Complaint
from grievance_cell.sla.application import (
    EscalationService,
    IEscalationNotifier,
    IEscalationStore,
    SLAService,
)
from grievance_cell.sla.domain import SLAConfig
from grievance_cell.sla.infrastructure import SLAConfigManager

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_complaint(complaint_id: str, age_hours: float, category: str = "Medical", **fields) -> Complaint:
    data = dict(
        id=complaint_id,
        student_id="s-1",
        student_name="Asha",
        student_email="asha@example.edu",
        register_number="21CS001",
        category=category,
        description="Water leakage",
        hostel_type="Girls Hostel",
        resolution_time_days=1,
        created_at=NOW - timedelta(hours=age_hours),
    )
    data.update(fields)
    return Complaint(**data)


class InMemoryEscalationStore(IEscalationStore):
    """Store honouring the resolved/escalated filter like the SQL one"""

    def __init__(self, complaints: List[Complaint]):
        self.complaints: Dict[str, Complaint] = {c.id: c for c in complaints}
        self.marked: List[str] = []

    async def list_candidates(self):
        return [c for c in self.complaints.values() if not c.resolved and not c.escalated]

    async def mark_escalated(self, complaint_id, reason, escalated_at):
        complaint = self.complaints[complaint_id]
        if complaint.escalated:
            return False
        complaint.escalated = True
        complaint.escalated_at = escalated_at
        complaint.escalation_reason = reason
        self.marked.append(complaint_id)
        return True


@pytest.fixture
def config_provider():
    return SLAConfigManager(SLAConfig())


@pytest.fixture
def escalation_notifier():
    mock = AsyncMock(spec=IEscalationNotifier)
    mock.notify_escalation.return_value = True
    return mock


def build_service(store, notifier, config_provider, timeout=1.0):
    return EscalationService(store, notifier, config_provider, notification_timeout=timeout)


# =============================================================================
# SELECTION
# =============================================================================
class TestSweepSelection:
    """Which complaints get escalated"""

    async def test_escalates_only_overdue(self, escalation_notifier, config_provider):
        store = InMemoryEscalationStore([
            make_complaint("late", age_hours=30),
            make_complaint("fresh", age_hours=2),
        ])
        service = build_service(store, escalation_notifier, config_provider)

        result = await service.sweep(NOW)

        assert result.candidates == 2
        assert result.escalated == 1
        assert result.notified == 1
        assert result.escalated_ids == ["late"]
        assert store.complaints["late"].escalated is True
        assert store.complaints["fresh"].escalated is False

    async def test_reason_passed_to_store_and_notifier(self, escalation_notifier, config_provider):
        store = InMemoryEscalationStore([make_complaint("late", age_hours=30)])
        service = build_service(store, escalation_notifier, config_provider)

        await service.sweep(NOW)

        reason = store.complaints["late"].escalation_reason
        assert reason == "Auto-escalated: 6h past SLA limit (High priority: 24h)"
        escalation_notifier.notify_escalation.assert_awaited_once()
        assert escalation_notifier.notify_escalation.await_args.args[1] == reason

    async def test_resolved_complaints_untouched(self, escalation_notifier, config_provider):
        store = InMemoryEscalationStore([make_complaint("done", age_hours=300, resolved=True)])
        service = build_service(store, escalation_notifier, config_provider)

        result = await service.sweep(NOW)

        assert result.candidates == 0
        assert store.complaints["done"].escalated is False
        escalation_notifier.notify_escalation.assert_not_awaited()

    async def test_requested_budget_source(self, escalation_notifier):
        provider = SLAConfigManager(SLAConfig(budget_source="requested"))
        # Low priority (168h) but the submitter asked for one day
        store = InMemoryEscalationStore([make_complaint("c1", age_hours=30, category="General")])
        service = build_service(store, escalation_notifier, provider)

        result = await service.sweep(NOW)

        assert result.escalated_ids == ["c1"]
        assert store.complaints["c1"].escalation_reason == "Auto-escalated: Exceeded resolution time of 1 days"

    async def test_priority_budget_source_ignores_requested_days(self, escalation_notifier, config_provider):
        store = InMemoryEscalationStore([make_complaint("c1", age_hours=30, category="General")])
        service = build_service(store, escalation_notifier, config_provider)

        result = await service.sweep(NOW)

        assert result.escalated == 0

    async def test_unparseable_created_at_is_skipped(self, escalation_notifier, config_provider):
        store = InMemoryEscalationStore([make_complaint("bad", age_hours=0, created_at=None)])
        service = build_service(store, escalation_notifier, config_provider)

        result = await service.sweep(NOW)

        assert result.escalated == 0
        assert result.failed == 0


# =============================================================================
# IDEMPOTENCE
# =============================================================================
class TestSweepIdempotence:
    """Second run does nothing"""

    async def test_second_run_does_not_re_escalate(self, escalation_notifier, config_provider):
        store = InMemoryEscalationStore([
            make_complaint("a", age_hours=30),
            make_complaint("b", age_hours=50),
        ])
        service = build_service(store, escalation_notifier, config_provider)

        first = await service.sweep(NOW)
        second = await service.sweep(NOW)

        assert first.escalated == 2
        assert second.candidates == 0
        assert second.escalated == 0
        assert store.marked == ["a", "b"]
        assert escalation_notifier.notify_escalation.await_count == 2

    async def test_store_reporting_already_escalated_skips_notification(self, escalation_notifier, config_provider):
        store = AsyncMock(spec=IEscalationStore)
        store.list_candidates.return_value = [make_complaint("a", age_hours=30)]
        store.mark_escalated.return_value = False
        service = build_service(store, escalation_notifier, config_provider)

        result = await service.sweep(NOW)

        assert result.escalated == 0
        escalation_notifier.notify_escalation.assert_not_awaited()


# =============================================================================
# FAILURE HANDLING
# =============================================================================
class TestSweepFailures:
    """Errors never escape the sweep"""

    async def test_middle_failure_does_not_stop_batch(self, escalation_notifier, config_provider):
        store = AsyncMock(spec=IEscalationStore)
        store.list_candidates.return_value = [
            make_complaint("first", age_hours=30),
            make_complaint("second", age_hours=30),
            make_complaint("third", age_hours=30),
        ]
        store.mark_escalated.side_effect = [True, RuntimeError("write failed"), True]
        service = build_service(store, escalation_notifier, config_provider)

        result = await service.sweep(NOW)

        assert result.escalated_ids == ["first", "third"]
        assert result.failed == 1
        assert store.mark_escalated.await_count == 3

    async def test_malformed_candidate_is_isolated(self, escalation_notifier, config_provider):
        class Broken:
            id = "broken"
            resolved = False
            escalated = False
            category = "Medical"

            @property
            def created_at(self):
                raise ValueError("corrupt row")

        store = AsyncMock(spec=IEscalationStore)
        store.list_candidates.return_value = [Broken(), make_complaint("ok", age_hours=30)]
        store.mark_escalated.return_value = True
        service = build_service(store, escalation_notifier, config_provider)

        result = await service.sweep(NOW)

        assert result.failed == 1
        assert result.escalated_ids == ["ok"]

    async def test_fetch_failure_aborts_tick(self, escalation_notifier, config_provider):
        store = AsyncMock(spec=IEscalationStore)
        store.list_candidates.side_effect = ConnectionError("database unreachable")
        service = build_service(store, escalation_notifier, config_provider)

        result = await service.sweep(NOW)

        assert result.aborted is True
        assert result.escalated == 0
        store.mark_escalated.assert_not_awaited()

    async def test_next_tick_retries_after_abort(self, escalation_notifier, config_provider):
        store = AsyncMock(spec=IEscalationStore)
        store.list_candidates.side_effect = [ConnectionError("down"), [make_complaint("a", age_hours=30)]]
        store.mark_escalated.return_value = True
        service = build_service(store, escalation_notifier, config_provider)

        first = await service.sweep(NOW)
        second = await service.sweep(NOW)

        assert first.aborted is True
        assert second.escalated_ids == ["a"]

    async def test_notification_failure_keeps_escalation(self, escalation_notifier, config_provider):
        escalation_notifier.notify_escalation.side_effect = OSError("smtp down")
        store = InMemoryEscalationStore([make_complaint("a", age_hours=30)])
        service = build_service(store, escalation_notifier, config_provider)

        result = await service.sweep(NOW)

        assert result.escalated == 1
        assert result.notified == 0
        assert result.failed == 0
        assert store.complaints["a"].escalated is True

    async def test_undelivered_notification_counts_as_not_notified(self, escalation_notifier, config_provider):
        escalation_notifier.notify_escalation.return_value = False
        store = InMemoryEscalationStore([make_complaint("a", age_hours=30)])
        service = build_service(store, escalation_notifier, config_provider)

        result = await service.sweep(NOW)

        assert result.escalated == 1
        assert result.notified == 0

    async def test_slow_notification_is_bounded(self, escalation_notifier, config_provider):
        async def hang(*args, **kwargs):
            await asyncio.sleep(10)
            return True

        escalation_notifier.notify_escalation.side_effect = hang
        store = InMemoryEscalationStore([
            make_complaint("a", age_hours=30),
            make_complaint("b", age_hours=30),
        ])
        service = build_service(store, escalation_notifier, config_provider, timeout=0.05)

        result = await asyncio.wait_for(service.sweep(NOW), timeout=2)

        assert result.escalated == 2
        assert result.notified == 0


# =============================================================================
# OVERLAP
# =============================================================================
class TestSweepOverlap:
    """Only one sweep at a time"""

    async def test_overlapping_tick_is_skipped(self, escalation_notifier, config_provider):
        release = asyncio.Event()

        async def slow_fetch():
            await release.wait()
            return []

        store = AsyncMock(spec=IEscalationStore)
        store.list_candidates.side_effect = slow_fetch
        service = build_service(store, escalation_notifier, config_provider)

        running = asyncio.create_task(service.sweep(NOW))
        await asyncio.sleep(0)
        assert service.is_running is True

        skipped = await service.sweep(NOW)
        release.set()
        finished = await running

        assert skipped.skipped is True
        assert finished.skipped is False
        assert service.is_running is False
        assert store.list_candidates.await_count == 1

    async def test_guard_released_after_abort(self, escalation_notifier, config_provider):
        store = AsyncMock(spec=IEscalationStore)
        store.list_candidates.side_effect = ConnectionError("down")
        service = build_service(store, escalation_notifier, config_provider)

        await service.sweep(NOW)

        assert service.is_running is False


# =============================================================================
# SLA SERVICE
# =============================================================================
class TestSLAService:
    """Snapshots and dashboard"""

    def test_snapshot(self, config_provider):
        service = SLAService(config_provider)
        complaint = make_complaint("a", age_hours=20)

        snapshot = service.snapshot(complaint, NOW)

        assert snapshot.complaint_id == "a"
        assert snapshot.priority == "High"
        assert snapshot.budget_hours == 24
        assert snapshot.hours_elapsed == 20
        assert snapshot.deadline == complaint.created_at + timedelta(hours=24)
        assert snapshot.evaluation.status == "Critical"
        assert snapshot.time_remaining == "4h left"

    def test_dashboard_orders_open_rows_by_urgency(self, config_provider):
        service = SLAService(config_provider)
        complaints = [
            make_complaint("calm", age_hours=1),
            make_complaint("urgent", age_hours=23),
            make_complaint("closed", age_hours=5, resolved=True, resolved_at=NOW),
        ]

        dashboard = service.dashboard(complaints, NOW)

        assert dashboard.total == 3
        assert [s.complaint_id for s in dashboard.open_complaints] == ["urgent", "calm"]
        assert dashboard.status_counts["Resolved"] == 1
        assert dashboard.compliance_percentage == 100

    def test_policy_reload_applies_immediately(self, tmp_path):
        path = tmp_path / "sla.yaml"
        path.write_text("budget_hours:\n  High: 24\n")
        provider = SLAConfigManager()
        provider.load(path)
        service = SLAService(provider)
        complaint = make_complaint("a", age_hours=20)

        path.write_text("budget_hours:\n  High: 10\n")
        assert provider.reload() is True

        assert service.snapshot(complaint, NOW).evaluation.status == "Overdue"
