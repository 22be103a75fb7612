"""
SLA Application Services
=========================

Application services orchestrate SLA calculations and the escalation
sweep, coordinating between the pure domain layer and the collaborators
behind the interfaces below.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions, not concrete implementations
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from grievance_cell.sla.domain import (
    SLACalculator,
    SLAConfig,
    SLADashboard,
    SLASnapshot,
    SweepResult,
)
from grievance_cell.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


# ========== Interfaces (Dependency Inversion) ==========

class ISLAConfigProvider(ABC):
    """Interface for SLA configuration access."""

    @abstractmethod
    def get_config(self) -> SLAConfig:
        """Get current SLA configuration."""


class IEscalationStore(ABC):
    """Persistence needed by the escalation sweep."""

    @abstractmethod
    async def list_candidates(self) -> List[Any]:
        """Complaints that are neither resolved nor escalated."""

    @abstractmethod
    async def mark_escalated(
        self,
        complaint_id: str,
        reason: str,
        escalated_at: datetime
    ) -> bool:
        """
        Durably flip escalated to true and log the escalation.

        Returns False when the complaint was already escalated.
        """


class IEscalationNotifier(ABC):
    """Tells a stakeholder that a complaint was escalated."""

    @abstractmethod
    async def notify_escalation(self, complaint: Any, reason: str) -> bool:
        """Return True when the notification was delivered."""


# ========== Application Services ==========

class SLAService:
    """Read-side SLA views for single complaints and dashboards."""

    def __init__(self, config_provider: ISLAConfigProvider):
        self._config_provider = config_provider

    @property
    def config(self) -> SLAConfig:
        return self._config_provider.get_config()

    def snapshot(self, complaint: Any, now: Optional[datetime] = None) -> SLASnapshot:
        """Evaluate one complaint with its budget, deadline and remaining time."""
        config = self.config
        now = now or datetime.now(timezone.utc)

        return SLASnapshot(
            complaint_id=str(getattr(complaint, "id", "")),
            priority=SLACalculator.resolve_priority(complaint, config),
            budget_hours=SLACalculator.budget_hours(complaint, config),
            hours_elapsed=SLACalculator.hours_elapsed(getattr(complaint, "created_at", None), now),
            deadline=SLACalculator.deadline(complaint, config),
            evaluation=SLACalculator.evaluate(complaint, now, config),
            time_remaining=SLACalculator.time_remaining(complaint, now, config),
            escalated=bool(getattr(complaint, "escalated", False)),
        )

    def dashboard(self, complaints: Iterable[Any], now: Optional[datetime] = None) -> SLADashboard:
        """Bucket counts, compliance and open rows ordered by urgency."""
        config = self.config
        now = now or datetime.now(timezone.utc)
        complaints = list(complaints)

        open_rows = [
            self.snapshot(c, now) for c in complaints
            if not getattr(c, "resolved", False)
        ]
        open_rows.sort(key=lambda s: s.evaluation.percentage, reverse=True)

        return SLADashboard(
            status_counts=SLACalculator.status_counts(complaints, now, config),
            compliance_percentage=SLACalculator.sla_compliance(complaints, now, config),
            total=len(complaints),
            open_complaints=open_rows,
        )


class EscalationService:
    """
    Escalates overdue complaints.

    Run periodically; each run fetches the open complaints, escalates the
    ones past their deadline and notifies the escalation stakeholder.
    One complaint failing never stops the rest of the batch, and a failed
    notification never undoes an escalation.
    """

    def __init__(
        self,
        store: IEscalationStore,
        notifier: IEscalationNotifier,
        config_provider: ISLAConfigProvider,
        notification_timeout: float = 10.0
    ):
        self._store = store
        self._notifier = notifier
        self._config_provider = config_provider
        self._notification_timeout = notification_timeout
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def sweep(self, now: Optional[datetime] = None) -> SweepResult:
        """
        Run one escalation pass.

        Returns:
            SweepResult summarizing the pass
        """
        if self._running:
            logger.warning("Escalation sweep already in progress, skipping tick")
            return SweepResult(skipped=True)

        self._running = True
        try:
            with log_latency(logger, "escalation_sweep"):
                return await self._sweep(now or datetime.now(timezone.utc))
        finally:
            self._running = False

    async def _sweep(self, now: datetime) -> SweepResult:
        result = SweepResult()
        config = self._config_provider.get_config()

        try:
            candidates = await self._store.list_candidates()
        except Exception as e:
            logger.error("Escalation sweep aborted: could not fetch candidates", extra={"error": str(e)})
            result.aborted = True
            return result

        result.candidates = len(candidates)

        for complaint in candidates:
            complaint_id = str(getattr(complaint, "id", "unknown"))
            try:
                await self._process(complaint, now, config, result)
            except Exception as e:
                result.failed += 1
                logger.error(
                    "Failed to process complaint during sweep",
                    extra={"complaint_id": complaint_id, "error": str(e)}
                )

        logger.info(
            "Escalation sweep finished",
            extra={
                "candidates": result.candidates,
                "escalated": result.escalated,
                "notified": result.notified,
                "failed": result.failed
            }
        )
        return result

    async def _process(
        self,
        complaint: Any,
        now: datetime,
        config: SLAConfig,
        result: SweepResult
    ) -> None:
        if not SLACalculator.should_auto_escalate(complaint, now, config):
            return

        complaint_id = str(complaint.id)
        reason = SLACalculator.escalation_reason(complaint, now, config)

        if not await self._store.mark_escalated(complaint_id, reason, now):
            logger.info("Complaint already escalated", extra={"complaint_id": complaint_id})
            return

        result.escalated += 1
        result.escalated_ids.append(complaint_id)
        logger.warning(
            "Complaint escalated",
            extra={
                "complaint_id": complaint_id,
                "deadline": SLACalculator.deadline(complaint, config).isoformat(),
                "reason": reason
            }
        )

        if await self._notify(complaint, reason):
            result.notified += 1

    async def _notify(self, complaint: Any, reason: str) -> bool:
        """Best-effort notification bounded by the configured timeout."""
        complaint_id = str(getattr(complaint, "id", "unknown"))
        try:
            return await asyncio.wait_for(
                self._notifier.notify_escalation(complaint, reason),
                timeout=self._notification_timeout
            )
        except asyncio.TimeoutError:
            logger.error(
                "Escalation notification timed out",
                extra={"complaint_id": complaint_id, "timeout_seconds": self._notification_timeout}
            )
        except Exception as e:
            logger.error(
                "Escalation notification failed",
                extra={"complaint_id": complaint_id, "error": str(e)}
            )
        return False
