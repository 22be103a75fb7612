"""
SLA Value Objects
==================

Immutable value objects and pure calculations for the SLA domain.

Nothing here performs I/O; every function takes "now" explicitly so the
same inputs always give the same answer.
"""

import math
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from grievance_cell.config import Priority, SLAStatus, SLAColor, VALID_PRIORITIES
from grievance_cell.sla.domain.entities import SLAEvaluation

DEFAULT_BUDGET_HOURS: Dict[str, int] = {
    Priority.HIGH: 24,
    Priority.MEDIUM: 72,
    Priority.LOW: 168,
}

DEFAULT_PRIORITY_KEYWORDS: Dict[str, List[str]] = {
    Priority.HIGH: ["harassment", "safety", "emergency", "security", "medical"],
    Priority.MEDIUM: ["academic", "exam", "personnel", "administrative"],
}

# Lower bound (inclusive) of each band, checked top-down
STATUS_THRESHOLDS = [
    (100, SLAStatus.OVERDUE, SLAColor.OVERDUE),
    (80, SLAStatus.CRITICAL, SLAColor.CRITICAL),
    (50, SLAStatus.WARNING, SLAColor.WARNING),
]

PRIORITY_BADGE_COLORS: Dict[str, Dict[str, str]] = {
    Priority.HIGH: {"bg": "#fee2e2", "color": "#991b1b"},
    Priority.MEDIUM: {"bg": "#fef3c7", "color": "#92400e"},
    Priority.LOW: {"bg": "#dbeafe", "color": "#1e40af"},
}
DEFAULT_BADGE_COLOR = {"bg": "#e5e7eb", "color": "#374151"}


def _normalize_tier(tier: Optional[str]) -> Optional[str]:
    """'high' / 'HIGH' / 'High' -> 'High'; anything else -> None."""
    if not tier:
        return None
    candidate = str(tier).strip().capitalize()
    return candidate if candidate in VALID_PRIORITIES else None


class SLAConfig(BaseModel):
    """
    SLA policy loaded from YAML.

    Holds the tier -> budget table, the classifier keyword sets and which
    budget decides a complaint's deadline. Missing entries fall back to
    the built-in defaults.
    """
    budget_hours: Dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_BUDGET_HOURS),
        description="Resolution budget in hours by priority tier"
    )
    priority_keywords: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_PRIORITY_KEYWORDS.items()},
        description="Category keywords per tier (High checked before Medium)"
    )
    budget_source: Literal["priority", "requested"] = Field(
        default="priority",
        description="'priority' uses the tier table; 'requested' uses resolution_time_days"
    )

    @field_validator("budget_hours")
    @classmethod
    def validate_budget_hours(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Normalize tier names and fill missing tiers with defaults."""
        normalized = {}
        for tier, hours in v.items():
            name = _normalize_tier(tier)
            if name is None:
                raise ValueError(f"Unknown priority tier: {tier}")
            if hours <= 0:
                raise ValueError(f"Budget for {name} must be positive")
            normalized[name] = int(hours)

        for tier, hours in DEFAULT_BUDGET_HOURS.items():
            normalized.setdefault(tier, hours)
        return normalized

    @field_validator("priority_keywords")
    @classmethod
    def validate_priority_keywords(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """Lower-case keywords; missing tiers keep their defaults."""
        normalized = {}
        for tier, words in v.items():
            name = _normalize_tier(tier)
            if name is None:
                raise ValueError(f"Unknown priority tier: {tier}")
            normalized[name] = [w.lower() for w in words if w]

        for tier, words in DEFAULT_PRIORITY_KEYWORDS.items():
            normalized.setdefault(tier, list(words))
        return normalized

    def get_budget_hours(self, tier: Optional[str]) -> int:
        """
        Resolution budget for a tier.

        Unrecognized or missing tiers get the Low budget.
        """
        name = _normalize_tier(tier) or Priority.LOW
        return self.budget_hours.get(name, self.budget_hours[Priority.LOW])

    def classify(self, category: Optional[str]) -> str:
        """
        Derive a priority tier from free-text category.

        First matching tier wins: High, then Medium, else Low.
        """
        text = (category or "").lower()
        for tier in (Priority.HIGH, Priority.MEDIUM):
            if any(keyword in text for keyword in self.priority_keywords.get(tier, [])):
                return tier
        return Priority.LOW


DEFAULT_SLA_CONFIG = SLAConfig()


def _field(complaint: Any, name: str, default: Any = None) -> Any:
    if isinstance(complaint, Mapping):
        return complaint.get(name, default)
    return getattr(complaint, name, default)


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Complaints may be ORM rows, domain entities or plain mappings; only
    created_at, resolved, resolved_at, escalated, priority, category and
    resolution_time_days are read.
    """

    @staticmethod
    def parse_timestamp(value: Any) -> Optional[datetime]:
        """
        Coerce a stored timestamp to an aware UTC datetime.

        Naive datetimes are taken as UTC; unparseable values give None.
        """
        if value is None:
            return None
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return None
        if not isinstance(value, datetime):
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @staticmethod
    def _now(now: Optional[datetime]) -> datetime:
        return SLACalculator.parse_timestamp(now) or datetime.now(timezone.utc)

    @staticmethod
    def hours_elapsed(created_at: Any, now: Optional[datetime] = None) -> int:
        """Whole hours since creation, never negative; 0 when created_at is unusable."""
        created = SLACalculator.parse_timestamp(created_at)
        if created is None:
            return 0
        seconds = (SLACalculator._now(now) - created).total_seconds()
        return max(0, math.floor(seconds / 3600))

    @staticmethod
    def resolve_priority(complaint: Any, config: SLAConfig = DEFAULT_SLA_CONFIG) -> str:
        """Explicit priority if stored, otherwise classified from category."""
        explicit = _normalize_tier(_field(complaint, "priority"))
        return explicit or config.classify(_field(complaint, "category"))

    @staticmethod
    def _requested_hours(complaint: Any) -> Optional[int]:
        days = _field(complaint, "resolution_time_days")
        try:
            days = int(days)
        except (TypeError, ValueError):
            return None
        return days * 24 if days > 0 else None

    @staticmethod
    def budget_hours(complaint: Any, config: SLAConfig = DEFAULT_SLA_CONFIG) -> int:
        """
        The authoritative budget for a complaint.

        With budget_source="requested" the submitter's resolution_time_days
        is used when valid; otherwise the priority tier table applies.
        """
        if config.budget_source == "requested":
            requested = SLACalculator._requested_hours(complaint)
            if requested is not None:
                return requested
        return config.get_budget_hours(SLACalculator.resolve_priority(complaint, config))

    @staticmethod
    def deadline(complaint: Any, config: SLAConfig = DEFAULT_SLA_CONFIG) -> Optional[datetime]:
        """created_at + budget, or None when created_at is unusable."""
        created = SLACalculator.parse_timestamp(_field(complaint, "created_at"))
        if created is None:
            return None
        return created + timedelta(hours=SLACalculator.budget_hours(complaint, config))

    @staticmethod
    def percentage(hours_elapsed: int, budget_hours: int) -> int:
        """Consumed budget, rounded half-up and clamped to [0, 100]."""
        if budget_hours <= 0:
            return 100
        raw = hours_elapsed / budget_hours * 100
        return max(0, min(100, math.floor(raw + 0.5)))

    @staticmethod
    def evaluate(
        complaint: Any,
        now: Optional[datetime] = None,
        config: SLAConfig = DEFAULT_SLA_CONFIG
    ) -> SLAEvaluation:
        """
        Compute the display SLA state of a complaint.

        Resolved complaints are always Resolved / 100%, whatever their age.
        """
        if _field(complaint, "resolved", False):
            return SLAEvaluation(SLAStatus.RESOLVED, 100, SLAColor.RESOLVED)

        elapsed = SLACalculator.hours_elapsed(_field(complaint, "created_at"), now)
        pct = SLACalculator.percentage(elapsed, SLACalculator.budget_hours(complaint, config))

        for threshold, status, color in STATUS_THRESHOLDS:
            if pct >= threshold:
                return SLAEvaluation(status, pct, color)
        return SLAEvaluation(SLAStatus.ON_TRACK, pct, SLAColor.ON_TRACK)

    @staticmethod
    def time_remaining(
        complaint: Any,
        now: Optional[datetime] = None,
        config: SLAConfig = DEFAULT_SLA_CONFIG
    ) -> str:
        """'Resolved', 'Nh left', 'Nd left', 'Nh overdue' or 'Nd overdue'."""
        if _field(complaint, "resolved", False):
            return "Resolved"

        elapsed = SLACalculator.hours_elapsed(_field(complaint, "created_at"), now)
        remaining = SLACalculator.budget_hours(complaint, config) - elapsed

        if remaining <= 0:
            overdue = abs(remaining)
            return f"{overdue}h overdue" if overdue < 24 else f"{overdue // 24}d overdue"
        return f"{remaining}h left" if remaining < 24 else f"{remaining // 24}d left"

    @staticmethod
    def is_overdue(
        complaint: Any,
        now: Optional[datetime] = None,
        config: SLAConfig = DEFAULT_SLA_CONFIG
    ) -> bool:
        """Unresolved and strictly past its budget in whole hours."""
        if _field(complaint, "resolved", False):
            return False
        elapsed = SLACalculator.hours_elapsed(_field(complaint, "created_at"), now)
        return elapsed > SLACalculator.budget_hours(complaint, config)

    @staticmethod
    def should_auto_escalate(
        complaint: Any,
        now: Optional[datetime] = None,
        config: SLAConfig = DEFAULT_SLA_CONFIG
    ) -> bool:
        """Open (neither resolved nor escalated) and past its deadline."""
        if _field(complaint, "resolved", False) or _field(complaint, "escalated", False):
            return False
        deadline = SLACalculator.deadline(complaint, config)
        return deadline is not None and SLACalculator._now(now) > deadline

    @staticmethod
    def escalation_reason(
        complaint: Any,
        now: Optional[datetime] = None,
        config: SLAConfig = DEFAULT_SLA_CONFIG
    ) -> str:
        """Human-readable reason embedding the budget that was exceeded."""
        if config.budget_source == "requested":
            requested = SLACalculator._requested_hours(complaint)
            if requested is not None:
                return f"Auto-escalated: Exceeded resolution time of {requested // 24} days"

        tier = SLACalculator.resolve_priority(complaint, config)
        budget = config.get_budget_hours(tier)
        # A partial first hour past the deadline reads as 1h
        over = max(1, SLACalculator.hours_elapsed(_field(complaint, "created_at"), now) - budget)
        return f"Auto-escalated: {over}h past SLA limit ({tier} priority: {budget}h)"

    @staticmethod
    def status_counts(
        complaints: Iterable[Any],
        now: Optional[datetime] = None,
        config: SLAConfig = DEFAULT_SLA_CONFIG
    ) -> Dict[str, int]:
        """Number of complaints in each SLA bucket."""
        counts = {status: 0 for status in (
            SLAStatus.ON_TRACK, SLAStatus.WARNING, SLAStatus.CRITICAL,
            SLAStatus.OVERDUE, SLAStatus.RESOLVED
        )}
        for complaint in complaints:
            counts[SLACalculator.evaluate(complaint, now, config).status] += 1
        return counts

    @staticmethod
    def sla_compliance(
        complaints: Iterable[Any],
        now: Optional[datetime] = None,
        config: SLAConfig = DEFAULT_SLA_CONFIG
    ) -> int:
        """
        Percentage of resolved complaints closed within budget.

        100 when nothing has been resolved yet.
        """
        resolved = [c for c in complaints if _field(c, "resolved", False)]
        if not resolved:
            return 100

        on_time = 0
        for complaint in resolved:
            closed_at = SLACalculator.parse_timestamp(_field(complaint, "resolved_at")) or now
            elapsed = SLACalculator.hours_elapsed(_field(complaint, "created_at"), closed_at)
            if elapsed <= SLACalculator.budget_hours(complaint, config):
                on_time += 1

        return math.floor(on_time / len(resolved) * 100 + 0.5)

    @staticmethod
    def priority_color(tier: Optional[str]) -> Dict[str, str]:
        """Badge colors for a priority tier."""
        return dict(PRIORITY_BADGE_COLORS.get(_normalize_tier(tier), DEFAULT_BADGE_COLOR))
