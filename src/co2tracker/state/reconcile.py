"""Source precedence for the reported all-time totals.

The authoritative aggregate, when the latest fetch succeeded, covers every
session ever tracked and wins outright. Otherwise the persisted aggregate
plus this session's totals are reported and labelled as a local fallback.
"""

from __future__ import annotations

from datetime import UTC, datetime

from co2tracker.models.aggregate import AuthoritativeAggregate, PersistedAggregate, ReportedSummary, SummarySource
from co2tracker.state.store import SessionAggregate


class AuthoritativeCell:
    """Latest known authoritative snapshot plus its availability flag.

    Written only by the refresh task, read by reconciliation. A failed
    refresh flips availability off but keeps the last value.
    """

    def __init__(self) -> None:
        self._value: AuthoritativeAggregate | None = None
        self._available = False
        self._fetched_at: datetime | None = None

    @property
    def value(self) -> AuthoritativeAggregate | None:
        return self._value

    @property
    def available(self) -> bool:
        return self._available and self._value is not None

    @property
    def fetched_at(self) -> datetime | None:
        return self._fetched_at

    def publish(self, value: AuthoritativeAggregate, *, fetched_at: datetime | None = None) -> None:
        self._value = value
        self._available = True
        self._fetched_at = fetched_at or datetime.now(UTC)

    def mark_unavailable(self) -> None:
        self._available = False


def reconcile(
    authoritative: AuthoritativeCell,
    persisted: PersistedAggregate,
    session: SessionAggregate,
) -> ReportedSummary:
    """Produce the reported summary from the three sources."""
    session_fields = {
        "session_distance_km": session.distance_km,
        "session_co2_kg": session.co2_kg,
        "session_count": session.count,
    }

    remote = authoritative.value
    if authoritative.available and remote is not None:
        return ReportedSummary(
            all_time_distance_km=remote.distance_km,
            all_time_co2_kg=remote.co2_kg,
            all_time_count=remote.count,
            source=SummarySource.AUTHORITATIVE,
            updated=remote.updated,
            **session_fields,
        )

    return ReportedSummary(
        all_time_distance_km=persisted.distance_km + session.distance_km,
        all_time_co2_kg=persisted.co2_kg + session.co2_kg,
        all_time_count=persisted.count + session.count,
        source=SummarySource.LOCAL_FALLBACK,
        **session_fields,
    )
