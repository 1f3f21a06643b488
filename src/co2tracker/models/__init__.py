"""Data models for reports, aggregates and track snapshots."""

from co2tracker.models.aggregate import (
    AuthoritativeAggregate,
    PersistedAggregate,
    ReportedSummary,
    SummarySource,
)
from co2tracker.models.report import PositionReport
from co2tracker.models.track import TrackSnapshot

__all__ = [
    "AuthoritativeAggregate",
    "PersistedAggregate",
    "PositionReport",
    "ReportedSummary",
    "SummarySource",
    "TrackSnapshot",
]
