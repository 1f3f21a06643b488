"""co2tracker - Per-aircraft distance and CO₂ accumulation from live ADS-B positions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("co2tracker")
except PackageNotFoundError:
    __version__ = "0+local"
from co2tracker._transport import AggregateTransport, HttpAggregateTransport
from co2tracker.config import TrackerConfig
from co2tracker.emissions import FactorResolution, FactorTier, resolve_emission_factor, resolve_factor
from co2tracker.exceptions import (
    Co2TrackerError,
    TrackerConfigError,
    TrackerStoreError,
    TrackerTransportError,
)
from co2tracker.models import (
    AuthoritativeAggregate,
    PersistedAggregate,
    PositionReport,
    ReportedSummary,
    SummarySource,
    TrackSnapshot,
)
from co2tracker.persistence import JsonFileStore, KeyValueStore, MemoryStore
from co2tracker.state.reconcile import AuthoritativeCell, reconcile
from co2tracker.state.store import EntityTrack, ReportOutcome, SessionAggregate, TrackStore
from co2tracker.tracker import Co2Tracker

__all__ = [
    "__version__",
    "AggregateTransport",
    "AuthoritativeAggregate",
    "AuthoritativeCell",
    "Co2Tracker",
    "Co2TrackerError",
    "EntityTrack",
    "FactorResolution",
    "FactorTier",
    "HttpAggregateTransport",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PersistedAggregate",
    "PositionReport",
    "ReportOutcome",
    "ReportedSummary",
    "SessionAggregate",
    "SummarySource",
    "TrackerConfig",
    "TrackerConfigError",
    "TrackerStoreError",
    "TrackerTransportError",
    "TrackSnapshot",
    "TrackStore",
    "reconcile",
    "resolve_emission_factor",
    "resolve_factor",
]
