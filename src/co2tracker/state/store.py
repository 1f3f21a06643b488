"""Deterministic in-memory track store.

This is the only component allowed to merge position reports into
per-aircraft tracks and the session aggregate.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

from co2tracker import _constants as const
from co2tracker.config import TrackerConfig
from co2tracker.emissions.resolver import resolve_factor
from co2tracker.geo import haversine_km
from co2tracker.ingestion.normalize import is_present
from co2tracker.ingestion.stream import iter_batch
from co2tracker.models.report import PositionReport
from co2tracker.models.track import TrackSnapshot
from co2tracker.state.policy import Movement, classify_movement, is_duplicate_fix, is_expired, is_stale_position

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ReportOutcome(StrEnum):
    NO_POSITION = "no_position"
    STALE = "stale"
    CREATED = "created"
    DUPLICATE = "duplicate"
    BASELINE = "baseline"
    JUMP = "jump"
    MOVE = "move"
    NOISE = "noise"


@dataclass
class EntityTrack:
    """Accumulated movement and emission state for one aircraft.

    ``distance_km`` and ``co2_kg`` only grow; a track is reset only by
    eviction.
    """

    last_lat: float | None = None
    last_lon: float | None = None
    last_position_time: Any = None
    distance_km: float = 0.0
    co2_kg: float = 0.0
    type_code: str | None = None
    weight_class: str | None = None
    category: str | None = None
    last_seen_at: datetime | None = None

    @property
    def has_position(self) -> bool:
        return self.last_lat is not None and self.last_lon is not None

    def rebase(self, lon: float, lat: float, position_time: Any) -> None:
        self.last_lon = lon
        self.last_lat = lat
        self.last_position_time = position_time

    def update_classification(self, report: PositionReport) -> None:
        """Take newly supplied codes; never clear a known one."""
        if is_present(report.type_code):
            self.type_code = report.type_code
        if is_present(report.weight_class):
            self.weight_class = report.weight_class
        if is_present(report.category):
            self.category = report.category


@dataclass
class SessionAggregate:
    """Totals of the current process lifetime."""

    distance_km: float = 0.0
    co2_kg: float = 0.0
    count: int = 0


class TrackStore:
    """In-memory store for per-aircraft tracks.

    Given the same sequence of batches and clock readings it produces the
    same tracks and session totals.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utcnow,
        stale_position_seconds: float = const.STALE_POSITION_SECONDS,
        max_jump_km: float = const.MAX_JUMP_KM,
        min_move_km: float = const.MIN_MOVE_KM,
        cleanup_max_age: timedelta = timedelta(seconds=const.CLEANUP_MAX_AGE_SECONDS),
    ) -> None:
        self._clock = clock
        self._stale_position_seconds = stale_position_seconds
        self._max_jump_km = max_jump_km
        self._min_move_km = min_move_km
        self._cleanup_max_age = cleanup_max_age
        self._tracks: dict[str, EntityTrack] = {}
        self._seen: set[str] = set()
        self._session = SessionAggregate()

    @classmethod
    def from_config(cls, config: TrackerConfig, *, clock: Callable[[], datetime] = _utcnow) -> TrackStore:
        return cls(
            clock=clock,
            stale_position_seconds=config.stale_position_seconds,
            max_jump_km=config.max_jump_km,
            min_move_km=config.min_move_km,
            cleanup_max_age=timedelta(seconds=config.cleanup_max_age),
        )

    @property
    def session(self) -> SessionAggregate:
        """A copy of the session totals."""
        return copy.copy(self._session)

    def __len__(self) -> int:
        return len(self._tracks)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._tracks

    def apply(self, entity_id: str, report: PositionReport, *, now: datetime | None = None) -> ReportOutcome:
        """Merge one report into the entity's track."""
        if report.position is None:
            return ReportOutcome.NO_POSITION
        if is_stale_position(report.position_age_seconds, self._stale_position_seconds):
            return ReportOutcome.STALE

        if now is None:
            now = self._clock()
        lon, lat = report.position

        if entity_id not in self._seen:
            self._seen.add(entity_id)
            self._session.count += 1

        track = self._tracks.get(entity_id)
        if track is None:
            self._tracks[entity_id] = EntityTrack(
                last_lat=lat,
                last_lon=lon,
                last_position_time=report.position_time,
                type_code=report.type_code,
                weight_class=report.weight_class,
                category=report.category,
                last_seen_at=now,
            )
            return ReportOutcome.CREATED

        track.last_seen_at = now
        if is_duplicate_fix(track.last_position_time, report.position_time):
            return ReportOutcome.DUPLICATE

        if not track.has_position:
            track.rebase(lon, lat, report.position_time)
            return ReportOutcome.BASELINE

        assert track.last_lat is not None and track.last_lon is not None  # noqa: S101
        distance = haversine_km(track.last_lat, track.last_lon, lat, lon)
        movement = classify_movement(distance, max_jump_km=self._max_jump_km, min_move_km=self._min_move_km)

        if movement == Movement.JUMP:
            _logger.debug("Rejecting %.1f km jump for %s; rebasing", distance, entity_id)
        elif movement == Movement.MOVE:
            track.update_classification(report)
            track.distance_km += distance
            self._session.distance_km += distance

            resolution = resolve_factor(track.type_code, track.weight_class, track.category)
            if resolution is not None:
                co2 = distance * resolution.factor
                track.co2_kg += co2
                self._session.co2_kg += co2

        track.rebase(lon, lat, report.position_time)
        return ReportOutcome(movement.value)

    def apply_batch(self, batch: Mapping[Any, Any], *, now: datetime | None = None) -> dict[ReportOutcome, int]:
        """Merge every report of a batch; returns a count per outcome."""
        if now is None:
            now = self._clock()
        outcomes: dict[ReportOutcome, int] = {}
        for entity_id, report in iter_batch(batch):
            outcome = self.apply(entity_id, report, now=now)
            outcomes[outcome] = outcomes.get(outcome, 0) + 1
        return outcomes

    def reap(self, *, now: datetime | None = None) -> list[str]:
        """Evict tracks not seen within the cleanup age; returns evicted ids.

        The distinct-entity count is kept: an evicted aircraft that
        reappears starts a fresh track but is not counted again.
        """
        if now is None:
            now = self._clock()
        evicted = [
            entity_id
            for entity_id, track in self._tracks.items()
            if track.last_seen_at is not None and is_expired(now, track.last_seen_at, self._cleanup_max_age)
        ]
        for entity_id in evicted:
            del self._tracks[entity_id]
        if evicted:
            _logger.debug("Evicted %d stale tracks", len(evicted))
        return evicted

    def get_track(self, entity_id: str) -> EntityTrack | None:
        """A copy of the entity's track, or ``None`` when not tracked."""
        track = self._tracks.get(entity_id)
        return copy.copy(track) if track is not None else None

    def snapshot(self, entity_id: str) -> TrackSnapshot | None:
        """Selection query: the track with its currently resolved factor."""
        track = self._tracks.get(entity_id)
        if track is None:
            return None
        return TrackSnapshot(
            entity_id=entity_id,
            distance_km=track.distance_km,
            co2_kg=track.co2_kg,
            type_code=track.type_code,
            weight_class=track.weight_class,
            category=track.category,
            factor=resolve_factor(track.type_code, track.weight_class, track.category),
            last_seen_at=track.last_seen_at,
        )
