from __future__ import annotations

import asyncio
import json
import threading
import time
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from co2tracker.config import TrackerConfig
from co2tracker.exceptions import TrackerTransportError
from co2tracker.models.aggregate import AuthoritativeAggregate, SummarySource
from co2tracker.persistence import MemoryStore
from co2tracker.tracker import Co2Tracker

KEY = "gaia_co2_tracker"


def _dt(seconds: float = 0.0) -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC) + timedelta(seconds=seconds)


class _FakeTransport:
    def __init__(self, results: list[AuthoritativeAggregate | Exception]) -> None:
        self._results = list(results)
        self.calls = 0

    async def fetch(self) -> AuthoritativeAggregate:
        self.calls += 1
        result = self._results.pop(0) if len(self._results) > 1 else self._results[0]
        if isinstance(result, Exception):
            raise result
        return result


def _aggregate() -> AuthoritativeAggregate:
    return AuthoritativeAggregate.model_validate(
        {"co2Kg": 9000.0, "distKm": 800.0, "count": 77, "updated": "2026-01-01T00:00:00Z"}
    )


def _config(tmp_path: Path, **overrides: object) -> TrackerConfig:
    return TrackerConfig(storage_path=tmp_path / "store.json", **overrides)  # type: ignore[arg-type]


def _batch(lon: float, lat: float, t: int) -> dict[str, dict[str, object]]:
    return {"a1": {"position": [lon, lat], "positionTime": t, "positionAgeSeconds": 0, "typeCode": "B738"}}


@pytest.mark.asyncio
async def test_process_cycle_and_selection(tmp_path: Path) -> None:
    tracker = Co2Tracker(_config(tmp_path), store=MemoryStore(), transport=_FakeTransport([_aggregate()]))
    async with tracker:
        tracker.process_cycle(_batch(0.0, 0.0, 1), now=_dt())
        summary = tracker.process_cycle(_batch(0.0, 0.1, 2), now=_dt(5))

        assert summary.source == SummarySource.LOCAL_FALLBACK
        assert summary.session_count == 1
        assert summary.all_time_co2_kg == pytest.approx(111.195, rel=1e-4)

        snapshot = tracker.selected("a1")
        assert snapshot is not None
        assert snapshot.distance_km == pytest.approx(11.1195, rel=1e-4)
        assert snapshot.factor is not None
        assert snapshot.factor.factor == 10.0
        assert tracker.selected("unknown") is None
        assert tracker.selected(None) is None


@pytest.mark.asyncio
async def test_process_cycle_reaps_stale_tracks(tmp_path: Path) -> None:
    tracker = Co2Tracker(_config(tmp_path, cleanup_max_age=60.0), store=MemoryStore(), transport=_FakeTransport([_aggregate()]))
    async with tracker:
        tracker.process_cycle(_batch(0.0, 0.0, 1), now=_dt())
        tracker.process_cycle({}, now=_dt(61))

        assert tracker.selected("a1") is None
        assert tracker.summary().session_count == 1


@pytest.mark.asyncio
async def test_authoritative_preferred_when_available(tmp_path: Path) -> None:
    transport = _FakeTransport([_aggregate()])
    async with Co2Tracker(_config(tmp_path), store=MemoryStore(), transport=transport) as tracker:
        tracker.process_cycle(_batch(0.0, 0.0, 1), now=_dt())
        tracker.process_cycle(_batch(0.0, 0.1, 2), now=_dt(5))

        assert await tracker.refresh_authoritative() is True
        summary = tracker.summary()

        assert summary.source == SummarySource.AUTHORITATIVE
        assert summary.all_time_co2_kg == 9000.0
        assert summary.all_time_distance_km == 800.0
        assert summary.all_time_count == 77


@pytest.mark.asyncio
async def test_three_failed_fetches_fall_back_to_persisted_plus_session(tmp_path: Path) -> None:
    store = MemoryStore({KEY: json.dumps({"version": 2, "co2Kg": 500.0, "distKm": 50.0, "count": 10})})
    transport = _FakeTransport(
        [
            _aggregate(),
            TrackerTransportError("HTTP 503", status_code=503),
            TrackerTransportError("timed out"),
            TrackerTransportError("Invalid JSON"),
        ]
    )
    async with Co2Tracker(_config(tmp_path), store=store, transport=transport) as tracker:
        assert await tracker.refresh_authoritative() is True
        tracker.process_cycle(_batch(0.0, 0.0, 1), now=_dt())
        tracker.process_cycle(_batch(0.0, 0.1, 2), now=_dt(5))

        for _ in range(3):
            assert await tracker.refresh_authoritative() is False

        summary = tracker.summary()
        session = tracker.session
        assert summary.source == SummarySource.LOCAL_FALLBACK
        assert summary.all_time_co2_kg == 500.0 + session.co2_kg
        assert summary.all_time_distance_km == 50.0 + session.distance_km
        assert summary.all_time_count == 10 + session.count
        # Last authoritative value is kept for when the daemon comes back.
        assert tracker.authoritative.value == _aggregate()


@pytest.mark.asyncio
async def test_unexpected_transport_exception_marks_unavailable(tmp_path: Path) -> None:
    transport = _FakeTransport([RuntimeError("boom")])
    async with Co2Tracker(_config(tmp_path), store=MemoryStore(), transport=transport) as tracker:
        assert await tracker.refresh_authoritative() is False
        assert tracker.summary().source == SummarySource.LOCAL_FALLBACK


@pytest.mark.asyncio
async def test_flush_writes_startup_total_plus_session_without_double_counting(tmp_path: Path) -> None:
    store = MemoryStore({KEY: json.dumps({"version": 2, "co2Kg": 100.0, "distKm": 10.0, "count": 3})})
    async with Co2Tracker(_config(tmp_path), store=store, transport=_FakeTransport([_aggregate()])) as tracker:
        tracker.process_cycle(_batch(0.0, 0.0, 1), now=_dt())
        tracker.process_cycle(_batch(0.0, 0.1, 2), now=_dt(5))

        assert await tracker.flush_persisted() is True
        assert await tracker.flush_persisted() is True

        record = json.loads(store.get(KEY) or "")
        session = tracker.session
        assert record["version"] == 2
        assert record["co2Kg"] == pytest.approx(100.0 + session.co2_kg)
        assert record["distKm"] == pytest.approx(10.0 + session.distance_km)
        assert record["count"] == 4


@pytest.mark.asyncio
async def test_exit_flushes_to_json_file(tmp_path: Path) -> None:
    config = _config(tmp_path, authoritative_enabled=False)
    async with Co2Tracker(config) as tracker:
        tracker.process_cycle(_batch(0.0, 0.0, 1), now=_dt())

    data = json.loads(config.storage_path.read_text(encoding="utf-8"))
    assert json.loads(data[KEY])["count"] == 1

    async with Co2Tracker(config) as tracker:
        assert tracker.persisted.count == 1
        assert tracker.summary().all_time_count == 1


@pytest.mark.asyncio
async def test_disabled_authoritative_always_falls_back(tmp_path: Path) -> None:
    async with Co2Tracker(_config(tmp_path, authoritative_enabled=False), store=MemoryStore()) as tracker:
        assert await tracker.refresh_authoritative() is False
        assert tracker.summary().source == SummarySource.LOCAL_FALLBACK


@pytest.mark.asyncio
async def test_periodic_loops_drive_all_three_tasks(tmp_path: Path) -> None:
    store = MemoryStore()
    transport = _FakeTransport([_aggregate()])
    config = _config(tmp_path, update_interval=0.01, server_poll_interval=0.01, persist_interval=0.02)
    batches = iter([_batch(0.0, 0.0, 1), _batch(0.0, 0.1, 2)])

    async def provider() -> dict[str, dict[str, object]]:
        return next(batches, {})

    async with Co2Tracker(config, store=store, transport=transport) as tracker:
        tracker.start(provider)
        assert tracker.is_running
        with pytest.raises(RuntimeError):
            tracker.start(provider)
        await asyncio.sleep(0.2)
        await tracker.stop()
        assert not tracker.is_running

        summary = tracker.summary()
        assert transport.calls >= 2
        assert summary.source == SummarySource.AUTHORITATIVE
        assert tracker.session.co2_kg == pytest.approx(111.195, rel=1e-4)
        assert store.get(KEY) is not None


@pytest.mark.asyncio
async def test_failing_batch_provider_does_not_stop_loops(tmp_path: Path) -> None:
    calls = 0

    def provider() -> dict[str, dict[str, object]]:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise ValueError("feed not ready")
        return _batch(0.0, 0.0, calls)

    config = _config(tmp_path, update_interval=0.01, authoritative_enabled=False)
    async with Co2Tracker(config, store=MemoryStore()) as tracker:
        tracker.start(provider)
        await asyncio.sleep(0.1)
        await tracker.stop()

        assert calls >= 2
        assert tracker.selected("a1") is not None


class _SlowStore(MemoryStore):
    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self.active = 0
        self.max_active = 0
        self.writes = 0

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(0.1)
        super().set(key, value)
        with self._lock:
            self.active -= 1
            self.writes += 1


@pytest.mark.asyncio
async def test_exit_waits_for_in_flight_flush_before_final_flush(tmp_path: Path) -> None:
    store = _SlowStore()
    config = _config(tmp_path, update_interval=10.0, persist_interval=0.01, authoritative_enabled=False)

    async with Co2Tracker(config, store=store) as tracker:
        tracker.start(dict)
        await asyncio.sleep(0.05)

    assert store.writes == 2
    assert store.max_active == 1
