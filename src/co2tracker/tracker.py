"""High-level async CO₂ tracker.

Owns the track store, the authoritative snapshot cell and the persisted
fallback aggregate, and drives them from three independent periodic loops
on a single event loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import aiohttp

from co2tracker._transport import AggregateTransport, HttpAggregateTransport
from co2tracker.config import TrackerConfig
from co2tracker.exceptions import TrackerTransportError
from co2tracker.models.aggregate import PersistedAggregate, ReportedSummary
from co2tracker.models.track import TrackSnapshot
from co2tracker.persistence import (
    JsonFileStore,
    KeyValueStore,
    load_persisted_aggregate,
    merge_session,
    save_persisted_aggregate,
)
from co2tracker.state.reconcile import AuthoritativeCell, reconcile
from co2tracker.state.store import SessionAggregate, TrackStore

_logger = logging.getLogger(__name__)

BatchProvider = Callable[[], Mapping[Any, Any] | Awaitable[Mapping[Any, Any]]]
"""Returns the latest ``entity id -> report`` mapping, sync or async."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Co2Tracker:
    """Accumulate per-aircraft distance and CO₂ from a live position feed.

    Usage::

        async with Co2Tracker(TrackerConfig.from_env()) as tracker:
            tracker.start(lambda: feed.latest())
            ...
            summary = tracker.summary()

    Or drive it manually: call :meth:`process_cycle` with each batch,
    :meth:`refresh_authoritative` and :meth:`flush_persisted` on your own
    schedule.
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        *,
        http_session: aiohttp.ClientSession | None = None,
        store: KeyValueStore | None = None,
        transport: AggregateTransport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config if config is not None else TrackerConfig()
        self._external_session = http_session is not None
        self._http_session = http_session
        self._store: KeyValueStore = store if store is not None else JsonFileStore(self._config.storage_path)
        self._transport = transport
        self._external_transport = transport is not None
        self._clock = clock
        self._tracks = TrackStore.from_config(self._config, clock=clock)
        self._authoritative = AuthoritativeCell()
        self._persisted = PersistedAggregate()
        self._persisted_loaded = False
        self._tasks: list[asyncio.Task[None]] = []
        self._pending_flush: asyncio.Future[bool] | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> Co2Tracker:
        if self._transport is None and self._config.authoritative_enabled:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpAggregateTransport(
                self._config.authoritative_url,
                self._http_session,
                timeout=self._config.fetch_timeout,
            )
        await self.load_persisted()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        await self.flush_persisted()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def tracks(self) -> TrackStore:
        return self._tracks

    @property
    def authoritative(self) -> AuthoritativeCell:
        return self._authoritative

    @property
    def persisted(self) -> PersistedAggregate:
        """Totals persisted before this process started."""
        return self._persisted

    @property
    def session(self) -> SessionAggregate:
        return self._tracks.session

    def summary(self) -> ReportedSummary:
        """Current reportable totals."""
        return reconcile(self._authoritative, self._persisted, self._tracks.session)

    def selected(self, entity_id: str | None) -> TrackSnapshot | None:
        """Track detail for the selected aircraft, or ``None`` when not tracked."""
        if not entity_id:
            return None
        return self._tracks.snapshot(entity_id)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def process_cycle(self, batch: Mapping[Any, Any], *, now: datetime | None = None) -> ReportedSummary:
        """Merge one batch of position reports, evict stale tracks, reconcile."""
        if now is None:
            now = self._clock()
        outcomes = self._tracks.apply_batch(batch, now=now)
        self._tracks.reap(now=now)
        _logger.debug("Processed %d reports: %s", sum(outcomes.values()), outcomes)
        return self.summary()

    async def refresh_authoritative(self) -> bool:
        """Fetch the authoritative aggregate; returns the new availability.

        Any failure marks the aggregate unavailable and keeps the last value.
        """
        if self._transport is None:
            self._authoritative.mark_unavailable()
            return False
        try:
            value = await self._transport.fetch()
        except TrackerTransportError as exc:
            _logger.debug("Authoritative aggregate unavailable: %s", exc)
            self._authoritative.mark_unavailable()
            return False
        except Exception:
            _logger.warning("Authoritative aggregate fetch raised unexpectedly", exc_info=True)
            self._authoritative.mark_unavailable()
            return False
        self._authoritative.publish(value, fetched_at=self._clock())
        return True

    async def load_persisted(self) -> PersistedAggregate:
        """Load the persisted aggregate once; later calls return the cached value."""
        if not self._persisted_loaded:
            loop = asyncio.get_running_loop()
            self._persisted = await loop.run_in_executor(
                None, load_persisted_aggregate, self._store, self._config.storage_key
            )
            self._persisted_loaded = True
        return self._persisted

    async def flush_persisted(self) -> bool:
        """Write persisted-at-startup plus session totals back; best-effort."""
        await self.load_persisted()
        record = merge_session(self._persisted, self._tracks.session)
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, save_persisted_aggregate, self._store, self._config.storage_key, record)
        self._pending_flush = future
        # A cancelled caller leaves the write running; stop() waits for it.
        return await asyncio.shield(future)

    # ------------------------------------------------------------------
    # Periodic loops
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self, batch_provider: BatchProvider) -> None:
        """Start the processing, refresh and flush loops on the running loop."""
        if self.is_running:
            raise RuntimeError("Tracker loops already running")

        async def _cycle() -> None:
            batch = batch_provider()
            if inspect.isawaitable(batch):
                batch = await batch
            self.process_cycle(batch)

        self._tasks = [
            asyncio.create_task(
                self._run_periodic("process cycle", self._config.update_interval, _cycle),
                name="co2tracker-process",
            ),
            asyncio.create_task(
                self._run_periodic("persisted flush", self._config.persist_interval, self.flush_persisted),
                name="co2tracker-flush",
            ),
        ]
        if self._transport is not None:
            self._tasks.append(
                asyncio.create_task(
                    self._run_periodic(
                        "authoritative refresh",
                        self._config.server_poll_interval,
                        self.refresh_authoritative,
                        immediate=True,
                    ),
                    name="co2tracker-refresh",
                )
            )
        _logger.info("CO₂ tracker started (%d loops)", len(self._tasks))

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        pending, self._pending_flush = self._pending_flush, None
        if pending is not None:
            await pending

    async def _run_periodic(
        self,
        name: str,
        interval: float,
        action: Callable[[], Awaitable[Any]],
        *,
        immediate: bool = False,
    ) -> None:
        if not immediate:
            await asyncio.sleep(interval)
        while True:
            try:
                await action()
            except Exception:
                _logger.warning("Tracker %s failed", name, exc_info=True)
            await asyncio.sleep(interval)
