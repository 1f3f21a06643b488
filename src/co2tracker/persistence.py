"""Best-effort persisted fallback aggregate.

The persisted aggregate only exists so something sensible can be shown when
the authoritative daemon is unreachable. Every failure here (missing key,
unreadable file, version mismatch, write error) degrades to zero/no-op and is
logged at DEBUG; nothing in this module raises to its callers.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from co2tracker._constants import STORAGE_VERSION
from co2tracker.exceptions import TrackerStoreError
from co2tracker.models.aggregate import PersistedAggregate
from co2tracker.state.store import SessionAggregate

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Structural interface of the durable store.

    Implementations may raise :class:`TrackerStoreError` (or anything else);
    callers in this module tolerate it.
    """

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Process-local store, for tests and for running without a disk."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Keys stored as one JSON object in a file, replaced atomically on write."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_text(self) -> str | None:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise TrackerStoreError(f"Cannot read {self._path}: {exc}") from exc

    def _decode(self, text: str | None) -> dict[str, Any]:
        if text is None:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TrackerStoreError(f"Corrupt store file {self._path}") from exc
        if not isinstance(data, dict):
            raise TrackerStoreError(f"Store file {self._path} is not a JSON object")
        return data

    def get(self, key: str) -> str | None:
        value = self._decode(self._read_text()).get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        # Read failures propagate; only undecodable content is replaced.
        text = self._read_text()
        try:
            data = self._decode(text)
        except TrackerStoreError:
            _logger.debug("Replacing corrupt store file %s", self._path, exc_info=True)
            data = {}
        data[key] = value
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, separators=(",", ":"))
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise TrackerStoreError(f"Cannot write {self._path}: {exc}") from exc


def load_persisted_aggregate(store: KeyValueStore, key: str) -> PersistedAggregate:
    """Read the persisted record; zero totals on any problem."""
    try:
        text = store.get(key)
    except Exception:
        _logger.debug("Persisted aggregate read failed", exc_info=True)
        return PersistedAggregate()
    if not text:
        return PersistedAggregate()

    try:
        raw = json.loads(text)
    except json.JSONDecodeError:
        _logger.debug("Ignoring malformed persisted aggregate")
        return PersistedAggregate()
    if not isinstance(raw, dict) or not ("version" in raw or "v" in raw):
        _logger.debug("Ignoring unversioned persisted aggregate")
        return PersistedAggregate()

    try:
        record = PersistedAggregate.model_validate(raw)
    except ValidationError:
        _logger.debug("Ignoring malformed persisted aggregate")
        return PersistedAggregate()

    if record.version != STORAGE_VERSION:
        _logger.debug("Ignoring persisted aggregate version %s", record.version)
        return PersistedAggregate()
    return record


def merge_session(persisted: PersistedAggregate, session: SessionAggregate) -> PersistedAggregate:
    """Totals to write back: what was persisted at startup plus this session."""
    return PersistedAggregate(
        version=STORAGE_VERSION,
        co2_kg=persisted.co2_kg + session.co2_kg,
        distance_km=persisted.distance_km + session.distance_km,
        count=persisted.count + session.count,
    )


def save_persisted_aggregate(store: KeyValueStore, key: str, aggregate: PersistedAggregate) -> bool:
    """Write the record; returns False (never raises) when the store fails."""
    try:
        store.set(key, json.dumps(aggregate.to_record(), separators=(",", ":")))
    except Exception:
        _logger.debug("Persisted aggregate write failed", exc_info=True)
        return False
    return True
