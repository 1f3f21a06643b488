"""Tracker configuration for co2tracker."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from co2tracker import _constants as const
from co2tracker.exceptions import TrackerConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _default_storage_path() -> Path:
    return Path.home() / ".cache" / "co2tracker" / const.DEFAULT_STORAGE_FILENAME


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Tracker configuration.

    Parameters
    ----------
    authoritative_url : str
        URL of the JSON document published by the always-on aggregate
        daemon (``{co2Kg, distKm, count, since, updated}``).
    authoritative_enabled : bool
        Poll the authoritative aggregate at all. When disabled the
        reported summary always uses the local fallback.
    storage_path : Path
        JSON file backing the persisted fallback aggregate.
    storage_key : str
        Key of the persisted record inside the store.
    update_interval : float
        Seconds between processing cycles.
    server_poll_interval : float
        Seconds between authoritative aggregate refreshes.
    persist_interval : float
        Seconds between persisted aggregate flushes.
    fetch_timeout : float
        Total timeout in seconds for one authoritative fetch.
    stale_position_seconds : float
        Reports whose position is older than this are ignored.
    max_jump_km : float
        Movements longer than this are treated as corrupted fixes.
    min_move_km : float
        Movements shorter than this are treated as positional noise.
    cleanup_max_age : float
        Tracks not seen for this many seconds are evicted.
    """

    authoritative_url: str = const.DEFAULT_AUTHORITATIVE_URL
    authoritative_enabled: bool = True
    storage_path: Path = dataclasses.field(default_factory=_default_storage_path)
    storage_key: str = const.STORAGE_KEY
    update_interval: float = const.UPDATE_INTERVAL
    server_poll_interval: float = const.SERVER_POLL_INTERVAL
    persist_interval: float = const.PERSIST_INTERVAL
    fetch_timeout: float = const.FETCH_TIMEOUT
    stale_position_seconds: float = const.STALE_POSITION_SECONDS
    max_jump_km: float = const.MAX_JUMP_KM
    min_move_km: float = const.MIN_MOVE_KM
    cleanup_max_age: float = const.CLEANUP_MAX_AGE_SECONDS

    def __post_init__(self) -> None:
        for name in ("update_interval", "server_poll_interval", "persist_interval", "fetch_timeout"):
            if getattr(self, name) <= 0:
                raise TrackerConfigError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("stale_position_seconds", "max_jump_km", "min_move_km", "cleanup_max_age"):
            if getattr(self, name) < 0:
                raise TrackerConfigError(f"{name} must not be negative, got {getattr(self, name)}")
        if self.min_move_km >= self.max_jump_km:
            raise TrackerConfigError("min_move_km must be smaller than max_jump_km")
        if not self.storage_key.strip():
            raise TrackerConfigError("storage_key must be non-empty")
        if not isinstance(self.storage_path, Path):
            object.__setattr__(self, "storage_path", Path(self.storage_path))

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from environment variables.

        Reads optional ``CO2TRACKER_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TrackerConfig
            Populated configuration.

        Raises
        ------
        TrackerConfigError
            When a numeric variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        url = env.get("CO2TRACKER_AUTHORITATIVE_URL")
        if url is not None:
            config_kwargs["authoritative_url"] = url

        path = env.get("CO2TRACKER_STORAGE_PATH")
        if path is not None:
            config_kwargs["storage_path"] = Path(path).expanduser()

        key = env.get("CO2TRACKER_STORAGE_KEY")
        if key is not None:
            config_kwargs["storage_key"] = key

        if "authoritative_enabled" not in overrides:
            config_kwargs["authoritative_enabled"] = _env_bool(env.get("CO2TRACKER_AUTHORITATIVE_ENABLED"), True)

        _ENV_FLOAT_MAP = {
            "CO2TRACKER_UPDATE_INTERVAL": "update_interval",
            "CO2TRACKER_SERVER_POLL_INTERVAL": "server_poll_interval",
            "CO2TRACKER_PERSIST_INTERVAL": "persist_interval",
            "CO2TRACKER_FETCH_TIMEOUT": "fetch_timeout",
            "CO2TRACKER_STALE_POSITION_SECONDS": "stale_position_seconds",
            "CO2TRACKER_MAX_JUMP_KM": "max_jump_km",
            "CO2TRACKER_MIN_MOVE_KM": "min_move_km",
            "CO2TRACKER_CLEANUP_MAX_AGE": "cleanup_max_age",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(val)
            except ValueError as exc:
                raise TrackerConfigError(f"{env_key} must be a number, got {val!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
