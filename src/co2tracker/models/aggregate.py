"""Aggregate totals models.

Three sources of truth feed the reported total:

* the authoritative aggregate published by the always-on daemon,
* the persisted aggregate carried over from earlier process lifetimes,
* the session aggregate accumulated by this process (see
  :class:`co2tracker.state.store.SessionAggregate`).
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from co2tracker._constants import STORAGE_VERSION
from co2tracker.ingestion.normalize import safe_float, safe_int


def _parse_datetime(value: Any) -> datetime | None:
    """Accept ISO-8601 strings and epoch seconds; anything else is dropped."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


class AuthoritativeAggregate(BaseModel):
    """Totals published by the aggregate daemon.

    ``co2Kg``, ``distKm`` and ``count`` are required; a body missing any of
    them fails validation and is treated as unavailable.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    co2_kg: float = Field(ge=0, validation_alias=AliasChoices("co2Kg", "co2_kg"))
    distance_km: float = Field(ge=0, validation_alias=AliasChoices("distKm", "distance_km"))
    count: int = Field(ge=0)
    since: datetime | None = None
    updated: datetime | None = None

    @field_validator("since", "updated", mode="before")
    @classmethod
    def _coerce_datetimes(cls, value: Any) -> datetime | None:
        return _parse_datetime(value)


class PersistedAggregate(BaseModel):
    """Durable totals accumulated before the current process lifetime.

    Serialized as ``{"version": 2, "co2Kg": ..., "distKm": ..., "count": ...}``.
    Records written by the browser tracker (``{"v", "co2", "dist", "cnt"}``)
    are read as well.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    version: int = Field(default=STORAGE_VERSION, validation_alias=AliasChoices("version", "v"))
    co2_kg: float = Field(default=0.0, validation_alias=AliasChoices("co2Kg", "co2", "co2_kg"))
    distance_km: float = Field(default=0.0, validation_alias=AliasChoices("distKm", "dist", "distance_km"))
    count: int = Field(default=0, validation_alias=AliasChoices("count", "cnt"))

    @field_validator("co2_kg", "distance_km", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float:
        parsed = safe_float(value)
        return parsed if parsed is not None and parsed > 0 else 0.0

    @field_validator("count", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        parsed = safe_int(value)
        return parsed if parsed is not None and parsed > 0 else 0

    def to_record(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "co2Kg": self.co2_kg,
            "distKm": self.distance_km,
            "count": self.count,
        }


class SummarySource(StrEnum):
    AUTHORITATIVE = "authoritative"
    LOCAL_FALLBACK = "local_fallback"


class ReportedSummary(BaseModel):
    """Reconciled totals for display. Derived on demand, never stored.

    Parameters
    ----------
    all_time_distance_km : float
        Reported all-time distance.
    all_time_co2_kg : float
        Reported all-time CO₂ mass.
    all_time_count : int
        Reported number of distinct aircraft.
    source : SummarySource
        Which source the all-time figures came from.
    updated : datetime or None
        Last update time of the authoritative aggregate; ``None`` for the
        local fallback.
    session_distance_km, session_co2_kg, session_count
        Totals of this process lifetime only, always local.
    """

    model_config = ConfigDict(frozen=True)

    all_time_distance_km: float
    all_time_co2_kg: float
    all_time_count: int
    source: SummarySource
    updated: datetime | None = None
    session_distance_km: float = 0.0
    session_co2_kg: float = 0.0
    session_count: int = 0

    @property
    def is_degraded(self) -> bool:
        return self.source == SummarySource.LOCAL_FALLBACK
