"""Per-aircraft track snapshot returned by the selection query."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from co2tracker.emissions.resolver import FactorResolution


class TrackSnapshot(BaseModel):
    """Read-only copy of one aircraft's accumulated state.

    ``factor`` is ``None`` when the current classification does not
    resolve to any emission factor.
    """

    model_config = ConfigDict(frozen=True)

    entity_id: str
    distance_km: float
    co2_kg: float
    type_code: str | None = None
    weight_class: str | None = None
    category: str | None = None
    factor: FactorResolution | None = None
    last_seen_at: datetime | None = None

    @property
    def has_emissions(self) -> bool:
        return self.factor is not None and self.co2_kg > 0
