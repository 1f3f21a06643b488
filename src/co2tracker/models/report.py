"""Inbound position report model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from co2tracker.ingestion.normalize import parse_position, safe_float, safe_str


class PositionReport(BaseModel):
    """One aircraft's entry in a live position batch.

    Every field is optional; a report without a usable position is
    accepted by the model and skipped by the track store.

    Parameters
    ----------
    position : tuple of float or None
        ``(lon, lat)`` in degrees, parsed from a ``[lon, lat]`` pair.
    position_age_seconds : float or None
        Seconds since the position was last updated upstream.
    position_time : Any
        Opaque source timestamp of the fix, compared only for equality.
    type_code : str or None
        ICAO aircraft type designator (e.g. ``"B738"``).
    weight_class : str or None
        Wake turbulence category (``L``/``M``/``H``/``J``).
    category : str or None
        ADS-B emitter category (e.g. ``"A3"``).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    position: tuple[float, float] | None = Field(default=None)
    position_age_seconds: float | None = Field(
        default=None,
        validation_alias=AliasChoices("positionAgeSeconds", "position_age_seconds", "seen_pos"),
    )
    position_time: Any = Field(default=None, validation_alias=AliasChoices("positionTime", "position_time"))
    type_code: str | None = Field(
        default=None,
        validation_alias=AliasChoices("typeCode", "type_code", "icaoType", "t"),
    )
    weight_class: str | None = Field(default=None, validation_alias=AliasChoices("weightClass", "weight_class", "wtc"))
    category: str | None = Field(default=None, validation_alias=AliasChoices("category", "cat"))

    @field_validator("position", mode="before")
    @classmethod
    def _coerce_position(cls, value: Any) -> tuple[float, float] | None:
        return parse_position(value)

    @field_validator("position_age_seconds", mode="before")
    @classmethod
    def _coerce_age(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("type_code", "weight_class", "category", mode="before")
    @classmethod
    def _coerce_codes(cls, value: Any) -> str | None:
        return safe_str(value)

    @property
    def lon(self) -> float | None:
        return self.position[0] if self.position is not None else None

    @property
    def lat(self) -> float | None:
        return self.position[1] if self.position is not None else None
