"""Tiered emission factor lookup.

Precedence is strict, first match wins: exact type code, then wake
turbulence class, then ADS-B category. An unresolved lookup is a normal
outcome for aircraft with incomplete metadata, never an error.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from co2tracker.emissions.table import CATEGORY_FACTORS, TYPE_FACTORS, WEIGHT_CLASS_FACTORS
from co2tracker.ingestion.normalize import is_present


class FactorTier(StrEnum):
    TYPE = "type"
    WEIGHT_CLASS = "weight_class"
    CATEGORY = "category"


class FactorResolution(BaseModel):
    """A resolved factor together with the table entry it came from."""

    model_config = ConfigDict(frozen=True)

    factor: float
    tier: FactorTier
    key: str


def _lookup(table: Mapping[str, float], code: str | None) -> float | None:
    if not is_present(code):
        return None
    return table.get(code)  # type: ignore[arg-type]


def resolve_factor(
    type_code: str | None,
    weight_class: str | None,
    category: str | None,
) -> FactorResolution | None:
    """Resolve an emission factor and report which tier matched."""
    candidates: tuple[tuple[FactorTier, Mapping[str, float], str | None], ...] = (
        (FactorTier.TYPE, TYPE_FACTORS, type_code),
        (FactorTier.WEIGHT_CLASS, WEIGHT_CLASS_FACTORS, weight_class),
        (FactorTier.CATEGORY, CATEGORY_FACTORS, category),
    )
    for tier, table, code in candidates:
        factor = _lookup(table, code)
        if factor is not None:
            assert code is not None  # noqa: S101
            return FactorResolution(factor=factor, tier=tier, key=code)
    return None


def resolve_emission_factor(
    type_code: str | None,
    weight_class: str | None,
    category: str | None,
) -> float | None:
    """Return kg CO₂ per km for the classification, or ``None`` when unresolved."""
    resolution = resolve_factor(type_code, weight_class, category)
    return resolution.factor if resolution is not None else None
