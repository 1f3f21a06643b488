"""Emission factor tables and the tiered resolver."""

from co2tracker.emissions.resolver import FactorResolution, FactorTier, resolve_emission_factor, resolve_factor
from co2tracker.emissions.table import CATEGORY_FACTORS, TYPE_FACTORS, WEIGHT_CLASS_FACTORS

__all__ = [
    "CATEGORY_FACTORS",
    "FactorResolution",
    "FactorTier",
    "TYPE_FACTORS",
    "WEIGHT_CLASS_FACTORS",
    "resolve_emission_factor",
    "resolve_factor",
]
