from __future__ import annotations

import pytest

from co2tracker.emissions import (
    CATEGORY_FACTORS,
    TYPE_FACTORS,
    WEIGHT_CLASS_FACTORS,
    FactorTier,
    resolve_emission_factor,
    resolve_factor,
)


def test_type_code_wins_over_fallbacks() -> None:
    # B738 = 10.0, while WTC H = 22.0 and category A5 = 22.0.
    assert resolve_emission_factor("B738", "H", "A5") == 10.0


def test_weight_class_used_when_type_unknown() -> None:
    assert resolve_emission_factor("ZZZZ", "L", "A5") == 1.5
    assert resolve_emission_factor(None, "J", None) == 43.5


def test_category_used_when_type_and_weight_class_unknown() -> None:
    assert resolve_emission_factor(None, "X", "A3") == 9.0
    assert resolve_emission_factor("", "", "A7") == 0.5


def test_zero_factor_is_resolved_not_missing() -> None:
    resolution = resolve_factor(None, None, "B1")

    assert resolution is not None
    assert resolution.factor == 0.0
    assert resolution.tier == FactorTier.CATEGORY


def test_unresolved_returns_none() -> None:
    assert resolve_emission_factor(None, None, None) is None
    assert resolve_emission_factor("b738", "m", "a3") is None


@pytest.mark.parametrize(
    ("args", "tier", "key"),
    [
        (("A320", "M", "A3"), FactorTier.TYPE, "A320"),
        ((None, "M", "A3"), FactorTier.WEIGHT_CLASS, "M"),
        ((None, None, "A3"), FactorTier.CATEGORY, "A3"),
    ],
)
def test_resolution_reports_tier_and_key(args: tuple[str | None, str | None, str | None], tier: FactorTier, key: str) -> None:
    resolution = resolve_factor(*args)

    assert resolution is not None
    assert resolution.tier == tier
    assert resolution.key == key


def test_tables_are_read_only_and_non_negative() -> None:
    for table in (TYPE_FACTORS, WEIGHT_CLASS_FACTORS, CATEGORY_FACTORS):
        assert all(value >= 0 for value in table.values())
    with pytest.raises(TypeError):
        TYPE_FACTORS["B738"] = 0.0  # type: ignore[index]
