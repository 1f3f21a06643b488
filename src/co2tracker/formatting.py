"""Human-readable formatting of totals.

Pure functions, no state. Rendering is left to the caller.
"""

from __future__ import annotations

from datetime import UTC, datetime

from co2tracker.emissions.resolver import FactorResolution, FactorTier
from co2tracker.models.aggregate import ReportedSummary, SummarySource


def format_co2(kg: float) -> str:
    """``1234.5`` -> ``"1.23 t"``, ``12.34`` -> ``"12.3 kg"``, ``1.234`` -> ``"1.23 kg"``."""
    if kg >= 1000:
        return f"{kg / 1000:.2f} t"
    if kg >= 10:
        return f"{kg:.1f} kg"
    return f"{kg:.2f} kg"


def format_distance(km: float) -> str:
    """``1234`` -> ``"1.2k km"``, ``12.34`` -> ``"12.3 km"``, ``1.234`` -> ``"1.23 km"``."""
    if km >= 1000:
        return f"{km / 1000:.1f}k km"
    if km >= 10:
        return f"{km:.1f} km"
    return f"{km:.2f} km"


def format_age(updated: datetime | str | None, now: datetime | None = None) -> str:
    """Relative age like ``"42s ago"``; empty string when unknown."""
    if updated is None or updated == "":
        return ""
    if isinstance(updated, str):
        try:
            updated = datetime.fromisoformat(updated.strip().replace("Z", "+00:00"))
        except ValueError:
            return ""
    if updated.tzinfo is None:
        updated = updated.replace(tzinfo=UTC)
    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    seconds = max(0, int((now - updated).total_seconds()))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def format_factor(resolution: FactorResolution | None) -> str:
    """``"10.0 kg/km (B738)"``; an em dash when unresolved."""
    if resolution is None:
        return "—"
    if resolution.tier == FactorTier.TYPE:
        label = resolution.key
    elif resolution.tier == FactorTier.WEIGHT_CLASS:
        label = f"WTC-{resolution.key}"
    else:
        label = "cat"
    return f"{resolution.factor:.1f} kg/km ({label})"


def format_source(summary: ReportedSummary, now: datetime | None = None) -> str:
    if summary.source == SummarySource.AUTHORITATIVE:
        age = format_age(summary.updated, now)
        return f"Server · updated {age}" if age else "Server"
    return "Local only"
