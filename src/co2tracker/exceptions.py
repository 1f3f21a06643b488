"""Custom exception hierarchy for co2tracker."""

from __future__ import annotations


class Co2TrackerError(Exception):
    """Base exception for all co2tracker errors."""


class TrackerConfigError(Co2TrackerError):
    """Invalid or missing configuration."""


class TrackerTransportError(Co2TrackerError):
    """Authoritative aggregate fetch failed (network, non-200, timeout, invalid body)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class TrackerStoreError(Co2TrackerError):
    """Persisted store read or write failed.

    Raised by :class:`~co2tracker.persistence.KeyValueStore` implementations.
    The persisted-aggregate helpers catch it and fall back to zero/no-op, so
    it never escapes the tracker.
    """
