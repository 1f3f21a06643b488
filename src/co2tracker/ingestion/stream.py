"""Live position batch parsing.

The position source delivers one mapping of ``entity id -> report`` per
poll. Each entry is validated on its own so a malformed report never
affects the rest of the batch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from co2tracker.models.report import PositionReport

_logger = logging.getLogger(__name__)


def parse_report(raw: Any) -> PositionReport | None:
    """Validate one raw report; ``None`` when it cannot be parsed at all."""
    if isinstance(raw, PositionReport):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return PositionReport.model_validate(dict(raw))
    except ValidationError:
        return None


def iter_batch(batch: Mapping[Any, Any]) -> Iterator[tuple[str, PositionReport]]:
    """Yield ``(entity_id, report)`` pairs for every parseable entry."""
    for key, raw in batch.items():
        if key is None or key == "":
            _logger.debug("Skipping report with empty entity id")
            continue
        entity_id = str(key)
        report = parse_report(raw)
        if report is None:
            _logger.debug("Skipping malformed report for %s", entity_id)
            continue
        yield entity_id, report
