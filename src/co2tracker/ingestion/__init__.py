"""Ingestion layer.

This package turns the raw ``entity id -> report`` mappings delivered by the
live position source into validated :class:`~co2tracker.models.report.PositionReport`
objects. Only the state/store layer is allowed to merge them into tracks.
"""

__all__: list[str] = []
