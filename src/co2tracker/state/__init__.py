"""State/store layer.

This package is the single source of truth for how position reports are
merged into per-aircraft tracks and how the session, persisted and
authoritative aggregates are reconciled into one reported total.
"""
