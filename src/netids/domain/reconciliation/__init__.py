"""Merge previews and commits for imported registries."""

from __future__ import annotations

from .engine import ReconciliationEngine
from .plan import MergeCounts, MergePreview, MergeRow, MergeSummary, classify_row

__all__ = [
    "MergeCounts",
    "MergePreview",
    "MergeRow",
    "MergeSummary",
    "ReconciliationEngine",
    "classify_row",
]
