"""speechindex domain models -- re-exports all public model classes."""

from __future__ import annotations

from speechindex.models.speech import (
    BatchOutcome,
    BatchState,
    CrossReference,
    CrossReferencePolicy,
    Document,
    DocumentIngestionResult,
    LoadSummary,
    Segment,
    SegmentBatch,
    VectorRecord,
)

__all__ = [
    "BatchOutcome",
    "BatchState",
    "CrossReference",
    "CrossReferencePolicy",
    "Document",
    "DocumentIngestionResult",
    "LoadSummary",
    "Segment",
    "SegmentBatch",
    "VectorRecord",
]
