"""Fixed-size batching of segments for vector store submission."""

from __future__ import annotations

from collections.abc import Sequence

from speechindex.models.speech import Segment, SegmentBatch
from speechindex.utils.errors import ConfigurationError

# Pinecone accepts at most 96 text records per upsert_records call.
DEFAULT_MAX_BATCH_SIZE = 96


def batch_segments(
    segments: Sequence[Segment],
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
) -> list[SegmentBatch]:
    """Group *segments* into contiguous, order-preserving batches.

    Every batch but the last holds exactly *max_batch_size* segments, so
    ``N`` segments yield ``ceil(N / max_batch_size)`` batches.  No segments
    yields no batches.

    Raises
    ------
    ConfigurationError
        If *max_batch_size* is smaller than 1.
    """
    if max_batch_size < 1:
        raise ConfigurationError(message=f"max_batch_size must be >= 1, got {max_batch_size}")
    return [
        SegmentBatch(number=i // max_batch_size + 1, segments=tuple(segments[i : i + max_batch_size]))
        for i in range(0, len(segments), max_batch_size)
    ]
