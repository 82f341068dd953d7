"""Utility modules for speechindex.

Available utility modules (re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at
  SpeechIndexError; each pipeline stage raises its own subclass so callers
  can contain failures at the document or batch they belong to.
- **logging** -- structlog setup: coloured console output for interactive
  runs, JSON lines on batch hosts.
"""

# -- Domain exception hierarchy --------------------------------------------
from speechindex.utils.errors import (
    BatchSubmissionError,
    ConfigurationError,
    ConsistencyTimeoutError,
    DocumentStoreError,
    IngestionCancelledError,
    IngestionError,
    SegmentationError,
    SpeechIndexError,
    VectorStoreError,
)

# -- Structured logging setup ----------------------------------------------
from speechindex.utils.logging import configure_logging

__all__ = [
    "BatchSubmissionError",
    "ConfigurationError",
    "ConsistencyTimeoutError",
    "DocumentStoreError",
    "IngestionCancelledError",
    "IngestionError",
    "SegmentationError",
    "SpeechIndexError",
    "VectorStoreError",
    "configure_logging",
]
