"""Custom exception hierarchy for speechindex.

All application exceptions inherit from :class:`SpeechIndexError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "pinecone", "chromadb", "sqlite") caused the failure.

The hierarchy is organized by pipeline stage:

    SpeechIndexError  (base -- catch-all for any speechindex error)
    +-- ConfigurationError       (startup / missing config -- fatal)
    +-- SegmentationError        (tokenizer failure -- document skipped)
    +-- VectorStoreError         (vector store or embedding backend failure)
    +-- DocumentStoreError       (document database failure)
    +-- IngestionError           (recoverable, batch level)
        +-- BatchSubmissionError
        +-- ConsistencyTimeoutError
        +-- IngestionCancelledError

Only :class:`ConfigurationError` aborts a run.  Segmentation and batch level
errors are contained at the document / batch they belong to.
"""


class SpeechIndexError(Exception):
    """Base exception for all speechindex errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets, e.g.
    ``[pinecone] Upsert rejected``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Fatal errors
# ---------------------------------------------------------------------------

class ConfigurationError(SpeechIndexError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Document level errors
# ---------------------------------------------------------------------------

class SegmentationError(SpeechIndexError):
    """Raised when a tokenizer cannot process a document's text."""

    def __init__(
        self,
        message: str = "Text segmentation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class VectorStoreError(SpeechIndexError):
    """Raised when a vector store or embedding operation fails."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DocumentStoreError(SpeechIndexError):
    """Raised when the document database cannot be read or written."""

    def __init__(
        self,
        message: str = "Document store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Batch level errors -- recoverable, never abort the run
# ---------------------------------------------------------------------------

class IngestionError(SpeechIndexError):
    """Base class for recoverable errors raised while ingesting one batch."""

    def __init__(
        self,
        message: str = "Batch ingestion failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class BatchSubmissionError(IngestionError):
    """Raised when the vector store rejects or errors on an upsert."""

    def __init__(
        self,
        message: str = "Batch submission failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConsistencyTimeoutError(IngestionError):
    """Raised when the namespace count never reaches the expected value.

    Distinct from :class:`BatchSubmissionError`: the upsert was accepted but
    the index did not converge within the configured number of polls.
    """

    def __init__(
        self,
        expected_count: int,
        observed_count: int,
        polls: int,
        provider_name: str | None = None,
    ) -> None:
        self._expected_count = expected_count
        self._observed_count = observed_count
        self._polls = polls
        super().__init__(
            message=(
                f"Timed out after {polls} polls waiting for {expected_count} vectors "
                f"(observed {observed_count})"
            ),
            provider_name=provider_name,
        )

    @property
    def expected_count(self) -> int:
        return self._expected_count

    @property
    def observed_count(self) -> int:
        return self._observed_count

    @property
    def polls(self) -> int:
        return self._polls


class IngestionCancelledError(IngestionError):
    """Raised when a cancel request is observed during the consistency wait."""

    def __init__(
        self,
        message: str = "Ingestion cancelled while waiting for the vector store",
        provider_name: str | None = None,
        polls: int = 0,
    ) -> None:
        self._polls = polls
        super().__init__(message=message, provider_name=provider_name)

    @property
    def polls(self) -> int:
        return self._polls
