"""Data models for the speech ingestion pipeline.

Defines Pydantic v2 models for stored speech documents, token-bounded
segments, submission batches, vector records, per-batch outcomes and the
document → vector-id cross-reference.  All models use frozen config;
state changes produce new instances via ``model_copy(update={...})``.

Lifecycle:
    1. STORE: speech files are persisted as :class:`Document` rows; the
       document store assigns ``id`` on first persistence.
    2. SEGMENT: each document body is cut into :class:`Segment` objects no
       larger than the token budget.
    3. BATCH: segments are grouped into :class:`SegmentBatch` windows.
    4. SYNC: every batch becomes :class:`VectorRecord` objects, is upserted,
       and ends in a terminal :class:`BatchState` recorded in a
       :class:`BatchOutcome`.
    5. RECORD: one :class:`CrossReference` per document keeps the generated
       vector ids for audit and later deletion.

Segments, batches and records are transient; only documents and
cross-references are persisted.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Document -- a stored speech.
# ---------------------------------------------------------------------------
class Document(BaseModel):
    """A speech stored in the document database."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Identifier assigned by the document store on first persistence.")
    title: str = Field(description="Speech title, derived from the source file name.")
    author: str = Field(default="Unknown", description="Speaker, resolved from the author table.")
    body: str = Field(description="Full speech text.")
    source_path: str = Field(default="", description="File the speech was read from.")


# ---------------------------------------------------------------------------
# Segment -- a token-bounded slice of a document body.
# ---------------------------------------------------------------------------
class Segment(BaseModel):
    """A contiguous slice of document text within the token budget.

    ``token_count`` may exceed the budget only when the segment is a single
    word that is itself larger than the budget.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    token_count: int = Field(ge=0)
    source_document_id: str = ""


class SegmentBatch(BaseModel):
    """An ordered group of segments submitted to the vector store together."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1, description="1-based position of the batch within its document.")
    segments: tuple[Segment, ...] = Field(min_length=1)

    def __len__(self) -> int:
        return len(self.segments)


class VectorRecord(BaseModel):
    """One upsert record: a segment's text plus its generated id and metadata."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    title: str
    author: str
    source_document_id: str


# ---------------------------------------------------------------------------
# BatchState -- per-batch state machine.
# ---------------------------------------------------------------------------
class BatchState(str, Enum):  # noqa: UP042
    """States of one batch inside the ingestion synchronizer.

        PENDING → SUBMITTED → CONVERGED | TIMED_OUT

    ``FAILED`` marks a batch whose upsert was rejected; ``CANCELLED`` marks a
    batch whose consistency wait was interrupted.  All but ``PENDING`` and
    ``SUBMITTED`` are terminal; terminal batches are never retried in-run.
    """

    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    CONVERGED = "CONVERGED"
    TIMED_OUT = "TIMED_OUT"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class BatchOutcome(BaseModel):
    """Result of synchronizing one batch."""

    model_config = ConfigDict(frozen=True)

    batch_number: int = Field(ge=1)
    state: BatchState = BatchState.PENDING
    vector_ids: tuple[str, ...] = ()
    expected_count: int | None = None
    observed_count: int | None = None
    polls: int = Field(default=0, ge=0)
    error: str | None = None

    @property
    def converged(self) -> bool:
        return self.state is BatchState.CONVERGED


class CrossReferencePolicy(str, Enum):  # noqa: UP042
    """Which generated vector ids are written to a document's cross-reference."""

    ALL = "ALL"              # every batch, confirmed or not
    CONFIRMED = "CONFIRMED"  # only batches that converged


# ---------------------------------------------------------------------------
# CrossReference -- the durable document → vector-id link.
# ---------------------------------------------------------------------------
class CrossReference(BaseModel):
    """The vector ids generated for one document's segments."""

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(default=None, description="Identifier assigned by the document store.")
    source_document_id: str
    title: str
    author: str
    vector_ids: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Run summaries
# ---------------------------------------------------------------------------
class DocumentIngestionResult(BaseModel):
    """Summary of ingesting a single document."""

    model_config = ConfigDict(frozen=True)

    source_document_id: str
    title: str
    segments: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)
    batches: tuple[BatchOutcome, ...] = ()
    recorded_vector_ids: int = Field(default=0, ge=0)
    cross_reference_id: str | None = None
    skipped: bool = False
    error: str | None = None
    ingestion_time: float = Field(default=0.0, ge=0.0)

    @property
    def converged_batches(self) -> int:
        return sum(1 for outcome in self.batches if outcome.converged)


class LoadSummary(BaseModel):
    """Summary of one ``load`` run over every stored document."""

    model_config = ConfigDict(frozen=True)

    documents_found: int = Field(default=0, ge=0)
    results: tuple[DocumentIngestionResult, ...] = ()
    namespace_populated: bool = Field(
        default=False,
        description="True when the run was skipped because the namespace already held vectors.",
    )
    cancelled: bool = False

    @property
    def documents_ingested(self) -> int:
        return sum(1 for r in self.results if not r.skipped)

    @property
    def documents_skipped(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def total_segments(self) -> int:
        return sum(r.segments for r in self.results)

    @property
    def total_vectors(self) -> int:
        return sum(r.recorded_vector_ids for r in self.results)
