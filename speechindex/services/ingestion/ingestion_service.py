"""Orchestrator for the speech load pipeline.

Pipeline stages: **segment -> batch -> sync -> record**.

For every stored speech, in discovery order:

    1. TextSegmenter -- cuts the body into token-bounded segments
    2. batch_segments -- groups segments into upsert-sized batches
    3. IngestionSynchronizer -- upserts each batch and waits for the
       namespace count to converge
    4. CrossReferenceRecorder -- stores the generated vector ids once the
       document's batches have all been attempted

Failures are contained at the level they occur: a segmentation error skips
its document, a batch error is recorded in that batch's outcome, and a
document store error while recording is reported on the document's result.
Only configuration problems (e.g. a missing index) stop the run.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

from speechindex.models.speech import (
    BatchState,
    CrossReferencePolicy,
    Document,
    DocumentIngestionResult,
    LoadSummary,
)
from speechindex.services.ingestion.batcher import DEFAULT_MAX_BATCH_SIZE, batch_segments
from speechindex.services.ingestion.cross_reference import (
    CrossReferenceRecorder,
    select_vector_ids,
)
from speechindex.utils.errors import ConfigurationError, DocumentStoreError, SegmentationError

if TYPE_CHECKING:
    from speechindex.interfaces.document_store import IDocumentStore
    from speechindex.interfaces.vector_store_provider import IVectorStoreProvider
    from speechindex.services.ingestion.segmenter import TextSegmenter
    from speechindex.services.ingestion.synchronizer import IngestionSynchronizer

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Loads every stored speech into the vector store.

    Parameters
    ----------
    document_store:
        Source of speeches and sink for cross-references.
    vector_store:
        Target store; used here only for the index / namespace pre-checks.
    segmenter:
        Produces token-bounded segments.
    synchronizer:
        Submits batches and waits for consistency.
    namespace:
        Namespace the synchronizer writes to.
    max_batch_size:
        Segments per upsert.
    policy:
        Which vector ids end up in cross-references.
    recorder:
        Cross-reference writer; built from *document_store* when omitted.
    """

    def __init__(
        self,
        document_store: IDocumentStore,
        vector_store: IVectorStoreProvider,
        segmenter: TextSegmenter,
        synchronizer: IngestionSynchronizer,
        namespace: str,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        policy: CrossReferencePolicy = CrossReferencePolicy.ALL,
        recorder: CrossReferenceRecorder | None = None,
    ) -> None:
        if max_batch_size < 1:
            raise ConfigurationError(message=f"max_batch_size must be >= 1, got {max_batch_size}")
        self._document_store = document_store
        self._vector_store = vector_store
        self._segmenter = segmenter
        self._synchronizer = synchronizer
        self._namespace = namespace
        self._max_batch_size = max_batch_size
        self._policy = policy
        self._recorder = recorder or CrossReferenceRecorder(document_store)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def load(
        self,
        force: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> LoadSummary:
        """Ingest every stored speech.

        Parameters
        ----------
        force:
            Load even when the namespace already holds vectors.
        cancel_event:
            When set, the current batch wait stops and no further batches
            or documents are processed.

        Returns
        -------
        LoadSummary
            Per-document results plus run totals.

        Raises
        ------
        ConfigurationError
            If the vector index does not exist.
        """
        if not await self._vector_store.index_exists():
            raise ConfigurationError(
                message="Vector index does not exist; run 'speechindex create' first",
                provider_name=self._vector_store.get_provider_name(),
            )

        existing = await self._vector_store.get_vector_count(self._namespace)
        if existing > 0 and not force:
            logger.warning(
                "namespace_not_empty",
                namespace=self._namespace,
                vector_count=existing,
                msg="Skipping load; pass --force to load anyway.",
            )
            return LoadSummary(namespace_populated=True)

        documents = await self._document_store.list_documents()
        logger.info(
            "load_started",
            namespace=self._namespace,
            documents=len(documents),
            policy=self._policy.value,
        )

        results: list[DocumentIngestionResult] = []
        for document in documents:
            if cancel_event is not None and cancel_event.is_set():
                break
            results.append(await self.ingest_document(document, cancel_event))
        cancelled = cancel_event is not None and cancel_event.is_set()

        summary = LoadSummary(
            documents_found=len(documents),
            results=tuple(results),
            cancelled=cancelled,
        )
        logger.info(
            "load_complete",
            namespace=self._namespace,
            documents_found=summary.documents_found,
            documents_ingested=summary.documents_ingested,
            documents_skipped=summary.documents_skipped,
            total_segments=summary.total_segments,
            total_vectors=summary.total_vectors,
            cancelled=cancelled,
        )
        return summary

    async def ingest_document(
        self,
        document: Document,
        cancel_event: asyncio.Event | None = None,
    ) -> DocumentIngestionResult:
        """Segment, batch, sync and record a single speech."""
        start = time.perf_counter()

        try:
            segments = self._segmenter.segment(document.body, source_document_id=document.id)
        except SegmentationError as exc:
            logger.error(
                "document_segmentation_failed",
                document_id=document.id,
                title=document.title,
                error=str(exc),
            )
            return DocumentIngestionResult(
                source_document_id=document.id,
                title=document.title,
                skipped=True,
                error=str(exc),
                ingestion_time=time.perf_counter() - start,
            )

        if not segments:
            logger.warning("document_empty", document_id=document.id, title=document.title)
            return DocumentIngestionResult(
                source_document_id=document.id,
                title=document.title,
                skipped=True,
                ingestion_time=time.perf_counter() - start,
            )

        batches = batch_segments(segments, self._max_batch_size)
        outcomes = await self._synchronizer.sync_document(document, batches, cancel_event)
        vector_ids = select_vector_ids(outcomes, self._policy)

        reference_id: str | None = None
        error: str | None = None
        try:
            reference = await self._recorder.record(document, vector_ids)
            reference_id = reference.id
        except DocumentStoreError as exc:
            error = str(exc)
            logger.error(
                "cross_reference_failed",
                document_id=document.id,
                title=document.title,
                vector_ids=len(vector_ids),
                error=error,
            )

        result = DocumentIngestionResult(
            source_document_id=document.id,
            title=document.title,
            segments=len(segments),
            total_tokens=sum(s.token_count for s in segments),
            batches=tuple(outcomes),
            recorded_vector_ids=len(vector_ids) if reference_id is not None else 0,
            cross_reference_id=reference_id,
            error=error,
            ingestion_time=time.perf_counter() - start,
        )
        logger.info(
            "document_ingested",
            document_id=document.id,
            title=document.title,
            author=document.author,
            segments=result.segments,
            batches=len(outcomes),
            converged_batches=result.converged_batches,
            timed_out_batches=sum(1 for o in outcomes if o.state is BatchState.TIMED_OUT),
            failed_batches=sum(1 for o in outcomes if o.state is BatchState.FAILED),
            recorded_vector_ids=result.recorded_vector_ids,
            ingestion_time=round(result.ingestion_time, 2),
        )
        return result
