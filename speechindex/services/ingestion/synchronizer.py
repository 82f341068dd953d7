"""Batched upsert with a bounded consistency wait.

The vector store is eventually consistent: an accepted upsert is not
immediately visible in the namespace vector count.  For every batch the
:class:`IngestionSynchronizer`:

1. generates one id per segment,
2. reads the current namespace count and derives ``expected = current + n``,
3. upserts the batch,
4. reads the count once immediately, then polls it up to ``max_polls``
   times, sleeping ``poll_interval_seconds`` before each poll, until
   ``observed >= expected``.

A batch that never converges is marked ``TIMED_OUT`` and is not retried; a
rejected upsert is marked ``FAILED``.  Neither stops the following batches.
A cancel request observed around a sleep marks the batch ``CANCELLED`` and
leaves the rest of the document unsubmitted.

Batches are processed strictly in order.  The expected count assumes this
synchronizer is the only writer to the namespace while it runs.
"""

from __future__ import annotations

import asyncio
import math
import uuid
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import structlog

from speechindex.interfaces.vector_store_provider import IVectorStoreProvider
from speechindex.models.speech import (
    BatchOutcome,
    BatchState,
    Document,
    SegmentBatch,
    VectorRecord,
)
from speechindex.utils.errors import (
    BatchSubmissionError,
    ConfigurationError,
    ConsistencyTimeoutError,
    IngestionCancelledError,
    VectorStoreError,
)

_default_logger = structlog.get_logger(logger_name=__name__)


def _new_vector_id() -> str:
    return str(uuid.uuid4())


class IngestionSynchronizer:
    """Submits batches and waits for each to become visible.

    Parameters
    ----------
    vector_store:
        Store the batches are upserted into.
    namespace:
        Namespace inside the store's index.
    poll_interval_seconds:
        Sleep before each consistency poll.
    timeout_seconds:
        Upper bound of the wait; gives ``ceil(timeout / interval)`` polls.
    sleep:
        Async sleep used between polls (``asyncio.sleep`` by default).
    id_factory:
        Produces one vector id per segment (UUID4 strings by default).
    logger:
        Structured logger; the module logger by default.
    """

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        namespace: str,
        poll_interval_seconds: int = 1,
        timeout_seconds: int = 60,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        id_factory: Callable[[], str] = _new_vector_id,
        logger: Any = None,
    ) -> None:
        if poll_interval_seconds < 1:
            raise ConfigurationError(
                message=f"poll_interval_seconds must be >= 1, got {poll_interval_seconds}"
            )
        if timeout_seconds < 1:
            raise ConfigurationError(message=f"timeout_seconds must be >= 1, got {timeout_seconds}")
        self._vector_store = vector_store
        self._namespace = namespace
        self._poll_interval = poll_interval_seconds
        self._max_polls = math.ceil(timeout_seconds / poll_interval_seconds)
        self._sleep = sleep
        self._id_factory = id_factory
        self._logger = logger if logger is not None else _default_logger

    @property
    def max_polls(self) -> int:
        return self._max_polls

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def sync_document(
        self,
        document: Document,
        batches: Sequence[SegmentBatch],
        cancel_event: asyncio.Event | None = None,
    ) -> list[BatchOutcome]:
        """Submit every batch of *document* in order and wait for each.

        Returns
        -------
        list[BatchOutcome]
            One outcome per attempted batch, in order.  After a cancel the
            list stops at the cancelled batch.
        """
        outcomes: list[BatchOutcome] = []
        for batch in batches:
            outcome = await self.sync_batch(document, batch, cancel_event)
            outcomes.append(outcome)
            if outcome.state is BatchState.CANCELLED:
                skipped = len(batches) - len(outcomes)
                if skipped:
                    self._logger.warning(
                        "batches_not_submitted",
                        document_id=document.id,
                        title=document.title,
                        skipped_batches=skipped,
                    )
                break
        return outcomes

    async def sync_batch(
        self,
        document: Document,
        batch: SegmentBatch,
        cancel_event: asyncio.Event | None = None,
    ) -> BatchOutcome:
        """Submit one batch and wait for the namespace count to converge."""
        records = [
            VectorRecord(
                id=self._id_factory(),
                text=segment.text,
                title=document.title,
                author=document.author,
                source_document_id=document.id,
            )
            for segment in batch.segments
        ]
        outcome = BatchOutcome(
            batch_number=batch.number,
            vector_ids=tuple(r.id for r in records),
        )

        try:
            expected = await self._submit(batch.number, records)
        except BatchSubmissionError as exc:
            self._logger.error(
                "batch_submission_failed",
                document_id=document.id,
                title=document.title,
                batch=batch.number,
                size=len(records),
                error=str(exc),
            )
            return outcome.model_copy(update={"state": BatchState.FAILED, "error": str(exc)})

        outcome = outcome.model_copy(
            update={"state": BatchState.SUBMITTED, "expected_count": expected}
        )

        try:
            observed, polls = await self._wait_for_count(expected, cancel_event)
        except ConsistencyTimeoutError as exc:
            self._logger.warning(
                "batch_consistency_timeout",
                document_id=document.id,
                title=document.title,
                batch=batch.number,
                expected=exc.expected_count,
                observed=exc.observed_count,
                polls=exc.polls,
            )
            return outcome.model_copy(
                update={
                    "state": BatchState.TIMED_OUT,
                    "observed_count": exc.observed_count,
                    "polls": exc.polls,
                    "error": str(exc),
                }
            )
        except IngestionCancelledError as exc:
            self._logger.warning(
                "batch_wait_cancelled",
                document_id=document.id,
                title=document.title,
                batch=batch.number,
                polls=exc.polls,
            )
            return outcome.model_copy(
                update={"state": BatchState.CANCELLED, "polls": exc.polls, "error": str(exc)}
            )
        except VectorStoreError as exc:
            self._logger.error(
                "batch_count_failed",
                document_id=document.id,
                title=document.title,
                batch=batch.number,
                error=str(exc),
            )
            return outcome.model_copy(update={"state": BatchState.FAILED, "error": str(exc)})

        self._logger.info(
            "batch_converged",
            document_id=document.id,
            title=document.title,
            batch=batch.number,
            size=len(records),
            vector_count=observed,
            polls=polls,
        )
        return outcome.model_copy(
            update={"state": BatchState.CONVERGED, "observed_count": observed, "polls": polls}
        )

    async def _submit(self, batch_number: int, records: list[VectorRecord]) -> int:
        """Upsert *records* and return the namespace count expected afterwards.

        Raises
        ------
        BatchSubmissionError
            If the count read or the upsert fails.
        """
        try:
            current = await self._vector_store.get_vector_count(self._namespace)
            await self._vector_store.upsert(self._namespace, records)
        except VectorStoreError as exc:
            raise BatchSubmissionError(
                message=f"Batch {batch_number} rejected: {exc.message}",
                provider_name=exc.provider_name or self._vector_store.get_provider_name(),
            ) from exc
        return current + len(records)

    # ------------------------------------------------------------------
    # Consistency wait
    # ------------------------------------------------------------------

    async def _wait_for_count(
        self, expected: int, cancel_event: asyncio.Event | None
    ) -> tuple[int, int]:
        """Return ``(observed, polls)`` once the namespace reaches *expected*.

        The first read happens right after the upsert and is not counted as
        a poll.

        Raises
        ------
        ConsistencyTimeoutError
            After ``max_polls`` polls without convergence.
        IngestionCancelledError
            If *cancel_event* is set before or after a sleep.
        """
        observed = await self._vector_store.get_vector_count(self._namespace)
        polls = 0
        while observed < expected:
            if polls >= self._max_polls:
                raise ConsistencyTimeoutError(
                    expected_count=expected,
                    observed_count=observed,
                    polls=polls,
                    provider_name=self._vector_store.get_provider_name(),
                )
            self._check_cancelled(cancel_event, polls)
            await self._sleep(self._poll_interval)
            self._check_cancelled(cancel_event, polls)
            observed = await self._vector_store.get_vector_count(self._namespace)
            polls += 1
        return observed, polls

    @staticmethod
    def _check_cancelled(cancel_event: asyncio.Event | None, polls: int) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise IngestionCancelledError(polls=polls)
