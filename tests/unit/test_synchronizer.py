"""Unit tests for IngestionSynchronizer -- upsert plus bounded consistency wait."""

from __future__ import annotations

import asyncio
import itertools
from unittest.mock import AsyncMock, MagicMock

import pytest

from speechindex.interfaces.vector_store_provider import IVectorStoreProvider
from speechindex.models.speech import BatchState, Document, Segment, SegmentBatch
from speechindex.services.ingestion.synchronizer import IngestionSynchronizer
from speechindex.utils.errors import BatchSubmissionError, ConfigurationError, VectorStoreError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_DOCUMENT = Document(id="doc-1", title="Inaugural Address", author="John F. Kennedy", body="...")


def _batch(number: int, size: int) -> SegmentBatch:
    return SegmentBatch(
        number=number,
        segments=tuple(Segment(text=f"text {number}.{i}", token_count=2) for i in range(size)),
    )


def _store(counts) -> MagicMock:  # noqa: ANN001
    """Vector store returning successive *counts* from get_vector_count."""
    store = MagicMock(spec=IVectorStoreProvider)
    store.get_vector_count = AsyncMock(side_effect=counts)
    store.upsert = AsyncMock(return_value=None)
    store.get_provider_name.return_value = "mock"
    return store


def _sequential_ids():  # noqa: ANN202
    counter = itertools.count(1)
    return lambda: f"vec-{next(counter)}"


def _synchronizer(store, sleep, timeout: int = 60, **kwargs) -> IngestionSynchronizer:  # noqa: ANN001
    return IngestionSynchronizer(
        vector_store=store,
        namespace="speeches",
        poll_interval_seconds=1,
        timeout_seconds=timeout,
        sleep=sleep,
        id_factory=_sequential_ids(),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Convergence
# ---------------------------------------------------------------------------


class TestConvergence:
    @pytest.mark.asyncio
    async def test_converges_after_exactly_three_polls(self, no_sleep) -> None:
        # current=10, immediate read 10, then polls: 10, 12, 15
        store = _store([10, 10, 10, 12, 15, 99])
        sync = _synchronizer(store, no_sleep, timeout=60)

        outcome = await sync.sync_batch(_DOCUMENT, _batch(1, 5))

        assert outcome.state is BatchState.CONVERGED
        assert outcome.polls == 3
        assert outcome.expected_count == 15
        assert outcome.observed_count == 15
        assert no_sleep.await_count == 3
        assert store.get_vector_count.await_count == 5
        no_sleep.assert_awaited_with(1)

    @pytest.mark.asyncio
    async def test_immediate_visibility_needs_no_poll(self, no_sleep) -> None:
        store = _store([0, 3])
        outcome = await _synchronizer(store, no_sleep).sync_batch(_DOCUMENT, _batch(1, 3))

        assert outcome.state is BatchState.CONVERGED
        assert outcome.polls == 0
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_records_carry_ids_and_metadata(self, no_sleep) -> None:
        store = _store([0, 2])
        outcome = await _synchronizer(store, no_sleep).sync_batch(_DOCUMENT, _batch(1, 2))

        namespace, records = store.upsert.await_args.args
        assert namespace == "speeches"
        assert [r.id for r in records] == ["vec-1", "vec-2"]
        assert [r.text for r in records] == ["text 1.0", "text 1.1"]
        assert {r.title for r in records} == {"Inaugural Address"}
        assert {r.author for r in records} == {"John F. Kennedy"}
        assert {r.source_document_id for r in records} == {"doc-1"}
        assert outcome.vector_ids == ("vec-1", "vec-2")

    def test_max_polls_rounds_up(self) -> None:
        store = _store([])
        sync = IngestionSynchronizer(store, "ns", poll_interval_seconds=2, timeout_seconds=5)
        assert sync.max_polls == 3


# ---------------------------------------------------------------------------
# Timeout and failure
# ---------------------------------------------------------------------------


class TestTimeoutAndFailure:
    @pytest.mark.asyncio
    async def test_times_out_after_exactly_five_polls(self, no_sleep) -> None:
        store = _store(itertools.repeat(0))
        sync = _synchronizer(store, no_sleep, timeout=5)

        outcome = await sync.sync_batch(_DOCUMENT, _batch(1, 4))

        assert outcome.state is BatchState.TIMED_OUT
        assert outcome.polls == 5
        assert outcome.expected_count == 4
        assert outcome.observed_count == 0
        assert no_sleep.await_count == 5
        # current + immediate + 5 polls; the batch is not resubmitted.
        assert store.get_vector_count.await_count == 7
        store.upsert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout_does_not_stop_following_batches(self, no_sleep) -> None:
        # Batch 1 never shows up; batch 2 does.
        store = _store([0, 0, 0, 0, 0, 2])
        sync = _synchronizer(store, no_sleep, timeout=2)

        outcomes = await sync.sync_document(_DOCUMENT, [_batch(1, 2), _batch(2, 2)])

        assert [o.state for o in outcomes] == [BatchState.TIMED_OUT, BatchState.CONVERGED]
        assert store.upsert.await_count == 2

    @pytest.mark.asyncio
    async def test_rejected_upsert_marks_batch_failed(self, no_sleep) -> None:
        store = _store([0, 0, 2])
        store.upsert.side_effect = [VectorStoreError("quota exceeded", provider_name="mock"), None]
        sync = _synchronizer(store, no_sleep)

        outcomes = await sync.sync_document(_DOCUMENT, [_batch(1, 2), _batch(2, 2)])

        assert outcomes[0].state is BatchState.FAILED
        assert outcomes[0].error == "[mock] Batch 1 rejected: quota exceeded"
        assert outcomes[0].expected_count is None
        assert outcomes[0].vector_ids == ("vec-1", "vec-2")
        assert outcomes[1].state is BatchState.CONVERGED

    @pytest.mark.asyncio
    async def test_rejection_is_chained_submission_error(self, no_sleep) -> None:
        rejection = VectorStoreError("payload too large", provider_name="pinecone")
        store = _store([7])
        store.upsert.side_effect = rejection
        sync = _synchronizer(store, no_sleep)

        with pytest.raises(BatchSubmissionError) as exc_info:
            await sync._submit(3, [])

        assert exc_info.value.__cause__ is rejection
        assert exc_info.value.provider_name == "pinecone"
        assert "Batch 3 rejected" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_count_failure_during_wait_marks_batch_failed(self, no_sleep) -> None:
        store = _store([0, VectorStoreError("stats unavailable")])
        outcome = await _synchronizer(store, no_sleep).sync_batch(_DOCUMENT, _batch(1, 1))

        assert outcome.state is BatchState.FAILED
        assert "stats unavailable" in outcome.error

    def test_invalid_configuration(self) -> None:
        with pytest.raises(ConfigurationError):
            IngestionSynchronizer(_store([]), "ns", poll_interval_seconds=0)
        with pytest.raises(ConfigurationError):
            IngestionSynchronizer(_store([]), "ns", timeout_seconds=0)


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_during_sleep_stops_the_document(self) -> None:
        cancel = asyncio.Event()

        async def _sleep(seconds: float) -> None:
            cancel.set()

        store = _store(itertools.repeat(0))
        sync = _synchronizer(store, _sleep, timeout=30)

        outcomes = await sync.sync_document(
            _DOCUMENT, [_batch(1, 2), _batch(2, 2), _batch(3, 2)], cancel
        )

        assert len(outcomes) == 1
        assert outcomes[0].state is BatchState.CANCELLED
        assert outcomes[0].polls == 0
        store.upsert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel_set_before_wait(self, no_sleep) -> None:
        cancel = asyncio.Event()
        cancel.set()
        store = _store(itertools.repeat(0))

        outcome = await _synchronizer(store, no_sleep).sync_batch(_DOCUMENT, _batch(1, 1), cancel)

        assert outcome.state is BatchState.CANCELLED
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_injected_logger_receives_events(self, no_sleep) -> None:
        log = MagicMock()
        store = _store(itertools.repeat(0))
        sync = _synchronizer(store, no_sleep, timeout=1, logger=log)

        await sync.sync_batch(_DOCUMENT, _batch(1, 1))

        log.warning.assert_called_once()
        assert log.warning.call_args.args[0] == "batch_consistency_timeout"
