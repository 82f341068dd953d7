"""Document → vector-id cross-reference recording.

After every batch of a document has been attempted, the ids generated for
it are written to the document store as one :class:`CrossReference`.  The
entry lets later tooling audit what was loaded and delete a document's
vectors again (``speechindex forget``).

Which ids are written is decided by :func:`select_vector_ids` and nowhere
else.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from speechindex.interfaces.document_store import IDocumentStore
from speechindex.models.speech import (
    BatchOutcome,
    BatchState,
    CrossReference,
    CrossReferencePolicy,
    Document,
)

logger = structlog.get_logger(logger_name=__name__)


def select_vector_ids(
    outcomes: Iterable[BatchOutcome],
    policy: CrossReferencePolicy = CrossReferencePolicy.ALL,
) -> list[str]:
    """Return the vector ids to record for a document, in batch order.

    ``ALL`` keeps the ids of every attempted batch, including batches that
    failed or timed out and may therefore not exist in the store.
    ``CONFIRMED`` keeps only ids of batches that converged.
    """
    ids: list[str] = []
    for outcome in outcomes:
        if policy is CrossReferencePolicy.CONFIRMED and outcome.state is not BatchState.CONVERGED:
            continue
        ids.extend(outcome.vector_ids)
    return ids


class CrossReferenceRecorder:
    """Persists one cross-reference entry per ingested document."""

    def __init__(self, document_store: IDocumentStore) -> None:
        self._document_store = document_store

    async def record(self, document: Document, vector_ids: Sequence[str]) -> CrossReference:
        """Append a cross-reference for *document* and return it with its id.

        Raises
        ------
        speechindex.utils.errors.DocumentStoreError
            If the entry cannot be written.
        """
        reference = await self._document_store.append_cross_reference(
            CrossReference(
                source_document_id=document.id,
                title=document.title,
                author=document.author,
                vector_ids=tuple(vector_ids),
            )
        )
        logger.info(
            "cross_reference_recorded",
            document_id=document.id,
            title=document.title,
            reference_id=reference.id,
            vector_ids=len(reference.vector_ids),
        )
        return reference
