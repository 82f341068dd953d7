"""Token-budget segmentation of speech text.

Splits a document body into :class:`~speechindex.models.speech.Segment`
objects that each fit the embedding model's token budget.

The strategy descends a hierarchy of units, and only descends when a
unit alone is larger than the budget:

1. **Document** -- a body that fits is emitted whole, unchanged.
2. **Paragraph** -- blank-line separated blocks; a paragraph that fits is
   one segment.
3. **Sentence** -- sentences of an oversized paragraph are packed greedily,
   left to right, into segments.
4. **Word** -- an oversized sentence is packed word by word.  A single word
   larger than the budget becomes a segment on its own; it is the only way
   a segment can exceed the budget.

There is no look-ahead or rebalancing, so the same input always produces
the same segments, and joining the segment texts with whitespace gives back
the original text (modulo whitespace).
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import reduce

import structlog

from speechindex.interfaces.tokenizer import ITokenizer, Sentence
from speechindex.models.speech import Segment
from speechindex.utils.errors import ConfigurationError, SegmentationError

logger = structlog.get_logger(logger_name=__name__)

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class _Pack:
    """Greedy packing state: the open segment plus everything emitted so far."""

    parts: tuple[str, ...] = ()
    tokens: int = 0
    emitted: tuple[Sentence, ...] = ()

    def add(self, unit: Sentence) -> _Pack:
        return _Pack(self.parts + (unit.text,), self.tokens + unit.token_count, self.emitted)

    def flush(self) -> _Pack:
        if not self.parts:
            return self
        packed = Sentence(text=" ".join(self.parts), token_count=self.tokens)
        return _Pack(emitted=self.emitted + (packed,))

    def emit(self, units: Sequence[Sentence]) -> _Pack:
        """Flush the open segment, then append *units* as finished segments."""
        return _Pack(emitted=self.flush().emitted + tuple(units))


class TextSegmenter:
    """Splits text into token-bounded segments.

    Parameters
    ----------
    tokenizer:
        Decides token counts and sentence / word boundaries.
    max_tokens:
        Default token budget per segment; can be overridden per call.
    """

    def __init__(self, tokenizer: ITokenizer, max_tokens: int = 256) -> None:
        self._tokenizer = tokenizer
        self._max_tokens = self._validate(max_tokens)

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def segment(
        self,
        body: str,
        max_tokens: int | None = None,
        source_document_id: str = "",
    ) -> list[Segment]:
        """Split *body* into segments of at most *max_tokens* tokens.

        Parameters
        ----------
        body:
            Full document text.
        max_tokens:
            Token budget for this call; the constructor default when omitted.
        source_document_id:
            Copied into every segment.

        Returns
        -------
        list[Segment]
            Segments in document order.  Empty or whitespace-only input
            returns an empty list.

        Raises
        ------
        ConfigurationError
            If *max_tokens* is smaller than 1.
        SegmentationError
            If the tokenizer fails on the text.
        """
        budget = self._max_tokens if max_tokens is None else self._validate(max_tokens)
        if not body or not body.strip():
            return []

        try:
            pieces = self._segment(body, budget)
        except SegmentationError:
            raise
        except Exception as exc:
            raise SegmentationError(
                message=f"Tokenizer failed while segmenting document {source_document_id!r}: {exc}",
                provider_name=self._tokenizer.get_provider_name(),
            ) from exc

        segments = [
            Segment(text=p.text, token_count=p.token_count, source_document_id=source_document_id)
            for p in pieces
        ]
        logger.debug(
            "segmentation_complete",
            source_document_id=source_document_id,
            segments=len(segments),
            max_tokens=budget,
            oversized=sum(1 for s in segments if s.token_count > budget),
        )
        return segments

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    def _segment(self, body: str, budget: int) -> list[Sentence]:
        total = self._tokenizer.count_tokens(body)
        if total <= budget:
            return [Sentence(text=body, token_count=total)]

        pieces: list[Sentence] = []
        for paragraph in self._split_paragraphs(body):
            tokens = self._tokenizer.count_tokens(paragraph)
            if tokens <= budget:
                pieces.append(Sentence(text=paragraph, token_count=tokens))
            else:
                pieces.extend(self._pack_sentences(paragraph, budget))
        return pieces

    @staticmethod
    def _split_paragraphs(text: str) -> list[str]:
        """Split *text* on blank lines, discarding empties."""
        parts = _PARAGRAPH_BREAK.split(text)
        return [p.strip() for p in parts if p.strip()]

    def _pack_sentences(self, paragraph: str, budget: int) -> tuple[Sentence, ...]:
        return self._pack(
            self._tokenizer.sentences(paragraph),
            budget,
            lambda sentence: self._pack_words(sentence.text, budget),
        )

    def _pack_words(self, sentence: str, budget: int) -> tuple[Sentence, ...]:
        words = [
            Sentence(text=w, token_count=self._tokenizer.count_tokens(w))
            for w in self._tokenizer.words(sentence)
        ]
        # A word over budget is irreducible.
        return self._pack(words, budget, lambda word: (word,))

    @staticmethod
    def _pack(
        units: Sequence[Sentence],
        budget: int,
        explode: Callable[[Sentence], Sequence[Sentence]],
    ) -> tuple[Sentence, ...]:
        """Greedily pack *units* left to right into segments within *budget*.

        A unit larger than *budget* closes the open segment and is replaced
        by ``explode(unit)``.
        """

        def step(acc: _Pack, unit: Sentence) -> _Pack:
            if unit.token_count > budget:
                return acc.emit(explode(unit))
            if acc.tokens + unit.token_count <= budget:
                return acc.add(unit)
            return acc.flush().add(unit)

        return reduce(step, units, _Pack()).flush().emitted

    @staticmethod
    def _validate(max_tokens: int) -> int:
        if max_tokens < 1:
            raise ConfigurationError(message=f"max_tokens must be >= 1, got {max_tokens}")
        return max_tokens
