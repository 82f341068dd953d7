"""Abstract base class for tokenizer providers.

A tokenizer decides how many tokens a piece of text costs against the
segment budget and how text is split into sentences and words.  The
segmenter never counts tokens itself; it always asks the injected
tokenizer, so swapping the tokenizer changes every budget decision
consistently.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Sentence:
    """One sentence of a paragraph together with its token cost."""

    text: str
    token_count: int


# Concrete implementations:
#   RegexTokenizer       -- dependency-free word/punctuation tokens (default)
#   HuggingFaceTokenizer -- subword tokens from a pretrained ``tokenizers`` model
# Located in: speechindex/providers/tokenizer/
class ITokenizer(ABC):
    """Contract for token counting and sentence / word splitting.

    All methods are synchronous and pure: the same input always yields the
    same output.  Implementations raise
    :class:`~speechindex.utils.errors.SegmentationError` when the
    underlying model cannot process the text.
    """

    @abstractmethod
    def count_tokens(self, text: str) -> int:
        """Return the number of tokens in *text*.

        Parameters
        ----------
        text:
            Any string; whitespace-only text counts as ``0`` tokens.

        Returns
        -------
        int
            Non-negative token count.
        """

    @abstractmethod
    def sentences(self, text: str) -> list[Sentence]:
        """Split *text* into sentences, each with its token count.

        Parameters
        ----------
        text:
            A single paragraph.

        Returns
        -------
        list[Sentence]
            Sentences in reading order.  Text that carries no sentence
            boundary is returned as one sentence.  Empty text yields ``[]``.
        """

    @abstractmethod
    def words(self, text: str) -> list[str]:
        """Split *text* into whitespace-delimited words, in order."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"regex"``."""
