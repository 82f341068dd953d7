"""Subword tokenizer backed by the HuggingFace ``tokenizers`` library.

Counts tokens the way the embedding model will see them, so segment
budgets line up with the model's real context window.  Special tokens
(``[CLS]``, ``[SEP]``) are excluded from every count.

Sentence splitting is delegated to :class:`RegexTokenizer`; only the
counting differs.
"""

from __future__ import annotations

import structlog

from speechindex.interfaces.tokenizer import ITokenizer, Sentence
from speechindex.providers.tokenizer.regex_tokenizer import RegexTokenizer
from speechindex.utils.errors import SegmentationError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "bert-base-uncased"


class HuggingFaceTokenizer(ITokenizer):
    """Tokenizer that counts model subword tokens.

    The pretrained tokenizer is loaded on first use (lazy initialization);
    the first load downloads the vocabulary from the HuggingFace Hub and
    caches it locally.  A ``tokenizer`` object can be injected for tests.
    """

    def __init__(self, model_name: str | None = None, tokenizer: object | None = None) -> None:
        self._model_name = model_name or _DEFAULT_MODEL
        self._tokenizer = tokenizer
        self._splitter = RegexTokenizer()

    def _load(self):  # noqa: ANN202
        if self._tokenizer is not None:
            return self._tokenizer
        try:
            from tokenizers import Tokenizer

            logger.info("loading_tokenizer", model=self._model_name)
            self._tokenizer = Tokenizer.from_pretrained(self._model_name)
        except Exception as exc:
            raise SegmentationError(
                message=f"Failed to load tokenizer '{self._model_name}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return self._tokenizer

    def count_tokens(self, text: str) -> int:
        if not text.strip():
            return 0
        tokenizer = self._load()
        try:
            return len(tokenizer.encode(text, add_special_tokens=False).ids)
        except Exception as exc:
            raise SegmentationError(
                message=f"Tokenizer failed to encode text: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def words(self, text: str) -> list[str]:
        return self._splitter.words(text)

    def sentences(self, text: str) -> list[Sentence]:
        return [
            Sentence(text=s.text, token_count=self.count_tokens(s.text))
            for s in self._splitter.sentences(text)
        ]

    def get_provider_name(self) -> str:
        return f"huggingface_{self._model_name.split('/')[-1]}"
