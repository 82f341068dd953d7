"""Dependency-free tokenizer based on regular expressions.

Counts words (including hyphenated and apostrophe compounds such as
"self-evident" or "nation's") and individual punctuation marks as one token
each.  Sentences are split at ``.``, ``!`` and ``?`` followed by whitespace
or end-of-text, with an abbreviation-aware splitter that avoids breaking on
"Mr.", "Gen.", "U.S." and similar.
"""

from __future__ import annotations

import re

import structlog

from speechindex.interfaces.tokenizer import ITokenizer, Sentence

logger = structlog.get_logger(logger_name=__name__)

_TOKEN_PATTERN = re.compile(r"\w+(?:[-'’]\w+)*|[^\w\s]")
_SENTENCE_END = re.compile(r"[.!?][\"'”’)\]]*(?:\s|$)")

# Titles and abbreviations common in political speeches that must NOT end a
# sentence.  "Gen. Washington" stays one sentence.
_ABBREVIATIONS = frozenset(
    {
        "Mr",
        "Mrs",
        "Ms",
        "Dr",
        "Prof",
        "Rev",
        "Hon",
        "Gen",
        "Gov",
        "Sen",
        "Rep",
        "Pres",
        "Col",
        "Capt",
        "Lt",
        "Sgt",
        "Jr",
        "Sr",
        "St",
        "Mt",
        "vs",
        "etc",
        "Jan",
        "Feb",
        "Aug",
        "Sept",
        "Oct",
        "Nov",
        "Dec",
    }
)
_ABBREVIATION_PATTERN = re.compile(
    r"\b(" + "|".join(sorted(_ABBREVIATIONS)) + r")\.",
)
# Initialisms such as "U.S." or "p.m." never end a sentence.
_INITIALISM_PATTERN = re.compile(r"\b(?:[A-Za-z]\.){2,}")
# "No." abbreviates "number" only when a numeral follows ("No. 5").
_NUMERO_PATTERN = re.compile(r"\bNo\.(?=\s*\d)")


class RegexTokenizer(ITokenizer):
    """Word-and-punctuation tokenizer that needs no model download."""

    def count_tokens(self, text: str) -> int:
        return len(_TOKEN_PATTERN.findall(text))

    def words(self, text: str) -> list[str]:
        return text.split()

    def sentences(self, text: str) -> list[Sentence]:
        return [Sentence(text=s, token_count=self.count_tokens(s)) for s in self._split(text)]

    def get_provider_name(self) -> str:
        return "regex"

    @staticmethod
    def _split(text: str) -> list[str]:
        """Split *text* at sentence boundaries while respecting abbreviations.

        Periods that belong to abbreviations are masked with ``\\x00`` (same
        length, so match offsets still index into the original text).
        """
        if not text.strip():
            return []

        masked = _ABBREVIATION_PATTERN.sub(lambda m: m.group(1) + "\x00", text)
        masked = _INITIALISM_PATTERN.sub(lambda m: m.group(0).replace(".", "\x00"), masked)
        masked = _NUMERO_PATTERN.sub("No\x00", masked)

        sentences: list[str] = []
        last = 0
        for match in _SENTENCE_END.finditer(masked):
            end = match.end()
            sentence = text[last:end].strip()
            if sentence:
                sentences.append(sentence)
            last = end

        # Trailing text that didn't end with punctuation.
        remainder = text[last:].strip()
        if remainder:
            sentences.append(remainder)

        return sentences
