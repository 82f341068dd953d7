"""Unit tests for TextSegmenter -- paragraph → sentence → word segmentation."""

from __future__ import annotations

import re
from unittest.mock import MagicMock

import pytest

from speechindex.interfaces.tokenizer import ITokenizer, Sentence
from speechindex.services.ingestion.segmenter import TextSegmenter
from speechindex.utils.errors import ConfigurationError, SegmentationError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _make_segmenter(tokenizer, max_tokens: int = 10) -> TextSegmenter:  # noqa: ANN001
    return TextSegmenter(tokenizer, max_tokens=max_tokens)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestWholeDocument:
    def test_document_that_fits_is_one_unchanged_segment(self, tokenizer) -> None:
        body = "We hold these truths to be self-evident today"  # 8 tokens
        assert tokenizer.count_tokens(body) == 8

        segments = _make_segmenter(tokenizer, max_tokens=10).segment(body, source_document_id="d1")

        assert len(segments) == 1
        assert segments[0].text == body
        assert segments[0].token_count == 8
        assert segments[0].source_document_id == "d1"

    def test_empty_body_yields_no_segments(self, tokenizer) -> None:
        segmenter = _make_segmenter(tokenizer)
        assert segmenter.segment("") == []
        assert segmenter.segment("   \n\n  \t") == []


class TestParagraphSplit:
    def test_oversized_paragraph_is_word_packed(self, tokenizer) -> None:
        body = "one two three four\n\nfive six"

        segments = _make_segmenter(tokenizer, max_tokens=3).segment(body)

        assert [s.text for s in segments] == ["one two three", "four", "five six"]
        assert [s.token_count for s in segments] == [3, 1, 2]

    def test_paragraphs_that_fit_are_kept_whole(self, tokenizer) -> None:
        body = "First paragraph here.\n\n  \n\nSecond paragraph here."

        segments = _make_segmenter(tokenizer, max_tokens=5).segment(body)

        assert [s.text for s in segments] == ["First paragraph here.", "Second paragraph here."]


class TestSentencePacking:
    def test_sentences_are_packed_greedily(self, tokenizer) -> None:
        # 4 + 4 + 4 + 3 tokens; the period counts as a token.
        body = "Go on now. We are here. They left us. Stay put."

        segments = _make_segmenter(tokenizer, max_tokens=8).segment(body)

        assert [s.text for s in segments] == ["Go on now. We are here.", "They left us. Stay put."]
        assert [s.token_count for s in segments] == [8, 7]

    def test_oversized_sentence_flushes_accumulator(self, tokenizer) -> None:
        body = "Short one. this sentence is far too long for the budget. End."

        segments = _make_segmenter(tokenizer, max_tokens=4).segment(body)

        assert segments[0].text == "Short one."
        assert segments[-1].text == "End."
        assert _collapse(" ".join(s.text for s in segments)) == _collapse(body)
        assert all(s.token_count <= 4 for s in segments)

    def test_irreducible_word_is_its_own_segment(self, tokenizer) -> None:
        # "supercalifragilistic" weighs 9 tokens; every other word weighs 1.
        def _count(text: str) -> int:
            return tokenizer.count_tokens(text) + 8 * text.split().count("supercalifragilistic")

        weighted = MagicMock(spec=ITokenizer)
        weighted.count_tokens.side_effect = _count
        weighted.sentences.side_effect = lambda text: [
            Sentence(text=s.text, token_count=_count(s.text)) for s in tokenizer.sentences(text)
        ]
        weighted.words.side_effect = tokenizer.words
        weighted.get_provider_name.return_value = "weighted"

        body = "say supercalifragilistic twice now"
        segments = _make_segmenter(weighted, max_tokens=3).segment(body)

        assert [s.text for s in segments] == ["say", "supercalifragilistic", "twice now"]
        assert segments[1].token_count == 9


class TestInvariants:
    @pytest.mark.parametrize("budget", [1, 3, 8, 25, 60])
    def test_budget_and_round_trip(self, tokenizer, sample_speech_text: str, budget: int) -> None:
        segments = _make_segmenter(tokenizer, max_tokens=budget).segment(sample_speech_text)

        for segment in segments:
            if segment.token_count > budget:
                assert len(segment.text.split()) == 1, "Only single words may exceed the budget"
        joined = " ".join(s.text for s in segments)
        assert _collapse(joined) == _collapse(sample_speech_text)

    def test_deterministic(self, tokenizer, sample_speech_text: str) -> None:
        segmenter = _make_segmenter(tokenizer, max_tokens=12)
        assert segmenter.segment(sample_speech_text) == segmenter.segment(sample_speech_text)

    def test_per_call_budget_overrides_default(self, tokenizer, sample_speech_text: str) -> None:
        segmenter = _make_segmenter(tokenizer, max_tokens=1000)
        assert len(segmenter.segment(sample_speech_text)) == 1
        assert len(segmenter.segment(sample_speech_text, max_tokens=20)) > 1


class TestErrors:
    def test_invalid_budget(self, tokenizer) -> None:
        with pytest.raises(ConfigurationError):
            TextSegmenter(tokenizer, max_tokens=0)
        with pytest.raises(ConfigurationError):
            _make_segmenter(tokenizer).segment("text", max_tokens=-1)

    def test_tokenizer_failure_becomes_segmentation_error(self) -> None:
        tokenizer = MagicMock(spec=ITokenizer)
        tokenizer.count_tokens.side_effect = RuntimeError("vocab missing")
        tokenizer.get_provider_name.return_value = "broken"

        with pytest.raises(SegmentationError, match="vocab missing"):
            _make_segmenter(tokenizer).segment("some text", source_document_id="d9")
