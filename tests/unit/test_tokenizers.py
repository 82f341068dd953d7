"""Unit tests for RegexTokenizer and HuggingFaceTokenizer."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from speechindex.providers.tokenizer.huggingface_tokenizer import HuggingFaceTokenizer
from speechindex.providers.tokenizer.regex_tokenizer import RegexTokenizer
from speechindex.utils.errors import SegmentationError


class TestRegexTokenizer:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("", 0),
            ("   ", 0),
            ("Liberty", 1),
            ("Give me liberty, or give me death!", 9),
            ("a self-evident truth", 3),
            ("the nation's hope", 3),
        ],
    )
    def test_count_tokens(self, text: str, expected: int) -> None:
        assert RegexTokenizer().count_tokens(text) == expected

    def test_sentences_respect_abbreviations(self) -> None:
        text = "Mr. Lincoln spoke at 3 p.m. in the U.S. Capitol. It was brief! Was it?"
        sentences = RegexTokenizer().sentences(text)

        assert [s.text for s in sentences] == [
            "Mr. Lincoln spoke at 3 p.m. in the U.S. Capitol.",
            "It was brief!",
            "Was it?",
        ]
        assert sentences[1].token_count == 4

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("He said No. Then he left.", ["He said No.", "Then he left."]),
            ("Resolution No. 5 passed. We adjourned.", ["Resolution No. 5 passed.", "We adjourned."]),
            ("See No.12 below. Done.", ["See No.12 below.", "Done."]),
        ],
    )
    def test_no_is_abbreviation_only_before_a_number(self, text: str, expected: list[str]) -> None:
        assert [s.text for s in RegexTokenizer().sentences(text)] == expected

    def test_text_without_terminator_is_one_sentence(self) -> None:
        sentences = RegexTokenizer().sentences("  we shall overcome  ")
        assert [s.text for s in sentences] == ["we shall overcome"]

    def test_closing_quote_stays_with_sentence(self) -> None:
        sentences = RegexTokenizer().sentences('He said "No more." Then he sat.')
        assert [s.text for s in sentences] == ['He said "No more."', "Then he sat."]

    def test_words_split_on_whitespace(self) -> None:
        assert RegexTokenizer().words(" ask not\twhat\nyour ") == ["ask", "not", "what", "your"]

    def test_provider_name(self) -> None:
        assert RegexTokenizer().get_provider_name() == "regex"


class TestHuggingFaceTokenizer:
    @pytest.fixture()
    def fake_tokenizer(self) -> MagicMock:
        fake = MagicMock()
        # Two subword ids per whitespace word.
        fake.encode.side_effect = lambda text, add_special_tokens=False: SimpleNamespace(
            ids=list(range(2 * len(text.split())))
        )
        return fake

    def test_counts_subword_tokens_without_special_tokens(self, fake_tokenizer) -> None:
        tokenizer = HuggingFaceTokenizer(tokenizer=fake_tokenizer)

        assert tokenizer.count_tokens("four score and seven") == 8
        fake_tokenizer.encode.assert_called_with("four score and seven", add_special_tokens=False)

    def test_sentences_use_model_counts(self, fake_tokenizer) -> None:
        tokenizer = HuggingFaceTokenizer(tokenizer=fake_tokenizer)

        sentences = tokenizer.sentences("One two. Three.")

        assert [(s.text, s.token_count) for s in sentences] == [("One two.", 4), ("Three.", 2)]

    def test_blank_text_is_zero_without_loading(self) -> None:
        assert HuggingFaceTokenizer(model_name="does-not-exist").count_tokens("  ") == 0

    def test_encode_failure_raises_segmentation_error(self, fake_tokenizer) -> None:
        fake_tokenizer.encode.side_effect = ValueError("bad utf-8")
        tokenizer = HuggingFaceTokenizer(tokenizer=fake_tokenizer)

        with pytest.raises(SegmentationError, match="bad utf-8"):
            tokenizer.count_tokens("text")

    def test_provider_name(self) -> None:
        assert HuggingFaceTokenizer(model_name="org/bert-base-cased").get_provider_name() == (
            "huggingface_bert-base-cased"
        )
