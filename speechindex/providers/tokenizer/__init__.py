"""Tokenizer implementations.

    RegexTokenizer        -- words and punctuation marks, no dependencies.
    HuggingFaceTokenizer  -- model subword tokens via ``tokenizers``.
"""

from speechindex.providers.tokenizer.huggingface_tokenizer import HuggingFaceTokenizer
from speechindex.providers.tokenizer.regex_tokenizer import RegexTokenizer

__all__ = ["HuggingFaceTokenizer", "RegexTokenizer"]
