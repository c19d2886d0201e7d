"""Text normalization and token-set similarity used for page matching."""

import re
from typing import List, Tuple

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapses every whitespace run (spaces, tabs, newlines) to one space and trims."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_text(text: str) -> str:
    """
    Normalizes text for comparison.

    Lower-cases with Unicode-aware casing, trims, and collapses whitespace.
    Diacritics and non-Latin scripts are kept as-is. Apply it to BOTH sides of
    every comparison.
    """
    return normalize_whitespace(text.lower())


def tokenize(text: str) -> set:
    """Splits on whitespace into a set of unique tokens."""
    return set(text.split())


def jaccard_similarity(text1: str, text2: str) -> float:
    """
    Token-set Jaccard index: |intersection| / |union|.

    "hello world" vs "hello there" -> {hello} / {hello, world, there} = 1/3.
    Two empty inputs are identical (1.0).
    """
    tokens1 = tokenize(text1)
    tokens2 = tokenize(text2)
    union = tokens1 | tokens2
    if not union:
        return 1.0
    return len(tokens1 & tokens2) / len(union)


def word_diff(page_text: str, candidate_text: str) -> Tuple[List[str], List[str]]:
    """
    Word-level diff between edited page text and transcript text.

    Returns:
        (added, removed): words only in the page text, and words only in the
        transcript text, in their original order.
    """
    page_words = page_text.split()
    candidate_words = candidate_text.split()
    candidate_set = set(candidate_words)
    page_set = set(page_words)
    added = [w for w in page_words if w not in candidate_set]
    removed = [w for w in candidate_words if w not in page_set]
    return added, removed


def truncate(text: str, limit: int) -> str:
    """Shortens text for log and error output."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."
