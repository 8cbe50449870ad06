"""Fixed-vocabulary concept tagging for question text."""

from __future__ import annotations

from typing import Iterable, Optional

__all__ = ["CONCEPT_VOCABULARY", "tag_concepts"]

CONCEPT_VOCABULARY: tuple[str, ...] = (
    "array",
    "function",
    "class",
    "object",
    "loop",
    "variable",
    "recursion",
    "inheritance",
    "async",
    "promise",
    "component",
    "state",
    "props",
    "api",
    "database",
    "algorithm",
)


def tag_concepts(
    question_text: str,
    vocabulary: Optional[Iterable[str]] = None,
) -> frozenset[str]:
    """Return the vocabulary terms that appear as whole tokens in the text.

    Tokens are whitespace-separated and compared lower-cased, so
    ``"function?"`` does not match ``"function"``.
    """

    terms = frozenset(
        term.lower()
        for term in (CONCEPT_VOCABULARY if vocabulary is None else vocabulary)
    )
    tokens = (question_text or "").lower().split()
    return frozenset(token for token in tokens if token in terms)
