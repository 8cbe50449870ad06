"""Turn generated question text into typed question records.

Model output is not guaranteed to follow the requested format, so parsing is
lenient: a malformed segment becomes a partially populated record instead of
failing the whole batch.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .prompts import QuestionKind

logger = logging.getLogger(__name__)

__all__ = [
    "QUESTION_DELIMITER",
    "CORRECT_MARKER",
    "MODEL_ANSWER_DELIMITER",
    "OPTION_LABELS",
    "McqQuestion",
    "TheoryQuestion",
    "Question",
    "extract",
    "normalize_kind",
    "normalize_label",
]

QUESTION_DELIMITER = "Question: "
CORRECT_MARKER = "Correct:"
MODEL_ANSWER_DELIMITER = "Model Answer:"
OPTION_LABELS = ("A", "B", "C", "D")

_label_re = re.compile(r"^\(?([A-Da-d])\)?(?=$|[\s).:,-])")


@dataclass(frozen=True)
class McqQuestion:
    """Multiple-choice question; ``options`` keeps the ``A)`` prefixes."""

    text: str
    options: tuple[str, ...]
    correct_label: Optional[str] = None

    @property
    def kind(self) -> QuestionKind:
        return "mcq"

    @property
    def correct_option(self) -> Optional[str]:
        if self.correct_label is None:
            return None
        return self.options[OPTION_LABELS.index(self.correct_label)]

    @property
    def is_complete(self) -> bool:
        return (
            len(self.options) == len(OPTION_LABELS)
            and self.correct_label is not None
        )


@dataclass(frozen=True)
class TheoryQuestion:
    """Open question with the generator's reference answer."""

    text: str
    model_answer: str = ""

    @property
    def kind(self) -> QuestionKind:
        return "theory"

    @property
    def is_complete(self) -> bool:
        return bool(self.model_answer)


Question = Union[McqQuestion, TheoryQuestion]


def normalize_kind(value: str) -> QuestionKind:
    """Map free-form user input onto a question kind.

    Anything other than ``mcq`` (case-insensitive) is a theory request.
    """

    return "mcq" if str(value).strip().lower() == "mcq" else "theory"


def normalize_label(raw: Optional[str], option_count: int) -> Optional[str]:
    """Reduce a ``Correct:`` value to a single option letter.

    Accepts ``B``, ``b``, ``B)``, ``(B)`` and ``B) text``. Returns ``None``
    when the value is not a letter A-D or points past the parsed options.
    """

    if raw is None:
        return None
    match = _label_re.match(raw.strip())
    if not match:
        return None
    label = match.group(1).upper()
    if OPTION_LABELS.index(label) >= option_count:
        return None
    return label


def extract(raw_text: str, kind: QuestionKind) -> List[Question]:
    """Parse ``raw_text`` into one question per ``Question:`` segment."""

    segments = _split_segments(raw_text or "")
    if kind == "mcq":
        questions: List[Question] = [_parse_mcq(seg) for seg in segments]
    else:
        questions = [_parse_theory(seg) for seg in segments]
    incomplete = sum(1 for q in questions if not q.is_complete)
    logger.debug(
        "Extracted questions",
        extra={
            "kind": kind,
            "segments": len(segments),
            "incomplete": incomplete,
        },
    )
    return questions


def _split_segments(raw_text: str) -> List[str]:
    # Text before the first marker is preamble, never a question.
    _, *segments = raw_text.split(QUESTION_DELIMITER)
    return [segment for segment in segments if segment.strip()]


def _parse_mcq(segment: str) -> McqQuestion:
    lines = [line for line in segment.split("\n") if line.strip()]
    text = lines[0].strip()
    options = tuple(line.strip() for line in lines[1 : len(OPTION_LABELS) + 1])
    raw_label = _find_correct_value(lines)
    label = normalize_label(raw_label, len(options))
    if raw_label is not None and label is None:
        logger.debug(
            "Discarded unusable answer label",
            extra={"raw_label": raw_label, "options": len(options)},
        )
    return McqQuestion(text=text, options=options, correct_label=label)


def _find_correct_value(lines: Sequence[str]) -> Optional[str]:
    for line in lines:
        if line.startswith(CORRECT_MARKER):
            return line.partition(":")[2].strip()
    return None


def _parse_theory(segment: str) -> TheoryQuestion:
    text, _, answer = segment.partition(MODEL_ANSWER_DELIMITER)
    return TheoryQuestion(text=text.strip(), model_answer=answer.strip())
