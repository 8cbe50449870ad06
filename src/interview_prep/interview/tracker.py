"""In-memory mastery tracking for one interview run.

A :class:`MasteryTracker` owns every counter for the run. Topic and concept
statistics are created on first use and only ever grow; the weak-area set
only ever gains members. Nothing here performs IO or raises for odd input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import (
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
)

from .concepts import CONCEPT_VOCABULARY, tag_concepts
from .report import Report, build_report

logger = logging.getLogger(__name__)

__all__ = [
    "WEAK_THRESHOLD",
    "RECOMMEND_WEAK_BELOW",
    "RECOMMEND_PRACTICE_BELOW",
    "AnswerEvent",
    "ConceptStats",
    "MasteryTracker",
    "TopicStats",
    "mastery_ratio",
]

WEAK_THRESHOLD = 0.7
RECOMMEND_WEAK_BELOW = 0.6
RECOMMEND_PRACTICE_BELOW = 0.8

Clock = Callable[[], datetime]


def mastery_ratio(correct: int, total: int) -> Optional[float]:
    """Return ``correct / total`` or ``None`` when nothing was answered."""

    if total <= 0:
        return None
    return correct / total


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ConceptStats:
    correct_count: int = 0
    total_count: int = 0

    @property
    def ratio(self) -> Optional[float]:
        return mastery_ratio(self.correct_count, self.total_count)

    def record(self, is_correct: bool) -> None:
        self.total_count += 1
        if is_correct:
            self.correct_count += 1


@dataclass
class TopicStats:
    correct_count: int = 0
    total_count: int = 0
    weak_concepts: set[str] = field(default_factory=set)
    concept_counts: Dict[str, ConceptStats] = field(default_factory=dict)
    average_time_seconds: Optional[float] = None

    @property
    def ratio(self) -> Optional[float]:
        return mastery_ratio(self.correct_count, self.total_count)

    def record(self, is_correct: bool) -> None:
        self.total_count += 1
        if is_correct:
            self.correct_count += 1

    def concept(self, name: str) -> ConceptStats:
        return self.concept_counts.setdefault(name, ConceptStats())


@dataclass(frozen=True)
class AnswerEvent:
    """One recorded response; kept in the tracker's append-only history."""

    topic: str
    question_text: str
    is_correct: bool
    evaluation_text: str
    time_taken_seconds: Optional[float]
    concepts: frozenset[str]
    timestamp: datetime


class MasteryTracker:
    """Aggregate answer outcomes into topic and concept mastery."""

    def __init__(
        self,
        *,
        vocabulary: Sequence[str] = CONCEPT_VOCABULARY,
        weak_threshold: float = WEAK_THRESHOLD,
        recommend_weak_below: float = RECOMMEND_WEAK_BELOW,
        recommend_practice_below: float = RECOMMEND_PRACTICE_BELOW,
        clock: Clock = _utcnow,
    ) -> None:
        self.vocabulary = tuple(vocabulary)
        self.weak_threshold = weak_threshold
        self.recommend_weak_below = recommend_weak_below
        self.recommend_practice_below = recommend_practice_below
        self._clock = clock
        self._correct_answers = 0
        self._total_questions = 0
        self._topics: Dict[str, TopicStats] = {}
        self._concepts: Dict[str, ConceptStats] = {}
        self._weak_areas: Dict[str, None] = {}
        self._time_spent: Dict[str, List[float]] = {}
        self._history: List[AnswerEvent] = []

    @property
    def correct_answers(self) -> int:
        return self._correct_answers

    @property
    def total_questions(self) -> int:
        return self._total_questions

    @property
    def topics(self) -> Mapping[str, TopicStats]:
        return MappingProxyType(self._topics)

    @property
    def concepts(self) -> Mapping[str, ConceptStats]:
        return MappingProxyType(self._concepts)

    @property
    def weak_areas(self) -> tuple[str, ...]:
        """Weak concepts in the order they were first flagged."""
        return tuple(self._weak_areas)

    @property
    def history(self) -> tuple[AnswerEvent, ...]:
        return tuple(self._history)

    def topic_stats(self, topic: str) -> Optional[TopicStats]:
        return self._topics.get(topic)

    def concept_stats(self, concept: str) -> Optional[ConceptStats]:
        return self._concepts.get(concept)

    def time_samples(self, topic: str) -> tuple[float, ...]:
        return tuple(self._time_spent.get(topic, ()))

    def time_topics(self) -> Iterable[str]:
        return tuple(self._time_spent)

    def record_answer(
        self,
        topic: str,
        question_text: str,
        is_correct: bool,
        evaluation_text: str,
        time_taken_seconds: Optional[float] = None,
    ) -> AnswerEvent:
        """Fold one answer into the running statistics."""

        is_correct = bool(is_correct)
        self._total_questions += 1
        if is_correct:
            self._correct_answers += 1

        topic_stats = self._topics.setdefault(topic, TopicStats())
        topic_stats.record(is_correct)

        # Zero means "not timed"; negative samples are ignored as well.
        if time_taken_seconds and time_taken_seconds > 0:
            samples = self._time_spent.setdefault(topic, [])
            samples.append(float(time_taken_seconds))
            topic_stats.average_time_seconds = round(
                sum(samples) / len(samples), 2
            )

        concepts = tag_concepts(question_text, self.vocabulary)
        for concept in sorted(concepts):
            self._concepts.setdefault(concept, ConceptStats()).record(
                is_correct
            )
            topic_stats.concept(concept).record(is_correct)

        event = AnswerEvent(
            topic=topic,
            question_text=question_text,
            is_correct=is_correct,
            evaluation_text=evaluation_text,
            time_taken_seconds=time_taken_seconds,
            concepts=concepts,
            timestamp=self._clock(),
        )
        self._history.append(event)

        flagged: List[str] = []
        if not is_correct:
            for concept in sorted(concepts):
                ratio = self._concepts[concept].ratio
                if ratio is not None and ratio < self.weak_threshold:
                    self._weak_areas.setdefault(concept, None)
                    topic_stats.weak_concepts.add(concept)
                    flagged.append(concept)

        logger.debug(
            "Recorded answer",
            extra={
                "topic": topic,
                "is_correct": is_correct,
                "concepts": sorted(concepts),
                "weak_flagged": flagged,
                "total_questions": self._total_questions,
            },
        )
        return event

    def build_report(self) -> Report:
        return build_report(self)
