"""Performance report built from a :class:`MasteryTracker`.

``Report.to_dict()`` is the stable, JSON-ready shape shown to users and sent
to the feedback agent. Percentages are two-decimal strings (``"66.67"``);
``None`` marks a value with no data behind it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Literal,
    Mapping,
    Optional,
    Sequence,
)

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .tracker import MasteryTracker

__all__ = [
    "ConceptReport",
    "FocusItem",
    "FocusKind",
    "OverallReport",
    "Report",
    "TimeAnalysis",
    "TopicReport",
    "build_report",
    "format_percentage",
    "generate_recommended_focus",
    "render_report",
]

FocusKind = Literal["weak", "practice"]


def format_percentage(correct: int, total: int) -> Optional[str]:
    if total <= 0:
        return None
    return f"{correct / total * 100:.2f}"


@dataclass(frozen=True)
class OverallReport:
    correct: int
    total: int
    percentage: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correct": self.correct,
            "total": self.total,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class TopicReport:
    correct: int
    total: int
    percentage: Optional[str]
    weak_areas: tuple[str, ...]
    average_time_seconds: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correct": self.correct,
            "total": self.total,
            "percentage": self.percentage,
            "weakAreas": list(self.weak_areas),
            "averageTimeSeconds": self.average_time_seconds,
        }


@dataclass(frozen=True)
class ConceptReport:
    correct: int
    total: int
    percentage: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correct": self.correct,
            "total": self.total,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class TimeAnalysis:
    samples: int
    total_seconds: float
    average_time_seconds: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "samples": self.samples,
            "totalSeconds": self.total_seconds,
            "averageTimeSeconds": self.average_time_seconds,
        }


@dataclass(frozen=True)
class FocusItem:
    concept: str
    kind: FocusKind
    mastery_percentage: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "concept": self.concept,
            "kind": self.kind,
            "masteryPercentage": self.mastery_percentage,
        }


@dataclass(frozen=True)
class Report:
    overall: OverallReport
    topic_wise: Mapping[str, TopicReport]
    concept_mastery: Mapping[str, ConceptReport]
    weak_areas: tuple[str, ...]
    time_analysis: Mapping[str, TimeAnalysis]
    recommended_focus: tuple[FocusItem, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall.to_dict(),
            "topicWise": {
                name: topic.to_dict()
                for name, topic in self.topic_wise.items()
            },
            "conceptMastery": {
                name: concept.to_dict()
                for name, concept in self.concept_mastery.items()
            },
            "weakAreas": list(self.weak_areas),
            "timeAnalysis": {
                name: analysis.to_dict()
                for name, analysis in self.time_analysis.items()
            },
            "recommendedFocus": [
                item.to_dict() for item in self.recommended_focus
            ],
        }


def build_report(tracker: "MasteryTracker") -> Report:
    """Snapshot ``tracker`` into a :class:`Report` without mutating it."""

    overall = OverallReport(
        correct=tracker.correct_answers,
        total=tracker.total_questions,
        percentage=format_percentage(
            tracker.correct_answers, tracker.total_questions
        ),
    )
    topic_wise = {
        name: TopicReport(
            correct=stats.correct_count,
            total=stats.total_count,
            percentage=format_percentage(
                stats.correct_count, stats.total_count
            ),
            weak_areas=tuple(sorted(stats.weak_concepts)),
            average_time_seconds=stats.average_time_seconds,
        )
        for name, stats in tracker.topics.items()
    }
    concept_mastery = {
        name: ConceptReport(
            correct=stats.correct_count,
            total=stats.total_count,
            percentage=format_percentage(
                stats.correct_count, stats.total_count
            ),
        )
        for name, stats in tracker.concepts.items()
    }
    time_analysis: Dict[str, TimeAnalysis] = {}
    for name in tracker.time_topics():
        samples = tracker.time_samples(name)
        stats = tracker.topic_stats(name)
        time_analysis[name] = TimeAnalysis(
            samples=len(samples),
            total_seconds=round(sum(samples), 2),
            average_time_seconds=(
                stats.average_time_seconds if stats is not None else None
            ),
        )
    return Report(
        overall=overall,
        topic_wise=topic_wise,
        concept_mastery=concept_mastery,
        weak_areas=tracker.weak_areas,
        time_analysis=time_analysis,
        recommended_focus=tuple(generate_recommended_focus(tracker)),
    )


def generate_recommended_focus(tracker: "MasteryTracker") -> List[FocusItem]:
    """Rank concepts that need attention, lowest mastery first.

    Weak areas are listed only while their ratio stays below
    ``recommend_weak_below``; a weak area between that and the weak
    threshold is left out on purpose. Concepts that were never weak are
    suggested for practice below ``recommend_practice_below``.
    """

    candidates: List[tuple[float, FocusItem]] = []
    weak = set(tracker.weak_areas)
    for concept in tracker.weak_areas:
        stats = tracker.concept_stats(concept)
        ratio = stats.ratio if stats is not None else None
        if ratio is not None and ratio < tracker.recommend_weak_below:
            candidates.append((ratio, _focus_item(concept, "weak", stats)))
    for concept, stats in tracker.concepts.items():
        if concept in weak:
            continue
        ratio = stats.ratio
        if ratio is not None and ratio < tracker.recommend_practice_below:
            candidates.append((ratio, _focus_item(concept, "practice", stats)))
    candidates.sort(key=lambda pair: pair[0])
    return [item for _, item in candidates]


def _focus_item(concept: str, kind: FocusKind, stats: Any) -> FocusItem:
    percentage = format_percentage(stats.correct_count, stats.total_count)
    return FocusItem(
        concept=concept,
        kind=kind,
        mastery_percentage=percentage or "0.00",
    )


def render_report(console: Console, report: Report) -> None:
    """Print ``report`` as Rich tables."""

    console.print()
    console.rule(Text("Performance Report", style="bold magenta"))

    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Total questions", str(report.overall.total))
    overview.add_row("Correct", str(report.overall.correct))
    overview.add_row("Accuracy", _percent_cell(report.overall.percentage))
    console.print(overview)

    if not report.overall.total:
        console.print(Text("No answers recorded yet.", style="dim"))
        return

    if report.topic_wise:
        topics = Table(title="Per topic", box=box.SIMPLE, expand=False)
        topics.add_column("Topic")
        topics.add_column("Correct", justify="right")
        topics.add_column("Total", justify="right")
        topics.add_column("Accuracy", justify="right")
        topics.add_column("Avg time", justify="right")
        topics.add_column("Weak areas")
        for name, topic in report.topic_wise.items():
            avg = (
                f"{topic.average_time_seconds:.2f}s"
                if topic.average_time_seconds is not None
                else "-"
            )
            topics.add_row(
                name,
                str(topic.correct),
                str(topic.total),
                _percent_cell(topic.percentage),
                avg,
                ", ".join(topic.weak_areas) or "-",
            )
        console.print(topics)

    if report.concept_mastery:
        concepts = Table(title="Concept mastery", box=box.SIMPLE)
        concepts.add_column("Concept")
        concepts.add_column("Correct", justify="right")
        concepts.add_column("Total", justify="right")
        concepts.add_column("Mastery", justify="right")
        for name, concept in report.concept_mastery.items():
            concepts.add_row(
                name,
                str(concept.correct),
                str(concept.total),
                _percent_cell(concept.percentage),
            )
        console.print(concepts)

    _render_focus(console, report.recommended_focus)


def _render_focus(console: Console, items: Sequence[FocusItem]) -> None:
    if not items:
        return
    focus = Table(title="Recommended focus", box=box.SIMPLE)
    focus.add_column("Concept")
    focus.add_column("Kind")
    focus.add_column("Mastery", justify="right")
    for item in items:
        style = "red" if item.kind == "weak" else "yellow"
        focus.add_row(
            item.concept,
            Text(item.kind, style=style),
            f"{item.mastery_percentage}%",
        )
    console.print(focus)


def _percent_cell(value: Optional[str]) -> str:
    return f"{value}%" if value is not None else "n/a"
