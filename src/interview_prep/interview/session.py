"""Rich-powered interview session loop.

The loop presents generated questions, reads answers from an injectable
input provider, asks the evaluator for a verdict and records every answered
question in a :class:`MasteryTracker`. Skipped questions are not recorded.
Stateful logic is kept small so the CLI and tests can drive it with canned
input.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .extractor import McqQuestion, Question, normalize_label
from .gateway import (
    GenerationFailure,
    Generator,
    evaluate_answer,
    judge_mcq,
    judge_theory,
    provide_hint,
)
from .tracker import MasteryTracker

logger = logging.getLogger(__name__)

InputProvider = Callable[[], str]
Clock = Callable[[], float]
ExitAction = Literal["completed", "quit", "empty", "failed"]

__all__ = [
    "InputProvider",
    "ExitAction",
    "SessionCommand",
    "QuestionOutcome",
    "InterviewResult",
    "parse_session_command",
    "run_interview_session",
]


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: Literal["answer", "skip", "hint", "quit"]
    text: str | None = None


@dataclass(frozen=True)
class QuestionOutcome:
    """What happened to one question during the session."""

    index: int
    question_text: str
    answer: str | None
    evaluation: str | None
    is_correct: bool
    skipped: bool
    time_taken_seconds: float | None = None


@dataclass(frozen=True)
class InterviewResult:
    """Return value from ``run_interview_session``."""

    topic: str
    outcomes: list[QuestionOutcome]
    exit_action: ExitAction
    total_questions: int
    error: str | None = None

    @property
    def answered(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.skipped)

    @property
    def skipped(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.skipped)

    @property
    def correct(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.is_correct)


class _SessionAborted(Exception):
    def __init__(self, action: ExitAction, error: str | None = None):
        super().__init__(action)
        self.action = action
        self.error = error


def parse_session_command(
    raw: str | None, *, allow_hints: bool = False
) -> SessionCommand | None:
    """Parse raw user input into a structured command."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered == "skip":
        return SessionCommand("skip")
    if lowered in {"quit", "exit"}:
        return SessionCommand("quit")
    if allow_hints and lowered in {"hint", "?"}:
        return SessionCommand("hint")
    return SessionCommand("answer", text)


def run_interview_session(
    questions: Sequence[Question],
    *,
    topic: str,
    tracker: MasteryTracker,
    generator: Generator,
    console: Console,
    input_provider: InputProvider,
    clock: Clock = time.monotonic,
    allow_hints: bool = False,
    theory_pass_score: float = 7.0,
) -> InterviewResult:
    """Run an interactive interview over ``questions``."""

    if not questions:
        console.print(
            Panel(
                "No questions were generated.",
                title="Interview Session",
                border_style="yellow",
            )
        )
        return InterviewResult(topic, [], "empty", 0)

    outcomes: list[QuestionOutcome] = []
    exit_action: ExitAction = "completed"
    error: str | None = None
    for index, question in enumerate(questions):
        try:
            outcome = _ask_question(
                question,
                index=index,
                total=len(questions),
                topic=topic,
                tracker=tracker,
                generator=generator,
                console=console,
                input_provider=input_provider,
                clock=clock,
                allow_hints=allow_hints,
                theory_pass_score=theory_pass_score,
            )
        except _SessionAborted as exc:
            exit_action = exc.action
            error = exc.error
            break
        outcomes.append(outcome)

    result = InterviewResult(
        topic=topic,
        outcomes=outcomes,
        exit_action=exit_action,
        total_questions=len(questions),
        error=error,
    )
    logger.info(
        "Interview session finished",
        extra={
            "topic": topic,
            "exit_action": exit_action,
            "answered": result.answered,
            "skipped": result.skipped,
            "correct": result.correct,
        },
    )
    if isinstance(questions[0], McqQuestion) and exit_action != "failed":
        _render_score(console, result)
    console.print("\n[green]Interview session completed.[/]")
    return result


def _ask_question(
    question: Question,
    *,
    index: int,
    total: int,
    topic: str,
    tracker: MasteryTracker,
    generator: Generator,
    console: Console,
    input_provider: InputProvider,
    clock: Clock,
    allow_hints: bool,
    theory_pass_score: float,
) -> QuestionOutcome:
    _render_question(console, question, index, total, allow_hints)
    started = clock()
    while True:
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            raise _SessionAborted("quit")
        command = parse_session_command(raw, allow_hints=allow_hints)
        if command is None:
            console.print("[red]Please enter an answer, or 'skip'.[/]")
            continue
        if command.type == "quit":
            console.print("\n[bold yellow]Ending session early.[/]")
            raise _SessionAborted("quit")
        if command.type == "skip":
            console.print("[dim]Question skipped.[/]")
            return QuestionOutcome(
                index, question.text, None, None, False, skipped=True
            )
        if command.type == "hint":
            _show_hint(console, generator, question)
            continue
        answer = command.text or ""
        if isinstance(question, McqQuestion) and question.options:
            if normalize_label(answer, len(question.options)) is None:
                console.print(
                    "[red]'%s' is not a valid choice for this question.[/red]"
                    % answer,
                )
                continue
        break

    elapsed = round(max(clock() - started, 0.0), 2)
    try:
        evaluation = evaluate_answer(
            generator,
            question.text,
            answer,
            question.kind,
            _reference_for(question),
        )
    except GenerationFailure as exc:
        console.print(f"[bold red]Evaluation failed:[/] {exc}")
        raise _SessionAborted("failed", str(exc)) from exc

    if isinstance(question, McqQuestion):
        is_correct = judge_mcq(question, answer, evaluation)
    else:
        is_correct = judge_theory(evaluation, theory_pass_score)
    tracker.record_answer(
        topic,
        question.text,
        is_correct,
        evaluation,
        elapsed,
    )
    console.print(
        Panel(
            evaluation,
            title="Evaluation",
            border_style="green" if is_correct else "red",
        )
    )
    return QuestionOutcome(
        index,
        question.text,
        answer,
        evaluation,
        is_correct,
        skipped=False,
        time_taken_seconds=elapsed,
    )


def _reference_for(question: Question) -> Optional[str]:
    if isinstance(question, McqQuestion):
        return question.correct_option or question.correct_label
    return question.model_answer or None


def _show_hint(
    console: Console, generator: Generator, question: Question
) -> None:
    try:
        hint = provide_hint(generator, question.text, question.kind)
    except GenerationFailure as exc:
        console.print(f"[yellow]Hint unavailable:[/] {exc}")
        return
    console.print(Panel(hint, title="Hint", border_style="blue"))


def _render_question(
    console: Console,
    question: Question,
    index: int,
    total: int,
    allow_hints: bool,
) -> None:
    header = Text.assemble(
        (f"Question {index + 1}", "bold cyan"),
        (f" / {total}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.text, style="bold"))

    if isinstance(question, McqQuestion):
        for option in question.options:
            console.print(Text(option))
        prompt = "Your answer (A/B/C/D or 'skip')"
    else:
        prompt = "Your answer (or 'skip')"
    if allow_hints:
        prompt += ", 'hint' for a hint"
    console.print(Text(prompt + ", 'quit' to stop:", style="yellow"))


def _render_score(console: Console, result: InterviewResult) -> None:
    console.print()
    console.rule(Text("Final Results", style="bold cyan"))
    table = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD, expand=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    total = result.total_questions
    table.add_row("Correct answers", str(result.correct))
    table.add_row("Total questions", str(total))
    table.add_row("Skipped", str(result.skipped))
    table.add_row("Score", f"{result.correct}/{total}")
    percentage = result.correct / total * 100 if total else 0.0
    table.add_row("Percentage", f"{percentage:.2f}%")
    console.print(table)
