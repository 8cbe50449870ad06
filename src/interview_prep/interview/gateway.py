"""Generation gateway and the agents built on top of it.

Every model call goes through a :class:`Generator`. The OpenAI adapter turns
client errors into :class:`GenerationFailure`; nothing here retries.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Mapping, Optional, Protocol, Union

from ..core.ai import load_client
from ..core.config import AIConfig
from . import prompts
from .extractor import McqQuestion, Question, extract, normalize_label
from .prompts import QuestionKind

logger = logging.getLogger(__name__)

__all__ = [
    "GenerationFailure",
    "Generator",
    "OpenAIGenerator",
    "NO_QUESTION_TEXT",
    "NO_EVALUATION_TEXT",
    "analyze_topic",
    "evaluate_answer",
    "generate_practice_questions",
    "generate_questions",
    "judge_mcq",
    "judge_theory",
    "parse_theory_score",
    "provide_hint",
    "recommend_resources",
    "summarize_feedback",
]

NO_QUESTION_TEXT = "No valid question to evaluate."
NO_EVALUATION_TEXT = "Evaluation not available."

_score_re = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:/|out of)\s*10\b", re.IGNORECASE
)


class GenerationFailure(RuntimeError):
    """Raised when the text generator does not return a usable result."""


class Generator(Protocol):
    """Anything that turns a prompt into one block of text."""

    def generate(self, prompt: str) -> str:
        """Return the model's text for ``prompt``."""


class OpenAIGenerator:
    """Adapter for OpenAI chat completions."""

    def __init__(
        self,
        client: Any | None = None,
        *,
        model: str = "gpt-4",
        temperature: float = 0.7,
        max_tokens: int = 1500,
        system_prompt: Optional[str] = None,
    ) -> None:
        self._client = client if client is not None else load_client()
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt

    @classmethod
    def from_config(
        cls, config: AIConfig, *, client: Any | None = None
    ) -> "OpenAIGenerator":
        if client is None:
            client = load_client(
                api_base=config.api_base,
                timeout=float(config.request_timeout_seconds),
            )
        return cls(
            client,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    def generate(self, prompt: str) -> str:
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": prompt})
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            content = resp.choices[0].message.content
        except Exception as exc:
            logger.error(
                "Generation request failed",
                extra={"model": self.model, "error": repr(exc)},
            )
            raise GenerationFailure(
                f"Generation request failed: {exc}"
            ) from exc
        text = content or ""
        logger.debug(
            "Generation completed",
            extra={
                "model": self.model,
                "prompt_chars": len(prompt),
                "response_chars": len(text),
            },
        )
        return text


def generate_questions(
    generator: Generator,
    topic: str,
    count: int,
    kind: QuestionKind,
) -> List[Question]:
    """Ask for ``count`` questions and parse whatever comes back."""

    if count <= 0:
        return []
    raw = generator.generate(prompts.build_question_prompt(topic, count, kind))
    questions = extract(raw, kind)
    logger.info(
        "Generated questions",
        extra={
            "topic": topic,
            "kind": kind,
            "requested": count,
            "received": len(questions),
        },
    )
    return questions


def generate_practice_questions(
    generator: Generator,
    topic: str,
    concept: str,
    count: int,
) -> List[Question]:
    if count <= 0:
        return []
    raw = generator.generate(
        prompts.build_practice_prompt(topic, concept, count)
    )
    return extract(raw, "mcq")


def evaluate_answer(
    generator: Generator,
    question: str,
    user_answer: str,
    kind: QuestionKind,
    reference: Optional[str] = None,
) -> str:
    """Return the judge's verdict text for ``user_answer``."""

    if not question.strip():
        return NO_QUESTION_TEXT
    text = generator.generate(
        prompts.build_evaluation_prompt(question, user_answer, kind, reference)
    )
    return text or NO_EVALUATION_TEXT


def provide_hint(
    generator: Generator, question: str, kind: QuestionKind
) -> str:
    return generator.generate(prompts.build_hint_prompt(question, kind))


def analyze_topic(generator: Generator, topic: str) -> str:
    return generator.generate(prompts.build_topic_analysis_prompt(topic))


def recommend_resources(
    generator: Generator,
    topic: str,
    weak_areas: Union[str, Iterable[str]],
) -> str:
    if not isinstance(weak_areas, str):
        weak_areas = ", ".join(weak_areas)
    return generator.generate(
        prompts.build_resources_prompt(topic, weak_areas)
    )


def summarize_feedback(
    generator: Generator, report: Mapping[str, Any], topic: str
) -> str:
    return generator.generate(prompts.build_feedback_prompt(report, topic))


def judge_mcq(
    question: McqQuestion, user_answer: str, evaluation_text: str
) -> bool:
    """Decide correctness of an MCQ answer.

    Compare letters when the question carries a parsed answer; otherwise
    trust the evaluator's ``Correct!`` prefix.
    """

    if question.correct_label is not None:
        chosen = normalize_label(user_answer, len(question.options))
        return chosen == question.correct_label
    return evaluation_text.strip().startswith("Correct!")


def parse_theory_score(evaluation_text: str) -> Optional[float]:
    match = _score_re.search(evaluation_text or "")
    if not match:
        return None
    return float(match.group(1))


def judge_theory(evaluation_text: str, pass_score: float = 7.0) -> bool:
    score = parse_theory_score(evaluation_text)
    return score is not None and score >= pass_score
