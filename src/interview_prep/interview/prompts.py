"""Prompt templates sent to the generation gateway.

The question prompts carry a fixed output format that
:mod:`interview_prep.interview.extractor` parses. Changing the ``Question:``,
``Correct:`` or ``Model Answer:`` markers breaks extraction.
"""

from __future__ import annotations

import json
from typing import Any, Literal, Mapping

QuestionKind = Literal["mcq", "theory"]

__all__ = [
    "QuestionKind",
    "MCQ_FORMAT",
    "THEORY_FORMAT",
    "build_question_prompt",
    "build_practice_prompt",
    "build_evaluation_prompt",
    "build_hint_prompt",
    "build_topic_analysis_prompt",
    "build_resources_prompt",
    "build_feedback_prompt",
]

MCQ_FORMAT = (
    "Question: [question text]\n"
    "A) [option]\n"
    "B) [option]\n"
    "C) [option]\n"
    "D) [option]\n"
    "Correct: [A/B/C/D]"
)

THEORY_FORMAT = "Question: [question text]\nModel Answer: [detailed answer]"


def build_question_prompt(topic: str, count: int, kind: QuestionKind) -> str:
    """Return the generation prompt for ``count`` questions about ``topic``."""

    if kind == "mcq":
        return (
            f"Generate {count} multiple-choice questions about {topic}.\n"
            "For each question, provide 4 options (A, B, C, D) and mark the "
            "correct answer.\n"
            "Format each question as:\n"
            f"{MCQ_FORMAT}"
        )
    return (
        f"Generate {count} theoretical questions about {topic}.\n"
        "Also provide a model answer for each question.\n"
        "Format as:\n"
        f"{THEORY_FORMAT}"
    )


def build_practice_prompt(topic: str, concept: str, count: int) -> str:
    """MCQ prompt narrowed to one concept within ``topic``."""

    base = build_question_prompt(topic, count, "mcq")
    return (
        f"{base}\n"
        f"Every question must exercise the concept '{concept}' "
        f"as it applies to {topic}."
    )


def build_evaluation_prompt(
    question: str,
    user_answer: str,
    kind: QuestionKind,
    reference: str | None,
) -> str:
    if kind == "mcq":
        return (
            "Evaluate the following multiple-choice answer:\n"
            f"Question: {question}\n"
            f"User's Answer: {user_answer}\n"
            f"Correct Answer: {reference}\n\n"
            'If the answer is correct, say "Correct!" and explain why.\n'
            'If the answer is wrong, say "Incorrect." and explain why the '
            "correct answer is better."
        )
    return (
        "Evaluate the following theoretical answer:\n"
        f"Question: {question}\n"
        f"User's Answer: {user_answer}\n"
        f"Model Answer: {reference}\n\n"
        "Provide a score out of 10 and a detailed explanation of the "
        "evaluation."
    )


def build_hint_prompt(question: str, kind: QuestionKind) -> str:
    return (
        f"As a technical interview hint provider, for this {kind} question:\n"
        f'"{question}"\n\n'
        "Provide a structured hint that:\n"
        "1. Points to the key concept being tested\n"
        "2. Reminds of any relevant principles or patterns\n"
        "3. Offers a small example if applicable\n"
        "4. Suggests a way to approach the answer\n\n"
        "Rules:\n"
        "- Don't give away the answer\n"
        "- Start with a broader hint, then get more specific\n"
        "- Include any relevant technical terms\n"
        "- For MCQs, help eliminate obviously wrong choices\n"
        "- For theory questions, provide framework for structuring the "
        "answer\n\n"
        "Format the hint to be clear and concise, using bullet points where "
        "appropriate."
    )


def build_topic_analysis_prompt(topic: str) -> str:
    return (
        f'As a technical topic analyzer for "{topic}", provide a '
        "comprehensive analysis:\n\n"
        "KEY CONCEPTS\n"
        f"- List the 5 most important concepts in {topic}\n"
        "- Rate each concept's difficulty (Basic/Intermediate/Advanced)\n\n"
        "PREREQUISITES\n"
        f"- Required knowledge before learning {topic}\n"
        "- Related technologies or concepts to understand first\n\n"
        "LEARNING PATH\n"
        "- Beginner fundamentals (What to learn first)\n"
        "- Intermediate concepts (What to learn next)\n"
        "- Advanced topics (What to master later)\n\n"
        "INDUSTRY RELEVANCE\n"
        "- Current industry usage and trends\n"
        f"- Popular frameworks/tools related to {topic}\n"
        f"- Job roles that frequently use {topic}\n\n"
        "Format the response in clear sections with bullet points."
    )


def build_resources_prompt(topic: str, weak_areas: str) -> str:
    return (
        f"As a technical learning resource provider for {topic}, create a "
        "personalized learning plan addressing these weak areas: "
        f"{weak_areas}\n\n"
        "DOCUMENTATION AND TUTORIALS\n"
        "- Official documentation links\n"
        "- Best beginner-friendly tutorials\n"
        "- Recommended video courses\n"
        "- Interactive learning platforms\n\n"
        "PRACTICE RESOURCES\n"
        f"- Coding challenges focused on {weak_areas}\n"
        "- Project ideas to reinforce learning\n"
        "- Practice exercises with increasing difficulty\n\n"
        "COMMON PITFALLS\n"
        f"- List typical mistakes in {weak_areas}\n"
        "- How to avoid these mistakes\n"
        "- Best practices to follow\n\n"
        "ADVANCED LEARNING\n"
        "- Advanced tutorials for deeper understanding\n"
        "- Real-world project examples\n"
        "- Community resources (forums, Discord servers, etc.)\n\n"
        "INTERVIEW PREPARATION\n"
        "- Specific topics to focus on\n"
        "- Practice question types\n"
        "- Mock interview resources\n\n"
        "Format the response in clear sections with clickable resources "
        "where possible."
    )


def build_feedback_prompt(report: Mapping[str, Any], topic: str) -> str:
    payload = json.dumps(report, sort_keys=True)
    return (
        f"Based on this performance report: {payload}\n"
        f'For the topic "{topic}", provide:\n'
        "1. Overall performance analysis\n"
        "2. Specific areas needing improvement\n"
        "3. Actionable recommendations for improvement\n"
        "Make the feedback constructive and motivating."
    )
