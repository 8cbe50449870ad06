from __future__ import annotations

import pytest

from interview_prep.interview.extractor import (
    McqQuestion,
    TheoryQuestion,
    extract,
    normalize_kind,
    normalize_label,
)


def _mcq_block(n: int) -> str:
    parts = []
    for i in range(1, n + 1):
        parts.append(
            f"Question: Question number {i}?\n"
            "A) first\n"
            "B) second\n"
            "C) third\n"
            "D) fourth\n"
            f"Correct: {'ABCD'[i % 4]}\n"
        )
    return "\n".join(parts)


@pytest.mark.parametrize("count", [1, 3, 7])
def test_well_formed_mcq_block_yields_complete_records(count: int) -> None:
    questions = extract(_mcq_block(count), "mcq")

    assert len(questions) == count
    for i, question in enumerate(questions, start=1):
        assert isinstance(question, McqQuestion)
        assert question.text == f"Question number {i}?"
        assert len(question.options) == 4
        assert question.correct_label in {"A", "B", "C", "D"}
        assert question.is_complete


def test_mcq_options_keep_prefixes_and_order(mcq_response: str) -> None:
    first, second = extract(mcq_response, "mcq")

    assert first.options == (
        "A) shift()",
        "B) push()",
        "C) pop()",
        "D) unshift()",
    )
    assert first.correct_label == "B"
    assert first.correct_option == "B) push()"
    assert second.text == "What keyword declares an async function?"
    assert second.correct_label == "C"


def test_preamble_before_first_marker_is_not_a_question() -> None:
    raw = "Question: Only one?\nA) a\nB) b\nC) c\nD) d\nCorrect: A"

    assert len(extract("   \n" + raw, "mcq")) == 1
    assert len(extract("Sure! Here you go.\n\n" + raw, "mcq")) == 1
    assert extract("I cannot generate questions right now.", "mcq") == []


def test_missing_correct_line_leaves_label_absent() -> None:
    raw = "Question: What is a closure?\nA) x\nB) y\nC) z\nD) w\n"

    (question,) = extract(raw, "mcq")

    assert question.correct_label is None
    assert question.correct_option is None
    assert not question.is_complete


def test_short_option_list_is_tolerated() -> None:
    raw = "Question: Pick one\nA) yes\nB) no\n"

    (question,) = extract(raw, "mcq")

    assert question.options == ("A) yes", "B) no")
    assert question.correct_label is None


def test_correct_line_counts_as_option_when_options_are_short() -> None:
    raw = "Question: Pick one\nA) yes\nB) no\nCorrect: B\n"

    (question,) = extract(raw, "mcq")

    assert question.options == ("A) yes", "B) no", "Correct: B")
    assert question.correct_label == "B"


def test_label_past_parsed_options_is_dropped() -> None:
    raw = "Question: Pick one\nA) yes\nB) no\n\n\nCorrect: D"

    (question,) = extract(raw, "mcq")

    assert question.correct_label is None


def test_blank_lines_between_options_are_ignored() -> None:
    raw = "Question: Q?\n\nA) 1\n\nB) 2\nC) 3\n\nD) 4\n\nCorrect:  c \n"

    (question,) = extract(raw, "mcq")

    assert len(question.options) == 4
    assert question.correct_label == "C"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("B", "B"),
        ("b", "B"),
        ("B)", "B"),
        ("(C)", "C"),
        ("D) fourth", "D"),
        ("A. first", "A"),
        ("Both", None),
        ("E", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_label(raw, expected) -> None:
    assert normalize_label(raw, 4) == expected


def test_well_formed_theory_block(theory_response: str) -> None:
    questions = extract(theory_response, "theory")

    assert len(questions) == 2
    assert all(isinstance(q, TheoryQuestion) for q in questions)
    assert questions[0].text == "Explain recursion with an example."
    assert questions[0].model_answer == (
        "A function that calls itself until a base case is reached."
    )
    assert all(q.text and q.model_answer for q in questions)


def test_theory_without_model_answer_keeps_whole_segment() -> None:
    (question,) = extract("Question: Describe the event loop.\n", "theory")

    assert question.text == "Describe the event loop."
    assert question.model_answer == ""
    assert not question.is_complete


def test_theory_repeated_delimiter_is_kept_in_answer() -> None:
    raw = "Question: Q?\nModel Answer: first Model Answer: second"

    (question,) = extract(raw, "theory")

    assert question.model_answer == "first Model Answer: second"


@pytest.mark.parametrize("kind", ["mcq", "theory"])
def test_empty_input_yields_no_questions(kind) -> None:
    assert extract("", kind) == []
    assert extract("   \n\t", kind) == []


def test_garbage_never_raises() -> None:
    raw = "Question: \nQuestion:   \nQuestion: ???\nCorrect:"

    questions = extract(raw, "mcq")

    assert [q.text for q in questions] == ["???"]
    assert questions[0].correct_label is None


def test_extract_is_deterministic(mcq_response: str) -> None:
    assert extract(mcq_response, "mcq") == extract(mcq_response, "mcq")


@pytest.mark.parametrize(
    ("value", "expected"),
    [("MCQ", "mcq"), (" mcq ", "mcq"), ("Theory", "theory"), ("x", "theory")],
)
def test_normalize_kind(value: str, expected: str) -> None:
    assert normalize_kind(value) == expected
