from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import FakeChatClient, ScriptedGenerator  # noqa: E402


MCQ_RESPONSE = """Here are your questions.

Question: Which method adds an element to the end of an array in JavaScript?
A) shift()
B) push()
C) pop()
D) unshift()
Correct: B

Question: What keyword declares an async function?
A) await
B) defer
C) async
D) yield
Correct: C
"""

THEORY_RESPONSE = """Question: Explain recursion with an example.
Model Answer: A function that calls itself until a base case is reached.

Question: What is a database index?
Model Answer: A data structure that speeds up lookups.
"""


@pytest.fixture
def fake_client() -> FakeChatClient:
    """Fake OpenAI client; queue responses and inspect ``calls``."""

    return FakeChatClient()


@pytest.fixture
def scripted_generator() -> ScriptedGenerator:
    return ScriptedGenerator()


@pytest.fixture
def mcq_response() -> str:
    return MCQ_RESPONSE


@pytest.fixture
def theory_response() -> str:
    return THEORY_RESPONSE


@pytest.fixture
def isolated_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Point the data home at ``tmp_path`` and clear config overrides."""

    home = tmp_path / "home"
    monkeypatch.setenv("INTERVIEW_PREP_HOME", str(home))
    monkeypatch.delenv("INTERVIEW_PREP_CONFIG", raising=False)
    monkeypatch.delenv("INTERVIEW_PREP_MODEL", raising=False)
    yield home
    import logging

    logger = logging.getLogger("interview_prep")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
