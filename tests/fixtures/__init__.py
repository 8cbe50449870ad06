"""Shared testing fixtures and fakes for the interview_prep test suite."""

from .openai import (  # noqa: F401
    FakeChatClient,
    ScriptedGenerator,
    failing_generator,
)

__all__ = [
    "FakeChatClient",
    "ScriptedGenerator",
    "failing_generator",
]
