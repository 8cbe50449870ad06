"""Shared AI helper utilities."""

from __future__ import annotations

import os
from typing import Any, Optional

from dotenv import load_dotenv
from openai import OpenAI

__all__ = ["load_client"]


def load_client(
    *,
    api_base: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Any:
    """Initialize an OpenAI client using environment-derived credentials."""
    load_dotenv()
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError(
            "OPENAI_API_KEY not found in environment. Set it or add to .env"
        )
    kwargs: dict[str, Any] = {"api_key": api_key}
    if api_base:
        kwargs["base_url"] = api_base
    if timeout is not None:
        kwargs["timeout"] = timeout
    return OpenAI(**kwargs)
