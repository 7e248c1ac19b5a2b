"""FastAPI dependencies for the result store and external clients.

The store and the OpenAI client are created once in the app lifespan and
kept on ``app.state``; tests replace them via ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Request

from app.repositories.base import ResultStore
from converter import config
from converter.integrations.figma_client import FigmaClient
from converter.integrations.llm_client import LLMClient


def get_store(request: Request) -> ResultStore:
    return request.app.state.store


def get_llm_client(request: Request) -> Optional[LLMClient]:
    """Shared LLM client, or None when no OpenAI key is configured."""
    llm = getattr(request.app.state, "llm", None)
    if llm is None and config.OPENAI_API_KEY:
        llm = LLMClient()
        request.app.state.llm = llm
    return llm


def get_figma_factory() -> Callable[[], FigmaClient]:
    """Per-request Figma clients; construction fails without FIGMA_TOKEN."""
    return FigmaClient
