"""Root conftest for pipeline, store and route tests.

Provides:
- A fresh in-memory result store with a controllable clock
- A fake LLM client answering per generation stage
- A fake Figma client factory
- An async HTTP client for the FastAPI app with dependencies overridden
"""

from __future__ import annotations

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.dependencies import get_figma_factory, get_llm_client, get_store
from app.repositories.memory import MemoryResultStore
from tests.helpers import SAMPLE_SNAPSHOT, FakeClock, FakeLLM


# ---------------------------------------------------------------------------
# Clock + store
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock) -> MemoryResultStore:
    return MemoryResultStore(clock=clock)


# ---------------------------------------------------------------------------
# Fake external clients
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def fake_figma():
    """Figma client mock returning SAMPLE_SNAPSHOT."""
    client = AsyncMock()
    client.fetch_design_snapshot = AsyncMock(return_value=SAMPLE_SNAPSHOT)
    client.close = AsyncMock()
    return client


@pytest.fixture
def figma_factory(fake_figma):
    return lambda: fake_figma


# ---------------------------------------------------------------------------
# FastAPI test client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(
    memory_store: MemoryResultStore,
    fake_llm: FakeLLM,
    figma_factory,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with the store and external clients overridden.

    Tests may swap ``app.dependency_overrides`` entries further.
    """
    from app.main import app

    app.dependency_overrides[get_store] = lambda: memory_store
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    app.dependency_overrides[get_figma_factory] = lambda: figma_factory

    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
