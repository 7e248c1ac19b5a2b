"""Shared sample data and fakes for the test suite."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

VALID_FIGMA_URL = (
    "https://www.figma.com/design/6kGd851qaAX4TiL44vpIrO/"
    "PixelCheese?node-id=5574-3309"
)

SAMPLE_HTML = '<section class="hero"><h1>Welcome</h1><p>Intro</p></section>'

SAMPLE_COMPONENT = (
    "import React from 'react';\n"
    "const Hero = ({ fields }) => <section />;\n"
    "export default Hero;"
)

SAMPLE_FIELDS = {
    "fields": {
        "title": {
            "type": "Single-Line Text",
            "description": "Main title of the component",
            "validation": "Required",
        },
        "intro": {
            "type": "Rich Text",
            "description": "Intro paragraph",
        },
    }
}

SAMPLE_SNAPSHOT = {
    "name": "PixelCheese",
    "lastModified": "2024-05-01T10:00:00Z",
    "mainCanvas": {
        "name": "Page 1",
        "type": "CANVAS",
        "children": [
            {
                "id": "1:2",
                "name": "Hero",
                "type": "FRAME",
                "visible": True,
                "layout": {"width": 1440, "height": 600, "x": 0, "y": 0},
                "style": {
                    "backgroundColor": None,
                    "fills": [],
                    "strokes": [],
                    "effects": [],
                    "cornerRadius": None,
                },
            }
        ],
    },
}


class FakeClock:
    """Callable clock in seconds; tests move it with ``advance``."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLLM:
    """Answers ``complete()`` by ``caller`` (HTML / Component / SitecoreFields).

    A response that is an Exception instance is raised instead of returned.
    Every call is recorded in ``calls``.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses: Dict[str, Any] = {
            "HTML": f"```html\n{SAMPLE_HTML}\n```",
            "Component": f"```tsx\n{SAMPLE_COMPONENT}\n```",
            "SitecoreFields": json.dumps(SAMPLE_FIELDS, indent=2),
        }
        self.responses.update(responses or {})
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, *, model, messages, max_tokens, caller="LLM") -> str:
        self.calls.append({
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "caller": caller,
        })
        response = self.responses.get(caller, "")
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        pass

    def calls_for(self, caller: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["caller"] == caller]


STALE_NODE_FIGMA_URL = (
    "https://www.figma.com/design/6kGd851qaAX4TiL44vpIrO/PixelCheese?node-id=9-9"
)


def figma_api_factory(requests: List[Any]):
    """Factory of real FigmaClients served by an httpx.MockTransport.

    The file has one canvas ``0:1`` named "Landing"; the nodes endpoint
    answers null for any other id. Every request is appended to ``requests``.
    """
    import httpx

    from converter.integrations.figma_client import FIGMA_API_BASE, FigmaClient

    canvas = {
        "id": "0:1",
        "name": "Landing",
        "type": "CANVAS",
        "children": [{"id": "1:2", "name": "Hero", "type": "FRAME"}],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("/nodes"):
            ids = request.url.params.get("ids", "").split(",")
            nodes = {i: ({"document": canvas} if i == "0:1" else None) for i in ids}
            return httpx.Response(200, json={"nodes": nodes})
        return httpx.Response(200, json={
            "name": "PixelCheese",
            "lastModified": "2024-05-01T10:00:00Z",
            "document": {"children": [{"id": "0:1", "name": "Landing", "type": "CANVAS"}]},
        })

    def factory() -> FigmaClient:
        figma = FigmaClient(token="test-token")
        figma._client = httpx.AsyncClient(
            base_url=FIGMA_API_BASE, transport=httpx.MockTransport(handler)
        )
        return figma

    return factory
