"""OpenAI chat-completions client for HTML, component and field generation.

Wraps ``openai.AsyncOpenAI`` behind a single ``complete()`` call that takes a
model id, one user message (text plus optional inline images) and a token
budget, and returns the completion text.

Environment:
    OPENAI_API_KEY: OpenAI API key (required)
    OPENAI_BASE_URL: optional override for OpenAI-compatible gateways
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence

import openai

from .. import config, settings

logger = logging.getLogger("converter.integrations.llm")


class LLMClientError(Exception):
    """Raised when a completion request fails."""


def image_data_url(image_bytes: bytes, content_type: str = "image/jpeg") -> str:
    """Encode raw image bytes as a ``data:`` URL for a vision message part."""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{content_type or 'image/jpeg'};base64,{encoded}"


def build_user_message(
    text: str,
    image_urls: Sequence[str] = (),
    extra_texts: Sequence[str] = (),
) -> Dict[str, Any]:
    """Build one chat message.

    Plain string content for text-only prompts; a list of typed parts
    (text, image_url, text...) when images or extra text parts are attached.
    """
    if not image_urls and not extra_texts:
        return {"role": "user", "content": text}

    parts: List[Dict[str, Any]] = [{"type": "text", "text": text}]
    for url in image_urls:
        parts.append({"type": "image_url", "image_url": {"url": url}})
    for extra in extra_texts:
        parts.append({"type": "text", "text": extra})
    return {"role": "user", "content": parts}


class LLMClient:
    """Async OpenAI client.

    Args:
        api_key: OpenAI key. Falls back to OPENAI_API_KEY.
        timeout: Per-request timeout in seconds.
        client: Pre-built ``openai.AsyncOpenAI`` (tests inject a mock).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        base_url: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        self._client = client
        if self._client is None:
            key = api_key or config.OPENAI_API_KEY
            if not key:
                raise LLMClientError(
                    "OpenAI API key not configured. Set OPENAI_API_KEY environment variable."
                )
            self._client = openai.AsyncOpenAI(
                api_key=key,
                base_url=base_url or config.OPENAI_BASE_URL or None,
                timeout=timeout if timeout is not None else settings.OPENAI_TIMEOUT,
                max_retries=0,
            )

    async def close(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            await close()

    async def complete(
        self,
        *,
        model: str,
        messages: List[Dict[str, Any]],
        max_tokens: int,
        caller: str = "LLM",
    ) -> str:
        """Run one chat completion and return the first choice's text.

        Returns "" when the model produced no content; callers decide
        whether an empty answer is a failure.
        """
        logger.info("%s: calling %s (max_tokens=%d)", caller, model, max_tokens)
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as e:
            raise LLMClientError(f"{caller}: OpenAI request failed: {e}") from e

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise LLMClientError(f"{caller}: OpenAI returned no choices")

        text = choices[0].message.content or ""
        logger.info("%s: %s returned %d characters", caller, model, len(text))
        return text
