"""Client-side polling of a stored conversion result.

A conversion keeps writing its record while it runs; readers poll
``GET /api/results/{id}`` until the HTML field is no longer the
"Processing..." placeholder. One poller owns one timer:

    poller = ResultPoller("http://localhost:8000", result_id)
    record = await poller.start()      # or poller.cancel() to stop early

CLI:
    python -m converter.poller http://localhost:8000 <result-id>
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

import httpx

from . import settings
from .envelopes import PROCESSING

logger = logging.getLogger("converter.poller")


class PollTimeoutError(Exception):
    """Raised when the attempt budget runs out before the result is ready."""


class ResultPoller:
    """Re-fetches one result every ``interval`` seconds, at most ``max_attempts`` times.

    Stops on the first record whose ``html`` is not the placeholder, when the
    attempt budget is spent, or when ``cancel()`` is called.
    """

    def __init__(
        self,
        base_url: str,
        result_id: str,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.result_id = result_id
        self.interval = interval if interval is not None else settings.POLL_INTERVAL_SECONDS
        self.max_attempts = max_attempts if max_attempts is not None else settings.POLL_MAX_ATTEMPTS
        self.attempts = 0
        self._client = client
        self._task: Optional[asyncio.Task] = None

    def start(self) -> asyncio.Task:
        """Start polling; the returned task resolves to the ready record."""
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=f"poll-{self.result_id}")
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("Polling for %s cancelled after %d attempts", self.result_id, self.attempts)

    async def fetch_once(self, client: httpx.AsyncClient) -> Optional[Dict[str, Any]]:
        """One GET; returns the record, or None while missing or unreachable."""
        try:
            resp = await client.get(f"{self.base_url}/api/results/{self.result_id}")
        except httpx.HTTPError as e:
            logger.warning("Poll %s attempt %d failed: %s", self.result_id, self.attempts, e)
            return None
        if resp.status_code != 200:
            logger.info("Poll %s attempt %d: HTTP %d", self.result_id, self.attempts, resp.status_code)
            return None
        try:
            return (resp.json() or {}).get("results")
        except ValueError:
            return None

    @staticmethod
    def is_ready(record: Optional[Dict[str, Any]]) -> bool:
        return bool(record) and record.get("html") != PROCESSING

    async def _run(self) -> Dict[str, Any]:
        owns_client = self._client is None
        client = self._client or httpx.AsyncClient()
        try:
            while self.attempts < self.max_attempts:
                self.attempts += 1
                record = await self.fetch_once(client)
                if self.is_ready(record):
                    logger.info("Result %s ready after %d attempts", self.result_id, self.attempts)
                    return record
                if self.attempts < self.max_attempts:
                    await asyncio.sleep(self.interval)
        finally:
            if owns_client:
                await client.aclose()

        raise PollTimeoutError("Processing timed out. Please try again.")


async def _main(base_url: str, result_id: str) -> int:
    poller = ResultPoller(base_url, result_id)
    try:
        record = await poller.start()
    except PollTimeoutError as e:
        print(str(e), file=sys.stderr)
        return 1
    print(json.dumps(record, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: python -m converter.poller <base_url> <result_id>", file=sys.stderr)
        sys.exit(2)
    from .logging_config import get_converter_logger

    get_converter_logger()
    sys.exit(asyncio.run(_main(sys.argv[1], sys.argv[2])))
