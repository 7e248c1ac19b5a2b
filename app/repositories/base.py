"""Result store contract shared by all storage backends.

Every backend implements the same operations with the same semantics:

- ``generate_id()`` returns a fresh UUID string
- ``put(id, fields)`` stamps the current time and replaces the whole record
- ``get(id)`` returns None for missing, unreadable or expired records and
  deletes expired ones (lazy expiry)
- ``list()`` returns ``{id, timestamp}`` for non-expired records, unordered
- ``sweep()`` deletes every expired record

Writes are best-effort by contract: ``put`` never raises for storage
failures. It returns a ``StoreWrite`` and the caller decides whether the
failure matters. The pipeline ignores failed writes because its HTTP
response already carries the authoritative values.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional

from app.schemas import ResultRecord, ResultSummary
from converter import settings
from converter.errors import StorageError

logger = logging.getLogger("app.repositories.results")

_RESULT_ID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

RECORD_FIELDS = ("html", "sitecoreFields", "component")


def is_valid_result_id(result_id: str) -> bool:
    """Result ids double as file/object names, so only UUIDs are accepted."""
    return bool(result_id) and bool(_RESULT_ID_RE.match(result_id))


@dataclass
class StoreWrite:
    """Outcome of ``ResultStore.put``."""

    result_id: str
    ok: bool
    error: Optional[str] = None


class ResultStore(ABC):
    """Key-value store for conversion results with a fixed TTL.

    Args:
        ttl_seconds: Age after which a record reads as deleted.
        clock: Returns the current time in seconds (tests inject a fake).
    """

    backend_name = "abstract"

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.RESULT_TTL_SECONDS
        self._clock = clock or time.time
        self._sweeper = None

    # ------------------------------------------------------------------
    # Backend primitives
    # ------------------------------------------------------------------

    @abstractmethod
    async def _write(self, result_id: str, record: ResultRecord) -> None:
        """Persist ``record``, replacing any previous one. Raises StorageError."""

    @abstractmethod
    async def _read(self, result_id: str) -> Optional[ResultRecord]:
        """Load a record or return None if absent. Raises StorageError."""

    @abstractmethod
    async def _delete(self, result_id: str) -> None:
        """Remove a record; absent records are not an error."""

    @abstractmethod
    async def _list_summaries(self) -> List[ResultSummary]:
        """Enumerate all stored records, expired ones included."""

    async def _close(self) -> None:
        """Release backend resources."""

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    def is_expired(self, timestamp_ms: int) -> bool:
        return timestamp_ms < self.now_ms() - self.ttl_seconds * 1000

    def generate_id(self) -> str:
        result_id = str(uuid.uuid4())
        logger.info("Generated result id %s", result_id)
        return result_id

    async def put(self, result_id: str, fields: Mapping[str, str]) -> StoreWrite:
        """Write the full record for ``result_id``.

        Storage failures are logged and reported in the returned StoreWrite.
        """
        if not is_valid_result_id(result_id):
            logger.error("put: rejected invalid result id %r", result_id)
            return StoreWrite(result_id=result_id, ok=False, error="invalid result id")

        record = ResultRecord(
            **{key: fields.get(key, "") for key in RECORD_FIELDS},
            timestamp=self.now_ms(),
        )
        try:
            await self._write(result_id, record)
        except Exception as e:
            logger.error(
                "put: %s backend failed to store %s: %s", self.backend_name, result_id, e
            )
            return StoreWrite(result_id=result_id, ok=False, error=str(e))

        logger.info(
            "put: stored %s (html=%d, sitecoreFields=%d, component=%d chars)",
            result_id, len(record.html), len(record.sitecoreFields), len(record.component),
        )
        return StoreWrite(result_id=result_id, ok=True)

    async def get(self, result_id: str) -> Optional[ResultRecord]:
        """Return the record, or None if absent, unreadable or expired."""
        if not is_valid_result_id(result_id):
            return None

        try:
            record = await self._read(result_id)
        except StorageError as e:
            logger.error("get: failed to read %s: %s", result_id, e)
            return None

        if record is None:
            logger.info("get: no result for %s", result_id)
            return None

        if self.is_expired(record.timestamp):
            logger.info("get: result %s expired, deleting", result_id)
            await self._delete_quietly(result_id)
            return None

        return record

    async def list(self) -> List[ResultSummary]:
        """Non-expired ``{id, timestamp}`` entries. Raises StorageError."""
        summaries = await self._list_summaries()
        return [s for s in summaries if not self.is_expired(s.timestamp)]

    async def sweep(self) -> int:
        """Delete every expired record and return how many were removed."""
        deleted = 0
        for summary in await self._list_summaries():
            if self.is_expired(summary.timestamp):
                if await self._delete_quietly(summary.id):
                    deleted += 1
        logger.info("sweep: %s backend removed %d expired results", self.backend_name, deleted)
        return deleted

    def start_sweeper(self, interval: Optional[float] = None):
        """Start the periodic sweep task (first sweep runs immediately)."""
        from .sweeper import ResultSweeper

        if self._sweeper is None:
            self._sweeper = ResultSweeper(self, interval=interval)
            self._sweeper.start()
        return self._sweeper

    async def close(self) -> None:
        """Cancel the sweep task and release backend resources."""
        if self._sweeper is not None:
            await self._sweeper.stop()
            self._sweeper = None
        await self._close()

    async def _delete_quietly(self, result_id: str) -> bool:
        try:
            await self._delete(result_id)
        except StorageError as e:
            logger.warning("Failed to delete expired result %s: %s", result_id, e)
            return False
        return True
