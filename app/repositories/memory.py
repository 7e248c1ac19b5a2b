"""In-process result store. State lives on the instance and dies with it."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from app.schemas import ResultRecord, ResultSummary

from .base import ResultStore


class MemoryResultStore(ResultStore):
    """Dict-backed store, suitable for tests and single-process deployments."""

    backend_name = "memory"

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        super().__init__(ttl_seconds=ttl_seconds, clock=clock)
        self._records: Dict[str, ResultRecord] = {}

    async def _write(self, result_id: str, record: ResultRecord) -> None:
        self._records[result_id] = record

    async def _read(self, result_id: str) -> Optional[ResultRecord]:
        return self._records.get(result_id)

    async def _delete(self, result_id: str) -> None:
        self._records.pop(result_id, None)

    async def _list_summaries(self) -> List[ResultSummary]:
        return [
            ResultSummary(id=result_id, timestamp=record.timestamp)
            for result_id, record in list(self._records.items())
        ]

    async def _close(self) -> None:
        self._records.clear()
