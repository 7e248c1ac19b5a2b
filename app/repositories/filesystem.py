"""Local filesystem result store: one ``{id}.json`` file per result."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Callable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from app.schemas import ResultRecord, ResultSummary
from converter.errors import StorageError

from .base import ResultStore, is_valid_result_id


class FileResultStore(ResultStore):
    """Stores each record as JSON text under ``directory``.

    Listing reports the record's stored timestamp, falling back to the
    file modification time when the file cannot be parsed.
    """

    backend_name = "filesystem"

    def __init__(
        self,
        directory: Union[str, Path],
        ttl_seconds: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        super().__init__(ttl_seconds=ttl_seconds, clock=clock)
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, result_id: str) -> Path:
        return self.directory / f"{result_id}.json"

    # --- blocking helpers (run in a worker thread) ---

    def _write_sync(self, result_id: str, record: ResultRecord) -> None:
        path = self._path(result_id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(record.model_dump_json(), encoding="utf-8")
        os.replace(tmp, path)

    def _read_sync(self, result_id: str) -> Optional[ResultRecord]:
        path = self._path(result_id)
        if not path.exists():
            return None
        return ResultRecord.model_validate_json(path.read_text(encoding="utf-8"))

    def _list_sync(self) -> List[ResultSummary]:
        summaries = []
        for path in self.directory.glob("*.json"):
            result_id = path.stem
            if not is_valid_result_id(result_id):
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                timestamp = int(data["timestamp"])
            except (OSError, ValueError, KeyError, TypeError):
                try:
                    timestamp = int(path.stat().st_mtime * 1000)
                except OSError:
                    continue
            summaries.append(ResultSummary(id=result_id, timestamp=timestamp))
        return summaries

    # --- ResultStore primitives ---

    async def _write(self, result_id: str, record: ResultRecord) -> None:
        try:
            await asyncio.to_thread(self._write_sync, result_id, record)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path(result_id)}: {e}") from e

    async def _read(self, result_id: str) -> Optional[ResultRecord]:
        try:
            return await asyncio.to_thread(self._read_sync, result_id)
        except (OSError, ValueError, PydanticValidationError) as e:
            raise StorageError(f"Failed to read {self._path(result_id)}: {e}") from e

    async def _delete(self, result_id: str) -> None:
        try:
            await asyncio.to_thread(self._path(result_id).unlink, True)
        except OSError as e:
            raise StorageError(f"Failed to delete {self._path(result_id)}: {e}") from e

    async def _list_summaries(self) -> List[ResultSummary]:
        try:
            return await asyncio.to_thread(self._list_sync)
        except OSError as e:
            raise StorageError(f"Failed to list {self.directory}: {e}") from e
