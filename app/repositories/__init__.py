"""Result store backends and the factory that selects one at startup."""

from __future__ import annotations

import logging
from typing import Optional

from converter import config

from .base import ResultStore, StoreWrite, is_valid_result_id
from .filesystem import FileResultStore
from .memory import MemoryResultStore

logger = logging.getLogger("app.repositories")

__all__ = [
    "FileResultStore",
    "MemoryResultStore",
    "ResultStore",
    "StoreWrite",
    "build_result_store",
    "is_valid_result_id",
]


def build_result_store(backend: Optional[str] = None) -> ResultStore:
    """Create the configured backend: ``memory``, ``filesystem`` or ``s3``."""
    backend = (backend or config.STORAGE_BACKEND).strip().lower()

    if backend == "memory":
        store: ResultStore = MemoryResultStore()
    elif backend == "filesystem":
        store = FileResultStore(config.RESULTS_DIR)
    elif backend == "s3":
        from .s3 import S3ResultStore

        store = S3ResultStore(bucket=config.S3_BUCKET, prefix=config.S3_PREFIX)
    else:
        raise ValueError(
            f"Unknown STORAGE_BACKEND {backend!r}; expected memory, filesystem or s3"
        )

    logger.info("Result store backend: %s", store.backend_name)
    return store
