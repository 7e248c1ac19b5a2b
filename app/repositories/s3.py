"""S3-compatible result store (AWS S3, R2, MinIO).

Each record is the object ``{prefix}/{id}.json``. boto3 is synchronous, so
every call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError as PydanticValidationError

from app.schemas import ResultRecord, ResultSummary
from converter import config
from converter.errors import StorageError

from .base import ResultStore, is_valid_result_id

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


def build_s3_client():
    """Create a boto3 S3 client from the S3_* settings."""
    import boto3
    from botocore.config import Config

    client_config = None
    if config.S3_FORCE_PATH_STYLE:
        client_config = Config(s3={"addressing_style": "path"})

    return boto3.client(
        "s3",
        region_name=config.S3_REGION or None,
        endpoint_url=config.S3_ENDPOINT_URL or None,
        aws_access_key_id=config.S3_ACCESS_KEY_ID or None,
        aws_secret_access_key=config.S3_SECRET_ACCESS_KEY or None,
        config=client_config,
    )


class S3ResultStore(ResultStore):
    """Stores records as JSON objects in one bucket.

    Args:
        bucket: Bucket name.
        prefix: Key prefix, ``results`` by default.
        client: A boto3 S3 client; built from settings when omitted.
    """

    backend_name = "s3"

    def __init__(
        self,
        bucket: str,
        prefix: str = "results",
        client: Optional[Any] = None,
        ttl_seconds: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        super().__init__(ttl_seconds=ttl_seconds, clock=clock)
        if not bucket:
            raise ValueError("S3 bucket is not configured (S3_BUCKET)")
        self.bucket = bucket
        self.prefix = (prefix or "").strip("/")
        self._client = client if client is not None else build_s3_client()

    def _key(self, result_id: str) -> str:
        return f"{self.prefix}/{result_id}.json" if self.prefix else f"{result_id}.json"

    def _id_from_key(self, key: str) -> Optional[str]:
        name = key.rsplit("/", 1)[-1]
        if not name.endswith(".json"):
            return None
        result_id = name[: -len(".json")]
        return result_id if is_valid_result_id(result_id) else None

    async def _write(self, result_id: str, record: ResultRecord) -> None:
        def _put() -> None:
            self._client.put_object(
                Bucket=self.bucket,
                Key=self._key(result_id),
                Body=record.model_dump_json().encode("utf-8"),
                ContentType="application/json",
            )

        try:
            await asyncio.to_thread(_put)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to write s3://{self.bucket}/{self._key(result_id)}: {e}") from e

    async def _read(self, result_id: str) -> Optional[ResultRecord]:
        def _get() -> Optional[bytes]:
            try:
                resp = self._client.get_object(Bucket=self.bucket, Key=self._key(result_id))
            except ClientError as e:
                code = str(e.response.get("Error", {}).get("Code", ""))
                if code in _MISSING_CODES:
                    return None
                raise
            return resp["Body"].read()

        try:
            body = await asyncio.to_thread(_get)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to read s3://{self.bucket}/{self._key(result_id)}: {e}") from e

        if body is None:
            return None
        try:
            return ResultRecord.model_validate_json(body)
        except (ValueError, PydanticValidationError) as e:
            raise StorageError(f"Corrupt result object {self._key(result_id)}: {e}") from e

    async def _delete(self, result_id: str) -> None:
        def _del() -> None:
            self._client.delete_object(Bucket=self.bucket, Key=self._key(result_id))

        try:
            await asyncio.to_thread(_del)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to delete s3://{self.bucket}/{self._key(result_id)}: {e}") from e

    async def _list_summaries(self) -> List[ResultSummary]:
        """Use object LastModified as the timestamp, avoiding one GET per record."""

        def _list() -> List[ResultSummary]:
            summaries = []
            paginator = self._client.get_paginator("list_objects_v2")
            list_prefix = f"{self.prefix}/" if self.prefix else ""
            for page in paginator.paginate(Bucket=self.bucket, Prefix=list_prefix):
                for obj in page.get("Contents", []) or []:
                    result_id = self._id_from_key(obj.get("Key", ""))
                    last_modified = obj.get("LastModified")
                    if result_id is None or last_modified is None:
                        continue
                    summaries.append(ResultSummary(
                        id=result_id,
                        timestamp=int(last_modified.timestamp() * 1000),
                    ))
            return summaries

        try:
            return await asyncio.to_thread(_list)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to list s3://{self.bucket}/{self.prefix}: {e}") from e
