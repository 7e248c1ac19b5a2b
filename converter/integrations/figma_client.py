"""Figma REST API client for the design-to-Sitecore pipeline.

Fetches the file document and the node tree of its main canvas using
Personal Access Token (PAT) authentication.

Environment:
    FIGMA_TOKEN: Figma Personal Access Token (required)

Usage:
    client = FigmaClient()
    snapshot = await client.fetch_design_snapshot("6kGd851qaAX4TiL44vpIrO")
    await client.close()
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .. import config, settings
from ..nodes.figma_utils import build_design_snapshot, count_nodes, find_main_canvas

logger = logging.getLogger("converter.integrations.figma")

FIGMA_API_BASE = "https://api.figma.com"

_STATUS_REASONS = {
    403: "token rejected or file not shared with it",
    404: "file or node does not exist",
    429: "rate limited",
}


class FigmaClientError(Exception):
    """Raised when a Figma API call fails."""


class FigmaClient:
    """Async Figma REST API client.

    Args:
        token: Figma PAT. Falls back to FIGMA_TOKEN.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._token = token or config.FIGMA_TOKEN
        if not self._token:
            raise FigmaClientError(
                "FIGMA_TOKEN is not set; reading design files needs a Figma "
                "Personal Access Token"
            )
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = timeout if timeout is not None else settings.FIGMA_HTTP_TIMEOUT

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=FIGMA_API_BASE,
                headers={"X-FIGMA-TOKEN": self._token},
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=5, max_keepalive_connections=3),
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """GET ``path`` and decode the JSON body; any failure is a FigmaClientError."""
        client = await self._get_client()
        try:
            resp = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise FigmaClientError(f"Timed out after {self._timeout}s requesting {path}") from e
        except httpx.HTTPError as e:
            raise FigmaClientError(f"Could not reach Figma for {path}: {e}") from e

        if resp.status_code != 200:
            reason = _STATUS_REASONS.get(resp.status_code, resp.text[:200])
            logger.warning(f"Figma {path} answered {resp.status_code}")
            raise FigmaClientError(f"Figma API {resp.status_code} for {path}: {reason}")

        try:
            return resp.json()
        except ValueError as e:
            raise FigmaClientError(f"Figma sent a non-JSON body for {path}") from e

    # ------------------------------------------------------------------
    # REST endpoints
    # ------------------------------------------------------------------

    async def get_file(self, file_key: str) -> Dict[str, Any]:
        """Fetch a Figma file document.

        GET /v1/files/:key
        """
        data = await self._get(f"/v1/files/{file_key}")
        logger.info(f"get_file: file={file_key}, name={data.get('name', '')!r}")
        return data

    async def get_file_nodes(
        self,
        file_key: str,
        node_ids: List[str],
    ) -> Dict[str, Any]:
        """Fetch specific nodes from a Figma file.

        GET /v1/files/:key/nodes?ids=...
        """
        ids_param = ",".join(node_ids)
        data = await self._get(f"/v1/files/{file_key}/nodes", params={"ids": ids_param})
        logger.info(
            f"get_file_nodes: file={file_key}, requested={len(node_ids)}, "
            f"returned={len(data.get('nodes') or {})}"
        )
        return data

    # ------------------------------------------------------------------
    # High-level: design snapshot for the HTML prompt
    # ------------------------------------------------------------------

    async def fetch_design_snapshot(self, file_key: str) -> Dict[str, Any]:
        """Fetch the main canvas of a file and normalize its node tree.

        1. GET /v1/files/:key to locate the first CANVAS or FRAME
        2. GET /v1/files/:key/nodes?ids={canvasId} for detailed node data
        3. Normalize into {name, lastModified, mainCanvas: {...}}

        Raises:
            FigmaClientError: on HTTP failure, missing canvas or missing node data
        """
        file_data = await self.get_file(file_key)

        main_canvas = find_main_canvas(file_data.get("document") or {})
        if not main_canvas:
            raise FigmaClientError("No main canvas or frame found in the Figma file")
        canvas_id = main_canvas.get("id", "")

        nodes_resp = await self.get_file_nodes(file_key, [canvas_id])
        canvas_data = (nodes_resp.get("nodes") or {}).get(canvas_id)
        if not canvas_data:
            raise FigmaClientError("Failed to retrieve main canvas data")

        snapshot = build_design_snapshot(file_data, canvas_data.get("document") or {})
        logger.info(
            f"fetch_design_snapshot: file={file_key}, canvas={canvas_id}, "
            f"nodes={count_nodes(snapshot['mainCanvas']['children'])}"
        )
        return snapshot
