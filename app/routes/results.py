"""Result reader endpoints.

Each reader loads one record and projects out one field. Stored fields are
JSON envelopes ``{"componentName": ..., "<field>": ...}`` or sentinels;
envelopes are decoded where the response exposes the payload.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from app.dependencies import get_store
from app.repositories.base import ResultStore
from app.schemas import (
    ComponentResponse,
    ErrorResponse,
    FieldsResponse,
    HtmlResponse,
    ResultListResponse,
    ResultRecord,
    ResultsResponse,
)
from converter import settings
from converter.csv_export import fields_to_csv
from converter.envelopes import COMPONENT_KEY, HTML_KEY, parse_envelope
from converter.errors import ConversionError, NotFoundError, ValidationError

logger = logging.getLogger("app.routes.results")

router = APIRouter(prefix="/api", tags=["results"])

_NOT_FOUND = {404: {"model": ErrorResponse}}


async def load_result(store: ResultStore, result_id: str) -> ResultRecord:
    record = await store.get(result_id)
    if record is None:
        logger.info(f"Result {result_id} not found or expired")
        raise NotFoundError("Results not found or expired")
    return record


# ---------------------------------------------------------------------------
# Full record
# ---------------------------------------------------------------------------


@router.get("/results/{result_id}", response_model=ResultsResponse, responses=_NOT_FOUND)
async def get_results(result_id: str, store: ResultStore = Depends(get_store)):
    """Return the stored record as-is (fields may still read "Processing...")."""
    record = await load_result(store, result_id)
    return ResultsResponse(results=record)


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


def _html_response(record: ResultRecord) -> Dict[str, Any]:
    envelope = parse_envelope(record.html)
    if envelope is None:
        return HtmlResponse(html=record.html).model_dump(exclude_none=True)
    return HtmlResponse(
        componentName=envelope.get("componentName"),
        html=envelope.get(HTML_KEY),
    ).model_dump(exclude_none=True)


@router.get("/results/{result_id}/html", responses=_NOT_FOUND)
async def get_result_html(result_id: str, store: ResultStore = Depends(get_store)):
    return _html_response(await load_result(store, result_id))


@router.get("/html/{result_id}", responses=_NOT_FOUND)
async def get_html(result_id: str, store: ResultStore = Depends(get_store)):
    return _html_response(await load_result(store, result_id))


# ---------------------------------------------------------------------------
# Sitecore fields (JSON or CSV)
# ---------------------------------------------------------------------------


async def _sitecore_fields_response(
    store: ResultStore,
    result_id: str,
    format: Optional[str],
):
    record = await load_result(store, result_id)
    if not record.sitecoreFields:
        raise NotFoundError("Sitecore fields not found")

    try:
        fields_data = json.loads(record.sitecoreFields)
    except json.JSONDecodeError:
        logger.warning(f"Result {result_id} holds non-JSON Sitecore fields")
        raise ConversionError("Invalid Sitecore fields format")

    if (format or "").lower() == "csv":
        csv_text = fields_to_csv(fields_data)
        return Response(
            content=csv_text,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="sitecore-fields-{result_id}.csv"'},
        )

    if not isinstance(fields_data, dict):
        fields_data = {"sitecoreFields": fields_data}
    return FieldsResponse(sitecoreFields=fields_data)


@router.get(
    "/results/{result_id}/sitecore-fields",
    response_model=None,
    responses={**_NOT_FOUND, 500: {"model": ErrorResponse}},
)
async def get_result_sitecore_fields(
    result_id: str,
    format: Optional[str] = Query(None, description="json (default) or csv"),
    store: ResultStore = Depends(get_store),
):
    return await _sitecore_fields_response(store, result_id, format)


@router.get(
    "/sitecore-fields/{result_id}",
    response_model=None,
    responses={**_NOT_FOUND, 500: {"model": ErrorResponse}},
)
async def get_sitecore_fields(
    result_id: str,
    format: Optional[str] = Query(None, description="json (default) or csv"),
    store: ResultStore = Depends(get_store),
):
    return await _sitecore_fields_response(store, result_id, format)


@router.get("/sitecore-fields", response_model=None, responses={400: {"model": ErrorResponse}})
async def get_sitecore_fields_by_query(
    id: Optional[str] = Query(None),
    format: Optional[str] = Query(None, description="json (default) or csv"),
    store: ResultStore = Depends(get_store),
):
    if not id:
        raise ValidationError("ID parameter is required")
    return await _sitecore_fields_response(store, id, format)


# ---------------------------------------------------------------------------
# Component
# ---------------------------------------------------------------------------


def _component_response(record: ResultRecord) -> ComponentResponse:
    envelope = parse_envelope(record.component)
    if envelope is None:
        return ComponentResponse(componentData=record.component)
    return ComponentResponse(
        componentName=envelope.get("componentName"),
        componentData=envelope.get(COMPONENT_KEY),
    )


@router.get("/component/{result_id}", response_model=ComponentResponse, responses=_NOT_FOUND)
async def get_component(result_id: str, store: ResultStore = Depends(get_store)):
    return _component_response(await load_result(store, result_id))


@router.get("/component", response_model=ComponentResponse, responses={400: {"model": ErrorResponse}})
async def get_component_by_query(
    id: Optional[str] = Query(None),
    store: ResultStore = Depends(get_store),
):
    if not id:
        raise ValidationError("ID parameter is required")
    return _component_response(await load_result(store, id))


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@router.get("/all", response_model=ResultListResponse, responses={500: {"model": ErrorResponse}})
async def list_results(store: ResultStore = Depends(get_store)):
    """Most recent non-expired results, newest first."""
    try:
        summaries = await store.list()
    except Exception:
        logger.exception("Failed to list results")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error"},
        )

    summaries.sort(key=lambda s: s.timestamp, reverse=True)
    return ResultListResponse(results=summaries[: settings.RESULTS_LIST_LIMIT])
