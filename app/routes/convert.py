"""Conversion endpoint.

POST /api/convert (multipart form) runs the whole pipeline synchronously and
returns the id plus every generated field. Progress is written to the
result store so the results page can poll while the request is in flight.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from app.dependencies import get_figma_factory, get_llm_client, get_store
from app.repositories.base import ResultStore
from app.schemas import ConvertResponse, ErrorResponse
from converter.errors import ConversionError
from converter.integrations.figma_client import FigmaClient
from converter.integrations.llm_client import LLMClient
from converter.pipeline import ConversionPipeline, ConversionRequest

logger = logging.getLogger("app.routes.convert")

router = APIRouter(prefix="/api", tags=["convert"])


def error_response(error: ConversionError) -> JSONResponse:
    body = ErrorResponse(error=error.message, resultId=error.result_id)
    return JSONResponse(
        status_code=error.status_code,
        content=body.model_dump(exclude_none=True),
    )


async def _read_upload(image: Optional[UploadFile]) -> Tuple[Optional[bytes], Optional[str]]:
    """Browsers post an empty part when no file is chosen; treat it as absent."""
    if image is None or not image.filename:
        return None, None
    data = await image.read()
    if not data:
        return None, None
    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        content_type = "image/jpeg"
    return data, content_type


@router.post(
    "/convert",
    response_model=ConvertResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def convert(
    componentName: str = Form(""),
    prompt: str = Form(""),
    figmaUrl: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    store: ResultStore = Depends(get_store),
    llm: Optional[LLMClient] = Depends(get_llm_client),
    figma_factory: Callable[[], FigmaClient] = Depends(get_figma_factory),
):
    """Convert a Figma design or an image into HTML, a JSS component and Sitecore fields."""
    image_bytes, content_type = await _read_upload(image)
    request = ConversionRequest(
        component_name=componentName,
        prompt=prompt,
        figma_url=figmaUrl or None,
        image=image_bytes,
        image_content_type=content_type,
    )

    pipeline = ConversionPipeline(store, llm, figma_factory)
    try:
        outcome = await pipeline.run(request)
    except ConversionError as e:
        logger.warning(f"Conversion failed ({e.status_code}): {e.message}")
        return error_response(e)
    except Exception:
        logger.exception("Unexpected error in convert endpoint")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error"},
        )

    return outcome.to_response()
