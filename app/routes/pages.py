"""Server-rendered pages: submission form, results viewer and API reference."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from converter import settings

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def form_page(request: Request):
    return templates.TemplateResponse(request, "form.html", {})


@router.get("/results/{result_id}", response_class=HTMLResponse, include_in_schema=False)
async def results_page(request: Request, result_id: str):
    return templates.TemplateResponse(request, "results.html", {
        "result_id": result_id,
        "poll_interval_ms": int(settings.POLL_INTERVAL_SECONDS * 1000),
        "poll_max_attempts": settings.POLL_MAX_ATTEMPTS,
    })


@router.get("/api-docs", response_class=HTMLResponse, include_in_schema=False)
async def api_docs_page(request: Request):
    return templates.TemplateResponse(request, "api_docs.html", {})
