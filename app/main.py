"""FastAPI Application Entry Point.

Configures the app, lifespan, CORS, static files and includes all route modules.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from converter import config
from converter.errors import ConversionError
from converter.logging_config import get_api_logger, get_converter_logger

from .repositories import build_result_store

logger = get_api_logger()
get_converter_logger()

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the result store and its sweep task for the process lifetime."""
    store = build_result_store()
    store.start_sweeper()
    app.state.store = store
    app.state.llm = None

    # Warn about missing credentials
    if not config.OPENAI_API_KEY:
        logger.warning(
            "OPENAI_API_KEY not set: /api/convert will return 500 until it is configured."
        )
    if not config.FIGMA_TOKEN:
        logger.warning(
            "FIGMA_TOKEN not set: conversions from a Figma URL will be rejected; "
            "image uploads still work."
        )

    yield

    llm = getattr(app.state, "llm", None)
    if llm is not None:
        await llm.close()
    await store.close()


app = FastAPI(title="Figma to Sitecore Converter API", version="1.0.0", lifespan=lifespan)

# CORS configuration: configurable via CORS_ORIGINS env var (comma-separated)
CORS_ORIGINS = [o.strip() for o in config.CORS_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConversionError)
async def conversion_error_handler(request: Request, exc: ConversionError):
    from .routes.convert import error_response

    return error_response(exc)


app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Include routers
from .routes.convert import router as convert_router  # noqa: E402
from .routes.results import router as results_router  # noqa: E402
from .routes.pages import router as pages_router  # noqa: E402

app.include_router(convert_router)
app.include_router(results_router)
app.include_router(pages_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "ok"}


def run() -> None:
    """Console entrypoint: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("app.main:app", host=config.API_HOST, port=config.API_PORT)
