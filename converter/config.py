"""Converter configuration constants: single source of truth for all env vars."""

import os

# Server binding: used by entrypoint / uvicorn
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# CORS: comma-separated origins
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

# OpenAI: chat completions for HTML, component and field generation
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "")

# Figma REST API: Personal Access Token for design file access
FIGMA_TOKEN = os.getenv("FIGMA_TOKEN", "") or os.getenv("FIGMA_ACCESS_TOKEN", "")

# Result storage backend: "memory" | "filesystem" | "s3"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "filesystem").strip().lower()

# Filesystem backend: one JSON file per result
RESULTS_DIR = os.getenv("RESULTS_DIR", os.path.join(os.getcwd(), "storage"))

# S3-compatible backend (AWS S3, R2, MinIO): objects at {S3_PREFIX}/{id}.json
S3_BUCKET = os.getenv("S3_BUCKET", "")
S3_PREFIX = os.getenv("S3_PREFIX", "results")
S3_REGION = os.getenv("S3_REGION", "")
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL", "")
S3_ACCESS_KEY_ID = os.getenv("S3_ACCESS_KEY_ID", "") or os.getenv("AWS_ACCESS_KEY_ID", "")
S3_SECRET_ACCESS_KEY = os.getenv("S3_SECRET_ACCESS_KEY", "") or os.getenv("AWS_SECRET_ACCESS_KEY", "")
S3_FORCE_PATH_STYLE = os.getenv("S3_FORCE_PATH_STYLE", "false").lower() in ("true", "1", "yes")
