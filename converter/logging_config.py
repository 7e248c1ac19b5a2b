"""Logging setup for the converter service.

Two roots are configured: ``app`` (routes, result store) writing api.log and
``converter`` (pipeline, Figma/OpenAI clients, poller) writing converter.log.
Module loggers such as ``converter.pipeline`` propagate into their root.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

# LOG_DIR overrides the default <repo>/logs, e.g. a mounted volume in Docker
LOG_DIR = Path(os.getenv("LOG_DIR", str(Path(__file__).parent.parent / "logs")))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

FILE_FORMAT = "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
CONSOLE_FORMAT = "%(asctime)s [%(name)s] %(message)s"

_configured_loggers: set[str] = set()


def setup_logger(name: str, filename: str, level: Optional[str] = None) -> logging.Logger:
    """Attach a file handler and a console handler to ``name`` once.

    Args:
        name: Root logger name ('app' or 'converter')
        filename: File under LOG_DIR (e.g. 'converter.log')
        level: Level name; defaults to LOG_LEVEL

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    if name in _configured_loggers:
        return logger

    logger.setLevel(level or LOG_LEVEL)
    logger.propagate = False

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handlers = [
        (logging.FileHandler(LOG_DIR / filename, encoding="utf-8"), FILE_FORMAT),
        (logging.StreamHandler(), CONSOLE_FORMAT),
    ]
    for handler, fmt in handlers:
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)

    _configured_loggers.add(name)
    return logger


def get_api_logger() -> logging.Logger:
    """FastAPI side: routes, dependencies and result store backends."""
    return setup_logger("app", "api.log")


def get_converter_logger() -> logging.Logger:
    return setup_logger("converter", "converter.log")
