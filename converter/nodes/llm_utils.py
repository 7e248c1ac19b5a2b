"""Shared LLM utilities: cleanup of model output before it is stored.

Model answers arrive wrapped in markdown fences, padded with blank lines and
sometimes prefixed with chatty preambles; these helpers strip all of that.
"""

import re
from typing import Optional

_OPEN_FENCE_RE = re.compile(r"```(?:html|tsx|typescript|json|javascript)?\n?")
_CLOSE_FENCE_RE = re.compile(r"```\n?")
_BLANK_LINE_RE = re.compile(r"^\s*[\r\n]", re.MULTILINE)

_COMPONENT_PREAMBLE_RE = re.compile(
    r"^Here's how you can achieve it using NextJS, TypeScript, and JSS:\njsx\n"
)
# The explanation runs to the end and holds no code-like lines
_COMPONENT_EPILOGUE_RE = re.compile(r"\nIn this code[^\n]*(?:\n[^\n;{}<>=]*)*$")


def clean_generated_code(code: Optional[str]) -> str:
    """Remove code fences and empty lines from a model answer."""
    if not code:
        return ""
    code = _OPEN_FENCE_RE.sub("", code)
    code = _CLOSE_FENCE_RE.sub("", code)
    code = _BLANK_LINE_RE.sub("", code)
    return code.strip()


def strip_component_chatter(code: str) -> str:
    """Drop the known preamble and the trailing 'In this code...' explanation."""
    code = _COMPONENT_PREAMBLE_RE.sub("", code)
    return _COMPONENT_EPILOGUE_RE.sub("", code)
