"""Figma URL parsing: file key and node id extraction.

Accepts the URL shapes users paste into the form:
    https://www.figma.com/file/{fileKey}/{name}
    https://www.figma.com/design/{fileKey}/{name}?node-id={nodeId}
    https://www.figma.com/proto/{fileKey}/{name}
    {fileKey}                       (bare 22+ character token)
optionally prefixed with '@' (as copied from chat mentions).
"""

import re
from typing import Optional
from urllib.parse import unquote

# Ordered: the first pattern that captures wins
_FILE_KEY_PATTERNS = [
    re.compile(r"figma\.com/file/([a-zA-Z0-9]+)(?:/|$)"),
    re.compile(r"figma\.com/design/([a-zA-Z0-9]+)(?:/|$)"),
    re.compile(r"figma\.com/proto/([a-zA-Z0-9]+)(?:/|$)"),
    re.compile(r"^([a-zA-Z0-9]{22,})$"),
]

_BARE_KEY_RE = re.compile(r"[a-zA-Z0-9]{22,}")
_NODE_ID_RE = re.compile(r"[?&]node-id=([^&#]+)")


def extract_file_key(url: str) -> Optional[str]:
    """Return the Figma file key embedded in ``url``, or None.

    None is a validation outcome, not an error: callers respond with 400.
    """
    if not url:
        return None
    text = url.strip()
    if text.startswith("@"):
        text = text[1:]

    for pattern in _FILE_KEY_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)

    # Fall back to any long alphanumeric run anywhere in the input
    possible_key = _BARE_KEY_RE.search(text)
    if possible_key:
        return possible_key.group(0)

    return None


def extract_node_id(url: str) -> Optional[str]:
    """Return the ``node-id`` query parameter in API form, or None.

    URL uses '16650-538', API uses '16650:538'.
    """
    if not url:
        return None
    match = _NODE_ID_RE.search(url)
    if not match:
        return None
    return unquote(match.group(1)).replace("-", ":")
