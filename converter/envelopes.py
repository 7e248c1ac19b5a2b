"""Stored field values: sentinels and the {componentName, <field>} envelope.

Each of the three stored fields is one of:
  - the placeholder "Processing..." (stage not finished yet)
  - JSON text of {"componentName": ..., "<payload key>": ...}
  - an envelope whose payload is an "Error: ..." sentinel
"""

import json
from typing import Any, Dict, Optional

PROCESSING = "Processing..."

# Payload key inside each field's envelope
HTML_KEY = "html"
FIELDS_KEY = "sitecoreFields"
COMPONENT_KEY = "componentData"

HTML_ERROR = "Error: Failed to generate HTML"
HTML_FAILED_DOWNSTREAM = "Error: HTML generation failed"
COMPONENT_ERROR = "Error: Failed to generate component"
FIELDS_ERROR = "Error: Failed to generate Sitecore fields"


def make_envelope(component_name: str, key: str, payload: Any) -> str:
    return json.dumps({"componentName": component_name, key: payload}, ensure_ascii=False)


def parse_envelope(value: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode a stored envelope; None for sentinels and non-JSON text."""
    if not value or value == PROCESSING:
        return None
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return None
    return parsed if isinstance(parsed, dict) else None
