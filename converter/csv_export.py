"""Flatten a Sitecore field-definition object into CSV text.

The model output is not schema-checked, so the field mapping is located
heuristically:

1. a top-level ``fields`` object
2. ``sitecoreFields.fields`` (``sitecoreFields`` may itself be JSON text)
3. the key/value pairs of ``sitecoreFields`` other than ``componentName``
4. the first ``fields`` object found anywhere in the structure
"""

import json
import logging
from typing import Any, Dict, List, Union

logger = logging.getLogger("converter.csv_export")

CSV_HEADERS = ("fieldName", "type", "value", "description")
NO_FIELDS_MESSAGE = "No fields data available."
CSV_ERROR_MESSAGE = "Error converting data to CSV"


def _field_row(name: str, definition: Any) -> Dict[str, Any]:
    if not isinstance(definition, dict):
        definition = {}
    return {
        "fieldName": name,
        "type": definition.get("type") or "",
        "value": definition.get("value") or "",
        "description": definition.get("description") or "",
    }


def _rows_from_fields(fields: Any) -> List[Dict[str, Any]]:
    if not isinstance(fields, dict):
        return []
    return [_field_row(name, definition) for name, definition in fields.items()]


def _json_type(value: Any) -> str:
    """Type name as JSON sees it; null counts as an object."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


def _scalar_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def _rows_from_pairs(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows = []
    for key, value in data.items():
        if key == "componentName":
            continue
        if isinstance(value, dict) and (
            "type" in value or "value" in value or "description" in value
        ):
            rows.append(_field_row(key, value))
        else:
            rows.append({
                "fieldName": key,
                "type": _json_type(value),
                "value": _scalar_text(value),
                "description": "",
            })
    return rows


def _find_fields(obj: Any) -> List[Dict[str, Any]]:
    """Depth-first search for the first non-empty ``fields`` mapping."""
    if isinstance(obj, dict):
        if isinstance(obj.get("fields"), dict):
            return _rows_from_fields(obj["fields"])
        children = obj.values()
    elif isinstance(obj, list):
        children = obj
    else:
        return []

    for child in children:
        if isinstance(child, (dict, list)):
            found = _find_fields(child)
            if found:
                return found
    return []


def extract_field_rows(data: Any) -> List[Dict[str, Any]]:
    if not isinstance(data, dict):
        return _find_fields(data)

    if isinstance(data.get("fields"), dict):
        return _rows_from_fields(data["fields"])

    if "sitecoreFields" in data and data["sitecoreFields"]:
        nested = data["sitecoreFields"]
        if isinstance(nested, str):
            nested = json.loads(nested)
        if isinstance(nested, dict):
            if isinstance(nested.get("fields"), dict):
                return _rows_from_fields(nested["fields"])
            return _rows_from_pairs(nested)
        return _find_fields(nested)

    return _find_fields(data)


def _escape(value: Any) -> str:
    text = value if isinstance(value, str) else _scalar_text(value)
    escaped = text.replace('"', '""')
    if "," in escaped or "\n" in escaped:
        return f'"{escaped}"'
    return escaped


def fields_to_csv(data: Union[str, Dict[str, Any], Any]) -> str:
    """Render field definitions as ``fieldName,type,value,description`` rows.

    Returns ``NO_FIELDS_MESSAGE`` when nothing field-like is found and
    ``CSV_ERROR_MESSAGE`` when ``data`` is JSON text that cannot be parsed.
    """
    try:
        parsed = json.loads(data) if isinstance(data, str) else data
        rows = extract_field_rows(parsed)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("fields_to_csv: cannot parse field data: %s", e)
        return CSV_ERROR_MESSAGE

    if not rows:
        logger.info("fields_to_csv: no fields found")
        return NO_FIELDS_MESSAGE

    lines = [",".join(CSV_HEADERS)]
    for row in rows:
        lines.append(",".join(_escape(row[header]) for header in CSV_HEADERS))
    logger.info("fields_to_csv: %d field rows", len(rows))
    return "\n".join(lines)
