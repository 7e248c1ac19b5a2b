"""Figma utility functions: design tree normalization for prompt context.

Reduces the Figma REST node tree to the fields the HTML generation prompt
needs: identity, visibility, bounding box and basic visual style. Everything
else (constraints, plugin data, vector paths, ...) is dropped.
"""

import json
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Style properties copied verbatim from each Figma node
_STYLE_KEYS = ("backgroundColor", "fills", "strokes", "effects", "cornerRadius")

# Bounding box keys copied into layout
_LAYOUT_KEYS = ("width", "height", "x", "y")


def normalize_node(node: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize one Figma node (and its subtree)."""
    bbox = node.get("absoluteBoundingBox") or {}
    if not isinstance(bbox, dict):
        bbox = {}

    normalized: Dict[str, Any] = {
        "id": node.get("id"),
        "name": node.get("name"),
        "type": node.get("type"),
        "visible": node.get("visible") is not False,
        "layout": {key: bbox.get(key) for key in _LAYOUT_KEYS},
        "style": {key: node.get(key) for key in _STYLE_KEYS},
    }

    children = node.get("children")
    if isinstance(children, list) and children:
        normalized["children"] = normalize_nodes(children)

    return normalized


def normalize_nodes(nodes: Optional[List[Any]]) -> List[Dict[str, Any]]:
    """Normalize a list of Figma nodes recursively.

    Total over well-formed input: missing fields become None, leaves carry
    no 'children' key, and non-dict entries are skipped.
    """
    if not nodes:
        return []
    return [normalize_node(node) for node in nodes if isinstance(node, dict)]


def find_main_canvas(document: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Return the first CANVAS or FRAME child of a file document."""
    for child in (document or {}).get("children") or []:
        if isinstance(child, dict) and child.get("type") in ("CANVAS", "FRAME"):
            return child
    return None


def build_design_snapshot(
    file_data: Dict[str, Any],
    canvas_doc: Dict[str, Any],
) -> Dict[str, Any]:
    """Assemble the design snapshot consumed by the HTML prompt.

    Args:
        file_data: GET /v1/files/:key response (name, lastModified)
        canvas_doc: 'document' of the main canvas from GET /v1/files/:key/nodes
    """
    return {
        "name": file_data.get("name"),
        "lastModified": file_data.get("lastModified"),
        "mainCanvas": {
            "name": canvas_doc.get("name") or "Main Canvas",
            "type": canvas_doc.get("type") or "CANVAS",
            "children": normalize_nodes(canvas_doc.get("children") or []),
        },
    }


def describe_snapshot(snapshot: Dict[str, Any]) -> str:
    """Render a design snapshot as the 'Design Details' prompt block."""
    canvas = snapshot.get("mainCanvas") or {}
    structure = json.dumps(canvas.get("children") or [], indent=2, ensure_ascii=False)
    return (
        f"Design Name: {snapshot.get('name')}\n"
        f"Last Modified: {snapshot.get('lastModified')}\n"
        f"Main Canvas: {canvas.get('name')}\n"
        f"Structure:\n{structure}\n"
    )


def count_nodes(nodes: List[Dict[str, Any]]) -> int:
    """Count nodes in a normalized tree (for logging)."""
    return sum(1 + count_nodes(node.get("children", [])) for node in nodes)
