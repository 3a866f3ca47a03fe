"""Schema.org JSON-LD extraction from ``<script type="application/ld+json">`` blocks."""

from __future__ import annotations

import json
import logging
from typing import Any

from bs4 import BeautifulSoup, Tag

from mdoutput import settings

from .nodes import TRIM_CHARS, attr

logger = logging.getLogger(__name__)


def _nesting_depth(value: Any, limit: int) -> int:
    """Return the container nesting depth of *value*, stopping once *limit* is exceeded."""
    depth = 0
    level: list[Any] = [value]
    while level and depth <= limit:
        containers = [v for v in level if isinstance(v, dict | list)]
        if not containers:
            break
        depth += 1
        level = []
        for container in containers:
            level.extend(container.values() if isinstance(container, dict) else container)
    return depth


def _reject_constant(name: str) -> None:
    # NaN and Infinity are not JSON
    raise ValueError(f"invalid JSON constant {name!r}")


def _decode(raw: str) -> dict | list | None:
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError, TypeError) as exc:
        logger.debug("Skipping undecodable JSON-LD block: %s", exc)
        return None
    if not isinstance(data, dict | list):
        logger.debug("Skipping JSON-LD block with scalar top level: %r", data)
        return None
    if _nesting_depth(data, settings.JSONLD_MAX_NESTING) > settings.JSONLD_MAX_NESTING:
        logger.debug("Skipping JSON-LD block nested deeper than %d", settings.JSONLD_MAX_NESTING)
        return None
    return data


def _records(data: dict | list) -> list[dict | list]:
    graph = data.get("@graph") if isinstance(data, dict) else None
    if isinstance(graph, dict):
        graph = list(graph.values())
    if isinstance(graph, list):
        return [node for node in graph if isinstance(node, dict | list)]
    return [data]


def extract_jsonld(document: BeautifulSoup | Tag) -> list[dict | list]:
    """Collect every JSON-LD record in *document*, in encounter order.

    Each ``@graph`` member becomes its own record.  Blocks that fail to decode
    or decode to a scalar are dropped individually; nothing is raised.
    """
    items: list[dict | list] = []
    for script in document.find_all("script"):
        if not isinstance(script, Tag):
            continue
        if attr(script, "type").lower() != settings.JSONLD_SCRIPT_TYPE:
            continue
        raw = (script.string or "").strip(TRIM_CHARS)
        if not raw:
            continue
        data = _decode(raw)
        if data is None:
            continue
        items.extend(_records(data))
    return items
