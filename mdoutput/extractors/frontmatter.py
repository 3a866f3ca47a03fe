"""Render JSON-LD records as a YAML-like frontmatter block.

The output is deliberately simple: block style only, two-space indentation,
and scalars quoted only when they contain YAML indicator characters.
"""

from __future__ import annotations

import re
from typing import Any

from mdoutput import settings

_NEEDS_QUOTES_RE = re.compile(r"[:#\[\]{}&*!|>'\"%@`,\n]")

# Integral floats up to this magnitude print without a fractional part
_MAX_INTEGRAL_FLOAT = 1e15


def yaml_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer() and abs(value) < _MAX_INTEGRAL_FLOAT:
            return str(int(value))
        return repr(value)
    text = str(value)
    if text == "" or _NEEDS_QUOTES_RE.search(text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    return text


def _is_sequence(data: dict | list) -> bool:
    """Lists, and dicts keyed exactly "0".."n-1" in order, render as YAML sequences."""
    if isinstance(data, list):
        return True
    return bool(data) and list(data) == [str(i) for i in range(len(data))]


def _render(data: Any, level: int, lines: list[str]) -> None:
    pad = settings.FRONTMATTER_INDENT * level
    if not isinstance(data, dict | list):
        lines.append(pad + yaml_scalar(data))
        return

    if _is_sequence(data):
        values = data if isinstance(data, list) else list(data.values())
        for item in values:
            if isinstance(item, dict | list):
                lines.append(pad + "-")
                _render(item, level + 1, lines)
            else:
                lines.append(f"{pad}- {yaml_scalar(item)}")
        return

    for key, value in data.items():
        if key in settings.FRONTMATTER_RESERVED_KEYS:
            continue
        if isinstance(value, dict | list):
            lines.append(f"{pad}{key}:")
            _render(value, level + 1, lines)
        else:
            lines.append(f"{pad}{key}: {yaml_scalar(value)}")


def render_frontmatter(items: list[Any]) -> str:
    """Return a ``---`` delimited block for *items*, or ``""`` when there are none."""
    if not items:
        return ""
    lines = ["---"]
    for index, item in enumerate(items):
        if index > 0:
            lines.append("")
        _render(item, 0, lines)
    lines.extend(["---", "", ""])
    return "\n".join(lines)
