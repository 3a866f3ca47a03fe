"""Block-level Markdown composition: headings, code fences, quotes, tables, lists.

Helpers here only format already-converted text or pick out structural child
elements; recursion into content stays in :mod:`mdoutput.extractors.markdown`.
"""

from __future__ import annotations

import re

from bs4 import Tag

from mdoutput import settings

from .nodes import attr, child_elements, leading_int, rtrim, tag_name

_LANG_CLASS_RE = re.compile(r"(?:language|lang|highlight)-(\w+)", re.ASCII)

_TABLE_SECTIONS = frozenset({"thead", "tbody", "tfoot"})

HORIZONTAL_RULE = "\n\n---\n\n"


def heading(level: int, content: str) -> str:
    return f"\n\n{'#' * level} {content}\n\n"


def paragraph(content: str) -> str:
    if not content:
        return ""
    return f"\n\n{content}\n\n"


def caption(content: str) -> str:
    return f"\n\n*{content}*\n\n"


# ---------------------------------------------------------------------------
# Code
# ---------------------------------------------------------------------------

def code_language(code_el: Tag) -> str:
    """Detect a language hint from ``class="language-X"`` (or ``lang-X``, ``highlight-X``)."""
    m = _LANG_CLASS_RE.search(attr(code_el, "class"))
    return m.group(1) if m else ""


def find_code_child(pre: Tag) -> Tag | None:
    for child in child_elements(pre):
        if tag_name(child) == "code":
            return child
    return None


def fence(content: str, language: str = "") -> str:
    return f"\n\n```{language}\n{rtrim(content)}\n```\n\n"


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------

def blockquote(content: str) -> str:
    quoted = "\n".join(f"> {line}" for line in content.split("\n"))
    return f"\n\n{quoted}\n\n"


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

def list_start(list_el: Tag) -> int:
    """Ordered-list counter origin from ``start``; absent or non-numeric -> 1."""
    start = leading_int(attr(list_el, "start"))
    return 1 if start is None else start


def bullet(ordered: bool, counter: int) -> str:
    return f"{counter}. " if ordered else "- "


def indent(depth: int) -> str:
    return settings.LIST_INDENT * depth


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def table_rows(table: Tag) -> list[Tag]:
    """Return ``tr`` elements that belong to *table* itself.

    Direct rows and rows one level inside thead/tbody/tfoot are included;
    rows of tables nested in cells are not.
    """
    rows: list[Tag] = []
    for child in child_elements(table):
        tag = tag_name(child)
        if tag == "tr":
            rows.append(child)
        elif tag in _TABLE_SECTIONS:
            rows.extend(row for row in child_elements(child) if tag_name(row) == "tr")
    return rows


def _format_row(cells: list[str], widths: list[int]) -> str:
    padded = [cell.ljust(width) for cell, width in zip(cells, widths)]
    return "| " + " | ".join(padded) + " |"


def format_table(rows: list[list[str]]) -> str:
    """Render *rows* as a pipe table; the first row is the header."""
    rows = [row for row in rows if row]
    if not rows:
        return ""

    columns = max(len(row) for row in rows)
    rows = [row + [""] * (columns - len(row)) for row in rows]

    # len() counts code points, so multibyte cells line up
    widths = [
        max(settings.MIN_TABLE_COLUMN_WIDTH, *(len(row[i]) for row in rows))
        for i in range(columns)
    ]

    lines = [_format_row(rows[0], widths)]
    lines.append("| " + " | ".join("-" * width for width in widths) + " |")
    lines.extend(_format_row(row, widths) for row in rows[1:])
    return "\n\n" + "\n".join(lines) + "\n\n"
