"""Read-only view of a BeautifulSoup tree as Element / Text / Comment nodes.

The converter never mutates the tree it is handed.  All traversal state lives
in :class:`WalkContext`, which is passed by value through every call.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from typing import NamedTuple

from bs4 import Tag
from bs4.element import NavigableString, PageElement, PreformattedString

# Characters removed by trim(): the ASCII set only, so &nbsp; survives as content
TRIM_CHARS = " \t\n\r\0\x0b"

_SPACE_RUN_RE = re.compile(r"[ \t]+")
_LEADING_INT_RE = re.compile(r"^[ \t\n\r\x0b\x0c]*([+-]?\d+)")


class NodeKind(enum.Enum):
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"


class WalkContext(NamedTuple):
    """Per-call traversal state.

    pre_depth -- number of enclosing ``<pre>`` elements (0 = collapse whitespace)
    depth     -- element nesting depth below the conversion root
    """

    pre_depth: int = 0
    depth: int = 0

    def enter_pre(self) -> WalkContext:
        return self._replace(pre_depth=self.pre_depth + 1)

    def descend(self) -> WalkContext:
        return self._replace(depth=self.depth + 1)


def node_kind(node: PageElement) -> NodeKind:
    """Classify *node*.  Comments, CDATA, doctypes and PIs count as comments."""
    if isinstance(node, Tag):
        return NodeKind.ELEMENT
    if isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
        return NodeKind.TEXT
    return NodeKind.COMMENT


def tag_name(el: Tag) -> str:
    return (el.name or "").lower()


def attr(el: Tag, name: str) -> str:
    """Return attribute *name* of *el* as a string, ``""`` when absent.

    Multi-valued attributes (``class``, ``rel``) come back space-joined.
    """
    val = el.get(name.lower())
    if val is None:
        return ""
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def has_attr(el: Tag, name: str) -> bool:
    return el.has_attr(name.lower())


def child_elements(el: Tag) -> Iterator[Tag]:
    """Yield the direct element children of *el* in document order."""
    for child in el.children:
        if isinstance(child, Tag):
            yield child


def collapse_whitespace(text: str, ctx: WalkContext) -> str:
    if ctx.pre_depth > 0:
        return text
    return _SPACE_RUN_RE.sub(" ", text)


def text_content(el: Tag, ctx: WalkContext) -> str:
    """Concatenated text of every descendant text node (comments excluded)."""
    return collapse_whitespace(el.get_text(), ctx)


def trim(text: str) -> str:
    return text.strip(TRIM_CHARS)


def rtrim(text: str) -> str:
    return text.rstrip(TRIM_CHARS)


def leading_int(value: str) -> int | None:
    """Parse the integer prefix of *value* (``"32px"`` -> 32), None if there is none."""
    m = _LEADING_INT_RE.match(value)
    if not m:
        return None
    return int(m.group(1))
