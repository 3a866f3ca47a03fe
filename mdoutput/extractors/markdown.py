"""Convert HTML to Markdown with a structural tree walk.

Each element is first passed through the noise filter, then routed through a
fixed tag -> handler table.  Tags without a handler are transparent: only
their children are rendered.  JSON-LD found in the owning document is
rendered as a YAML-like frontmatter block in front of the body.

The converter holds nothing but frozen options; traversal state travels in a
:class:`~mdoutput.extractors.nodes.WalkContext`, so one instance can serve
concurrent conversions.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from types import MappingProxyType

from bs4 import BeautifulSoup, Tag
from bs4.element import PageElement

from mdoutput import settings
from mdoutput.items import ConverterOptions

from . import blocks, inline
from .frontmatter import render_frontmatter
from .jsonld import extract_jsonld
from .noise import should_skip
from .nodes import (
    NodeKind,
    WalkContext,
    attr,
    child_elements,
    collapse_whitespace,
    node_kind,
    tag_name,
    text_content,
    trim,
)

logger = logging.getLogger(__name__)

_WHITESPACE_ONLY_LINE_RE = re.compile(r"^[ \t]+$", re.MULTILINE)
_EXCESSIVE_BLANK_LINES_RE = re.compile(r"\n{3,}")
_TAG_RE = re.compile(r"<[^>]*>")

_LIST_TAGS = frozenset({"ul", "ol"})
_CELL_TAGS = frozenset({"td", "th"})


def finalize_markdown(md: str) -> str:
    """Blank out whitespace-only lines, collapse 3+ newlines to 2, trim."""
    md = _WHITESPACE_ONLY_LINE_RE.sub("", md)
    md = _EXCESSIVE_BLANK_LINES_RE.sub("\n\n", md)
    return trim(md)


class HtmlToMarkdown:
    """Structural HTML -> Markdown converter.

    Usage::

        converter = HtmlToMarkdown()
        md = converter.convert("<h1>Hello</h1><p>World</p>")

        # Already parsed?  Skip the second parse:
        soup = BeautifulSoup(page_html, "lxml")
        md = converter.convert_element(soup.find("main"), soup)
    """

    def __init__(self, options: ConverterOptions | None = None) -> None:
        self.options = options or ConverterOptions()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def convert(self, html: str) -> str:
        """Parse the HTML fragment *html* and convert it.

        Falls back to the tag-stripped text when no usable root comes out of
        the parser.
        """
        try:
            soup = BeautifulSoup(f'<div id="{settings.ROOT_ID}">{html}</div>', "lxml")
        except Exception as exc:
            logger.debug("HTML parse failed, returning stripped text: %s", exc)
            return trim(_TAG_RE.sub("", html))

        root = soup.find(id=settings.ROOT_ID)
        if not isinstance(root, Tag):
            logger.debug("Conversion root missing after parse, returning stripped text")
            return trim(soup.get_text())
        return self.convert_element(root, soup)

    def convert_element(self, element: Tag, document: BeautifulSoup | Tag | None = None) -> str:
        """Convert an already-parsed *element*.

        Pass the owning *document* to pick up JSON-LD from anywhere in the
        page (usually ``<head>``), not just inside *element*.
        """
        items = []
        if document is not None and self.options.include_frontmatter:
            items = extract_jsonld(document)
        ctx = WalkContext()
        try:
            raw = self.process_children(element, ctx)
        except RecursionError:
            logger.debug("Recursion limit hit while converting, flattening to text")
            raw = self.flatten_text(element, ctx)
        body = finalize_markdown(raw)
        return render_frontmatter(items) + body

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def process_children(self, node: Tag, ctx: WalkContext) -> str:
        parts: list[str] = []
        for child in node.children:
            parts.append(self._render_node(child, ctx))
        return "".join(parts)

    def _render_node(self, node: PageElement, ctx: WalkContext) -> str:
        kind = node_kind(node)
        if kind is NodeKind.TEXT:
            return collapse_whitespace(str(node), ctx)
        if kind is NodeKind.COMMENT or self._skip(node):
            return ""
        return self.handle_element(node, ctx)

    def handle_element(self, el: Tag, ctx: WalkContext) -> str:
        tag = tag_name(el)
        inner = ctx.descend()
        if inner.depth > self.options.max_depth:
            logger.debug("Nesting deeper than %d at <%s>, flattening to text", self.options.max_depth, tag)
            return self.flatten_text(el, ctx)
        handler = _HANDLERS.get(tag, HtmlToMarkdown._passthrough)
        return handler(self, el, tag, inner)

    def flatten_text(self, el: Tag, ctx: WalkContext) -> str:
        """Plain text of *el* with filtered subtrees left out, walked without recursion."""
        parts: list[str] = []
        stack: list[PageElement] = list(reversed(list(el.children)))
        while stack:
            node = stack.pop()
            kind = node_kind(node)
            if kind is NodeKind.TEXT:
                parts.append(str(node))
            elif kind is NodeKind.ELEMENT and not self._skip(node):
                stack.extend(reversed(list(node.children)))
        return collapse_whitespace("".join(parts), ctx)

    def _skip(self, el: Tag) -> bool:
        return should_skip(el, self.options.skip_attribute)

    def _content(self, el: Tag, ctx: WalkContext) -> str:
        return trim(self.process_children(el, ctx))

    # ------------------------------------------------------------------
    # Inline handlers
    # ------------------------------------------------------------------

    def _passthrough(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return self.process_children(el, ctx)

    def _inline(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return inline.wrap(self._content(el, ctx), settings.INLINE_MARKERS[tag])

    def _underline(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return inline.wrap(self._content(el, ctx), settings.UNDERLINE_MARKER)

    def _html_passthrough(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return inline.wrap_html(self._content(el, ctx), tag)

    def _quotation(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return inline.quotation(self._content(el, ctx))

    def _abbreviation(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return inline.abbreviation(self._content(el, ctx), attr(el, "title"))

    def _time(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return inline.time_value(self._content(el, ctx), attr(el, "datetime"))

    def _link(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return inline.link(self._content(el, ctx), attr(el, "href"), attr(el, "title"))

    def _image(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return inline.image(attr(el, "alt"), attr(el, "src"))

    def _line_break(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return inline.LINE_BREAK

    # ------------------------------------------------------------------
    # Block handlers
    # ------------------------------------------------------------------

    def _heading(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return blocks.heading(int(tag[1]), self._content(el, ctx))

    def _paragraph(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return blocks.paragraph(self._content(el, ctx))

    def _rule(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return blocks.HORIZONTAL_RULE

    def _blockquote(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return blocks.blockquote(self._content(el, ctx))

    def _figcaption(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return blocks.caption(self._content(el, ctx))

    def _list_item(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return self._content(el, ctx) + "\n"

    def _preformatted(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        ctx = ctx.enter_pre()
        code = blocks.find_code_child(el)
        if code is None:
            return blocks.fence(text_content(el, ctx))
        return blocks.fence(text_content(code, ctx), blocks.code_language(code))

    def _list(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        return self._render_list(el, tag == "ol", 0, ctx)

    def _render_list(self, list_el: Tag, ordered: bool, depth: int, ctx: WalkContext) -> str:
        counter = blocks.list_start(list_el)
        pad = blocks.indent(depth)
        output: list[str] = []

        for item in child_elements(list_el):
            if tag_name(item) != "li" or self._skip(item):
                continue
            marker = blocks.bullet(ordered, counter)
            counter += 1

            item_ctx = ctx.descend()
            content: list[str] = []
            nested: list[str] = []
            for child in item.children:
                if isinstance(child, Tag) and tag_name(child) in _LIST_TAGS:
                    if not self._skip(child):
                        nested.append(self._nested_list(child, depth + 1, item_ctx))
                    continue
                content.append(self._render_node(child, item_ctx))

            output.append(f"{pad}{marker}{trim(''.join(content))}\n")
            output.extend(nested)

        rendered = "".join(output)
        return f"\n\n{rendered}\n" if depth == 0 else rendered

    def _nested_list(self, list_el: Tag, depth: int, ctx: WalkContext) -> str:
        inner = ctx.descend()
        if inner.depth > self.options.max_depth:
            logger.debug("Nesting deeper than %d in nested list, flattening to text", self.options.max_depth)
            return self.flatten_text(list_el, ctx)
        return self._render_list(list_el, tag_name(list_el) == "ol", depth, inner)

    def _table(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        rows: list[list[str]] = []
        for tr in blocks.table_rows(el):
            if self._skip(tr):
                continue
            row_ctx = ctx.descend()
            rows.append(
                [
                    self._content(cell, row_ctx.descend())
                    for cell in child_elements(tr)
                    if tag_name(cell) in _CELL_TAGS and not self._skip(cell)
                ],
            )
        return blocks.format_table(rows)

    def _definition_list(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        output = ["\n\n"]
        for child in child_elements(el):
            if self._skip(child):
                continue
            child_tag = tag_name(child)
            if child_tag == "dt":
                output.append(f"**{self._content(child, ctx.descend())}**\n")
            elif child_tag == "dd":
                output.append(f": {self._content(child, ctx.descend())}\n\n")
        return "".join(output)

    def _details(self, el: Tag, tag: str, ctx: WalkContext) -> str:
        summary: str | None = None
        body: list[str] = []
        for child in el.children:
            if (
                summary is None
                and isinstance(child, Tag)
                and tag_name(child) == "summary"
                and not self._skip(child)
            ):
                summary = self._content(child, ctx.descend())
                continue
            body.append(self._render_node(child, ctx))
        return f"\n\n**{summary or ''}**\n\n{trim(''.join(body))}\n\n"


_Handler = Callable[[HtmlToMarkdown, Tag, str, WalkContext], str]

_HANDLERS: Mapping[str, _Handler] = MappingProxyType(
    {
        **{f"h{level}": HtmlToMarkdown._heading for level in range(1, 7)},
        "p": HtmlToMarkdown._paragraph,
        **dict.fromkeys(settings.INLINE_MARKERS, HtmlToMarkdown._inline),
        "u": HtmlToMarkdown._underline,
        "ins": HtmlToMarkdown._underline,
        "sub": HtmlToMarkdown._html_passthrough,
        "sup": HtmlToMarkdown._html_passthrough,
        "q": HtmlToMarkdown._quotation,
        "abbr": HtmlToMarkdown._abbreviation,
        "time": HtmlToMarkdown._time,
        "a": HtmlToMarkdown._link,
        "img": HtmlToMarkdown._image,
        "br": HtmlToMarkdown._line_break,
        "hr": HtmlToMarkdown._rule,
        "blockquote": HtmlToMarkdown._blockquote,
        "pre": HtmlToMarkdown._preformatted,
        "ul": HtmlToMarkdown._list,
        "ol": HtmlToMarkdown._list,
        "li": HtmlToMarkdown._list_item,
        "table": HtmlToMarkdown._table,
        "figcaption": HtmlToMarkdown._figcaption,
        "dl": HtmlToMarkdown._definition_list,
        "details": HtmlToMarkdown._details,
    },
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def html_to_markdown(html: str, options: ConverterOptions | None = None) -> str:
    """Convert the HTML string *html* to Markdown (with JSON-LD frontmatter)."""
    return HtmlToMarkdown(options).convert(html)


def element_to_markdown(
    element: Tag,
    document: BeautifulSoup | Tag | None = None,
    options: ConverterOptions | None = None,
) -> str:
    """Convert a parsed *element*; JSON-LD is read from *document* when given."""
    return HtmlToMarkdown(options).convert_element(element, document)
