"""Project settings for mdoutput.

Static lookup tables are built once at import time and never mutated, so any
number of conversions can share them across threads.
"""

from __future__ import annotations

from types import MappingProxyType

# ---------------------------------------------------------------------------
# Inline formatting
# ---------------------------------------------------------------------------
# Tag -> Markdown marker placed on both sides of the content
INLINE_MARKERS = MappingProxyType(
    {
        "strong": "**",
        "b": "**",
        "em": "*",
        "i": "*",
        "del": "~~",
        "s": "~~",
        "code": "`",
        "kbd": "`",
        "samp": "`",
        "mark": "==",
        "cite": "*",
        "var": "*",
        "dfn": "*",
    },
)

# Markdown has no underline; <u>/<ins> are rendered as emphasis
UNDERLINE_MARKER = "*"

# ---------------------------------------------------------------------------
# Noise filtering
# ---------------------------------------------------------------------------
SKIP_ATTRIBUTE = "data-md-skip"

SKIP_TAGS: frozenset[str] = frozenset(
    {
        "button", "form", "input", "select", "textarea", "label",
        "nav", "script", "style", "noscript", "svg", "iframe",
        "video", "audio", "canvas", "map", "object", "embed",
    },
)

SKIP_ROLES: frozenset[str] = frozenset(
    {
        "navigation", "banner", "complementary", "contentinfo",
        "search", "form", "toolbar", "menubar", "menu", "dialog",
    },
)

# Class substrings typical for UI widgets (substring match, lower-cased)
SKIP_CLASS_FRAGMENTS: tuple[str, ...] = (
    "btn", "button", "cta", "countdown", "timer", "cookie",
    "popup", "modal", "overlay", "widget", "social-share",
    "breadcrumb", "pagination", "sidebar",
)

ICON_SRC_MARKERS: tuple[str, ...] = ("/icon", "icon.")

# Images with a declared width or height below this are treated as icons
ICON_MAX_DIMENSION = 50

# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------
# Element nesting depth beyond which subtrees are flattened to plain text
MAX_DEPTH = 100

# Largest accepted max_depth; keeps the walk inside the default recursion limit
MAX_DEPTH_LIMIT = 150

LIST_INDENT = "    "

MIN_TABLE_COLUMN_WIDTH = 3

# Wrapper used when converting a bare HTML string
ROOT_ID = "__md_root__"

# ---------------------------------------------------------------------------
# JSON-LD / frontmatter
# ---------------------------------------------------------------------------
JSONLD_SCRIPT_TYPE = "application/ld+json"
JSONLD_MAX_NESTING = 64

FRONTMATTER_RESERVED_KEYS: frozenset[str] = frozenset({"@context", "@id", "@graph"})
FRONTMATTER_INDENT = "  "

# ---------------------------------------------------------------------------
# Content negotiation
# ---------------------------------------------------------------------------
QUERY_PARAM = "v"
QUERY_VALUE = "md"
ACCEPT_TOKEN = "text/markdown"

MARKDOWN_CONTENT_TYPE = "text/markdown; charset=utf-8"
HTML_CONTENT_TYPES: frozenset[str] = frozenset({"text/html", "application/xhtml+xml"})

# Main-content selectors, tried in order
CONTENT_SELECTORS: tuple[str, ...] = (
    "main",
    "article",
    'div[id="content"]',
    "div.content",
    'div[id="main"]',
    'div[id="main-content"]',
    "div.main-content",
    "body",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(name)s: %(message)s"
